"""File download responses for registration exports."""

from __future__ import annotations

import io
from datetime import datetime

from flask import current_app, jsonify, send_file

from kcms.labels import message
from kcms.models import Organization, RegistrationBase
from kcms.services.export import (
    EXPORT_FORMATS,
    build_export_table,
    export_filename,
    write_docx,
    write_xlsx,
)


def _related(registrations: list[RegistrationBase], attribute: str) -> dict:
    related = {}
    for registration in registrations:
        obj = getattr(registration, attribute)
        if obj is not None:
            related[obj.id] = obj
    return related


def export_table_for(
    registrations: list[RegistrationBase],
    generated_at: datetime | None = None,
    summary_extras: list[tuple[str, object]] | None = None,
) -> dict:
    """Build the export table from registrations loaded with their period, coach and player."""
    players = _related(registrations, 'player')
    coaches = _related(registrations, 'coach')
    organization_ids = {
        obj.organization_id
        for obj in list(players.values()) + list(coaches.values())
        if obj.organization_id
    }
    organizations = (
        Organization.query.filter(Organization.id.in_(organization_ids)).all()
        if organization_ids else []
    )
    return build_export_table(
        registrations,
        periods=_related(registrations, 'period'),
        coaches=coaches,
        players=players,
        organizations=organizations,
        generated_at=generated_at,
        summary_extras=summary_extras,
    )


def export_response(
    registrations: list[RegistrationBase],
    file_format: str,
    title: str,
    download_name: str,
    prefix: str,
    metadata: list[tuple[str, object]] | None = None,
    summary_extras: list[tuple[str, object]] | None = None,
):
    """Render ``registrations`` as an attachment, or a JSON error.

    ``metadata`` heads the DOCX document; ``summary_extras`` go into the
    summary block of both formats.
    """
    file_format = (file_format or 'xlsx').lower()
    if file_format not in EXPORT_FORMATS:
        return jsonify({'error': message('unknown_format')}), 400
    if not registrations:
        return jsonify({'error': message('nothing_to_export')}), 404

    table = export_table_for(registrations, summary_extras=summary_extras)
    if file_format == 'xlsx':
        content = write_xlsx(table)
    else:
        notes = [current_app.config.get('ORGANIZATION_TITLE', '')]
        content = write_docx(table, title, metadata=metadata, footer_notes=[n for n in notes if n])

    filename = export_filename(prefix, download_name, extension=file_format)
    current_app.logger.info(f"Exported {table['total']} registrations to {filename}")
    return send_file(
        io.BytesIO(content),
        mimetype=EXPORT_FORMATS[file_format],
        as_attachment=True,
        download_name=filename,
    )


__all__ = ['export_table_for', 'export_response']
