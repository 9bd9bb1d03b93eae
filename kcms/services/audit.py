"""Audit logging for administrative and registration events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flask import current_app, has_request_context, request
from sqlalchemy.exc import SQLAlchemyError

from kcms.extensions import db
from kcms.models import AuditLog

if TYPE_CHECKING:
    from kcms.models import Profile


def log_action(
    actor: Profile | None,
    action: str,
    entity_type: str,
    entity_id: str | None = None,
    metadata: dict[str, Any] | None = None
) -> None:
    """
    Record an action in the audit log.

    Args:
        actor: Profile who performed the action (None for CLI/system actions)
        action: Action performed (e.g., "players_created", "registration_deleted")
        entity_type: Table of the entity affected
        entity_id: ID of entity affected
        metadata: Additional metadata
    """
    try:
        meta = dict(metadata or {})
        if has_request_context():
            meta['ip_address'] = request.remote_addr

        audit_entry = AuditLog(
            actor_id=actor.id if actor is not None else None,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            meta=meta
        )

        db.session.add(audit_entry)
        db.session.commit()

    except (SQLAlchemyError, PermissionError) as e:
        # Don't fail the request if audit logging fails
        db.session.rollback()
        current_app.logger.error(f"Failed to log action {action}: {e}")


__all__ = ["log_action"]
