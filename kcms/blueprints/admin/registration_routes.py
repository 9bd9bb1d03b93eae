"""Admin routes for reviewing and exporting registrations."""

from __future__ import annotations

from collections import Counter

from flask import Blueprint, current_app, jsonify, request

from kcms.auth import admin_required
from kcms.blueprints.common.downloads import export_response
from kcms.blueprints.common.serializers import serialize_period, serialize_profile, serialize_registration
from kcms.extensions import db
from kcms.labels import PERIOD_KIND_LABELS_AR, message
from kcms.models import Profile, ProfileRole
from kcms.services.periods import parse_kind, period_model
from kcms.services.registrations import list_registrations

registration_admin_bp = Blueprint('registration_admin', __name__, url_prefix='/admin/registrations')


def _filters() -> tuple[str, str]:
    return request.args.get('period_id', ''), request.args.get('coach_id', '')


@registration_admin_bp.route('/<kind>')
@admin_required
def list_kind_registrations(kind):
    """List registrations of one kind with filtering."""
    period_kind = parse_kind(kind)
    if period_kind is None:
        return jsonify({'error': message('unknown_kind')}), 404

    period_id, coach_id = _filters()
    registrations = list_registrations(period_kind, period_id=period_id, coach_id=coach_id, newest_first=True)

    # Filter dropdowns
    model = period_model(period_kind)
    periods = model.query.order_by(model.start_date.desc()).all()
    coaches = Profile.query.filter(Profile.role == ProfileRole.COACH.value).order_by(Profile.full_name).all()

    stats = {
        'total': len(registrations),
        'coaches': len({r.coach_id for r in registrations}),
        'by_period': dict(Counter(r.period_id for r in registrations)),
        'by_belt': dict(Counter(r.last_belt.value if r.last_belt else None for r in registrations)),
    }

    return jsonify({
        'kind': period_kind.value,
        'kind_label': PERIOD_KIND_LABELS_AR[period_kind],
        'items': [serialize_registration(r) for r in registrations],
        'periods': [serialize_period(p) for p in periods],
        'coaches': [serialize_profile(c, with_organization=False) for c in coaches],
        'filters': {'period_id': period_id or None, 'coach_id': coach_id or None},
        'stats': stats,
    })


@registration_admin_bp.route('/<kind>/export')
@admin_required
def export_kind_registrations(kind):
    period_kind = parse_kind(kind)
    if period_kind is None:
        return jsonify({'error': message('unknown_kind')}), 404

    period_id, coach_id = _filters()
    registrations = list_registrations(period_kind, period_id=period_id, coach_id=coach_id)

    title = f"{current_app.config.get('ORGANIZATION_TITLE', '')} - {PERIOD_KIND_LABELS_AR[period_kind]}"
    metadata = [('نوع التسجيل', PERIOD_KIND_LABELS_AR[period_kind])]
    period = db.session.get(period_model(period_kind), period_id) if period_id else None
    if period is not None:
        metadata.append(('الفترة', period.name))

    return export_response(
        registrations,
        request.args.get('format', 'xlsx'),
        title=title,
        download_name=current_app.config.get('ORGANIZATION_TITLE'),
        prefix=f"تسجيلات_{period_kind.value}",
        metadata=metadata,
    )


__all__ = ['registration_admin_bp']
