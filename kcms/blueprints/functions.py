"""Server-side functions callable by the admin client."""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from kcms.auth import admin_required
from kcms.blueprints.common.forms import json_object
from kcms.labels import message
from kcms.services.provisioning import create_coach

functions_bp = Blueprint('functions', __name__, url_prefix='/functions/v1')

COACH_FIELDS = ('email', 'password', 'full_name', 'organization_id')


@functions_bp.route('/create-coach', methods=['POST'])
@admin_required
def create_coach_function():
    """Provision a coach login and profile.

    Body: {email, password, full_name, organization_id}
    Returns {success: true} or {error: string}.
    """
    data = json_object()
    values = {field: (data.get(field) or '') for field in COACH_FIELDS}
    if not all(str(value).strip() for value in values.values()):
        return jsonify({'error': message('missing_fields')}), 400

    coach, error = create_coach(
        str(values['email']),
        str(values['password']),
        str(values['full_name']),
        str(values['organization_id']),
        actor=g.session_ctx.profile,
    )
    if error:
        status = 404 if error == message('not_found') else 400
        return jsonify({'error': error}), status

    return jsonify({'success': True, 'id': coach.id})


__all__ = ['functions_bp']
