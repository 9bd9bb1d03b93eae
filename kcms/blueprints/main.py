"""Root view: routes the signed-in profile to the screen of its role."""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify

from kcms.auth import unauthenticated_response, unauthorized_response

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def index():
    ctx = g.session_ctx
    if not ctx.is_authenticated:
        return unauthenticated_response()

    if ctx.is_admin:
        from kcms.blueprints.admin.routes import overview_payload
        return jsonify({'view': 'admin', **overview_payload()})

    if ctx.is_coach:
        from kcms.blueprints.coach.routes import dashboard_payload
        return jsonify({'view': 'coach', **dashboard_payload(ctx)})

    current_app.logger.warning(f"Profile {ctx.identity_id} has no usable role")
    return unauthorized_response()


__all__ = ['main_bp']
