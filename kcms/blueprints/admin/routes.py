"""Admin CRUD screens: organizations, coaches, players and registration periods.

Every mutation answers with a fresh re-query of the affected list, so the
client never has to patch its copy by hand.
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request
from sqlalchemy import or_
from sqlalchemy.orm import joinedload

from kcms.auth import admin_required
from kcms.blueprints.common.access import scoped_query
from kcms.blueprints.common.forms import bind_form, request_flag
from kcms.blueprints.common.serializers import (
    serialize_organization,
    serialize_period,
    serialize_player,
    serialize_profile,
)
from kcms.forms.admin import CoachForm, OrganizationForm, PeriodForm, PlayerForm
from kcms.labels import BELT_LABELS_AR, message
from kcms.models import Belt, Organization, PeriodKind, Player, Profile, ProfileRole
from kcms.services.crud import CRUDService
from kcms.services.periods import PeriodService, find_active_periods, parse_kind, period_model
from kcms.services.provisioning import create_coach

admin_bp = Blueprint('admin', __name__)

organization_service = CRUDService(Organization)
coach_service = CRUDService(Profile)
player_service = CRUDService(Player)


def _error_status(error: str) -> int:
    if error == message('not_found'):
        return 404
    if error in (message('already_exists'), message('email_taken')):
        return 409
    return 400


def _error_response(error: str):
    return jsonify({'error': error}), _error_status(error)


def _form_error_response(form):
    return jsonify({'error': message('missing_fields'), 'errors': form.errors}), 400


def _confirm_required_response():
    return jsonify({'error': message('confirm_delete'), 'confirm_required': True}), 400


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------

def overview_payload() -> dict:
    """Entity counts and the active period of every kind."""
    active, errors = find_active_periods()
    period_counts = {kind.value: period_model(kind).query.count() for kind in PeriodKind}
    return {
        'stats': {
            'organizations': Organization.query.count(),
            'coaches': Profile.query.filter(Profile.role == ProfileRole.COACH.value).count(),
            'players': Player.query.count(),
            'periods': period_counts,
        },
        'active_periods': {kind.value: serialize_period(period) for kind, period in active.items()},
        'period_errors': {kind.value: error for kind, error in errors.items()},
    }


@admin_bp.route('/')
@admin_required
def overview():
    return jsonify(overview_payload())


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

def _organization_items() -> list[dict]:
    return [serialize_organization(org) for org in organization_service.list_all()]


@admin_bp.route('/organizations', methods=['GET'])
@admin_required
def list_organizations():
    return jsonify({'items': _organization_items()})


@admin_bp.route('/organizations', methods=['POST'])
@admin_required
def create_organization():
    form = bind_form(OrganizationForm)
    if not form.validate():
        return _form_error_response(form)

    org, error = organization_service.create(form.to_data(), user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'item': serialize_organization(org), 'items': _organization_items()}), 201


@admin_bp.route('/organizations/<org_id>', methods=['PUT', 'PATCH'])
@admin_required
def update_organization(org_id):
    form = bind_form(OrganizationForm)
    if not form.validate():
        return _form_error_response(form)

    _, error = organization_service.update(org_id, form.to_data(), user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'items': _organization_items()})


@admin_bp.route('/organizations/<org_id>', methods=['DELETE'])
@admin_required
def delete_organization(org_id):
    if not request_flag('confirm'):
        return _confirm_required_response()

    _, error = organization_service.delete(org_id, user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'items': _organization_items()})


# ---------------------------------------------------------------------------
# Coaches
# ---------------------------------------------------------------------------

def _coach_items() -> list[dict]:
    coaches = coach_service.list_all(
        filters={'role': ProfileRole.COACH.value},
        options=(joinedload(Profile.organization),),
    )
    return [serialize_profile(c) for c in coaches]


def _get_coach(coach_id: str) -> Profile | None:
    return scoped_query(Profile).filter(
        Profile.id == coach_id,
        Profile.role == ProfileRole.COACH.value,
    ).first()


@admin_bp.route('/coaches', methods=['GET'])
@admin_required
def list_coaches():
    return jsonify({'items': _coach_items()})


@admin_bp.route('/coaches', methods=['POST'])
@admin_required
def create_coach_profile():
    form = bind_form(CoachForm)
    if not form.validate():
        return _form_error_response(form)

    coach, error = create_coach(
        form.email.data,
        form.password.data,
        form.full_name.data,
        form.organization_id.data,
        actor=g.session_ctx.profile,
    )
    if error:
        return _error_response(error)
    return jsonify({'item': serialize_profile(coach), 'items': _coach_items()}), 201


@admin_bp.route('/coaches/<coach_id>', methods=['PUT', 'PATCH'])
@admin_required
def update_coach(coach_id):
    if _get_coach(coach_id) is None:
        return _error_response(message('not_found'))

    form = bind_form(CoachForm)
    if not form.validate():
        return _form_error_response(form)

    # Login credentials are not editable from here
    _, error = coach_service.update(coach_id, form.to_data(), user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'items': _coach_items()})


@admin_bp.route('/coaches/<coach_id>', methods=['DELETE'])
@admin_required
def delete_coach(coach_id):
    if not request_flag('confirm'):
        return _confirm_required_response()
    if _get_coach(coach_id) is None:
        return _error_response(message('not_found'))

    _, error = coach_service.delete(coach_id, user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'items': _coach_items()})


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------

def _matching_belts(term: str) -> list[Belt]:
    term = term.lower()
    return [belt for belt in Belt if term in belt.value or term in BELT_LABELS_AR[belt]]


def _player_items(args=None) -> list[dict]:
    args = args if args is not None else {}
    query = scoped_query(Player).options(
        joinedload(Player.coach),
        joinedload(Player.organization),
    )

    coach_id = args.get('coach_id', '')
    if coach_id:
        query = query.filter(Player.coach_id == coach_id)

    organization_id = args.get('organization_id', '')
    if organization_id:
        query = query.filter(Player.organization_id == organization_id)

    search = (args.get('q', '') or '').strip()
    if search:
        conditions = [Player.full_name.ilike(f"%{search}%")]
        belts = _matching_belts(search)
        if belts:
            conditions.append(Player.belt.in_(belts))
        query = query.filter(or_(*conditions))

    players = query.order_by(Player.created_at.desc()).all()
    return [serialize_player(p, with_relations=True) for p in players]


@admin_bp.route('/players', methods=['GET'])
@admin_required
def list_players():
    return jsonify({'items': _player_items(request.args)})


@admin_bp.route('/players', methods=['POST'])
@admin_required
def create_player():
    form = bind_form(PlayerForm)
    if not form.validate():
        return _form_error_response(form)

    player, error = player_service.create(form.to_data(), user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'item': serialize_player(player), 'items': _player_items()}), 201


@admin_bp.route('/players/<player_id>', methods=['PUT', 'PATCH'])
@admin_required
def update_player(player_id):
    form = bind_form(PlayerForm)
    if not form.validate():
        return _form_error_response(form)

    _, error = player_service.update(player_id, form.to_data(), user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'items': _player_items()})


@admin_bp.route('/players/<player_id>', methods=['DELETE'])
@admin_required
def delete_player(player_id):
    if not request_flag('confirm'):
        return _confirm_required_response()

    _, error = player_service.delete(player_id, user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'items': _player_items()})


# ---------------------------------------------------------------------------
# Registration periods
# ---------------------------------------------------------------------------

def _period_service(kind_value: str) -> PeriodService | None:
    kind = parse_kind(kind_value)
    return PeriodService(kind) if kind else None


def _period_items(service: PeriodService) -> list[dict]:
    return [serialize_period(p) for p in service.list_all()]


def _unknown_kind_response():
    return jsonify({'error': message('unknown_kind')}), 404


@admin_bp.route('/periods/<kind>', methods=['GET'])
@admin_required
def list_periods(kind):
    service = _period_service(kind)
    if service is None:
        return _unknown_kind_response()
    return jsonify({'items': _period_items(service)})


@admin_bp.route('/periods/<kind>', methods=['POST'])
@admin_required
def create_period(kind):
    service = _period_service(kind)
    if service is None:
        return _unknown_kind_response()

    form = bind_form(PeriodForm)
    if not form.validate():
        return _form_error_response(form)

    period, error = service.create(form.to_data(), user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'item': serialize_period(period), 'items': _period_items(service)}), 201


@admin_bp.route('/periods/<kind>/<period_id>', methods=['PUT', 'PATCH'])
@admin_required
def update_period(kind, period_id):
    service = _period_service(kind)
    if service is None:
        return _unknown_kind_response()

    form = bind_form(PeriodForm)
    if not form.validate():
        return _form_error_response(form)

    _, error = service.update(period_id, form.to_data(), user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'items': _period_items(service)})


@admin_bp.route('/periods/<kind>/<period_id>', methods=['DELETE'])
@admin_required
def delete_period(kind, period_id):
    service = _period_service(kind)
    if service is None:
        return _unknown_kind_response()
    if not request_flag('confirm'):
        return _confirm_required_response()

    # Registrations of the period are kept and keep pointing at it
    _, error = service.delete(period_id, user=g.session_ctx.profile)
    if error:
        return _error_response(error)
    return jsonify({'items': _period_items(service)})


__all__ = ['admin_bp', 'overview_payload']
