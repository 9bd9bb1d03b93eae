"""Coach dashboard: own players, active periods and registration toggles."""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from kcms.auth import coach_required
from kcms.blueprints.common.downloads import export_response
from kcms.blueprints.common.forms import json_object
from kcms.blueprints.common.serializers import (
    serialize_organization,
    serialize_period,
    serialize_player,
    serialize_profile,
    serialize_registration,
)
from kcms.extensions import db
from kcms.labels import BELT_LABELS_AR, NOT_SPECIFIED, PERIOD_KIND_LABELS_AR, message
from kcms.models import Belt, Organization, PeriodKind, Player
from kcms.services.periods import MultipleActivePeriodsError, find_active_period, find_active_periods, parse_kind
from kcms.services.registrations import (
    list_registrations,
    register_player,
    registered_player_ids,
    unregister_player,
)
from kcms.services.session import SessionContext

coach_bp = Blueprint('coach', __name__)


def _filter_players(players: list[Player], search: str) -> list[Player]:
    search = (search or '').strip().lower()
    if not search:
        return players
    belts = {belt for belt in Belt if search in belt.value or search in BELT_LABELS_AR[belt]}
    return [p for p in players if search in p.full_name.lower() or p.belt in belts]


def dashboard_payload(ctx: SessionContext, search: str = '') -> dict:
    """Everything the coach dashboard shows, re-read from the database."""
    profile = ctx.profile
    organization = db.session.get(Organization, profile.organization_id) if profile.organization_id else None
    active, errors = find_active_periods()

    registrations = {}
    registered = {}
    for kind, period in active.items():
        if period is None:
            continue
        rows = list_registrations(kind, period_id=period.id, coach_id=ctx.identity_id)
        registrations[kind.value] = [serialize_registration(r) for r in rows]
        registered[kind] = registered_player_ids(rows)

    players = _filter_players(ctx.players, search)
    items = []
    for player in players:
        flags = {kind.value: player.id in registered[kind] for kind in registered}
        items.append(serialize_player(player, registered=flags))

    return {
        'coach': serialize_profile(profile, with_organization=False),
        'organization': serialize_organization(organization),
        'organization_name': organization.name if organization else NOT_SPECIFIED,
        'players': items,
        'player_count': len(ctx.players),
        'active_periods': {kind.value: serialize_period(period) for kind, period in active.items()},
        'period_errors': {kind.value: error for kind, error in errors.items()},
        'registrations': registrations,
    }


def _ambiguous_response():
    return jsonify({'error': message('ambiguous_active_period')}), 409


def _registrations_payload(ctx: SessionContext, kind: PeriodKind) -> dict:
    period = find_active_period(kind)
    rows = list_registrations(kind, period_id=period.id, coach_id=ctx.identity_id) if period else []
    return {
        'period': serialize_period(period),
        'items': [serialize_registration(r) for r in rows],
        'registered_player_ids': sorted(registered_player_ids(rows)),
    }


_ERROR_STATUS = {
    'no_active_period': 409,
    'already_registered': 409,
    'not_found': 404,
    'not_registered': 404,
}


@coach_bp.route('/')
@coach_required
def dashboard():
    return jsonify(dashboard_payload(g.session_ctx, request.args.get('q', '')))


@coach_bp.route('/registrations/<kind>', methods=['GET'])
@coach_required
def list_active_registrations(kind):
    period_kind = parse_kind(kind)
    if period_kind is None:
        return jsonify({'error': message('unknown_kind')}), 404
    try:
        return jsonify(_registrations_payload(g.session_ctx, period_kind))
    except MultipleActivePeriodsError:
        return _ambiguous_response()


@coach_bp.route('/registrations/<kind>', methods=['POST'])
@coach_required
def register(kind):
    period_kind = parse_kind(kind)
    if period_kind is None:
        return jsonify({'error': message('unknown_kind')}), 404

    data = json_object() if request.is_json else request.form
    player_id = data.get('player_id')
    if not player_id:
        return jsonify({'error': message('missing_fields')}), 400

    ctx = g.session_ctx
    try:
        _, error = register_player(ctx, period_kind, player_id)
        if error:
            return jsonify({'error': message(error)}), _ERROR_STATUS.get(error, 500)
        payload = _registrations_payload(ctx, period_kind)
    except MultipleActivePeriodsError:
        return _ambiguous_response()

    return jsonify({'message': message('registered'), **payload}), 201


@coach_bp.route('/registrations/<kind>/<player_id>', methods=['DELETE'])
@coach_required
def unregister(kind, player_id):
    period_kind = parse_kind(kind)
    if period_kind is None:
        return jsonify({'error': message('unknown_kind')}), 404

    ctx = g.session_ctx
    try:
        _, error = unregister_player(ctx, period_kind, player_id)
        if error:
            return jsonify({'error': message(error)}), _ERROR_STATUS.get(error, 500)
        payload = _registrations_payload(ctx, period_kind)
    except MultipleActivePeriodsError:
        return _ambiguous_response()

    return jsonify({'message': message('unregistered'), **payload})


@coach_bp.route('/registrations/<kind>/export')
@coach_required
def export_registrations(kind):
    """Download the coach's registrations in the active period of ``kind``."""
    period_kind = parse_kind(kind)
    if period_kind is None:
        return jsonify({'error': message('unknown_kind')}), 404

    ctx = g.session_ctx
    try:
        period = find_active_period(period_kind)
    except MultipleActivePeriodsError:
        return _ambiguous_response()
    if period is None:
        return jsonify({'error': message('no_active_period')}), 409

    registrations = list_registrations(period_kind, period_id=period.id, coach_id=ctx.identity_id)
    organization = (
        db.session.get(Organization, ctx.profile.organization_id)
        if ctx.profile.organization_id else None
    )
    coach_summary = [
        ('اسم المدرب', ctx.profile.full_name),
        ('المؤسسة', organization.name if organization else NOT_SPECIFIED),
    ]
    metadata = coach_summary + [
        (PERIOD_KIND_LABELS_AR[period_kind], f"{period.start_date.isoformat()} إلى {period.end_date.isoformat()}"),
    ]

    return export_response(
        registrations,
        request.args.get('format', 'xlsx'),
        title=f"{current_app.config.get('ORGANIZATION_TITLE', '')} - {period.name}",
        download_name=ctx.profile.full_name,
        prefix='لاعبين_مسجلين',
        metadata=metadata,
        summary_extras=coach_summary,
    )


__all__ = ['coach_bp', 'dashboard_payload']
