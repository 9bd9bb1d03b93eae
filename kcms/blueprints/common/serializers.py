"""JSON shapes of the models returned by the views."""

from __future__ import annotations

from kcms.labels import belt_label, organization_type_label
from kcms.models import Organization, PeriodBase, Player, Profile, RegistrationBase


def _iso(value):
    return value.isoformat() if value else None


def _value(enum_value):
    return enum_value.value if hasattr(enum_value, 'value') else enum_value


def serialize_organization(org: Organization | None) -> dict | None:
    if org is None:
        return None
    return {
        'id': org.id,
        'name': org.name,
        'type': _value(org.type),
        'type_label': organization_type_label(org.type),
        'created_at': _iso(org.created_at),
    }


def serialize_profile(profile: Profile, with_organization: bool = True) -> dict:
    data = {
        'id': profile.id,
        'email': profile.email,
        'full_name': profile.full_name,
        'role': profile.role,
        'organization_id': profile.organization_id,
        'created_at': _iso(profile.created_at),
    }
    if with_organization:
        data['organization'] = serialize_organization(profile.organization)
    return data


def serialize_player(player: Player, registered: dict | None = None, with_relations: bool = False) -> dict:
    data = {
        'id': player.id,
        'full_name': player.full_name,
        'belt': _value(player.belt),
        'belt_label': belt_label(player.belt),
        'birth_date': _iso(player.birth_date),
        'file_number': player.file_number,
        'coach_id': player.coach_id,
        'organization_id': player.organization_id,
        'created_at': _iso(player.created_at),
    }
    if registered is not None:
        data['registered'] = registered
    if with_relations:
        data['coach'] = serialize_profile(player.coach, with_organization=False) if player.coach else None
        data['organization'] = serialize_organization(player.organization)
    return data


def serialize_period(period: PeriodBase | None) -> dict | None:
    if period is None:
        return None
    return {
        'id': period.id,
        'kind': period.kind.value,
        'name': period.name,
        'start_date': _iso(period.start_date),
        'end_date': _iso(period.end_date),
        'created_at': _iso(period.created_at),
    }


def serialize_registration(registration: RegistrationBase) -> dict:
    coach = registration.coach
    return {
        'id': registration.id,
        'kind': registration.kind.value,
        'period_id': registration.period_id,
        'player_id': registration.player_id,
        'coach_id': registration.coach_id,
        'coach_name': coach.full_name if coach else None,
        'player_name': registration.player_name,
        'birth_date': _iso(registration.birth_date),
        'last_belt': _value(registration.last_belt),
        'last_belt_label': belt_label(registration.last_belt),
        'created_at': _iso(registration.created_at),
    }


__all__ = [
    'serialize_organization',
    'serialize_profile',
    'serialize_player',
    'serialize_period',
    'serialize_registration',
]
