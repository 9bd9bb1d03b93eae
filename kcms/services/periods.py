"""Registration periods: lookup of the active period and period CRUD."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy.exc import MultipleResultsFound

from kcms.labels import message
from kcms.models import PERIOD_MODELS, REGISTRATION_MODELS, PeriodBase, PeriodKind
from kcms.services.crud import CRUDService


class MultipleActivePeriodsError(LookupError):
    """More than one period of the same kind contains the requested day."""

    def __init__(self, kind: PeriodKind, day: date):
        super().__init__(f"More than one active {kind.value} period on {day.isoformat()}")
        self.kind = kind
        self.day = day


def parse_kind(value: str | PeriodKind | None) -> PeriodKind | None:
    if isinstance(value, PeriodKind):
        return value
    try:
        return PeriodKind(str(value))
    except ValueError:
        return None


def period_model(kind: PeriodKind):
    return PERIOD_MODELS[kind]


def registration_model(kind: PeriodKind):
    return REGISTRATION_MODELS[kind]


def coerce_day(value: date | str | None) -> date:
    """Accept a date, an ISO date string, or None for today."""
    if value is None:
        return date.today()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def find_active_period(kind: PeriodKind, today: date | str | None = None) -> PeriodBase | None:
    """
    Return the period of ``kind`` whose [start_date, end_date] contains ``today``.

    Both boundaries are inclusive. Zero matches return None; more than one
    match raises MultipleActivePeriodsError instead of picking one.
    """
    day = coerce_day(today)
    model = period_model(kind)
    query = model.query.filter(model.start_date <= day, model.end_date >= day)
    try:
        return query.one_or_none()
    except MultipleResultsFound as e:
        raise MultipleActivePeriodsError(kind, day) from e


def find_active_periods(today: date | str | None = None) -> tuple[dict[PeriodKind, PeriodBase | None], dict[PeriodKind, str]]:
    """
    Look up the active period of every kind.

    Returns:
        (active_by_kind, errors_by_kind) where ambiguous kinds map to None
        in the first dict and carry an error message in the second.
    """
    active: dict[PeriodKind, PeriodBase | None] = {}
    errors: dict[PeriodKind, str] = {}
    for kind in PeriodKind:
        try:
            active[kind] = find_active_period(kind, today)
        except MultipleActivePeriodsError:
            active[kind] = None
            errors[kind] = message('ambiguous_active_period')
    return active, errors


class PeriodService(CRUDService):
    """CRUD for one kind of registration period."""

    def __init__(self, kind: PeriodKind):
        super().__init__(period_model(kind))
        self.kind = kind

    def _validate_create(self, data: dict[str, Any]) -> str | None:
        if not data.get('name') or not data.get('start_date') or not data.get('end_date'):
            return message('missing_fields')
        if data['start_date'] > data['end_date']:
            return message('invalid_period_dates')
        return None

    def _validate_update(self, instance: PeriodBase, data: dict[str, Any]) -> str | None:
        start = data.get('start_date', instance.start_date)
        end = data.get('end_date', instance.end_date)
        if start > end:
            return message('invalid_period_dates')
        return None


__all__ = [
    'MultipleActivePeriodsError',
    'PeriodService',
    'coerce_day',
    'find_active_period',
    'find_active_periods',
    'parse_kind',
    'period_model',
    'registration_model',
]
