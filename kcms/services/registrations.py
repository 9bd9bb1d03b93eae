"""Registering players into the active period of a kind."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from kcms.blueprints.common.access import scoped_query
from kcms.extensions import db
from kcms.models import PeriodKind, Player, RegistrationBase
from kcms.services.audit import log_action
from kcms.services.periods import find_active_period, registration_model
from kcms.services.session import SessionContext


def list_registrations(
    kind: PeriodKind,
    period_id: str | None = None,
    coach_id: str | None = None,
    newest_first: bool = False,
) -> list[RegistrationBase]:
    """Registrations of ``kind`` visible to the current role, optionally filtered."""
    model = registration_model(kind)
    query = scoped_query(model).options(
        joinedload(model.period),
        joinedload(model.coach),
        joinedload(model.player),
    )
    if period_id:
        query = query.filter(model.period_id == period_id)
    if coach_id:
        query = query.filter(model.coach_id == coach_id)
    order = model.created_at.desc() if newest_first else model.created_at.asc()
    return query.order_by(order, model.player_name).all()


def register_player(
    ctx: SessionContext,
    kind: PeriodKind,
    player_id: str,
    today: date | str | None = None,
) -> tuple[RegistrationBase | None, str | None]:
    """
    Register one of the acting coach's players into the active period.

    The row snapshots the player's current name, birth date and belt.

    Returns:
        (registration, error_key) where error_key is a labels.MESSAGES key

    Raises:
        MultipleActivePeriodsError: more than one period of ``kind`` is active
    """
    period = find_active_period(kind, today)
    if period is None:
        return None, 'no_active_period'

    player = scoped_query(Player).filter(Player.id == player_id).first()
    if player is None:
        return None, 'not_found'

    model = registration_model(kind)
    registration = model(
        period_id=period.id,
        player_id=player.id,
        coach_id=ctx.identity_id,
        player_name=player.full_name,
        birth_date=player.birth_date,
        last_belt=player.belt,
    )
    try:
        db.session.add(registration)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return None, 'already_registered'
    except (SQLAlchemyError, PermissionError) as e:
        db.session.rollback()
        current_app.logger.error(f"Error registering player {player_id}: {e}")
        return None, 'register_failed'

    log_action(
        ctx.profile,
        f"{model.__tablename__}_created",
        model.__tablename__,
        registration.id,
        metadata={'period_id': period.id, 'player_id': player.id},
    )
    return registration, None


def unregister_player(
    ctx: SessionContext,
    kind: PeriodKind,
    player_id: str,
    today: date | str | None = None,
) -> tuple[int, str | None]:
    """
    Delete the acting coach's registration of ``player_id`` in the active period.

    Returns:
        (deleted_count, error_key)

    Raises:
        MultipleActivePeriodsError: more than one period of ``kind`` is active
    """
    period = find_active_period(kind, today)
    if period is None:
        return 0, 'no_active_period'

    model = registration_model(kind)
    try:
        matches = scoped_query(model).filter_by(
            period_id=period.id,
            player_id=player_id,
            coach_id=ctx.identity_id,
        ).all()
        if not matches:
            return 0, 'not_registered'
        for registration in matches:
            db.session.delete(registration)
        db.session.commit()
    except (SQLAlchemyError, PermissionError) as e:
        db.session.rollback()
        current_app.logger.error(f"Error unregistering player {player_id}: {e}")
        return 0, 'unregister_failed'

    log_action(
        ctx.profile,
        f"{model.__tablename__}_deleted",
        model.__tablename__,
        metadata={'period_id': period.id, 'player_id': player_id, 'count': len(matches)},
    )
    return len(matches), None


def registered_player_ids(registrations: Iterable[RegistrationBase]) -> set[str]:
    return {registration.player_id for registration in registrations}


__all__ = [
    'list_registrations',
    'register_player',
    'unregister_player',
    'registered_player_ids',
]
