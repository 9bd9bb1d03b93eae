"""Row-level access policy applied to every table operation."""

from __future__ import annotations

from itertools import chain
from typing import Type, TypeVar

from flask import g, has_request_context
from sqlalchemy import false
from sqlalchemy.orm import Query

from kcms.extensions import db
from kcms.models import AuditLog, Organization, PeriodBase, Profile, RegistrationBase
from kcms.services.session import SessionContext

Model = TypeVar("Model", bound=db.Model)

# Tables every signed-in role may read in full
SHARED_READ_MODELS = (Organization, PeriodBase)


def current_context() -> SessionContext:
    ctx = getattr(g, "session_ctx", None) if has_request_context() else None
    if ctx is None:
        raise RuntimeError("Session context has not been opened")
    return ctx


def scoped_query(model: Type[Model], ctx: SessionContext | None = None) -> Query:
    """Return a query for ``model`` restricted to the rows the current role may read.

    Admins read everything. Coaches read their own profile, rows whose
    ``coach_id`` is their identity, and the shared organization/period
    tables. Any other role reads nothing.
    """

    ctx = ctx or current_context()
    query = model.query
    if ctx.is_admin:
        return query
    if ctx.is_coach:
        if model is Profile:
            return query.filter(Profile.id == ctx.identity_id)
        if hasattr(model, "coach_id"):
            return query.filter(model.coach_id == ctx.identity_id)
        if issubclass(model, SHARED_READ_MODELS):
            return query
    return query.filter(false())


def can_write(ctx: SessionContext, obj, operation: str) -> bool:
    """Write policy: admins write anything, coaches only insert/delete their own registrations."""

    if isinstance(obj, AuditLog):
        return ctx.is_authenticated
    if ctx.is_admin:
        return True
    if ctx.is_coach and isinstance(obj, RegistrationBase):
        return operation in ("insert", "delete") and obj.coach_id == ctx.identity_id
    return False


@db.event.listens_for(db.session, "before_flush")
def _enforce_write_policy(session, flush_context, instances) -> None:
    """Block writes the current role is not allowed to perform."""

    if not has_request_context():
        return

    ctx = getattr(g, "session_ctx", None)
    if ctx is None:
        return

    pending = chain(
        ((obj, "insert") for obj in session.new),
        ((obj, "update") for obj in session.dirty if session.is_modified(obj)),
        ((obj, "delete") for obj in session.deleted),
    )
    for obj, operation in pending:
        if not can_write(ctx, obj, operation):
            role = ctx.role.value if ctx.role else "anonymous"
            raise PermissionError(
                f"{operation} on {type(obj).__tablename__} blocked for role {role}"
            )


__all__ = [
    "current_context",
    "scoped_query",
    "can_write",
]
