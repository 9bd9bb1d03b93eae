"""Authentication helpers shared across blueprints."""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar, cast

from flask import g, jsonify

from kcms.labels import message
from kcms.models import ProfileRole

F = TypeVar('F', bound=Callable[..., object])


def unauthenticated_response():
    return jsonify({'error': message('login_required'), 'view': 'login'}), 401


def unauthorized_response():
    return jsonify({'error': message('unauthorized'), 'view': 'unauthorized'}), 403


def role_required(*required_roles: ProfileRole):
    """Decorator factory: the session context must hold one of ``required_roles``.

    The check happens before the view body runs, so a rejected request
    issues no data queries.
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            ctx = getattr(g, 'session_ctx', None)
            if ctx is None or not ctx.is_authenticated:
                return unauthenticated_response()

            if ctx.role not in required_roles:
                return unauthorized_response()

            return func(*args, **kwargs)
        return cast(F, wrapper)
    return decorator


def admin_required(func: F) -> F:
    """Decorator to ensure the current profile is an admin."""
    return role_required(ProfileRole.ADMIN)(func)


def coach_required(func: F) -> F:
    """Decorator to ensure the current profile is a coach."""
    return role_required(ProfileRole.COACH)(func)


__all__ = [
    'role_required',
    'admin_required',
    'coach_required',
    'unauthenticated_response',
    'unauthorized_response',
]
