"""Per-request session/role context.

The context is opened at the start of every request from the Flask-Login
identity, handed to views through ``g.session_ctx`` and torn down when the
request ends. Sign-in and sign-out signals refresh it in place, so a view
that logs a user in sees the new role immediately.
"""

from __future__ import annotations

from typing import Any

from flask import current_app, g, has_request_context
from flask_login import current_user, user_logged_in, user_logged_out
from sqlalchemy.exc import SQLAlchemyError

from kcms.extensions import db
from kcms.models import Player, Profile, ProfileRole

IDLE = "idle"
LOADING = "loading"
LOADED = "loaded"
ERROR = "error"


class SessionContext:
    """Identity, role and visible players of the signed-in profile."""

    def __init__(self) -> None:
        self.identity_id: str | None = None
        self.profile: Profile | None = None
        self.role: ProfileRole | None = None
        self.state = IDLE
        self._players: list[Player] | None = None

    @classmethod
    def open(cls, user: Any = None) -> "SessionContext":
        ctx = cls()
        ctx.refresh(user)
        return ctx

    @property
    def is_authenticated(self) -> bool:
        return self.identity_id is not None

    @property
    def is_admin(self) -> bool:
        return self.role is ProfileRole.ADMIN

    @property
    def is_coach(self) -> bool:
        return self.role is ProfileRole.COACH

    @property
    def is_authorized(self) -> bool:
        return self.role is not None

    def refresh(self, user: Any = None) -> None:
        """Re-read the profile of ``user`` and reset the cached player list."""
        self.clear()
        if user is None or not getattr(user, "is_authenticated", False):
            self.state = LOADED
            return

        self.state = LOADING
        try:
            profile = user if isinstance(user, Profile) else db.session.get(Profile, user.get_id())
            if profile is None:
                raise LookupError(f"No profile for identity {user.get_id()}")
            self.identity_id = profile.id
            self.profile = profile
            self.role = ProfileRole.parse(profile.role)
            self.state = LOADED
        except (SQLAlchemyError, LookupError) as e:
            current_app.logger.error(f"Error fetching user role: {e}")
            self._fail()

    @property
    def players(self) -> list[Player]:
        """Players visible to this identity, fetched once per context."""
        if self._players is None:
            self._players = self._fetch_players()
        return self._players

    def _fetch_players(self) -> list[Player]:
        if self.role is None:
            return []
        try:
            query = Player.query
            if self.is_coach:
                query = query.filter(Player.coach_id == self.identity_id).order_by(Player.full_name)
            else:
                query = query.order_by(Player.created_at.desc())
            return query.all()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error fetching players: {e}")
            self._fail()
            return []

    def _fail(self) -> None:
        identity_id = self.identity_id
        self.clear()
        self.identity_id = identity_id
        self.state = ERROR

    def clear(self) -> None:
        self.identity_id = None
        self.profile = None
        self.role = None
        self._players = None

    def close(self) -> None:
        self.clear()
        self.state = IDLE

    def to_dict(self, include_players: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "user": None,
            "role": self.role.value if self.role else None,
            "state": self.state,
        }
        if self.profile is not None:
            data["user"] = {
                "id": self.profile.id,
                "email": self.profile.email,
                "full_name": self.profile.full_name,
                "organization_id": self.profile.organization_id,
            }
        if include_players:
            data["players"] = [
                {"id": p.id, "full_name": p.full_name, "coach_id": p.coach_id,
                 "created_at": p.created_at.isoformat() if p.created_at else None}
                for p in self.players
            ]
        return data


def get_session_context() -> SessionContext | None:
    if not has_request_context():
        return None
    return getattr(g, "session_ctx", None)


def init_session_context(app) -> None:
    """Register the context lifecycle hooks with the Flask app."""

    @app.before_request
    def _open_session_context() -> None:
        g.session_ctx = SessionContext.open(current_user._get_current_object())

    @app.teardown_request
    def _close_session_context(exception=None) -> None:
        ctx = g.pop("session_ctx", None)
        if ctx is not None:
            ctx.close()

    @user_logged_in.connect_via(app)
    def _on_login(sender, user, **extra) -> None:
        ctx = get_session_context()
        if ctx is not None:
            ctx.refresh(user)

    @user_logged_out.connect_via(app)
    def _on_logout(sender, user, **extra) -> None:
        ctx = get_session_context()
        if ctx is not None:
            ctx.clear()
            ctx.state = LOADED


__all__ = [
    "SessionContext",
    "get_session_context",
    "init_session_context",
    "IDLE",
    "LOADING",
    "LOADED",
    "ERROR",
]
