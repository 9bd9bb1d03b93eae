from __future__ import annotations

import uuid
from datetime import datetime, date
from enum import Enum

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SqlEnum,
    JSON,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship
from sqlalchemy.sql import func

from kcms.extensions import db, bcrypt

JSONType = JSON().with_variant(JSONB, 'postgresql')


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class TimestampedBase(db.Model):
    """Abstract base providing id/created/updated columns."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class ProfileRole(Enum):
    ADMIN = "admin"
    COACH = "coach"

    @classmethod
    def parse(cls, value) -> "ProfileRole | None":
        """Return the role for a stored value, or None when it is not a known role."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return None


class OrganizationType(Enum):
    CLUB = "club"
    YOUTH_CENTER = "youth_center"


class Belt(Enum):
    WHITE = "white"
    YELLOW = "yellow"
    ORANGE = "orange"
    GREEN = "green"
    BLUE = "blue"
    BROWN = "brown"
    BLACK = "black"


class PeriodKind(Enum):
    EXAM = "exam"
    SECONDARY = "secondary"
    TOURNAMENT = "tournament"


class Organization(TimestampedBase):
    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[OrganizationType] = mapped_column(
        SqlEnum(OrganizationType, name="organization_type", native_enum=False,
                values_callable=_enum_values),
        nullable=False,
        default=OrganizationType.CLUB,
    )


class Profile(TimestampedBase):
    """Login identity and profile of an admin or a coach."""

    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Stored as plain text: rows with a role outside ProfileRole are possible
    # and are treated as unauthorized.
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=ProfileRole.COACH.value)
    organization_id: Mapped[str | None] = mapped_column(String(36), index=True)

    organization: Mapped[Organization | None] = relationship(
        primaryjoin="foreign(Profile.organization_id) == Organization.id",
        viewonly=True,
    )

    def set_password(self, password: str) -> None:
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_active(self) -> bool:  # Flask-Login compatibility
        return True

    @property
    def is_anonymous(self) -> bool:
        return False

    def get_id(self) -> str:
        return self.id


class Player(TimestampedBase):
    __tablename__ = "players"

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    belt: Mapped[Belt] = mapped_column(
        SqlEnum(Belt, name="belt", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=Belt.WHITE,
    )
    birth_date: Mapped[date | None] = mapped_column(Date)
    file_number: Mapped[int | None] = mapped_column(SmallInteger)
    coach_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    organization_id: Mapped[str | None] = mapped_column(String(36), index=True)

    coach: Mapped[Profile | None] = relationship(
        primaryjoin="foreign(Player.coach_id) == Profile.id",
        viewonly=True,
    )
    organization: Mapped[Organization | None] = relationship(
        primaryjoin="foreign(Player.organization_id) == Organization.id",
        viewonly=True,
    )


class PeriodBase(TimestampedBase):
    """Shared shape of the three registration period tables."""

    __abstract__ = True

    kind = None

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)


class ExamPeriod(PeriodBase):
    __tablename__ = "exam_periods"
    kind = PeriodKind.EXAM


class SecondaryRegistrationPeriod(PeriodBase):
    __tablename__ = "secondary_registration_periods"
    kind = PeriodKind.SECONDARY


class TournamentPeriod(PeriodBase):
    __tablename__ = "tournament_periods"
    kind = PeriodKind.TOURNAMENT


class RegistrationBase(TimestampedBase):
    """A player enrolled by a coach into a period, with a snapshot of the player."""

    __abstract__ = True

    kind = None
    period_model = None

    @declared_attr
    def __table_args__(cls):
        return (
            UniqueConstraint(
                "period_id", "player_id", "coach_id",
                name=f"uq_{cls.__tablename__}_period_player_coach",
            ),
        )

    period_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    player_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    coach_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    player_name: Mapped[str] = mapped_column(String(255), nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date)
    last_belt: Mapped[Belt | None] = mapped_column(
        SqlEnum(Belt, name="belt", native_enum=False, values_callable=_enum_values),
    )

    @declared_attr
    def period(cls):
        return relationship(
            cls.period_model,
            primaryjoin=f"foreign({cls.__name__}.period_id) == {cls.period_model}.id",
            viewonly=True,
        )

    @declared_attr
    def coach(cls):
        return relationship(
            "Profile",
            primaryjoin=f"foreign({cls.__name__}.coach_id) == Profile.id",
            viewonly=True,
        )

    @declared_attr
    def player(cls):
        return relationship(
            "Player",
            primaryjoin=f"foreign({cls.__name__}.player_id) == Player.id",
            viewonly=True,
        )


class ExamRegistration(RegistrationBase):
    __tablename__ = "exam_registrations"
    kind = PeriodKind.EXAM
    period_model = "ExamPeriod"


class SecondaryRegistration(RegistrationBase):
    __tablename__ = "secondary_registrations"
    kind = PeriodKind.SECONDARY
    period_model = "SecondaryRegistrationPeriod"


class TournamentRegistration(RegistrationBase):
    __tablename__ = "tournament_registrations"
    kind = PeriodKind.TOURNAMENT
    period_model = "TournamentPeriod"


class AuditLog(TimestampedBase):
    __tablename__ = "audit_log"

    actor_id: Mapped[str | None] = mapped_column(String(36), index=True)
    action: Mapped[str] = mapped_column(String(128), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(128), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(36))
    meta: Mapped[dict | None] = mapped_column(JSONType, default=dict)


PERIOD_MODELS = {
    PeriodKind.EXAM: ExamPeriod,
    PeriodKind.SECONDARY: SecondaryRegistrationPeriod,
    PeriodKind.TOURNAMENT: TournamentPeriod,
}

REGISTRATION_MODELS = {
    PeriodKind.EXAM: ExamRegistration,
    PeriodKind.SECONDARY: SecondaryRegistration,
    PeriodKind.TOURNAMENT: TournamentRegistration,
}


__all__ = [name for name in globals() if name[0].isupper()]
