"""Creation of login identities (admins and coaches)."""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from kcms.extensions import db
from kcms.labels import message
from kcms.models import Organization, Profile, ProfileRole
from kcms.services.audit import log_action


def create_profile(
    email: str,
    password: str,
    full_name: str,
    role: ProfileRole = ProfileRole.COACH,
    organization_id: str | None = None,
    actor: Profile | None = None,
) -> tuple[Profile | None, str | None]:
    """
    Create a login identity and its profile row in one transaction.

    Returns:
        (profile, error_message)
    """
    email = (email or '').strip().lower()
    full_name = (full_name or '').strip()
    if not email or not password:
        return None, message('credentials_required')
    if not full_name:
        return None, message('missing_fields')

    if Profile.query.filter(Profile.email == email).first():
        return None, message('email_taken')

    if organization_id and db.session.get(Organization, organization_id) is None:
        return None, message('not_found')

    profile = Profile(
        email=email,
        full_name=full_name,
        role=role.value,
        organization_id=organization_id or None,
    )
    profile.set_password(password)

    try:
        db.session.add(profile)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return None, message('email_taken')
    except (SQLAlchemyError, PermissionError) as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create profile {email}: {e}")
        return None, message('save_failed')

    log_action(
        actor,
        'profiles_created',
        'profiles',
        profile.id,
        metadata={'email': email, 'role': role.value, 'organization_id': organization_id},
    )
    return profile, None


def create_coach(
    email: str,
    password: str,
    full_name: str,
    organization_id: str,
    actor: Profile | None = None,
) -> tuple[Profile | None, str | None]:
    """Provision a coach: every field is required, including the organization."""
    if not all([email, password, full_name, organization_id]):
        return None, message('missing_fields')
    return create_profile(
        email,
        password,
        full_name,
        role=ProfileRole.COACH,
        organization_id=organization_id,
        actor=actor,
    )


__all__ = ['create_profile', 'create_coach']
