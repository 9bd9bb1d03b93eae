"""Login identity CLI commands."""

import click
from flask.cli import with_appcontext

from kcms.extensions import db
from kcms.models import Profile, ProfileRole
from kcms.services.provisioning import create_profile


@click.group('user')
def user_commands():
    """User management commands."""
    pass


@user_commands.command('create')
@click.option('--email', required=True, help='Login email')
@click.option('--password', required=True, help='Login password')
@click.option('--full-name', required=True, help='Display name')
@click.option('--role', type=click.Choice([r.value for r in ProfileRole]), default=ProfileRole.ADMIN.value, show_default=True)
@click.option('--org', 'organization_id', default=None, help='Organization id (required for coaches)')
@with_appcontext
def create_user(email, password, full_name, role, organization_id):
    """Create an admin or coach login.

    Example:
        flask user create --email admin@example.com --password secret123 --full-name "مدير النظام"
    """
    if role == ProfileRole.COACH.value and not organization_id:
        click.echo(click.style('Error: --org is required for coaches', fg='red'))
        return

    profile, error = create_profile(
        email,
        password,
        full_name,
        role=ProfileRole(role),
        organization_id=organization_id,
    )
    if error:
        click.echo(click.style(f'Error: {error}', fg='red'))
        return

    click.echo(click.style('User created successfully!', fg='green'))
    click.echo(f'  ID: {profile.id}')
    click.echo(f'  Email: {profile.email}')
    click.echo(f'  Role: {profile.role}')


@user_commands.command('set-password')
@click.option('--email', required=True, help='Login email')
@click.option('--password', required=True, help='New password')
@with_appcontext
def set_password(email, password):
    """Set or reset a user's password."""
    profile = db.session.query(Profile).filter_by(email=email.strip().lower()).first()
    if not profile:
        click.echo(click.style(f'Error: No user {email} found', fg='red'))
        return

    profile.set_password(password)
    db.session.commit()
    click.echo(click.style('Password updated.', fg='green'))
