"""Organization (club / youth center) CLI commands."""

import click
from flask.cli import with_appcontext

from kcms.labels import organization_type_label
from kcms.models import Organization, OrganizationType
from kcms.services.crud import CRUDService


@click.group('org')
def org_commands():
    """Organization management commands."""
    pass


@org_commands.command('create')
@click.option('--name', required=True, help='Organization name')
@click.option('--type', 'org_type', type=click.Choice([t.value for t in OrganizationType]), default=OrganizationType.CLUB.value, show_default=True)
@with_appcontext
def create_org(name, org_type):
    """Create a new organization."""
    org, error = CRUDService(Organization).create({'name': name.strip(), 'type': OrganizationType(org_type)})
    if error:
        click.echo(click.style(f'Error: {error}', fg='red'))
        return

    click.echo(click.style('Organization created successfully!', fg='green'))
    click.echo(f'  ID: {org.id}')
    click.echo(f'  Name: {org.name}')
    click.echo(f'  Type: {organization_type_label(org.type)}')


@org_commands.command('list')
@with_appcontext
def list_orgs():
    """List all organizations."""
    orgs = Organization.query.order_by(Organization.created_at.desc()).all()
    if not orgs:
        click.echo('No organizations found.')
        return

    click.echo(f'\nFound {len(orgs)} organization(s):\n')
    for org in orgs:
        click.echo(f'  {org.id}  {org.name}  ({organization_type_label(org.type)})')
