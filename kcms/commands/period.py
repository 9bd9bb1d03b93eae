"""Registration period CLI commands."""

import click
from flask.cli import with_appcontext

from kcms.models import PeriodKind
from kcms.services.periods import MultipleActivePeriodsError, PeriodService, find_active_period, period_model

KIND_CHOICE = click.Choice([k.value for k in PeriodKind])


@click.group('period')
def period_commands():
    """Exam, secondary and tournament period commands."""
    pass


@period_commands.command('create')
@click.option('--kind', required=True, type=KIND_CHOICE)
@click.option('--name', required=True, help='Period name')
@click.option('--start', required=True, type=click.DateTime(formats=['%Y-%m-%d']), help='First day (YYYY-MM-DD)')
@click.option('--end', required=True, type=click.DateTime(formats=['%Y-%m-%d']), help='Last day (YYYY-MM-DD)')
@with_appcontext
def create_period(kind, name, start, end):
    """Create a registration period; both boundary days are included."""
    period, error = PeriodService(PeriodKind(kind)).create({
        'name': name.strip(),
        'start_date': start.date(),
        'end_date': end.date(),
    })
    if error:
        click.echo(click.style(f'Error: {error}', fg='red'))
        return

    click.echo(click.style('Period created successfully!', fg='green'))
    click.echo(f'  ID: {period.id}')
    click.echo(f'  {period.start_date.isoformat()} -> {period.end_date.isoformat()}')


@period_commands.command('list')
@click.option('--kind', required=True, type=KIND_CHOICE)
@with_appcontext
def list_periods(kind):
    model = period_model(PeriodKind(kind))
    periods = model.query.order_by(model.start_date.desc()).all()
    if not periods:
        click.echo('No periods found.')
        return
    for period in periods:
        click.echo(f'  {period.id}  {period.name}  {period.start_date.isoformat()} -> {period.end_date.isoformat()}')


@period_commands.command('active')
@click.option('--kind', required=True, type=KIND_CHOICE)
@click.option('--today', default=None, type=click.DateTime(formats=['%Y-%m-%d']), help='Day to check (defaults to today)')
@with_appcontext
def active_period(kind, today):
    """Show the period of KIND that contains today."""
    try:
        period = find_active_period(PeriodKind(kind), today.date() if today else None)
    except MultipleActivePeriodsError as e:
        click.echo(click.style(f'Error: {e}', fg='red'))
        raise SystemExit(1)

    if period is None:
        click.echo('No active period.')
        return
    click.echo(f'{period.id}  {period.name}  {period.start_date.isoformat()} -> {period.end_date.isoformat()}')
