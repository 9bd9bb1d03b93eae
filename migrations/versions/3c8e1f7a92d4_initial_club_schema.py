"""initial club management schema

Revision ID: 3c8e1f7a92d4
Revises:
Create Date: 2026-10-19 10:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c8e1f7a92d4'
down_revision = None
branch_labels = None
depends_on = None

BELTS = ('white', 'yellow', 'orange', 'green', 'blue', 'brown', 'black')

PERIOD_TABLES = ('exam_periods', 'secondary_registration_periods', 'tournament_periods')
REGISTRATION_TABLES = ('exam_registrations', 'secondary_registrations', 'tournament_registrations')


def _timestamps():
    return [
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade():
    op.create_table(
        'organizations',
        *_timestamps(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.Enum('club', 'youth_center', name='organization_type', native_enum=False), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'profiles',
        *_timestamps(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)
    op.create_index('ix_profiles_organization_id', 'profiles', ['organization_id'], unique=False)

    op.create_table(
        'players',
        *_timestamps(),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('belt', sa.Enum(*BELTS, name='belt', native_enum=False), nullable=False),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('file_number', sa.SmallInteger(), nullable=True),
        sa.Column('coach_id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_players_coach_id', 'players', ['coach_id'], unique=False)
    op.create_index('ix_players_organization_id', 'players', ['organization_id'], unique=False)

    for table in PERIOD_TABLES:
        op.create_table(
            table,
            *_timestamps(),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('start_date', sa.Date(), nullable=False),
            sa.Column('end_date', sa.Date(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(f'ix_{table}_start_date', table, ['start_date'], unique=False)
        op.create_index(f'ix_{table}_end_date', table, ['end_date'], unique=False)

    # References are plain columns: deleting a period, player or coach leaves
    # registrations pointing at the removed row.
    for table in REGISTRATION_TABLES:
        op.create_table(
            table,
            *_timestamps(),
            sa.Column('period_id', sa.String(length=36), nullable=False),
            sa.Column('player_id', sa.String(length=36), nullable=False),
            sa.Column('coach_id', sa.String(length=36), nullable=False),
            sa.Column('player_name', sa.String(length=255), nullable=False),
            sa.Column('birth_date', sa.Date(), nullable=True),
            sa.Column('last_belt', sa.Enum(*BELTS, name='belt', native_enum=False), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('period_id', 'player_id', 'coach_id', name=f'uq_{table}_period_player_coach')
        )
        for column in ('period_id', 'player_id', 'coach_id'):
            op.create_index(f'ix_{table}_{column}', table, [column], unique=False)

    op.create_table(
        'audit_log',
        *_timestamps(),
        sa.Column('actor_id', sa.String(length=36), nullable=True),
        sa.Column('action', sa.String(length=128), nullable=False),
        sa.Column('entity_type', sa.String(length=128), nullable=False),
        sa.Column('entity_id', sa.String(length=36), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_log_actor_id', 'audit_log', ['actor_id'], unique=False)


def downgrade():
    op.drop_index('ix_audit_log_actor_id', table_name='audit_log')
    op.drop_table('audit_log')

    for table in REGISTRATION_TABLES:
        for column in ('period_id', 'player_id', 'coach_id'):
            op.drop_index(f'ix_{table}_{column}', table_name=table)
        op.drop_table(table)

    for table in PERIOD_TABLES:
        op.drop_index(f'ix_{table}_end_date', table_name=table)
        op.drop_index(f'ix_{table}_start_date', table_name=table)
        op.drop_table(table)

    op.drop_index('ix_players_organization_id', table_name='players')
    op.drop_index('ix_players_coach_id', table_name='players')
    op.drop_table('players')

    op.drop_index('ix_profiles_organization_id', table_name='profiles')
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_table('profiles')

    op.drop_table('organizations')
