"""initial red light schema

Revision ID: 4c2a9e7d1b30
Revises:
Create Date: 2026-09-28 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e7d1b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'host_user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_host_user_username', 'host_user', ['username'], unique=True)

    op.create_table(
        'player',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('display_name', sa.String(length=64), nullable=False),
        sa.Column('public_code', sa.String(length=16), nullable=False),
        sa.Column('player_token', sa.String(length=64), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('public_code'),
    )
    op.create_index('ix_player_player_token', 'player', ['player_token'], unique=True)

    op.create_table(
        'game_session',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('state', sa.String(length=16), nullable=False),
        sa.Column('round_no', sa.Integer(), nullable=False),
        sa.Column('sensitivity_level', sa.Integer(), nullable=False),
        sa.Column('base_points', sa.Integer(), nullable=False),
        sa.Column('rest_seconds', sa.Integer(), nullable=False),
        sa.Column('rest_ends_at', sa.Float(), nullable=True),
        sa.Column('round_alive_start', sa.Integer(), nullable=False),
        sa.Column('round_eliminated_count', sa.Integer(), nullable=False),
        sa.Column('winner_player_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.Float(), nullable=False),
        sa.Column('finished_at', sa.Float(), nullable=True),
        sa.CheckConstraint('round_eliminated_count <= round_alive_start', name='ck_round_eliminated_le_alive_start'),
        sa.ForeignKeyConstraint(['winner_player_id'], ['player.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'current_session',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['session_id'], ['game_session.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'participant',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('player_id', sa.Integer(), nullable=False),
        sa.Column('joined_at', sa.Float(), nullable=False),
        sa.Column('armed', sa.Boolean(), nullable=False),
        sa.Column('armed_at', sa.Float(), nullable=True),
        sa.Column('last_seen_at', sa.Float(), nullable=True),
        sa.Column('last_motion_score', sa.Float(), nullable=True),
        sa.Column('eliminated_at', sa.Float(), nullable=True),
        sa.Column('eliminated_order', sa.Integer(), nullable=True),
        sa.Column('eliminated_round', sa.Integer(), nullable=True),
        sa.Column('eliminated_reason', sa.String(length=32), nullable=True),
        sa.ForeignKeyConstraint(['player_id'], ['player.id']),
        sa.ForeignKeyConstraint(['session_id'], ['game_session.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'player_id', name='uq_participant_session_player'),
        sa.UniqueConstraint('session_id', 'eliminated_order', name='uq_participant_session_order'),
    )
    op.create_index('ix_participant_session_id', 'participant', ['session_id'], unique=False)

    op.create_table(
        'score_event',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('player_id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=True),
        sa.Column('event_type', sa.String(length=32), nullable=False),
        sa.Column('points_delta', sa.Integer(), nullable=False),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['player_id'], ['player.id']),
        sa.ForeignKeyConstraint(['session_id'], ['game_session.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_score_event_player_id', 'score_event', ['player_id'], unique=False)


def downgrade():
    op.drop_index('ix_score_event_player_id', table_name='score_event')
    op.drop_table('score_event')
    op.drop_index('ix_participant_session_id', table_name='participant')
    op.drop_table('participant')
    op.drop_table('current_session')
    op.drop_table('game_session')
    op.drop_index('ix_player_player_token', table_name='player')
    op.drop_table('player')
    op.drop_index('ix_host_user_username', table_name='host_user')
    op.drop_table('host_user')
