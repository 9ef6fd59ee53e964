"""add difficulty_step, difficulty_cap to game_session

Revision ID: 9d61f0a3c8e2
Revises: 4c2a9e7d1b30
Create Date: 2026-10-05 18:30:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9d61f0a3c8e2'
down_revision = '4c2a9e7d1b30'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    cols = {c['name'] for c in insp.get_columns('game_session')}
    with op.batch_alter_table('game_session') as batch_op:
        if 'difficulty_step' not in cols:
            batch_op.add_column(sa.Column('difficulty_step', sa.Integer(), nullable=False, server_default='0'))
        if 'difficulty_cap' not in cols:
            batch_op.add_column(sa.Column('difficulty_cap', sa.Integer(), nullable=False, server_default='40'))


def downgrade():
    with op.batch_alter_table('game_session') as batch_op:
        batch_op.drop_column('difficulty_cap')
        batch_op.drop_column('difficulty_step')
