"""create question_set and leaderboard_entry

Revision ID: 5b7c1e2d9a40
Revises:
Create Date: 2026-10-19 10:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b7c1e2d9a40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'question_set' not in existing_tables:
        op.create_table(
            'question_set',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('pool', sa.String(length=64), nullable=False),
            sa.Column('name', sa.String(length=128), nullable=True),
            sa.Column('payload', sa.Text(), nullable=False),
        )
        op.create_index('ix_question_set_pool', 'question_set', ['pool'])

    if 'leaderboard_entry' not in existing_tables:
        op.create_table(
            'leaderboard_entry',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('room_code', sa.String(length=16), nullable=True),
            sa.Column('player1_score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('player2_score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_leaderboard_entry_room_code', 'leaderboard_entry', ['room_code'])


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'leaderboard_entry' in existing_tables:
        op.drop_index('ix_leaderboard_entry_room_code', table_name='leaderboard_entry')
        op.drop_table('leaderboard_entry')
    if 'question_set' in existing_tables:
        op.drop_index('ix_question_set_pool', table_name='question_set')
        op.drop_table('question_set')
