"""create timer history and settings tables

Revision ID: 5a7c2e91b0d4
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5a7c2e91b0d4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    existing = set(sa.inspect(bind).get_table_names())

    # Databases created by create_all() on startup already have these
    if 'subs' not in existing:
        op.create_table(
            'subs',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('timestamp', sa.BigInteger(), nullable=False),
            sa.Column('ending_at', sa.BigInteger(), nullable=False),
            sa.Column('seconds_per_sub', sa.Float(), nullable=False),
            sa.Column('plan', sa.String(length=16), nullable=False),
            sa.Column('user_name', sa.String(length=64), nullable=True),
        )
        op.create_index('ix_subs_timestamp', 'subs', ['timestamp'])
    if 'sub_bombs' not in existing:
        op.create_table(
            'sub_bombs',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('timestamp', sa.BigInteger(), nullable=False),
            sa.Column('amount_subs', sa.Integer(), nullable=False),
            sa.Column('plan', sa.String(length=16), nullable=False),
            sa.Column('user_name', sa.String(length=64), nullable=True),
        )
        op.create_index('ix_sub_bombs_timestamp', 'sub_bombs', ['timestamp'])
    if 'cheers' not in existing:
        op.create_table(
            'cheers',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('timestamp', sa.BigInteger(), nullable=False),
            sa.Column('ending_at', sa.BigInteger(), nullable=False),
            sa.Column('amount_bits', sa.Integer(), nullable=False),
            sa.Column('user_name', sa.String(length=64), nullable=True),
        )
        op.create_index('ix_cheers_timestamp', 'cheers', ['timestamp'])
    if 'graph' not in existing:
        op.create_table(
            'graph',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('timestamp', sa.BigInteger(), nullable=False),
            sa.Column('ending_at', sa.BigInteger(), nullable=False),
        )
        op.create_index('ix_graph_timestamp', 'graph', ['timestamp'])
    if 'settings' not in existing:
        op.create_table(
            'settings',
            sa.Column('key', sa.String(length=64), primary_key=True),
            sa.Column('value', sa.BigInteger(), nullable=True),
        )


def downgrade():
    op.drop_table('settings')
    op.drop_table('graph')
    op.drop_table('cheers')
    op.drop_table('sub_bombs')
    op.drop_table('subs')
