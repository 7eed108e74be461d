"""create word and admin_user tables

Revision ID: 5c7e9a1d2b34
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c7e9a1d2b34'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'admin_user' not in existing_tables:
        op.create_table(
            'admin_user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=128), nullable=False),
        )
        op.create_index('ix_admin_user_username', 'admin_user', ['username'], unique=True)

    if 'word' not in existing_tables:
        op.create_table(
            'word',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('word', sa.String(length=128), nullable=False),
            sa.Column('category', sa.String(length=64), nullable=False),
            sa.Column('difficulty', sa.String(length=16), nullable=False),
        )
        op.create_index('ix_word_category', 'word', ['category'])
        op.create_index('ix_word_difficulty', 'word', ['difficulty'])


def downgrade():
    op.drop_index('ix_word_difficulty', table_name='word')
    op.drop_index('ix_word_category', table_name='word')
    op.drop_table('word')
    op.drop_index('ix_admin_user_username', table_name='admin_user')
    op.drop_table('admin_user')
