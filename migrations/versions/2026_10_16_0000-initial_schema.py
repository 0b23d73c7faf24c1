"""Initial schema

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create initial database schema:
    - short_urls table: url <-> short code records, both columns unique
    - counters table: named counters used to allocate short codes
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    # Tables may already exist when the app created them on startup
    if 'short_urls' not in existing_tables:
        op.create_table(
            'short_urls',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('original_url', sa.Text(), nullable=False),
            sa.Column('short_code', sa.String(length=16), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )

        op.create_index(
            'ix_short_urls_short_code',
            'short_urls',
            ['short_code'],
            unique=True
        )

        op.create_index(
            'ix_short_urls_original_url',
            'short_urls',
            ['original_url'],
            unique=True
        )

    if 'counters' not in existing_tables:
        op.create_table(
            'counters',
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('value', sa.BigInteger(), nullable=False, server_default='0'),
            sa.PrimaryKeyConstraint('name')
        )


def downgrade() -> None:
    """
    Drop all tables and indexes.

    Dropping the counters table forgets which codes were issued; only do
    this together with short_urls.
    """
    op.drop_table('counters')
    op.drop_index('ix_short_urls_original_url', table_name='short_urls')
    op.drop_index('ix_short_urls_short_code', table_name='short_urls')
    op.drop_table('short_urls')
