"""create_coin_balance_buckets

Create the append-only coin_balance_buckets changelog table and the
per-owner lookup index.

Revision ID: c4e1b7a9d2f0
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c4e1b7a9d2f0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'coin_balance_buckets',
        sa.Column('object_id', sa.LargeBinary(), primary_key=True,
                  comment='32-byte object id'),
        sa.Column('checkpoint_sequence', sa.BigInteger(), primary_key=True,
                  comment='Checkpoint in which this state took effect'),
        sa.Column('owner_kind', sa.SmallInteger(), nullable=True,
                  comment='0 = fastpath address owner, 1 = consensus address owner'),
        sa.Column('owner_id', sa.LargeBinary(), nullable=True,
                  comment='32-byte owner address'),
        sa.Column('coin_type', sa.LargeBinary(), nullable=True,
                  comment='BCS-encoded coin type tag'),
        sa.Column('coin_balance_bucket', sa.SmallInteger(), nullable=True,
                  comment='floor(log10(balance)), 0 for an empty coin'),
    )
    op.create_index(
        'coin_balance_buckets_owner_type_bucket',
        'coin_balance_buckets',
        ['owner_kind', 'owner_id', 'coin_type', 'coin_balance_bucket',
         'checkpoint_sequence', 'object_id'],
    )


def downgrade() -> None:
    op.drop_index('coin_balance_buckets_owner_type_bucket', table_name='coin_balance_buckets')
    op.drop_table('coin_balance_buckets')
