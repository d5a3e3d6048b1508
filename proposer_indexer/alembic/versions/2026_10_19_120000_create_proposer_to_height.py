"""create_proposer_to_height

Revision ID: 2026_10_19_120000
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '2026_10_19_120000'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'proposer_to_height',
        sa.Column('height', sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column('proposer', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('height'),
    )
    op.create_index(
        'ix_proposer_to_height_proposer',
        'proposer_to_height',
        ['proposer'],
    )


def downgrade() -> None:
    op.drop_index('ix_proposer_to_height_proposer', table_name='proposer_to_height')
    op.drop_table('proposer_to_height')
