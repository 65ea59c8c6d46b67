"""quote number counters

Revision ID: 0002_quote_number_counters
Revises: 0001_initial
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002_quote_number_counters'
down_revision: Union[str, None] = '0001_initial'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'quote_number_counters',
        sa.Column('year', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('last_value', sa.Integer(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('quote_number_counters')
