"""Add photos to properties

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18

Stores the object paths of uploaded property photos as a JSON list.
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # JSON columns cannot carry a server default on MySQL, so backfill first
    op.add_column("properties", sa.Column("photos", sa.JSON(), nullable=True))
    op.execute("UPDATE properties SET photos = '[]'")
    op.alter_column(
        "properties", "photos", existing_type=sa.JSON(), nullable=False
    )


def downgrade() -> None:
    op.drop_column("properties", "photos")
