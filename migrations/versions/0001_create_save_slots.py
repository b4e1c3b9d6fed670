"""create save_slots table

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

One row per save slot; `document` holds the JSON career document.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "save_slots",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("slot", sa.String(64), nullable=False),
        sa.Column("schema_version", sa.Integer(), nullable=False),
        sa.Column("document", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_save_slots_id", "save_slots", ["id"])
    op.create_index("ix_save_slots_slot", "save_slots", ["slot"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_save_slots_slot", table_name="save_slots")
    op.drop_index("ix_save_slots_id", table_name="save_slots")
    op.drop_table("save_slots")
