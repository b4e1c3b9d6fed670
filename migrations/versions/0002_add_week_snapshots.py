"""add week_snapshots table

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

One row per advanced week and slot, written by POST /career/advance.
Deleted together with its save slot.
"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "week_snapshots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slot", sa.String(64), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("week", sa.Integer(), nullable=False),
        sa.Column("total_streams", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("units_sold", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("money", sa.Numeric(14, 2), nullable=False),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("slot", "year", "week", name="uq_week_snapshot_slot_year_week"),
    )
    op.create_index("ix_week_snapshots_id", "week_snapshots", ["id"])
    op.create_index("ix_week_snapshots_slot", "week_snapshots", ["slot"])


def downgrade() -> None:
    op.drop_index("ix_week_snapshots_slot", table_name="week_snapshots")
    op.drop_index("ix_week_snapshots_id", table_name="week_snapshots")
    op.drop_table("week_snapshots")
