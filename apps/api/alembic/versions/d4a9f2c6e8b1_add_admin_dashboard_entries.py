"""add admin dashboard entries

Revision ID: d4a9f2c6e8b1
Revises: b7e3c1a9d2f4
Create Date: 2026-10-19 15:00:00.000000

This migration:
1. Creates the admin_dashboard_entries table (log of processed requests)
2. Indexes processed_at for newest-first listing

request_id has no foreign key: the log outlives cleared exit requests.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "d4a9f2c6e8b1"
down_revision: str | Sequence[str] | None = "b7e3c1a9d2f4"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the admin dashboard log table."""
    op.create_table(
        "admin_dashboard_entries",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("request_id", sa.String(length=64), nullable=True),
        sa.Column("student_name", sa.String(length=200), nullable=True),
        sa.Column("student_id", sa.String(length=50), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("date", sa.String(length=50), nullable=True),
        sa.Column("time", sa.String(length=50), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=True),
        sa.Column("admin_response", sa.Text(), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("guard_name", sa.String(length=200), nullable=True),
        sa.Column("emergency_contact", sa.String(length=100), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_admin_dashboard_entries_processed_at",
        "admin_dashboard_entries",
        ["processed_at"],
        unique=False,
    )


def downgrade() -> None:
    """Drop the admin dashboard log table."""
    op.drop_index("ix_admin_dashboard_entries_processed_at", table_name="admin_dashboard_entries")
    op.drop_table("admin_dashboard_entries")
