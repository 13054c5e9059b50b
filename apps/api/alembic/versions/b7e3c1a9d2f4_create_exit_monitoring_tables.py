"""create exit monitoring tables

Revision ID: b7e3c1a9d2f4
Revises:
Create Date: 2026-10-19 09:00:00.000000

This migration:
1. Creates the account directory tables (students, teachers, admins)
2. Creates the exit_requests table with flattened approval columns
3. Creates the notification_outbox table

notification_outbox.exit_request_id has no foreign key so clearing the
request history never touches queued emails.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "b7e3c1a9d2f4"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

EXIT_REQUEST_STATUSES = ("pending", "admin_approved", "teacher_approved", "fully_approved", "declined")
NOTIFICATION_KINDS = (
    "teacher_new_request",
    "admin_new_request",
    "teacher_decision_confirmation",
    "security_alert",
)
NOTIFICATION_STATUSES = ("pending", "sent", "failed")


def _base_columns() -> list[sa.Column]:
    """Primary key and timestamps (from BaseModel)."""
    return [
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
    ]


def upgrade() -> None:
    """Create account, exit request and outbox tables."""
    exit_request_status = postgresql.ENUM(
        *EXIT_REQUEST_STATUSES, name="exit_request_status", create_type=False
    )
    notification_kind = postgresql.ENUM(*NOTIFICATION_KINDS, name="notification_kind", create_type=False)
    notification_status = postgresql.ENUM(
        *NOTIFICATION_STATUSES, name="notification_status", create_type=False
    )
    exit_request_status.create(op.get_bind(), checkfirst=True)
    notification_kind.create(op.get_bind(), checkfirst=True)
    notification_status.create(op.get_bind(), checkfirst=True)

    # Account directory
    op.create_table(
        "students",
        *_base_columns(),
        sa.Column("student_id", sa.String(length=50), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("course", sa.String(length=50), nullable=False),
        sa.Column("year_level", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("profile_picture", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_students_student_id"), "students", ["student_id"], unique=True)

    op.create_table(
        "teachers",
        *_base_columns(),
        sa.Column("teacher_id", sa.String(length=50), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("department", sa.String(length=50), nullable=False),
        sa.Column("position", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("profile_picture", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_teachers_teacher_id"), "teachers", ["teacher_id"], unique=True)
    op.create_index(
        "ix_teachers_department_position", "teachers", ["department", "position"], unique=False
    )

    op.create_table(
        "admins",
        *_base_columns(),
        sa.Column("admin_id", sa.String(length=50), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_admins_admin_id"), "admins", ["admin_id"], unique=True)

    # Exit requests
    op.create_table(
        "exit_requests",
        *_base_columns(),
        # Requester snapshot
        sa.Column("student_id", sa.String(length=50), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("course", sa.String(length=50), nullable=False),
        sa.Column("year_level", sa.String(length=50), nullable=False),
        # Request details
        sa.Column("reason_for_exit", sa.Text(), nullable=False),
        sa.Column("exit_date", sa.String(length=50), nullable=False),
        sa.Column("exit_time", sa.String(length=50), nullable=False),
        sa.Column("emergency_contact", sa.String(length=100), nullable=False),
        sa.Column("guard_name", sa.String(length=200), nullable=False),
        sa.Column("status", exit_request_status, nullable=False, server_default="pending"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        # Admin approval
        sa.Column("admin_approved", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("admin_response", sa.Text(), nullable=False, server_default=""),
        sa.Column("admin_responded_at", sa.DateTime(timezone=True), nullable=True),
        # Teacher approval
        sa.Column("teacher_approved", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("teacher_id", sa.String(length=50), nullable=False, server_default=""),
        sa.Column("teacher_response", sa.Text(), nullable=False, server_default=""),
        sa.Column("teacher_responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_exit_requests_student_id", "exit_requests", ["student_id"], unique=False)
    op.create_index(
        "ix_exit_requests_course_status", "exit_requests", ["course", "status"], unique=False
    )
    op.create_index(
        "ix_exit_requests_submitted_at", "exit_requests", ["submitted_at"], unique=False
    )

    # Notification outbox
    op.create_table(
        "notification_outbox",
        *_base_columns(),
        sa.Column("exit_request_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("recipient_email", sa.String(length=255), nullable=False),
        sa.Column("template_kind", notification_kind, nullable=False),
        sa.Column("template_args", postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column("status", notification_status, nullable=False, server_default="pending"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("next_attempt_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_notification_outbox_status_next_attempt",
        "notification_outbox",
        ["status", "next_attempt_at"],
        unique=False,
    )
    op.create_index(
        "ix_notification_outbox_exit_request_id",
        "notification_outbox",
        ["exit_request_id"],
        unique=False,
    )


def downgrade() -> None:
    """Drop all exit monitoring tables and enum types."""
    op.drop_index("ix_notification_outbox_exit_request_id", table_name="notification_outbox")
    op.drop_index("ix_notification_outbox_status_next_attempt", table_name="notification_outbox")
    op.drop_table("notification_outbox")

    op.drop_index("ix_exit_requests_submitted_at", table_name="exit_requests")
    op.drop_index("ix_exit_requests_course_status", table_name="exit_requests")
    op.drop_index("ix_exit_requests_student_id", table_name="exit_requests")
    op.drop_table("exit_requests")

    op.drop_index(op.f("ix_admins_admin_id"), table_name="admins")
    op.drop_table("admins")
    op.drop_index("ix_teachers_department_position", table_name="teachers")
    op.drop_index(op.f("ix_teachers_teacher_id"), table_name="teachers")
    op.drop_table("teachers")
    op.drop_index(op.f("ix_students_student_id"), table_name="students")
    op.drop_table("students")

    for name in ("notification_status", "notification_kind", "exit_request_status"):
        postgresql.ENUM(name=name).drop(op.get_bind(), checkfirst=True)
