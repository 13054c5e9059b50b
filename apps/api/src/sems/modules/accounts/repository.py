"""
Account Repository

Read-only lookups into the account directory.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sems.modules.accounts.models import Admin, Student, Teacher

logger = logging.getLogger(__name__)


class AccountRepository:
    """Repository for account directory lookups."""

    @staticmethod
    async def get_student(db: AsyncSession, student_id: str) -> Student | None:
        """Get a student by their school-issued student ID."""
        result = await db.execute(select(Student).where(Student.student_id == student_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_teacher(db: AsyncSession, teacher_id: str) -> Teacher | None:
        """Get a teacher by their school-issued teacher ID."""
        result = await db.execute(select(Teacher).where(Teacher.teacher_id == teacher_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_profile_pictures(db: AsyncSession, student_ids: list[str]) -> dict[str, str | None]:
        """
        Batch-load the current profile picture of each student.

        Students that no longer exist are absent from the returned mapping.

        Args:
            db: Database session
            student_ids: Student IDs to look up (duplicates allowed)

        Returns:
            Mapping of student ID to profile picture URL (or None)
        """
        unique_ids = list(dict.fromkeys(student_ids))
        if not unique_ids:
            return {}

        result = await db.execute(
            select(Student.student_id, Student.profile_picture).where(
                Student.student_id.in_(unique_ids)
            )
        )
        return {row.student_id: row.profile_picture for row in result.all()}

    @staticmethod
    async def find_teachers(db: AsyncSession, department: str, position: str) -> list[Teacher]:
        """Find teachers in a department responsible for the given position."""
        result = await db.execute(
            select(Teacher)
            .where(Teacher.department == department, Teacher.position == position)
            .order_by(Teacher.teacher_id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_admins(db: AsyncSession) -> list[Admin]:
        """List every admin account."""
        result = await db.execute(select(Admin).order_by(Admin.admin_id))
        return list(result.scalars().all())
