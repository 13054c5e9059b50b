"""
Shared fixtures: a mock database session and account / exit request factories.
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from sems.modules.accounts.models import HIGHSCHOOL_YEAR_LEVEL, Admin, Department, Student, Teacher
from sems.modules.exit_requests.models import ExitRequest, RequestStatus


@asynccontextmanager
async def _savepoint():
    yield


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.begin_nested = MagicMock(side_effect=lambda: _savepoint())
    return db


@pytest.fixture
def make_student():
    def _make(
        student_id: str = "2024-0001",
        course: str = "BSIT",
        year_level: str = "3rd Year",
        first_name: str = "Juan",
        last_name: str = "Dela Cruz",
        email: str | None = "juan@school.edu",
        profile_picture: str | None = "https://cdn.school.edu/juan.png",
    ) -> Student:
        return Student(
            id=str(uuid4()),
            student_id=student_id,
            first_name=first_name,
            last_name=last_name,
            course=course,
            year_level=year_level,
            email=email,
            profile_picture=profile_picture,
        )

    return _make


@pytest.fixture
def make_teacher():
    def _make(
        teacher_id: str = "T-BSIT-01",
        department: str = Department.COLLEGE.value,
        position: str = "BSIT",
        first_name: str = "Maria",
        last_name: str = "Santos",
        email: str | None = "maria@school.edu",
    ) -> Teacher:
        return Teacher(
            id=str(uuid4()),
            teacher_id=teacher_id,
            first_name=first_name,
            last_name=last_name,
            department=department,
            position=position,
            email=email,
            profile_picture=None,
        )

    return _make


@pytest.fixture
def make_admin():
    def _make(
        admin_id: str = "ADMIN-001",
        email: str | None = "admin@school.edu",
    ) -> Admin:
        return Admin(
            id=str(uuid4()),
            admin_id=admin_id,
            first_name="School",
            last_name="Admin",
            email=email,
        )

    return _make


@pytest.fixture
def make_exit_request():
    base_time = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)

    def _make(
        student_id: str = "2024-0001",
        course: str = "BSIT",
        year_level: str = "3rd Year",
        status: RequestStatus = RequestStatus.PENDING,
        admin_approved: bool = False,
        teacher_approved: bool = False,
        minutes: int = 0,
    ) -> ExitRequest:
        return ExitRequest(
            id=str(uuid4()),
            student_id=student_id,
            first_name="Juan",
            last_name="Dela Cruz",
            course=course,
            year_level=year_level,
            reason_for_exit="Medical appointment",
            exit_date="2026-03-02",
            exit_time="13:00",
            emergency_contact="09171234567",
            guard_name="Guard Ramos",
            status=status,
            submitted_at=base_time + timedelta(minutes=minutes),
            admin_approved=admin_approved,
            admin_response="",
            admin_responded_at=None,
            teacher_approved=teacher_approved,
            teacher_id="",
            teacher_response="",
            teacher_responded_at=None,
        )

    return _make


@pytest.fixture
def highschool_year_level() -> str:
    return HIGHSCHOOL_YEAR_LEVEL
