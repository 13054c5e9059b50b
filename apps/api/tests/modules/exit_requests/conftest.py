"""
Fixtures for exit request service tests.

In-memory stand-ins for the exit request repository and the account
directory, so whole workflows can run without a database.
"""

from unittest.mock import patch
from uuid import uuid4

import pytest

from sems.modules.accounts.models import Admin, Student, Teacher


class InMemoryExitRequests:
    """Same async interface as sems.modules.exit_requests.repository."""

    def __init__(self):
        self.records = {}
        self.intents = []

    def _store_intents(self, intents):
        for intent in intents:
            if intent.id is None:
                intent.id = str(uuid4())
            self.intents.append(intent)

    async def create(self, db, exit_request, intents):
        self.records[exit_request.id] = exit_request
        self._store_intents(intents)
        return exit_request

    async def save(self, db, exit_request, intents):
        self.records[exit_request.id] = exit_request
        self._store_intents(intents)
        return exit_request

    async def get_by_id(self, db, request_id):
        return self.records.get(request_id)

    async def list_all(self, db):
        return sorted(self.records.values(), key=lambda r: r.submitted_at, reverse=True)

    async def list_for_course(self, db, course, statuses):
        statuses = set(statuses)
        return [r for r in self.records.values() if r.course == course and r.status in statuses]

    async def list_for_student(self, db, student_id):
        return [r for r in self.records.values() if r.student_id == student_id]

    async def delete_all(self, db):
        count = len(self.records)
        self.records.clear()
        return count

    def intents_of_kind(self, kind):
        return [i for i in self.intents if i.template_kind == kind]


class InMemoryAccounts:
    """Same async interface as AccountRepository."""

    def __init__(self, students=(), teachers=(), admins=()):
        self.students: dict[str, Student] = {s.student_id: s for s in students}
        self.teachers: dict[str, Teacher] = {t.teacher_id: t for t in teachers}
        self.admins: list[Admin] = list(admins)

    async def get_student(self, db, student_id):
        return self.students.get(student_id)

    async def get_teacher(self, db, teacher_id):
        return self.teachers.get(teacher_id)

    async def get_profile_pictures(self, db, student_ids):
        return {
            sid: self.students[sid].profile_picture for sid in student_ids if sid in self.students
        }

    async def find_teachers(self, db, department, position):
        return [
            t
            for t in self.teachers.values()
            if t.department == department and t.position == position
        ]

    async def list_admins(self, db):
        return list(self.admins)


@pytest.fixture
def store():
    return InMemoryExitRequests()


@pytest.fixture
def campus(make_student, make_teacher, make_admin, highschool_year_level):
    """A BSIT student, a STEM student and their teachers plus one admin."""
    return InMemoryAccounts(
        students=[
            make_student(student_id="2024-0001", course="BSIT"),
            make_student(
                student_id="2024-0002",
                course="STEM",
                year_level=highschool_year_level,
                first_name="Liza",
                last_name="Garcia",
                profile_picture=None,
            ),
        ],
        teachers=[
            make_teacher(teacher_id="T-BSIT-01", department="College", position="BSIT"),
            make_teacher(
                teacher_id="T-STEM-01",
                department="Highschool",
                position="STEM",
                email="stem@school.edu",
            ),
        ],
        admins=[make_admin()],
    )


@pytest.fixture
def wired(store, campus):
    """Patch the service and dispatcher onto the in-memory store and directory."""
    with (
        patch("sems.modules.exit_requests.service.repository", store),
        patch("sems.modules.exit_requests.service.AccountRepository", campus),
        patch("sems.modules.notifications.dispatcher.AccountRepository", campus),
    ):
        yield store, campus
