"""
Fixtures for admin dashboard tests.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from sems.modules.admin_dashboard.models import DashboardEntry


class InMemoryDashboard:
    """Same async interface as sems.modules.admin_dashboard.repository."""

    def __init__(self):
        self.entries: dict[str, DashboardEntry] = {}

    async def create(self, db, entry):
        self.entries[entry.id] = entry
        return entry

    async def list_all(self, db):
        return sorted(self.entries.values(), key=lambda e: e.processed_at, reverse=True)

    async def delete_by_ids(self, db, entry_ids):
        matched = [i for i in entry_ids if i in self.entries]
        for entry_id in matched:
            del self.entries[entry_id]
        return len(matched)

    async def delete_all(self, db):
        count = len(self.entries)
        self.entries.clear()
        return count


@pytest.fixture
def make_entry():
    base_time = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

    def _make(
        student_id: str | None = "2024-0001",
        status: str = "approved",
        minutes: int = 0,
    ) -> DashboardEntry:
        return DashboardEntry(
            id=str(uuid4()),
            request_id=str(uuid4()),
            student_name="Juan Dela Cruz",
            student_id=student_id,
            reason="Medical appointment",
            date="2026-03-02",
            time="13:00",
            status=status,
            admin_response="Take care",
            processed_at=base_time + timedelta(minutes=minutes),
            guard_name="Guard Ramos",
            emergency_contact="09171234567",
        )

    return _make


@pytest.fixture
def dashboard():
    """
    Patch the service onto an in-memory log. Student 2024-0001 has a
    profile picture; no other student exists.
    """
    store = InMemoryDashboard()
    pictures = {"2024-0001": "https://cdn.school.edu/juan.png"}

    async def get_profile_pictures(db, student_ids):
        return {sid: pictures[sid] for sid in student_ids if sid in pictures}

    with (
        patch("sems.modules.admin_dashboard.service.repository", store),
        patch("sems.modules.admin_dashboard.service.AccountRepository") as accounts,
    ):
        accounts.get_profile_pictures = AsyncMock(side_effect=get_profile_pictures)
        store.accounts = accounts
        yield store
