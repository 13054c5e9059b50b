"""
Seed Accounts

Creates a default admin plus sample teachers and students for local
development. Existing accounts (matched by their school-issued ID) are left
untouched, so the script can be re-run safely.

Usage:
    cd apps/api
    python scripts/seed_accounts.py
"""

import asyncio
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import select

from sems.core.database import async_session_maker, engine
from sems.modules.accounts.models import HIGHSCHOOL_YEAR_LEVEL, Admin, Department, Student, Teacher

ADMINS = [
    {"admin_id": "ADMIN-001", "first_name": "School", "last_name": "Admin", "email": "admin@school.edu"},
]

TEACHERS = [
    {
        "teacher_id": "T-BSIT-01",
        "first_name": "Maria",
        "last_name": "Santos",
        "department": Department.COLLEGE.value,
        "position": "BSIT",
        "email": "bsit.teacher@school.edu",
    },
    {
        "teacher_id": "T-BSHM-01",
        "first_name": "Jose",
        "last_name": "Reyes",
        "department": Department.COLLEGE.value,
        "position": "BSHM",
        "email": "bshm.teacher@school.edu",
    },
    {
        "teacher_id": "T-STEM-01",
        "first_name": "Ana",
        "last_name": "Cruz",
        "department": Department.HIGHSCHOOL.value,
        "position": "STEM",
        "email": "stem.teacher@school.edu",
    },
]

STUDENTS = [
    {
        "student_id": "2024-0001",
        "first_name": "Juan",
        "last_name": "Dela Cruz",
        "course": "BSIT",
        "year_level": "3rd Year",
        "email": "juan.delacruz@school.edu",
    },
    {
        "student_id": "2024-0002",
        "first_name": "Liza",
        "last_name": "Garcia",
        "course": "STEM",
        "year_level": HIGHSCHOOL_YEAR_LEVEL,
        "email": "liza.garcia@school.edu",
    },
]


async def _seed(db, model, id_field: str, rows: list[dict]) -> int:
    created = 0
    column = getattr(model, id_field)
    for row in rows:
        result = await db.execute(select(model).where(column == row[id_field]))
        if result.scalar_one_or_none() is not None:
            print(f"  {model.__name__} already exists: {row[id_field]}")
            continue
        db.add(model(**row))
        created += 1
        print(f"  Created {model.__name__}: {row[id_field]}")
    return created


async def seed_accounts() -> None:
    """Create the default admin and sample accounts if they don't exist."""
    async with async_session_maker() as db:
        created = await _seed(db, Admin, "admin_id", ADMINS)
        created += await _seed(db, Teacher, "teacher_id", TEACHERS)
        created += await _seed(db, Student, "student_id", STUDENTS)
        await db.commit()

    print(f"Seeding complete: {created} account(s) created")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_accounts())
