"""
Admin Dashboard Repository

Database operations for the processed-requests log.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import DashboardEntry


async def create(db: AsyncSession, entry: DashboardEntry) -> DashboardEntry:
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry


async def list_all(db: AsyncSession) -> list[DashboardEntry]:
    """All entries, most recently processed first."""
    result = await db.execute(
        select(DashboardEntry).order_by(DashboardEntry.processed_at.desc())
    )
    return list(result.scalars().all())


async def delete_by_ids(db: AsyncSession, entry_ids: list[str]) -> int:
    """Delete the given entries. Returns the number of deleted rows."""
    result = await db.execute(delete(DashboardEntry).where(DashboardEntry.id.in_(entry_ids)))
    await db.commit()
    return result.rowcount or 0


async def delete_all(db: AsyncSession) -> int:
    result = await db.execute(delete(DashboardEntry))
    await db.commit()
    return result.rowcount or 0
