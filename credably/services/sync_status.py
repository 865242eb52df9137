"""
Data source sync status tracking.

One DataSourceSync row per (user, source). A sync moves
idle -> syncing -> completed | failed; each transition is its own upsert
and commit.
"""
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.models.data_source_sync import DataSourceSync
from credably.utils import metrics
from credably.utils.logger import get_logger

logger = get_logger()

SYNC_INTERVAL = timedelta(hours=24)

T = TypeVar("T")


async def get_sync_status(db: AsyncSession, user_id: str, source: str) -> Optional[DataSourceSync]:
    result = await db.execute(
        select(DataSourceSync).where(
            DataSourceSync.user_id == user_id,
            DataSourceSync.source == source,
        )
    )
    return result.scalar_one_or_none()


async def _upsert(db: AsyncSession, user_id: str, source: str, **fields) -> DataSourceSync:
    row = await get_sync_status(db, user_id, source)
    if row is None:
        row = DataSourceSync(user_id=user_id, source=source)
        db.add(row)
    for key, value in fields.items():
        setattr(row, key, value)
    await db.commit()
    return row


async def mark_syncing(db: AsyncSession, user_id: str, source: str) -> DataSourceSync:
    return await _upsert(db, user_id, source, status="syncing", error=None)


async def mark_completed(
    db: AsyncSession,
    user_id: str,
    source: str,
    sync_frequency: str = "daily",
) -> DataSourceSync:
    now = datetime.utcnow()
    return await _upsert(
        db,
        user_id,
        source,
        status="completed",
        error=None,
        last_sync_at=now,
        next_sync_at=now + SYNC_INTERVAL if sync_frequency == "daily" else None,
        sync_frequency=sync_frequency,
    )


async def mark_failed(db: AsyncSession, user_id: str, source: str, error: str) -> DataSourceSync:
    # A failed provider call may leave the session mid-transaction
    await db.rollback()
    return await _upsert(db, user_id, source, status="failed", error=error)


async def run_sync(
    db: AsyncSession,
    user_id: str,
    source: str,
    work: Callable[[], Awaitable[T]],
) -> T:
    """Run one platform sync inside the syncing -> completed | failed transitions.

    Errors are recorded on the sync row and re-raised; nothing is retried.
    """
    await mark_syncing(db, user_id, source)
    logger.info(f"Sync started: {source} for {user_id}", extra={"platform": source})

    try:
        result = await work()
    except Exception as e:
        logger.error(
            f"Sync failed: {source} for {user_id}: {e}",
            extra={"platform": source, "error": str(e), "error_type": type(e).__name__},
        )
        metrics.inc(f"sync.{source}.failed")
        await mark_failed(db, user_id, source, str(e))
        raise

    await mark_completed(db, user_id, source)
    metrics.inc(f"sync.{source}.completed")
    logger.info(f"Sync completed: {source} for {user_id}", extra={"platform": source})
    return result
