"""Celery task that rewrites drifted social counters from their live counts."""
import asyncio
import logging

from app.core.celery_app import celery_app
from app.core.logging import setup_logging
from app.db.session import async_session_maker, engine
from app.services.counters import reconcile_counters

logger = logging.getLogger(__name__)


async def _reconcile() -> dict[str, int]:
    async with async_session_maker() as session:
        try:
            corrected = await reconcile_counters(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    # Each task run gets a fresh event loop; pooled connections cannot cross loops
    await engine.dispose()
    return corrected


@celery_app.task
def reconcile_counters_task() -> dict[str, int]:
    setup_logging("worker")
    corrected = asyncio.run(_reconcile())
    logger.info("Counter reconciliation finished: %d rows corrected", sum(corrected.values()))
    return corrected
