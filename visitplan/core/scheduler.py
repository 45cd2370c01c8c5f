"""Background job scheduler for spreadsheet checks."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from visitplan.core.config import settings
from visitplan.planner.store import EventStore
from visitplan.sheets.sync import check_all_events

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def check_job(store: EventStore):
    """Background check job.

    Only computes pending change sets; applying them is left to the user, so
    the store is not modified and nothing needs saving.
    """
    try:
        stats = await check_all_events(store)
        logger.info(f"Background spreadsheet check completed: {stats}")
    except Exception as e:
        logger.error(f"Background spreadsheet check failed: {e}")


def start_scheduler(store: EventStore):
    """Start the background scheduler."""
    if not settings.sync_check_enabled:
        logger.info("Background spreadsheet check disabled")
        return

    scheduler.add_job(
        check_job,
        trigger=IntervalTrigger(minutes=settings.sync_interval_minutes),
        args=[store],
        id="spreadsheet_check",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, checking spreadsheets every {settings.sync_interval_minutes} minutes"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
