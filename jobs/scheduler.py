"""
Task scheduler.

APScheduler-based periodic task scheduling for background jobs.
"""

import sys
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config.settings import settings

# Broker must be configured before actors are imported
from jobs.broker import broker  # noqa: F401
from jobs.tasks.deposit_monitoring import monitor_deposits
from jobs.tasks.financial_reconciliation import (
    perform_financial_reconciliation,
)
from jobs.tasks.process_stakes import process_stakes


def create_scheduler() -> AsyncIOScheduler:
    """
    Create and configure task scheduler.

    Returns:
        Configured AsyncIOScheduler instance
    """
    scheduler = AsyncIOScheduler()

    # Stake payouts - each stake is paid once per 24h cycle
    scheduler.add_job(
        process_stakes.send,
        trigger=IntervalTrigger(minutes=settings.payout_interval_minutes),
        id="process_stakes",
        name="Stake Payout Processing",
        replace_existing=True,
    )

    # Deposit monitoring - gateway poll for missed callbacks
    scheduler.add_job(
        monitor_deposits.send,
        trigger=IntervalTrigger(minutes=settings.deposit_poll_interval_minutes),
        id="deposit_monitoring",
        name="Deposit Monitoring",
        replace_existing=True,
    )

    # Financial reconciliation - every day at 01:00 UTC
    scheduler.add_job(
        perform_financial_reconciliation.send,
        trigger=CronTrigger(hour=1, minute=0),
        id="financial_reconciliation",
        name="Financial Reconciliation",
        replace_existing=True,
    )

    logger.info("Task scheduler configured with 3 jobs")

    return scheduler


async def start_scheduler() -> None:
    """Start the task scheduler."""
    scheduler = create_scheduler()
    scheduler.start()
    logger.info("Task scheduler started")


if __name__ == "__main__":
    import asyncio

    from app.config.logging import setup_logging

    setup_logging("scheduler")

    async def main():
        await start_scheduler()
        # Keep running
        try:
            await asyncio.Event().wait()
        except KeyboardInterrupt:
            logger.info("Scheduler stopped")

    asyncio.run(main())
