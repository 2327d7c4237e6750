"""
Stake payout task.

Shared entry point for every payout trigger: the Dramatiq actor, the
cron HTTP endpoint and the manual admin script.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.services.payout_service import PayoutService


async def run_stake_payouts(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Process all due stakes.

    Args:
        session_maker: Session factory (defaults to the app factory)
        now: Processing time override

    Returns:
        Payout summary dict (total, processed, completed, skipped,
        errors, timestamp)
    """
    if session_maker is None:
        from app.config.database import async_session_maker

        session_maker = async_session_maker

    logger.info("Starting stake payout task")

    async with session_maker() as session:
        try:
            report = await PayoutService(session).process_due_stakes(now)
        except Exception as e:
            logger.error(
                f"Error in stake payout task: {e}",
                extra={"error": str(e)},
            )
            await session.rollback()
            raise

    result = report.as_dict()
    logger.info(
        f"Stake payout task finished: {result['processed']}/{result['total']} "
        f"processed, {result['completed']} completed, "
        f"{len(result['errors'])} errors"
    )
    return result
