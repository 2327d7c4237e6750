"""
Financial reconciliation task.

Verifies every user balance against the transaction ledger.
Runs daily at 01:00 UTC.
"""

import asyncio

import dramatiq
from loguru import logger

from app.config.database import async_session_maker
from app.services.reconciliation_service import ReconciliationService


@dramatiq.actor(max_retries=3, time_limit=600_000)  # 10 min timeout
def perform_financial_reconciliation() -> None:
    """
    Perform daily financial reconciliation.

    A user balance must equal the signed sum of that user's PENDING and
    COMPLETED transactions. Any mismatch is logged as critical.
    """
    logger.info("Starting financial reconciliation...")

    try:
        result = asyncio.run(_perform_reconciliation_async())

        if result.get("critical"):
            logger.error(
                f"CRITICAL: {result['mismatched_users']} users out of "
                f"balance, discrepancy={result['total_discrepancy']:.2f} USD"
            )
        else:
            logger.info("Reconciliation complete: ledger balanced")

    except Exception as e:
        logger.exception(f"Financial reconciliation failed: {e}")


async def _perform_reconciliation_async() -> dict:
    """Async implementation of financial reconciliation."""
    async with async_session_maker() as session:
        reconciliation_service = ReconciliationService(session)
        return await reconciliation_service.perform_reconciliation()
