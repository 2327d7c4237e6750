"""
Deposit monitoring task.

Polls the payment gateway for pending deposits in case the IPN
callback never arrived.
"""

import asyncio

import dramatiq
from loguru import logger

from app.tasks.deposit_polling_task import run_deposit_polling


@dramatiq.actor(max_retries=3, time_limit=300_000)  # 5 min timeout
def monitor_deposits() -> None:
    """Check pending deposits against the gateway."""
    logger.info("Starting deposit monitoring...")

    try:
        result = asyncio.run(run_deposit_polling())
        logger.info(
            f"Deposit monitoring complete: {result['checked']} checked, "
            f"{result['confirmed']} confirmed"
        )

    except Exception as e:
        logger.exception(f"Deposit monitoring failed: {e}")
