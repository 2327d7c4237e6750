"""
Stake payout task.

Pays daily ROI on due stakes. Scheduled every few minutes; each stake
is paid once per 24h cycle no matter how often the task runs.
"""

import asyncio

import dramatiq
from loguru import logger

from app.tasks.stake_payout_task import run_stake_payouts


@dramatiq.actor(max_retries=3, time_limit=600_000)  # 10 min timeout
def process_stakes() -> dict:
    """
    Process due stake payouts.

    Returns:
        Payout summary dict
    """
    logger.info("Starting stake payout processing...")

    try:
        result = asyncio.run(run_stake_payouts())

        logger.info(
            f"Stake payouts complete: {result['processed']} processed, "
            f"{result['completed']} completed, {result['skipped']} skipped"
        )
        if result["errors"]:
            logger.warning(
                f"Stake payout errors: {len(result['errors'])}",
                extra={"errors": result["errors"]},
            )
        return result

    except Exception as e:
        logger.exception(f"Stake payout processing failed: {e}")
        return {"success": False, "error": str(e)}
