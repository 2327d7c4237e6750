"""
Deposit polling task.

Backstop for missed gateway callbacks: polls the gateway for every
pending deposit and settles the ones that reached a final state.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.enums import DepositStatus
from app.services.deposit_service import DepositService
from app.services.wallet import NowPaymentsClient, PaymentGateway

# Deposits polled per run
POLL_BATCH_SIZE = 100


async def run_deposit_polling(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    gateway: PaymentGateway | None = None,
) -> dict:
    """
    Poll pending gateway deposits.

    Args:
        session_maker: Session factory (defaults to the app factory)
        gateway: Payment gateway client (defaults to NOWPayments)

    Returns:
        Dict with checked, confirmed and failed counts
    """
    if session_maker is None:
        from app.config.database import async_session_maker

        session_maker = async_session_maker
    gateway = gateway or NowPaymentsClient()

    result = {"checked": 0, "confirmed": 0, "failed": 0, "errors": 0}

    async with session_maker() as session:
        deposit_service = DepositService(session)
        pending = await deposit_service.get_pending_deposits(limit=POLL_BATCH_SIZE)
        deposit_ids = [d.id for d in pending if d.payment_id]
        await session.commit()

        for deposit_id in deposit_ids:
            result["checked"] += 1
            try:
                status = await deposit_service.refresh_deposit_status(
                    deposit_id, gateway
                )
            except Exception as e:
                await session.rollback()
                result["errors"] += 1
                logger.error(f"Error polling deposit {deposit_id}: {e}")
                continue

            if status == DepositStatus.CONFIRMED.value:
                result["confirmed"] += 1
            elif status == DepositStatus.FAILED.value:
                result["failed"] += 1

    if result["checked"]:
        logger.info(
            f"Deposit polling: checked={result['checked']}, "
            f"confirmed={result['confirmed']}, failed={result['failed']}"
        )
    return result
