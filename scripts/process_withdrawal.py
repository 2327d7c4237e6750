#!/usr/bin/env python3
"""
Admin withdrawal processing.

Usage:
    python3 scripts/process_withdrawal.py list
    python3 scripts/process_withdrawal.py approve <withdrawal_id>
    python3 scripts/process_withdrawal.py reject <withdrawal_id> [--reason TEXT]
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from app.config.database import async_session_maker, close_db
from app.services.wallet import WestWalletClient
from app.services.withdrawal_service import WithdrawalService

# Configure logger
logger.remove()
logger.add(sys.stderr, level="INFO")


async def list_pending() -> None:
    """Print pending withdrawals."""
    async with async_session_maker() as session:
        withdrawals = await WithdrawalService(session).get_pending_withdrawals()

    if not withdrawals:
        print("No pending withdrawals")
        return
    for w in withdrawals:
        print(
            f"#{w.id} user={w.user_id} {w.amount} USD -> {w.currency} "
            f"(net {w.net_amount}) {w.wallet_address} [{w.created_at}]"
        )


async def process(action: str, withdrawal_id: int, reason: str | None) -> bool:
    """Approve or reject a withdrawal."""
    async with async_session_maker() as session:
        service = WithdrawalService(session)
        if action == "approve":
            ok, error = await service.approve_withdrawal(
                withdrawal_id, WestWalletClient()
            )
        else:
            ok, error = await service.reject_withdrawal(withdrawal_id, reason)

    if ok:
        logger.info(f"✅ Withdrawal {withdrawal_id} {action}d")
    else:
        logger.error(f"❌ Withdrawal {withdrawal_id}: {error}")
    return ok


async def main() -> None:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Process withdrawals")
    parser.add_argument("action", choices=["list", "approve", "reject"])
    parser.add_argument("withdrawal_id", type=int, nargs="?")
    parser.add_argument("--reason", type=str, default=None)
    args = parser.parse_args()

    try:
        if args.action == "list":
            await list_pending()
            return
        if args.withdrawal_id is None:
            parser.error("withdrawal_id is required")
        ok = await process(args.action, args.withdrawal_id, args.reason)
    finally:
        await close_db()

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
