"""
Reconciliation service.

Verifies balance conservation: every user's balance must equal the
signed sum of their ledger-counted (PENDING and COMPLETED)
transactions.
"""

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.transaction_repository import TransactionRepository

# Tolerance for Decimal/float storage drift (SQLite stores floats)
BALANCE_TOLERANCE = Decimal("0.000001")


@dataclass(frozen=True)
class BalanceMismatch:
    """User whose balance diverges from the ledger."""

    user_id: int
    balance: Decimal
    ledger_balance: Decimal

    @property
    def discrepancy(self) -> Decimal:
        """Balance minus ledger sum."""
        return self.balance - self.ledger_balance


class ReconciliationService:
    """Service for financial reconciliation."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize reconciliation service."""
        self.session = session
        self.transaction_repo = TransactionRepository(session)

    async def find_balance_mismatches(self) -> list[BalanceMismatch]:
        """
        Compare every balance with its ledger sum.

        Returns:
            Users whose balance does not match the ledger
        """
        ledger = await self.transaction_repo.get_ledger_balances()

        result = await self.session.execute(select(User.id, User.balance))
        mismatches = []
        for user_id, balance in result.all():
            balance = Decimal(str(balance))
            expected = ledger.get(user_id, Decimal("0"))
            if abs(balance - expected) > BALANCE_TOLERANCE:
                mismatches.append(
                    BalanceMismatch(
                        user_id=user_id,
                        balance=balance,
                        ledger_balance=expected,
                    )
                )
        return mismatches

    async def perform_reconciliation(self) -> dict:
        """
        Run reconciliation and log any mismatch.

        Returns:
            Dict with reconciliation results
        """
        logger.info("Starting balance reconciliation")

        mismatches = await self.find_balance_mismatches()
        total_discrepancy = sum(
            (m.discrepancy for m in mismatches), Decimal("0")
        )

        result = {
            "success": True,
            "mismatched_users": len(mismatches),
            "total_discrepancy": float(total_discrepancy),
            "critical": bool(mismatches),
            "mismatches": [
                {
                    "user_id": m.user_id,
                    "balance": float(m.balance),
                    "ledger_balance": float(m.ledger_balance),
                    "discrepancy": float(m.discrepancy),
                }
                for m in mismatches
            ],
        }

        if mismatches:
            logger.error(
                f"CRITICAL: {len(mismatches)} balances diverge from the ledger "
                f"(total discrepancy {total_discrepancy})",
                extra={"user_ids": [m.user_id for m in mismatches]},
            )
        else:
            logger.info("Reconciliation complete: all balances match the ledger")

        return result
