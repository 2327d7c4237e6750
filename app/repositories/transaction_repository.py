"""
Transaction repository.

Data access layer for Transaction model.
"""

from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    DEBIT_TRANSACTION_TYPES,
    LEDGER_TRANSACTION_STATUSES,
)
from app.models.transaction import Transaction
from app.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Transaction repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction repository."""
        super().__init__(Transaction, session)

    async def get_by_user(
        self,
        user_id: int,
        type: str | None = None,
        status: str | None = None,
    ) -> list[Transaction]:
        """
        Get transactions by user, oldest first.

        Args:
            user_id: User ID
            type: Optional transaction type filter
            status: Optional status filter

        Returns:
            List of transactions
        """
        stmt = select(Transaction).where(Transaction.user_id == user_id)
        if type:
            stmt = stmt.where(Transaction.type == type)
        if status:
            stmt = stmt.where(Transaction.status == status)
        stmt = stmt.order_by(Transaction.id.asc()).execution_options(
            populate_existing=True
        )

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_reference(
        self, reference_type: str, reference_id: int
    ) -> list[Transaction]:
        """
        Get transactions linked to an entity.

        Args:
            reference_type: stake, deposit, withdrawal, ...
            reference_id: Entity ID

        Returns:
            List of linked transactions
        """
        return await self.find_by(
            reference_type=reference_type, reference_id=reference_id
        )

    async def set_status_by_reference(
        self,
        reference_type: str,
        reference_id: int,
        from_status: str,
        to_status: str,
        tx_hash: str | None = None,
    ) -> int:
        """
        Move linked transactions from one status to another.

        Returns:
            Number of transactions updated
        """
        values: dict[str, str] = {"status": to_status}
        if tx_hash:
            values["tx_hash"] = tx_hash
        return await self.update_where(
            Transaction.reference_type == reference_type,
            Transaction.reference_id == reference_id,
            Transaction.status == from_status,
            **values,
        )

    async def get_ledger_balances(self) -> dict[int, Decimal]:
        """
        Signed sum of ledger-counted transactions per user.

        Debit types count negative, everything else positive.
        Only PENDING and COMPLETED rows are reflected in balances.

        Returns:
            Mapping user_id -> expected balance
        """
        signed = case(
            (
                Transaction.type.in_(
                    [t.value for t in DEBIT_TRANSACTION_TYPES]
                ),
                -Transaction.amount,
            ),
            else_=Transaction.amount,
        )
        stmt = (
            select(Transaction.user_id, func.sum(signed))
            .where(
                Transaction.status.in_(
                    [s.value for s in LEDGER_TRANSACTION_STATUSES]
                )
            )
            .group_by(Transaction.user_id)
        )
        result = await self.session.execute(stmt)
        return {
            user_id: Decimal(str(total or 0))
            for user_id, total in result.all()
        }
