"""
Deposit repository.

Data access layer for Deposit model.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.deposit import Deposit
from app.models.enums import DepositStatus
from app.repositories.base import BaseRepository


class DepositRepository(BaseRepository[Deposit]):
    """Deposit repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize deposit repository."""
        super().__init__(Deposit, session)

    async def get_by_user(
        self,
        user_id: int,
        status: Optional[str] = None,
    ) -> List[Deposit]:
        """
        Get deposits by user.

        Args:
            user_id: User ID
            status: Optional status filter

        Returns:
            List of deposits
        """
        filters: dict[str, int | str] = {"user_id": user_id}
        if status:
            filters["status"] = status

        return await self.find_by(**filters)

    async def get_by_payment_id(
        self, payment_id: str
    ) -> Optional[Deposit]:
        """
        Get deposit by gateway payment ID.

        Args:
            payment_id: Gateway payment ID

        Returns:
            Deposit or None
        """
        stmt = (
            select(Deposit)
            .where(Deposit.payment_id == payment_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_pending_deposits(
        self, limit: Optional[int] = None
    ) -> List[Deposit]:
        """
        Get pending deposits, oldest first.

        Args:
            limit: Optional batch size

        Returns:
            List of pending deposits
        """
        stmt = (
            select(Deposit)
            .where(Deposit.status == DepositStatus.PENDING.value)
            .order_by(Deposit.created_at.asc())
            .execution_options(populate_existing=True)
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def transition(
        self,
        deposit_id: int,
        to_status: str,
        confirmed_at: Optional[datetime] = None,
        **values: object,
    ) -> bool:
        """
        Move a PENDING deposit to a terminal status.

        Single conditional UPDATE ... WHERE status = 'pending'; only
        one caller can ever win the transition.

        Returns:
            True if this call performed the transition
        """
        if confirmed_at is not None:
            values["confirmed_at"] = confirmed_at
        affected = await self.update_where(
            Deposit.id == deposit_id,
            Deposit.status == DepositStatus.PENDING.value,
            status=to_status,
            **values,
        )
        return affected == 1
