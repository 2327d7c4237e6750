"""
Stake repository.

Data access layer for Stake and StakePayment models.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import StakeStatus
from app.models.stake import Stake
from app.models.stake_payment import StakePayment
from app.repositories.base import BaseRepository


class StakeRepository(BaseRepository[Stake]):
    """Stake repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize stake repository."""
        super().__init__(Stake, session)

    async def find_due_stakes(
        self, now: datetime, limit: int | None = None
    ) -> list[Stake]:
        """
        Find active stakes whose next payout is due.

        Rows are re-read from the database (populate_existing) so a
        long-lived session never sees a stale schedule.

        Args:
            now: Processing time (naive UTC)
            limit: Optional batch size

        Returns:
            Due stakes ordered by next_process_at
        """
        stmt = (
            select(Stake)
            .where(
                Stake.status == StakeStatus.ACTIVE.value,
                Stake.next_process_at.is_not(None),
                Stake.next_process_at <= now,
            )
            .order_by(Stake.next_process_at.asc(), Stake.id.asc())
            .execution_options(populate_existing=True)
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.unique().scalars().all())

    async def settle_cycle(
        self,
        stake_id: int,
        observed_next_process_at: datetime,
        *,
        total_earned: Decimal,
        next_process_at: datetime | None,
        last_processed: datetime,
        status: str,
    ) -> bool:
        """
        Advance a stake by one payout cycle, guarded by observed state.

        The update only applies when the stake is still ACTIVE and its
        next_process_at still equals the value the caller read. A
        concurrent run that already settled this cycle makes it a no-op.

        Returns:
            True if this call claimed the cycle
        """
        affected = await self.update_where(
            Stake.id == stake_id,
            Stake.status == StakeStatus.ACTIVE.value,
            Stake.next_process_at == observed_next_process_at,
            total_earned=total_earned,
            next_process_at=next_process_at,
            last_processed=last_processed,
            status=status,
        )
        return affected == 1

    async def get_user_stakes(
        self, user_id: int, status: str | None = None
    ) -> list[Stake]:
        """
        Get user stakes, newest first.

        Args:
            user_id: User ID
            status: Optional status filter

        Returns:
            List of stakes
        """
        stmt = select(Stake).where(Stake.user_id == user_id)
        if status:
            stmt = stmt.where(Stake.status == status)
        stmt = stmt.order_by(
            Stake.created_at.desc(), Stake.id.desc()
        ).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.unique().scalars().all())

    async def add_payment(
        self, stake_id: int, amount: Decimal, date: datetime
    ) -> StakePayment:
        """Append payout record for a stake."""
        payment = StakePayment(stake_id=stake_id, amount=amount, date=date)
        self.session.add(payment)
        await self.session.flush()
        return payment

    async def get_payments(self, stake_id: int) -> list[StakePayment]:
        """
        Get payout records for a stake, oldest first.

        Args:
            stake_id: Stake ID

        Returns:
            List of payments
        """
        stmt = (
            select(StakePayment)
            .where(StakePayment.stake_id == stake_id)
            .order_by(StakePayment.date.asc(), StakePayment.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
