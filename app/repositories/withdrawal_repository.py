"""
Withdrawal repository.

Data access layer for Withdrawal and WithdrawalCurrency models.
"""

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import WithdrawalStatus
from app.models.withdrawal import Withdrawal
from app.models.withdrawal_currency import WithdrawalCurrency
from app.repositories.base import BaseRepository


class WithdrawalRepository(BaseRepository[Withdrawal]):
    """Withdrawal repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal repository."""
        super().__init__(Withdrawal, session)

    async def get_user_withdrawals(
        self, user_id: int
    ) -> list[Withdrawal]:
        """Get user withdrawals, newest first."""
        stmt = (
            select(Withdrawal)
            .where(Withdrawal.user_id == user_id)
            .order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_pending(self) -> list[Withdrawal]:
        """Get pending withdrawals (admin queue), oldest first."""
        stmt = (
            select(Withdrawal)
            .where(Withdrawal.status == WithdrawalStatus.PENDING.value)
            .order_by(Withdrawal.created_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def transition(
        self,
        withdrawal_id: int,
        to_status: str,
        from_status: str = WithdrawalStatus.PENDING.value,
        **values: Any,
    ) -> bool:
        """
        Move a withdrawal out of from_status (PENDING by default).

        Returns:
            True if this call performed the transition
        """
        affected = await self.update_where(
            Withdrawal.id == withdrawal_id,
            Withdrawal.status == from_status,
            status=to_status,
            **values,
        )
        return affected == 1


class WithdrawalCurrencyRepository(BaseRepository[WithdrawalCurrency]):
    """WithdrawalCurrency repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal currency repository."""
        super().__init__(WithdrawalCurrency, session)

    async def get_active(
        self, currency_id: int
    ) -> Optional[WithdrawalCurrency]:
        """Get currency by ID only if it is active."""
        return await self.get_by(id=currency_id, is_active=True)
