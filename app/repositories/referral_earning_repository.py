"""
ReferralEarning repository.

Data access layer for ReferralEarning model.
"""

from decimal import Decimal
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.referral_earning import ReferralEarning
from app.repositories.base import BaseRepository


class ReferralEarningRepository(BaseRepository[ReferralEarning]):
    """ReferralEarning repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral earning repository."""
        super().__init__(ReferralEarning, session)

    async def get_for_referrer(
        self, user_id: int
    ) -> List[ReferralEarning]:
        """
        Get earnings credited to a referrer, newest first.

        Args:
            user_id: Referrer user ID

        Returns:
            List of earnings
        """
        stmt = (
            select(ReferralEarning)
            .where(ReferralEarning.user_id == user_id)
            .order_by(ReferralEarning.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_total_for_referrer(self, user_id: int) -> Decimal:
        """
        Get total referral earnings of a referrer.

        Args:
            user_id: Referrer user ID

        Returns:
            Total amount
        """
        stmt = select(func.sum(ReferralEarning.amount)).where(
            ReferralEarning.user_id == user_id
        )
        result = await self.session.execute(stmt)
        total = result.scalar()
        return Decimal(str(total)) if total is not None else Decimal("0")
