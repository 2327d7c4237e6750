"""
StakingPlan repository.

Data access layer for StakingPlan model.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.staking_plan import StakingPlan
from app.repositories.base import BaseRepository


class StakingPlanRepository(BaseRepository[StakingPlan]):
    """StakingPlan repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize staking plan repository."""
        super().__init__(StakingPlan, session)

    async def get_active(self, plan_id: int) -> Optional[StakingPlan]:
        """
        Get plan by ID only if it is active.

        Args:
            plan_id: Plan ID

        Returns:
            Active plan or None
        """
        return await self.get_by(id=plan_id, is_active=True)

    async def list_active(self) -> list[StakingPlan]:
        """
        Get active plans, featured first, then by sort order.

        Returns:
            List of active plans
        """
        stmt = (
            select(StakingPlan)
            .where(StakingPlan.is_active.is_(True))
            .order_by(
                StakingPlan.is_featured.desc(),
                StakingPlan.sort_order.asc(),
                StakingPlan.id.asc(),
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
