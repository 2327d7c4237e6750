"""
Staking plan service.

Plan catalogue management and return projections.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.staking_plan import StakingPlan
from app.repositories.staking_plan_repository import (
    StakingPlanRepository,
)
from app.utils.money import HUNDRED, to_decimal

ROI_PRECISION = Decimal("0.0001")

# Default plan catalogue (name, min, max, days, daily ROI %)
DEFAULT_PLANS: list[dict[str, Any]] = [
    {
        "name": "Starter",
        "description": "Entry plan for new stakers.",
        "min_amount": Decimal("50"),
        "max_amount": Decimal("999"),
        "duration_days": 7,
        "daily_roi": Decimal("1.5"),
        "sort_order": 1,
    },
    {
        "name": "Silver",
        "description": "Balanced returns over two weeks.",
        "min_amount": Decimal("1000"),
        "max_amount": Decimal("4999"),
        "duration_days": 14,
        "daily_roi": Decimal("2"),
        "sort_order": 2,
        "is_featured": True,
    },
    {
        "name": "Gold",
        "description": "Higher daily ROI for a month.",
        "min_amount": Decimal("5000"),
        "max_amount": Decimal("24999"),
        "duration_days": 30,
        "daily_roi": Decimal("2.5"),
        "sort_order": 3,
    },
    {
        "name": "Diamond",
        "description": "Top tier plan.",
        "min_amount": Decimal("25000"),
        "max_amount": Decimal("999999"),
        "duration_days": 60,
        "daily_roi": Decimal("3"),
        "sort_order": 4,
    },
]


@dataclass(frozen=True)
class StakingReturns:
    """Projected returns for a stake."""

    daily_profit: Decimal
    total_profit: Decimal
    total_return: Decimal


def calculate_total_roi(
    daily_roi: Decimal | float | str, duration_days: int
) -> Decimal:
    """Total ROI percent over the plan, rounded to 4 places."""
    return (to_decimal(daily_roi) * duration_days).quantize(
        ROI_PRECISION, rounding=ROUND_HALF_UP
    )


def calculate_staking_returns(
    amount: Decimal | float | str,
    daily_roi: Decimal | float | str,
    duration_days: int,
) -> StakingReturns:
    """
    Project stake returns (unrounded).

    Args:
        amount: Principal
        daily_roi: Daily ROI percent
        duration_days: Plan length in days

    Returns:
        StakingReturns
    """
    daily_profit = to_decimal(amount) * to_decimal(daily_roi) / HUNDRED
    total_profit = daily_profit * duration_days
    return StakingReturns(
        daily_profit=daily_profit,
        total_profit=total_profit,
        total_return=to_decimal(amount) + total_profit,
    )


class StakingPlanService:
    """Staking plan catalogue service."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize staking plan service."""
        self.session = session
        self.plan_repo = StakingPlanRepository(session)

    async def list_active_plans(self) -> list[StakingPlan]:
        """Get active plans for display."""
        return await self.plan_repo.list_active()

    async def create_plan(
        self,
        name: str,
        daily_roi: Decimal,
        duration_days: int,
        min_amount: Decimal,
        max_amount: Decimal | None = None,
        **extra: Any,
    ) -> StakingPlan:
        """
        Create plan with computed total ROI.

        Raises:
            ValueError: Invalid plan terms
        """
        daily_roi = to_decimal(daily_roi)
        min_amount = to_decimal(min_amount)
        if daily_roi <= 0:
            raise ValueError("Daily ROI must be positive")
        if duration_days <= 0:
            raise ValueError("Duration must be positive")
        if min_amount <= 0:
            raise ValueError("Minimum amount must be positive")
        if max_amount is not None and to_decimal(max_amount) < min_amount:
            raise ValueError("Maximum amount must be >= minimum amount")

        plan = await self.plan_repo.create(
            name=name,
            daily_roi=daily_roi,
            duration_days=duration_days,
            total_roi=calculate_total_roi(daily_roi, duration_days),
            min_amount=min_amount,
            max_amount=max_amount,
            **extra,
        )
        await self.session.commit()

        logger.info(
            f"Staking plan created: {name}",
            extra={"plan_id": plan.id, "daily_roi": str(daily_roi)},
        )
        return plan

    async def update_plan(
        self, plan_id: int, **changes: Any
    ) -> StakingPlan | None:
        """
        Update plan; total ROI is recomputed when ROI terms change.

        Existing stakes keep the terms copied at creation time.

        Returns:
            Updated plan or None if not found
        """
        plan = await self.plan_repo.get_by_id(plan_id)
        if not plan:
            return None

        if "daily_roi" in changes or "duration_days" in changes:
            daily_roi = changes.get("daily_roi", plan.daily_roi)
            duration_days = changes.get("duration_days", plan.duration_days)
            changes["total_roi"] = calculate_total_roi(
                daily_roi, duration_days
            )

        plan = await self.plan_repo.update(plan_id, **changes)
        await self.session.commit()
        return plan

    async def seed_default_plans(self) -> int:
        """
        Create default plans if the catalogue is empty.

        Returns:
            Number of plans created
        """
        if await self.plan_repo.count() > 0:
            return 0
        for data in DEFAULT_PLANS:
            data = dict(data)
            await self.plan_repo.create(
                total_roi=calculate_total_roi(
                    data["daily_roi"], data["duration_days"]
                ),
                **data,
            )
        await self.session.commit()
        logger.info(f"Seeded {len(DEFAULT_PLANS)} staking plans")
        return len(DEFAULT_PLANS)
