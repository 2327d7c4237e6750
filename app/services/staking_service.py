"""
Staking service.

Creates stakes: validates plan bounds, debits the balance, schedules
the first payout and credits the upstream referral bonus, all in one
database transaction.
"""

from datetime import datetime, timedelta
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    NotificationType,
    StakeStatus,
    TransactionStatus,
    TransactionType,
)
from app.models.stake import Stake
from app.models.stake_payment import StakePayment
from app.repositories.stake_repository import StakeRepository
from app.repositories.staking_plan_repository import (
    StakingPlanRepository,
)
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.services.notification_service import NotificationService
from app.services.referral_service import ReferralService
from app.services.staking_plan_service import calculate_staking_returns
from app.utils.datetime_utils import to_naive_utc, utcnow
from app.utils.money import plain_amount, round2, to_decimal

PAYOUT_INTERVAL = timedelta(hours=24)

INSUFFICIENT_BALANCE = "Insufficient balance."


class StakingService:
    """Staking service for stake creation and queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize staking service."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.plan_repo = StakingPlanRepository(session)
        self.stake_repo = StakeRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.referral_service = ReferralService(session)
        self.notification_service = NotificationService(session)

    async def create_stake(
        self,
        user_id: int,
        plan_id: int,
        amount: Decimal | int | str,
        now: datetime | None = None,
    ) -> tuple[Stake | None, str | None]:
        """
        Create stake with balance deduction.

        Args:
            user_id: Staking user ID
            plan_id: Staking plan ID
            amount: Principal
            now: Creation time (defaults to current UTC)

        Returns:
            Tuple of (stake, error_message)
        """
        now = to_naive_utc(now) if now else utcnow()
        amount = to_decimal(amount)

        if not amount.is_finite() or amount <= 0:
            return None, "Amount must be positive."

        plan = await self.plan_repo.get_active(plan_id)
        if not plan:
            return None, "Plan not found."

        if amount < plan.min_amount:
            return None, f"Minimum investment is ${plain_amount(plan.min_amount)}."
        if plan.max_amount is not None and amount > plan.max_amount:
            return None, f"Maximum investment is ${plain_amount(plan.max_amount)}."

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            return None, "User not found."
        referrer_id = user.referrer_id
        user_label = user.username or user.email

        # Mutable site setting, read before the atomic unit
        bonus_percent = await self.referral_service.get_referral_bonus_percent()

        plan_name = plan.name
        end_date = now + timedelta(days=plan.duration_days)
        expected_return = round2(
            calculate_staking_returns(
                amount, plan.daily_roi, plan.duration_days
            ).total_return
        )
        referral_bonus = None

        try:
            # Fresh in-transaction balance check
            balance = await self.user_repo.get_balance(user_id, for_update=True)
            if balance is None or balance < amount:
                await self.session.rollback()
                return None, INSUFFICIENT_BALANCE

            # Conditional debit; a concurrent spend makes it affect 0 rows
            balances = await self.user_repo.decrement_balance(user_id, amount)
            if balances is None:
                await self.session.rollback()
                return None, INSUFFICIENT_BALANCE
            balance_before, balance_after = balances

            stake = await self.stake_repo.create(
                user_id=user_id,
                plan_id=plan.id,
                amount=amount,
                daily_roi=plan.daily_roi,
                total_roi=plan.total_roi,
                expected_return=expected_return,
                total_earned=Decimal("0"),
                status=StakeStatus.ACTIVE.value,
                start_date=now,
                end_date=end_date,
                next_process_at=now + PAYOUT_INTERVAL,
            )

            await self.transaction_repo.create(
                user_id=user_id,
                type=TransactionType.STAKING.value,
                amount=amount,
                balance_before=balance_before,
                balance_after=balance_after,
                status=TransactionStatus.COMPLETED.value,
                description=f"Staked ${plain_amount(amount)} in {plan_name}",
                reference_id=stake.id,
                reference_type="stake",
            )

            if referrer_id:
                referral_bonus = await self.referral_service.credit_referral_bonus(
                    referrer_id=referrer_id,
                    from_user_id=user_id,
                    stake_id=stake.id,
                    stake_amount=amount,
                    percent=bonus_percent,
                    description=(
                        f"Referral bonus from {user_label} "
                        f"staking in {plan_name}"
                    ),
                )

            await self.session.commit()

        except Exception as e:
            await self.session.rollback()
            logger.error(
                f"Failed to create stake for user {user_id}: {e}",
                extra={"user_id": user_id, "plan_id": plan_id},
            )
            raise

        logger.info(
            "Stake created",
            extra={
                "stake_id": stake.id,
                "user_id": user_id,
                "plan_id": plan_id,
                "amount": str(amount),
                "expected_return": str(expected_return),
            },
        )

        # Side effects after commit
        await self.notification_service.notify(
            user_id,
            NotificationType.STAKE_CREATED,
            "Stake Created",
            f"You have staked ${plain_amount(amount)} in {plan_name}. "
            f"Expected return: ${expected_return:.2f}.",
        )
        if referral_bonus is not None:
            await self.notification_service.notify(
                referral_bonus.user_id,
                NotificationType.REFERRAL_BONUS,
                "Referral Bonus Earned",
                f"You earned a ${referral_bonus.amount:.2f} referral bonus "
                "from a referred user's stake.",
            )

        return stake, None

    async def get_active_stakes(self, user_id: int) -> list[Stake]:
        """Get user's active stakes, newest first."""
        return await self.stake_repo.get_user_stakes(
            user_id, status=StakeStatus.ACTIVE.value
        )

    async def get_user_stakes(self, user_id: int) -> list[Stake]:
        """Get all user stakes, newest first."""
        return await self.stake_repo.get_user_stakes(user_id)

    async def get_stake_payments(self, stake_id: int) -> list[StakePayment]:
        """Get payout history of a stake."""
        return await self.stake_repo.get_payments(stake_id)
