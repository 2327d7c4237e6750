"""
Payout service.

Daily stake payout processor. Safe to invoke repeatedly and from
overlapping runs: every stake cycle is claimed through a conditional
update on the schedule the run observed, so a cycle is paid at most
once.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import StrEnum

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    NotificationType,
    StakeStatus,
    TransactionStatus,
    TransactionType,
)
from app.repositories.stake_repository import StakeRepository
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.services.email_service import STAKE_COMPLETED, EmailService
from app.services.notification_service import NotificationService
from app.utils.datetime_utils import to_naive_utc, utcnow
from app.utils.money import HUNDRED, format_usd, round2

PAYOUT_INTERVAL = timedelta(hours=24)


class CycleOutcome(StrEnum):
    """Result of processing one stake."""

    PROCESSED = "processed"
    COMPLETED = "completed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DueStake:
    """Snapshot of a due stake, read before any mutation."""

    id: int
    user_id: int
    amount: Decimal
    daily_roi: Decimal
    total_earned: Decimal
    end_date: datetime
    next_process_at: datetime
    plan_name: str


@dataclass
class PayoutReport:
    """Summary of one payout run."""

    timestamp: datetime
    total: int = 0
    processed: int = 0
    completed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        """Serialize for JSON responses and task results."""
        return {
            "total": self.total,
            "processed": self.processed,
            "completed": self.completed,
            "skipped": self.skipped,
            "errors": list(self.errors),
            "timestamp": self.timestamp.isoformat(),
        }


class PayoutService:
    """Stake payout processor."""

    def __init__(
        self,
        session: AsyncSession,
        email_service: EmailService | None = None,
    ) -> None:
        """Initialize payout service."""
        self.session = session
        self.stake_repo = StakeRepository(session)
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.notification_service = NotificationService(session)
        self.email_service = email_service or EmailService()

    async def process_due_stakes(
        self, now: datetime | None = None
    ) -> PayoutReport:
        """
        Pay one day of ROI on every due stake.

        Each stake is its own transaction; a failure is rolled back,
        logged and reported without affecting the others.

        Args:
            now: Processing time (defaults to current UTC)

        Returns:
            PayoutReport
        """
        now = to_naive_utc(now) if now else utcnow()
        report = PayoutReport(timestamp=now)

        stakes = await self.stake_repo.find_due_stakes(now)
        due = [
            DueStake(
                id=stake.id,
                user_id=stake.user_id,
                amount=stake.amount,
                daily_roi=stake.daily_roi,
                total_earned=stake.total_earned,
                end_date=stake.end_date,
                next_process_at=stake.next_process_at,
                plan_name=stake.plan.name if stake.plan else "",
            )
            for stake in stakes
            if stake.next_process_at is not None
        ]
        # Close the read transaction before per-stake units
        await self.session.commit()

        report.total = len(due)
        if not due:
            logger.debug("No stakes due for payout")
            return report

        logger.info(f"Processing {len(due)} due stakes")

        for stake in due:
            try:
                outcome = await self._process_stake(stake, now)
            except Exception as e:
                await self.session.rollback()
                logger.error(
                    f"Stake payout failed for stake {stake.id}: {e}",
                    extra={"stake_id": stake.id, "user_id": stake.user_id},
                )
                report.errors.append(f"Stake {stake.id}: {e}")
                continue

            if outcome == CycleOutcome.SKIPPED:
                report.skipped += 1
                continue

            report.processed += 1
            if outcome == CycleOutcome.COMPLETED:
                report.completed += 1
                await self._notify_completed(stake)

        logger.info(
            "Stake payout run finished",
            extra={
                "total": report.total,
                "processed": report.processed,
                "completed": report.completed,
                "skipped": report.skipped,
                "errors": len(report.errors),
            },
        )
        return report

    async def _process_stake(
        self, stake: DueStake, now: datetime
    ) -> CycleOutcome:
        """Apply one payout cycle to a stake in a single transaction."""
        daily_profit = round2(stake.amount * stake.daily_roi / HUNDRED)
        is_last_payment = stake.end_date <= now
        new_total_earned = round2(stake.total_earned + daily_profit)

        claimed = await self.stake_repo.settle_cycle(
            stake.id,
            stake.next_process_at,
            total_earned=new_total_earned,
            next_process_at=None if is_last_payment else now + PAYOUT_INTERVAL,
            last_processed=now,
            status=(
                StakeStatus.COMPLETED.value
                if is_last_payment
                else StakeStatus.ACTIVE.value
            ),
        )
        if not claimed:
            await self.session.rollback()
            logger.info(
                f"Stake {stake.id} cycle already settled by another run, skipping"
            )
            return CycleOutcome.SKIPPED

        await self.stake_repo.add_payment(stake.id, daily_profit, now)

        if daily_profit > 0:
            balances = await self.user_repo.increment_balance(
                stake.user_id, daily_profit
            )
            if balances is None:
                raise ValueError(f"User {stake.user_id} not found")
            balance_before, balance_after = balances

            description = f"Staking return for stake #{stake.id}"
            if is_last_payment:
                description += " (final)"
            await self.transaction_repo.create(
                user_id=stake.user_id,
                type=TransactionType.STAKING_RETURN.value,
                amount=daily_profit,
                balance_before=balance_before,
                balance_after=balance_after,
                status=TransactionStatus.COMPLETED.value,
                description=description,
                reference_id=stake.id,
                reference_type="stake",
            )

        await self.session.commit()

        logger.info(
            "Stake payout applied",
            extra={
                "stake_id": stake.id,
                "user_id": stake.user_id,
                "amount": str(daily_profit),
                "total_earned": str(new_total_earned),
                "completed": is_last_payment,
            },
        )
        if is_last_payment:
            return CycleOutcome.COMPLETED
        return CycleOutcome.PROCESSED

    async def _notify_completed(self, stake: DueStake) -> None:
        """Completion notification and email (non-fatal)."""
        # Final total_earned as written by _process_stake
        earned = round2(
            stake.total_earned + round2(stake.amount * stake.daily_roi / HUNDRED)
        )
        await self.notification_service.notify(
            stake.user_id,
            NotificationType.STAKE_COMPLETED,
            "Stake Completed",
            f"Your stake of {format_usd(stake.amount)} in {stake.plan_name} "
            f"has completed. Total earned: {format_usd(earned)}.",
        )
        try:
            user = await self.user_repo.get_by_id(stake.user_id)
            if user:
                await self.email_service.send_templated_email(
                    user.email,
                    STAKE_COMPLETED,
                    {
                        "name": user.username,
                        "plan": stake.plan_name,
                        "amount": format_usd(stake.amount),
                        "earned": format_usd(earned),
                    },
                )
        except Exception as e:
            logger.warning(
                f"Failed to send stake completion email for stake {stake.id}: {e}"
            )
