"""
Referral service.

Single-level referral bonus paid to the referrer when a referred user
stakes.
"""

from decimal import Decimal, InvalidOperation

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.enums import (
    ReferralEarningType,
    TransactionStatus,
    TransactionType,
)
from app.models.referral_earning import ReferralEarning
from app.repositories.referral_earning_repository import (
    ReferralEarningRepository,
)
from app.repositories.system_setting_repository import (
    SystemSettingRepository,
)
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.utils.money import format_usd, percent_of

REFERRAL_BONUS_SETTING_KEY = "referral_bonus_percent"


class ReferralService:
    """Referral service for bonus percent lookup and crediting."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral service."""
        self.session = session
        self.earning_repo = ReferralEarningRepository(session)
        self.settings_repo = SystemSettingRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.user_repo = UserRepository(session)

    async def get_referral_bonus_percent(self) -> Decimal:
        """
        Get referral bonus percent from site settings.

        Missing or non-numeric values fall back to the configured
        default (5%).

        Returns:
            Percent (e.g. Decimal("5"))
        """
        default = Decimal(str(settings.referral_bonus_percent_default))
        raw = await self.settings_repo.get_value(REFERRAL_BONUS_SETTING_KEY)
        if raw is None:
            return default
        try:
            value = Decimal(raw.strip())
        except (InvalidOperation, AttributeError):
            logger.warning(
                f"Invalid {REFERRAL_BONUS_SETTING_KEY} setting {raw!r}, "
                f"using default {default}%"
            )
            return default
        if not value.is_finite() or value < 0:
            logger.warning(
                f"Invalid {REFERRAL_BONUS_SETTING_KEY} setting {raw!r}, "
                f"using default {default}%"
            )
            return default
        return value

    async def credit_referral_bonus(
        self,
        referrer_id: int,
        from_user_id: int,
        stake_id: int,
        stake_amount: Decimal,
        percent: Decimal,
        description: str | None = None,
    ) -> ReferralEarning | None:
        """
        Credit referral bonus inside the caller's transaction.

        Does not commit. Writes ReferralEarning, increments the
        referrer balance and appends a REFERRAL_BONUS transaction.

        Args:
            referrer_id: Referrer user ID
            from_user_id: Staking (referred) user ID
            stake_id: Source stake ID
            stake_amount: Staked principal
            percent: Bonus percent
            description: Ledger line description

        Returns:
            Created earning, or None if the bonus rounds to zero or the
            referrer no longer exists
        """
        bonus = percent_of(stake_amount, percent)
        if bonus <= 0:
            return None

        balances = await self.user_repo.increment_balance(referrer_id, bonus)
        if balances is None:
            logger.warning(
                f"Referrer {referrer_id} not found, skipping referral bonus"
            )
            return None
        balance_before, balance_after = balances

        earning = await self.earning_repo.create(
            user_id=referrer_id,
            from_user_id=from_user_id,
            stake_id=stake_id,
            amount=bonus,
            percentage=percent,
            type=ReferralEarningType.STAKE.value,
        )
        await self.transaction_repo.create(
            user_id=referrer_id,
            type=TransactionType.REFERRAL_BONUS.value,
            amount=bonus,
            balance_before=balance_before,
            balance_after=balance_after,
            status=TransactionStatus.COMPLETED.value,
            description=description or (
                f"Referral bonus {percent}% from user #{from_user_id} "
                f"stake of {format_usd(stake_amount)}"
            ),
            reference_id=earning.id,
            reference_type="referral_earning",
        )

        logger.info(
            "Referral bonus credited",
            extra={
                "referrer_id": referrer_id,
                "from_user_id": from_user_id,
                "stake_id": stake_id,
                "amount": str(bonus),
            },
        )
        return earning

    async def get_referral_stats(self, user_id: int) -> dict:
        """
        Get referral stats of a user.

        Returns:
            Dict with referral count and total earned
        """
        referrals = await self.user_repo.get_referrals(user_id)
        total = await self.earning_repo.get_total_for_referrer(user_id)
        return {
            "total_referrals": len(referrals),
            "total_earned": total,
        }
