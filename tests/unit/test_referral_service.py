"""
Unit tests for ReferralService.

Tests bonus percent lookup, crediting and statistics.
"""

from decimal import Decimal

import pytest

from app.models.enums import TransactionType
from app.repositories.transaction_repository import TransactionRepository
from app.services.referral_service import (
    REFERRAL_BONUS_SETTING_KEY,
    ReferralService,
)
from app.services.staking_service import StakingService


class TestReferralBonusPercent:
    """Tests for the bonus percent site setting."""

    @pytest.mark.asyncio
    async def test_default_when_missing(self, db_session):
        """No setting falls back to 5%."""
        percent = await ReferralService(db_session).get_referral_bonus_percent()
        assert percent == Decimal("5")

    @pytest.mark.asyncio
    async def test_setting_value_used(self, db_session, set_setting):
        """Numeric setting is used as-is."""
        await set_setting(REFERRAL_BONUS_SETTING_KEY, " 3.25 ")
        percent = await ReferralService(db_session).get_referral_bonus_percent()
        assert percent == Decimal("3.25")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["abc", "", "-1", "NaN", "Infinity"])
    async def test_invalid_setting_falls_back(
        self, db_session, set_setting, raw
    ):
        """Invalid values fall back to the default."""
        await set_setting(REFERRAL_BONUS_SETTING_KEY, raw)
        percent = await ReferralService(db_session).get_referral_bonus_percent()
        assert percent == Decimal("5")


class TestCreditReferralBonus:
    """Tests for crediting inside the caller's transaction."""

    @pytest.mark.asyncio
    @pytest.mark.critical
    async def test_credit_five_percent_of_200(
        self, db_session, referrer, test_user, get_balance
    ):
        """5% of 200 is 10."""
        service = ReferralService(db_session)

        earning = await service.credit_referral_bonus(
            referrer_id=referrer.id,
            from_user_id=test_user.id,
            stake_id=None,
            stake_amount=Decimal("200"),
            percent=Decimal("5"),
        )
        await db_session.commit()

        assert earning is not None
        assert earning.amount == Decimal("10")
        assert await get_balance(referrer.id) == Decimal("10")

        txs = await TransactionRepository(db_session).get_by_user(
            referrer.id, type=TransactionType.REFERRAL_BONUS.value
        )
        assert len(txs) == 1
        assert txs[0].reference_type == "referral_earning"
        assert txs[0].reference_id == earning.id
        assert txs[0].balance_before == Decimal("0")
        assert txs[0].balance_after == Decimal("10")
        assert txs[0].description == (
            f"Referral bonus 5% from user #{test_user.id} stake of $200.00"
        )

    @pytest.mark.asyncio
    async def test_bonus_rounds_to_cents(
        self, db_session, referrer, test_user, get_balance
    ):
        """5% of 123.45 is 6.17 (6.1725 rounded half up)."""
        earning = await ReferralService(db_session).credit_referral_bonus(
            referrer.id, test_user.id, None, Decimal("123.45"), Decimal("5")
        )
        await db_session.commit()

        assert earning.amount == Decimal("6.17")
        assert await get_balance(referrer.id) == Decimal("6.17")

    @pytest.mark.asyncio
    async def test_tiny_bonus_skipped(self, db_session, referrer, test_user):
        """A bonus rounding to zero writes nothing."""
        earning = await ReferralService(db_session).credit_referral_bonus(
            referrer.id, test_user.id, None, Decimal("0.05"), Decimal("5")
        )
        assert earning is None

    @pytest.mark.asyncio
    async def test_missing_referrer_skipped(self, db_session, test_user):
        """Deleted referrer gets nothing."""
        earning = await ReferralService(db_session).credit_referral_bonus(
            9999, test_user.id, None, Decimal("200"), Decimal("5")
        )
        assert earning is None


class TestReferralStats:
    """Tests for referral statistics."""

    @pytest.mark.asyncio
    async def test_get_referral_stats(
        self, db_session, create_user_helper, referrer, test_plan
    ):
        """Counts referrals and sums earnings."""
        first = await create_user_helper(balance=1000, referrer_id=referrer.id)
        second = await create_user_helper(balance=1000, referrer_id=referrer.id)
        staking = StakingService(db_session)
        await staking.create_stake(first.id, test_plan.id, 200)
        await staking.create_stake(second.id, test_plan.id, 300)

        stats = await ReferralService(db_session).get_referral_stats(referrer.id)

        assert stats["total_referrals"] == 2
        assert stats["total_earned"] == Decimal("25")

    @pytest.mark.asyncio
    async def test_stats_without_referrals(self, db_session, test_user):
        """Empty stats."""
        stats = await ReferralService(db_session).get_referral_stats(
            test_user.id
        )
        assert stats["total_referrals"] == 0
        assert stats["total_earned"] == Decimal("0")
