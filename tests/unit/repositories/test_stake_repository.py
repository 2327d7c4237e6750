"""
Unit tests for StakeRepository.

Tests due-stake selection and the guarded cycle update.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from app.models.enums import StakeStatus
from app.models.stake import Stake
from app.repositories.stake_repository import StakeRepository
from tests.helpers.wallet_fakes import T0


async def _add_stake(session, user, plan, next_process_at, status="active"):
    stake = Stake(
        user_id=user.id,
        plan_id=plan.id,
        amount=Decimal("500"),
        daily_roi=plan.daily_roi,
        total_roi=plan.total_roi,
        expected_return=Decimal("515"),
        status=status,
        start_date=T0,
        end_date=T0 + timedelta(days=plan.duration_days),
        next_process_at=next_process_at,
    )
    session.add(stake)
    await session.commit()
    return stake


class TestFindDueStakes:
    """Tests for due-stake selection."""

    @pytest.mark.asyncio
    async def test_only_active_and_due(
        self, db_session, test_user, test_plan
    ):
        """Future, completed and unscheduled stakes are excluded."""
        now = T0 + timedelta(days=1)
        due = await _add_stake(db_session, test_user, test_plan, now)
        await _add_stake(
            db_session, test_user, test_plan, now + timedelta(seconds=1)
        )
        await _add_stake(
            db_session,
            test_user,
            test_plan,
            now,
            status=StakeStatus.COMPLETED.value,
        )
        await _add_stake(db_session, test_user, test_plan, None)

        stakes = await StakeRepository(db_session).find_due_stakes(now)

        assert [s.id for s in stakes] == [due.id]


class TestSettleCycle:
    """Tests for the compare-and-set cycle update."""

    @pytest.mark.asyncio
    @pytest.mark.critical
    async def test_second_claim_of_same_cycle_fails(
        self, db_session, test_user, test_plan
    ):
        """Only the first claim on an observed schedule applies."""
        observed = T0 + timedelta(days=1)
        stake = await _add_stake(db_session, test_user, test_plan, observed)
        repo = StakeRepository(db_session)

        claim = {
            "total_earned": Decimal("5"),
            "next_process_at": observed + timedelta(days=1),
            "last_processed": observed,
            "status": StakeStatus.ACTIVE.value,
        }
        assert await repo.settle_cycle(stake.id, observed, **claim) is True
        assert await repo.settle_cycle(stake.id, observed, **claim) is False
        await db_session.commit()

        stake = await repo.get_by_id(stake.id, fresh=True)
        assert stake.total_earned == Decimal("5")
        assert stake.next_process_at == observed + timedelta(days=1)

    @pytest.mark.asyncio
    async def test_completed_stake_not_claimed(
        self, db_session, test_user, test_plan
    ):
        """Completed stakes are terminal."""
        observed = T0 + timedelta(days=1)
        stake = await _add_stake(
            db_session,
            test_user,
            test_plan,
            observed,
            status=StakeStatus.COMPLETED.value,
        )

        claimed = await StakeRepository(db_session).settle_cycle(
            stake.id,
            observed,
            total_earned=Decimal("5"),
            next_process_at=None,
            last_processed=observed,
            status=StakeStatus.COMPLETED.value,
        )
        assert claimed is False

    @pytest.mark.asyncio
    async def test_payments_oldest_first(
        self, db_session, test_user, test_plan
    ):
        """Payout records are returned in date order."""
        stake = await _add_stake(db_session, test_user, test_plan, T0)
        repo = StakeRepository(db_session)

        await repo.add_payment(stake.id, Decimal("5"), T0 + timedelta(days=2))
        await repo.add_payment(stake.id, Decimal("5"), T0 + timedelta(days=1))
        await db_session.commit()

        payments = await repo.get_payments(stake.id)
        assert [p.date for p in payments] == [
            T0 + timedelta(days=1),
            T0 + timedelta(days=2),
        ]
