"""
Unit tests for UserRepository balance mutations.
"""

from decimal import Decimal

import pytest

from app.repositories.user_repository import UserRepository


class TestBalanceMutations:
    """Tests for atomic balance updates."""

    @pytest.mark.asyncio
    async def test_increment_returns_before_and_after(
        self, db_session, test_user
    ):
        """Credit reports both balances."""
        repo = UserRepository(db_session)

        balances = await repo.increment_balance(test_user.id, Decimal("12.5"))
        await db_session.commit()

        assert balances == (Decimal("1000"), Decimal("1012.5"))
        assert await repo.get_balance(test_user.id) == Decimal("1012.5")

    @pytest.mark.asyncio
    async def test_decrement_within_balance(self, db_session, test_user):
        """Debit succeeds when funds cover it."""
        repo = UserRepository(db_session)

        balances = await repo.decrement_balance(test_user.id, Decimal("1000"))
        await db_session.commit()

        assert balances == (Decimal("1000"), Decimal("0"))

    @pytest.mark.asyncio
    @pytest.mark.critical
    async def test_decrement_insufficient_is_noop(self, db_session, test_user):
        """Debit above balance changes nothing."""
        repo = UserRepository(db_session)

        assert await repo.decrement_balance(
            test_user.id, Decimal("1000.01")
        ) is None
        await db_session.commit()

        assert await repo.get_balance(test_user.id) == Decimal("1000")

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session):
        """Missing user returns None."""
        repo = UserRepository(db_session)

        assert await repo.get_balance(9999) is None
        assert await repo.increment_balance(9999, Decimal("1")) is None
        assert await repo.decrement_balance(9999, Decimal("1")) is None

    @pytest.mark.asyncio
    async def test_get_by_id_fresh_sees_core_update(self, db_session, test_user):
        """fresh=True reloads a row changed behind the identity map."""
        repo = UserRepository(db_session)
        user = await repo.get_by_id(test_user.id)

        await repo.increment_balance(test_user.id, Decimal("5"))
        await db_session.commit()

        user = await repo.get_by_id(test_user.id, fresh=True)
        assert user.balance == Decimal("1005")

    @pytest.mark.asyncio
    async def test_get_referrals(
        self, db_session, create_user_helper, referrer
    ):
        """Referrals are users pointing at the referrer."""
        await create_user_helper(referrer_id=referrer.id)
        await create_user_helper(referrer_id=referrer.id)
        await create_user_helper()

        referrals = await UserRepository(db_session).get_referrals(referrer.id)
        assert len(referrals) == 2
