"""
User repository.

Data access layer for User model, including the atomic balance
mutations every financial flow goes through.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email.

        Args:
            email: Email address

        Returns:
            User or None
        """
        return await self.get_by(email=email)

    async def get_referrals(self, referrer_id: int) -> list[User]:
        """
        Get users referred by the given user.

        Args:
            referrer_id: Referrer user ID

        Returns:
            List of referred users
        """
        return await self.find_by(referrer_id=referrer_id)

    async def get_balance(
        self, user_id: int, for_update: bool = False
    ) -> Optional[Decimal]:
        """
        Read current balance straight from the database.

        Selects the column instead of the ORM object so a stale
        identity-map copy is never returned.

        Args:
            user_id: User ID
            for_update: Lock the row until the transaction ends

        Returns:
            Balance or None if user not found
        """
        stmt = select(User.balance).where(User.id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def increment_balance(
        self, user_id: int, delta: Decimal
    ) -> Optional[tuple[Decimal, Decimal]]:
        """
        Atomically add delta to the balance (balance = balance + delta).

        Args:
            user_id: User ID
            delta: Positive amount to credit

        Returns:
            Tuple of (balance_before, balance_after) or None if user
            not found
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(balance=User.balance + delta)
            .returning(User.balance)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        balance_after = result.scalar_one_or_none()
        if balance_after is None:
            return None
        return balance_after - delta, balance_after

    async def decrement_balance(
        self, user_id: int, amount: Decimal
    ) -> Optional[tuple[Decimal, Decimal]]:
        """
        Atomically debit the balance if it covers the amount.

        The check and the write are a single conditional UPDATE
        (balance = balance - amount WHERE balance >= amount), so two
        concurrent debits can never both succeed on the same funds.

        Args:
            user_id: User ID
            amount: Positive amount to debit

        Returns:
            Tuple of (balance_before, balance_after) or None if the
            balance is insufficient or the user does not exist
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.balance >= amount)
            .values(balance=User.balance - amount)
            .returning(User.balance)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        balance_after = result.scalar_one_or_none()
        if balance_after is None:
            return None
        return balance_after + amount, balance_after
