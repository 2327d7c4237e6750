"""
Pytest configuration and shared fixtures.

Each test gets its own SQLite database file, so services can open as
many sessions as they like against real tables.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

from app.config.database import build_engine, build_session_maker
from app.models import (
    Base,
    StakingPlan,
    SystemSetting,
    Transaction,
    User,
    WithdrawalCurrency,
)
from app.models.enums import TransactionStatus, TransactionType
from app.repositories.user_repository import UserRepository
from app.services.staking_plan_service import calculate_total_roi
from app.services.withdrawal_service import hash_pin
from tests.helpers.wallet_fakes import (
    TEST_PIN,
    FakePaymentGateway,
    FakeWithdrawalSender,
)


# bcrypt is slow, hash each test PIN once per run
_PIN_HASHES: dict[str, str] = {}


def _pin_hash(pin: str) -> str:
    if pin not in _PIN_HASHES:
        _PIN_HASHES[pin] = hash_pin(pin)
    return _PIN_HASHES[pin]


# ==================== DATABASE FIXTURES ====================


@pytest_asyncio.fixture
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create engine on a fresh SQLite file."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(
    async_engine: AsyncEngine,  # pylint: disable=redefined-outer-name
) -> async_sessionmaker[AsyncSession]:
    """Session factory with production settings."""
    return build_session_maker(async_engine)


@pytest_asyncio.fixture
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],  # pylint: disable=redefined-outer-name
) -> AsyncGenerator[AsyncSession, None]:
    """
    Create database session for tests.

    Yields:
        AsyncSession: Database session
    """
    async with session_maker() as session:
        yield session


# ==================== ENTITY HELPERS ====================


@pytest_asyncio.fixture
async def create_user_helper(
    db_session: AsyncSession,  # pylint: disable=redefined-outer-name
) -> Callable[..., Awaitable[User]]:
    """
    Factory creating users.

    A positive starting balance is recorded as an ADMIN_CREDIT ledger
    line so balances always reconcile.
    """
    counter = {"n": 0}

    async def _create(
        balance: Decimal | int | str = 0,
        referrer_id: int | None = None,
        username: str | None = None,
        pin: str | None = TEST_PIN,
        **extra: Any,
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=f"user{n}@example.com",
            username=username or f"user{n}",
            balance=Decimal(str(balance)),
            referrer_id=referrer_id,
            pin_hash=_pin_hash(pin) if pin else None,
            pin_enabled=bool(pin),
            **extra,
        )
        db_session.add(user)
        await db_session.flush()

        if Decimal(str(balance)) > 0:
            db_session.add(
                Transaction(
                    user_id=user.id,
                    type=TransactionType.ADMIN_CREDIT.value,
                    amount=Decimal(str(balance)),
                    balance_before=Decimal("0"),
                    balance_after=Decimal(str(balance)),
                    status=TransactionStatus.COMPLETED.value,
                    description="Initial balance",
                )
            )
        await db_session.commit()
        return user

    return _create


@pytest_asyncio.fixture
async def referrer(create_user_helper) -> User:  # pylint: disable=redefined-outer-name
    """User with no balance who referred others."""
    return await create_user_helper(balance=0, username="referrer")


@pytest_asyncio.fixture
async def test_user(create_user_helper) -> User:  # pylint: disable=redefined-outer-name
    """User with $1000 balance and no referrer."""
    return await create_user_helper(balance=1000, username="alice")


@pytest_asyncio.fixture
async def create_plan_helper(
    db_session: AsyncSession,  # pylint: disable=redefined-outer-name
) -> Callable[..., Awaitable[StakingPlan]]:
    """Factory creating staking plans."""

    async def _create(
        name: str = "Test Plan",
        daily_roi: Decimal | str = "1",
        duration_days: int = 3,
        min_amount: Decimal | str = "100",
        max_amount: Decimal | str | None = "10000",
        is_active: bool = True,
    ) -> StakingPlan:
        plan = StakingPlan(
            name=name,
            daily_roi=Decimal(str(daily_roi)),
            duration_days=duration_days,
            total_roi=calculate_total_roi(daily_roi, duration_days),
            min_amount=Decimal(str(min_amount)),
            max_amount=(
                Decimal(str(max_amount)) if max_amount is not None else None
            ),
            is_active=is_active,
        )
        db_session.add(plan)
        await db_session.commit()
        return plan

    return _create


@pytest_asyncio.fixture
async def test_plan(create_plan_helper) -> StakingPlan:  # pylint: disable=redefined-outer-name
    """1% daily for 3 days, $100 - $10,000."""
    return await create_plan_helper()


@pytest_asyncio.fixture
async def test_currency(
    db_session: AsyncSession,  # pylint: disable=redefined-outer-name
) -> WithdrawalCurrency:
    """USDT withdrawal currency, $10 minimum, $1 fee."""
    currency = WithdrawalCurrency(
        symbol="USDT",
        network="TRC20",
        min_withdrawal=Decimal("10"),
        max_withdrawal=Decimal("5000"),
        fee=Decimal("1"),
        is_active=True,
    )
    db_session.add(currency)
    await db_session.commit()
    return currency


@pytest_asyncio.fixture
async def set_setting(
    db_session: AsyncSession,  # pylint: disable=redefined-outer-name
) -> Callable[[str, str], Awaitable[None]]:
    """Store a site setting."""

    async def _set(key: str, value: str) -> None:
        db_session.add(SystemSetting(key=key, value=value))
        await db_session.commit()

    return _set


@pytest.fixture
def get_balance(
    db_session: AsyncSession,  # pylint: disable=redefined-outer-name
) -> Callable[[int], Awaitable[Decimal]]:
    """Read a balance straight from the database."""

    async def _get(user_id: int) -> Decimal:
        balance = await UserRepository(db_session).get_balance(user_id)
        await db_session.commit()
        return balance

    return _get


# ==================== WALLET FAKES ====================


@pytest.fixture
def fake_sender() -> FakeWithdrawalSender:
    """Successful withdrawal sender."""
    return FakeWithdrawalSender()


@pytest.fixture
def fake_gateway() -> FakePaymentGateway:
    """Empty payment gateway."""
    return FakePaymentGateway()
