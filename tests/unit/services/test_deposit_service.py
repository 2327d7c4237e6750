"""
Unit tests for DepositService.

Tests deposit creation, the one-way confirmation gate, IPN handling
and gateway polling.
"""

import asyncio
from decimal import Decimal

import pytest

from app.models.enums import DepositStatus, TransactionType
from app.repositories.deposit_repository import DepositRepository
from app.repositories.notification_repository import NotificationRepository
from app.repositories.transaction_repository import TransactionRepository
from app.services.deposit_service import DepositService
from tests.helpers.wallet_fakes import FakePaymentGateway


@pytest.fixture
def pending_deposit(db_session, test_user):
    """Create a pending $100 USDT deposit with a gateway payment id."""

    async def _create(payment_id="np-1", amount="100", amount_usd=None):
        return await DepositService(db_session).create_deposit(
            user_id=test_user.id,
            amount=Decimal(amount),
            pay_currency="USDTTRC20",
            payment_id=payment_id,
            amount_usd=Decimal(amount_usd) if amount_usd else None,
        )

    return _create


class TestDepositCreation:
    """Tests for deposit creation."""

    @pytest.mark.asyncio
    async def test_create_deposit_pending(self, db_session, test_user):
        """New deposits start PENDING with lower-cased currency."""
        deposit = await DepositService(db_session).create_deposit(
            user_id=test_user.id,
            amount=Decimal("50"),
            pay_currency="BTC",
        )

        assert deposit.status == DepositStatus.PENDING.value
        assert deposit.pay_currency == "btc"
        assert deposit.amount == Decimal("50")
        assert deposit.confirmed_at is None

    @pytest.mark.asyncio
    async def test_create_deposit_rejects_non_positive(
        self, db_session, test_user
    ):
        """Zero amount raises ValueError."""
        with pytest.raises(ValueError, match="must be positive"):
            await DepositService(db_session).create_deposit(
                user_id=test_user.id, amount=Decimal("0"), pay_currency="btc"
            )

    @pytest.mark.asyncio
    async def test_create_gateway_deposit(
        self, db_session, test_user, fake_gateway
    ):
        """Gateway payment data is stored on the deposit."""
        deposit, error = await DepositService(
            db_session
        ).create_gateway_deposit(
            test_user.id, Decimal("100"), "usdttrc20", fake_gateway
        )

        assert error is None
        assert deposit.payment_id == f"np-{deposit.id}"
        assert deposit.pay_address == "TXYZpayaddress0001"
        assert deposit.pay_amount == Decimal("100.5")
        assert deposit.amount_usd == Decimal("100")
        assert fake_gateway.created == [
            (Decimal("100"), "usdttrc20", deposit.id)
        ]

    @pytest.mark.asyncio
    async def test_gateway_failure_fails_deposit(
        self, db_session, test_user, fake_gateway
    ):
        """Provider error leaves a FAILED deposit and an error message."""
        fake_gateway.fail_create = True
        service = DepositService(db_session)

        deposit, error = await service.create_gateway_deposit(
            test_user.id, Decimal("100"), "usdttrc20", fake_gateway
        )

        assert deposit is None
        assert error == "Payment provider unavailable. Please try again later."
        deposits = await service.get_user_deposits(test_user.id)
        assert [d.status for d in deposits] == [DepositStatus.FAILED.value]


class TestDepositConfirmation:
    """Tests for the PENDING -> CONFIRMED gate."""

    @pytest.mark.asyncio
    @pytest.mark.critical
    async def test_confirm_credits_balance(
        self, db_session, test_user, pending_deposit, get_balance
    ):
        """Confirmation credits the balance and writes a DEPOSIT line."""
        deposit = await pending_deposit()
        service = DepositService(db_session)

        confirmed = await service.confirm_deposit(
            deposit.id,
            pay_amount=Decimal("100.2"),
            tx_hash="0xdeadbeef",
            source="admin",
        )

        assert confirmed is True
        assert await get_balance(test_user.id) == Decimal("1100")

        deposit = await DepositRepository(db_session).get_by_id(
            deposit.id, fresh=True
        )
        assert deposit.status == DepositStatus.CONFIRMED.value
        assert deposit.confirmed_at is not None
        assert deposit.tx_hash == "0xdeadbeef"
        assert deposit.confirmations == deposit.required_confirmations

        txs = await TransactionRepository(db_session).get_by_reference(
            "deposit", deposit.id
        )
        assert len(txs) == 1
        assert txs[0].type == TransactionType.DEPOSIT.value
        assert txs[0].amount == Decimal("100")
        assert txs[0].description == "Deposit: 100.2 USDTTRC20 (~$100 USD)"

        notifications = await NotificationRepository(db_session).get_for_user(
            test_user.id
        )
        assert notifications[0].title == "Deposit Confirmed"

    @pytest.mark.asyncio
    @pytest.mark.critical
    async def test_duplicate_confirmation_credits_once(
        self, db_session, test_user, pending_deposit, get_balance
    ):
        """Second confirmation is a no-op."""
        deposit = await pending_deposit()
        service = DepositService(db_session)

        assert await service.confirm_deposit(deposit.id) is True
        assert await service.confirm_deposit(deposit.id) is False

        assert await get_balance(test_user.id) == Decimal("1100")
        txs = await TransactionRepository(db_session).get_by_reference(
            "deposit", deposit.id
        )
        assert len(txs) == 1

    @pytest.mark.asyncio
    @pytest.mark.critical
    async def test_concurrent_confirmations_credit_once(
        self, db_session, session_maker, test_user, pending_deposit, get_balance
    ):
        """Two sessions confirming at once: one wins, one is a no-op."""
        deposit = await pending_deposit()

        async def confirm(source):
            async with session_maker() as session:
                return await DepositService(session).confirm_deposit(
                    deposit.id, source=source
                )

        results = await asyncio.gather(confirm("webhook"), confirm("poll"))

        assert sorted(results) == [False, True]
        assert await get_balance(test_user.id) == Decimal("1100")
        txs = await TransactionRepository(db_session).get_by_user(
            test_user.id, type=TransactionType.DEPOSIT.value
        )
        assert len(txs) == 1

    @pytest.mark.asyncio
    async def test_quoted_usd_amount_preferred(
        self, db_session, test_user, pending_deposit, get_balance
    ):
        """amount_usd wins over the gateway price_amount."""
        deposit = await pending_deposit(amount="100", amount_usd="95")

        await DepositService(db_session).confirm_deposit(
            deposit.id, price_amount=Decimal("120")
        )

        assert await get_balance(test_user.id) == Decimal("1095")

    @pytest.mark.asyncio
    async def test_price_amount_used_without_quote(
        self, db_session, test_user, pending_deposit, get_balance
    ):
        """Gateway price_amount is used when nothing was quoted."""
        deposit = await pending_deposit(amount="100")

        await DepositService(db_session).confirm_deposit(
            deposit.id, price_amount=Decimal("80")
        )

        assert await get_balance(test_user.id) == Decimal("1080")

    @pytest.mark.asyncio
    async def test_confirm_unknown_deposit(self, db_session):
        """Unknown deposit is not confirmed."""
        assert await DepositService(db_session).confirm_deposit(9999) is False

    @pytest.mark.asyncio
    async def test_failed_deposit_cannot_be_confirmed(
        self, db_session, test_user, pending_deposit, get_balance
    ):
        """FAILED is terminal."""
        deposit = await pending_deposit()
        service = DepositService(db_session)

        assert await service.fail_deposit(deposit.id) is True
        assert await service.fail_deposit(deposit.id) is False
        assert await service.confirm_deposit(deposit.id) is False
        assert await get_balance(test_user.id) == Decimal("1000")


class TestPaymentNotification:
    """Tests for gateway IPN handling."""

    @pytest.mark.asyncio
    @pytest.mark.critical
    async def test_duplicate_webhook_credits_once(
        self, db_session, test_user, pending_deposit, get_balance
    ):
        """The same finished IPN delivered twice credits once."""
        deposit = await pending_deposit()
        payload = {
            "payment_id": "np-1",
            "order_id": str(deposit.id),
            "payment_status": "finished",
            "actually_paid": "100.4",
            "pay_currency": "usdttrc20",
            "price_amount": 100,
        }
        service = DepositService(db_session)

        assert await service.handle_payment_notification(payload) == "confirmed"
        assert await service.handle_payment_notification(payload) == "ignored"

        assert await get_balance(test_user.id) == Decimal("1100")
        deposit = await DepositRepository(db_session).get_by_id(
            deposit.id, fresh=True
        )
        assert deposit.pay_amount == Decimal("100.4")

    @pytest.mark.asyncio
    async def test_lookup_by_payment_id(
        self, db_session, test_user, pending_deposit, get_balance
    ):
        """payment_id is used when order_id is absent."""
        await pending_deposit(payment_id="np-777")

        outcome = await DepositService(db_session).handle_payment_notification(
            {"payment_id": "np-777", "payment_status": "confirmed"}
        )

        assert outcome == "confirmed"
        assert await get_balance(test_user.id) == Decimal("1100")

    @pytest.mark.asyncio
    async def test_unknown_deposit(self, db_session):
        """Unknown identifiers return not_found."""
        outcome = await DepositService(db_session).handle_payment_notification(
            {"payment_id": "nope", "payment_status": "finished"}
        )
        assert outcome == "not_found"

    @pytest.mark.asyncio
    async def test_missing_identifiers(self, db_session):
        """Payload without ids raises ValueError."""
        with pytest.raises(ValueError, match="Missing identifiers."):
            await DepositService(db_session).handle_payment_notification(
                {"payment_status": "finished"}
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["failed", "expired", "refunded"])
    async def test_failed_statuses(
        self, db_session, test_user, pending_deposit, get_balance, status
    ):
        """Failure statuses fail the deposit without crediting."""
        deposit = await pending_deposit()

        outcome = await DepositService(db_session).handle_payment_notification(
            {"order_id": str(deposit.id), "payment_status": status}
        )

        assert outcome == "failed"
        assert await get_balance(test_user.id) == Decimal("1000")

    @pytest.mark.asyncio
    async def test_intermediate_status_records_paid_amount(
        self, db_session, test_user, pending_deposit, get_balance
    ):
        """confirming keeps the deposit PENDING and stores pay_amount."""
        deposit = await pending_deposit()

        outcome = await DepositService(db_session).handle_payment_notification(
            {
                "order_id": str(deposit.id),
                "payment_status": "confirming",
                "actually_paid": "50.5",
            }
        )

        assert outcome == "updated"
        deposit = await DepositRepository(db_session).get_by_id(
            deposit.id, fresh=True
        )
        assert deposit.status == DepositStatus.PENDING.value
        assert deposit.pay_amount == Decimal("50.5")
        assert await get_balance(test_user.id) == Decimal("1000")


class TestDepositPolling:
    """Tests for gateway status polling."""

    @pytest.mark.asyncio
    async def test_poll_confirms_finished_payment(
        self, db_session, test_user, pending_deposit, get_balance
    ):
        """finished on the gateway confirms the deposit."""
        deposit = await pending_deposit(payment_id="np-9")
        gateway = FakePaymentGateway(
            {"np-9": {"payment_status": "finished", "actually_paid": "99.9"}}
        )

        status = await DepositService(db_session).refresh_deposit_status(
            deposit.id, gateway
        )

        assert status == DepositStatus.CONFIRMED.value
        assert await get_balance(test_user.id) == Decimal("1100")

    @pytest.mark.asyncio
    async def test_poll_reports_partial_payment(
        self, db_session, pending_deposit
    ):
        """partially_paid is reported and the deposit stays PENDING."""
        deposit = await pending_deposit(payment_id="np-9")
        gateway = FakePaymentGateway({"np-9": {"payment_status": "partially_paid"}})

        status = await DepositService(db_session).refresh_deposit_status(
            deposit.id, gateway
        )

        assert status == "partially_paid"

    @pytest.mark.asyncio
    async def test_poll_gateway_error_keeps_status(
        self, db_session, pending_deposit
    ):
        """Gateway errors return the last known status."""
        deposit = await pending_deposit(payment_id="np-9")

        status = await DepositService(db_session).refresh_deposit_status(
            deposit.id, FakePaymentGateway()
        )

        assert status == DepositStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_poll_settled_deposit_skips_gateway(
        self, db_session, pending_deposit
    ):
        """Settled deposits are not polled again."""
        deposit = await pending_deposit(payment_id="np-9")
        service = DepositService(db_session)
        await service.confirm_deposit(deposit.id)

        status = await service.refresh_deposit_status(
            deposit.id, FakePaymentGateway()
        )

        assert status == DepositStatus.CONFIRMED.value
