"""
Deposit service.

Creates deposits and settles them from gateway webhooks, status polling
or admin action. Confirmation is a one-way PENDING -> CONFIRMED gate:
the balance is credited only by the caller that wins the conditional
update, so duplicate webhook deliveries never double-credit.
"""

from decimal import Decimal
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.deposit import Deposit
from app.models.enums import (
    DepositStatus,
    NotificationType,
    TransactionStatus,
    TransactionType,
)
from app.repositories.deposit_repository import DepositRepository
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.services.email_service import DEPOSIT_CONFIRMED, EmailService
from app.services.notification_service import NotificationService
from app.services.wallet import (
    PaymentGateway,
    WalletProviderError,
    is_payment_confirmed,
    is_payment_failed,
)
from app.utils.datetime_utils import utcnow
from app.utils.money import plain_amount, to_decimal

PARTIALLY_PAID = "partially_paid"


def _optional_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        result = to_decimal(value)
    except (ArithmeticError, ValueError, TypeError):
        return None
    return result if result.is_finite() and result > 0 else None


class DepositService:
    """Deposit service for creating and settling deposits."""

    def __init__(
        self,
        session: AsyncSession,
        email_service: EmailService | None = None,
    ) -> None:
        """Initialize deposit service."""
        self.session = session
        self.deposit_repo = DepositRepository(session)
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.notification_service = NotificationService(session)
        self.email_service = email_service or EmailService()

    async def create_deposit(
        self,
        user_id: int,
        amount: Decimal,
        pay_currency: str,
        payment_id: str | None = None,
        pay_address: str | None = None,
        amount_usd: Decimal | None = None,
        pay_amount: Decimal | None = None,
    ) -> Deposit:
        """
        Create pending deposit.

        Args:
            user_id: User ID
            amount: USD amount to credit on confirmation
            pay_currency: Crypto the user pays with
            payment_id: Gateway payment ID
            pay_address: Gateway deposit address
            amount_usd: Quoted USD price (preferred for crediting)
            pay_amount: Expected crypto amount

        Returns:
            Created deposit

        Raises:
            ValueError: Non-positive amount
        """
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValueError("Deposit amount must be positive")

        deposit = await self.deposit_repo.create(
            user_id=user_id,
            amount=amount,
            amount_usd=amount_usd,
            pay_currency=pay_currency.lower(),
            pay_amount=pay_amount,
            pay_address=pay_address,
            payment_id=payment_id,
            status=DepositStatus.PENDING.value,
        )
        await self.session.commit()

        logger.info(
            "Deposit created",
            extra={
                "deposit_id": deposit.id,
                "user_id": user_id,
                "amount": str(amount),
                "pay_currency": pay_currency,
            },
        )
        return deposit

    async def create_gateway_deposit(
        self,
        user_id: int,
        amount: Decimal,
        pay_currency: str,
        gateway: Any,
        ipn_callback_url: str | None = None,
    ) -> tuple[Deposit | None, str | None]:
        """
        Create deposit and request a payment address from the gateway.

        Args:
            user_id: User ID
            amount: USD amount
            pay_currency: Crypto code (e.g. "usdttrc20")
            gateway: Client exposing create_payment()
            ipn_callback_url: Webhook URL

        Returns:
            Tuple of (deposit, error_message)
        """
        deposit = await self.create_deposit(
            user_id=user_id,
            amount=amount,
            pay_currency=pay_currency,
            amount_usd=to_decimal(amount),
        )
        try:
            payment = await gateway.create_payment(
                to_decimal(amount), pay_currency, deposit.id, ipn_callback_url
            )
        except WalletProviderError as e:
            logger.error(f"Gateway payment creation failed for deposit {deposit.id}: {e}")
            await self.fail_deposit(deposit.id)
            return None, "Payment provider unavailable. Please try again later."

        await self.deposit_repo.update_where(
            Deposit.id == deposit.id,
            payment_id=(
                str(payment["payment_id"])
                if payment.get("payment_id") is not None
                else None
            ),
            pay_address=payment.get("pay_address"),
            pay_amount=_optional_decimal(payment.get("pay_amount")),
        )
        await self.session.commit()
        return await self.deposit_repo.get_by_id(deposit.id, fresh=True), None

    async def confirm_deposit(
        self,
        deposit_id: int,
        *,
        price_amount: Decimal | None = None,
        pay_amount: Decimal | None = None,
        pay_currency: str | None = None,
        tx_hash: str | None = None,
        source: str = "admin",
    ) -> bool:
        """
        Confirm deposit and credit the balance exactly once.

        Args:
            deposit_id: Deposit ID
            price_amount: USD price reported by the gateway (used only
                when the deposit has no quoted amount_usd)
            pay_amount: Crypto amount actually paid
            pay_currency: Crypto code
            tx_hash: Blockchain transaction hash
            source: admin, webhook or poll (for logs)

        Returns:
            True if this call confirmed the deposit, False if it was
            not found or already settled
        """
        deposit = await self.deposit_repo.get_by_id(deposit_id, fresh=True)
        if not deposit:
            logger.warning(f"Deposit {deposit_id} not found for confirmation")
            return False

        if deposit.amount_usd is not None:
            usd_amount = deposit.amount_usd
        else:
            usd_amount = _optional_decimal(price_amount) or deposit.amount
        currency = (pay_currency or deposit.pay_currency or "").upper()
        crypto_amount = pay_amount or deposit.pay_amount or Decimal("0")
        user_id = deposit.user_id

        values: dict[str, Any] = {
            "amount": usd_amount,
            "confirmations": deposit.required_confirmations,
        }
        if pay_amount is not None:
            values["pay_amount"] = pay_amount
        if pay_currency:
            values["pay_currency"] = pay_currency.lower()
        if tx_hash:
            values["tx_hash"] = tx_hash

        try:
            confirmed = await self.deposit_repo.transition(
                deposit_id,
                DepositStatus.CONFIRMED.value,
                confirmed_at=utcnow(),
                **values,
            )
            if not confirmed:
                await self.session.rollback()
                logger.info(
                    f"Deposit {deposit_id} already settled, ignoring "
                    f"duplicate confirmation ({source})"
                )
                return False

            balances = await self.user_repo.increment_balance(
                user_id, usd_amount
            )
            if balances is None:
                raise ValueError(f"User {user_id} not found")
            balance_before, balance_after = balances

            await self.transaction_repo.create(
                user_id=user_id,
                type=TransactionType.DEPOSIT.value,
                amount=usd_amount,
                balance_before=balance_before,
                balance_after=balance_after,
                status=TransactionStatus.COMPLETED.value,
                description=(
                    f"Deposit: {plain_amount(crypto_amount)} {currency} "
                    f"(~${plain_amount(usd_amount)} USD)"
                ),
                reference_id=deposit_id,
                reference_type="deposit",
                tx_hash=tx_hash,
            )
            await self.session.commit()

        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to confirm deposit {deposit_id}: {e}")
            raise

        logger.info(
            "Deposit confirmed",
            extra={
                "deposit_id": deposit_id,
                "user_id": user_id,
                "amount": str(usd_amount),
                "source": source,
            },
        )

        await self.notification_service.notify(
            user_id,
            NotificationType.DEPOSIT_CONFIRMED,
            "Deposit Confirmed",
            f"Your deposit of ${plain_amount(usd_amount)} USD has been confirmed.",
        )
        await self._send_confirmed_email(user_id, usd_amount, currency)
        return True

    async def fail_deposit(self, deposit_id: int) -> bool:
        """
        Mark pending deposit as failed.

        Returns:
            True if this call failed the deposit
        """
        failed = await self.deposit_repo.transition(
            deposit_id, DepositStatus.FAILED.value
        )
        await self.session.commit()
        if failed:
            logger.info(f"Deposit {deposit_id} marked as failed")
        return failed

    async def handle_payment_notification(
        self, payload: dict[str, Any]
    ) -> str:
        """
        Apply a gateway IPN callback (signature already verified).

        Args:
            payload: Parsed IPN body

        Returns:
            Outcome: not_found, ignored, confirmed, failed or updated

        Raises:
            ValueError: Payload carries neither order_id nor payment_id
        """
        order_id = payload.get("order_id")
        payment_id = payload.get("payment_id")
        if not order_id and not payment_id:
            raise ValueError("Missing identifiers.")

        deposit = await self._find_deposit(order_id, payment_id)
        if not deposit:
            logger.warning(
                f"Deposit not found for IPN order_id={order_id} "
                f"payment_id={payment_id}"
            )
            return "not_found"

        if deposit.status != DepositStatus.PENDING.value:
            # Terminal state, acknowledge silently
            return "ignored"

        payment_status = payload.get("payment_status")
        paid = _optional_decimal(payload.get("actually_paid")) or _optional_decimal(
            payload.get("pay_amount")
        )

        if is_payment_confirmed(payment_status):
            confirmed = await self.confirm_deposit(
                deposit.id,
                price_amount=_optional_decimal(payload.get("price_amount")),
                pay_amount=paid,
                pay_currency=payload.get("pay_currency"),
                source="webhook",
            )
            return "confirmed" if confirmed else "ignored"

        if is_payment_failed(payment_status):
            failed = await self.fail_deposit(deposit.id)
            return "failed" if failed else "ignored"

        # Intermediate state (waiting, confirming, partially_paid)
        if paid is not None:
            await self.deposit_repo.update_where(
                Deposit.id == deposit.id,
                Deposit.status == DepositStatus.PENDING.value,
                pay_amount=paid,
            )
            await self.session.commit()
        return "updated"

    async def refresh_deposit_status(
        self, deposit_id: int, gateway: PaymentGateway
    ) -> str:
        """
        Poll the gateway and settle the deposit if it reached a final state.

        Gateway errors are logged and the last known status is returned.

        Returns:
            Deposit status value, or "partially_paid"
        """
        deposit = await self.deposit_repo.get_by_id(deposit_id, fresh=True)
        if not deposit:
            raise ValueError(f"Deposit {deposit_id} not found")

        if deposit.status != DepositStatus.PENDING.value or not deposit.payment_id:
            return deposit.status
        last_status = deposit.status

        try:
            payment = await gateway.get_payment_status(deposit.payment_id)
        except WalletProviderError as e:
            logger.error(f"Payment status poll failed for deposit {deposit_id}: {e}")
            return last_status

        payment_status = payment.get("payment_status")
        paid = _optional_decimal(payment.get("actually_paid")) or _optional_decimal(
            payment.get("pay_amount")
        )

        if is_payment_confirmed(payment_status):
            await self.confirm_deposit(deposit_id, pay_amount=paid, source="poll")
            return DepositStatus.CONFIRMED.value

        if is_payment_failed(payment_status):
            await self.fail_deposit(deposit_id)
            return DepositStatus.FAILED.value

        if payment_status == PARTIALLY_PAID:
            return PARTIALLY_PAID

        return last_status

    async def get_pending_deposits(
        self, limit: int | None = None
    ) -> list[Deposit]:
        """Get pending deposits, oldest first."""
        return await self.deposit_repo.get_pending_deposits(limit=limit)

    async def get_user_deposits(self, user_id: int) -> list[Deposit]:
        """Get user deposits."""
        return await self.deposit_repo.get_by_user(user_id)

    async def _find_deposit(
        self, order_id: Any, payment_id: Any
    ) -> Deposit | None:
        if order_id:
            try:
                deposit_id = int(order_id)
            except (TypeError, ValueError):
                return None
            return await self.deposit_repo.get_by_id(deposit_id, fresh=True)
        return await self.deposit_repo.get_by_payment_id(str(payment_id))

    async def _send_confirmed_email(
        self, user_id: int, amount: Decimal, currency: str
    ) -> None:
        try:
            user = await self.user_repo.get_by_id(user_id)
            if user:
                await self.email_service.send_templated_email(
                    user.email,
                    DEPOSIT_CONFIRMED,
                    {
                        "name": user.username,
                        "amount": plain_amount(amount),
                        "currency": "USD",
                    },
                )
        except Exception as e:
            logger.warning(
                f"Failed to send deposit confirmation email to user {user_id} "
                f"({currency}): {e}"
            )
