"""
Withdrawal service.

Handles withdrawal requests (PIN check, currency limits, atomic debit)
and admin processing (approve via wallet provider, reject with refund).
"""

import re
from decimal import Decimal

import bcrypt
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    NotificationType,
    TransactionStatus,
    TransactionType,
    WithdrawalStatus,
)
from app.models.withdrawal import Withdrawal
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.repositories.withdrawal_repository import (
    WithdrawalCurrencyRepository,
    WithdrawalRepository,
)
from app.services.email_service import WITHDRAWAL_STATUS, EmailService
from app.services.notification_service import NotificationService
from app.services.wallet import WithdrawalSender
from app.utils.datetime_utils import utcnow
from app.utils.money import plain_amount, to_decimal

PIN_PATTERN = re.compile(r"^\d{4}$")
MIN_ADDRESS_LENGTH = 10


def hash_pin(pin: str) -> str:
    """Hash withdrawal PIN with bcrypt."""
    return bcrypt.hashpw(pin.encode(), bcrypt.gensalt()).decode()


def verify_pin(pin: str, pin_hash: str) -> bool:
    """Check PIN against bcrypt hash."""
    try:
        return bcrypt.checkpw(pin.encode(), pin_hash.encode())
    except ValueError:
        return False


class WithdrawalService:
    """Withdrawal service for managing withdrawal requests."""

    def __init__(
        self,
        session: AsyncSession,
        email_service: EmailService | None = None,
    ) -> None:
        """Initialize withdrawal service."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.withdrawal_repo = WithdrawalRepository(session)
        self.currency_repo = WithdrawalCurrencyRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.notification_service = NotificationService(session)
        self.email_service = email_service or EmailService()

    async def set_pin(self, user_id: int, pin: str) -> tuple[bool, str | None]:
        """
        Set withdrawal PIN.

        Returns:
            Tuple of (success, error_message)
        """
        if not PIN_PATTERN.match(pin or ""):
            return False, "PIN must be exactly 4 digits."
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            return False, "User not found."
        user.pin_hash = hash_pin(pin)
        user.pin_enabled = True
        await self.session.commit()
        logger.info(f"Withdrawal PIN set for user {user_id}")
        return True, None

    async def request_withdrawal(
        self,
        user_id: int,
        currency_id: int,
        amount: Decimal | int | str,
        wallet_address: str,
        pin: str,
    ) -> tuple[Withdrawal | None, str | None]:
        """
        Request withdrawal with balance deduction.

        Args:
            user_id: User ID
            currency_id: WithdrawalCurrency ID
            amount: Gross amount (USD) debited from balance
            wallet_address: Destination address
            pin: 4-digit withdrawal PIN

        Returns:
            Tuple of (withdrawal, error_message)
        """
        amount = to_decimal(amount)
        if not amount.is_finite() or amount <= 0:
            return None, "Amount must be positive."
        if not wallet_address or len(wallet_address.strip()) < MIN_ADDRESS_LENGTH:
            return None, "Invalid wallet address."
        wallet_address = wallet_address.strip()

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            return None, "User not found."

        if not user.pin_enabled or not user.pin_hash:
            return None, "Please set a withdrawal PIN first."
        if not PIN_PATTERN.match(pin or "") or not verify_pin(pin, user.pin_hash):
            logger.warning(f"Invalid withdrawal PIN for user {user_id}")
            return None, "Invalid PIN."

        currency = await self.currency_repo.get_active(currency_id)
        if not currency:
            return None, "Currency not found."

        if amount < currency.min_withdrawal:
            return None, (
                f"Minimum withdrawal is ${plain_amount(currency.min_withdrawal)}."
            )
        if currency.max_withdrawal is not None and amount > currency.max_withdrawal:
            return None, (
                f"Maximum withdrawal is ${plain_amount(currency.max_withdrawal)}."
            )

        fee = currency.fee
        net_amount = max(Decimal("0"), amount - fee)
        symbol = currency.symbol

        try:
            # Fresh in-transaction balance check
            balance = await self.user_repo.get_balance(user_id, for_update=True)
            if balance is None or balance < amount:
                await self.session.rollback()
                return None, "Insufficient balance."

            balances = await self.user_repo.decrement_balance(user_id, amount)
            if balances is None:
                await self.session.rollback()
                return None, "Insufficient balance."
            balance_before, balance_after = balances

            withdrawal = await self.withdrawal_repo.create(
                user_id=user_id,
                currency=symbol,
                amount=amount,
                fee=fee,
                net_amount=net_amount,
                wallet_address=wallet_address,
                status=WithdrawalStatus.PENDING.value,
                pin_verified=True,
            )

            await self.transaction_repo.create(
                user_id=user_id,
                type=TransactionType.WITHDRAWAL.value,
                amount=amount,
                balance_before=balance_before,
                balance_after=balance_after,
                status=TransactionStatus.PENDING.value,
                description=f"Withdrawal: {plain_amount(amount)} USD -> {symbol}",
                reference_id=withdrawal.id,
                reference_type="withdrawal",
            )

            await self.session.commit()

        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to create withdrawal for user {user_id}: {e}")
            raise

        logger.info(
            "Withdrawal request created",
            extra={
                "withdrawal_id": withdrawal.id,
                "user_id": user_id,
                "amount": str(amount),
                "net_amount": str(net_amount),
                "currency": symbol,
            },
        )

        await self.notification_service.notify(
            user_id,
            NotificationType.WITHDRAWAL_REQUESTED,
            "Withdrawal Requested",
            f"Your withdrawal of ${plain_amount(amount)} is being processed.",
        )
        return withdrawal, None

    async def approve_withdrawal(
        self, withdrawal_id: int, sender: WithdrawalSender
    ) -> tuple[bool, str | None]:
        """
        Approve withdrawal and send funds via the wallet provider.

        The withdrawal is claimed PENDING -> PROCESSING and committed
        before the provider call; no row lock is held during the send.
        A send failure marks the withdrawal FAILED and keeps the funds
        debited (manual follow-up, no automatic refund).

        Args:
            withdrawal_id: Withdrawal ID
            sender: Wallet provider client

        Returns:
            Tuple of (success, error_message)
        """
        withdrawal = await self.withdrawal_repo.get_by_id(
            withdrawal_id, fresh=True
        )
        if not withdrawal:
            return False, "Not found."

        user_id = withdrawal.user_id
        amount = withdrawal.amount
        currency = withdrawal.currency
        net_amount = withdrawal.net_amount
        wallet_address = withdrawal.wallet_address

        claimed = await self.withdrawal_repo.transition(
            withdrawal_id, WithdrawalStatus.PROCESSING.value
        )
        if not claimed:
            await self.session.rollback()
            return False, "Already processed."
        await self.session.commit()

        try:
            response = await sender.send_withdrawal(
                currency, net_amount, wallet_address, withdrawal_id
            )
            tx_hash = response.get("txHash")
            if not tx_hash:
                raise ValueError("Provider returned no txHash")
        except Exception as e:
            logger.error(
                f"Failed to send withdrawal {withdrawal_id}: {e}",
                extra={"withdrawal_id": withdrawal_id, "user_id": user_id},
            )
            await self.withdrawal_repo.transition(
                withdrawal_id,
                WithdrawalStatus.FAILED.value,
                from_status=WithdrawalStatus.PROCESSING.value,
                reason=str(e)[:500],
                processed_at=utcnow(),
            )
            await self.session.commit()
            return False, "Failed to send withdrawal."

        try:
            completed = await self.withdrawal_repo.transition(
                withdrawal_id,
                WithdrawalStatus.COMPLETED.value,
                from_status=WithdrawalStatus.PROCESSING.value,
                tx_hash=tx_hash,
                processed_at=utcnow(),
            )
            if not completed:
                await self.session.rollback()
                logger.error(
                    f"Withdrawal {withdrawal_id} changed state during send "
                    f"(tx_hash={tx_hash})"
                )
                return False, "Already processed."

            await self.transaction_repo.set_status_by_reference(
                "withdrawal",
                withdrawal_id,
                TransactionStatus.PENDING.value,
                TransactionStatus.COMPLETED.value,
                tx_hash=tx_hash,
            )
            await self.session.commit()

        except Exception as e:
            await self.session.rollback()
            logger.error(
                f"Withdrawal {withdrawal_id} sent (tx_hash={tx_hash}) "
                f"but failed to record completion: {e}"
            )
            raise

        logger.info(
            "Withdrawal approved",
            extra={
                "withdrawal_id": withdrawal_id,
                "user_id": user_id,
                "tx_hash": tx_hash,
            },
        )

        await self.notification_service.notify(
            user_id,
            NotificationType.WITHDRAWAL_APPROVED,
            "Withdrawal Approved",
            f"Your withdrawal of ${plain_amount(amount)} has been approved "
            "and is processing.",
        )
        await self._send_status_email(user_id, amount, currency, "approved")
        return True, None

    async def reject_withdrawal(
        self, withdrawal_id: int, reason: str | None = None
    ) -> tuple[bool, str | None]:
        """
        Reject withdrawal and refund the debited amount.

        Args:
            withdrawal_id: Withdrawal ID
            reason: Optional reason shown to the user

        Returns:
            Tuple of (success, error_message)
        """
        withdrawal = await self.withdrawal_repo.get_by_id(
            withdrawal_id, fresh=True
        )
        if not withdrawal:
            return False, "Not found."

        user_id = withdrawal.user_id
        amount = withdrawal.amount
        currency = withdrawal.currency

        try:
            rejected = await self.withdrawal_repo.transition(
                withdrawal_id,
                WithdrawalStatus.REJECTED.value,
                reason=reason,
                processed_at=utcnow(),
            )
            if not rejected:
                await self.session.rollback()
                return False, "Already processed."

            if await self.user_repo.increment_balance(user_id, amount) is None:
                raise ValueError(f"User {user_id} not found")

            await self.transaction_repo.set_status_by_reference(
                "withdrawal",
                withdrawal_id,
                TransactionStatus.PENDING.value,
                TransactionStatus.REJECTED.value,
            )
            await self.session.commit()

        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to reject withdrawal {withdrawal_id}: {e}")
            raise

        logger.info(
            "Withdrawal rejected and refunded",
            extra={
                "withdrawal_id": withdrawal_id,
                "user_id": user_id,
                "amount": str(amount),
            },
        )

        await self.notification_service.notify(
            user_id,
            NotificationType.WITHDRAWAL_REJECTED,
            "Withdrawal Rejected",
            f"Your withdrawal of ${plain_amount(amount)} was rejected. "
            "Funds have been returned to your balance.",
        )
        await self._send_status_email(
            user_id, amount, currency, "rejected", reason
        )
        return True, None

    async def get_user_withdrawals(self, user_id: int) -> list[Withdrawal]:
        """Get user withdrawal history, newest first."""
        return await self.withdrawal_repo.get_user_withdrawals(user_id)

    async def get_pending_withdrawals(self) -> list[Withdrawal]:
        """Get pending withdrawals (for admin)."""
        return await self.withdrawal_repo.get_pending()

    async def _send_status_email(
        self,
        user_id: int,
        amount: Decimal,
        currency: str,
        status: str,
        reason: str | None = None,
    ) -> None:
        try:
            user = await self.user_repo.get_by_id(user_id)
            if user:
                await self.email_service.send_templated_email(
                    user.email,
                    WITHDRAWAL_STATUS,
                    {
                        "name": user.username,
                        "amount": plain_amount(amount),
                        "currency": currency,
                        "status": status,
                        "reason": reason,
                    },
                )
        except Exception as e:
            logger.warning(
                f"Failed to send withdrawal email to user {user_id}: {e}"
            )
