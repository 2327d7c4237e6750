"""
Wallet provider interfaces.

Services depend on these protocols so tests can pass in fakes.
"""

from decimal import Decimal
from typing import Any, Protocol


class WalletProviderError(Exception):
    """Wallet provider request failed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class PaymentGateway(Protocol):
    """Deposit payment gateway."""

    async def get_payment_status(self, payment_id: str) -> dict[str, Any]:
        ...


class WithdrawalSender(Protocol):
    """Outgoing payout sender."""

    async def send_withdrawal(
        self,
        currency: str,
        amount: Decimal,
        address: str,
        reference_id: int,
    ) -> dict[str, Any]:
        ...
