"""
Test doubles for the wallet providers and a fixed clock.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from app.services.wallet import WalletProviderError

# Fixed clock for deterministic schedules
T0 = datetime(2026, 1, 1, 12, 0, 0)

TEST_PIN = "1234"


class FakeWithdrawalSender:
    """Records sends; optionally fails."""

    def __init__(
        self, tx_hash: str | None = "0xabc123", error: Exception | None = None
    ) -> None:
        self.tx_hash = tx_hash
        self.error = error
        self.calls: list[tuple[str, Decimal, str, int]] = []

    async def send_withdrawal(
        self, currency: str, amount: Decimal, address: str, reference_id: int
    ) -> dict[str, Any]:
        self.calls.append((currency, amount, address, reference_id))
        if self.error:
            raise self.error
        return {"txHash": self.tx_hash} if self.tx_hash else {}


class FakePaymentGateway:
    """Returns canned payment statuses keyed by payment_id."""

    def __init__(
        self, statuses: dict[str, dict[str, Any]] | None = None
    ) -> None:
        self.statuses = statuses or {}
        self.created: list[tuple[Decimal, str, int]] = []
        self.fail_create = False

    async def create_payment(
        self,
        price_usd: Decimal,
        pay_currency: str,
        order_id: int,
        ipn_callback_url: str | None = None,
    ) -> dict[str, Any]:
        if self.fail_create:
            raise WalletProviderError("gateway down", status=503)
        self.created.append((price_usd, pay_currency, order_id))
        return {
            "payment_id": f"np-{order_id}",
            "pay_address": "TXYZpayaddress0001",
            "pay_amount": "100.5",
        }

    async def get_payment_status(self, payment_id: str) -> dict[str, Any]:
        status = self.statuses.get(payment_id)
        if status is None:
            raise WalletProviderError(
                f"payment {payment_id} unknown", status=404
            )
        return status
