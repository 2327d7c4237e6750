"""Wallet provider clients (deposit gateway and payout sender)."""

from .base import PaymentGateway, WalletProviderError, WithdrawalSender
from .nowpayments_client import (
    CONFIRMED_STATUSES,
    FAILED_STATUSES,
    NowPaymentsClient,
    is_payment_confirmed,
    is_payment_failed,
)
from .westwallet_client import WestWalletClient

__all__ = [
    "CONFIRMED_STATUSES",
    "FAILED_STATUSES",
    "NowPaymentsClient",
    "PaymentGateway",
    "WalletProviderError",
    "WestWalletClient",
    "WithdrawalSender",
    "is_payment_confirmed",
    "is_payment_failed",
]
