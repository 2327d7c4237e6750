"""
NOWPayments API client.

Creates deposit payments and polls their status.
"""

from decimal import Decimal
from typing import Any

import aiohttp
from loguru import logger

from app.config.settings import settings

from .base import WalletProviderError

CONFIRMED_STATUSES = frozenset({"confirmed", "sending", "finished"})
FAILED_STATUSES = frozenset({"failed", "expired", "refunded"})


def is_payment_confirmed(status: str | None) -> bool:
    """True if the payment is fully confirmed/finished."""
    return (status or "").lower() in CONFIRMED_STATUSES


def is_payment_failed(status: str | None) -> bool:
    """True if the payment failed or expired."""
    return (status or "").lower() in FAILED_STATUSES


class NowPaymentsClient:
    """Thin aiohttp client for the NOWPayments REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self._api_key = api_key or settings.nowpayments_api_key or ""
        self._base_url = (base_url or settings.nowpayments_api_url).rstrip("/")
        self._timeout = aiohttp.ClientTimeout(
            total=timeout or settings.wallet_request_timeout
        )

    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        headers = {"x-api-key": self._api_key, "Content-Type": "application/json"}
        url = f"{self._base_url}{path}"
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.request(
                    method, url, json=json, headers=headers
                ) as resp:
                    if resp.status >= 400:
                        text = await resp.text()
                        raise WalletProviderError(
                            f"NOWPayments {path} -> {resp.status}: {text}",
                            status=resp.status,
                        )
                    return await resp.json()
        except aiohttp.ClientError as e:
            logger.error(f"NOWPayments request {path} failed: {e}")
            raise WalletProviderError(f"NOWPayments {path} failed: {e}") from e

    async def create_payment(
        self,
        price_usd: Decimal,
        pay_currency: str,
        order_id: int,
        ipn_callback_url: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a payment request.

        Args:
            price_usd: Amount in USD to deposit
            pay_currency: Crypto to pay with (e.g. "btc")
            order_id: Internal deposit ID
            ipn_callback_url: Webhook URL (polling works without it)

        Returns:
            Payment data (payment_id, pay_address, pay_amount, ...)
        """
        body: dict[str, Any] = {
            "price_amount": float(price_usd),
            "price_currency": "usd",
            "pay_currency": pay_currency.lower(),
            "order_id": str(order_id),
            "order_description": "Staking platform deposit",
        }
        if ipn_callback_url:
            body["ipn_callback_url"] = ipn_callback_url
        return await self._request("POST", "/payment", json=body)

    async def get_payment_status(self, payment_id: str) -> dict[str, Any]:
        """Get current payment status."""
        return await self._request("GET", f"/payment/{payment_id}")
