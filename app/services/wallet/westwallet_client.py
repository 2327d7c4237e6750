"""
WestWallet API client.

Sends outgoing withdrawal transactions.
"""

from decimal import Decimal
from typing import Any

import aiohttp
from loguru import logger

from app.config.settings import settings

from .base import WalletProviderError


class WestWalletClient:
    """Thin aiohttp client for the WestWallet REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self._api_key = api_key or settings.westwallet_api_key or ""
        self._base_url = (base_url or settings.westwallet_api_url).rstrip("/")
        self._timeout = aiohttp.ClientTimeout(
            total=timeout or settings.wallet_request_timeout
        )

    async def send_withdrawal(
        self,
        currency: str,
        amount: Decimal,
        address: str,
        reference_id: int,
    ) -> dict[str, Any]:
        """
        Send withdrawal transaction.

        Args:
            currency: Currency symbol
            amount: Net amount to send
            address: Destination wallet address
            reference_id: Withdrawal ID (used as label)

        Returns:
            Provider response containing txHash

        Raises:
            WalletProviderError: Request failed or was rejected
        """
        payload = {
            "currency": currency.upper(),
            "amount": str(amount),
            "address": address,
            "label": f"withdrawal_{reference_id}",
        }
        headers = {"X-API-Key": self._api_key, "Content-Type": "application/json"}
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(
                    f"{self._base_url}/wallet/send", json=payload, headers=headers
                ) as resp:
                    if resp.status >= 400:
                        text = await resp.text()
                        raise WalletProviderError(
                            f"WestWallet send -> {resp.status}: {text}",
                            status=resp.status,
                        )
                    data = await resp.json()
        except aiohttp.ClientError as e:
            logger.error(f"WestWallet send failed: {e}")
            raise WalletProviderError(f"WestWallet send failed: {e}") from e

        if not data.get("txHash"):
            raise WalletProviderError(f"WestWallet send returned no txHash: {data}")
        return data
