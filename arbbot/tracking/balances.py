"""
Balance and health reporting.

Token balances come from the Helius balances API; the health check asks the
RPC node for the wallet's native SOL balance.
"""

from typing import Any, Optional

import httpx

from arbbot.blockchain.client import LAMPORTS_PER_SOL, SolanaClient
from arbbot.config.logging_config import get_logger

logger = get_logger(__name__)


class BalanceReporter:
    """Reports wallet balances. Never raises to the caller."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        address: str,
        solana: SolanaClient,
        timeout: int = 30,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the reporter.

        Args:
            api_url: Helius API base URL
            api_key: Helius API key (sent as a bearer token)
            address: Wallet address to report on
            solana: RPC client for the native balance
            timeout: Request timeout in seconds
            http_client: Pre-built HTTP client (tests, shared pools)
        """
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.address = address
        self.solana = solana
        self.timeout = timeout

        self._client: Optional[httpx.AsyncClient] = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def refresh_balances(self) -> Optional[Any]:
        """
        Fetch and log the wallet's token balances.

        Returns:
            The balance payload as returned by the API, or None on failure
        """
        client = await self._get_client()
        url = f"{self.api_url}/accounts/{self.address}/balances"

        try:
            resp = await client.get(
                url,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            resp.raise_for_status()
            balances = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("balance_refresh_failed", address=self.address, error=str(e))
            return None

        logger.info("balances", address=self.address, balances=balances)
        return balances

    async def health_check(self) -> bool:
        """
        Check that the wallet holds a positive native balance.

        Returns:
            True iff the balance is strictly positive; False on any error
        """
        try:
            lamports = await self.solana.get_balance_lamports(self.address)
        except Exception as e:
            logger.error("health_check_failed", address=self.address, error=str(e))
            return False

        logger.info(
            "health_check",
            address=self.address,
            balance_sol=lamports / LAMPORTS_PER_SOL,
        )
        return lamports > 0
