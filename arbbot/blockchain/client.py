"""
Solana RPC client wrapper with retry logic and error handling.
"""

import asyncio
from typing import Any, Callable, Optional

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.types import TxOpts
from solders.pubkey import Pubkey

from arbbot.config.logging_config import get_logger

logger = get_logger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000


class SolanaClient:
    """
    Wrapper around the Solana RPC client with enhanced error handling
    and retry logic for read calls.

    Transaction sends are single attempts; the caller owns the retry policy.
    """

    def __init__(
        self,
        rpc_url: str,
        commitment: str = "confirmed",
        timeout: int = 30,
        max_retries: int = 3,
    ):
        """
        Initialize the Solana client.

        Args:
            rpc_url: HTTP RPC endpoint
            commitment: Transaction commitment level
            timeout: Request timeout in seconds
            max_retries: Number of retry attempts for failed read requests
        """
        self.rpc_url = rpc_url
        self.commitment = Commitment(commitment)
        self.timeout = timeout
        self.max_retries = max_retries

        self._client: Optional[AsyncClient] = None

    async def connect(self) -> None:
        """Establish connection to the Solana RPC."""
        if self._client is None:
            self._client = AsyncClient(
                self.rpc_url,
                commitment=self.commitment,
                timeout=self.timeout,
            )
            logger.info("solana_client_connected", rpc_url=self.rpc_url)

    async def disconnect(self) -> None:
        """Close the RPC connection."""
        if self._client:
            await self._client.close()
            self._client = None

        logger.info("solana_client_disconnected")

    async def _ensure_connected(self) -> AsyncClient:
        """Ensure client is connected and return it."""
        if self._client is None:
            await self.connect()
        return self._client

    async def _retry_request(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute a request with retry logic.

        Args:
            func: Async function to execute
            *args: Positional arguments
            **kwargs: Keyword arguments

        Returns:
            Result from the function

        Raises:
            Exception: If all retries fail
        """
        last_error = None

        for attempt in range(self.max_retries):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                last_error = e
                logger.warning(
                    "rpc_request_failed",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    error=str(e),
                )

                if attempt < self.max_retries - 1:
                    # Exponential backoff
                    wait_time = 2 ** attempt
                    await asyncio.sleep(wait_time)

        raise last_error

    # ===========================================
    # ACCOUNT METHODS
    # ===========================================

    async def get_balance_lamports(self, pubkey: str) -> int:
        """
        Get the native balance for an account.

        Args:
            pubkey: Public key of the account

        Returns:
            Balance in lamports
        """
        client = await self._ensure_connected()

        async def _get_balance():
            result = await client.get_balance(Pubkey.from_string(pubkey))
            return result.value

        return await self._retry_request(_get_balance)

    # ===========================================
    # TRANSACTION METHODS
    # ===========================================

    async def get_latest_blockhash(self, retry: bool = True) -> str:
        """
        Get the latest blockhash.

        Args:
            retry: Use the read backoff. Submission passes False so each
                attempt makes exactly one RPC call.
        """
        client = await self._ensure_connected()

        async def _get_blockhash():
            result = await client.get_latest_blockhash()
            return str(result.value.blockhash)

        if not retry:
            return await _get_blockhash()
        return await self._retry_request(_get_blockhash)

    async def send_transaction(
        self,
        serialized_tx: bytes,
        skip_preflight: bool = False,
    ) -> str:
        """
        Send a signed transaction to the network (single attempt).

        Args:
            serialized_tx: Serialized transaction bytes
            skip_preflight: Skip preflight checks

        Returns:
            Transaction signature
        """
        client = await self._ensure_connected()

        result = await client.send_raw_transaction(
            serialized_tx,
            opts=TxOpts(
                skip_preflight=skip_preflight,
                preflight_commitment=self.commitment,
            ),
        )
        signature = str(result.value)
        logger.info("transaction_sent", signature=signature)
        return signature
