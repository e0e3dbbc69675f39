"""
Jupiter V6 Swap API client for quotes and swap instructions.

A quote is fetched from ``/quote`` and the matching instructions from
``/swap-instructions``; the bot assembles and submits the transaction itself.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from arbbot.config.logging_config import get_logger
from arbbot.config.settings import BotConfig
from arbbot.errors import InvalidQuoteError, JupiterError

logger = get_logger(__name__)


# Jupiter API endpoint
JUPITER_V6_API = "https://quote-api.jup.ag/v6"

_AMOUNT_RE = re.compile(r"^\d+$")


def _parse_amount(value: Any, field_name: str) -> int:
    """
    Parse a raw token amount.

    Jupiter sends amounts as decimal integer strings. Anything else is an
    explicit validation failure rather than a NaN-style comparison later on.
    """
    if isinstance(value, bool):
        raise InvalidQuoteError(f"Malformed {field_name}: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidQuoteError(f"Negative {field_name}: {value}")
        return value
    if isinstance(value, str) and _AMOUNT_RE.match(value.strip()):
        return int(value.strip())
    raise InvalidQuoteError(f"Malformed {field_name}: {value!r}")


@dataclass
class Quote:
    """
    A priced proposal for exchanging one token amount for another,
    together with the instructions needed to execute it.
    """
    input_mint: str
    output_mint: str
    in_amount: int
    out_amount: int

    # Opaque instruction payloads, in execution order
    instructions: List[Dict[str, Any]] = field(default_factory=list)

    slippage_bps: int = 0
    price_impact_pct: Optional[float] = None

    @classmethod
    def from_api_response(
        cls,
        quote_data: Dict[str, Any],
        instructions_data: Dict[str, Any],
    ) -> "Quote":
        """
        Create a Quote from the /quote and /swap-instructions responses.

        Raises:
            InvalidQuoteError: If amounts are malformed or the swap
                instruction is missing
        """
        for key in ("inputMint", "outputMint"):
            if not quote_data.get(key):
                raise InvalidQuoteError(f"Quote missing {key}")

        in_amount = _parse_amount(quote_data.get("inAmount"), "inAmount")
        out_amount = _parse_amount(quote_data.get("outAmount"), "outAmount")

        swap_instruction = instructions_data.get("swapInstruction")
        if not swap_instruction:
            raise InvalidQuoteError("Response missing swapInstruction")

        instructions: List[Dict[str, Any]] = []
        instructions.extend(instructions_data.get("computeBudgetInstructions") or [])
        instructions.extend(instructions_data.get("setupInstructions") or [])
        if instructions_data.get("tokenLedgerInstruction"):
            instructions.append(instructions_data["tokenLedgerInstruction"])
        instructions.append(swap_instruction)
        if instructions_data.get("cleanupInstruction"):
            instructions.append(instructions_data["cleanupInstruction"])

        price_impact = quote_data.get("priceImpactPct")

        try:
            return cls(
                input_mint=quote_data["inputMint"],
                output_mint=quote_data["outputMint"],
                in_amount=in_amount,
                out_amount=out_amount,
                instructions=instructions,
                slippage_bps=int(quote_data.get("slippageBps", 0)),
                price_impact_pct=float(price_impact) if price_impact is not None else None,
            )
        except (TypeError, ValueError) as e:
            raise InvalidQuoteError(f"Malformed quote field: {e}")

    @property
    def price(self) -> float:
        """Calculate the swap price."""
        if self.in_amount > 0:
            return self.out_amount / self.in_amount
        return 0.0


class JupiterClient:
    """
    Client for the Jupiter V6 Swap API.

    Every call is a single round trip: no retry and no caching. Callers
    poll again on their next cycle.
    """

    def __init__(
        self,
        api_url: str = JUPITER_V6_API,
        api_key: str = "",
        timeout: int = 30,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize Jupiter client.

        Args:
            api_url: Base URL of the V6 API
            api_key: Optional Jupiter API key from portal.jup.ag
            timeout: Request timeout in seconds
            http_client: Pre-built HTTP client (tests, shared pools)
        """
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

        self._client: Optional[httpx.AsyncClient] = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            # Only add API key header if provided (works without for basic usage)
            if self.api_key:
                headers["x-api-key"] = self.api_key

            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=headers,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict] = None,
        json: Optional[Dict] = None,
    ) -> Dict[str, Any]:
        """
        Make a single API request.

        Raises:
            JupiterError: On transport errors, error statuses or bad bodies
        """
        client = await self._get_client()
        url = f"{self.api_url}/{endpoint}"

        try:
            if method == "GET":
                response = await client.get(url, params=params)
            else:
                response = await client.post(url, json=json)
        except httpx.TimeoutException as e:
            raise JupiterError(f"Request timeout: {e}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise JupiterError(f"HTTP error: {e}")

        if response.status_code == 429:
            raise JupiterError("Rate limited by Jupiter", "429")

        try:
            data = response.json()
        except ValueError:
            raise JupiterError(
                f"Invalid JSON response ({response.status_code}): {response.text[:200]}",
                str(response.status_code),
            )

        if response.status_code >= 400:
            error_msg = data.get("error", response.text) if isinstance(data, dict) else response.text
            error_code = data.get("errorCode") if isinstance(data, dict) else None
            raise JupiterError(error_msg, error_code or str(response.status_code))

        if not isinstance(data, dict):
            raise JupiterError(f"Unexpected response type from {endpoint}")

        return data

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        user_public_key: str,
        slippage_bps: Optional[int] = None,
    ) -> Optional[Quote]:
        """
        Get a quote and its swap instructions.

        Args:
            input_mint: Input token mint address
            output_mint: Output token mint address
            amount: Amount in smallest units
            user_public_key: Wallet that will sign the swap
            slippage_bps: Optional slippage tolerance in basis points

        Returns:
            Quote, or None if anything went wrong
        """
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "asLegacyTransaction": "true",
        }

        if slippage_bps is not None:
            params["slippageBps"] = str(slippage_bps)

        try:
            quote_data = await self._request("GET", "quote", params=params)
            instructions_data = await self._request(
                "POST",
                "swap-instructions",
                json={
                    "quoteResponse": quote_data,
                    "userPublicKey": user_public_key,
                    "wrapAndUnwrapSol": True,
                    "asLegacyTransaction": True,
                },
            )
            quote = Quote.from_api_response(quote_data, instructions_data)
        except JupiterError as e:
            logger.error(
                "jupiter_quote_failed",
                input_mint=input_mint[:8] + "...",
                output_mint=output_mint[:8] + "...",
                error=str(e),
                code=e.code,
            )
            return None

        logger.info(
            "jupiter_quote_received",
            in_amount=quote.in_amount,
            out_amount=quote.out_amount,
            price=quote.price,
            instructions=len(quote.instructions),
        )

        return quote


def create_jupiter_client(config: BotConfig) -> JupiterClient:
    """
    Create a configured Jupiter client.

    Args:
        config: Bot configuration

    Returns:
        Configured JupiterClient
    """
    return JupiterClient(
        api_url=config.jupiter_api_url,
        api_key=config.jupiter_api_key.get_secret_value(),
        timeout=config.rpc_timeout,
    )
