"""
Trade data models for the Solana Arbitrage Bot.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from arbbot.trading.jupiter import Quote


class TradeStatus(Enum):
    """Trade execution status."""
    SUBMITTED = "submitted"
    SIMULATED = "simulated"
    FAILED = "failed"


@dataclass
class TradeResult:
    """
    Result of a trade execution attempt.
    """
    status: TradeStatus
    quote: Quote
    signature: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0
    logged: bool = False

    @property
    def is_executed(self) -> bool:
        """Check if the trade went out (or was simulated in dry run)."""
        return self.status in {TradeStatus.SUBMITTED, TradeStatus.SIMULATED}

    @property
    def is_failed(self) -> bool:
        """Check if trade failed."""
        return self.status == TradeStatus.FAILED

    @property
    def solscan_url(self) -> Optional[str]:
        """Get Solscan URL for the transaction."""
        if self.signature and self.status == TradeStatus.SUBMITTED:
            return f"https://solscan.io/tx/{self.signature}"
        return None

    def __str__(self) -> str:
        return f"TradeResult({self.status.value}: {self.signature or self.error})"
