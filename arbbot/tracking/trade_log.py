"""
Append-only JSON trade log.

The file holds a single JSON array; each completed swap appends one entry.
Every write rewrites the full array (read, append in memory, write back),
which assumes a single writer process.
"""

import json
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Union

from arbbot.config.logging_config import get_logger

if TYPE_CHECKING:
    from arbbot.trading.jupiter import Quote

logger = get_logger(__name__)


@dataclass
class TradeLogEntry:
    """
    One completed swap, as persisted in the trade log file.
    """
    input_token: str
    in_amount: str
    output_token: str
    out_amount: str
    tx_id: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @classmethod
    def from_quote(cls, quote: "Quote", tx_id: str) -> "TradeLogEntry":
        """Create an entry for a swap executed from a quote."""
        return cls(
            input_token=quote.input_mint,
            in_amount=str(quote.in_amount),
            output_token=quote.output_mint,
            out_amount=str(quote.out_amount),
            tx_id=tx_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the on-disk representation."""
        return {
            "inputToken": self.input_token,
            "inAmount": self.in_amount,
            "outputToken": self.output_token,
            "outAmount": self.out_amount,
            "txId": self.tx_id,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TradeLogEntry":
        """Create from the on-disk representation."""
        return cls(
            input_token=data["inputToken"],
            in_amount=str(data["inAmount"]),
            output_token=data["outputToken"],
            out_amount=str(data["outAmount"]),
            tx_id=data["txId"],
            timestamp=data["timestamp"],
        )


class TradeLog:
    """Persists completed swaps to a local JSON file."""

    def __init__(self, path: Union[str, Path] = "trades.json"):
        self.path = Path(path)

    def _ensure_file(self) -> None:
        """Initialize an absent log as an empty array."""
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write_entries([])

    def _write_entries(self, entries: List[Dict[str, Any]]) -> None:
        """Write the full array, replacing the file atomically."""
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def read_entries(self) -> List[Dict[str, Any]]:
        """
        Read all logged entries.

        Returns:
            Entries in append order (empty if the file does not exist)

        Raises:
            ValueError: If the file does not hold a JSON array
        """
        if not self.path.exists():
            return []

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, list):
            raise ValueError(f"Trade log {self.path} is not a JSON array")

        return data

    def log(self, entry: TradeLogEntry) -> bool:
        """
        Append an entry to the log.

        Failures are reported but never raised: the trade itself has already
        happened.

        Args:
            entry: Swap to record

        Returns:
            True if the entry was persisted
        """
        try:
            self._ensure_file()
            entries = self.read_entries()
            entries.append(entry.to_dict())
            self._write_entries(entries)
        except (OSError, ValueError) as e:
            logger.error(
                "trade_log_error",
                path=str(self.path),
                tx_id=entry.tx_id,
                error=str(e),
            )
            return False

        logger.debug("trade_logged", path=str(self.path), count=len(entries))
        return True
