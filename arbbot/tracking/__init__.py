"""Tracking module for the trade log and balance reporting."""

from .trade_log import TradeLog, TradeLogEntry
from .balances import BalanceReporter

__all__ = ["TradeLog", "TradeLogEntry", "BalanceReporter"]
