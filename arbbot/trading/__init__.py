"""Trading module for quotes, trade decisions and execution."""

from .jupiter import JupiterClient, Quote
from .strategy import TradeDecision, evaluate_quote, should_trade
from .models import TradeResult, TradeStatus
from .executor import TradeExecutor

__all__ = [
    "JupiterClient",
    "Quote",
    "TradeDecision",
    "evaluate_quote",
    "should_trade",
    "TradeResult",
    "TradeStatus",
    "TradeExecutor",
]
