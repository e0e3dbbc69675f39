"""
Trade decision logic.

Pure functions: every input (including the current time and the time of the
last trade, both in milliseconds) is passed in explicitly.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Tuple, Union

from arbbot.trading.jupiter import Quote

Number = Union[int, float, Decimal]

_HUNDRED = Decimal(100)


class DecisionReason(str, Enum):
    """Why a quote was accepted or rejected."""
    ACCEPTED = "accepted"
    THROTTLED = "throttled"
    BELOW_TARGET = "below_target"


@dataclass(frozen=True)
class TradeDecision:
    """Outcome of evaluating a quote."""
    accepted: bool
    reason: DecisionReason
    target_out: Decimal
    slippage_amount: Decimal

    @property
    def min_out_amount(self) -> Decimal:
        """Smallest output amount that still qualifies."""
        return self.target_out - self.slippage_amount


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 2.0 as 2.0 instead of its binary expansion
    return Decimal(str(value))


def compute_thresholds(
    in_amount: int,
    target_gain_pct: Number,
    slippage_tolerance_pct: Number,
) -> Tuple[Decimal, Decimal]:
    """
    Compute the target output and the tolerated shortfall.

    Returns:
        (target_out, slippage_amount)
    """
    target_out = Decimal(in_amount) * (1 + _to_decimal(target_gain_pct) / _HUNDRED)
    slippage_amount = target_out * (_to_decimal(slippage_tolerance_pct) / _HUNDRED)
    return target_out, slippage_amount


def evaluate_quote(
    quote: Quote,
    target_gain_pct: Number,
    slippage_tolerance_pct: Number,
    throttle_ms: Number,
    last_trade_time: Number,
    now: Number,
) -> TradeDecision:
    """
    Decide whether a quote should be traded.

    The throttle window is checked first: a trade inside the window is
    rejected no matter how profitable. Otherwise the quote is accepted when
    ``out_amount >= target_out - slippage_amount``.

    Args:
        quote: Quote to evaluate
        target_gain_pct: Required gain in percent
        slippage_tolerance_pct: Allowed shortfall in percent of target_out
        throttle_ms: Minimum time between trades
        last_trade_time: Time of the last executed trade (0 = never)
        now: Current time

    Returns:
        TradeDecision
    """
    target_out, slippage_amount = compute_thresholds(
        quote.in_amount, target_gain_pct, slippage_tolerance_pct
    )

    if _to_decimal(now) - _to_decimal(last_trade_time) < _to_decimal(throttle_ms):
        return TradeDecision(False, DecisionReason.THROTTLED, target_out, slippage_amount)

    if Decimal(quote.out_amount) >= target_out - slippage_amount:
        return TradeDecision(True, DecisionReason.ACCEPTED, target_out, slippage_amount)

    return TradeDecision(False, DecisionReason.BELOW_TARGET, target_out, slippage_amount)


def should_trade(
    quote: Quote,
    target_gain_pct: Number,
    slippage_tolerance_pct: Number,
    throttle_ms: Number,
    last_trade_time: Number,
    now: Number,
) -> bool:
    """Boolean form of :func:`evaluate_quote`."""
    return evaluate_quote(
        quote,
        target_gain_pct,
        slippage_tolerance_pct,
        throttle_ms,
        last_trade_time,
        now,
    ).accepted
