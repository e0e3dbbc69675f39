"""
Arbitrage bot lifecycle controller.

Owns every piece of runtime state (last trade time, API call counter, the
polling task) and drives the quote -> decide -> execute cycle on a fixed
interval.
"""

import asyncio
import time
from enum import Enum
from typing import Callable, Optional

from arbbot.blockchain.client import SolanaClient
from arbbot.blockchain.wallet import WalletManager
from arbbot.config.logging_config import get_logger
from arbbot.config.settings import BotConfig
from arbbot.trading.executor import TradeExecutor
from arbbot.trading.jupiter import JupiterClient, Quote, create_jupiter_client
from arbbot.trading.models import TradeResult
from arbbot.trading.strategy import evaluate_quote
from arbbot.tracking.balances import BalanceReporter
from arbbot.tracking.trade_log import TradeLog

logger = get_logger(__name__)

Clock = Callable[[], float]


def wall_clock_ms() -> float:
    """Current wall-clock time in milliseconds."""
    return time.time() * 1000


class BotState(str, Enum):
    """Lifecycle state."""
    STOPPED = "stopped"
    RUNNING = "running"


class ApiCallCounter:
    """
    Fixed-window counter for quote fetches.

    The window opens on first use and the count resets once ``window_ms``
    has elapsed since it opened.
    """

    def __init__(self, limit: int, window_ms: float):
        self.limit = limit
        self.window_ms = window_ms
        self.count = 0
        self._window_start: Optional[float] = None

    def _roll(self, now: float) -> None:
        if self._window_start is None or now - self._window_start >= self.window_ms:
            self._window_start = now
            self.count = 0

    def exhausted(self, now: float) -> bool:
        """True when no more calls are allowed in the current window."""
        self._roll(now)
        return self.count >= self.limit

    def increment(self, now: float) -> None:
        """Record one call."""
        self._roll(now)
        self.count += 1

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)


class ArbBot:
    """
    Main application class that orchestrates all components.

    States: STOPPED -> RUNNING -> STOPPED. ``init`` refreshes balances and
    starts the price watch; ``terminate_session`` stops it and may be called
    any number of times.
    """

    def __init__(
        self,
        config: BotConfig,
        secret_key: bytes,
        dry_run: bool = False,
        solana: Optional[SolanaClient] = None,
        jupiter: Optional[JupiterClient] = None,
        balances: Optional[BalanceReporter] = None,
        executor: Optional[TradeExecutor] = None,
        clock: Clock = wall_clock_ms,
    ):
        """
        Initialize the bot.

        Args:
            config: Bot configuration
            secret_key: Raw wallet secret key
            dry_run: Build trades without submitting them
            solana: RPC client (built from config if omitted)
            jupiter: Jupiter client (built from config if omitted)
            balances: Balance reporter (built from config if omitted)
            executor: Trade executor (built from config if omitted)
            clock: Millisecond clock
        """
        self.config = config
        self.clock = clock

        self.wallet = WalletManager(secret_key)

        self.solana = solana or SolanaClient(
            rpc_url=config.solana_rpc_url,
            commitment=config.commitment,
            timeout=config.rpc_timeout,
        )
        self.jupiter = jupiter or create_jupiter_client(config)
        self.balances = balances or BalanceReporter(
            api_url=config.helius_api_url,
            api_key=config.helius_api_key.get_secret_value(),
            address=self.wallet.address,
            solana=self.solana,
            timeout=config.rpc_timeout,
        )
        self.executor = executor or TradeExecutor(
            solana=self.solana,
            wallet=self.wallet,
            trade_log=TradeLog(config.trade_log_path),
            max_retries=config.max_retries,
            dry_run=dry_run,
        )

        # State
        self.state = BotState.STOPPED
        self.last_trade_timestamp: float = 0
        self.api_calls = ApiCallCounter(config.rate_limit, config.rate_limit_window)
        self._task: Optional[asyncio.Task] = None
        self._shutdown_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self.state == BotState.RUNNING

    async def init(self) -> None:
        """Refresh balances once, then start watching prices."""
        logger.info(
            "bot_starting",
            address=self.wallet.address,
            input_mint=self.config.input_mint,
            output_mint=self.config.output_mint,
            dry_run=self.executor.dry_run,
        )
        await self.balances.refresh_balances()
        self._start_watching_prices()

    def _start_watching_prices(self) -> None:
        if self.is_running:
            return

        self.state = BotState.RUNNING
        self._shutdown_event.clear()
        self._task = asyncio.create_task(self._watch_loop())

        logger.info(
            "price_watch_started",
            interval_ms=self.config.price_watch_interval,
            rate_limit=self.config.rate_limit,
        )

    async def _watch_loop(self) -> None:
        """Main polling loop."""
        interval = self.config.price_watch_interval / 1000

        while self.is_running:
            try:
                await self.tick()
            except Exception as e:
                logger.error("price_watch_error", error=str(e))

            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    async def tick(self) -> Optional[TradeResult]:
        """
        Run one polling cycle.

        Returns:
            TradeResult if a trade was attempted this cycle
        """
        if self.api_calls.exhausted(self.clock()):
            logger.info(
                "rate_limit_reached",
                limit=self.api_calls.limit,
                window_ms=self.api_calls.window_ms,
            )
            return None

        quote = await self.jupiter.get_quote(
            input_mint=self.config.input_mint,
            output_mint=self.config.output_mint,
            amount=self.config.trade_amount,
            user_public_key=self.wallet.address,
            slippage_bps=self.config.slippage_bps,
        )
        if quote is None:
            return None

        try:
            return await self.check_and_execute_trade(quote)
        finally:
            self.api_calls.increment(self.clock())

    async def check_and_execute_trade(self, quote: Quote) -> Optional[TradeResult]:
        """
        Evaluate a quote and execute it when it qualifies.

        The last trade time only moves when a trade actually went out.
        """
        now = self.clock()
        decision = evaluate_quote(
            quote,
            target_gain_pct=self.config.target_gain_percentage,
            slippage_tolerance_pct=self.config.slippage_tolerance,
            throttle_ms=self.config.trade_throttle,
            last_trade_time=self.last_trade_timestamp,
            now=now,
        )

        if not decision.accepted:
            logger.info(
                "trade_skipped",
                reason=decision.reason.value,
                expected_min=str(decision.min_out_amount),
                out_amount=quote.out_amount,
                throttle_ms=self.config.trade_throttle,
            )
            return None

        logger.info(
            "executing_trade",
            in_amount=quote.in_amount,
            input_mint=quote.input_mint,
            out_amount=quote.out_amount,
            output_mint=quote.output_mint,
        )

        result = await self.executor.execute_trade(quote)
        if result.is_executed:
            self.last_trade_timestamp = now

        return result

    def terminate_session(self, reason: str) -> None:
        """
        Stop watching prices. Safe to call when already stopped.

        Only future ticks are prevented: a tick already in progress runs to
        completion, and the loop exits at its next check.
        """
        if self.is_running:
            logger.warning("terminating_session", reason=reason)

        self.state = BotState.STOPPED
        self._shutdown_event.set()

    async def health_check(self) -> bool:
        """True iff the wallet's native balance is positive."""
        return await self.balances.health_check()

    async def run_forever(self) -> None:
        """Run the bot until the session is terminated."""
        await self._shutdown_event.wait()

    async def close(self) -> None:
        """Terminate the session and release network clients."""
        self.terminate_session("Shutting down")

        # Let an in-flight trade finish before its clients go away
        if self._task is not None:
            await self._task
            self._task = None

        for name, closer in (
            ("jupiter", self.jupiter.close),
            ("balances", self.balances.close),
            ("solana", self.solana.disconnect),
        ):
            try:
                await closer()
            except Exception as e:
                logger.error(f"{name}_close_error", error=str(e))

        logger.info("bot_stopped", stats=self.executor.get_stats())

    def signal_handler(self, sig) -> None:
        """Handle shutdown signals."""
        logger.info("shutdown_signal_received", signal=str(sig))
        self.terminate_session("Received termination signal")
