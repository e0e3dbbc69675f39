"""
Trade executor for the Solana Arbitrage Bot.

Turns an accepted quote into a signed transaction, submits it with a fixed
number of attempts and records the completed swap.
"""

from typing import Optional

from solders.hash import Hash
from solders.keypair import Keypair
from solders.transaction import Transaction

from arbbot.blockchain.client import SolanaClient
from arbbot.blockchain.transaction import build_transaction
from arbbot.blockchain.wallet import WalletManager
from arbbot.config.logging_config import get_logger
from arbbot.errors import TransactionBuildError, TransactionSubmitError
from arbbot.trading.jupiter import Quote
from arbbot.trading.models import TradeResult, TradeStatus
from arbbot.tracking.trade_log import TradeLog, TradeLogEntry

logger = get_logger(__name__)


class TradeExecutor:
    """
    Executes swaps from Jupiter quotes.

    Flow:
    1. Build a transaction from the quote instructions
    2. Sign with a fresh blockhash and send (up to max_retries attempts)
    3. Append the swap to the trade log
    """

    def __init__(
        self,
        solana: SolanaClient,
        wallet: WalletManager,
        trade_log: TradeLog,
        max_retries: int = 3,
        dry_run: bool = False,
    ):
        """
        Initialize the trade executor.

        Args:
            solana: RPC client used for blockhashes and submission
            wallet: Wallet manager holding the signing key
            trade_log: Log receiving one entry per completed swap
            max_retries: Total submission attempts per trade
            dry_run: Build trades without submitting them
        """
        self.solana = solana
        self.wallet = wallet
        self.trade_log = trade_log
        self.max_retries = max_retries
        self.dry_run = dry_run

        # Statistics
        self._total_trades = 0
        self._successful_trades = 0
        self._failed_trades = 0
        self._simulated_trades = 0

    async def submit(
        self,
        transaction: Transaction,
        keypair: Keypair,
        max_retries: int = 3,
    ) -> str:
        """
        Sign and send a transaction, retrying immediately on failure.

        Every error is treated the same way. There is no backoff between
        attempts.

        Args:
            transaction: Unsigned transaction
            keypair: Signing keypair
            max_retries: Total number of attempts

        Returns:
            Transaction signature

        Raises:
            TransactionSubmitError: If the final attempt fails
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, max_retries + 1):
            try:
                blockhash = await self.solana.get_latest_blockhash(retry=False)
                transaction.sign([keypair], Hash.from_string(blockhash))
                return await self.solana.send_transaction(bytes(transaction))
            except Exception as e:
                last_error = e
                logger.warning(
                    "trade_submit_attempt_failed",
                    attempt=attempt,
                    max_retries=max_retries,
                    error=str(e),
                )

        raise TransactionSubmitError(
            f"Max retries reached. Transaction failed: {last_error}",
            attempts=max_retries,
        )

    async def execute_trade(self, quote: Quote) -> TradeResult:
        """
        Execute a swap for an accepted quote.

        Args:
            quote: Quote to execute

        Returns:
            TradeResult with execution status
        """
        self._total_trades += 1

        logger.info(
            "trade_execution_started",
            input_mint=quote.input_mint[:8] + "...",
            output_mint=quote.output_mint[:8] + "...",
            in_amount=quote.in_amount,
            out_amount=quote.out_amount,
        )

        try:
            transaction = build_transaction(quote, self.wallet.pubkey)

            # DRY RUN MODE - stop before anything touches the network
            if self.dry_run:
                self._simulated_trades += 1
                logger.info(
                    "dry_run_trade",
                    instructions=len(quote.instructions),
                    in_amount=quote.in_amount,
                    out_amount=quote.out_amount,
                )
                return TradeResult(status=TradeStatus.SIMULATED, quote=quote)

            signature = await self.submit(
                transaction, self.wallet.keypair, self.max_retries
            )

        except (TransactionBuildError, TransactionSubmitError) as e:
            logger.error(
                "trade_execution_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            self._failed_trades += 1
            return TradeResult(
                status=TradeStatus.FAILED,
                quote=quote,
                error=str(e),
                attempts=getattr(e, "attempts", 0),
            )

        self._successful_trades += 1
        logged = self.trade_log.log(TradeLogEntry.from_quote(quote, signature))

        result = TradeResult(
            status=TradeStatus.SUBMITTED,
            quote=quote,
            signature=signature,
            logged=logged,
        )

        logger.info(
            "swap_completed",
            signature=signature,
            solscan=result.solscan_url,
            logged=logged,
        )

        return result

    def get_stats(self) -> dict:
        """Get execution statistics."""
        success_rate = 0.0
        if self._total_trades > 0:
            success_rate = self._successful_trades / self._total_trades * 100

        return {
            "total_trades": self._total_trades,
            "successful_trades": self._successful_trades,
            "failed_trades": self._failed_trades,
            "simulated_trades": self._simulated_trades,
            "success_rate": success_rate,
        }
