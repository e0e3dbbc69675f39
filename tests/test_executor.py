"""Tests for trading.executor: submission retry, logging, dry run."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from solders.hash import Hash

from arbbot.blockchain import client as client_module
from arbbot.blockchain.client import SolanaClient
from arbbot.blockchain.transaction import build_transaction
from arbbot.blockchain.wallet import WalletManager
from arbbot.errors import TransactionSubmitError
from arbbot.trading.executor import TradeExecutor
from arbbot.trading.models import TradeStatus
from arbbot.tracking.trade_log import TradeLog

from conftest import make_instruction, make_quote

# ── helpers ───────────────────────────────────────────────────────


def _solana(send_side_effect=None, send_return="5igSig"):
    solana = MagicMock()
    solana.get_latest_blockhash = AsyncMock(return_value=str(Hash.default()))
    solana.send_transaction = AsyncMock(
        side_effect=send_side_effect, return_value=send_return
    )
    return solana


def _signed_quote(wallet):
    payer_account = {"pubkey": wallet.address, "isSigner": True, "isWritable": True}
    return make_quote(
        instructions=[
            make_instruction(accounts=[payer_account]),
            make_instruction(data=b"swap"),
        ]
    )


@pytest.fixture
def wallet(secret_key):
    return WalletManager(secret_key)


@pytest.fixture
def trade_log(tmp_path):
    return TradeLog(tmp_path / "trades.json")


# ══════════════════════════════════════════════════════════════════
#  submit
# ══════════════════════════════════════════════════════════════════


class TestSubmit:

    @pytest.mark.asyncio
    async def test_persistent_failure_tries_exactly_max_retries(self, wallet, trade_log):
        solana = _solana(send_side_effect=RuntimeError("node is behind"))
        executor = TradeExecutor(solana, wallet, trade_log)
        tx = build_transaction(_signed_quote(wallet), wallet.pubkey)

        with pytest.raises(TransactionSubmitError) as exc:
            await executor.submit(tx, wallet.keypair, max_retries=3)

        assert solana.send_transaction.await_count == 3
        assert exc.value.attempts == 3

    @pytest.mark.asyncio
    async def test_custom_retry_count(self, wallet, trade_log):
        solana = _solana(send_side_effect=RuntimeError("boom"))
        executor = TradeExecutor(solana, wallet, trade_log)
        tx = build_transaction(_signed_quote(wallet), wallet.pubkey)

        with pytest.raises(TransactionSubmitError):
            await executor.submit(tx, wallet.keypair, max_retries=5)

        assert solana.send_transaction.await_count == 5

    @pytest.mark.asyncio
    async def test_first_success_stops_immediately(self, wallet, trade_log):
        solana = _solana(send_return="firstTrySig")
        executor = TradeExecutor(solana, wallet, trade_log)
        tx = build_transaction(_signed_quote(wallet), wallet.pubkey)

        signature = await executor.submit(tx, wallet.keypair, max_retries=3)

        assert signature == "firstTrySig"
        assert solana.send_transaction.await_count == 1

    @pytest.mark.asyncio
    async def test_recovers_on_last_attempt(self, wallet, trade_log):
        solana = _solana(
            send_side_effect=[RuntimeError("a"), RuntimeError("b"), "thirdSig"]
        )
        executor = TradeExecutor(solana, wallet, trade_log)
        tx = build_transaction(_signed_quote(wallet), wallet.pubkey)

        assert await executor.submit(tx, wallet.keypair, max_retries=3) == "thirdSig"
        assert solana.send_transaction.await_count == 3

    @pytest.mark.asyncio
    async def test_blockhash_failure_counts_as_attempt(self, wallet, trade_log):
        solana = _solana()
        solana.get_latest_blockhash = AsyncMock(side_effect=RuntimeError("rpc down"))
        executor = TradeExecutor(solana, wallet, trade_log)
        tx = build_transaction(_signed_quote(wallet), wallet.pubkey)

        with pytest.raises(TransactionSubmitError):
            await executor.submit(tx, wallet.keypair, max_retries=2)

        assert solana.get_latest_blockhash.await_count == 2
        solana.send_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unreachable_rpc_makes_one_call_per_attempt(self, wallet, trade_log, monkeypatch):
        sleeps = AsyncMock()
        monkeypatch.setattr(client_module.asyncio, "sleep", sleeps)

        rpc = MagicMock()
        rpc.get_latest_blockhash = AsyncMock(side_effect=ConnectionError("rpc down"))
        rpc.send_raw_transaction = AsyncMock()
        solana = SolanaClient("https://rpc.test", max_retries=3)
        solana._client = rpc

        executor = TradeExecutor(solana, wallet, trade_log)
        tx = build_transaction(_signed_quote(wallet), wallet.pubkey)

        with pytest.raises(TransactionSubmitError):
            await executor.submit(tx, wallet.keypair, max_retries=3)

        assert rpc.get_latest_blockhash.await_count == 3
        sleeps.assert_not_awaited()
        rpc.send_raw_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sends_signed_bytes(self, wallet, trade_log):
        solana = _solana()
        executor = TradeExecutor(solana, wallet, trade_log)
        tx = build_transaction(_signed_quote(wallet), wallet.pubkey)

        await executor.submit(tx, wallet.keypair)

        sent = solana.send_transaction.await_args.args[0]
        assert isinstance(sent, bytes)
        assert sent == bytes(tx)
        assert tx.is_signed()


# ══════════════════════════════════════════════════════════════════
#  execute_trade
# ══════════════════════════════════════════════════════════════════


class TestExecuteTrade:

    @pytest.mark.asyncio
    async def test_success_writes_log_entry(self, wallet, trade_log):
        solana = _solana(send_return="okSig")
        executor = TradeExecutor(solana, wallet, trade_log)
        quote = _signed_quote(wallet)

        result = await executor.execute_trade(quote)

        assert result.status == TradeStatus.SUBMITTED
        assert result.is_executed
        assert result.signature == "okSig"
        assert result.logged
        assert result.solscan_url == "https://solscan.io/tx/okSig"

        entries = json.loads(trade_log.path.read_text())
        assert len(entries) == 1
        assert entries[0]["txId"] == "okSig"
        assert entries[0]["inputToken"] == quote.input_mint
        assert entries[0]["outputToken"] == quote.output_mint
        assert entries[0]["inAmount"] == "1000000"
        assert entries[0]["outAmount"] == "1020000"
        assert "timestamp" in entries[0]

    @pytest.mark.asyncio
    async def test_failure_writes_nothing(self, wallet, trade_log):
        solana = _solana(send_side_effect=RuntimeError("blockhash not found"))
        executor = TradeExecutor(solana, wallet, trade_log, max_retries=3)

        result = await executor.execute_trade(_signed_quote(wallet))

        assert result.status == TradeStatus.FAILED
        assert not result.is_executed
        assert result.attempts == 3
        assert not trade_log.path.exists()
        assert executor.get_stats()["failed_trades"] == 1

    @pytest.mark.asyncio
    async def test_malformed_instruction_fails_without_network(self, wallet, trade_log):
        solana = _solana()
        executor = TradeExecutor(solana, wallet, trade_log)
        quote = make_quote(instructions=[{"programId": "bogus", "accounts": [], "data": ""}])

        result = await executor.execute_trade(quote)

        assert result.is_failed
        solana.get_latest_blockhash.assert_not_awaited()
        solana.send_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dry_run_does_not_submit(self, wallet, trade_log):
        solana = _solana()
        executor = TradeExecutor(solana, wallet, trade_log, dry_run=True)

        result = await executor.execute_trade(_signed_quote(wallet))

        assert result.status == TradeStatus.SIMULATED
        assert result.is_executed
        solana.send_transaction.assert_not_awaited()
        assert not trade_log.path.exists()

    @pytest.mark.asyncio
    async def test_log_failure_keeps_trade(self, wallet, tmp_path):
        # A directory where the log file should be makes every write fail
        broken_log = TradeLog(tmp_path)
        solana = _solana(send_return="stillSig")
        executor = TradeExecutor(solana, wallet, broken_log)

        result = await executor.execute_trade(_signed_quote(wallet))

        assert result.status == TradeStatus.SUBMITTED
        assert result.signature == "stillSig"
        assert result.logged is False

    @pytest.mark.asyncio
    async def test_stats(self, wallet, trade_log):
        solana = _solana(send_side_effect=["sig1", RuntimeError("x"), RuntimeError("x")])
        executor = TradeExecutor(solana, wallet, trade_log, max_retries=2)

        await executor.execute_trade(_signed_quote(wallet))
        await executor.execute_trade(_signed_quote(wallet))

        stats = executor.get_stats()
        assert stats["total_trades"] == 2
        assert stats["successful_trades"] == 1
        assert stats["failed_trades"] == 1
        assert stats["success_rate"] == pytest.approx(50.0)
