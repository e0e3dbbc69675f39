import base64

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from arbbot.config.settings import BotConfig
from arbbot.trading.jupiter import Quote

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def make_instruction(program_id=None, data=b"\x01\x02", accounts=None):
    """Build a Jupiter-style instruction payload."""
    return {
        "programId": str(program_id or Pubkey.new_unique()),
        "accounts": accounts if accounts is not None else [
            {"pubkey": str(Pubkey.new_unique()), "isSigner": False, "isWritable": True},
        ],
        "data": base64.b64encode(data).decode(),
    }


def make_quote(**overrides):
    defaults = dict(
        input_mint=SOL_MINT,
        output_mint=USDC_MINT,
        in_amount=1_000_000,
        out_amount=1_020_000,
        instructions=[make_instruction()],
        slippage_bps=100,
    )
    defaults.update(overrides)
    return Quote(**defaults)


def make_config(**overrides):
    defaults = dict(
        solana_rpc_url="https://rpc.test",
        helius_api_url="https://helius.test/v0",
        helius_api_key="helius-key",
        input_mint=SOL_MINT,
        output_mint=USDC_MINT,
        target_gain_percentage=2,
        price_watch_interval=1000,
        slippage_tolerance=1,
        trade_throttle=60_000,
    )
    defaults.update(overrides)
    return BotConfig(**defaults)


@pytest.fixture
def keypair():
    return Keypair()


@pytest.fixture
def secret_key(keypair):
    return bytes(keypair)


@pytest.fixture
def bot_config():
    return make_config()
