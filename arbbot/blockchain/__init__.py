"""Blockchain module for Solana interactions."""

from .client import SolanaClient
from .wallet import WalletManager
from .transaction import build_transaction, instruction_from_api

__all__ = ["SolanaClient", "WalletManager", "build_transaction", "instruction_from_api"]
