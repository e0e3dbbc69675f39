"""
Solana Arbitrage Bot - polls Jupiter for swap quotes between two tokens
and executes a swap when the target gain threshold is met.

Quotes and swap instructions come from the Jupiter aggregator; signed
transactions are submitted directly to a Solana RPC endpoint.
"""

__version__ = "1.0.0"
__author__ = "Solana Arbitrage Bot"
