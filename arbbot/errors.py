"""
Exception types for the Solana Arbitrage Bot.
"""

from typing import Optional


class ArbBotError(Exception):
    """Base class for bot errors."""


class ConfigError(ArbBotError):
    """Configuration or key file could not be loaded."""


class JupiterError(ArbBotError):
    """Jupiter API error."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class InvalidQuoteError(JupiterError):
    """Quote response is missing fields or carries malformed amounts."""


class TransactionBuildError(ArbBotError):
    """Quote instructions could not be turned into a transaction."""


class TransactionSubmitError(ArbBotError):
    """Transaction submission failed after all retry attempts."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts
