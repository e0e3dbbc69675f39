"""
Wallet management for the Solana Arbitrage Bot.
Holds the keypair loaded from the key file and derives the address.
"""

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from arbbot.config.logging_config import get_logger

logger = get_logger(__name__)


class WalletManager:
    """
    Owns the bot's key material.

    The secret bytes are only used to build the keypair; they are never
    logged or serialized by this class.
    """

    def __init__(self, secret_key: bytes):
        """
        Initialize with raw secret key bytes.

        Args:
            secret_key: 64-byte keypair or 32-byte seed
        """
        self._keypair = self._load_keypair(secret_key)
        self._pubkey = self._keypair.pubkey()

        logger.info(
            "wallet_initialized",
            address=str(self._pubkey),
        )

    @staticmethod
    def _load_keypair(secret_key: bytes) -> Keypair:
        """
        Build a keypair from raw bytes.

        Raises:
            ValueError: If the key length or content is invalid
        """
        if len(secret_key) == 64:
            try:
                return Keypair.from_bytes(secret_key)
            except Exception as e:
                raise ValueError(f"Invalid keypair bytes: {e}")

        if len(secret_key) == 32:
            return Keypair.from_seed(secret_key)

        raise ValueError(f"Invalid key length: {len(secret_key)} bytes")

    @property
    def pubkey(self) -> Pubkey:
        """Get the wallet public key."""
        return self._pubkey

    @property
    def address(self) -> str:
        """Get the wallet address as string."""
        return str(self._pubkey)

    @property
    def keypair(self) -> Keypair:
        """Get the keypair (use with caution)."""
        return self._keypair

    def __repr__(self) -> str:
        return f"WalletManager(address={self.address})"
