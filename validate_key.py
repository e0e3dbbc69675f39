"""Quick script to validate the bot key file and show the wallet address."""

import sys

from arbbot.config.settings import get_settings, load_secret_key
from arbbot.errors import ConfigError


def validate_key(path: str) -> bool:
    """Validate the key file at path."""
    from solders.keypair import Keypair

    print(f"[KEY] Checking: {path}")

    try:
        key_bytes = load_secret_key(path)
    except ConfigError as e:
        print(f"[ERROR] {e}")
        print()
        print("Expected format:")
        print('  {"secretKey": [64 numbers in 0..255]}')
        return False

    if len(key_bytes) == 64:
        try:
            keypair = Keypair.from_bytes(key_bytes)
        except Exception as e:
            print(f"[ERROR] Invalid keypair bytes: {e}")
            return False
        print("[OK] Valid 64-byte keypair")
    else:
        keypair = Keypair.from_seed(key_bytes)
        print("[OK] Valid 32-byte seed")

    wallet_address = str(keypair.pubkey())

    print()
    print("=" * 60)
    print("[SUCCESS] KEY IS VALID!")
    print("=" * 60)
    print()
    print(f"Wallet Address: {wallet_address}")
    print()
    print("View on Solscan:")
    print(f"  https://solscan.io/account/{wallet_address}")
    print()
    print("Next Steps:")
    print("  1. Make sure this wallet has SOL for trading + fees")
    print("  2. Fill in config.json (see config.example.json)")
    print("  3. Run: python run.py")
    print()

    return True


if __name__ == "__main__":
    key_path = sys.argv[1] if len(sys.argv) > 1 else get_settings().keypair_path
    sys.exit(0 if validate_key(key_path) else 1)
