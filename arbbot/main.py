"""
Solana Arbitrage Bot - Main Application Entry Point

Loads the configuration and key file, then polls Jupiter for quotes until a
termination signal arrives.
"""

import asyncio
import signal
import sys

from arbbot.bot import ArbBot
from arbbot.config.logging_config import close_logging, get_logger, setup_logging
from arbbot.config.settings import config_summary, get_settings, load_config, load_secret_key
from arbbot.errors import ConfigError


async def main() -> None:
    """Main entry point."""
    # Load settings, config and key material
    try:
        settings = get_settings()
        config = load_config(settings.config_path)
        secret_key = load_secret_key(settings.keypair_path)
    except (ConfigError, ValueError) as e:
        print(f"Failed to load configuration: {e}")
        print("\nMake sure you have:")
        print("1. Copied config.example.json to config.json and filled in your values")
        print("2. Placed your key file at env.bot-keypair.json (or set ARB_KEYPAIR_PATH)")
        sys.exit(1)

    # Setup logging
    setup_logging(debug=settings.debug, log_file=settings.log_file)
    logger = get_logger("main")
    logger.info("config_loaded", **config_summary(config))

    try:
        bot = ArbBot(config, secret_key, dry_run=settings.dry_run)
    except ValueError as e:
        logger.error("wallet_load_failed", error=str(e))
        close_logging()
        sys.exit(1)

    # Setup signal handlers (Unix)
    if sys.platform != "win32":
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(
                sig,
                lambda s=sig: bot.signal_handler(s),
            )

    try:
        await bot.init()
    except Exception as e:
        logger.error("bot_init_failed", error=str(e))
        await bot.close()
        close_logging()
        sys.exit(1)

    logger.info("bot_running", message="Press Ctrl+C to stop")

    try:
        await bot.run_forever()
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("keyboard_interrupt")
    finally:
        await bot.close()
        close_logging()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        # Windows has no signal handlers on the loop
        pass


if __name__ == "__main__":
    run()
