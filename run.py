#!/usr/bin/env python3
"""
Solana Arbitrage Bot - Runner Script

Use this script to start the bot from the project root.
"""

from arbbot.main import run

if __name__ == "__main__":
    run()
