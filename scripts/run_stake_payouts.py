#!/usr/bin/env python3
"""
Manual stake payout trigger.

Usage: python3 scripts/run_stake_payouts.py [--now 2026-01-01T00:00:00]
"""

import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from app.config.database import close_db
from app.tasks.stake_payout_task import run_stake_payouts

# Configure logger
logger.remove()
logger.add(sys.stderr, level="INFO")


async def main() -> None:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Process due stake payouts")
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="Processing time override (ISO 8601, UTC)",
    )
    args = parser.parse_args()

    try:
        result = await run_stake_payouts(now=args.now)
    finally:
        await close_db()

    print(json.dumps(result, indent=2))
    if result["errors"]:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
