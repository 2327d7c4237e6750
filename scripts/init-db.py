#!/usr/bin/env python3
"""Initialize database tables and seed default staking plans."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config.database import (  # noqa: E402
    async_session_maker,
    close_db,
    init_db,
)
from app.services.staking_plan_service import StakingPlanService  # noqa: E402


async def main():
    """Create all database tables and seed plans."""
    print("Creating database tables...")

    await init_db(create_tables=True)

    async with async_session_maker() as session:
        created = await StakingPlanService(session).seed_default_plans()

    await close_db()

    print("✅ Database tables created successfully!")
    if created:
        print(f"✅ Seeded {created} staking plans")


if __name__ == "__main__":
    asyncio.run(main())
