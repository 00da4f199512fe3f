#!/usr/bin/env python3
"""Initialize database tables and seed the default level income plan."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger

from levelpay.config.settings import get_settings
from levelpay.database import create_engine, create_session_maker
from levelpay.models import Base
from levelpay.repositories.plan_setting_repository import (
    PlanSettingRepository,
)

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")

# 30 levels: 10% / 5% / 3% / 2% / 1% for the first five, 0.5% after
DEFAULT_LEVEL_PERCENTAGES = (
    ["10", "5", "3", "2", "1"] + ["0.5"] * 25
)

DEFAULT_LEVEL_INCOME_PAYLOAD = {
    "max_levels": 30,
    "level_percentages": DEFAULT_LEVEL_PERCENTAGES,
    "require_level_unlock": True,
    "require_active_status": True,
    "min_package_amount": "0",
}


async def init_database() -> None:
    """Create all database tables and the default plan setting."""
    settings = get_settings()

    logger.info("Connecting to database...")
    engine = create_engine(settings.database_url)

    async with engine.begin() as conn:
        logger.info("Creating tables (checkfirst=True)...")
        await conn.run_sync(
            Base.metadata.create_all,
            checkfirst=True
        )

    session_maker = create_session_maker(engine)
    feature_key = settings.level_income_feature_key

    async with session_maker() as session:
        async with session.begin():
            repo = PlanSettingRepository(session)
            if await repo.get_by_feature_key(feature_key):
                logger.info(f"Plan setting '{feature_key}' already present")
            else:
                await repo.create(
                    feature_key=feature_key,
                    feature_name="30 Level Income",
                    is_active=True,
                    payload=DEFAULT_LEVEL_INCOME_PAYLOAD,
                    description=(
                        "Level income and ROI-on-ROI percentages "
                        "for 30 upline levels"
                    ),
                )
                logger.info(f"Plan setting '{feature_key}' seeded")

    await engine.dispose()
    logger.success("Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
