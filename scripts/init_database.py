#!/usr/bin/env python3
"""Initialize settlement tables without running migrations (development databases)."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from settlement.config.settings import get_settings
from settlement.models import Base
from settlement.utils.database import create_settlement_engine

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")


async def init_database() -> None:
    """Create all settlement tables."""
    settings = get_settings()

    logger.info("Connecting to database...")
    engine = create_settlement_engine(settings, use_null_pool=True)

    async with engine.begin() as conn:
        logger.info("Creating tables (checkfirst=True)...")
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    await engine.dispose()
    logger.success("Settlement tables created successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
