#!/usr/bin/env python3
"""
Initialize database tables without a migration tool
Creates all tables defined in the SQLModel models
"""

import asyncio
import sys
from pathlib import Path

# Ensure backend/ is on sys.path for "wander.*" imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

import logging

from wander.core.settings import get_settings
from wander.db.base import Base
from wander.db.session import DatabaseManager

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def init_database() -> None:
    """Initialize database tables"""
    manager = DatabaseManager(get_settings())
    try:
        logger.info("Connecting to database...")
        await manager.initialize()

        logger.info("Creating all tables...")
        await manager.init_db()

        health = await manager.health_check()
        if health["status"] != "healthy":
            raise RuntimeError("database health check failed after table creation")

        logger.info(f"Tables ready: {', '.join(sorted(Base.tables))}")
    finally:
        await manager.close()


def main() -> int:
    try:
        asyncio.run(init_database())
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
