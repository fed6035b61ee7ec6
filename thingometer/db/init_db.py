"""Database initialisation script"""

import asyncio
from thingometer.db.database import init_database
from loguru import logger


async def main():
    """Create the schema"""
    logger.info("Initialising database...")
    await init_database()
    logger.success("Database initialised")


if __name__ == "__main__":
    asyncio.run(main())
