"""Logging setup"""

import sys
from pathlib import Path
from loguru import logger

from thingometer.config import get_settings


def setup_logger():
    """Configure loguru sinks"""
    settings = get_settings()

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(exist_ok=True)

    # Drop the default handler
    logger.remove()

    # Console (colored)
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=settings.log_level,
        colorize=True,
    )

    # File, all levels
    logger.add(
        log_dir / "thingometer_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG",
        rotation="00:00",
        retention="7 days",
        compression="zip",
        encoding="utf-8",
    )

    # Errors only, kept longer
    logger.add(
        log_dir / "thingometer_error_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="ERROR",
        rotation="00:00",
        retention="30 days",
        compression="zip",
        encoding="utf-8",
    )

    logger.info("Logging initialised")
