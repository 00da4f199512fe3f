"""
Logging setup.

Configures loguru sinks for the engine and its scripts.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from levelpay.config.settings import Settings, get_settings


def setup_logging(settings: Settings | None = None) -> None:
    """Configure stderr and rotating file sinks."""
    if settings is None:
        settings = get_settings()

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            level=settings.log_level,
            encoding="utf-8",
        )

    logger.info(
        "Logging configured",
        extra={"environment": settings.environment, "level": settings.log_level},
    )
