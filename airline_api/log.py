import sys

from loguru import logger

from . import config


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with the configured ones."""
    level = level or config.log_level
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, enqueue=False)
    if config.log_file:
        logger.add(
            config.log_file,
            level=level,
            format=LOG_FORMAT,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )
    logger.debug(f"Logging configured at level {level}")
