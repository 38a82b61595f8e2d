"""Logger configuration for trainlog.

Sinks are driven by ``Settings`` (``LOG_LEVEL``, ``LOG_FILE``,
``LOG_ROTATION``, ``LOG_RETENTION``); callers may override the level, e.g.
to quiet a test session.
"""

import sys
from pathlib import Path

from loguru import logger

from trainlog.core.settings import Settings, settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(config: Settings | None = None, *, level: str | None = None) -> None:
    """Replace loguru's default handler with trainlog's sinks.

    Args:
        config: Settings to read the sinks from; the module-level settings when None
        level: Overrides ``config.log_level`` for every sink
    """
    config = config or settings
    level = (level or config.log_level).upper()

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="zip",
            backtrace=True,
        )

    logger.info(f"Logger initialized with level={level}, log_file={config.log_file}")
