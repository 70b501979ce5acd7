"""Logger configuration for the reporter.

The reporter runs inside a host application, so its sinks only take records
emitted by this package unless ``log_package_only`` is turned off.
"""

from __future__ import annotations

import sys
from typing import List, Optional

from loguru import logger

from .settings import ReporterConfig

PACKAGE_NAME = __name__.split(".")[0]

CONSOLE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <magenta>{thread.name}</magenta> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name} | {name}:{function}:{line} - {message}"


def setup_logging(config: ReporterConfig) -> List[int]:
    """Configure loguru sinks for the reporter.

    Returns:
        Ids of the added handlers
    """
    # Remove default loguru handler
    logger.remove()

    log_filter: Optional[str] = PACKAGE_NAME if config.log_package_only else None
    handler_ids = []

    if config.log_to_console:
        handler_ids.append(logger.add(sys.stderr, format=CONSOLE_FORMAT, level=config.log_level, filter=log_filter, colorize=True))

    if config.log_to_file:
        config.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(
            logger.add(
                str(config.log_file_path),
                format=FILE_FORMAT,
                level=config.log_level,
                filter=log_filter,
                rotation=config.log_rotation,
                retention=config.log_retention,
                compression="gz",
                enqueue=True,  # Dispatch runs on a worker thread
            )
        )

    logger.debug(f"Logging configured: level={config.log_level}, file={config.log_file_path if config.log_to_file else None}, package_only={config.log_package_only}")
    return handler_ids
