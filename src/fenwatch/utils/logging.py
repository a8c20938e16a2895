"""Logging configuration utilities."""

import sys
from pathlib import Path

from loguru import logger


def setup_logging(
    level: str = "INFO",
    log_file: str | Path | None = None,
    rotation: str = "10 MB",
    retention: str = "1 week",
    module_levels: dict[str, str] | None = None,
) -> None:
    """Configure loguru for the watcher processes.

    Args:
        level: Minimum log level to display.
        log_file: Optional path to a log file.
        rotation: When to rotate the log file.
        retention: How long to keep old log files.
        module_levels: Per-module minimum levels, e.g.
            ``{"fenwatch.watch": "TRACE"}`` to see every source read and
            every coalesced notification without flooding the rest.
    """
    logger.remove()

    level_filter: dict[str | None, str] = {"": level}
    if module_levels:
        level_filter.update(module_levels)
    # The sink level must admit the most verbose module override
    sink_level = min(
        (logger.level(name).no for name in level_filter.values()),
        default=logger.level(level).no,
    )

    # Millisecond timestamps: settle/confirm windows are a few hundred ms
    logger.add(
        sys.stderr,
        level=sink_level,
        filter=level_filter,
        format=(
            "<green>{time:HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=sink_level,
            filter=level_filter,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation=rotation,
            retention=retention,
            compression="gz",
        )

    logger.info(f"Logging configured at level: {level}")
