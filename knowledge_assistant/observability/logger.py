"""
Logger configuration.

Provides the root handler setup used by both pipelines: ISO timestamps,
one line per record, quiet third-party clients.

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys

NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "urllib3",
    "grpc",
    "google",
    "google_genai",
    "sqlalchemy.engine",
    "aiosqlite",
    "asyncio",
)


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    Configure Python logging with ISO timestamps on stdout.

    Safe to call more than once; previous root handlers are replaced.

    Args:
        level: Root level name ("DEBUG", "INFO", ...) or numeric level
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
