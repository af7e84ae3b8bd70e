"""
Logging utilities for safe structured logging.

Context values are rendered without raising and appended to the message as
``key=value`` pairs so they survive any formatter.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any

from knowledge_assistant.core.exceptions import KnowledgeAssistantException


def safe_log_value(value: Any, max_length: int = 200) -> str:
    """
    Render a value for a log line without ever raising.

    Collections are summarized by size; long strings are cut.

    Args:
        value: Value to render
        max_length: Maximum rendered length before truncation

    Returns:
        str: Safe string representation
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, (bytes, bytearray)):
            rendered = f"<{len(value)} bytes>"
        elif isinstance(value, (list, tuple, set)):
            rendered = f"{type(value).__name__}[{len(value)}]"
        elif isinstance(value, dict):
            rendered = f"dict[{len(value)}]"
        else:
            rendered = str(value)

        if len(rendered) > max_length:
            return f"{rendered[:max_length]}...(+{len(rendered) - max_length} chars)"
        return rendered
    except Exception as e:
        return f"<unrenderable {type(e).__name__}>"


def format_context(**context: Any) -> str:
    """Render context as space-separated ``key=value`` pairs."""
    return " ".join(f"{key}={safe_log_value(val)}" for key, val in context.items())


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """
    Log a message followed by its rendered context.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Arbitrary key-value pairs (document_id, stage, ...)
    """
    if not logger.isEnabledFor(level):
        return
    rendered = format_context(**context)
    logger.log(level, f"{message} | {rendered}" if rendered else message)


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    level: int = logging.ERROR,
    **context: Any,
) -> None:
    """
    Log an exception with its type, message and any carried details.

    Domain exceptions contribute their ``details`` dict to the context.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        level: Log level, ERROR by default
        **context: Additional context pairs
    """
    merged: dict[str, Any] = {}
    if isinstance(exc, KnowledgeAssistantException):
        merged.update(exc.details)
    merged.update(context)
    merged["error_type"] = type(exc).__name__
    merged["error_msg"] = getattr(exc, "message", str(exc))
    logger.log(
        level,
        f"{message} | {format_context(**merged)}",
        exc_info=True if level >= logging.ERROR else None,
    )
