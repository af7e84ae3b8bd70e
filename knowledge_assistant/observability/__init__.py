"""
Observability module.

Logging setup and structured logging helpers.
"""

from knowledge_assistant.observability.logger import configure_logging
from knowledge_assistant.observability.log_utils import (
    format_context,
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)

__all__ = [
    "configure_logging",
    "format_context",
    "log_with_context",
    "log_exception_with_context",
    "safe_log_value",
]
