from __future__ import annotations

from typing import Any

from ..logging_config import log_structured_error
from .internal import (
    ApiError,
    AuthenticationError,
    InternalError,
    NetworkError,
    ParsingError,
)


def categorize_error(error: BaseException) -> str:
    """Map an exception to the category used for aggregation."""
    if isinstance(error, NetworkError | OSError | ConnectionError | TimeoutError):
        return "network"
    if isinstance(error, AuthenticationError):
        return "auth"
    if isinstance(error, ParsingError):
        return "parsing"
    if isinstance(error, ApiError):
        return "api"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(
    message: str,
    error: Exception,
    context: dict[str, Any] | None = None,
    level: int | None = None,
) -> None:
    """Logs an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Optional logging level; defaults to ERROR.
    """
    kwargs: dict[str, Any] = {}
    if level is not None:
        kwargs["level"] = level
    if isinstance(error, ApiError):
        context = {"http_status": error.status, **(context or {})}
    log_structured_error(
        error_type=categorize_error(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
        **kwargs,
    )
