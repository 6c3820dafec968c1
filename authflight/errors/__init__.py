"""Error types and error logging helpers."""

from .internal import (  # noqa: F401
    ApiError,
    AuthenticationError,
    InternalError,
    NetworkError,
    ParsingError,
)

__all__ = [
    "ApiError",
    "AuthenticationError",
    "InternalError",
    "NetworkError",
    "ParsingError",
]
