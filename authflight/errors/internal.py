"""Centralized internal error hierarchy.

Only raise these inside client/transport boundaries; raw aiohttp and JSON
errors are wrapped before they reach calling code.

Classes:
  InternalError        – Base for all internal errors.
  NetworkError         – Transport failures (connection, DNS, timeout).
  ParsingError         – Response body could not be interpreted.
  ApiError             – Server answered with a non-2xx status.
  AuthenticationError  – Terminal 401: the session could not be recovered.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..transport import ApiResponse, RequestAttempt


class InternalError(Exception):
    """Base class for all internal errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for network or transport layer errors.

    Covers connection failures, resets and timeouts. A request that fails
    this way never produced a status code.
    """


class ParsingError(InternalError):
    """Exception raised when a response body does not have the expected shape."""


class ApiError(InternalError):
    """Exception raised when the server answers with a non-2xx status.

    The response body and the request attempt are kept untouched so callers
    can inspect exactly what the server returned.

    Attributes:
        status: HTTP status code.
        body: Parsed JSON body, raw text, or None.
        attempt: The request attempt that produced the response.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int,
        body: Any = None,
        attempt: RequestAttempt | None = None,
    ) -> None:
        super().__init__(message, data={"status": status})
        self.status = status
        self.body = body
        self.attempt = attempt

    @property
    def server_message(self) -> str | None:
        """The ``message`` field of a JSON error envelope, when present."""
        if isinstance(self.body, Mapping):
            message = self.body.get("message")
            if isinstance(message, str) and message:
                return message
        return None

    @classmethod
    def from_response(cls, response: ApiResponse, **kwargs: Any) -> ApiError:
        """Build the error for a failed response.

        Args:
            response: The non-2xx response.
            **kwargs: Extra keyword arguments for subclasses.

        Returns:
            An instance of ``cls`` describing the response.
        """
        attempt = response.attempt
        target = f"{attempt.method} {attempt.url}" if attempt else "request"
        message = f"HTTP {response.status} for {target}"
        return cls(
            message, status=response.status, body=response.data, attempt=attempt, **kwargs
        )


class AuthenticationError(ApiError):
    """Exception raised for a 401 that could not be recovered.

    Attributes:
        double_fault: True when the request still failed after a successful
            session refresh and replay.
    """

    def __init__(self, message: str, *, double_fault: bool = False, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.double_fault = double_fault
        self.data["double_fault"] = double_fault


__all__ = [
    "InternalError",
    "NetworkError",
    "ParsingError",
    "ApiError",
    "AuthenticationError",
]
