"""Asynchronous HTTP client layer with single-flight session refresh.

The public entry points are :class:`AuthflightContext` (wires everything
together around one aiohttp session) and the two clients it exposes.
"""

from .application_context import AuthflightContext
from .auth_token.coordinator import RefreshCoordinator
from .auth_token.types import RefreshOutcome, RefreshState
from .client import AuthenticatedClient, PublicApiClient
from .errors.internal import ApiError, AuthenticationError, NetworkError
from .transport import ApiResponse, HTTPTransport, RequestAttempt

__all__ = [
    "ApiError",
    "ApiResponse",
    "AuthenticatedClient",
    "AuthenticationError",
    "AuthflightContext",
    "HTTPTransport",
    "NetworkError",
    "PublicApiClient",
    "RefreshCoordinator",
    "RefreshOutcome",
    "RefreshState",
    "RequestAttempt",
]
