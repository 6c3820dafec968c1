"""Public and authenticated API clients.

Both clients return :class:`ApiResponse` for 2xx answers and raise
:class:`ApiError` for everything else. The authenticated client
additionally recovers from an expired session: on a 401 it asks its
:class:`RefreshCoordinator` for a fresh session and replays the request
exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .auth_token.coordinator import RefreshCoordinator
from .auth_token.types import RefreshOutcome
from .errors.internal import ApiError, AuthenticationError
from .transport import ApiResponse, RequestAttempt, Transport


class PublicApiClient:
    """Client for endpoints that do not need a session."""

    def __init__(self, transport: Transport):
        if transport is None:
            raise ValueError("transport required")
        self._transport = transport

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        """Perform a request.

        Args:
            method: HTTP verb.
            url: Path relative to the base URL, or an absolute URL.
            params: Query string parameters.
            json: JSON body.
            data: Form or raw body.
            headers: Extra headers for this request.

        Returns:
            The 2xx response.

        Raises:
            ApiError: On any non-2xx status (AuthenticationError for 401).
            NetworkError: On transport failures.
        """
        attempt = RequestAttempt(
            method=method.upper(),
            url=url,
            params=params,
            json=json,
            data=data,
            headers=headers,
        )
        return await self._dispatch(attempt)

    async def send(self, attempt: RequestAttempt) -> ApiResponse:
        """Perform a prebuilt request attempt."""
        return await self._dispatch(attempt)

    async def get(self, url: str, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, json: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", url, json=json, **kwargs)

    async def put(self, url: str, json: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", url, json=json, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", url, **kwargs)

    async def _dispatch(self, attempt: RequestAttempt) -> ApiResponse:
        response = await self._transport.send(attempt)
        return self._check(response)

    @staticmethod
    def _check(response: ApiResponse) -> ApiResponse:
        if response.ok:
            return response
        if response.unauthorized:
            raise AuthenticationError.from_response(response)
        raise ApiError.from_response(response)


class AuthenticatedClient(PublicApiClient):
    """Client for endpoints behind the session cookie.

    Concurrent 401s are funnelled through one coordinator, so they cost a
    single refresh call; each failed request is then replayed at most once.
    """

    def __init__(self, transport: Transport, coordinator: RefreshCoordinator):
        super().__init__(transport)
        if coordinator is None:
            raise ValueError("coordinator required")
        self.coordinator = coordinator

    async def _dispatch(self, attempt: RequestAttempt) -> ApiResponse:
        response = await self._transport.send(attempt)
        if not response.unauthorized:
            return self._check(response)
        if attempt.retried:
            raise AuthenticationError.from_response(response, double_fault=True)

        outcome = await self.coordinator.ensure_fresh_session(attempt)
        if outcome is RefreshOutcome.REAUTHENTICATE:
            raise AuthenticationError.from_response(response)

        replay = await self._transport.send(attempt.mark_retried())
        if replay.unauthorized:
            logging.warning(
                f"⛔ Still unauthorized after session refresh {attempt.method} {attempt.url}"
            )
            raise AuthenticationError.from_response(replay, double_fault=True)
        return self._check(replay)
