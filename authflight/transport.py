"""
HTTP transport for the authflight client layer.

Turns a :class:`RequestAttempt` into an :class:`ApiResponse` over a shared
aiohttp session. The transport reports every status code as-is; deciding
what a 401 or a 500 means is left to the clients.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from http import HTTPStatus
from typing import Any, Protocol

import aiohttp

from .config import ClientConfig
from .errors.internal import NetworkError


@dataclass(frozen=True)
class RequestAttempt:
    """Description of one outbound request.

    Attributes:
        method: HTTP verb, upper case.
        url: Path relative to the configured base URL, or an absolute URL.
        params: Query string parameters.
        json: JSON-serializable body.
        data: Form or raw body, used when ``json`` is None.
        headers: Per-request headers merged over the configured defaults.
        retried: True once the request has been replayed after a session
            refresh. Set only through :meth:`mark_retried`.
    """

    method: str
    url: str
    params: Mapping[str, Any] | None = None
    json: Any = None
    data: Any = None
    headers: Mapping[str, str] | None = None
    retried: bool = False

    def mark_retried(self) -> RequestAttempt:
        """Return a copy of this attempt flagged as already replayed."""
        return replace(self, retried=True)


@dataclass
class ApiResponse:
    """A completed HTTP exchange.

    Attributes:
        status: HTTP status code.
        data: Parsed JSON body, raw text when the body is not JSON, or None
            when the body is empty.
        headers: Response headers.
        attempt: The attempt that produced this response.
    """

    status: int
    data: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    attempt: RequestAttempt | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def unauthorized(self) -> bool:
        return self.status == HTTPStatus.UNAUTHORIZED


class Transport(Protocol):
    async def send(self, attempt: RequestAttempt) -> ApiResponse: ...


class HTTPTransport:
    """aiohttp-backed transport.

    The session is owned by the caller (normally :class:`AuthflightContext`);
    its cookie jar carries the access and refresh cookies between requests.
    """

    def __init__(self, session: aiohttp.ClientSession, config: ClientConfig | None = None):
        """Initialize the transport.

        Args:
            session: HTTP session for making requests.
            config: Client configuration; defaults to the environment config.

        Raises:
            ValueError: If session is not provided.
        """
        if session is None:
            raise ValueError("aiohttp session required")
        self._session = session
        self.config = config or ClientConfig.from_env()
        self._request_count = 0

    @property
    def request_count(self) -> int:
        return self._request_count

    async def send(self, attempt: RequestAttempt) -> ApiResponse:
        """Perform the request described by ``attempt``.

        Args:
            attempt: The request to perform.

        Returns:
            ApiResponse for any status code the server answered with.

        Raises:
            NetworkError: On connection failures and timeouts.
        """
        url = self.config.url_for(attempt.url)
        headers = dict(self.config.headers)
        if attempt.headers:
            headers.update(attempt.headers)
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        self._request_count += 1

        start_time = time.monotonic()
        try:
            async with self._session.request(
                attempt.method,
                url,
                headers=headers,
                params=attempt.params,
                json=attempt.json,
                data=attempt.data,
                timeout=timeout,
            ) as resp:
                body = await self._read_body(resp)
                response_time = time.monotonic() - start_time
                logging.debug(
                    f"HTTP {attempt.method} {url} -> {resp.status} ({response_time:.3f}s) retried={attempt.retried}"
                )
                return ApiResponse(
                    status=resp.status,
                    data=body,
                    headers=dict(resp.headers),
                    attempt=attempt,
                )
        except TimeoutError as e:
            response_time = time.monotonic() - start_time
            logging.warning(
                f"⏱️ HTTP {attempt.method} {url} timed out after {response_time:.3f}s"
            )
            raise NetworkError(
                f"Request to {url} timed out", data={"url": url}
            ) from e
        except aiohttp.ClientError as e:
            logging.warning(
                f"💥 HTTP {attempt.method} {url} failed: {type(e).__name__} error={str(e)}"
            )
            raise NetworkError(
                f"HTTP request failed: {e}", data={"url": url}
            ) from e

    @staticmethod
    async def _read_body(resp: aiohttp.ClientResponse) -> Any:
        if resp.status == HTTPStatus.NO_CONTENT:
            return None
        text = await resp.text()
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            # Some endpoints answer with plain text or HTML error pages
            return text
