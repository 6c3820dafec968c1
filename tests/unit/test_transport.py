from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp
import pytest

from authflight.config import ClientConfig
from authflight.errors.internal import NetworkError
from authflight.transport import HTTPTransport, RequestAttempt


class _Resp:
    def __init__(self, status: int, body: Any = None, headers: dict[str, str] | None = None):
        self.status = status
        if body is None:
            self._text = ""
        elif isinstance(body, str):
            self._text = body
        else:
            self._text = json.dumps(body)
        self.headers = headers or {}

    async def text(self) -> str:  # noqa: D401
        await asyncio.sleep(0)
        return self._text


class _Session:
    def __init__(self):
        self.requests: list[tuple[str, str, dict[str, Any]]] = []
        self._queue: list[_Resp | BaseException] = []

    def queue(self, item: _Resp | BaseException) -> None:
        self._queue.append(item)

    def request(self, method: str, url: str, **kwargs: Any):
        self.requests.append((method, url, kwargs))
        item = self._queue.pop(0)

        class _CM:
            async def __aenter__(self_inner):  # noqa: ANN001
                if isinstance(item, BaseException):
                    raise item
                return item

            async def __aexit__(self_inner, exc_type, exc, tb):  # noqa: ANN001
                return False

        return _CM()


@pytest.fixture
def session() -> _Session:
    return _Session()


@pytest.fixture
def transport(session) -> HTTPTransport:
    config = ClientConfig(base_url="http://api.test/api/v1/", timeout_seconds=5)
    return HTTPTransport(session, config)  # type: ignore[arg-type]


def test_requires_session():
    with pytest.raises(ValueError):
        HTTPTransport(None, ClientConfig())  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_request_is_built_from_attempt(transport, session):
    session.queue(_Resp(200, {"success": True, "data": []}, {"X-Request-Id": "r1"}))
    attempt = RequestAttempt(
        "POST",
        "/assets",
        params={"page": 2},
        json={"name": "Laptop"},
        headers={"X-Trace": "t1"},
    )

    response = await transport.send(attempt)

    method, url, kwargs = session.requests[0]
    assert method == "POST"
    assert url == "http://api.test/api/v1/assets"
    assert kwargs["params"] == {"page": 2}
    assert kwargs["json"] == {"name": "Laptop"}
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert kwargs["headers"]["X-Trace"] == "t1"
    assert kwargs["timeout"].total == 5
    assert response.status == 200
    assert response.data == {"success": True, "data": []}
    assert response.headers == {"X-Request-Id": "r1"}
    assert response.attempt is attempt
    assert transport.request_count == 1


@pytest.mark.asyncio
async def test_absolute_url_passes_through(transport, session):
    session.queue(_Resp(200, {}))

    await transport.send(RequestAttempt("GET", "https://other.test/ping"))

    assert session.requests[0][1] == "https://other.test/ping"


@pytest.mark.asyncio
async def test_error_statuses_are_returned_not_raised(transport, session):
    session.queue(_Resp(401, {"success": False, "message": "Unauthorized"}))
    session.queue(_Resp(503, "Service Unavailable"))

    unauthorized = await transport.send(RequestAttempt("GET", "/me"))
    unavailable = await transport.send(RequestAttempt("GET", "/me"))

    assert unauthorized.status == 401
    assert unauthorized.unauthorized
    assert not unauthorized.ok
    assert unavailable.status == 503
    assert unavailable.data == "Service Unavailable"


@pytest.mark.asyncio
async def test_empty_bodies(transport, session):
    session.queue(_Resp(204, None))
    session.queue(_Resp(200, ""))

    no_content = await transport.send(RequestAttempt("DELETE", "/assets/1"))
    empty = await transport.send(RequestAttempt("GET", "/assets"))

    assert no_content.data is None
    assert no_content.ok
    assert empty.data is None


@pytest.mark.asyncio
async def test_timeout_becomes_network_error(transport, session):
    session.queue(TimeoutError())

    with pytest.raises(NetworkError) as exc_info:
        await transport.send(RequestAttempt("GET", "/assets"))

    assert "timed out" in str(exc_info.value)
    assert exc_info.value.data["url"] == "http://api.test/api/v1/assets"


@pytest.mark.asyncio
async def test_client_error_becomes_network_error(transport, session):
    session.queue(aiohttp.ClientConnectionError("connection refused"))

    with pytest.raises(NetworkError) as exc_info:
        await transport.send(RequestAttempt("GET", "/assets"))

    assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)
