"""
Unit tests for AuthService session workflows.
"""

import asyncio

import pytest

from authflight.auth_token.coordinator import RefreshCoordinator
from authflight.auth_token.invoker import RefreshInvoker
from authflight.client import AuthenticatedClient, PublicApiClient
from authflight.errors.internal import AuthenticationError, NetworkError
from authflight.session.auth_service import AuthService
from authflight.session.models import LoginRequest
from tests.fixtures.session_fixtures import (
    REFRESH_PATH,
    USER_U1,
    USER_U2,
    FakeServer,
    identity,
    wait_until,
)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def coordinator(server, store, navigator) -> RefreshCoordinator:
    return RefreshCoordinator(
        RefreshInvoker(PublicApiClient(server), REFRESH_PATH), store, navigator
    )


@pytest.fixture
def service(server, store, navigator, coordinator) -> AuthService:
    return AuthService(PublicApiClient(server), store, navigator, coordinator)


@pytest.mark.asyncio
async def test_login_success(service, server, store, navigator):
    server.script(
        "POST", "/auth/login", 200, {"success": True, "message": "ok", "data": USER_U2}
    )

    result = await service.login({"email": "u2@example.com", "password": "secret1"})

    assert result.success is True
    assert result.user.id == "u2"
    assert store.user.id == "u2"
    assert store.state.is_loading is False
    assert navigator.history == ["/dashboard"]
    (attempt,) = server.sent("POST", "/auth/login")
    assert attempt.json == {"email": "u2@example.com", "password": "secret1"}


@pytest.mark.asyncio
async def test_login_custom_redirect(service, server, navigator):
    server.script("POST", "/auth/login", 200, {"success": True, "data": USER_U1})

    await service.login(
        LoginRequest(email="u1@example.com", password="secret1"), redirect_to="/assets"
    )

    assert navigator.current == "/assets"


@pytest.mark.asyncio
async def test_login_rejected_uses_server_message(service, server, store, navigator):
    server.script(
        "POST", "/auth/login", 401, {"success": False, "message": "Invalid credentials"}
    )

    result = await service.login({"email": "u1@example.com", "password": "wrongpw"})

    assert result.success is False
    assert result.error == "Invalid credentials"
    assert store.state.error == "Invalid credentials"
    assert navigator.history == []
    assert server.refresh_calls == 0


@pytest.mark.asyncio
async def test_login_unsuccessful_envelope(service, server, store):
    server.script("POST", "/auth/login", 200, {"success": False})

    result = await service.login({"email": "u1@example.com", "password": "secret1"})

    assert result.error == "Login failed. Please try again."
    assert not store.is_authenticated


@pytest.mark.asyncio
async def test_login_invalid_payload_never_hits_server(service, server, store):
    result = await service.login({"email": "not-an-email", "password": "123"})

    assert result.success is False
    assert store.state.error == "Login failed. Please try again."
    assert server.requests == []


@pytest.mark.asyncio
async def test_register_success(service, server, store, navigator):
    server.script("POST", "/auth/register", 201, {"success": True, "data": USER_U2})

    result = await service.register(
        {"fullname": "Umar Two", "email": "u2@example.com", "password": "secret1"}
    )

    assert result.success is True
    assert store.user.fullname == "Umar Two"
    assert navigator.current == "/dashboard"


@pytest.mark.asyncio
async def test_register_network_error(service, server, store):
    async def boom(attempt):
        raise NetworkError("unreachable")

    server.send = boom  # type: ignore[method-assign]

    result = await service.register(
        {"fullname": "Umar Two", "email": "u2@example.com", "password": "secret1"}
    )

    assert result.error == "Registration failed. Please try again."
    assert store.state.is_loading is False


@pytest.mark.asyncio
async def test_logout_tears_down_even_when_server_fails(service, server, store, navigator):
    store.set_identity(identity())
    server.script("POST", "/auth/logout", 500, {"message": "oops"})

    await service.logout()

    assert store.user is None
    assert store.state.is_loading is False
    assert navigator.history == ["/signin"]


@pytest.mark.asyncio
async def test_check_auth_restores_session(service, store, navigator):
    result = await service.check_auth()

    assert result.success is True
    assert result.user.id == "u1"
    assert store.is_authenticated
    assert store.state.is_loading is False
    assert navigator.history == []


@pytest.mark.asyncio
async def test_check_auth_failure_does_not_redirect(service, server, store, navigator):
    server.refresh_status = 401
    server.refresh_body = {"success": False, "message": "expired"}

    result = await service.check_auth()

    assert result.success is False
    assert result.error == "Session refresh failed"
    assert not store.is_authenticated
    assert navigator.history == []


@pytest.mark.asyncio
async def test_refresh_session_joins_in_flight_cycle(service, server, coordinator):
    client = AuthenticatedClient(server, coordinator)
    server.hold_refresh()
    request = asyncio.create_task(client.get("/assets"))
    await wait_until(lambda: server.refresh_calls == 1)

    refresh = asyncio.create_task(service.refresh_session())
    await wait_until(lambda: coordinator.pending_waiters == 1)
    server.release_refresh()

    result = await refresh
    response = await request
    assert result.success is True
    assert response.status == 200
    assert server.refresh_calls == 1


@pytest.mark.asyncio
async def test_requests_joining_failed_session_check_are_redirected(
    service, server, coordinator, store, navigator
):
    client = AuthenticatedClient(server, coordinator)
    server.refresh_status = 401
    server.refresh_body = {"success": False, "message": "expired"}
    server.hold_refresh()
    check = asyncio.create_task(service.check_auth())
    await wait_until(lambda: server.refresh_calls == 1)

    loads = [asyncio.create_task(client.get(f"/assets/{i}")) for i in range(2)]
    await wait_until(lambda: coordinator.pending_waiters == 2)
    server.release_refresh()

    result = await check
    for load in loads:
        with pytest.raises(AuthenticationError):
            await load
    assert result.success is False
    assert server.refresh_calls == 1
    assert not store.is_authenticated
    assert navigator.history == ["/signin"]
