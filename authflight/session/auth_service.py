"""Session workflows: login, registration, logout and session checks."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ..auth_token.coordinator import RefreshCoordinator
from ..auth_token.types import RefreshOutcome
from ..client import PublicApiClient
from ..constants import HOME_PATH, LOGIN_PATH, LOGOUT_PATH, REGISTER_PATH, SIGNIN_PATH
from ..errors.internal import ApiError, NetworkError
from .models import Identity, LoginRequest, RegisterRequest, extract_identity_payload
from .navigation import Navigator
from .store import InMemorySessionStore


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a session workflow.

    Attributes:
        success: Whether the workflow ended with a signed-in user.
        user: The signed-in user on success.
        error: User-facing error message on failure.
    """

    success: bool
    user: Identity | None = None
    error: str | None = None


class AuthService:
    """Drives the session store and navigator through the auth endpoints.

    Session checks go through the refresh coordinator so they never race a
    refresh triggered by an authenticated request.
    """

    def __init__(
        self,
        client: PublicApiClient,
        store: InMemorySessionStore,
        navigator: Navigator,
        coordinator: RefreshCoordinator,
        *,
        home_path: str = HOME_PATH,
        signin_path: str = SIGNIN_PATH,
    ) -> None:
        self._client = client
        self._store = store
        self._navigator = navigator
        self._coordinator = coordinator
        self.home_path = home_path
        self.signin_path = signin_path

    async def login(
        self, credentials: LoginRequest | Mapping[str, Any], redirect_to: str | None = None
    ) -> AuthResult:
        """Sign in with email and password.

        Args:
            credentials: Login payload.
            redirect_to: Where to navigate on success; defaults to ``home_path``.

        Returns:
            AuthResult describing the outcome.
        """
        return await self._sign_in(
            LOGIN_PATH,
            LoginRequest,
            credentials,
            redirect_to,
            "Login failed. Please try again.",
        )

    async def register(
        self, user_data: RegisterRequest | Mapping[str, Any], redirect_to: str | None = None
    ) -> AuthResult:
        """Create an account and sign in with it."""
        return await self._sign_in(
            REGISTER_PATH,
            RegisterRequest,
            user_data,
            redirect_to,
            "Registration failed. Please try again.",
        )

    async def logout(self, redirect_to: str | None = None) -> None:
        """Sign out; local teardown happens even when the server call fails."""
        self._store.set_loading(True)
        try:
            await self._client.post(LOGOUT_PATH)
        except (ApiError, NetworkError) as e:
            logging.warning(
                f"⚠️ Logout request failed, continuing with local logout error={str(e)}"
            )
        finally:
            self._store.clear()
            self._navigator.redirect_to(redirect_to or self.signin_path)

    async def check_auth(self) -> AuthResult:
        """Restore the session at startup without navigating away."""
        self._store.set_loading(True)
        try:
            return await self.refresh_session()
        finally:
            self._store.set_loading(False)

    async def refresh_session(self) -> AuthResult:
        """Renew the session through the coordinator.

        A failed cycle clears the store. It redirects only if a request that
        joined the cycle asked for it.
        """
        outcome = await self._coordinator.refresh(redirect_on_failure=False)
        if outcome is RefreshOutcome.REPLAY and self._store.user is not None:
            return AuthResult(True, user=self._store.user)
        return AuthResult(False, error="Session refresh failed")

    async def _sign_in(
        self,
        path: str,
        model: type[LoginRequest] | type[RegisterRequest],
        payload: Any,
        redirect_to: str | None,
        default_error: str,
    ) -> AuthResult:
        self._store.set_loading(True)
        self._store.clear_error()
        try:
            request = payload if isinstance(payload, model) else model.model_validate(payload)
            response = await self._client.post(path, json=request.model_dump())
            body = response.data if isinstance(response.data, Mapping) else {}
            if body.get("success") is True:
                user = Identity.model_validate(extract_identity_payload(body))
                self._store.set_identity(user)
                self._navigator.redirect_to(redirect_to or self.home_path)
                logging.info(f"✅ Signed in user={user.id}")
                return AuthResult(True, user=user)
            message = body.get("message") or default_error
            self._store.set_error(message)
            return AuthResult(False, error=message)
        except ValidationError as e:
            logging.debug(f"Sign-in payload rejected: {e.error_count()} validation errors")
            self._store.set_error(default_error)
            return AuthResult(False, error=default_error)
        except ApiError as e:
            message = e.server_message or default_error
            self._store.set_error(message)
            return AuthResult(False, error=message)
        except NetworkError as e:
            logging.warning(f"💥 Network error during sign-in error={str(e)}")
            self._store.set_error(default_error)
            return AuthResult(False, error=default_error)
        finally:
            self._store.set_loading(False)
