"""Central application context for the shared async resources."""

from __future__ import annotations

import logging
from types import TracebackType

import aiohttp

from .auth_token.coordinator import RefreshCoordinator
from .auth_token.invoker import RefreshInvoker
from .client import AuthenticatedClient, PublicApiClient
from .config import ClientConfig
from .session.auth_service import AuthService
from .session.navigation import Navigator, RecordingNavigator
from .session.store import InMemorySessionStore
from .transport import HTTPTransport


class AuthflightContext:
    """Holds the HTTP session and every component built on top of it.

    One context means one refresh coordinator: all requests made through
    :attr:`client` share the same single-flight refresh.
    """

    session: aiohttp.ClientSession | None
    transport: HTTPTransport
    store: InMemorySessionStore
    navigator: Navigator
    invoker: RefreshInvoker
    coordinator: RefreshCoordinator
    public_client: PublicApiClient
    client: AuthenticatedClient
    auth_service: AuthService

    def __init__(
        self,
        session: aiohttp.ClientSession,
        config: ClientConfig,
        store: InMemorySessionStore | None = None,
        navigator: Navigator | None = None,
    ) -> None:
        self.session = session
        self.config = config
        self.transport = HTTPTransport(session, config)
        self.store = store or InMemorySessionStore()
        self.navigator = navigator or RecordingNavigator()
        self.public_client = PublicApiClient(self.transport)
        self.invoker = RefreshInvoker(self.public_client, config.refresh_path)
        self.coordinator = RefreshCoordinator(
            self.invoker, self.store, self.navigator, config.signin_path
        )
        self.client = AuthenticatedClient(self.transport, self.coordinator)
        self.auth_service = AuthService(
            self.public_client,
            self.store,
            self.navigator,
            self.coordinator,
            home_path=config.home_path,
            signin_path=config.signin_path,
        )

    # ------------------------- Construction ------------------------- #
    @classmethod
    async def create(
        cls,
        config: ClientConfig | None = None,
        *,
        store: InMemorySessionStore | None = None,
        navigator: Navigator | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> AuthflightContext:
        """Create a context, opening an HTTP session unless one is given.

        The default session keeps cookies for IP-address hosts too, since the
        session cookies are what the refresh endpoint authenticates with.

        Args:
            config: Client configuration; defaults to the environment config.
            store: Session store; defaults to a fresh in-memory store.
            navigator: Navigator; defaults to a RecordingNavigator.
            session: Existing aiohttp session to use instead of opening one.

        Returns:
            A fully wired context.
        """
        config = config or ClientConfig.from_env()
        if session is None:
            session = aiohttp.ClientSession(cookie_jar=aiohttp.CookieJar(unsafe=True))
            logging.debug("🔗 HTTP session created")
        return cls(session, config, store=store, navigator=navigator)

    # --------------------------- Lifecycle -------------------------- #
    async def close(self) -> None:
        """Close the HTTP session."""
        if not self.session:
            return
        try:
            await self.session.close()
        except (aiohttp.ClientError, OSError) as e:
            logging.error(f"💥 Error closing HTTP session: {str(e)}")
        finally:
            self.session = None
            logging.debug("✅ Authflight context closed")

    async def __aenter__(self) -> AuthflightContext:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
