"""Session store holding the current identity.

The refresh coordinator only needs :meth:`SessionStore.set_identity` and
:meth:`SessionStore.clear`; the in-memory implementation additionally keeps
the loading/error flags used by :class:`~authflight.session.auth_service.AuthService`
and notifies subscribers on every change.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Protocol

from .models import Identity


class SessionStore(Protocol):
    def set_identity(self, identity: Identity | None) -> None: ...

    def clear(self) -> None: ...


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the session.

    Attributes:
        user: Current identity, or None when signed out.
        is_authenticated: True when ``user`` is set.
        is_loading: True while a session workflow is running.
        error: Last user-facing error message.
    """

    user: Identity | None = None
    is_authenticated: bool = False
    is_loading: bool = False
    error: str | None = None


Listener = Callable[[SessionState], None]


class InMemorySessionStore:
    """Observable in-memory session store."""

    def __init__(self) -> None:
        self._state = SessionState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Identity | None:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and call it immediately with the current state.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)
        listener(self._state)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_identity(self, identity: Identity | None) -> None:
        self._set(
            replace(
                self._state,
                user=identity,
                is_authenticated=identity is not None,
                error=None,
            )
        )
        if identity is not None:
            logging.debug(f"👤 Session identity set user={identity.id}")

    def clear(self) -> None:
        """Reset to the signed-out state."""
        self._set(SessionState())
        logging.debug("🧹 Session cleared")

    def set_error(self, error: str) -> None:
        self._set(replace(self._state, error=error, is_loading=False))

    def clear_error(self) -> None:
        self._set(replace(self._state, error=None))

    def set_loading(self, is_loading: bool) -> None:
        self._set(replace(self._state, is_loading=is_loading))

    def _set(self, state: SessionState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
