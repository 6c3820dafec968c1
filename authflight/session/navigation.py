"""Navigation primitives used when the session has to be abandoned."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol


class Navigator(Protocol):
    def redirect_to(self, path: str) -> None: ...


class RecordingNavigator:
    """Navigator that only records where it was sent.

    Suitable for headless use, where the embedding application polls
    :attr:`current` to decide what to show.
    """

    def __init__(self, initial: str | None = None) -> None:
        self.history: list[str] = [initial] if initial else []

    @property
    def current(self) -> str | None:
        return self.history[-1] if self.history else None

    def redirect_to(self, path: str) -> None:
        logging.info(f"🧭 Redirecting to {path}")
        self.history.append(path)


class CallbackNavigator:
    """Navigator delegating to an application-provided callable."""

    def __init__(self, callback: Callable[[str], None]) -> None:
        if not callable(callback):
            raise TypeError("callback must be callable")
        self._callback = callback

    def redirect_to(self, path: str) -> None:
        logging.info(f"🧭 Redirecting to {path}")
        self._callback(path)
