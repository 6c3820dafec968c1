"""Single-flight session refresh coordinator.

Many requests can hit a 401 at roughly the same time when a short-lived
access token expires. The coordinator makes sure only one refresh call is
in flight per client: the first failure starts a refresh cycle, every
failure that arrives while the cycle runs waits on it, and all of them get
the same verdict when it ends.

All state is touched from a single event loop. There is no ``await``
between reading ``_state`` and setting it to ``REFRESHING``, which is what
makes the check-and-transition atomic without a lock.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import TYPE_CHECKING, Protocol

from ..constants import SIGNIN_PATH
from ..errors.handling import log_error
from ..errors.internal import NetworkError, ParsingError
from .types import (
    RefreshFailureReason,
    RefreshOutcome,
    RefreshResult,
    RefreshState,
    RefreshStats,
)

if TYPE_CHECKING:
    from ..session.navigation import Navigator
    from ..session.store import SessionStore
    from ..transport import RequestAttempt


class RefreshCaller(Protocol):
    async def refresh(self) -> RefreshResult: ...


class RefreshCoordinator:
    """Owns the refresh state and the queue of waiting callers.

    One instance is created per authenticated client and lives as long as
    the client does.
    """

    def __init__(
        self,
        invoker: RefreshCaller,
        session_store: SessionStore,
        navigator: Navigator,
        signin_path: str = SIGNIN_PATH,
    ) -> None:
        """Initialize the coordinator.

        Args:
            invoker: Performs the actual refresh call.
            session_store: Receives the renewed identity, or is cleared when
                the session cannot be renewed.
            navigator: Sent to ``signin_path`` when the session cannot be renewed.
            signin_path: Sign-in location.
        """
        self._invoker = invoker
        self._session_store = session_store
        self._navigator = navigator
        self.signin_path = signin_path
        self._state = RefreshState.IDLE
        self._waiters: deque[asyncio.Future[RefreshOutcome]] = deque()
        self._redirect_on_failure = True
        self.stats = RefreshStats()

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending_waiters(self) -> int:
        return len(self._waiters)

    async def ensure_fresh_session(self, attempt: RequestAttempt) -> RefreshOutcome:
        """Decide what a request that just got a 401 should do next.

        Args:
            attempt: The request that failed.

        Returns:
            REPLAY when the caller should reissue the request once,
            REAUTHENTICATE when the operation must fail.
        """
        if attempt.retried:
            # Already replayed once after a refresh; a second cycle would loop.
            logging.warning(
                f"⛔ Unauthorized after replay, not refreshing again {attempt.method} {attempt.url}"
            )
            return RefreshOutcome.REAUTHENTICATE
        return await self.refresh()

    async def refresh(self, *, redirect_on_failure: bool = True) -> RefreshOutcome:
        """Run a refresh cycle, or join the one already in flight.

        Args:
            redirect_on_failure: Navigate to the sign-in page if the cycle
                fails. A cycle redirects when any of its participants asked
                for it, whether it started the cycle or joined it.

        Returns:
            The outcome of the cycle.
        """
        if self._state is RefreshState.REFRESHING:
            self._redirect_on_failure = self._redirect_on_failure or redirect_on_failure
            return await self._wait_for_cycle()
        self._redirect_on_failure = redirect_on_failure
        return await self._run_cycle()

    async def _wait_for_cycle(self) -> RefreshOutcome:
        waiter: asyncio.Future[RefreshOutcome] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logging.debug(f"⏳ Waiting for in-flight session refresh queued={len(self._waiters)}")
        # Shielded so a cancelled caller leaves the future for the cycle to resolve.
        return await asyncio.shield(waiter)

    async def _run_cycle(self) -> RefreshOutcome:
        self._state = RefreshState.REFRESHING
        self.stats.cycles += 1
        logging.debug(f"🔄 Session refresh cycle started cycle={self.stats.cycles}")
        outcome = RefreshOutcome.REAUTHENTICATE
        result: RefreshResult | None = None
        try:
            result = await self._invoke()
            if result.success:
                result = self._store_identity(result)
                if result.success:
                    outcome = RefreshOutcome.REPLAY
        finally:
            self._state = RefreshState.IDLE
            released = self._release_waiters(outcome)

        if outcome is RefreshOutcome.REPLAY:
            self.stats.successes += 1
            logging.info(f"✅ Session refreshed, replaying requests waiters={released}")
            return outcome

        self.stats.failures += 1
        reason = result.reason.value if result and result.reason else "unknown"
        logging.warning(
            f"🚪 Session refresh failed, signing out reason={reason} waiters={released}"
        )
        self._session_store.clear()
        if self._redirect_on_failure:
            self._navigator.redirect_to(self.signin_path)
        return outcome

    async def _invoke(self) -> RefreshResult:
        try:
            return await self._invoker.refresh()
        except (NetworkError, TimeoutError) as e:
            log_error("Session refresh transport failure", e)
            return RefreshResult.failed(RefreshFailureReason.NETWORK, str(e))
        except ParsingError as e:
            log_error("Session refresh returned an unusable body", e)
            return RefreshResult.failed(RefreshFailureReason.MALFORMED, str(e))
        except Exception as e:  # noqa: BLE001
            log_error("Session refresh raised", e)
            return RefreshResult.failed(RefreshFailureReason.REJECTED, str(e))

    def _store_identity(self, result: RefreshResult) -> RefreshResult:
        # A renewed session that cannot be stored is treated as a failed refresh.
        try:
            self._session_store.set_identity(result.identity)
        except Exception as e:  # noqa: BLE001
            log_error("Storing the refreshed session failed", e)
            return RefreshResult.failed(RefreshFailureReason.REJECTED, str(e))
        return result

    def _release_waiters(self, outcome: RefreshOutcome) -> int:
        released = 0
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(outcome)
            released += 1
        self.stats.waiters_released += released
        return released
