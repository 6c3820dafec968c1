"""Shared types for the auth_token package."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..session.models import Identity


class RefreshState(Enum):
    """Refresh state of one coordinator.

    Attributes:
        IDLE: No refresh call is outstanding.
        REFRESHING: A refresh call is in flight; new failures wait for it.
    """

    IDLE = "idle"
    REFRESHING = "refreshing"


class RefreshOutcome(str, Enum):
    """What a caller should do after asking for a fresh session.

    Attributes:
        REPLAY: The session was renewed; reissue the original request once.
        REAUTHENTICATE: The session is void; fail the operation.
    """

    REPLAY = "replay"
    REAUTHENTICATE = "reauthenticate"


class RefreshFailureReason(str, Enum):
    """Why a refresh call did not produce a new session.

    Attributes:
        NETWORK: Transport error or timeout before any status was received.
        REJECTED: The server refused the refresh (non-2xx, or no success flag).
        MALFORMED: The server claimed success but the body was unusable.
    """

    NETWORK = "network"
    REJECTED = "rejected"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class RefreshResult:
    """Result of one refresh call.

    Attributes:
        success: Whether a renewed session was obtained.
        identity: The renewed identity, set only on success.
        reason: Failure category, set only on failure.
        detail: Human readable failure detail.
    """

    success: bool
    identity: Identity | None = None
    reason: RefreshFailureReason | None = None
    detail: str | None = None

    @classmethod
    def ok(cls, identity: Identity) -> RefreshResult:
        return cls(True, identity=identity)

    @classmethod
    def failed(
        cls, reason: RefreshFailureReason, detail: str | None = None
    ) -> RefreshResult:
        return cls(False, reason=reason, detail=detail)


@dataclass
class RefreshStats:
    """Counters kept by a coordinator across its lifetime."""

    cycles: int = 0
    successes: int = 0
    failures: int = 0
    waiters_released: int = 0
