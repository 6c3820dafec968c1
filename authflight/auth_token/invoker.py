"""The session refresh call."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import ValidationError

from ..constants import REFRESH_PATH
from ..errors.internal import ApiError, NetworkError, ParsingError
from ..session.models import Identity, extract_identity_payload
from .types import RefreshFailureReason, RefreshResult

if TYPE_CHECKING:
    from ..client import PublicApiClient


class RefreshInvoker:
    """Exchanges the current (expired) session for a renewed one.

    The refresh credential travels as a cookie, so the call carries no body.
    Exactly one request is made per :meth:`refresh`; nothing here retries.
    """

    def __init__(self, client: PublicApiClient, refresh_path: str = REFRESH_PATH):
        """Initialize the invoker.

        Args:
            client: Unauthenticated client; must not route through a
                refresh coordinator.
            refresh_path: Path of the refresh endpoint.
        """
        self._client = client
        self.refresh_path = refresh_path
        self.calls = 0

    async def refresh(self) -> RefreshResult:
        """Perform one refresh call.

        Returns:
            RefreshResult with the renewed identity on success, or the
            failure reason.
        """
        self.calls += 1
        try:
            response = await self._client.post(self.refresh_path)
        except NetworkError as e:
            logging.warning(f"💥 Network error during session refresh error={str(e)}")
            return RefreshResult.failed(RefreshFailureReason.NETWORK, str(e))
        except ApiError as e:
            logging.info(f"❌ Session refresh rejected (status={e.status})")
            return RefreshResult.failed(
                RefreshFailureReason.REJECTED, e.server_message or f"HTTP {e.status}"
            )

        body = response.data
        if isinstance(body, Mapping) and body.get("success") is not True:
            # Anything short of an explicit success flag counts as a refusal.
            message = body.get("message")
            logging.info(f"❌ Session refresh not successful message={message}")
            return RefreshResult.failed(
                RefreshFailureReason.REJECTED,
                message if isinstance(message, str) else "missing success flag",
            )
        try:
            identity = parse_refreshed_identity(body)
        except ParsingError as e:
            logging.warning(f"❌ Session refresh returned an unusable body: {str(e)}")
            return RefreshResult.failed(RefreshFailureReason.MALFORMED, str(e))

        logging.info(f"🔄 Session refreshed user={identity.id}")
        return RefreshResult.ok(identity)


def parse_refreshed_identity(body: object) -> Identity:
    """Extract the renewed identity from a successful refresh envelope.

    Raises:
        ParsingError: If the body is not a JSON object or the user record
            does not validate.
    """
    if not isinstance(body, Mapping):
        raise ParsingError(
            "response body is not a JSON object", data={"type": type(body).__name__}
        )
    try:
        return Identity.model_validate(extract_identity_payload(body))
    except ValidationError as e:
        raise ParsingError(
            f"invalid user record ({e.error_count()} errors)",
            data={"errors": e.error_count()},
        ) from e
