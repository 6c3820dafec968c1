from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class Identity(BaseModel):
    """The signed-in user as returned by the session endpoints.

    Attributes:
        id: User identifier.
        fullname: Display name.
        email: Email address.
        avatar: Avatar URL, possibly empty.
        joined_at: Account creation time, when the endpoint includes it.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(min_length=1)
    fullname: str
    email: str
    avatar: str = ""
    joined_at: datetime | None = Field(default=None, alias="joinedAt")


class LoginRequest(BaseModel):
    email: str = Field(pattern=_EMAIL_PATTERN)
    password: str = Field(min_length=6)


class RegisterRequest(BaseModel):
    fullname: str = Field(min_length=1)
    email: str = Field(pattern=_EMAIL_PATTERN)
    password: str = Field(min_length=6)


def extract_identity_payload(body: Mapping[str, Any]) -> Any:
    """Pick the user object out of a success envelope.

    The session endpoints answer ``{"success": true, "message": ..., "data": user}``;
    some deployments put the user under ``user`` instead.
    """
    payload = body.get("data")
    if payload is None:
        payload = body.get("user")
    return payload
