"""Client configuration model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

from . import constants

APPLICATION_JSON = "application/json"


def _default_headers() -> dict[str, str]:
    return {"Content-Type": APPLICATION_JSON, "Accept": APPLICATION_JSON}


class ClientConfig(BaseModel):
    """Settings shared by the transport, the clients and the refresh path.

    Attributes:
        base_url: API root that relative request paths are joined onto.
        timeout_seconds: Total timeout applied to every request.
        refresh_path: Path of the session refresh endpoint.
        signin_path: Where to navigate when the session cannot be recovered.
        home_path: Where to navigate after a successful login or registration.
        headers: Headers sent with every request.
    """

    base_url: str = constants.API_BASE_URL
    timeout_seconds: float = Field(default=constants.REQUEST_TIMEOUT_SECONDS, gt=0)
    refresh_path: str = constants.REFRESH_PATH
    signin_path: str = constants.SIGNIN_PATH
    home_path: str = constants.HOME_PATH
    headers: dict[str, str] = Field(default_factory=_default_headers)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop trailing slashes."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("refresh_path", "signin_path", "home_path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("path must not be empty")
        return v if v.startswith("/") else f"/{v}"

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientConfig:
        """Build a config from ``AUTHFLIGHT_*`` environment variables.

        Variables are re-read on every call, so changes made after import
        are honoured.

        Args:
            **overrides: Field values that take precedence over the environment.

        Returns:
            Validated ClientConfig instance.
        """
        data: dict[str, Any] = {
            "base_url": constants._get_env_str(
                "AUTHFLIGHT_API_BASE_URL", constants.API_BASE_URL
            ),
            "timeout_seconds": constants._get_env_float(
                "AUTHFLIGHT_REQUEST_TIMEOUT_SECONDS", constants.REQUEST_TIMEOUT_SECONDS
            ),
            "refresh_path": constants._get_env_str(
                "AUTHFLIGHT_REFRESH_PATH", constants.REFRESH_PATH
            ),
            "signin_path": constants._get_env_str(
                "AUTHFLIGHT_SIGNIN_PATH", constants.SIGNIN_PATH
            ),
            "home_path": constants._get_env_str(
                "AUTHFLIGHT_HOME_PATH", constants.HOME_PATH
            ),
        }
        data.update(overrides)
        return cls.model_validate(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClientConfig:
        return cls.model_validate(dict(data))

    def url_for(self, path: str) -> str:
        """Resolve a request path against ``base_url``; absolute URLs pass through."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"
