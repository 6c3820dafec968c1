"""
Configuration constants for the authflight client layer

This module contains all configurable constants used throughout the package.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


# API location; every relative request path is joined onto this
API_BASE_URL = _get_env_str("AUTHFLIGHT_API_BASE_URL", "http://localhost:5005/api/v1")
REQUEST_TIMEOUT_SECONDS = _get_env_float(
    "AUTHFLIGHT_REQUEST_TIMEOUT_SECONDS", 10.0
)  # Total per-request timeout, refresh call included

# Session endpoints
REFRESH_PATH = _get_env_str("AUTHFLIGHT_REFRESH_PATH", "/auth/refresh-token")
LOGIN_PATH = "/auth/login"
REGISTER_PATH = "/auth/register"
LOGOUT_PATH = "/auth/logout"

# Navigation targets
SIGNIN_PATH = _get_env_str("AUTHFLIGHT_SIGNIN_PATH", "/signin")
HOME_PATH = _get_env_str("AUTHFLIGHT_HOME_PATH", "/dashboard")

# Error aggregation
ERROR_ALERT_RATE_PER_HOUR = _get_env_float("AUTHFLIGHT_ERROR_ALERT_RATE_PER_HOUR", 10.0)
ERROR_HISTORY_PER_TYPE = _get_env_int("AUTHFLIGHT_ERROR_HISTORY_PER_TYPE", 1000)
