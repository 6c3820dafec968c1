r"""
Logging configuration module for authflight.

Provides a colorlog-based setup, a filter that keeps session secrets out of
log output, and structured error logging with per-category aggregation.
"""

import logging
import os
import re
import sys
import threading
import time
from collections import deque
from typing import Any

import colorlog

from .constants import ERROR_ALERT_RATE_PER_HOUR, ERROR_HISTORY_PER_TYPE

_SECRET_PATTERNS = (
    re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._~+/=-]+"),
    re.compile(r"(?i)((?:access|refresh)_?token[\"']?\s*[=:]\s*[\"']?)[^\s;,\"']+"),
)


class SecretRedactionFilter(logging.Filter):
    """Mask bearer credentials and token cookies in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = message
        for pattern in _SECRET_PATTERNS:
            redacted = pattern.sub(r"\1***", redacted)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class ErrorAggregator:
    """Keeps a bounded history of errors per category to spot bursts."""

    def __init__(self, history_per_type: int = ERROR_HISTORY_PER_TYPE):
        self.history_per_type = history_per_type
        self.lock = threading.Lock()
        self.errors: dict[str, deque[dict[str, Any]]] = {}
        self.start_time = time.time()

    def record_error(
        self, error_type: str, message: str, context: dict[str, Any] | None = None
    ) -> None:
        entry = {"timestamp": time.time(), "message": message, "context": context or {}}
        with self.lock:
            history = self.errors.setdefault(
                error_type, deque(maxlen=self.history_per_type)
            )
            history.append(entry)

    def get_error_summary(self) -> dict[str, Any]:
        """Counts, hourly rate and last occurrence for every category seen."""
        now = time.time()
        runtime_hours = max((now - self.start_time) / 3600, 1)
        with self.lock:
            return {
                error_type: {
                    "total_count": len(history),
                    "recent_count": sum(1 for e in history if now - e["timestamp"] < 3600),
                    "rate_per_hour": len(history) / runtime_hours,
                    "last_occurrence": history[-1] if history else None,
                }
                for error_type, history in self.errors.items()
            }

    def should_alert(
        self, error_type: str, threshold_rate: float = ERROR_ALERT_RATE_PER_HOUR
    ) -> bool:
        stats = self.get_error_summary().get(error_type)
        return stats is not None and stats["rate_per_hour"] > threshold_rate

    def reset(self) -> None:
        with self.lock:
            self.errors.clear()
            self.start_time = time.time()


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context and aggregation.

    Args:
        error_type: Category of the error (e.g., 'network', 'auth', 'parsing')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    structured_message = f"[{error_type.upper()}] {message}"

    if exception:
        structured_message += f" | Exception: {type(exception).__name__}: {str(exception)}"

    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"

    logging.log(level, structured_message)

    error_aggregator.record_error(error_type, message, context)

    if error_aggregator.should_alert(error_type):
        logging.critical(
            f"🚨 HIGH ERROR RATE ALERT: {error_type} occurring at "
            f"{error_aggregator.get_error_summary()[error_type]['rate_per_hour']:.1f}/hour"
        )


class LoggerConfigurator:
    """Installs a single colorlog handler on the root logger.

    ``DEBUG=true|1|yes`` in the environment selects DEBUG, otherwise INFO.
    The ``stream`` config key picks the output stream (stderr by default).
    """

    def __init__(self, config: dict[str, Any] | None = None):
        self.config = config or {}

    def configure(self) -> None:
        debug_env = os.environ.get("DEBUG", "").lower()
        log_level = logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO

        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
            reset=True,
        )

        handler = logging.StreamHandler(self.config.get("stream", sys.stderr))
        handler.setFormatter(formatter)
        handler.addFilter(SecretRedactionFilter())

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(handler)
        root_logger.setLevel(log_level)

        # aiohttp client chatter is too verbose at DEBUG
        logging.getLogger("aiohttp").setLevel(logging.INFO)
