"""Runtime configuration defaults for the API client and console."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

API_BASE_URL = "https://api.tiffsykitchen.com"
API_TIMEOUT_SECONDS = 30.0

KITCHEN_FETCH_LIMIT = 100
ORDER_FETCH_LIMIT = 100
BATCH_FETCH_LIMIT = 100
HISTORY_PAGE_SIZE = 20

DEBUG_LOG_PATH = "/tmp/dispatch-console.log"

_API_URL_ENV = "DISPATCH_CONSOLE_API_URL"
_API_TOKEN_ENV = "DISPATCH_CONSOLE_API_TOKEN"
_TIMEOUT_ENV = "DISPATCH_CONSOLE_TIMEOUT"
_LOG_PATH_ENV = "DISPATCH_CONSOLE_LOG_PATH"


@dataclass(frozen=True)
class ConsoleSettings:
    """Resolved settings for one console run."""

    api_base_url: str
    api_token: str | None
    timeout_seconds: float
    log_path: str


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


def load_settings() -> ConsoleSettings:
    """
    Resolve settings with environment overrides applied.

    Resolution order for each value:
    1. The DISPATCH_CONSOLE_* environment variable (if set and non-empty)
    2. The module default
    """
    timeout = API_TIMEOUT_SECONDS
    raw_timeout = _env(_TIMEOUT_ENV)
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(f"{_TIMEOUT_ENV} must be a number of seconds, got {raw_timeout!r}") from None
        if timeout <= 0:
            raise ValueError(f"{_TIMEOUT_ENV} must be positive, got {raw_timeout!r}")

    return ConsoleSettings(
        api_base_url=(_env(_API_URL_ENV) or API_BASE_URL).rstrip("/"),
        api_token=_env(_API_TOKEN_ENV) or None,
        timeout_seconds=timeout,
        log_path=_env(_LOG_PATH_ENV) or DEBUG_LOG_PATH,
    )


def configure_logging(path: str, level: int = logging.DEBUG) -> None:
    """Send package logs to a file; the terminal belongs to the TUI."""
    log_file = Path(path)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))

    package_logger = logging.getLogger("dispatch_console")
    package_logger.setLevel(level)
    package_logger.addHandler(handler)
    package_logger.propagate = False
