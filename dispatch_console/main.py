"""Entry point for the dispatch console Textual app."""

from __future__ import annotations

import logging

from dispatch_console.api import DeliveryApiClient
from dispatch_console.config import configure_logging, load_settings
from dispatch_console.console_app import DispatchConsoleApp

logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_path)
    logger.info("console_start api=%s", settings.api_base_url)

    client = DeliveryApiClient(settings.api_base_url, token=settings.api_token, timeout=settings.timeout_seconds)
    DispatchConsoleApp(client).run()


if __name__ == "__main__":
    main()
