"""Console identity provider client."""

from scopegate.infrastructure.external.console.client import (
    ConsoleClient,
    build_console_http_client,
)

__all__ = ["ConsoleClient", "build_console_http_client"]
