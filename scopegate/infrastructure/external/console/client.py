"""Async HTTP client for the console identity provider (implements IConsoleClient).

All calls share one httpx.AsyncClient created at startup (see lifespan);
timeouts and connect retries are configured on that client.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from scopegate.core.config import Settings
from scopegate.infrastructure.exceptions import (
    ConsoleApiException,
    ConsoleUnavailableException,
)

logger = logging.getLogger(__name__)


def build_console_http_client(settings: Settings) -> httpx.AsyncClient:
    """Shared client: base URL, timeout and transport-level retries from settings."""
    return httpx.AsyncClient(
        base_url=settings.console_url,
        timeout=settings.console_timeout,
        transport=httpx.AsyncHTTPTransport(retries=settings.console_retry),
        headers={"Accept": "application/json"},
    )


class ConsoleClient:
    """Access checks on behalf of a user (bearer token) and signing-key retrieval."""

    def __init__(self, http: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http
        self._jwks_path = settings.console_jwks_path

    async def _get(self, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._http.get(path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Console request %s failed: %s", path, e)
            raise ConsoleUnavailableException(str(e)) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code >= 500:
            raise ConsoleUnavailableException(f"HTTP {response.status_code}")
        try:
            body = response.json()
        except ValueError:
            body = {}
        raise ConsoleApiException(
            body.get("message") or "Console request failed",
            response.status_code,
            body.get("error"),
        )

    async def get_organization_access(
        self, bearer_token: str, organization_id: str
    ) -> dict[str, Any] | None:
        """Caller's access record for the organization; None when the console denies it."""
        response = await self._get(
            "/api/sso/access",
            params={"organization_slug": organization_id},
            headers={"Authorization": f"Bearer {bearer_token}"},
        )
        if response.status_code in (403, 404):
            return None
        if not response.is_success:
            self._raise_for_status(response)
        return response.json()

    async def get_jwks(self) -> dict[str, Any]:
        response = await self._get(self._jwks_path)
        if not response.is_success:
            self._raise_for_status(response)
        return response.json() or {}
