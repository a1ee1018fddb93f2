"""Console signing keys, cached for cache_ttl_jwks seconds."""

from __future__ import annotations

import logging
from typing import Any

from scopegate.application.interfaces.services import ICacheService, IConsoleClient
from scopegate.infrastructure.cache.keys import jwks_key
from scopegate.infrastructure.cache.redis_cache import remember

logger = logging.getLogger(__name__)


class JwksService:
    """Fetches the console's JWKS through the cache."""

    def __init__(
        self,
        console: IConsoleClient | None,
        cache: ICacheService | None = None,
        ttl: int = 60,
    ) -> None:
        self._console = console
        self._cache = cache
        self._ttl = ttl

    async def get_keys(self) -> dict[str, Any]:
        if self._console is None:
            return {}
        return await remember(self._cache, jwks_key(), self._ttl, self._console.get_jwks)

    async def clear_cache(self) -> None:
        """Forget the cached keys (after a rotation)."""
        if self._cache is not None and self._cache.is_available():
            await self._cache.delete(jwks_key())
            logger.info("JWKS cache cleared")
