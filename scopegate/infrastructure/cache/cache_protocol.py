"""Cache protocol (DIP). CacheService implements it; tests use an in-memory fake."""

from typing import Any, Protocol


class CacheProtocol(Protocol):
    """Protocol for cache backends used by the authorization services."""

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def get(self, key: str) -> Any:
        """Return cached value or None."""
        ...

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL in seconds."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key from cache."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Remove every key matching a glob pattern; return the count."""
        ...
