"""Protocol for the TTL cache service."""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

T = TypeVar("T")


class TtlCacheProtocol(Protocol[T]):
    """Protocol for an expiring in-memory cache with in-flight coalescing."""

    def get(self, key: str) -> T | None:
        """Get a fresh cached value, or None when absent or expired.

        Args:
            key: Cache key.

        Returns:
            The cached value, or None.
        """
        ...

    def set(self, key: str, value: T) -> None:
        """Store a value under a key.

        Args:
            key: Cache key.
            value: Value to store.
        """
        ...

    async def get_or_compute(self, key: str, compute: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value or compute it once for all concurrent callers.

        Args:
            key: Cache key.
            compute: Coroutine factory producing the value on a miss.

        Returns:
            The cached or freshly computed value.
        """
        ...

    def schedule_refresh(self, key: str, compute: Callable[[], Awaitable[T]]) -> None:
        """Start a background computation for a key; failures are swallowed."""
        ...
