"""Token caches shared by the authenticated executors.

Each cache holds at most one token. Tokens are replaced wholesale and
cleared with compare-and-clear semantics, so a caller holding a rejected
token can never throw away a fresher one stored by a concurrent caller.
Reacquisition is single-flighted: the lock is held while the identity
call runs and callers queued behind it reuse its result.
"""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..models import AuthToken


class TokenCache:
    """Thread-safe single-token cache."""

    def __init__(self) -> None:
        self._token: AuthToken | None = None
        self._lock = threading.Lock()

    def get(self) -> AuthToken | None:
        """Get the cached token, if any."""
        with self._lock:
            return self._token

    def set(self, token: AuthToken) -> None:
        """Replace the cached token."""
        with self._lock:
            self._token = token

    def invalidate(self, token: AuthToken | None = None) -> bool:
        """Clear the cache.

        Args:
            token: When given, only clear if this is still the cached token.

        Returns:
            True if the cache was cleared.
        """
        with self._lock:
            if token is not None and self._token is not token:
                return False
            self._token = None
            return True

    def get_or_acquire(
        self,
        acquire: Callable[[], AuthToken],
        *,
        stale: AuthToken | None = None,
    ) -> AuthToken:
        """Return the cached token, acquiring one if absent.

        Args:
            acquire: Callable that obtains a fresh token.
            stale: A token known to be rejected; it is never returned.

        Returns:
            A token that is not ``stale``.
        """
        with self._lock:
            if self._token is not None and self._token is not stale:
                return self._token
            token = acquire()
            self._token = token
            return token

    @property
    def is_cached(self) -> bool:
        """Check if a token is currently cached."""
        with self._lock:
            return self._token is not None


class AsyncTokenCache:
    """Async-safe single-token cache."""

    def __init__(self) -> None:
        self._token: AuthToken | None = None
        self._lock = asyncio.Lock()

    def get(self) -> AuthToken | None:
        """Get the cached token, if any."""
        return self._token

    async def set(self, token: AuthToken) -> None:
        """Replace the cached token."""
        async with self._lock:
            self._token = token

    async def invalidate(self, token: AuthToken | None = None) -> bool:
        """Clear the cache, or only ``token`` if it is still cached."""
        async with self._lock:
            if token is not None and self._token is not token:
                return False
            self._token = None
            return True

    async def get_or_acquire(
        self,
        acquire: Callable[[], Awaitable[AuthToken]],
        *,
        stale: AuthToken | None = None,
    ) -> AuthToken:
        """Return the cached token, acquiring one if absent.

        Concurrent callers that find the cache empty wait on the lock for
        the single in-flight acquisition and then share its token.
        """
        async with self._lock:
            if self._token is not None and self._token is not stale:
                return self._token
            token = await acquire()
            self._token = token
            return token

    @property
    def is_cached(self) -> bool:
        """Check if a token is currently cached."""
        return self._token is not None
