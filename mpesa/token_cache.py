"""
In-memory access token cache.

Tokens are kept per (consumer key, consumer secret, environment). A missing or
expired entry triggers exactly one fetch per key; concurrent callers for the
same key wait on that fetch and share its result or its failure.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional, Tuple

from pydantic import SecretStr

from .constants import Environment

logger = logging.getLogger(__name__)

CacheKey = Tuple[SecretStr, SecretStr, Environment]
TokenFetcher = Callable[[SecretStr, SecretStr, Environment], Awaitable[Tuple[str, int]]]


@dataclass(frozen=True)
class AccessToken:
    """A bearer token and the instant (on the cache clock) it stops being usable."""
    token: SecretStr
    expires_in: int
    expires_at: float = field(compare=False)

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class TokenCache:
    """
    Caches access tokens and collapses concurrent refreshes into one fetch.

    The cache never stores a failed or unfinished fetch: entries are only
    written once a fetch has returned a token.
    """

    def __init__(
        self,
        fetcher: TokenFetcher,
        expiry_margin: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            fetcher: Coroutine function returning ``(token, expires_in)``
            expiry_margin: Seconds subtracted from ``expires_in`` so tokens are
                refreshed before the remote side considers them expired
            clock: Monotonic time source in seconds
        """
        if expiry_margin < 0:
            raise ValueError("expiry_margin must not be negative")
        self._fetcher = fetcher
        self._expiry_margin = expiry_margin
        self._clock = clock
        self._entries: Dict[CacheKey, AccessToken] = {}
        self._inflight: Dict[CacheKey, asyncio.Future] = {}

    def peek(self, consumer_key: SecretStr, consumer_secret: SecretStr,
             environment: Environment) -> Optional[AccessToken]:
        """Return the stored entry for a key without fetching, valid or not."""
        return self._entries.get((consumer_key, consumer_secret, environment))

    async def get_token(
        self,
        consumer_key: SecretStr,
        consumer_secret: SecretStr,
        environment: Environment
    ) -> AccessToken:
        """
        Get a valid access token, fetching one if needed.

        Raises:
            AuthenticationError: If the token endpoint rejects the request
            NetworkError: If the token endpoint cannot be reached
        """
        key = (consumer_key, consumer_secret, environment)

        cached = self._entries.get(key)
        if cached is not None and cached.is_valid(self._clock()):
            logger.debug(f"Using cached {environment.value} token")
            return cached

        inflight = self._inflight.get(key)
        if inflight is None:
            if cached is None:
                logger.info(f"No cached {environment.value} token, fetching one")
            else:
                logger.info(f"Cached {environment.value} token expired, refreshing")
            inflight = asyncio.ensure_future(self._refresh(key))
            self._inflight[key] = inflight
            inflight.add_done_callback(lambda fut: self._forget(key, fut))
        else:
            logger.debug(f"Waiting for in-flight {environment.value} token fetch")

        # Shielded so one cancelled caller does not cancel the fetch for the
        # others waiting on it.
        return await asyncio.shield(inflight)

    async def _refresh(self, key: CacheKey) -> AccessToken:
        consumer_key, consumer_secret, environment = key
        # Expiry counts from before the request, the remote clock starts no later.
        requested_at = self._clock()
        token, expires_in = await self._fetcher(consumer_key, consumer_secret, environment)
        entry = AccessToken(
            token=SecretStr(token),
            expires_in=expires_in,
            expires_at=requested_at + expires_in - self._expiry_margin,
        )
        self._entries[key] = entry
        logger.info(f"Cached new {environment.value} token valid for {expires_in}s")
        return entry

    def _forget(self, key: CacheKey, future: asyncio.Future):
        if self._inflight.get(key) is future:
            del self._inflight[key]
        # Mark a failure as retrieved even when every waiter was cancelled.
        if not future.cancelled():
            future.exception()

    def invalidate(self, consumer_key: SecretStr, consumer_secret: SecretStr,
                   environment: Environment):
        """
        Drop the cached token for one key.
        A fetch already in flight is not affected.
        """
        logger.info(f"Invalidating cached {environment.value} token")
        self._entries.pop((consumer_key, consumer_secret, environment), None)

    def clear(self):
        """Drop every cached token."""
        logger.info("Clearing all cached tokens")
        self._entries.clear()
