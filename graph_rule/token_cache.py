"""
Process-lifetime cache for Management API access tokens.

Background:
    Obtaining a machine-to-machine token is the most expensive call in the
    pipeline, and the token is valid for hours. The cache keeps the last token
    per M2M client and hands it out until shortly before it expires, so most
    rule invocations skip the client-credentials exchange entirely.

    The cache object is created once at startup and injected into the
    pipeline. It is not locked: two invocations that both see an expired
    entry will both refresh it and the last writer wins, which only costs a
    duplicate token request.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Seconds shaved off the server-declared lifetime so a cached token is never
# handed out just before it expires mid-flight.
SAFETY_MARGIN_SECONDS = 60


def cache_key(client_id: str) -> str:
    return f"{client_id}_token"


@dataclass(frozen=True)
class CachedToken:
    access_token: str
    expiration_date: float
    """Absolute expiry, seconds since the epoch."""


class TokenCache:
    """
    In-memory map of cache key -> ``CachedToken``.

    Entries are overwritten on every refresh and never deleted; an expired
    entry is simply ignored by ``get`` until the next ``store``.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, CachedToken] = {}

    def get(self, key: str) -> CachedToken | None:
        """Return the entry for ``key`` only while it is still usable."""
        entry = self._entries.get(key)
        if entry is None or self._clock() >= entry.expiration_date:
            return None
        return entry

    def store(self, key: str, access_token: str, expires_in: int) -> CachedToken:
        entry = CachedToken(
            access_token=access_token,
            expiration_date=self._clock() + (expires_in - SAFETY_MARGIN_SECONDS),
        )
        self._entries[key] = entry
        logger.debug("Token cached key=%s expires_in=%s", key, expires_in)
        return entry
