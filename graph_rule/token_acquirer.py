"""
Obtain (or reuse) a Management API bearer token.

Uses the OAuth2 client-credentials grant against the tenant's ``/oauth/token``
endpoint with the Management API as audience. Tokens are cached in the
injected ``TokenCache``; a cache hit returns immediately without any network
call. Failures are raised as ``TokenAcquisitionError`` and never retried.
"""

from __future__ import annotations

import asyncio
import logging

import requests

from .errors import TokenAcquisitionError
from .token_cache import TokenCache, cache_key

logger = logging.getLogger(__name__)


def _request_token(
    token_url: str,
    audience: str,
    client_id: str,
    client_secret: str,
    timeout: float,
) -> tuple[str, int]:
    """
    Run the client-credentials exchange.

    Returns (access_token, expires_in_seconds).
    """
    payload = {
        "client_id": client_id,
        "client_secret": client_secret,
        "audience": audience,
        "grant_type": "client_credentials",
    }
    resp = requests.post(
        token_url,
        json=payload,
        headers={"Content-Type": "application/json"},
        timeout=timeout,
    )
    resp.raise_for_status()
    body = resp.json()
    access_token = body["access_token"]
    if not access_token:
        raise ValueError("Empty access_token in token response")
    return access_token, int(body["expires_in"])


async def acquire_management_token(
    domain: str,
    client_id: str,
    client_secret: str,
    *,
    cache: TokenCache,
    token_url: str | None = None,
    audience: str | None = None,
    timeout: float = 10.0,
) -> dict[str, str]:
    """
    Return ``{"domain", "access_token"}`` for the Management API.

    Resolves straight from ``cache`` while the cached token is valid;
    otherwise performs exactly one token request and refreshes the cache.
    ``token_url`` and ``audience`` default to the tenant's own endpoints.
    """
    key = cache_key(client_id)
    cached = cache.get(key)
    if cached is not None:
        logger.info("Found cached access token")
        return {"domain": domain, "access_token": cached.access_token}

    logger.info("Retrieving new access token...")
    try:
        access_token, expires_in = await asyncio.to_thread(
            _request_token,
            token_url or f"https://{domain}/oauth/token",
            audience or f"https://{domain}/api/v2/",
            client_id,
            client_secret,
            timeout,
        )
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        raise TokenAcquisitionError.from_exception(e) from e

    cache.store(key, access_token, expires_in)
    logger.info("Retrieved and cached new access token")
    return {"domain": domain, "access_token": access_token}
