"""
Resolve the IdP access token stored on the user's linked identity.

When a user signs in through an enterprise connection (Azure AD / Entra ID),
the tenant keeps the token that provider issued on the user's identity record.
It is only visible through the Management API, so this stage fetches the full
user with the management token and reads ``identities[0].access_token``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import requests

from .errors import IdentityLookupError, MissingIdentityTokenError

logger = logging.getLogger(__name__)

USERS_URL_TEMPLATE = "https://{domain}/api/v2/users"


def _fetch_user(users_url: str, management_token: str, user_id: str, timeout: float) -> dict[str, Any]:
    # User ids look like "waad|abc123"; the separator must be escaped.
    url = f"{users_url}/{quote(user_id, safe='')}"
    headers = {"Authorization": f"Bearer {management_token}"}
    resp = requests.get(url, headers=headers, timeout=timeout)
    resp.raise_for_status()
    user = resp.json()
    if not isinstance(user, Mapping):
        raise ValueError("User record is not a JSON object")
    return user


def _first_identity_token(user: Mapping[str, Any]) -> str | None:
    identities = user.get("identities")
    if not isinstance(identities, list) or not identities:
        return None
    first = identities[0]
    if not isinstance(first, Mapping):
        return None
    return first.get("access_token")


async def resolve_idp_token(
    domain: str,
    management_token: str,
    user_id: str,
    *,
    users_url: str | None = None,
    timeout: float = 10.0,
) -> dict[str, str]:
    """
    Return ``{"idp_access_token"}`` for ``user_id``.

    ``users_url`` defaults to the tenant's Management API users endpoint.

    Raises ``IdentityLookupError`` when the user lookup fails and
    ``MissingIdentityTokenError`` when the first identity carries no
    ``access_token``.
    """
    try:
        user = await asyncio.to_thread(
            _fetch_user,
            users_url or USERS_URL_TEMPLATE.format(domain=domain),
            management_token,
            user_id,
            timeout,
        )
    except (requests.RequestException, ValueError) as e:
        raise IdentityLookupError.from_exception(e) from e

    identities = user.get("identities")
    if not isinstance(identities, list):
        identities = []
    logger.info(
        "User found user_id=%s identities=%s",
        user.get("user_id", user_id),
        [i.get("provider") for i in identities if isinstance(i, Mapping)],
    )

    idp_token = _first_identity_token(user)
    if not idp_token:
        raise MissingIdentityTokenError(f"user_id={user_id}")
    return {"idp_access_token": idp_token}
