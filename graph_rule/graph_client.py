"""
Microsoft Graph client for the signed-in user's group memberships.

Background for newcomers:
    Unlike an app-only lookup (``/users/{oid}/memberOf`` with a client
    credentials token), this calls ``/me/memberOf`` with the user's own
    delegated token, i.e. the token Entra ID issued when the user signed in
    and that the identity provider stored on the linked identity. The
    delegated token needs the ``GroupMember.Read.All`` (or
    ``Directory.Read.All``) scope.

Limitation: only the first page is read. Graph returns up to 100 entries per
page; when an ``@odata.nextLink`` is present a warning is logged and the
remaining pages are not fetched.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests

from .errors import GroupFetchError

logger = logging.getLogger(__name__)

GRAPH_BASE = "https://graph.microsoft.com/v1.0"
MEMBER_OF_URL = f"{GRAPH_BASE}/me/memberOf"


def _get_member_of(url: str, idp_access_token: str, timeout: float) -> dict[str, Any]:
    headers = {"Authorization": f"Bearer {idp_access_token}"}
    resp = requests.get(url, headers=headers, timeout=timeout)
    resp.raise_for_status()
    return resp.json()


async def fetch_groups(
    idp_access_token: str,
    *,
    url: str = MEMBER_OF_URL,
    timeout: float = 10.0,
) -> dict[str, list[dict[str, Any]]]:
    """
    Return ``{"groups_data"}``: the raw ``value`` list from ``/me/memberOf``.

    Raises ``GroupFetchError`` on an error status, a transport failure, or a
    response body without a ``value`` list.
    """
    try:
        body = await asyncio.to_thread(_get_member_of, url, idp_access_token, timeout)
        groups = body["value"]
        if not isinstance(groups, list):
            raise ValueError("memberOf 'value' is not a list")
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        raise GroupFetchError.from_exception(e) from e

    if body.get("@odata.nextLink"):
        logger.warning(
            "memberOf returned more than one page; only the first %d entries are used",
            len(groups),
        )
    logger.info("Groups data found count=%d", len(groups))
    return {"groups_data": groups}
