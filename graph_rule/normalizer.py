from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .context import NormalizedGroup

logger = logging.getLogger(__name__)


def normalize_groups(groups_data: Iterable[Mapping[str, Any]]) -> list[NormalizedGroup]:
    """
    Project raw memberOf records onto ``NormalizedGroup``.

    Order and length are preserved; nothing is filtered out. A record without
    ``displayName`` yields ``name=None``.
    """
    return [NormalizedGroup(id=g.get("id"), name=g.get("displayName")) for g in groups_data]


async def normalize(groups_data: Iterable[Mapping[str, Any]]) -> dict[str, list[NormalizedGroup]]:
    filtered = normalize_groups(groups_data)
    logger.info("Groups data filtered")
    return {"filtered_groups": filtered}
