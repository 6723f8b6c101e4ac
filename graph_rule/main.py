from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from .logging_config import configure_rule_logging
from .pipeline import GroupsPipeline, HostCallback
from .settings import get_settings
from .token_cache import TokenCache


@lru_cache
def get_pipeline() -> GroupsPipeline:
    """Build the process-wide pipeline (and its token cache) on first use."""
    settings = get_settings()
    configure_rule_logging(settings.rule_log_level)
    logging.getLogger(__name__).info("Rule pipeline initialized domain=%s", settings.auth0_domain)
    return GroupsPipeline(settings, TokenCache())


def run_rule(user: Mapping[str, Any], context: Any, callback: HostCallback) -> Any:
    """Synchronous entry point for hosts that are not running an event loop."""
    return asyncio.run(get_pipeline().handle(user, context, callback))
