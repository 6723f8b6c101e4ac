"""
Group-retrieval pipeline run on every authentication event.

Stages run strictly in order, each awaiting its single network call:

  acquire Management API token (cached)
    -> read IdP access token from the user's linked identity
      -> GET /me/memberOf on Microsoft Graph
        -> normalize to {id, name}

Every stage takes the accumulated ``InvocationContext`` and returns a delta of
new keys. The first ``StageError`` stops the run; the host only ever sees a
generic ``PipelineError``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from .context import InvocationContext
from .errors import PipelineError, StageError
from .graph_client import fetch_groups
from .identity_link import resolve_idp_token
from .normalizer import normalize
from .settings import Settings
from .token_acquirer import acquire_management_token
from .token_cache import TokenCache

logger = logging.getLogger(__name__)

Stage = Callable[[InvocationContext], Awaitable[Mapping[str, Any]]]
HostCallback = Callable[..., Any]


class GroupsPipeline:
    """
    Owns the settings and the process-lifetime ``TokenCache``.

    Build one at startup and reuse it for every invocation; the token cache is
    the only state shared between runs.
    """

    def __init__(self, settings: Settings, token_cache: TokenCache | None = None) -> None:
        self._settings = settings
        self._cache = token_cache if token_cache is not None else TokenCache()
        self._stages: tuple[Stage, ...] = (
            self._acquire_token,
            self._resolve_identity,
            self._fetch_groups,
            self._normalize,
        )

    @property
    def token_cache(self) -> TokenCache:
        return self._cache

    async def _acquire_token(self, ctx: InvocationContext) -> Mapping[str, Any]:
        s = self._settings
        return await acquire_management_token(
            s.auth0_domain,
            s.auth0_client_id,
            s.auth0_client_secret,
            cache=self._cache,
            token_url=s.token_url,
            audience=s.management_audience,
            timeout=s.http_timeout_seconds,
        )

    async def _resolve_identity(self, ctx: InvocationContext) -> Mapping[str, Any]:
        return await resolve_idp_token(
            ctx["domain"],
            ctx["access_token"],
            ctx["user_id"],
            users_url=self._settings.users_url,
            timeout=self._settings.http_timeout_seconds,
        )

    async def _fetch_groups(self, ctx: InvocationContext) -> Mapping[str, Any]:
        return await fetch_groups(
            ctx["idp_access_token"],
            url=self._settings.member_of_url,
            timeout=self._settings.http_timeout_seconds,
        )

    async def _normalize(self, ctx: InvocationContext) -> Mapping[str, Any]:
        return await normalize(ctx["groups_data"])

    async def run(self, user_id: str) -> InvocationContext:
        """
        Run all stages for ``user_id`` and return the final context.

        Raises the first ``StageError`` unchanged.
        """
        ctx = InvocationContext(user_id=user_id)
        for stage in self._stages:
            ctx = ctx.merge(await stage(ctx))
        return ctx

    async def handle(self, user: Mapping[str, Any], context: Any, callback: HostCallback) -> Any:
        """
        Host entry point: run the pipeline for ``user`` and signal ``callback``.

        On success the callback receives ``(None, user, context)`` with both
        objects passed through untouched. On failure it receives a single
        ``PipelineError``; stage detail goes to the log only.
        """
        logger.info("Start rule")
        try:
            ctx = await self.run(user["user_id"])
        except StageError as e:
            logger.error("Rule terminated due to error: %s", e)
            return callback(PipelineError())
        except Exception:
            # Malformed host input or upstream data; the host still gets a signal.
            logger.exception("Rule terminated due to unexpected error")
            return callback(PipelineError())

        groups = ctx["filtered_groups"]
        logger.info("%d groups found", len(groups))
        logger.info("%s", [g.to_dict() for g in groups])
        logger.info("End rule")
        # filtered_groups is only logged; the context goes back to the host unchanged.
        return callback(None, user, context)
