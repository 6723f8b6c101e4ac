"""
Resolve a signed-in user's Entra ID groups during an authentication event.

The rule fetches a Management API token (cached for the process lifetime),
reads the IdP access token stored on the user's linked identity, calls
Microsoft Graph ``/me/memberOf`` with it, and normalizes the result to
``{id, name}`` records. Use ``GroupsPipeline`` directly from async hosts or
``run_rule`` from synchronous ones.
"""

from .context import InvocationContext, NormalizedGroup
from .errors import (
    FailureKind,
    GroupFetchError,
    IdentityLookupError,
    MissingIdentityTokenError,
    PipelineError,
    RuleError,
    StageError,
    TokenAcquisitionError,
)
from .main import get_pipeline, run_rule
from .pipeline import GroupsPipeline
from .settings import Settings, get_settings
from .token_cache import CachedToken, TokenCache

__all__ = [
    "CachedToken",
    "FailureKind",
    "GroupFetchError",
    "GroupsPipeline",
    "IdentityLookupError",
    "InvocationContext",
    "MissingIdentityTokenError",
    "NormalizedGroup",
    "PipelineError",
    "RuleError",
    "Settings",
    "StageError",
    "TokenAcquisitionError",
    "TokenCache",
    "get_pipeline",
    "get_settings",
    "run_rule",
]
