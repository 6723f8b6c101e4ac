"""
Error taxonomy for the group-retrieval pipeline.

Each stage catches failures of its own network call and re-raises them as a
stage-tagged ``StageError`` subclass. The orchestrator logs that detail and
hands the host a single ``PipelineError`` that names only the rule.
"""

from __future__ import annotations

from enum import Enum

import requests

from .logging_config import RULE_NAME


class FailureKind(str, Enum):
    """How a network call failed."""

    HTTP = "http"
    """The server answered with an error status."""

    TRANSPORT = "transport"
    """No response was received (connection refused, DNS, timeout)."""

    CLIENT = "client"
    """Anything else: bad JSON, missing fields, invalid request."""


class RuleError(Exception):
    """Base class for every error raised by this package."""

    pass


class StageError(RuleError):
    """A pipeline stage failed. Carries enough detail for the log only."""

    stage = "stage"
    summary = "Stage failed"

    def __init__(
        self,
        detail: str = "",
        *,
        kind: FailureKind = FailureKind.CLIENT,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        self.detail = detail
        self.kind = kind
        self.status = status
        self.body = body
        super().__init__(self._format())

    def _format(self) -> str:
        msg = f"[{self.stage}] {self.summary}"
        if self.kind is FailureKind.HTTP:
            msg += f": {self.status}: {self.body}"
        elif self.detail:
            msg += f": {self.detail}"
        return msg

    @classmethod
    def from_exception(cls, exc: BaseException) -> StageError:
        """Classify a failed ``requests`` call (or its response handling)."""
        if isinstance(exc, requests.HTTPError) and exc.response is not None:
            return cls(
                str(exc),
                kind=FailureKind.HTTP,
                status=exc.response.status_code,
                body=exc.response.text,
            )
        if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
            return cls(f"{type(exc).__name__}: {exc}", kind=FailureKind.TRANSPORT)
        return cls(f"{type(exc).__name__}: {exc}", kind=FailureKind.CLIENT)


class TokenAcquisitionError(StageError):
    """Client-credentials exchange for a Management API token failed."""

    stage = "token"
    summary = "Could not retrieve Management API access token"


class IdentityLookupError(StageError):
    """Fetching the user record from the Management API failed."""

    stage = "identity"
    summary = "Could not retrieve user record"


class MissingIdentityTokenError(StageError):
    """The user's first linked identity has no stored IdP access token."""

    stage = "identity"
    summary = "User identity does not have property 'access_token'"


class GroupFetchError(StageError):
    """The directory memberOf call failed."""

    stage = "groups"
    summary = "Could not retrieve Groups data from Graph API"


class PipelineError(RuleError):
    """The only error the host sees. Deliberately carries no stage detail."""

    def __init__(self) -> None:
        super().__init__(f"Rule error [{RULE_NAME}]: Unable to retrieve Groups data")
