"""
Pytest fixtures for the test suite.

Network calls are never made: tests patch ``requests.post`` / ``requests.get``
and feed back real ``requests.Response`` objects built by ``make_response``,
so ``raise_for_status`` and ``json`` behave exactly as in production.
"""
from __future__ import annotations

import json

import pytest
import requests

from graph_rule.settings import Settings
from graph_rule.token_cache import TokenCache


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _make_response(status_code: int = 200, json_body=None, *, text: str | None = None, url: str = "https://example.test/"):
    resp = requests.Response()
    resp.status_code = status_code
    payload = text if text is not None else json.dumps(json_body)
    resp._content = payload.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = url
    return resp


@pytest.fixture
def make_response():
    """Factory for real ``requests.Response`` objects."""
    return _make_response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_cache(clock):
    return TokenCache(clock=clock)


@pytest.fixture
def settings():
    return Settings(
        auth0_domain="tenant.eu.auth0.com",
        auth0_client_id="m2m-client",
        auth0_client_secret="m2m-secret",
    )
