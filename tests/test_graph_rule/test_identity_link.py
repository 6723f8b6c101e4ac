"""Tests for reading the IdP token off the user's linked identity (mocked)."""

import asyncio
from unittest.mock import patch

import pytest
import requests

from graph_rule.errors import FailureKind, IdentityLookupError, MissingIdentityTokenError
from graph_rule.identity_link import resolve_idp_token

DOMAIN = "tenant.eu.auth0.com"


def _resolve(user_id="u1"):
    return asyncio.run(resolve_idp_token(DOMAIN, "m2m-tok", user_id, timeout=5))


@patch("graph_rule.identity_link.requests.get")
def test_returns_first_identity_access_token(mock_get, make_response):
    mock_get.return_value = make_response(200, {
        "user_id": "u1",
        "identities": [
            {"provider": "waad", "user_id": "abc", "access_token": "idp-tok"},
            {"provider": "google-oauth2", "user_id": "xyz", "access_token": "other"},
        ],
    })
    assert _resolve() == {"idp_access_token": "idp-tok"}

    args, kwargs = mock_get.call_args
    assert args[0] == f"https://{DOMAIN}/api/v2/users/u1"
    assert kwargs["headers"] == {"Authorization": "Bearer m2m-tok"}


@patch("graph_rule.identity_link.requests.get")
def test_user_id_is_url_quoted(mock_get, make_response):
    mock_get.return_value = make_response(200, {"identities": [{"access_token": "idp-tok"}]})
    _resolve("waad|abc 123")
    assert mock_get.call_args.args[0] == f"https://{DOMAIN}/api/v2/users/waad%7Cabc%20123"


@patch("graph_rule.identity_link.requests.get")
def test_missing_access_token(mock_get, make_response):
    mock_get.return_value = make_response(200, {"identities": [{"provider": "waad"}]})
    with pytest.raises(MissingIdentityTokenError):
        _resolve()


@patch("graph_rule.identity_link.requests.get")
def test_only_first_identity_is_considered(mock_get, make_response):
    mock_get.return_value = make_response(200, {
        "identities": [{"provider": "auth0"}, {"provider": "waad", "access_token": "idp-tok"}],
    })
    with pytest.raises(MissingIdentityTokenError):
        _resolve()


@patch("graph_rule.identity_link.requests.get")
def test_no_identities(mock_get, make_response):
    mock_get.return_value = make_response(200, {"user_id": "u1", "identities": []})
    with pytest.raises(MissingIdentityTokenError):
        _resolve()


@patch("graph_rule.identity_link.requests.get")
def test_lookup_http_error(mock_get, make_response):
    mock_get.return_value = make_response(404, {"statusCode": 404, "message": "The user does not exist."})
    with pytest.raises(IdentityLookupError) as exc_info:
        _resolve()
    assert exc_info.value.kind is FailureKind.HTTP
    assert exc_info.value.status == 404
    assert isinstance(exc_info.value.__cause__, requests.HTTPError)


@patch("graph_rule.identity_link.requests.get")
def test_lookup_timeout(mock_get):
    mock_get.side_effect = requests.Timeout("read timed out")
    with pytest.raises(IdentityLookupError) as exc_info:
        _resolve()
    assert exc_info.value.kind is FailureKind.TRANSPORT


@patch("graph_rule.identity_link.requests.get")
def test_explicit_users_url(mock_get, make_response):
    mock_get.return_value = make_response(200, {"identities": [{"access_token": "idp-tok"}]})
    asyncio.run(resolve_idp_token(
        DOMAIN, "m2m-tok", "u1", users_url="https://custom.example.test/api/v2/users",
    ))
    assert mock_get.call_args.args[0] == "https://custom.example.test/api/v2/users/u1"
