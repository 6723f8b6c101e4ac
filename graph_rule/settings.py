from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Rule settings.

    Notes:
    - The three AUTH0_* values identify the tenant and the machine-to-machine
      client used to call the Management API. They have no defaults.
    - Everything else has a local, deterministic default and can be
      overridden from the environment.
    """

    model_config = SettingsConfigDict(extra="ignore")

    auth0_domain: str
    auth0_client_id: str
    auth0_client_secret: str

    rule_log_level: str = "INFO"
    http_timeout_seconds: float = 10.0
    graph_base_url: str = "https://graph.microsoft.com/v1.0"

    @field_validator("auth0_domain", "auth0_client_id", "auth0_client_secret")
    @classmethod
    def _require_value(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("auth0_domain")
    @classmethod
    def _bare_host(cls, value: str) -> str:
        # Accept "https://tenant.auth0.com/" as well as "tenant.auth0.com".
        for scheme in ("https://", "http://"):
            if value.startswith(scheme):
                value = value[len(scheme):]
        value = value.rstrip("/")
        if not value:
            raise ValueError("must be a host name")
        return value

    @field_validator("graph_base_url")
    @classmethod
    def _no_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @property
    def token_url(self) -> str:
        return f"https://{self.auth0_domain}/oauth/token"

    @property
    def management_audience(self) -> str:
        return f"https://{self.auth0_domain}/api/v2/"

    @property
    def users_url(self) -> str:
        return f"{self.management_audience}users"

    @property
    def member_of_url(self) -> str:
        return f"{self.graph_base_url}/me/memberOf"


@lru_cache
def get_settings() -> Settings:
    return Settings()
