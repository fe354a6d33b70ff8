from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from resource_server.introspection import DEFAULT_REALM, ResourceServerConfig
from resource_server.introspection.config import DEFAULT_TIMEOUT_SECONDS


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - ``RS_INTROSPECTION_ENDPOINT`` may be an ``https://`` URL or, for local
      development and tests, a ``file://`` prefix holding ``<token>.json`` files.
    - Allow overriding via env vars to support integration into an existing system.
    """

    model_config = SettingsConfigDict(env_prefix="RS_", extra="ignore")

    introspection_endpoint: str | None = None
    realm: str = DEFAULT_REALM
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    security_config_path: str | None = None
    log_level: str = "INFO"

    def resource_server_config(self) -> ResourceServerConfig:
        return ResourceServerConfig.from_mapping(
            {
                "introspectionEndpoint": self.introspection_endpoint,
                "realm": self.realm,
                "timeout": self.timeout_seconds,
            }
        )

    def resolved_security_config_path(self) -> Path:
        if self.security_config_path:
            return Path(self.security_config_path)

        repo_root = Path(__file__).resolve().parents[1]
        return repo_root / "config" / "security_config.yaml"


@lru_cache
def get_settings() -> Settings:
    return Settings()
