"""
Rules Gateway - Configuration

Environment-based configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Rules Gateway"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_prefix: str = "/api/rules-engine"
    cors_origins: list[str] = ["*"]

    # Kuiper rules engine
    kuiper_url: str = "http://localhost:9081"
    stream_format: str = "json"
    stream_type: str = "mainflux"

    # Things service (channel lookups)
    things_url: str = "http://things:8182"

    # Keycloak / JWT Authentication
    keycloak_url: str = "http://keycloak-service:8080"
    keycloak_public_url: Optional[str] = None
    keycloak_realm: str = "nekazari"
    keycloak_client_id: str = "account"

    # Outbound HTTP
    request_timeout: float = 10.0

    @property
    def keycloak_issuer_url(self) -> str:
        """Issuer of tokens minted by the internal Keycloak URL."""
        base = self.keycloak_url.rstrip("/")
        if not base.endswith("/auth"):
            base = f"{base}/auth"
        return f"{base}/realms/{self.keycloak_realm}"

    @property
    def jwks_url(self) -> str:
        """Get the JWKS URL for token verification."""
        return f"{self.keycloak_issuer_url}/protocol/openid-connect/certs"

    class Config:
        env_prefix = "RULES_GATEWAY_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
