"""
techintel.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (JWT secret, secret-store encryption key).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration for the dashboard API.

    Every field maps to a `TI_*` environment variable; defaults are safe for local dev.
    """

    model_config = SettingsConfigDict(env_prefix="TI_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and the dev token route.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "techintel-api"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "techintel"
    jwt_audience: str = "techintel-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Persistence (use postgresql+asyncpg://... in prod)
    database_url: str = "sqlite+aiosqlite:///./techintel.db"

    # Fernet key for `api_secrets.encrypted_key`; derived from jwt_secret outside prod when unset.
    secrets_encryption_key: str | None = Field(default=None, repr=False)

    # Owner recorded on rows created by unauthenticated dashboard routes.
    default_user_id: str = "default-user"

    # Forecast jobs
    forecast_step_delay_seconds: float = Field(default=0.5, ge=0)
    forecast_estimated_time: str = "2-3 minutes"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Routers read settings through `api.deps.settings_dep`, which resolves to the
# settings object the app was created with (tests pass their own instance).
