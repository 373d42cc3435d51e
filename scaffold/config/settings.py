"""Runtime configuration loaded from the environment."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeMode(str, Enum):
    """Process-wide runtime mode."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ExpiryPolicy(str, Enum):
    """How a session's expiry reacts to use."""

    SLIDING = "sliding"
    FIXED = "fixed"


_DEV_SECRET = "dev-only-session-secret"


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Scaffold"
    app_version: str = "1.0.0"
    app_env: RuntimeMode = RuntimeMode.DEVELOPMENT
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = Field(default=5000, ge=1, le=65535)
    log_file: str = "logs/app.log"

    api_prefix: str = "/api"

    # Session / principal persistence
    database_url: Optional[str] = None
    session_store: Optional[Literal["memory", "database"]] = None
    session_secret: Optional[SecretStr] = None
    session_cookie_name: str = "sid"
    session_ttl_seconds: int = Field(default=7 * 24 * 60 * 60, ge=1)
    session_expiry: ExpiryPolicy = ExpiryPolicy.SLIDING
    session_sweep_interval_seconds: int = Field(
        default=600,
        ge=0,
        description="Seconds between expiry sweeps; 0 disables the sweeper.",
    )

    # Non-API dispatch
    static_dir: str = "dist/public"
    dev_server_url: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def _use_async_driver(cls, value: Optional[str]) -> Optional[str]:
        """Point bare postgres URLs at the asyncpg driver."""

        if not value:
            return None
        for prefix in ("postgres://", "postgresql://"):
            if value.startswith(prefix):
                return "postgresql+asyncpg://" + value[len(prefix):]
        return value

    @field_validator("api_prefix")
    @classmethod
    def _normalise_prefix(cls, value: str) -> str:
        value = "/" + value.strip("/")
        if value == "/":
            raise ValueError("api_prefix must not be the root path")
        return value

    @model_validator(mode="after")
    def _check_runtime_requirements(self) -> "Settings":
        if self.session_store is None:
            self.session_store = "database" if self.database_url else "memory"

        if self.session_store == "database" and not self.database_url:
            raise ValueError("SESSION_STORE=database requires DATABASE_URL")

        if self.is_production:
            missing = []
            if self.session_secret is None or not self.session_secret.get_secret_value():
                missing.append("SESSION_SECRET")
            if not self.database_url:
                missing.append("DATABASE_URL")
            if missing:
                raise ValueError(
                    "Production mode requires " + ", ".join(missing)
                )
            if self.session_store != "database":
                raise ValueError("Production mode requires the database session store")

        return self

    @property
    def is_production(self) -> bool:
        return self.app_env is RuntimeMode.PRODUCTION

    @property
    def secret_key(self) -> str:
        """Session signing secret; development falls back to a fixed value."""

        if self.session_secret is not None:
            return self.session_secret.get_secret_value()
        return _DEV_SECRET

    def is_api_path(self, path: str) -> bool:
        return path == self.api_prefix or path.startswith(self.api_prefix + "/")


@lru_cache
def get_settings() -> Settings:
    """Return the process settings, loaded once."""

    return Settings()


__all__ = ["ExpiryPolicy", "RuntimeMode", "Settings", "get_settings"]
