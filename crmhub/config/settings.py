# crmhub/config/settings.py
# Process-wide configuration, built once at startup and passed to create_app()

import logging
from typing import List, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEV_ORIGINS = [
    "http://localhost:5000",
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
]


class Settings(BaseSettings):
    """Validated environment for the CRM backend.

    Values come from the process environment and an optional ``.env`` file.
    The object is frozen: components receive it explicitly and never mutate it.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    environment: Literal["development", "production", "test"] = "development"
    database_url: str
    session_secret: str = Field(min_length=32)
    session_cookie_name: str = "crmhub_session"
    session_ttl_seconds: int = Field(default=7 * 24 * 60 * 60, gt=0)
    jwt_algorithm: str = "HS256"

    # Comma separated; empty means "localhost only in development, nothing otherwise"
    allowed_origins: str = ""
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Attendance day boundaries are computed in this zone, not server-local time
    reference_timezone: str = "Asia/Kolkata"

    allow_passwordless_login: bool = False
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    auto_create_tables: bool = False

    @model_validator(mode="after")
    def check_production_safety(self):
        if self.allow_passwordless_login and self.environment != "development":
            raise ValueError("ALLOW_PASSWORDLESS_LOGIN may only be enabled in development")
        if self.environment == "production":
            if not self.allowed_origins:
                logger.warning("ALLOWED_ORIGINS not set in production; cross-origin requests will be refused")
            if len(self.session_secret) < 64:
                logger.warning("SESSION_SECRET should be at least 64 characters in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def passwordless_login_enabled(self) -> bool:
        return self.environment == "development" and self.allow_passwordless_login

    @property
    def cors_origins(self) -> List[str]:
        if self.allowed_origins:
            return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        if self.environment == "development":
            return list(DEV_ORIGINS)
        return []


def load_settings() -> Settings:
    """Read settings from the environment (and .env)."""
    return Settings()
