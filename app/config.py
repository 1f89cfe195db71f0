"""
Jojárts API — Application Configuration
=========================================

What:  Centralized configuration loaded with Pydantic Settings.
Why:   One immutable settings object is built at process start and handed
       explicitly to the token service, credential store and database.
How:   Values come from environment variables (or a .env file) and are
       type-checked on load. Required values are checked by
       validate_required(), which create_app() calls before anything else.

Required:
    DATABASE_URL   async SQLAlchemy URL, e.g. postgresql+asyncpg://... or
                   sqlite+aiosqlite:///./jojarts.db
    JWT_SECRET     HMAC secret used to sign bearer tokens

Everything else has a development default.
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Process-wide configuration.

    Frozen: nothing mutates configuration after startup, so the signing
    secret seen by the token service is the one that was validated.
    """

    # ── Storage ───────────────────────────────────────────────────────────
    database_url: str = Field(
        default="",
        description="Async SQLAlchemy connection URL (required)",
    )
    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=5, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # What: Create missing tables at startup
    # Off when the schema is managed with `alembic upgrade head`
    auto_create_schema: bool = Field(default=True)

    # ── Tokens ────────────────────────────────────────────────────────────
    jwt_secret: str = Field(
        default="",
        description="Secret used to sign bearer tokens (required)",
    )
    jwt_algorithm: str = Field(default="HS256")
    token_ttl_days: int = Field(default=7, ge=1, le=365)

    # ── Bootstrap administrator ───────────────────────────────────────────
    admin_user: str = Field(default="admin", min_length=1)
    admin_pass: str = Field(default="123", min_length=1)
    bcrypt_rounds: int = Field(default=10, ge=4, le=15)

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5174, ge=1, le=65535)

    # Comma-separated; "*" allows any origin (the public gallery is open)
    cors_origins: str = Field(default="*")

    log_level: str = Field(default="INFO")

    # ── Login throttling ──────────────────────────────────────────────────
    login_rate_limit_requests: int = Field(default=20, ge=1, le=10000)
    login_rate_limit_window: int = Field(default=900, ge=1, le=86400)  # seconds

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def validate_required(self) -> None:
        """
        Fail fast when required settings are missing.

        Raises:
            ConfigurationError listing every missing variable, so a broken
            deployment is fixed in one pass instead of one error at a time.
        """
        missing = []
        if not self.database_url.strip():
            missing.append("DATABASE_URL")
        if not self.jwt_secret.strip():
            missing.append("JWT_SECRET")
        if missing:
            raise ConfigurationError(
                message="Missing required configuration: " + ", ".join(missing),
                context={"missing": missing},
            )


@lru_cache
def get_settings() -> Settings:
    """Settings built once per process from the environment."""
    return Settings()
