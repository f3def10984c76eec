"""Application configuration using pydantic-settings."""
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# Sessions live for at most 7 days from login (fixed, not sliding)
SESSION_MAX_AGE_SECONDS = 60 * 60 * 24 * 7


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./fastodo.db"

    # Redis (optional; required only by the redis session backend)
    redis_url: str = "redis://localhost:6379"
    redis_enabled: bool = False

    # Sessions
    session_backend: Literal["database", "redis"] = "database"
    session_cookie_name: str = "fastodo_session"
    session_cookie_secure: bool = False
    session_max_age_seconds: int = Field(default=SESSION_MAX_AGE_SECONDS, gt=0)

    # bcrypt cost factor; 12 rounds is roughly 250ms per hash on current hardware
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # CORS
    cors_origins: Annotated[list[str], NoDecode] = ["http://localhost:5173"]

    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Accept a comma-separated string or a list of origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @model_validator(mode="after")
    def check_session_backend(self) -> "Settings":
        """The redis session backend cannot work with Redis disabled."""
        if self.session_backend == "redis" and not self.redis_enabled:
            raise ValueError("session_backend='redis' requires redis_enabled=true")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
