"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote service
    aggietime_uri: str = "https://aggietime.usu.edu"
    # Domain the XSRF-TOKEN cookie is issued for
    aggietime_domain: str = "aggietime.usu.edu"
    # Session cookies (e.g. the SSO session) seeded into the cookie jar.
    # Set as a JSON object: AGGIETIME_COOKIES='{"JSESSIONID": "..."}'
    aggietime_cookies: dict[str, str] = Field(default_factory=dict)
    request_timeout_seconds: float = 10.0

    # Endpoint path templates, placeholders are `:name`
    user_path: str = "/api/v1/auth/get_user_info"
    clockin_path: str = "/api/v1/positions/:position_id/clock_in"
    clockout_path: str = "/api/v1/positions/:position_id/clock_out"
    open_shift_path: str = "/api/v1/users/:anumber/open_shift"
    summary_path: str = "/api/v1/positions/:position_id/summary?start=:start&end=:end"

    # Cache expirations
    user_cache_ttl_seconds: int = Field(default=300, gt=0)
    open_shift_ttl_seconds: int = Field(default=60, gt=0)
    past_week_ttl_seconds: int = Field(default=600, gt=0)

    # Retry with exponential backoff for the user info fetch
    retry_attempts: int = Field(default=5, ge=1)
    retry_base_delay_seconds: float = Field(default=0.5, ge=0)
    retry_max_delay_seconds: float = Field(default=8.0, ge=0)

    # Optional shared cache; the in-memory cache is used when disabled
    redis_url: str = "redis://localhost:6379"
    redis_enabled: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
