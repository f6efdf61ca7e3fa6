"""Configuration module using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Provider endpoints
    random_user_url: str = "https://randomuser.me/api/"
    opencage_url: str = "https://api.opencagedata.com/geocode/v1/json"
    opencage_api_key: str | None = None
    weather_url: str = "https://api.open-meteo.com/v1/forecast"

    # HTTP Client
    http_timeout_connect: float = 10.0
    http_timeout_read: float = 30.0

    # Retry policy (seconds)
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 5.0

    # Cache
    cache_ttl_minutes: float = 30
    cache_backend: str = "file"  # "memory", "file" or "redis"
    cache_dir: Path = Path("data/cache")
    redis_url: str | None = None  # e.g. redis://localhost:6379/0
    redis_prefix: str = "weathercards:"

    # Auto-refresh
    refresh_interval_minutes: float = 30
    user_count: int = 5

    # Logging
    log_level: str = "INFO"

    @property
    def cache_ttl_ms(self) -> int:
        """Cache TTL in milliseconds."""
        return int(self.cache_ttl_minutes * 60 * 1000)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience function for quick access
settings = get_settings()
