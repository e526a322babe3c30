"""
Configuration settings for the fault-tolerance toolkit.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
Durations are expressed in seconds.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Fault Tolerance Toolkit"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Retry ===
    RETRY_MAX_RETRIES: int = 3  # Total attempts = RETRY_MAX_RETRIES + 1
    RETRY_BASE_DELAY: float = 0.1  # First backoff wait, doubled per attempt

    # === Rate Limit Handling (HTTP 429) ===
    RATE_LIMIT_MAX_RETRIES: int = 3
    RATE_LIMIT_BASE_DELAY: float = 1.0

    # === Circuit Breaker ===
    CIRCUIT_BREAKER_THRESHOLD: int = 5  # Consecutive failures before opening
    CIRCUIT_BREAKER_RESET_TIMEOUT: float = 30.0  # Open -> half-open cooldown

    # === Upstream API ===
    UPSTREAM_BASE_URL: str = "http://upstream:8080"
    UPSTREAM_TIMEOUT: float = 10.0

    # === Redis Cache ===
    REDIS_URL: str = "redis://redis:6379/0"
    REDIS_MAX_CONNECTIONS: int = 50  # Connection pool size
    REDIS_SOCKET_TIMEOUT: float = 5.0
    CACHE_TTL_SECONDS: int = 300
    CACHE_KEY_PREFIX: str = "ft:cache:"
    CACHE_WRITE_TIMEOUT: float = 0.5  # Max delay a write-through adds to a live response

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
