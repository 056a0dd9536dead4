"""Configuration management for lropoll."""
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Client settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Polling defaults feed PollOptions when a caller passes no options.
    """

    # Application
    APP_NAME: str = "lropoll"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # RPC invoker
    RPC_ENDPOINT: str = "http://localhost:8080/v1"
    RPC_TIMEOUT: float = 30.0  # Seconds per RPC call

    # Long-running operation polling
    LRO_INITIAL_DELAY: float = 0.5  # Seconds before the second status fetch
    LRO_MAX_DELAY: float = 45.0  # Upper bound for a single backoff sleep
    LRO_MULTIPLIER: float = 1.5
    LRO_TOTAL_TIMEOUT: Optional[float] = None  # Seconds, None = no deadline
    LRO_MAX_ATTEMPTS: Optional[int] = None  # None = unlimited fetches
    LRO_CANCEL_GRACE_PERIOD: float = 0.0  # Seconds to keep polling after cancel()

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Singleton settings instance
    """
    return Settings()
