"""
Configuration management using Pydantic settings.

All configuration values are loaded from environment variables or .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server Configuration
    port: int = 8080
    host: str = "127.0.0.1"
    reload: bool = False
    cors_origins: list[str] = ["*"]

    # Auction Defaults
    start_countdown: int = 30  # Seconds before bidding opens
    auction_duration: int = 1800  # Total bidding budget in seconds
    starting_price: float = 1000.0
    leaderboard_size: int = 10
    bid_cooldown: int = 30  # Auction ends this many seconds after the last bid

    # Scheduler
    tick_interval: float = 1.0
    sweep_interval: int = 3600  # Retention sweep every hour
    session_retention: int = 86400  # Keep ended sessions for 24 hours

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Singleton Settings instance loaded from environment.

    Note:
        To reload settings (e.g., in tests), call get_settings.cache_clear()
    """
    return Settings()
