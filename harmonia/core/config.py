from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from harmonia.core.version import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    PORT: int = 8000
    APP_ENV: Literal["development", "production"] = "production"
    LOG_LEVEL: str = "INFO"

    # Interest profiles
    DEFAULT_HALF_LIFE_DAYS: float = 30.0
    INTERACTION_WEIGHT: float = 0.2
    # Publishing public content is a stronger signal than passive engagement
    PUBLIC_CONTENT_WEIGHT: float = 0.35
    COMMENT_AUTHOR_WEIGHT: float = 0.25

    # Feed
    FEED_DEFAULT_LIMIT: int = 40
    FEED_CURIOSITY_RATIO: float = 0.18

    # Resonance colors
    RECENT_HALF_LIFE_MINUTES: float = 6.0
    BASELINE_HALF_LIFE_HOURS: float = 6.0
    PULSE_DURATION_MS: int = 2100


settings = Settings()

APP_VERSION = __version__
