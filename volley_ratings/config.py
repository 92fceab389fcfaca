"""Configuration management using Pydantic Settings.

This module provides centralized configuration for the rating engine,
supporting environment variables and .env file loading. Settings only
supply defaults: calculators receive an explicit ``RatingConfig`` built
from them (see ``volley_ratings.ratings.weights``).

Example:
    >>> from volley_ratings.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.provisional_threshold)
    3
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Environment variables take precedence over .env file values.

    Attributes:
        provisional_threshold: Games needed before a rating stops being provisional.
        midpoint_tier: Opponent tier that applies no adjustment.
        tier_step: Fractional rating change per opponent tier above/below midpoint.
        recency_decay_games: Games over which recency weights decay to the floor.
        trend_window_size: Games in each trend comparison window.
        trend_threshold: Relative change treated as stable.
        validation_policy: How malformed stat lines are handled (strict or clamp).
        weights_path: Optional JSON file overriding position/team weights.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory for log files.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ratings
    provisional_threshold: int = Field(
        default=3,
        alias="RATING_PROVISIONAL_THRESHOLD",
        ge=1,
        le=20,
        description="Games needed before a rating stops being provisional",
    )
    midpoint_tier: int = Field(
        default=5,
        alias="RATING_MIDPOINT_TIER",
        ge=1,
        le=9,
        description="Opponent tier with a neutral adjustment",
    )
    tier_step: float = Field(
        default=0.05,
        alias="RATING_TIER_STEP",
        ge=0.0,
        le=0.12,
        description="Rating multiplier change per opponent tier",
    )
    recency_decay_games: int = Field(
        default=12,
        alias="RATING_RECENCY_DECAY_GAMES",
        ge=1,
        description="Games over which recency weights decay",
    )
    weights_path: str | None = Field(
        default=None,
        alias="RATING_WEIGHTS_PATH",
        description="JSON file with position/team weight overrides",
    )

    # Trends
    trend_window_size: int = Field(
        default=5,
        alias="TREND_WINDOW_SIZE",
        ge=1,
        description="Games per trend window",
    )
    trend_threshold: float = Field(
        default=0.05,
        alias="TREND_THRESHOLD",
        ge=0.0,
        le=1.0,
        description="Relative change below which a trend is stable",
    )

    # Input validation
    validation_policy: Literal["strict", "clamp"] = Field(
        default="strict",
        alias="STAT_VALIDATION_POLICY",
        description="Reject (strict) or repair (clamp) malformed stat lines",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )
    log_dir: str = Field(
        default="logs",
        alias="LOG_DIR",
        description="Directory for log files",
    )

    @field_validator("log_dir")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Ensure path strings are valid."""
        if not v or v.isspace():
            raise ValueError("Path cannot be empty or whitespace")
        return v

    @field_validator("weights_path")
    @classmethod
    def validate_optional_path(cls, v: str | None) -> str | None:
        """Treat blank weight paths as unset."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def log_dir_obj(self) -> Path:
        """Return log directory as Path object."""
        return Path(self.log_dir)

    @property
    def weights_path_obj(self) -> Path | None:
        """Return weights override path as Path object, if configured."""
        return Path(self.weights_path) if self.weights_path else None

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.log_dir_obj.mkdir(parents=True, exist_ok=True)


# Singleton pattern for settings
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> print(settings.trend_window_size)
        5
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
