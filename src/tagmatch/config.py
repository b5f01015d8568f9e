"""
Configuration management for tagmatch.

Uses Pydantic Settings to load configuration from environment variables
(prefixed with ``TAGMATCH_``) with sensible defaults. The values here tune
how forgiving the matcher is and how the package logs.

Usage:
    from tagmatch.config import settings
    print(settings.near_match_edit_ratio)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can be set directly or via a .env file
    in the project root directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="TAGMATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Default Match Options
    # ==========================================================================

    match_ignore_case: bool = Field(
        default=True,
        description="Case-fold query and candidate before comparing",
    )
    match_near_character_recognition: bool = Field(
        default=True,
        description="Fold lookalike characters (e.g. Cyrillic 'а' to 'a') before comparing",
    )

    # ==========================================================================
    # Near-Match Thresholds
    # ==========================================================================

    # See matching/matcher.py for how these combine
    near_match_min_length: int = Field(
        default=3,
        ge=1,
        description="Shortest string allowed to count as contained in another",
    )
    near_match_edit_ratio: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Allowed Levenshtein edits as a fraction of the longer string",
    )
    near_match_jaro_winkler_threshold: float = Field(
        default=0.95,
        ge=0.0,
        le=1.0,
        description="Jaro-Winkler similarity at or above which long strings are near",
    )
    near_match_jaro_winkler_min_length: int = Field(
        default=8,
        ge=1,
        description="Both strings must be at least this long for the Jaro-Winkler test",
    )

    # ==========================================================================
    # Logging Configuration
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_format: str = Field(
        default="console",
        description="Log format: 'json' for production, 'console' for dev",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Ensure log format is one we know how to render."""
        lower_v = v.lower()
        if lower_v not in {"json", "console"}:
            raise ValueError("log_format must be 'json' or 'console'")
        return lower_v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only load settings once,
    which is important because loading from .env can be slow.
    """
    return Settings()


# Convenience alias for importing
settings = get_settings()
