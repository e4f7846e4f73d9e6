"""
Configuration settings for Memoradical.

Uses Pydantic Settings for environment variable management with .env file support.
Every setting can be overridden with a MEMORADICAL_ prefixed variable,
e.g. MEMORADICAL_GOODNESS_THRESHOLD=0.9.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from memoradical.delivery.scheduler import (
    DrawStrategy,
    ModeFlags,
    NeglectFormula,
    SelectorConfig,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MEMORADICAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    cards_path: Path = Field(
        default=Path.home() / ".memoradical" / "cards.json",
        description="Location of the JSON deck file",
    )

    # ========================================
    # Card Selection
    # ========================================
    prefer_missed: bool = Field(
        default=True,
        description="Favor cards with more misses than hits (Beta sampling)",
    )
    prefer_neglected: bool = Field(
        default=False,
        description="Favor cards with few responses",
    )
    neglect_formula: Literal["inverse", "inverse_sqrt"] = Field(
        default="inverse",
        description="Decay of the neglected-card bonus: 1/visits or 1/sqrt(visits)",
    )
    draw_strategy: Literal["thompson", "proportional"] = Field(
        default="thompson",
        description="Pick the largest sampled weight, or draw proportionally to weights",
    )
    seed: int | None = Field(
        default=None,
        description="Random seed for reproducible sessions",
    )

    # ========================================
    # Statistics
    # ========================================
    goodness_threshold: float = Field(
        default=0.95,
        ge=-1.0,
        le=1.0,
        description="Minimum (hits - misses) / (hits + misses) for a card to count as known well",
    )
    stats_rows: int = Field(
        default=20,
        ge=0,
        description="Number of cards listed in the stats table",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="Log level for the stderr sink",
    )

    def selector_config(self) -> SelectorConfig:
        """Build the card selector configuration."""
        return SelectorConfig(
            draw=DrawStrategy(self.draw_strategy),
            neglect=NeglectFormula(self.neglect_formula),
        )

    def mode_flags(self) -> ModeFlags:
        """Initial mode flags for a study session."""
        return ModeFlags(
            reverse_mode=False,
            prefer_missed=self.prefer_missed,
            prefer_neglected=self.prefer_neglected,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
