"""
Application configuration.

Centralized settings with support for:
- Environment variables (RL_ prefix)
- .env file
- CLI argument overrides
"""
from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models import LandmarkConfig

DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Priority: CLI args > Environment > .env file > defaults

    Environment variables use RL_ prefix:
    - RL_PROVIDER, RL_OVERPASS_URL, RL_LOOKUP_TIMEOUT_S, RL_FEATURES_FILE
    - RL_SAMPLE_EVERY_KM, RL_PROXIMITY_KM, RL_BLOCK_KM, RL_MIN_GAP_KM
    - RL_CHANNEL, RL_DEBUG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="RL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Feature store selection
    provider: str = Field(default="overpass", description="Feature store: overpass, file")
    overpass_url: str = Field(default=DEFAULT_OVERPASS_URL, description="Overpass API interpreter URL")
    lookup_timeout_s: float = Field(default=60.0, gt=0, description="Timeout for the whole feature lookup")
    features_file: Optional[str] = Field(default=None, description="Overpass JSON dump for the file provider")

    # Landmark pipeline
    sample_every_km: float = Field(default=1.0, gt=0, description="Distance between markers")
    proximity_km: float = Field(default=1.0, gt=0, description="Max distance marker -> feature")
    peak_window: int = Field(default=2, ge=1, description="Neighbors per side for peak detection")
    block_km: int = Field(default=10, ge=1, description="Deduplication block size")
    min_gap_km: int = Field(default=5, ge=0, description="Min gap between reported landmarks")
    bbox_margin_deg: float = Field(default=0.01, ge=0, description="Bounding box margin in degrees")

    # Output
    channel: str = Field(default="console", description="Output channel: console, none")
    output_format: str = Field(default="text", description="Output format: text, json")
    debug_level: str = Field(default="info", description="Debug level: info, verbose")

    def get_landmark_config(self) -> LandmarkConfig:
        """Create LandmarkConfig from settings."""
        return LandmarkConfig(
            sample_every_km=self.sample_every_km,
            proximity_km=self.proximity_km,
            peak_window=self.peak_window,
            block_km=self.block_km,
            min_gap_km=self.min_gap_km,
            bbox_margin_deg=self.bbox_margin_deg,
        )

    def can_use_file_provider(self) -> bool:
        """Check if the offline feature store is configured."""
        return bool(self.features_file)
