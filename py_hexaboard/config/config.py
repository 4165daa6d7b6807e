"""Configuration management."""

import math
from typing import Union

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings pulled from environment variables (CLI only)."""

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="console", description="Logging format (console or json)")

    model_config = SettingsConfigDict(
        env_prefix="HEXABOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class LandConfig(BaseModel):
    """Construction parameters of a sector grid."""

    sector_radius: int = Field(default=17, description="Tiles from sector center to border, center included")
    tile_size: float = Field(default=1.0, gt=0, description="Hexagon radius in world units")
    view_distance: float = Field(default=60.0, ge=0, description="Generation distance around viewpoints")
    terrain_height: float = Field(default=80.0, gt=0, description="Height normalization range")
    sea_level: float = Field(default=0.0, description="Height under which tiles are sea")
    seed: Union[int, str] = Field(default=0, description="World seed")

    @field_validator("sector_radius")
    @classmethod
    def _power_of_two_plus_one(cls, value: int) -> int:
        span = value - 1
        if span < 2 or span & (span - 1):
            raise ValueError(f"sector_radius - 1 must be a power of two >= 2, got {value}")
        return value

    @property
    def scale(self) -> int:
        """Subdivision depth of a sector."""
        return int(math.log2(self.sector_radius - 1))
