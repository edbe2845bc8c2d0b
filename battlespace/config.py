"""Configuration management."""
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings, read from BATTLESPACE_* env vars or .env."""

    # Simulation
    seed: int = Field(default=42, description="Default RNG seed for new games")
    tick_ms: int = Field(default=1000, description="Tick period at speed 1, in ms")
    initial_speed: int = Field(default=1, ge=0, le=3, description="Speed of a new game")
    starting_resources: float = Field(default=1_000_000_000_000, description="Starting treasury")
    countries_path: Optional[str] = Field(
        default=None, description="GeoJSON FeatureCollection replacing the bundled countries"
    )

    # API
    allowed_origins: List[str] = Field(default=["*"], description="CORS origins")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="json or console")

    class Config:
        env_file = ".env"
        env_prefix = "BATTLESPACE_"


settings = Settings()
