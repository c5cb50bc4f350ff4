# core/config.py

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CompartmapConfig(BaseSettings):
    """Configuration for the COMPARTMAP spatial index."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="COMPARTMAP_")

    # Index
    compartment_size: float = 1.5  # Edge length of each cubic compartment

    # Logging
    log_level: str = "INFO"
    trace_queries: bool = False  # Log every compartment visited by a range query

    @field_validator("compartment_size")
    @classmethod
    def _absolute_size(cls, value: float) -> float:
        return abs(value)


# Global config instance
config = CompartmapConfig()
