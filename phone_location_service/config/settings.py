"""Application configuration settings."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # API configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_debug: bool = Field(default=False)

    # Logging configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    # Simulated lookup behaviour
    lookup_delay_min_ms: int = Field(default=1000, ge=0, description="Lower bound of the artificial delay")
    lookup_delay_max_ms: int = Field(default=3000, ge=0, description="Upper bound (exclusive) of the artificial delay")
    location_jitter_degrees: float = Field(default=0.005, ge=0, description="Max coordinate offset per request")
    random_seed: Optional[int] = Field(default=None, description="Seed for reproducible demo output")

    # Presentation
    history_limit: int = Field(default=10, ge=1)


# Global settings instance
settings = Settings()
