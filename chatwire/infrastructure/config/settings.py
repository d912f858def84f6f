"""Configuration management for chatwire."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Request assembly settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHATWIRE_",
        env_file=".env",
        extra="ignore",
    )

    # Request Settings
    enable_reasoning: bool = Field(
        default=False, description="Send reasoning control fields with every request"
    )

    # Logging Settings
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    service_name: str = Field(default="chatwire")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
