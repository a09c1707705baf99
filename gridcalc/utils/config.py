from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GRIDCALC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    # Decimal precision used when a config file does not set its own
    price_places: int = Field(default=8, ge=0)
    quantity_places: int = Field(default=8, ge=0)


def load_settings() -> Settings:
    return Settings()
