"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    fdc_api_key: str
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_default_data_types: str = "Foundation,Branded"
    fdc_page_size: int = 15
    notion_api_key: str
    notion_database_id: str | None = None
    notion_base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    default_density: float = Field(default=1.0, gt=0)
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_data_types(raw: str | None) -> list[str]:
    """Parse a comma-separated list of FDC data types."""
    if raw is None:
        return []
    return [chunk.strip() for chunk in raw.split(",") if chunk.strip()]
