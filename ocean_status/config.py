"""Application configuration pulled from environment variables via pydantic."""
from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the ocean status service."""
    model_config = SettingsConfigDict(env_prefix="OCEAN_", extra="ignore", populate_by_name=True)

    # Upstream credentials; absent keys switch the providers to mock data.
    openweather_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OCEAN_OPENWEATHER_API_KEY", "OPENWEATHER_API_KEY"),
    )
    worldtides_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OCEAN_WORLDTIDES_API_KEY", "WORLDTIDES_API_KEY"),
    )
    weather_timeout_seconds: float = 15.0
    tides_timeout_seconds: float = 15.0
    tide_forecast_days: int = 3
    http_cache_seconds: int = 300
    http_retries: int = 2
    log_level: str = "INFO"
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("openweather_api_key", "worldtides_api_key", mode="after")
    @classmethod
    def blank_key_is_none(cls, v: str | None) -> str | None:
        """Treat empty or whitespace-only keys as missing."""
        if v is None or not v.strip():
            return None
        return v.strip()


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'openweather_api_key', 'worldtides_api_key'})}")
