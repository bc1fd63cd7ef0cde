"""Typed configuration for the weather poller."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

DEFAULT_BASE_URL = (
    "https://weather.visualcrossing.com/VisualCrossingWebServices/rest/services/timeline/"
)
MIN_POLL_INTERVAL_SECONDS = 9.0

UnitGroup = Literal["metric", "us", "uk", "base"]
ContentType = Literal["json"]


class PollerConfig(BaseModel):
    """Immutable per-session poller configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    poll_interval_seconds: float = Field(default=10.0, ge=MIN_POLL_INTERVAL_SECONDS)
    unit_group: UnitGroup = "metric"
    api_key: str = Field(min_length=1, repr=False)
    content_type: ContentType = "json"
    base_url: str = DEFAULT_BASE_URL
    request_timeout_seconds: float = Field(default=15.0, gt=0)

    @field_validator("api_key")
    @classmethod
    def api_key_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("api_key must not be blank.")
        return value.strip()

    @field_validator("base_url")
    @classmethod
    def base_url_is_http_prefix(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL.")
        if not value.endswith("/"):
            raise ValueError("base_url must end with '/'.")
        return value

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for journaling (no credentials)."""
        return self.model_dump(exclude={"api_key"})


def build_poller_config(**values: Any) -> PollerConfig:
    """Validate poller configuration, raising ConfigError on failure."""
    try:
        return PollerConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid poller configuration: {exc}") from exc


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    weather_lat: float = Field(default=51.5114, alias="WEATHER_LAT")
    weather_lon: float = Field(default=0.2376, alias="WEATHER_LON")
    weather_poll_interval_seconds: float = Field(
        default=10.0, alias="WEATHER_POLL_INTERVAL_SECONDS"
    )
    weather_unit_group: UnitGroup = Field(default="metric", alias="WEATHER_UNIT_GROUP")
    weather_content_type: ContentType = Field(default="json", alias="WEATHER_CONTENT_TYPE")
    visual_crossing_api_key: str | None = Field(
        default=None, alias="VISUAL_CROSSING_API_KEY", repr=False
    )
    visual_crossing_base_url: str = Field(
        default=DEFAULT_BASE_URL, alias="VISUAL_CROSSING_BASE_URL"
    )
    weather_timeout_seconds: float = Field(default=15.0, alias="WEATHER_TIMEOUT_SECONDS")

    journal_dir: Path = Field(default=Path("./data/journal"), alias="JOURNAL_DIR")
    weather_raw_payload_dir: Path = Field(
        default=Path("./data/raw/weather"),
        alias="WEATHER_RAW_PAYLOAD_DIR",
    )
    weather_journal_raw_payloads: bool = Field(default=True, alias="WEATHER_JOURNAL_RAW_PAYLOADS")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    @field_validator("visual_crossing_api_key", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as an unset credential."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @model_validator(mode="after")
    def validate_ranges(self) -> Settings:
        """Validate numeric settings that pydantic field types cannot express."""
        if not self.visual_crossing_api_key:
            raise ValueError("VISUAL_CROSSING_API_KEY is required.")
        if not (-90 <= self.weather_lat <= 90):
            raise ValueError("WEATHER_LAT must be between -90 and 90.")
        if not (-180 <= self.weather_lon <= 180):
            raise ValueError("WEATHER_LON must be between -180 and 180.")
        if self.weather_poll_interval_seconds < MIN_POLL_INTERVAL_SECONDS:
            raise ValueError(
                f"WEATHER_POLL_INTERVAL_SECONDS must be >= {MIN_POLL_INTERVAL_SECONDS:g}."
            )
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")
        return self

    def poller_config(self, **overrides: Any) -> PollerConfig:
        """Build the poller configuration, applying CLI overrides that are not None."""
        values: dict[str, Any] = {
            "latitude": self.weather_lat,
            "longitude": self.weather_lon,
            "poll_interval_seconds": self.weather_poll_interval_seconds,
            "unit_group": self.weather_unit_group,
            "api_key": self.visual_crossing_api_key,
            "content_type": self.weather_content_type,
            "base_url": self.visual_crossing_base_url,
            "request_timeout_seconds": self.weather_timeout_seconds,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return build_poller_config(**values)

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for journaling (no credentials)."""
        return {
            "lat": self.weather_lat,
            "lon": self.weather_lon,
            "poll_interval_seconds": self.weather_poll_interval_seconds,
            "unit_group": self.weather_unit_group,
            "content_type": self.weather_content_type,
            "base_url": self.visual_crossing_base_url,
            "timeout_seconds": self.weather_timeout_seconds,
            "raw_journaling": self.weather_journal_raw_payloads,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        settings = Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc

    settings.journal_dir.mkdir(parents=True, exist_ok=True)
    settings.weather_raw_payload_dir.mkdir(parents=True, exist_ok=True)
    return settings
