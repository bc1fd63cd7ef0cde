"""Typed models for Visual Crossing timeline snapshots.

Attribute names are snake_case; every field whose JSON key differs carries the
provider key as its alias, so ``model_validate(payload)`` reads the raw
response and ``model_dump(by_alias=True)`` writes it back. Measurements that
the provider omits stay ``None`` and are never replaced with zero.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..exceptions import MissingTimestampError


def _epoch_to_utc(value: int | None, field_name: str) -> datetime:
    if value is None:
        raise MissingTimestampError(f"'{field_name}' was not reported by the provider.")
    return datetime.fromtimestamp(value, tz=UTC)


class _WeatherModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class _ObservationFields(_WeatherModel):
    """Measurement fields shared by current, daily and hourly records."""

    datetime_text: str | None = Field(default=None, alias="datetime")
    datetime_epoch: int | None = Field(default=None, alias="datetimeEpoch")
    temp: float | None = None
    feels_like: float | None = Field(default=None, alias="feelslike")
    humidity: float | None = None
    dew: float | None = None
    precip: float | None = None
    precip_prob: float | None = Field(default=None, alias="precipprob")
    precip_type: frozenset[str] | None = Field(default=None, alias="preciptype")
    snow: float | None = None
    snow_depth: float | None = Field(default=None, alias="snowdepth")
    wind_gust: float | None = Field(default=None, alias="windgust")
    wind_speed: float | None = Field(default=None, alias="windspeed")
    wind_dir: float | None = Field(default=None, alias="winddir")
    pressure: float | None = None
    visibility: float | None = None
    cloud_cover: float | None = Field(default=None, alias="cloudcover")
    solar_radiation: float | None = Field(default=None, alias="solarradiation")
    solar_energy: float | None = Field(default=None, alias="solarenergy")
    uv_index: float | None = Field(default=None, alias="uvindex")
    conditions: str | None = None
    icon: str | None = None
    stations: tuple[str, ...] | None = None
    source: str | None = None

    @field_validator("precip_type", mode="before")
    @classmethod
    def single_label_to_set(cls, value: Any) -> Any:
        # Current conditions sometimes report a bare label instead of a list.
        if isinstance(value, str):
            return frozenset({value}) if value.strip() else None
        return value

    def observed_at(self) -> datetime:
        """Return the observation time as an aware UTC datetime."""
        return _epoch_to_utc(self.datetime_epoch, "datetimeEpoch")


class _AstronomyFields(_WeatherModel):
    """Sun and moon fields reported for days and current conditions."""

    sunrise: str | None = None
    sunrise_epoch: int | None = Field(default=None, alias="sunriseEpoch")
    sunset: str | None = None
    sunset_epoch: int | None = Field(default=None, alias="sunsetEpoch")
    moon_phase: float | None = Field(default=None, alias="moonphase", ge=0.0, le=1.0)

    def sunrise_at(self) -> datetime:
        return _epoch_to_utc(self.sunrise_epoch, "sunriseEpoch")

    def sunset_at(self) -> datetime:
        return _epoch_to_utc(self.sunset_epoch, "sunsetEpoch")


class HourSummary(_ObservationFields):
    """One hour within a day summary."""

    severe_risk: float | None = Field(default=None, alias="severerisk")


class CurrentConditions(_ObservationFields, _AstronomyFields):
    """Point-in-time conditions at the query location."""

    def seconds_until_sunset(self, now: datetime | None = None) -> float:
        """Seconds from ``now`` until sunset; negative once the sun has set."""
        reference = now or datetime.now(UTC)
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=UTC)
        return (self.sunset_at() - reference).total_seconds()


class DaySummary(_ObservationFields, _AstronomyFields):
    """One calendar day with its hourly breakdown."""

    temp_max: float | None = Field(default=None, alias="tempmax")
    temp_min: float | None = Field(default=None, alias="tempmin")
    feels_like_max: float | None = Field(default=None, alias="feelslikemax")
    feels_like_min: float | None = Field(default=None, alias="feelslikemin")
    precip_cover: float | None = Field(default=None, alias="precipcover")
    severe_risk: float | None = Field(default=None, alias="severerisk")
    description: str | None = None
    hours: tuple[HourSummary, ...] = ()

    @field_validator("hours", mode="before")
    @classmethod
    def null_hours_to_empty(cls, value: Any) -> Any:
        return () if value is None else value


class StationInfo(_WeatherModel):
    """Metadata for one reporting station."""

    id: str | None = None
    name: str | None = None
    distance: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    use_count: float | None = Field(default=None, alias="useCount")
    quality: float | None = None
    contribution: float | None = None


class WeatherAlert(_WeatherModel):
    """Severe-weather alert issued for the query location."""

    event: str | None = None
    headline: str | None = None
    description: str | None = None
    onset: str | None = None
    onset_epoch: int | None = Field(default=None, alias="onsetEpoch")
    ends: str | None = None
    ends_epoch: int | None = Field(default=None, alias="endsEpoch")
    id: str | None = None
    language: str | None = None
    link: str | None = None


class WeatherSnapshot(_WeatherModel):
    """One complete timeline response for a single query."""

    query_cost: float | None = Field(default=None, alias="queryCost")
    latitude: float | None = None
    longitude: float | None = None
    resolved_address: str | None = Field(default=None, alias="resolvedAddress")
    address: str | None = None
    timezone: str | None = None
    tz_offset: float | None = Field(default=None, alias="tzoffset")
    description: str | None = None
    days: tuple[DaySummary, ...] = ()
    alerts: tuple[WeatherAlert, ...] = ()
    stations: Mapping[str, StationInfo] = Field(default_factory=dict, validate_default=True)
    current_conditions: CurrentConditions | None = Field(
        default=None, alias="currentConditions"
    )

    @field_validator("days", "alerts", mode="before")
    @classmethod
    def null_sequence_to_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("stations", mode="before")
    @classmethod
    def null_stations_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("stations")
    @classmethod
    def freeze_stations(cls, value: Mapping[str, StationInfo]) -> Mapping[str, StationInfo]:
        return MappingProxyType(dict(value))

    @field_serializer("stations")
    def serialize_stations(self, value: Mapping[str, StationInfo]) -> dict[str, StationInfo]:
        return dict(value)

    def __hash__(self) -> int:
        values = {**self.__dict__, "stations": frozenset(self.stations.items())}
        return hash((self.__class__, tuple(values.items())))

    def to_payload(self) -> dict[str, Any]:
        """Serialize back to the provider's JSON shape."""
        return self.model_dump(mode="json", by_alias=True)
