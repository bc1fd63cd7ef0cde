"""Shared timeline payload builders and config fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from weather_poller.config import PollerConfig, build_poller_config

LONDON_LAT = 51.5114
LONDON_LON = 0.2376
TEST_API_KEY = "test-key-123"

DAY_EPOCHS = [1717455600, 1717542000]

# Pass as a current-conditions override to drop the key from the payload.
ABSENT: Any = object()


def make_hour(day_epoch: int, hour: int) -> dict[str, Any]:
    return {
        "datetime": f"{hour:02d}:00:00",
        "datetimeEpoch": day_epoch + hour * 3600,
        "temp": 12.0 + hour * 0.25,
        "feelslike": 11.5 + hour * 0.25,
        "humidity": 80.1,
        "dew": 8.9,
        "precip": 0.0,
        "precipprob": 5.0,
        "snow": 0.0,
        "snowdepth": 0.0,
        "preciptype": None,
        "windgust": 22.3,
        "windspeed": 11.2,
        "winddir": 240.0,
        "pressure": 1014.0,
        "visibility": 24.1,
        "cloudcover": 63.5,
        "solarradiation": 0.0 if hour < 5 else 110.0,
        "solarenergy": 0.0 if hour < 5 else 0.4,
        "uvindex": 0.0 if hour < 5 else 1.0,
        "severerisk": 10.0,
        "conditions": "Partially cloudy",
        "icon": "partly-cloudy-night" if hour < 5 else "partly-cloudy-day",
        "stations": ["EGLC", "EGLL"],
        "source": "obs",
    }


def make_day(date: str, day_epoch: int) -> dict[str, Any]:
    return {
        "datetime": date,
        "datetimeEpoch": day_epoch,
        "tempmax": 19.4,
        "tempmin": 10.2,
        "temp": 14.8,
        "feelslikemax": 19.4,
        "feelslikemin": 9.6,
        "feelslike": 14.6,
        "dew": 9.1,
        "humidity": 70.2,
        "precip": 0.3,
        "precipprob": 41.9,
        "precipcover": 4.17,
        "preciptype": ["rain"],
        "snow": 0.0,
        "snowdepth": 0.0,
        "windgust": 35.6,
        "windspeed": 18.4,
        "winddir": 251.3,
        "pressure": 1015.2,
        "cloudcover": 58.7,
        "visibility": 22.9,
        "solarradiation": 188.5,
        "solarenergy": 16.3,
        "uvindex": 6.0,
        "severerisk": 10.0,
        "sunrise": "04:45:31",
        "sunriseEpoch": day_epoch + 17131,
        "sunset": "21:10:02",
        "sunsetEpoch": day_epoch + 76202,
        "moonphase": 0.92,
        "conditions": "Rain, Partially cloudy",
        "description": "Partly cloudy throughout the day with early morning rain.",
        "icon": "rain",
        "stations": ["EGLC", "EGLL", "EGWU"],
        "source": "comb",
        "hours": [make_hour(day_epoch, hour) for hour in range(24)],
    }


def make_station(station_id: str, name: str, distance: float) -> dict[str, Any]:
    return {
        "distance": distance,
        "latitude": 51.5,
        "longitude": 0.05,
        "useCount": 0,
        "id": station_id,
        "name": name,
        "quality": 50,
        "contribution": 0.0,
    }


def timeline_payload(**current_overrides: Any) -> dict[str, Any]:
    """Build a two-day timeline response for the London test location."""
    current: dict[str, Any] = {
        "datetime": "13:45:00",
        "datetimeEpoch": DAY_EPOCHS[0] + 49500,
        "temp": 17.2,
        "feelslike": 17.2,
        "humidity": 61.3,
        "dew": 9.7,
        "precip": 0.0,
        "precipprob": 0.0,
        "snow": 0.0,
        "snowdepth": 0.0,
        "windgust": 29.5,
        "windspeed": 12.3,
        "winddir": 250.0,
        "pressure": 1015.0,
        "visibility": 10.0,
        "cloudcover": 75.0,
        "solarradiation": 321.0,
        "solarenergy": 1.2,
        "uvindex": 3.0,
        "conditions": "Partially cloudy",
        "icon": "partly-cloudy-day",
        "stations": ["EGLC", "D5621"],
        "source": "obs",
        "sunrise": "04:45:31",
        "sunriseEpoch": DAY_EPOCHS[0] + 17131,
        "sunset": "21:10:02",
        "sunsetEpoch": DAY_EPOCHS[0] + 76202,
        "moonphase": 0.92,
    }
    current.update(current_overrides)
    current = {key: value for key, value in current.items() if value is not ABSENT}
    return {
        "queryCost": 1,
        "latitude": LONDON_LAT,
        "longitude": LONDON_LON,
        "resolvedAddress": "51.5114,0.2376",
        "address": "51.5114,0.2376",
        "timezone": "Europe/London",
        "tzoffset": 1.0,
        "description": "Similar temperatures continuing with a chance of rain.",
        "days": [
            make_day("2024-06-04", DAY_EPOCHS[0]),
            make_day("2024-06-05", DAY_EPOCHS[1]),
        ],
        "alerts": [],
        "stations": {
            "EGLC": make_station("EGLC", "EGLC", 10432.0),
            "EGLL": make_station("EGLL", "EGLL", 37411.0),
            "D5621": make_station("D5621", "DW5621 Dartford GB", 6003.0),
        },
        "currentConditions": current,
    }


@pytest.fixture
def payload() -> dict[str, Any]:
    return timeline_payload()


@pytest.fixture
def poller_config() -> PollerConfig:
    return build_poller_config(
        latitude=LONDON_LAT,
        longitude=LONDON_LON,
        poll_interval_seconds=10,
        api_key=TEST_API_KEY,
    )
