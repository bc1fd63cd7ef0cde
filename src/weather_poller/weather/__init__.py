"""Visual Crossing timeline polling, decoding and snapshot caching."""

from .base import WeatherProvider
from .cache import CacheEntry, SnapshotCache
from .models import (
    CurrentConditions,
    DaySummary,
    HourSummary,
    StationInfo,
    WeatherAlert,
    WeatherSnapshot,
)
from .poller import PollCycleResult, PollerStats, WeatherPoller
from .visual_crossing import VisualCrossingProvider

__all__ = [
    "CacheEntry",
    "CurrentConditions",
    "DaySummary",
    "HourSummary",
    "PollCycleResult",
    "PollerStats",
    "SnapshotCache",
    "StationInfo",
    "VisualCrossingProvider",
    "WeatherAlert",
    "WeatherPoller",
    "WeatherProvider",
    "WeatherSnapshot",
]
