"""Provider-agnostic weather interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import WeatherSnapshot


class WeatherProvider(ABC):
    """Base contract for providers driven by the polling loop."""

    @abstractmethod
    async def fetch_snapshot(self) -> WeatherSnapshot:
        """Fetch and decode one snapshot.

        Raises TransportError when the request fails and DecodeError when the
        body cannot be turned into a snapshot.
        """

    @abstractmethod
    async def aclose(self) -> None:
        """Release provider resources."""
