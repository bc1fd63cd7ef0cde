"""Single-writer holder for the latest published weather snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from .models import WeatherSnapshot


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A published snapshot with its publication metadata."""

    snapshot: WeatherSnapshot
    published_at: datetime
    sequence: int


class SnapshotCache:
    """Hold the most recent successful snapshot for any number of readers.

    ``publish`` builds a complete ``CacheEntry`` first and then swaps one
    attribute reference, so a reader sees either the previous entry or the
    new one and never needs a lock. Only the owning poller should publish.
    """

    def __init__(self) -> None:
        self._entry: CacheEntry | None = None

    def publish(self, snapshot: WeatherSnapshot, *, published_at: datetime | None = None) -> CacheEntry:
        """Replace the current snapshot; last write wins."""
        previous = self._entry
        entry = CacheEntry(
            snapshot=snapshot,
            published_at=published_at or datetime.now(UTC),
            sequence=(previous.sequence + 1) if previous is not None else 1,
        )
        self._entry = entry
        return entry

    def current(self) -> WeatherSnapshot | None:
        """Return the latest snapshot, or None if nothing was published yet."""
        entry = self._entry
        return entry.snapshot if entry is not None else None

    def entry(self) -> CacheEntry | None:
        """Return the latest snapshot together with its sequence and timestamp."""
        return self._entry

    def age_seconds(self, now: datetime | None = None) -> float | None:
        entry = self._entry
        if entry is None:
            return None
        reference = now or datetime.now(UTC)
        return (reference - entry.published_at).total_seconds()
