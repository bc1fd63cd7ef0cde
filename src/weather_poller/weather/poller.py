"""Repeating fetch loop that publishes decoded snapshots into a cache."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any, Literal

from ..config import PollerConfig
from ..exceptions import DecodeError, JournalError, TransportError
from ..journal import JournalWriter
from .base import WeatherProvider
from .cache import SnapshotCache

CycleStatus = Literal["success", "transport_error", "decode_error", "unexpected_error"]


@dataclass(frozen=True, slots=True)
class PollCycleResult:
    """Outcome of one fetch-and-publish attempt."""

    cycle: int
    status: CycleStatus
    started_at: datetime
    finished_at: datetime
    error: str | None = None
    status_code: int | None = None
    sequence: int | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


@dataclass(slots=True)
class PollerStats:
    """Running counters for diagnostics."""

    cycles: int = 0
    successes: int = 0
    transport_errors: int = 0
    decode_errors: int = 0
    unexpected_errors: int = 0
    consecutive_failures: int = 0
    last_success_at: datetime | None = None
    last_error: str | None = None


class WeatherPoller:
    """Drive a provider on a fixed cadence and publish successes to a cache.

    Per-cycle failures are logged and counted and never leave this class;
    readers of the cache keep seeing the last good snapshot. ``stop()`` ends
    the loop at the next suspension point, and cancelling the task running
    ``run()`` abandons an in-flight request without publishing anything.
    """

    def __init__(
        self,
        config: PollerConfig,
        provider: WeatherProvider,
        cache: SnapshotCache,
        logger: logging.Logger,
        journal: JournalWriter | None = None,
        journal_raw_bodies: bool = True,
    ) -> None:
        self.config = config
        self.provider = provider
        self.cache = cache
        self.logger = logger
        self.journal = journal
        self.journal_raw_bodies = journal_raw_bodies
        self._stats = PollerStats()
        self._stop = asyncio.Event()
        self._running = False

    @property
    def stats(self) -> PollerStats:
        return replace(self._stats)

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Request loop shutdown at the next suspension point."""
        self._stop.set()

    async def run(self, *, max_cycles: int | None = None) -> PollerStats:
        """Poll until stopped, cancelled, or ``max_cycles`` cycles have run."""
        if max_cycles is not None and max_cycles <= 0:
            raise ValueError("max_cycles must be > 0 when provided.")
        if self._running:
            raise RuntimeError("Poller is already running.")

        self._running = True
        self.logger.info(
            "Polling (%s, %s) every %gs with unitGroup=%s",
            self.config.latitude,
            self.config.longitude,
            self.config.poll_interval_seconds,
            self.config.unit_group,
        )
        self._journal_event("poller_startup", self.config.safe_summary())
        completed = 0
        try:
            while not self._stop.is_set():
                await self.run_once()
                completed += 1
                if max_cycles is not None and completed >= max_cycles:
                    break
                await self._wait_interval()
        finally:
            self._running = False
            self._stop.clear()
            self.logger.info(
                "Poller stopped after %d cycles (%d published)",
                self._stats.cycles, self._stats.successes,
            )
            self._journal_event(
                "poller_shutdown",
                {
                    "cycles": self._stats.cycles,
                    "successes": self._stats.successes,
                    "transport_errors": self._stats.transport_errors,
                    "decode_errors": self._stats.decode_errors,
                    "unexpected_errors": self._stats.unexpected_errors,
                },
            )
        return self.stats

    async def run_once(self) -> PollCycleResult:
        """Execute a single poll cycle and return its outcome."""
        cycle = self._stats.cycles + 1
        started_at = datetime.now(UTC)
        try:
            snapshot = await self.provider.fetch_snapshot()
        except TransportError as exc:
            self.logger.error(
                "Poll cycle %d transport failure (%s): %s",
                cycle, exc.category, exc,
                extra={"cycle": cycle, "status": "transport_error", "status_code": exc.status_code},
            )
            result = self._failure(cycle, "transport_error", started_at, exc, exc.status_code)
        except DecodeError as exc:
            self.logger.error(
                "Poll cycle %d decode failure: %s [%s]", cycle, exc, "; ".join(exc.details),
                extra={"cycle": cycle, "status": "decode_error"},
            )
            result = self._failure(cycle, "decode_error", started_at, exc)
            self._journal_raw_body(cycle, exc)
        except Exception as exc:  # noqa: BLE001
            self.logger.exception(
                "Poll cycle %d failed unexpectedly: %s",
                cycle, exc,
                extra={"cycle": cycle, "status": "unexpected_error"},
            )
            result = self._failure(cycle, "unexpected_error", started_at, exc)
        else:
            entry = self.cache.publish(snapshot)
            current = snapshot.current_conditions
            self.logger.info(
                "Poll cycle %d published snapshot #%d for %s (wind speed %s)",
                cycle,
                entry.sequence,
                snapshot.resolved_address or "unknown location",
                current.wind_speed if current is not None else None,
                extra={"cycle": cycle, "status": "success", "sequence": entry.sequence},
            )
            result = PollCycleResult(
                cycle=cycle,
                status="success",
                started_at=started_at,
                finished_at=entry.published_at,
                sequence=entry.sequence,
            )

        self._record(result)
        return result

    async def _wait_interval(self) -> None:
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=self.config.poll_interval_seconds)
        except TimeoutError:
            return

    def _failure(
        self,
        cycle: int,
        status: CycleStatus,
        started_at: datetime,
        exc: Exception,
        status_code: int | None = None,
    ) -> PollCycleResult:
        return PollCycleResult(
            cycle=cycle,
            status=status,
            started_at=started_at,
            finished_at=datetime.now(UTC),
            error=str(exc),
            status_code=status_code,
        )

    def _record(self, result: PollCycleResult) -> None:
        stats = self._stats
        stats.cycles = result.cycle
        if result.ok:
            stats.successes += 1
            stats.consecutive_failures = 0
            stats.last_success_at = result.finished_at
        else:
            stats.consecutive_failures += 1
            stats.last_error = result.error
            if result.status == "transport_error":
                stats.transport_errors += 1
            elif result.status == "decode_error":
                stats.decode_errors += 1
            else:
                stats.unexpected_errors += 1
            if stats.consecutive_failures > 1:
                entry = self.cache.entry()
                self.logger.warning(
                    "%d consecutive poll failures; serving snapshot #%s",
                    stats.consecutive_failures,
                    entry.sequence if entry is not None else "none",
                )

        self._journal_event(
            "poll_cycle_success" if result.ok else "poll_cycle_failure",
            {
                "cycle": result.cycle,
                "status": result.status,
                "duration_seconds": result.duration_seconds,
                "sequence": result.sequence,
                "status_code": result.status_code,
                "error": result.error,
            },
        )

    def _journal_raw_body(self, cycle: int, exc: DecodeError) -> None:
        if self.journal is None or not self.journal_raw_bodies or exc.body is None:
            return
        try:
            path = self.journal.write_raw_body(f"timeline_cycle_{cycle}", exc.body)
        except JournalError as journal_exc:
            self.logger.error("Failed to write undecodable response body: %s", journal_exc)
            return
        self._journal_event(
            "poll_cycle_raw_body",
            {"cycle": cycle, "path": str(path), "details": exc.details},
        )

    def _journal_event(self, event_type: str, payload: dict[str, Any]) -> None:
        if self.journal is None:
            return
        try:
            self.journal.write_event(event_type, payload=payload)
        except JournalError as exc:
            self.logger.error("Failed to write %s event: %s", event_type, exc)
