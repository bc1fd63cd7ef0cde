"""CLI: poll the timeline API and print each newly published snapshot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
import uuid
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

from .config import PollerConfig, load_settings
from .exceptions import ConfigError, JournalError
from .journal import JournalWriter
from .log_setup import setup_logger
from .weather.cache import SnapshotCache
from .weather.models import WeatherSnapshot
from .weather.poller import PollerStats, WeatherPoller
from .weather.visual_crossing import VisualCrossingProvider


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse poller CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Poll the Visual Crossing timeline API and print the latest snapshot."
    )
    parser.add_argument("--lat", type=float, default=None, help="Latitude override.")
    parser.add_argument("--lon", type=float, default=None, help="Longitude override.")
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between requests (minimum 9).",
    )
    parser.add_argument(
        "--unit-group",
        choices=["metric", "us", "uk", "base"],
        default=None,
        help="Provider unit system.",
    )
    parser.add_argument(
        "--cycles",
        type=int,
        default=None,
        help="Stop after this many poll cycles (default: run until interrupted).",
    )
    parser.add_argument(
        "--max-days",
        type=int,
        default=3,
        help="Number of day summaries to print per snapshot.",
    )
    parser.add_argument(
        "--refresh",
        type=float,
        default=1.0,
        help="Seconds between cache reads by the display task.",
    )
    return parser.parse_args(argv)


def _fmt(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, (set, frozenset)):
        return ", ".join(sorted(value)) or "-"
    return str(value)


def _print_snapshot_summary(console: Console, snapshot: WeatherSnapshot, max_days: int) -> None:
    location = snapshot.resolved_address or snapshot.address or "unknown"
    console.print(
        f"Location={location} tz={snapshot.timezone or '-'} "
        f"days={len(snapshot.days)} stations={len(snapshot.stations)} "
        f"alerts={len(snapshot.alerts)}"
    )

    current = snapshot.current_conditions
    if current is not None:
        table = Table(title="Current Conditions")
        table.add_column("Time")
        table.add_column("Temp")
        table.add_column("Cloud %")
        table.add_column("Wind")
        table.add_column("Precip")
        table.add_column("Precip %")
        table.add_column("Type")
        table.add_column("Moon")
        table.add_column("Conditions", overflow="fold")
        table.add_row(
            _fmt(current.datetime_text),
            _fmt(current.temp),
            _fmt(current.cloud_cover),
            f"{_fmt(current.wind_speed)} @ {_fmt(current.wind_dir)}",
            _fmt(current.precip),
            _fmt(current.precip_prob),
            _fmt(current.precip_type),
            _fmt(current.moon_phase),
            _fmt(current.conditions),
        )
        console.print(table)

    if not snapshot.days:
        console.print("No day summaries in snapshot.")
        return

    days = Table(title="Daily Summaries")
    days.add_column("Date")
    days.add_column("Min")
    days.add_column("Max")
    days.add_column("Precip %")
    days.add_column("Wind")
    days.add_column("Hours")
    days.add_column("Description", overflow="fold")
    for day in snapshot.days[:max_days]:
        days.add_row(
            _fmt(day.datetime_text),
            _fmt(day.temp_min),
            _fmt(day.temp_max),
            _fmt(day.precip_prob),
            _fmt(day.wind_speed),
            str(len(day.hours)),
            _fmt(day.description or day.conditions),
        )
    console.print(days)


class SnapshotPrinter:
    """Cache reader that prints a snapshot once per published sequence."""

    def __init__(self, cache: SnapshotCache, console: Console, max_days: int) -> None:
        self.cache = cache
        self.console = console
        self.max_days = max_days
        self.last_sequence: int | None = None

    def print_if_new(self) -> bool:
        entry = self.cache.entry()
        if entry is None or entry.sequence == self.last_sequence:
            return False
        self.last_sequence = entry.sequence
        self.console.rule(f"Snapshot #{entry.sequence} published {entry.published_at:%H:%M:%S} UTC")
        _print_snapshot_summary(self.console, entry.snapshot, self.max_days)
        return True

    async def watch(self, refresh_seconds: float) -> None:
        while True:
            self.print_if_new()
            await asyncio.sleep(refresh_seconds)


def _install_signal_handlers(poller: WeatherPoller) -> None:
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, poller.stop)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support signal handlers.
            return


async def _run(
    config: PollerConfig,
    cache: SnapshotCache,
    printer: SnapshotPrinter,
    args: argparse.Namespace,
    journal: JournalWriter,
    journal_raw_bodies: bool,
    logger: logging.Logger,
) -> PollerStats:
    async with VisualCrossingProvider(config=config, logger=logger) as provider:
        poller = WeatherPoller(
            config=config,
            provider=provider,
            cache=cache,
            logger=logger,
            journal=journal,
            journal_raw_bodies=journal_raw_bodies,
        )
        _install_signal_handlers(poller)
        watcher = asyncio.create_task(printer.watch(args.refresh))
        try:
            stats = await poller.run(max_cycles=args.cycles)
        finally:
            watcher.cancel()
            try:
                await watcher
            except asyncio.CancelledError:
                pass
        printer.print_if_new()
        return stats


def main(argv: Sequence[str] | None = None) -> int:
    """Run the polling loop until interrupted or the cycle limit is reached."""
    args = parse_args(argv)
    session_id = uuid.uuid4().hex[:12]
    logger = setup_logger(session_id=session_id)
    console = Console()

    try:
        if args.cycles is not None and args.cycles <= 0:
            raise ConfigError("--cycles must be > 0 when provided.")
        if args.max_days <= 0:
            raise ConfigError("--max-days must be > 0.")
        if args.refresh <= 0:
            raise ConfigError("--refresh must be > 0.")
        settings = load_settings()
        config = settings.poller_config(
            latitude=args.lat,
            longitude=args.lon,
            poll_interval_seconds=args.interval,
            unit_group=args.unit_group,
        )
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger.setLevel(settings.log_level)

    try:
        journal = JournalWriter(
            journal_dir=settings.journal_dir,
            raw_payload_dir=settings.weather_raw_payload_dir,
            session_id=session_id,
        )
    except JournalError as exc:
        logger.error("Failed to initialize journal: %s", exc)
        return 3

    cache = SnapshotCache()
    printer = SnapshotPrinter(cache=cache, console=console, max_days=args.max_days)
    stats = asyncio.run(
        _run(
            config=config,
            cache=cache,
            printer=printer,
            args=args,
            journal=journal,
            journal_raw_bodies=settings.weather_journal_raw_payloads,
            logger=logger,
        )
    )

    console.print(
        f"Cycles={stats.cycles} published={stats.successes} "
        f"transport_errors={stats.transport_errors} decode_errors={stats.decode_errors}"
    )
    if cache.current() is None:
        logger.error("No snapshot was published during this session.")
        return 4
    return 0


if __name__ == "__main__":
    sys.exit(main())
