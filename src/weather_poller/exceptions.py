"""Application exception classes."""

from __future__ import annotations

from typing import Literal

TransportCategory = Literal["connect", "timeout", "http_status", "request"]


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class JournalError(Exception):
    """Raised when writing to journal files fails."""


class WeatherPollerError(Exception):
    """Base class for failures of a single poll cycle."""


class TransportError(WeatherPollerError):
    """Raised when the provider request fails or returns a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        category: TransportCategory = "request",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.status_code = status_code


class DecodeError(WeatherPollerError):
    """Raised when a response body is not valid JSON or does not match the schema."""

    def __init__(
        self,
        message: str,
        *,
        details: list[str] | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.details = details or []
        self.body = body


class WeatherDataError(Exception):
    """Raised when consumers read a snapshot value that cannot be converted."""


class MissingTimestampError(WeatherDataError):
    """Raised when an epoch timestamp needed for conversion was not reported."""
