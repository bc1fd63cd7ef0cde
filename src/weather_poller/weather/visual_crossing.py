"""Visual Crossing timeline API provider implementation."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import PollerConfig
from ..exceptions import DecodeError, TransportError
from ..redaction import sanitize_text
from .base import WeatherProvider
from .models import WeatherSnapshot

_MAX_REPORTED_ERRORS = 10


class VisualCrossingProvider(WeatherProvider):
    """Fetches timeline snapshots for a single fixed location."""

    provider_name = "visual_crossing"

    def __init__(
        self,
        config: PollerConfig,
        logger: logging.Logger,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.logger = logger
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.request_timeout_seconds)

    async def __aenter__(self) -> VisualCrossingProvider:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def build_url(self) -> str:
        """Interpolate the location and query parameters into the timeline URL."""
        location = f"{self.config.latitude},{self.config.longitude}"
        url = httpx.URL(
            f"{self.config.base_url}{location}",
            params={
                "unitGroup": self.config.unit_group,
                "key": self.config.api_key,
                "contentType": self.config.content_type,
            },
        )
        return str(url)

    async def fetch_snapshot(self) -> WeatherSnapshot:
        body = await self._request_text()
        return self.decode(body)

    async def _request_text(self) -> str:
        url = self.build_url()
        safe_url = sanitize_text(url)
        try:
            response = await self._client.get(
                url, headers={"Content-Type": "application/json"}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise TransportError(
                f"Timeline request failed with status {status} at {safe_url}: "
                f"{sanitize_text(exc.response.text[:300])}",
                category="http_status",
                status_code=status,
            ) from exc
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Timeline request timed out at {safe_url}: {type(exc).__name__}",
                category="timeout",
            ) from exc
        except httpx.ConnectError as exc:
            raise TransportError(
                f"Timeline connection failed at {safe_url}: {sanitize_text(str(exc))}",
                category="connect",
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Timeline request failed at {safe_url}: {sanitize_text(str(exc))}",
                category="request",
            ) from exc

        self.logger.debug(
            "Timeline response %d (%d bytes) from %s",
            response.status_code, len(response.content), safe_url,
        )
        return response.text

    @staticmethod
    def decode(body: str) -> WeatherSnapshot:
        """Decode a timeline response body into a snapshot."""
        try:
            return WeatherSnapshot.model_validate_json(body)
        except ValidationError as exc:
            errors = exc.errors()
            details = [
                f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
                for error in errors[:_MAX_REPORTED_ERRORS]
            ]
            if any(error["type"] == "json_invalid" for error in errors):
                raise DecodeError(
                    "Timeline response is not valid JSON.", details=details, body=body
                ) from exc
            raise DecodeError(
                f"Timeline response did not match the expected schema "
                f"({exc.error_count()} errors).",
                details=details,
                body=body,
            ) from exc
