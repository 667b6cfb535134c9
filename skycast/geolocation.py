# ABOUTME: Device-position providers and the Locator that bounds and caches position fixes.
# ABOUTME: Timeouts and provider errors both surface as GeolocationFailed.

import asyncio
import logging
import time
from typing import Callable, Protocol

import httpx

from skycast.errors import GeolocationFailed
from skycast.models import GeolocationOptions, Position

logger = logging.getLogger(__name__)

IP_GEOLOCATION_URL = "https://ipapi.co/json/"


class GeolocationProvider(Protocol):
    async def current_position(self, *, high_accuracy: bool) -> Position:
        """Return a fresh position fix or raise GeolocationFailed."""
        ...


class FixedGeolocationProvider:
    """A device that always reports the same coordinates."""

    def __init__(self, latitude: float, longitude: float, clock: Callable[[], float] = time.time):
        self._latitude = latitude
        self._longitude = longitude
        self._clock = clock

    async def current_position(self, *, high_accuracy: bool) -> Position:
        return Position(latitude=self._latitude, longitude=self._longitude, timestamp=self._clock())


class IpGeolocationProvider:
    """Approximates the device position from its public IP address.

    IP lookups have a single accuracy level, so `high_accuracy` is ignored.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str = IP_GEOLOCATION_URL,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._url = url
        self._clock = clock

    async def current_position(self, *, high_accuracy: bool) -> Position:
        try:
            resp = await self._client.get(self._url)
            resp.raise_for_status()
            data = resp.json()
            return Position(
                latitude=float(data["latitude"]),
                longitude=float(data["longitude"]),
                timestamp=self._clock(),
            )
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            raise GeolocationFailed(f"IP geolocation failed: {e}") from e


class Locator:
    """Obtains a position within a bounded wait, reusing a recent fix when allowed."""

    def __init__(
        self,
        provider: GeolocationProvider,
        options: GeolocationOptions | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._provider = provider
        self._options = options or GeolocationOptions()
        self._clock = clock
        self._last: Position | None = None

    @property
    def options(self) -> GeolocationOptions:
        return self._options

    async def locate(self) -> Position:
        """Return a position fix.

        A cached fix no older than `max_cached_position_age_ms` is returned
        without asking the provider. Raises GeolocationFailed on provider error
        or when the provider does not answer within `timeout_ms`.
        """
        if self._last is not None:
            age_ms = (self._clock() - self._last.timestamp) * 1000
            if age_ms <= self._options.max_cached_position_age_ms:
                logger.debug("Reusing cached position (%.0f ms old)", age_ms)
                return self._last

        try:
            position = await asyncio.wait_for(
                self._provider.current_position(high_accuracy=self._options.high_accuracy),
                timeout=self._options.timeout_ms / 1000,
            )
        except asyncio.TimeoutError as e:
            raise GeolocationFailed(f"Timed out after {self._options.timeout_ms} ms waiting for a position") from e

        self._last = position
        return position
