# ABOUTME: WeatherSession state machine that sequences geolocation, geocoding and fetching.
# ABOUTME: Owns the current snapshot and is the only place failures become user-facing messages.

import asyncio
import logging

from skycast.aggregation import aggregate_daily, promote_current
from skycast.classifier import classify
from skycast.config import DEFAULT_CITY
from skycast.errors import GeolocationFailed, InvalidInput, Unavailable, WeatherError
from skycast.formatting import build_location_label
from skycast.geocoding import Geocoder
from skycast.geolocation import Locator
from skycast.models import (
    BackgroundKind,
    FetchResult,
    ResolutionState,
    SearchMode,
    SessionView,
    UnitSystem,
    WeatherSnapshot,
)
from skycast.weather_service import ForecastFetcher

logger = logging.getLogger(__name__)

EMPTY_QUERY_MESSAGE = "Please enter a city name"
NO_RESULTS_MESSAGE = "No results for that city. Try another name."
SEARCH_CITY_SUGGESTION = "Please search for a city instead."
GEO_UNAVAILABLE_MESSAGE = "Geolocation is not available on this device."
GEO_DENIED_MESSAGE = "Location access was denied."
GEO_REFRESH_FAILED_MESSAGE = "Unable to refresh weather for your location."
UNIT_REFRESH_FAILED_MESSAGE = "Unable to refresh weather for the new unit."


def build_snapshot(
    result: FetchResult, units: UnitSystem, place: str, country_code: str | None = None
) -> WeatherSnapshot:
    """Merge a fetch result into a snapshot, promoting current conditions if there is no outlook."""
    daily = aggregate_daily(result.samples) or [promote_current(result.current)]
    return WeatherSnapshot(
        place=place,
        country_code=country_code,
        units=units,
        current=result.current,
        daily=daily,
        utc_offset_seconds=result.utc_offset_seconds,
        latitude=result.latitude,
        longitude=result.longitude,
    )


def validate_query(query: str) -> str:
    """Trimmed city query; raises InvalidInput when nothing is left."""
    text = query.strip()
    if not text:
        raise InvalidInput(EMPTY_QUERY_MESSAGE)
    return text


class WeatherSession:
    """Resolves weather for one place at a time on behalf of a presentation layer.

    Every intent that performs I/O takes a new request token. When an older
    intent finishes after a newer one started, its outcome is dropped, so the
    most recently requested resolution always wins.

    Failures never clear the last good snapshot; only a success replaces it.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        fetcher: ForecastFetcher,
        locator: Locator | None = None,
        default_city: str = DEFAULT_CITY,
        units: UnitSystem = UnitSystem.METRIC,
    ):
        self._geocoder = geocoder
        self._fetcher = fetcher
        self._locator = locator
        self._default_city = default_city
        self._units = units
        self._state = ResolutionState.IDLE
        self._snapshot: WeatherSnapshot | None = None
        self._error: str | None = None
        self._search_mode = SearchMode.CITY
        self._token = 0

    @property
    def state(self) -> ResolutionState:
        return self._state

    @property
    def snapshot(self) -> WeatherSnapshot | None:
        return self._snapshot

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def units(self) -> UnitSystem:
        return self._units

    @property
    def search_mode(self) -> SearchMode:
        return self._search_mode

    @property
    def background_kind(self) -> BackgroundKind:
        """Derived from the snapshot's lead condition; CLOUDY before the first success."""
        if self._snapshot is None:
            return BackgroundKind.CLOUDY
        current = self._snapshot.current
        return classify(current.weather_code, current.weather_main)

    def view(self) -> SessionView:
        return SessionView(
            state=self._state,
            snapshot=self._snapshot,
            error=self._error,
            units=self._units,
            search_mode=self._search_mode,
            background_kind=self.background_kind,
        )

    async def start(self) -> None:
        """App-start intent: weather for the device position, else for the default city."""
        token = self._begin()
        try:
            position = await self._require_locator().locate()
        except (Unavailable, GeolocationFailed) as e:
            logger.warning("Geolocation error: %s; loading default city %r", e, self._default_city)
            if self._is_current(token):
                await self._load_default_city(token)
            return

        try:
            snapshot = await self._resolve_position(position.latitude, position.longitude)
        except WeatherError as e:
            logger.error("Weather fetch error: %s", e)
            self._fail(token, f"{e} {SEARCH_CITY_SUGGESTION}")
            return
        self._succeed(token, snapshot, SearchMode.GEO)

    async def search_by_city(self, query: str) -> None:
        """Resolve weather for a place name. A blank name only sets an error message."""
        try:
            query = validate_query(query)
        except InvalidInput as e:
            self._error = str(e)
            return

        token = self._begin()
        units = self._units
        logger.info("Searching for city: %s", query)
        try:
            place = await self._geocoder.geocode_by_name(query)
            if place is None:
                self._fail(token, NO_RESULTS_MESSAGE)
                return
            logger.info("Found location: %s (%s, %s)", place.name, place.latitude, place.longitude)
            result = await self._fetcher.fetch(place.latitude, place.longitude, units)
        except WeatherError as e:
            logger.error("Search error: %s", e)
            self._fail(token, str(e))
            return
        self._succeed(token, build_snapshot(result, units, place.label, place.country), SearchMode.CITY)

    async def search_by_coordinates(self, latitude: float, longitude: float) -> None:
        """Resolve weather for a known coordinate pair, skipping forward geocoding."""
        token = self._begin()
        try:
            snapshot = await self._resolve_position(latitude, longitude)
        except WeatherError as e:
            logger.error("Coordinate lookup error: %s", e)
            self._fail(token, str(e))
            return
        self._succeed(token, snapshot, SearchMode.GEO)

    async def refresh_with_geo(self) -> None:
        """Re-run the device-position path on demand."""
        token = self._begin()
        try:
            locator = self._require_locator()
        except Unavailable as e:
            self._fail(token, str(e))
            return

        try:
            position = await locator.locate()
        except GeolocationFailed as e:
            logger.warning("Geolocation error: %s", e)
            self._fail(token, GEO_DENIED_MESSAGE)
            return

        try:
            snapshot = await self._resolve_position(position.latitude, position.longitude)
        except WeatherError as e:
            logger.error("Weather refresh error: %s", e)
            self._fail(token, GEO_REFRESH_FAILED_MESSAGE)
            return
        self._succeed(token, snapshot, SearchMode.GEO)

    async def change_unit_system(self, units: UnitSystem) -> None:
        """Switch units and re-fetch the current place. The old snapshot survives a failure."""
        if units == self._units:
            return
        self._units = units
        previous = self._snapshot
        if previous is None:
            return

        token = self._begin()
        try:
            result = await self._fetcher.fetch(previous.latitude, previous.longitude, units)
        except WeatherError as e:
            logger.error("Unit refresh error: %s", e)
            self._fail(token, UNIT_REFRESH_FAILED_MESSAGE)
            return
        self._succeed(token, build_snapshot(result, units, previous.place, previous.country_code), self._search_mode)

    async def _load_default_city(self, token: int) -> None:
        """Terminal fallback: settles in IDLE instead of ERROR when it cannot succeed."""
        units = self._units
        try:
            place = await self._geocoder.geocode_by_name(self._default_city)
            if place is None:
                logger.error("No default city found")
                self._settle_idle(token, None)
                return
            logger.info("Found default location: %s", place.name)
            result = await self._fetcher.fetch(place.latitude, place.longitude, units)
        except WeatherError as e:
            logger.error("Default city load error: %s", e)
            self._settle_idle(token, f"Unable to load default city: {e}")
            return
        self._succeed(token, build_snapshot(result, units, place.label, place.country), SearchMode.CITY)

    async def _resolve_position(self, latitude: float, longitude: float) -> WeatherSnapshot:
        """Fetch weather at a position while reverse geocoding it for the label."""
        units = self._units
        result, place = await asyncio.gather(
            self._fetcher.fetch(latitude, longitude, units),
            self._geocoder.reverse_geocode(latitude, longitude),
        )
        return build_snapshot(result, units, build_location_label(place), place.country if place else None)

    def _require_locator(self) -> Locator:
        if self._locator is None:
            raise Unavailable(GEO_UNAVAILABLE_MESSAGE)
        return self._locator

    def _begin(self) -> int:
        self._token += 1
        self._state = ResolutionState.LOADING
        self._error = None
        return self._token

    def _is_current(self, token: int) -> bool:
        return token == self._token

    def _succeed(self, token: int, snapshot: WeatherSnapshot, mode: SearchMode) -> None:
        if not self._is_current(token):
            logger.debug("Discarding stale result for request %d", token)
            return
        self._snapshot = snapshot
        self._search_mode = mode
        self._error = None
        self._state = ResolutionState.SUCCESS

    def _fail(self, token: int, message: str) -> None:
        if not self._is_current(token):
            logger.debug("Discarding stale failure for request %d", token)
            return
        self._error = message
        self._state = ResolutionState.ERROR

    def _settle_idle(self, token: int, message: str | None) -> None:
        if not self._is_current(token):
            return
        self._error = message
        self._state = ResolutionState.IDLE
