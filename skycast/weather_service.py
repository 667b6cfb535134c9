# ABOUTME: Forecast fetcher that calls OpenWeather's current-weather and 3-hour forecast APIs.
# ABOUTME: Issues both requests concurrently; only the current-conditions leg can fail the fetch.

import asyncio
import logging

import httpx

from skycast.errors import AuthenticationFailed, CurrentConditionsFailed, UpstreamFailed
from skycast.models import CurrentConditions, FetchResult, ForecastSample, UnitSystem

logger = logging.getLogger(__name__)

CURRENT_PATH = "/data/2.5/weather"
FORECAST_PATH = "/data/2.5/forecast"


def is_success_status(cod) -> bool:
    """True when a payload's `cod` field means success.

    OpenWeather sends `cod` as 200 on one endpoint and "200" on the other, and
    sometimes omits it entirely.
    """
    if cod is None:
        return True
    if isinstance(cod, bool):
        return False
    if isinstance(cod, int):
        return cod == 200
    if isinstance(cod, str):
        return cod.strip() == "200"
    return False


class ForecastFetcher:
    """Fetches and parses current conditions plus forecast samples for a coordinate pair."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        base_url: str,
        forecast_sample_count: int = 40,
    ):
        self._client = client
        self._api_key = api_key
        self._base_url = base_url
        self._forecast_sample_count = forecast_sample_count

    async def fetch(self, latitude: float, longitude: float, units: UnitSystem) -> FetchResult:
        """Fetch both legs concurrently and merge them.

        Raises AuthenticationFailed or UpstreamFailed when current conditions are
        unavailable. A failed forecast leg yields an empty sample list.
        """
        params = {"lat": latitude, "lon": longitude, "appid": self._api_key, "units": units.value}
        current_data, forecast_data = await asyncio.gather(
            self._get_current(params),
            self._get_forecast({**params, "cnt": self._forecast_sample_count}),
        )

        try:
            current = parse_current(current_data)
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            raise UpstreamFailed(f"Malformed current weather response: {e}") from e

        coord = _as_dict(current_data.get("coord"))
        offset = _offset_seconds(current_data.get("timezone"))
        if offset is None:
            offset = _offset_seconds(_as_dict(forecast_data.get("city")).get("timezone"))

        try:
            return FetchResult(
                current=current,
                samples=parse_forecast_samples(forecast_data.get("list", [])),
                utc_offset_seconds=offset or 0,
                latitude=coord.get("lat", latitude),
                longitude=coord.get("lon", longitude),
            )
        except ValueError as e:
            raise UpstreamFailed(f"Malformed current weather response: {e}") from e

    async def _get_current(self, params: dict) -> dict:
        try:
            resp = await self._client.get(self._base_url + CURRENT_PATH, params=params)
        except httpx.HTTPError as e:
            logger.exception("Current weather request failed")
            raise UpstreamFailed(f"Current weather request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            data = {}

        if not resp.is_success:
            message = data.get("message") or f"HTTP {resp.status_code}"
            if resp.status_code == 401:
                raise AuthenticationFailed(message)
            raise CurrentConditionsFailed(message)

        cod = data.get("cod")
        if not is_success_status(cod):
            message = data.get("message") or "Current weather request failed"
            if str(cod).strip() == "401":
                raise AuthenticationFailed(message)
            raise CurrentConditionsFailed(message)
        return data

    async def _get_forecast(self, params: dict) -> dict:
        """Return the forecast payload, or {} on any failure."""
        try:
            resp = await self._client.get(self._base_url + FORECAST_PATH, params=params)
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Forecast API warning: %s", e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Forecast API warning: unexpected payload type %s", type(data).__name__)
            return {}
        if not resp.is_success or not is_success_status(data.get("cod")):
            logger.warning("Forecast API warning: %s", data.get("message") or f"HTTP {resp.status_code}")
            return {}
        if not isinstance(data.get("list"), list):
            data["list"] = []
        return data


def parse_current(data: dict) -> CurrentConditions:
    """Flatten a current-weather payload into CurrentConditions."""
    main = data["main"]
    sys = _as_dict(data.get("sys"))
    wind = _as_dict(data.get("wind"))
    head = _head_condition(data)
    return CurrentConditions(
        observed_at=data["dt"],
        sunrise=sys.get("sunrise", 0),
        sunset=sys.get("sunset", 0),
        temperature=main["temp"],
        feels_like=main.get("feels_like", main["temp"]),
        humidity=main.get("humidity", 0),
        wind_speed=wind.get("speed", 0),
        weather_code=head.get("id", 0),
        weather_main=head.get("main", ""),
        description=head.get("description", ""),
    )


def parse_forecast_samples(items: list) -> list[ForecastSample]:
    """Parse forecast `list` entries, skipping any that are malformed."""
    result = []
    for item in items:
        try:
            main = item["main"]
            head = _head_condition(item)
            result.append(
                ForecastSample(
                    timestamp=item["dt"],
                    temperature=main["temp"],
                    temperature_min=main.get("temp_min", main["temp"]),
                    temperature_max=main.get("temp_max", main["temp"]),
                    weather_code=head.get("id", 0),
                    weather_main=head.get("main", ""),
                    description=head.get("description", ""),
                )
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed forecast sample: %s", e)
    return result


def _head_condition(data: dict) -> dict:
    """First entry of a payload's `weather` array, or {} if absent."""
    weather = data.get("weather")
    if isinstance(weather, list) and weather and isinstance(weather[0], dict):
        return weather[0]
    return {}


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _offset_seconds(value) -> int | None:
    """UTC offset in seconds, or None when missing or not a number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed timezone offset: %r", value)
        return None
