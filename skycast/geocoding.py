# ABOUTME: Geocoder that resolves place names and coordinates via OpenWeather's geo API.
# ABOUTME: Forward lookups raise structured errors; reverse lookups degrade to None.

import logging

import httpx

from skycast.errors import AuthenticationFailed, GeocodingFailed, UpstreamFailed
from skycast.models import PlaceRecord

logger = logging.getLogger(__name__)

DIRECT_PATH = "/geo/1.0/direct"
REVERSE_PATH = "/geo/1.0/reverse"


class Geocoder:
    """Resolves free-text place names and coordinate pairs to PlaceRecords."""

    def __init__(self, client: httpx.AsyncClient, api_key: str, base_url: str):
        self._client = client
        self._api_key = api_key
        self._base_url = base_url

    async def geocode_by_name(self, query: str) -> PlaceRecord | None:
        """Look up the best match for a place name. Returns None when nothing matches."""
        try:
            resp = await self._client.get(
                self._base_url + DIRECT_PATH,
                params={"q": query.strip(), "limit": 1, "appid": self._api_key},
            )
        except httpx.HTTPError as e:
            logger.exception("Geocoding request failed for %r", query)
            raise UpstreamFailed(f"Failed to geocode city: {e}") from e

        if not resp.is_success:
            message = _error_message(resp)
            logger.error("Geocoding API error response (%s): %s", resp.status_code, message)
            if resp.status_code == 401:
                raise AuthenticationFailed(message)
            raise GeocodingFailed(resp.status_code, message)

        try:
            return parse_place(resp.json())
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamFailed(f"Failed to geocode city: {e}") from e

    async def reverse_geocode(self, latitude: float, longitude: float) -> PlaceRecord | None:
        """Best-effort lookup of the place at a coordinate pair. Never raises."""
        try:
            resp = await self._client.get(
                self._base_url + REVERSE_PATH,
                params={"lat": latitude, "lon": longitude, "limit": 1, "appid": self._api_key},
            )
            if not resp.is_success:
                logger.warning("Reverse geocoding API error: %s", resp.status_code)
                return None
            return parse_place(resp.json())
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.warning("Reverse geocoding failed for (%s, %s): %s", latitude, longitude, e)
            return None


def parse_place(data) -> PlaceRecord | None:
    """Take the first candidate of a geocoding response, or None if there is none."""
    if not isinstance(data, list) or not data:
        return None

    r = data[0]
    return PlaceRecord(
        name=r["name"],
        latitude=r["lat"],
        longitude=r["lon"],
        country=r.get("country"),
        admin_region=r.get("state"),
    )


def _error_message(resp: httpx.Response) -> str:
    """Pull the provider's message out of an error response, falling back to the status."""
    fallback = f"HTTP {resp.status_code}"
    try:
        body = resp.json()
    except ValueError:
        return resp.text or fallback
    if isinstance(body, dict):
        return str(body.get("message") or body.get("cod") or fallback)
    return fallback
