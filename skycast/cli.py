# ABOUTME: Command line entry point that runs one weather resolution and prints the result.
# ABOUTME: Wires settings, the HTTP client, geocoder, fetcher and locator into a WeatherSession.

import argparse
import asyncio
import logging
import sys

from skycast.config import Settings, load_settings
from skycast.deps import create_http_client
from skycast.errors import ConfigurationError
from skycast.formatting import format_day, format_time, temperature_unit, wind_speed_unit
from skycast.geocoding import Geocoder
from skycast.geolocation import IpGeolocationProvider, Locator
from skycast.models import ResolutionState, SessionView, UnitSystem
from skycast.session import WeatherSession
from skycast.weather_service import ForecastFetcher

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="skycast", description="Current weather and outlook for a place.")
    parser.add_argument("city", nargs="?", help="place name to look up (omit to use your location)")
    parser.add_argument("--units", choices=[u.value for u in UnitSystem], help="unit system")
    parser.add_argument("--locate", action="store_true", help="use IP geolocation even if a city is given")
    parser.add_argument("--json", action="store_true", help="print only the JSON view")
    return parser.parse_args(argv)


def render_summary(view: SessionView) -> str:
    """Short plain-text summary of a session view."""
    if view.snapshot is None:
        return view.error or "No weather available."

    snap = view.snapshot
    temp = temperature_unit(snap.units)
    current = snap.current
    lines = [
        f"{snap.place} ({view.background_kind.value})",
        f"  {current.temperature:.0f}{temp}, feels like {current.feels_like:.0f}{temp}, {current.description}",
        f"  humidity {current.humidity:.0f}%, wind {current.wind_speed:.1f} {wind_speed_unit(snap.units)}",
        f"  sunrise {format_time(current.sunrise, snap.utc_offset_seconds)}"
        f", sunset {format_time(current.sunset, snap.utc_offset_seconds)}",
    ]
    for day in snap.daily:
        lines.append(
            f"  {format_day(day.representative_timestamp, snap.utc_offset_seconds)}"
            f"  {day.temperature_min:.0f}{temp} / {day.temperature_max:.0f}{temp}  {day.description}"
        )
    if view.error:
        lines.append(f"! {view.error}")
    return "\n".join(lines)


async def run(settings: Settings, args: argparse.Namespace) -> SessionView:
    units = UnitSystem(args.units) if args.units else settings.units
    async with create_http_client(settings) as client:
        locator = Locator(IpGeolocationProvider(client), settings.geolocation)
        session = WeatherSession(
            Geocoder(client, settings.api_key, settings.base_url),
            ForecastFetcher(client, settings.api_key, settings.base_url, settings.forecast_sample_count),
            locator=locator,
            default_city=settings.default_city,
            units=units,
        )
        if args.city and not args.locate:
            await session.search_by_city(args.city)
        else:
            await session.start()
        return session.view()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        return 2

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    view = asyncio.run(run(settings, args))

    if not args.json:
        print(render_summary(view))
    print(view.model_dump_json(indent=2))
    return 1 if view.state == ResolutionState.ERROR else 0


if __name__ == "__main__":
    sys.exit(main())
