# ABOUTME: Helpers that turn snapshot fields into display strings.
# ABOUTME: Location labels, location-local times and weekdays, and unit symbols.

from datetime import datetime, timedelta, timezone

from skycast.models import PlaceRecord, UnitSystem

CURRENT_LOCATION = "Current location"


def build_location_label(place: PlaceRecord | None, fallback: str | None = None) -> str:
    """Label for a place, or `fallback` (default "Current location") when there is none."""
    if place is not None:
        return place.label
    return fallback or CURRENT_LOCATION


def local_datetime(timestamp: int, utc_offset_seconds: int) -> datetime:
    """Wall-clock time at the location for an epoch timestamp."""
    tz = timezone(timedelta(seconds=utc_offset_seconds))
    return datetime.fromtimestamp(timestamp, tz=tz)


def format_time(timestamp: int, utc_offset_seconds: int, fmt: str = "%H:%M") -> str:
    """Location-local time of day, formatted with the process locale."""
    return local_datetime(timestamp, utc_offset_seconds).strftime(fmt)


def format_day(timestamp: int, utc_offset_seconds: int, fmt: str = "%a") -> str:
    """Location-local weekday name, formatted with the process locale."""
    return local_datetime(timestamp, utc_offset_seconds).strftime(fmt)


def temperature_unit(units: UnitSystem) -> str:
    return "°C" if units == UnitSystem.METRIC else "°F"


def wind_speed_unit(units: UnitSystem) -> str:
    # OpenWeather reports m/s for metric and mph for imperial.
    return "m/s" if units == UnitSystem.METRIC else "mph"
