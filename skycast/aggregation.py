# ABOUTME: Folds 3-hour forecast samples into one summary per calendar day.
# ABOUTME: Also promotes current conditions into a synthetic day when no samples exist.

from datetime import date, datetime, timezone

from skycast.models import CurrentConditions, DailySummary, ForecastSample

MAX_DAILY_ENTRIES = 8


def date_key(timestamp: int) -> date:
    """Calendar day of an epoch timestamp, in UTC rather than the location's local time."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date()


def aggregate_daily(samples: list[ForecastSample]) -> list[DailySummary]:
    """Group samples by UTC day in first-seen order, capped at MAX_DAILY_ENTRIES.

    Min and max widen across the day. The midday temperature and the condition
    come from the latest sample seen for that day.
    """
    days: dict[date, dict] = {}
    for sample in samples:
        key = date_key(sample.timestamp)
        acc = days.get(key)
        if acc is None:
            days[key] = {
                "date_key": key,
                "representative_timestamp": sample.timestamp,
                "temperature_min": sample.temperature_min,
                "temperature_max": sample.temperature_max,
                "midday_temperature": sample.temperature,
                "weather_code": sample.weather_code,
                "weather_main": sample.weather_main,
                "description": sample.description,
            }
            continue

        acc["temperature_min"] = min(acc["temperature_min"], sample.temperature_min)
        acc["temperature_max"] = max(acc["temperature_max"], sample.temperature_max)
        acc["midday_temperature"] = sample.temperature
        acc["weather_code"] = sample.weather_code
        acc["weather_main"] = sample.weather_main
        acc["description"] = sample.description

    return [DailySummary(**acc) for acc in list(days.values())[:MAX_DAILY_ENTRIES]]


def promote_current(current: CurrentConditions) -> DailySummary:
    """Build a single daily entry out of current conditions."""
    return DailySummary(
        date_key=date_key(current.observed_at),
        representative_timestamp=current.observed_at,
        temperature_min=current.temperature,
        temperature_max=current.temperature,
        midday_temperature=current.temperature,
        weather_code=current.weather_code,
        weather_main=current.weather_main,
        description=current.description,
    )
