# ABOUTME: Maps OpenWeather condition codes to the small set of background kinds.
# ABOUTME: Numeric code ranges win over the textual "main" group when both are present.

from skycast.models import BackgroundKind

# https://openweathermap.org/weather-conditions
_MAIN_FALLBACK = {
    "Drizzle": BackgroundKind.RAIN,
    "Rain": BackgroundKind.RAIN,
    "Snow": BackgroundKind.SNOW,
    "Thunderstorm": BackgroundKind.STORM,
}


def classify(weather_code: int | None, weather_main: str | None) -> BackgroundKind:
    """Classify a condition into a BackgroundKind. Unknown input maps to CLOUDY."""
    if weather_code is not None:
        if 200 <= weather_code < 300:
            return BackgroundKind.STORM
        if 600 <= weather_code < 700:
            return BackgroundKind.SNOW
        if 500 <= weather_code < 600:
            return BackgroundKind.RAIN
        if weather_code in (800, 801, 802):
            return BackgroundKind.SUNNY
        if 803 <= weather_code <= 804:
            return BackgroundKind.CLOUDY
    return _MAIN_FALLBACK.get(weather_main or "", BackgroundKind.CLOUDY)
