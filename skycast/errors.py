# ABOUTME: Structured failure taxonomy for geocoding, fetching, geolocation and configuration.
# ABOUTME: Services raise these; only the session turns them into user-facing messages.

API_KEYS_URL = "https://home.openweathermap.org/api_keys"


class WeatherError(Exception):
    """Base class for every failure raised by skycast services."""


class InvalidInput(WeatherError):
    """Caller supplied an unusable value (e.g. a blank city name)."""


class AuthenticationFailed(WeatherError):
    """The provider rejected the API key."""

    def __init__(self, provider_message: str):
        self.provider_message = provider_message
        super().__init__(
            f"API key authentication failed: {provider_message}. "
            f"Please verify your API key is correct and activated at {API_KEYS_URL}"
        )


class UpstreamFailed(WeatherError):
    """A provider call failed for a reason other than authentication."""


class GeocodingFailed(UpstreamFailed):
    """The geocoding endpoint answered with a non-2xx status."""

    def __init__(self, http_status: int, provider_message: str):
        self.http_status = http_status
        self.provider_message = provider_message
        super().__init__(f"Geocoding API error ({http_status}): {provider_message}")


class CurrentConditionsFailed(UpstreamFailed):
    """The current-conditions endpoint reported a failure."""

    def __init__(self, provider_message: str):
        self.provider_message = provider_message
        super().__init__(provider_message)


class Unavailable(WeatherError):
    """A required capability (such as geolocation) is missing."""


class GeolocationFailed(WeatherError):
    """A device position could not be obtained in time."""


class ConfigurationError(WeatherError):
    """Startup configuration is missing or invalid."""
