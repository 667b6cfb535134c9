# ABOUTME: Application settings loaded from the environment and an optional .env file.
# ABOUTME: Validates the API key and geolocation options once, at startup.

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from skycast.errors import ConfigurationError
from skycast.models import GeolocationOptions, UnitSystem

DEFAULT_BASE_URL = "https://api.openweathermap.org"
DEFAULT_CITY = "New York"
MIN_API_KEY_LENGTH = 20


class Settings(BaseModel):
    """Runtime configuration injected into the geocoder, fetcher and session."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    default_city: str = DEFAULT_CITY
    units: UnitSystem = UnitSystem.METRIC
    forecast_sample_count: int = Field(default=40, ge=1, le=40)
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    geolocation: GeolocationOptions = GeolocationOptions()
    log_level: str = "INFO"

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, value: str) -> str:
        key = value.strip()
        if len(key) < MIN_API_KEY_LENGTH:
            raise ValueError("API key appears to be invalid or missing")
        return key

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("default_city")
    @classmethod
    def validate_default_city(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("default city must not be empty")
        return text

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()


def load_settings(env: dict[str, str] | None = None) -> Settings:
    """Build Settings from `env` (defaults to os.environ after loading .env).

    Raises ConfigurationError when a value is missing or invalid.
    """
    if env is None:
        load_dotenv()
        env = dict(os.environ)

    geolocation: dict[str, object] = {}
    if "SKYCAST_GEO_HIGH_ACCURACY" in env:
        geolocation["high_accuracy"] = env["SKYCAST_GEO_HIGH_ACCURACY"].strip()
    if "SKYCAST_GEO_TIMEOUT_MS" in env:
        geolocation["timeout_ms"] = env["SKYCAST_GEO_TIMEOUT_MS"]
    if "SKYCAST_GEO_MAX_AGE_MS" in env:
        geolocation["max_cached_position_age_ms"] = env["SKYCAST_GEO_MAX_AGE_MS"]

    values: dict[str, object] = {
        "api_key": env.get("OPENWEATHER_API_KEY", ""),
        "geolocation": geolocation,
    }
    optional = {
        "OPENWEATHER_BASE_URL": "base_url",
        "SKYCAST_DEFAULT_CITY": "default_city",
        "SKYCAST_UNITS": "units",
        "SKYCAST_FORECAST_SAMPLES": "forecast_sample_count",
        "SKYCAST_HTTP_TIMEOUT": "http_timeout_seconds",
        "LOG_LEVEL": "log_level",
    }
    for env_name, field in optional.items():
        if env_name in env:
            values[field] = env[env_name]

    try:
        return Settings.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
