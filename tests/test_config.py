# ABOUTME: Contract tests for settings loading and validation.
# ABOUTME: Validates defaults, env overrides and startup-time rejection of bad credentials.

import pytest
from payloads import API_KEY

from skycast.config import DEFAULT_BASE_URL, load_settings
from skycast.errors import ConfigurationError
from skycast.models import UnitSystem


class TestLoadSettings:
    def test_defaults(self):
        """Only the API key is required; everything else has a default.

        Implementation: Loads settings from an env dict holding just the key.
        Passing implies: Defaults match the documented configuration table.
        """
        settings = load_settings({"OPENWEATHER_API_KEY": API_KEY})

        assert settings.api_key == API_KEY
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.default_city == "New York"
        assert settings.units == UnitSystem.METRIC
        assert settings.forecast_sample_count == 40
        assert settings.geolocation.high_accuracy is True
        assert settings.geolocation.timeout_ms == 8000
        assert settings.geolocation.max_cached_position_age_ms == 300000
        assert settings.log_level == "INFO"

    def test_env_overrides(self):
        settings = load_settings(
            {
                "OPENWEATHER_API_KEY": f"  {API_KEY}  ",
                "OPENWEATHER_BASE_URL": "https://proxy.example/",
                "SKYCAST_DEFAULT_CITY": " Lisbon ",
                "SKYCAST_UNITS": "imperial",
                "SKYCAST_FORECAST_SAMPLES": "16",
                "SKYCAST_HTTP_TIMEOUT": "2.5",
                "SKYCAST_GEO_HIGH_ACCURACY": "false",
                "SKYCAST_GEO_TIMEOUT_MS": "1500",
                "SKYCAST_GEO_MAX_AGE_MS": "0",
                "LOG_LEVEL": "debug",
            }
        )

        assert settings.api_key == API_KEY
        assert settings.base_url == "https://proxy.example"
        assert settings.default_city == "Lisbon"
        assert settings.units == UnitSystem.IMPERIAL
        assert settings.forecast_sample_count == 16
        assert settings.http_timeout_seconds == 2.5
        assert settings.geolocation.high_accuracy is False
        assert settings.geolocation.timeout_ms == 1500
        assert settings.geolocation.max_cached_position_age_ms == 0
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("raw, expected", [("true", True), ("1", True), ("on", True), (" no ", False), ("0", False)])
    def test_high_accuracy_accepts_common_bool_spellings(self, raw, expected):
        settings = load_settings({"OPENWEATHER_API_KEY": API_KEY, "SKYCAST_GEO_HIGH_ACCURACY": raw})
        assert settings.geolocation.high_accuracy is expected

    @pytest.mark.parametrize("key", ["", "   ", "short-key"])
    def test_missing_or_short_key_is_configuration_error(self, key):
        """A missing or implausibly short key fails at startup.

        Implementation: Loads settings with blank and short keys.
        Passing implies: Credential shape is checked once, not on every request.
        """
        with pytest.raises(ConfigurationError, match="API key appears to be invalid or missing"):
            load_settings({"OPENWEATHER_API_KEY": key})

    def test_absent_key_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            load_settings({})

    @pytest.mark.parametrize(
        "name, value",
        [
            ("SKYCAST_UNITS", "kelvin"),
            ("SKYCAST_GEO_TIMEOUT_MS", "0"),
            ("SKYCAST_DEFAULT_CITY", "  "),
            ("SKYCAST_FORECAST_SAMPLES", "many"),
            ("SKYCAST_GEO_HIGH_ACCURACY", "ture"),
            ("SKYCAST_GEO_HIGH_ACCURACY", ""),
        ],
    )
    def test_invalid_values_are_configuration_errors(self, name, value):
        with pytest.raises(ConfigurationError):
            load_settings({"OPENWEATHER_API_KEY": API_KEY, name: value})
