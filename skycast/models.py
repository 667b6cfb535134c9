# ABOUTME: Pydantic BaseModels for places, conditions, forecast samples and snapshots.
# ABOUTME: Defines the normalized weather data model and the enums shared across the app.

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# OpenWeather geocoding returns coordinates with more digits than forecasts resolve.
COORDINATE_PRECISION = 4


class UnitSystem(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"


class ResolutionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class SearchMode(str, Enum):
    CITY = "city"
    GEO = "geo"


class BackgroundKind(str, Enum):
    SUNNY = "sunny"
    RAIN = "rain"
    SNOW = "snow"
    STORM = "storm"
    CLOUDY = "cloudy"


class PlaceRecord(BaseModel):
    """Geocoded place. Two records at the same rounded coordinates are the same place."""

    model_config = ConfigDict(frozen=True)

    name: str
    latitude: float
    longitude: float
    country: str | None = None
    admin_region: str | None = None

    @property
    def coordinates_key(self) -> tuple[float, float]:
        return (round(self.latitude, COORDINATE_PRECISION), round(self.longitude, COORDINATE_PRECISION))

    @property
    def label(self) -> str:
        parts = [self.name]
        if self.admin_region and self.admin_region != self.name:
            parts.append(self.admin_region)
        if self.country:
            parts.append(self.country)
        return ", ".join(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlaceRecord):
            return NotImplemented
        return self.coordinates_key == other.coordinates_key

    def __hash__(self) -> int:
        return hash(self.coordinates_key)


class CurrentConditions(BaseModel):
    """Observed weather at the resolved coordinates. Times are epoch seconds (UTC)."""

    model_config = ConfigDict(frozen=True)

    observed_at: int
    sunrise: int
    sunset: int
    temperature: float
    feels_like: float
    humidity: float
    wind_speed: float
    weather_code: int
    weather_main: str = ""
    description: str = ""


class ForecastSample(BaseModel):
    """One 3-hour forecast reading."""

    timestamp: int
    temperature: float
    temperature_min: float
    temperature_max: float
    weather_code: int
    weather_main: str = ""
    description: str = ""


class DailySummary(BaseModel):
    """One UTC calendar day folded from forecast samples."""

    model_config = ConfigDict(frozen=True)

    date_key: date
    representative_timestamp: int
    temperature_min: float
    temperature_max: float
    midday_temperature: float
    weather_code: int
    weather_main: str = ""
    description: str = ""


class FetchResult(BaseModel):
    """Raw-but-parsed output of one dual fetch."""

    current: CurrentConditions
    samples: list[ForecastSample] = []
    utc_offset_seconds: int = 0
    latitude: float
    longitude: float


class WeatherSnapshot(BaseModel):
    """Everything a consumer needs to show weather for one resolved place."""

    model_config = ConfigDict(frozen=True)

    place: str
    country_code: str | None = None
    units: UnitSystem = UnitSystem.METRIC
    current: CurrentConditions
    daily: list[DailySummary] = Field(min_length=1, max_length=8)
    utc_offset_seconds: int = 0
    latitude: float
    longitude: float


class Position(BaseModel):
    """A device location fix. `timestamp` is epoch seconds."""

    latitude: float
    longitude: float
    timestamp: float


class GeolocationOptions(BaseModel):
    high_accuracy: bool = True
    timeout_ms: int = Field(default=8000, gt=0)
    max_cached_position_age_ms: int = Field(default=5 * 60 * 1000, ge=0)


class SessionView(BaseModel):
    """Read-only state handed to presentation code."""

    model_config = ConfigDict(frozen=True)

    state: ResolutionState
    snapshot: WeatherSnapshot | None = None
    error: str | None = None
    units: UnitSystem
    search_mode: SearchMode
    background_kind: BackgroundKind
