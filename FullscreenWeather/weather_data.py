"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass, field
from typing import Any, Dict, List

DEFAULT_LOCATION_NAME = "Unknown Location"
DEFAULT_CONDITION = "clear"
DEFAULT_DESCRIPTION = "Clear sky"
DEFAULT_ICON = "01d"
DEFAULT_VISIBILITY_MILES = 10.0
METERS_PER_MILE = 1609.34


@dataclass
class Location:
    """Where a snapshot was taken. lat/lon identify it, the rest is display metadata."""
    name: str
    lat: float
    lon: float
    country: str = ""
    timezone_offset_seconds: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "lat": self.lat,
            "lon": self.lon,
            "country": self.country,
            "timezone": self.timezone_offset_seconds,
        }


@dataclass
class CurrentConditions:
    """Current observation, already normalized."""
    temperature: float
    feels_like: float
    humidity: float
    pressure_hpa: float
    wind_speed: float
    wind_direction_deg: float
    visibility_miles: float
    condition: str  # lowercase category, e.g. "clouds", "rain"
    description: str  # e.g. "broken clouds"
    icon_code: str
    observed_at_epoch_ms: int
    uv_index: int = 0  # not supplied by the current-weather endpoint

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "feelsLike": self.feels_like,
            "humidity": self.humidity,
            "pressure": self.pressure_hpa,
            "windSpeed": self.wind_speed,
            "windDirection": self.wind_direction_deg,
            "visibility": self.visibility_miles,
            "uvIndex": self.uv_index,
            "condition": self.condition,
            "description": self.description,
            "icon": self.icon_code,
            "timestamp": self.observed_at_epoch_ms,
        }


@dataclass
class HourlySample:
    """One 3-hour forecast step."""
    epoch_ms: int
    temperature: float
    condition: str
    description: str
    icon_code: str
    precipitation_probability_pct: float  # 0-100
    wind_speed: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.epoch_ms,
            "temperature": self.temperature,
            "condition": self.condition,
            "description": self.description,
            "icon": self.icon_code,
            "precipitation": self.precipitation_probability_pct,
            "windSpeed": self.wind_speed,
        }


@dataclass
class ForecastSample:
    """
    A raw forecast step after field defaulting.

    Carries everything the hourly view and the daily fold need, including the
    calendar date of the sample in the provider's local time.
    """
    epoch_ms: int
    local_date: str  # ISO date, e.g. "2024-05-24"
    temperature: float
    condition: str = DEFAULT_CONDITION
    description: str = DEFAULT_DESCRIPTION
    icon_code: str = DEFAULT_ICON
    precipitation_probability_pct: float = 0.0
    humidity: float = 0.0
    wind_speed: float = 0.0

    def to_hourly(self) -> HourlySample:
        return HourlySample(
            epoch_ms=self.epoch_ms,
            temperature=self.temperature,
            condition=self.condition,
            description=self.description,
            icon_code=self.icon_code,
            precipitation_probability_pct=self.precipitation_probability_pct,
            wind_speed=self.wind_speed,
        )


@dataclass
class DailySummary:
    """One local calendar day folded from its forecast samples."""
    date_epoch_ms: int
    temperature_min: float
    temperature_max: float
    condition: str
    description: str
    icon_code: str
    precipitation_probability_pct: float
    humidity: float
    wind_speed: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date_epoch_ms,
            "temperatureMin": self.temperature_min,
            "temperatureMax": self.temperature_max,
            "condition": self.condition,
            "description": self.description,
            "icon": self.icon_code,
            "precipitation": self.precipitation_probability_pct,
            "humidity": self.humidity,
            "windSpeed": self.wind_speed,
        }


@dataclass
class WeatherSnapshot:
    """The canonical unit returned to callers and stored in the cache."""
    location: Location
    current: CurrentConditions
    hourly: List[HourlySample] = field(default_factory=list)
    daily: List[DailySummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation using the public camelCase field names."""
        return {
            "location": self.location.to_dict(),
            "current": self.current.to_dict(),
            "hourly": [hour.to_dict() for hour in self.hourly],
            "daily": [day.to_dict() for day in self.daily],
        }
