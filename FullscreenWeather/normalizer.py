"""Turn raw OpenWeather current/forecast documents into a WeatherSnapshot.

The provider payload is treated as untrusted and partial: every optional field
is read with a default, and only structurally missing blocks are fatal.
"""
import itertools
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional

from daily_aggregator import aggregate
from weather_data import (
    DEFAULT_CONDITION,
    DEFAULT_DESCRIPTION,
    DEFAULT_ICON,
    DEFAULT_LOCATION_NAME,
    DEFAULT_VISIBILITY_MILES,
    METERS_PER_MILE,
    CurrentConditions,
    ForecastSample,
    HourlySample,
    Location,
    WeatherSnapshot,
)
from weather_provider import MalformedUpstreamResponse

HOURLY_LIMIT = 24  # provider steps every 3 hours, so roughly 3 days


@dataclass
class LocationHint:
    """What the caller already knows about the location before normalizing."""
    lat: float
    lon: float
    name: Optional[str] = None
    country: Optional[str] = None


def _block(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Return a nested object, or an empty dict when it is absent or not an object."""
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _number(data: Dict[str, Any], key: str, default: float = 0) -> float:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def _condition(data: Dict[str, Any]) -> Dict[str, str]:
    """Extract condition/description/icon from the first ``weather`` entry."""
    weather_array = data.get("weather")
    weather = {}
    if isinstance(weather_array, list) and weather_array and isinstance(weather_array[0], dict):
        weather = weather_array[0]
    main = weather.get("main")
    return {
        "condition": main.lower() if isinstance(main, str) and main else DEFAULT_CONDITION,
        "description": weather.get("description") or DEFAULT_DESCRIPTION,
        "icon_code": weather.get("icon") or DEFAULT_ICON,
    }


def _require_main(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedUpstreamResponse(f"{what} is not a JSON object")
    main_data = data.get("main")
    if not isinstance(main_data, dict):
        raise MalformedUpstreamResponse(f"{what} missing 'main' block")
    return main_data


def local_date(epoch_seconds: float, offset_seconds: int) -> str:
    """ISO calendar date of an instant as seen at a fixed UTC offset."""
    return datetime.fromtimestamp(epoch_seconds + offset_seconds, tz=timezone.utc).date().isoformat()


def normalize_current(raw_current: Dict[str, Any], now_ms: Optional[int] = None) -> CurrentConditions:
    """
    Build CurrentConditions from a raw ``/weather`` document.

    Raises:
        MalformedUpstreamResponse: If the document or its ``main`` block is missing
    """
    main_data = _require_main(raw_current, "Current weather response")
    wind = _block(raw_current, "wind")

    visibility_m = _number(raw_current, "visibility", 0)
    visibility = visibility_m / METERS_PER_MILE if visibility_m else DEFAULT_VISIBILITY_MILES

    return CurrentConditions(
        temperature=_number(main_data, "temp"),
        feels_like=_number(main_data, "feels_like"),
        humidity=_number(main_data, "humidity"),
        pressure_hpa=_number(main_data, "pressure"),
        wind_speed=_number(wind, "speed"),
        wind_direction_deg=_number(wind, "deg"),
        visibility_miles=visibility,
        observed_at_epoch_ms=now_ms if now_ms is not None else int(time.time() * 1000),
        **_condition(raw_current),
    )


def parse_forecast_samples(raw_forecast: Optional[Dict[str, Any]], offset_seconds: int = 0) -> List[ForecastSample]:
    """
    Default every field of each raw forecast step.

    Args:
        raw_forecast: Raw ``/forecast`` document, or None when there is no forecast
        offset_seconds: Fallback UTC offset when the document has no ``city.timezone``

    Returns:
        One ForecastSample per raw step, in upstream order

    Raises:
        MalformedUpstreamResponse: If the ``list`` array or a step's ``main`` block is missing
    """
    if raw_forecast is None:
        return []
    if not isinstance(raw_forecast, dict) or not isinstance(raw_forecast.get("list"), list):
        raise MalformedUpstreamResponse("Forecast response missing 'list' array")

    city = _block(raw_forecast, "city")
    offset = int(_number(city, "timezone", offset_seconds))

    samples = []
    for item in raw_forecast["list"]:
        main_data = _require_main(item, "Forecast step")
        dt = _number(item, "dt")
        pop = _number(item, "pop")
        samples.append(ForecastSample(
            epoch_ms=int(dt * 1000),
            local_date=local_date(dt, offset),
            temperature=_number(main_data, "temp"),
            precipitation_probability_pct=pop * 100 if pop else 0,
            humidity=_number(main_data, "humidity"),
            wind_speed=_number(_block(item, "wind"), "speed"),
            **_condition(item),
        ))
    return samples


def iter_hourly(samples: Iterable[ForecastSample], limit: int = HOURLY_LIMIT) -> Iterator[HourlySample]:
    """Lazily yield the first ``limit`` samples as HourlySample records."""
    return (sample.to_hourly() for sample in itertools.islice(samples, limit))


def normalize_location(raw_current: Dict[str, Any], hint: LocationHint) -> Location:
    sys_block = _block(raw_current, "sys")
    return Location(
        name=hint.name or raw_current.get("name") or DEFAULT_LOCATION_NAME,
        lat=hint.lat,
        lon=hint.lon,
        country=hint.country or sys_block.get("country") or "",
        timezone_offset_seconds=int(_number(raw_current, "timezone")),
    )


def normalize(
    raw_current: Dict[str, Any],
    raw_forecast: Optional[Dict[str, Any]],
    location_hint: LocationHint,
    now_ms: Optional[int] = None
) -> WeatherSnapshot:
    """
    Convert one provider's raw current + forecast documents into a WeatherSnapshot.

    Args:
        raw_current: Raw ``/weather`` document
        raw_forecast: Raw ``/forecast`` document (None yields empty hourly/daily)
        location_hint: Coordinates (and optionally display data) for the location
        now_ms: Observation time to stamp on the current conditions

    Returns:
        WeatherSnapshot: Normalized result

    Raises:
        MalformedUpstreamResponse: If a structurally required block is missing
    """
    current = normalize_current(raw_current, now_ms)
    location = normalize_location(raw_current, location_hint)
    samples = parse_forecast_samples(raw_forecast, location.timezone_offset_seconds)

    snapshot = WeatherSnapshot(
        location=location,
        current=current,
        hourly=list(iter_hourly(samples)),
        daily=aggregate(samples),
    )
    logging.debug(
        f"Normalized {location.name} ({location.lat}, {location.lon}): "
        f"{len(samples)} forecast samples -> {len(snapshot.hourly)} hourly, {len(snapshot.daily)} daily"
    )
    return snapshot
