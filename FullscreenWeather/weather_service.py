"""Weather service: validation, caching and concurrent upstream fetches."""
import logging
import math
import re
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Dict, Optional, Tuple

from normalizer import LocationHint, normalize
from snapshot_cache import SnapshotCache, cache_key
from weather_data import WeatherSnapshot
from weather_provider import InvalidInput, MalformedUpstreamResponse, WeatherProviderBase

POSTAL_CODE_PATTERN = re.compile(r"^[0-9]{5}(-[0-9]{4})?$")


def validate_postal_code(code: Any) -> str:
    """Return the code unchanged if it is a US ZIP or ZIP+4, else raise InvalidInput."""
    if not isinstance(code, str) or not POSTAL_CODE_PATTERN.fullmatch(code):
        raise InvalidInput(f"Invalid ZIP code format: {code!r}")
    return code


def parse_coordinates(lat: Any, lon: Any) -> Tuple[float, float]:
    """
    Parse latitude/longitude given as numbers or strings.

    Raises:
        InvalidInput: If either value is missing, not a number, or out of range
    """
    if lat is None or lon is None or lat == "" or lon == "":
        raise InvalidInput("Latitude and longitude are required")
    try:
        lat_val = float(lat)
        lon_val = float(lon)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"Invalid coordinates: {exc}") from exc

    if not (math.isfinite(lat_val) and math.isfinite(lon_val)):
        raise InvalidInput("Coordinates must be finite numbers")
    if not -90 <= lat_val <= 90 or not -180 <= lon_val <= 180:
        raise InvalidInput(f"Coordinates out of range: lat={lat_val}, lon={lon_val}")
    return lat_val, lon_val


class WeatherService:
    """
    Service that wraps a weather provider with caching.

    On a cache miss the current-conditions and forecast requests are issued
    together and both must succeed. Results are cached for the cache's TTL
    (default: 10 minutes), keyed by rounded coordinates or by postal code.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        cache: Optional[SnapshotCache] = None,
        name: str = "primary"
    ):
        """
        Initialize weather service.

        Args:
            provider: Upstream endpoints to fetch from
            cache: Snapshot cache, may be shared with other services
            name: Label for this fetch path in logs and fallback outcomes
        """
        self.provider = provider
        self.cache = cache if cache is not None else SnapshotCache()
        self.name = name

    def fetch_by_coordinates(self, lat: Any, lon: Any) -> WeatherSnapshot:
        """
        Get weather for coordinates, using the cache if still fresh.

        Returns:
            WeatherSnapshot: Normalized weather (may be cached)

        Raises:
            InvalidInput: If the coordinates are missing or unparseable
            WeatherProviderError: If an upstream call fails
        """
        lat_val, lon_val = parse_coordinates(lat, lon)
        key = cache_key(lat_val, lon_val)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        logging.info(f"[{self.name}] Fetching weather for {key}...")
        raw_current, raw_forecast = self._fetch_pair(lat_val, lon_val)
        snapshot = normalize(raw_current, raw_forecast, LocationHint(lat=lat_val, lon=lon_val))

        self.cache.set(key, snapshot)
        logging.info(
            f"[{self.name}] Weather fetch successful: {snapshot.current.temperature}°, "
            f"{snapshot.current.condition} at {snapshot.location.name}"
        )
        return snapshot

    def fetch_by_postal_code(self, code: Any) -> WeatherSnapshot:
        """
        Get weather for a US postal code, using the cache if still fresh.

        The current-conditions-by-postal-code response supplies the coordinates
        used for the forecast request, so the two calls run one after the other.

        Raises:
            InvalidInput: If the code is not ``NNNNN`` or ``NNNNN-NNNN``
            WeatherProviderError: If an upstream call fails
        """
        code = validate_postal_code(code)

        cached = self.cache.get(code)
        if cached is not None:
            return cached

        logging.info(f"[{self.name}] Fetching weather for ZIP {code}...")
        raw_current = self.provider.get_current_by_postal_code(code)
        lat, lon = self._coordinates_of(raw_current)
        raw_forecast = self.provider.get_forecast(lat, lon)

        snapshot = normalize(raw_current, raw_forecast, LocationHint(lat=lat, lon=lon))

        self.cache.set(code, snapshot)
        self.cache.set(cache_key(lat, lon), snapshot)
        logging.info(
            f"[{self.name}] Weather fetch successful: {snapshot.current.temperature}°, "
            f"{snapshot.current.condition} at {snapshot.location.name} ({code})"
        )
        return snapshot

    def _fetch_pair(self, lat: float, lon: float) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Run current + forecast together; raise the first failure without waiting for the other."""
        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix=f"weather-{self.name}")
        try:
            current_future = executor.submit(self.provider.get_current, lat, lon)
            forecast_future = executor.submit(self.provider.get_forecast, lat, lon)

            done, pending = wait([current_future, forecast_future], return_when=FIRST_EXCEPTION)
            for future in (current_future, forecast_future):
                if future in done and future.exception() is not None:
                    if pending:
                        logging.debug(f"[{self.name}] Abandoning {len(pending)} in-flight request(s)")
                    raise future.exception()

            return current_future.result(), forecast_future.result()
        finally:
            # Abandoned requests finish on their own worker
            executor.shutdown(wait=False)

    @staticmethod
    def _coordinates_of(raw_current: Dict[str, Any]) -> Tuple[float, float]:
        coord = raw_current.get("coord")
        if not isinstance(coord, dict):
            raise MalformedUpstreamResponse("Current weather response missing 'coord' block")
        try:
            return float(coord["lat"]), float(coord["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedUpstreamResponse(f"Invalid 'coord' block: {coord}") from exc
