"""Primary-then-secondary fetch strategy.

The primary path goes through the backend proxy; the secondary path calls
OpenWeather directly with the fallback credential. Each path is a
WeatherService, tried in order, exactly once.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from openweather_provider import OpenWeatherProvider
from snapshot_cache import SnapshotCache
from weather_data import WeatherSnapshot
from weather_provider import InvalidInput, WeatherProviderError, WeatherServiceUnavailable
from weather_service import WeatherService, parse_coordinates, validate_postal_code

if TYPE_CHECKING:
    from config import Settings


@dataclass(frozen=True)
class WeatherRequest:
    """Either a postal code or a lat/lon pair."""
    lat: Any = None
    lon: Any = None
    postal_code: Optional[str] = None

    @classmethod
    def for_postal_code(cls, code: str) -> "WeatherRequest":
        return cls(postal_code=code)

    @classmethod
    def for_coordinates(cls, lat: Any, lon: Any) -> "WeatherRequest":
        return cls(lat=lat, lon=lon)

    def validate(self) -> None:
        """Raise InvalidInput without touching the network if the request cannot succeed."""
        if self.postal_code is not None:
            validate_postal_code(self.postal_code)
        else:
            parse_coordinates(self.lat, self.lon)

    def describe(self) -> str:
        if self.postal_code is not None:
            return f"ZIP {self.postal_code}"
        return f"({self.lat}, {self.lon})"


@dataclass
class FetchOutcome:
    """Result of one strategy: exactly one of ``snapshot`` / ``error`` is set."""
    source: str
    snapshot: Optional[WeatherSnapshot] = None
    error: Optional[WeatherProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def attempt(service: WeatherService, request: WeatherRequest) -> FetchOutcome:
    """Run one fetch path and capture its result or error as a value."""
    try:
        if request.postal_code is not None:
            snapshot = service.fetch_by_postal_code(request.postal_code)
        else:
            snapshot = service.fetch_by_coordinates(request.lat, request.lon)
    except WeatherProviderError as e:
        return FetchOutcome(source=service.name, error=e)
    return FetchOutcome(source=service.name, snapshot=snapshot)


class FallbackCoordinator:
    """
    Tries a primary then a secondary WeatherService.

    Any primary failure (network, 4xx or 5xx from the proxy, malformed data)
    triggers one attempt through the secondary. There is no delay and no
    further retry.
    """

    def __init__(self, strategies: Sequence[WeatherService]):
        if len(strategies) != 2:
            raise ValueError("FallbackCoordinator needs exactly [primary, secondary]")
        self.strategies = list(strategies)

    def fetch_with_fallback(self, request: WeatherRequest) -> WeatherSnapshot:
        """
        Fetch weather through the first path that succeeds.

        Returns:
            WeatherSnapshot: From whichever path succeeded

        Raises:
            InvalidInput: If the request is malformed (no path is tried)
            WeatherServiceUnavailable: If both paths failed; ``attempts`` holds
                the (source, error) pair of each
        """
        request.validate()

        outcomes: List[FetchOutcome] = []
        for service in self.strategies:
            outcome = attempt(service, request)
            outcomes.append(outcome)
            if outcome.ok:
                if len(outcomes) > 1:
                    logging.info(f"Weather for {request.describe()} served by {outcome.source} path")
                return outcome.snapshot
            if isinstance(outcome.error, InvalidInput):
                raise outcome.error
            logging.warning(f"{outcome.source} path failed for {request.describe()}: {outcome.error}")

        logging.error(f"All weather paths failed for {request.describe()}")
        raise WeatherServiceUnavailable(attempts=[(o.source, o.error) for o in outcomes])

    def clear_cache(self) -> None:
        for service in self.strategies:
            service.cache.clear()


def build_default_coordinator(settings: "Settings") -> FallbackCoordinator:
    """
    Wire the proxy path and the direct path around one shared cache.

    Args:
        settings: A config.Settings instance
    """
    cache = SnapshotCache(ttl_seconds=settings.cache_ttl_seconds)
    proxy = OpenWeatherProvider(
        api_key=settings.proxy_api_key,
        base_url=settings.proxy_url,
        units=settings.units,
        lang=settings.lang,
        timeout=settings.timeout,
        name="proxy",
    )
    direct = OpenWeatherProvider(
        api_key=settings.fallback_api_key,
        base_url=settings.api_url,
        units=settings.units,
        lang=settings.lang,
        timeout=settings.timeout,
        name="direct",
    )
    logging.info(f"Weather paths ready: proxy={settings.proxy_url} direct={settings.api_url} (cache ttl={settings.cache_ttl_seconds}s)")
    return FallbackCoordinator([
        WeatherService(proxy, cache=cache, name="primary"),
        WeatherService(direct, cache=cache, name="secondary"),
    ])
