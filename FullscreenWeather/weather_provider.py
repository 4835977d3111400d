"""Weather provider abstraction and the error kinds the core surfaces."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class WeatherProviderError(Exception):
    """Base class for every error the weather core raises."""

    user_message = "Something went wrong. Please try again."
    status_code = 500

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)


class InvalidInput(WeatherProviderError):
    """Bad postal code or missing/unparseable coordinates. Raised before any network call."""

    user_message = "Invalid location. Please check your ZIP code or coordinates."
    status_code = 400


class LocationNotFound(WeatherProviderError):
    """Upstream answered 404 for the requested location."""

    user_message = "Location not found. Please check your ZIP code."
    status_code = 404


class UpstreamAuthError(WeatherProviderError):
    """Upstream answered 401 - the configured credential is wrong."""

    user_message = "Invalid API key. Please check your OpenWeatherMap configuration."
    status_code = 401


class UpstreamUnavailable(WeatherProviderError):
    """Network failure, timeout, 5xx or any other non-401/404 upstream failure."""

    user_message = "Weather service is temporarily unavailable."
    status_code = 503


class MalformedUpstreamResponse(WeatherProviderError):
    """Upstream payload is missing a structurally required block."""

    user_message = "Unable to fetch weather data. Please try again."
    status_code = 502


class WeatherServiceUnavailable(WeatherProviderError):
    """
    Both the primary and the secondary path failed.

    The message is always the fixed user message; the per-path errors are
    kept on ``attempts`` as (source, error) pairs in the order they were tried.
    """

    user_message = "Weather service unavailable. Please try again later."
    status_code = 503

    def __init__(self, attempts: Optional[List[Any]] = None):
        super().__init__()
        self.attempts = list(attempts or [])


class WeatherProviderBase(ABC):
    """
    Abstract base class for the upstream weather endpoints.

    Implementations return the provider's raw JSON documents; turning them into
    a WeatherSnapshot is the normalizer's job.
    """

    @abstractmethod
    def get_current(self, lat: float, lon: float) -> Dict[str, Any]:
        """
        Fetch raw current conditions for coordinates.

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass

    @abstractmethod
    def get_current_by_postal_code(self, postal_code: str) -> Dict[str, Any]:
        """
        Fetch raw current conditions for a postal code.

        The response carries a ``coord`` block, so this call doubles as geocoding.

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass

    @abstractmethod
    def get_forecast(self, lat: float, lon: float) -> Dict[str, Any]:
        """
        Fetch the raw 3-hour step forecast for coordinates.

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass
