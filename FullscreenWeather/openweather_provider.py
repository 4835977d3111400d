"""OpenWeather current weather and 5 day / 3 hour forecast endpoints."""
import logging
import requests
from typing import Any, Dict, Optional
from weather_provider import (
    WeatherProviderBase,
    LocationNotFound,
    MalformedUpstreamResponse,
    UpstreamAuthError,
    UpstreamUnavailable,
)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider speaking the OpenWeather 2.5 API shape.

    Uses the free endpoints: https://openweathermap.org/current and
    https://openweathermap.org/forecast5

    The same class serves both routes to the provider: pointed at the backend
    proxy (which holds the real credential, so ``api_key`` may be None) or
    pointed straight at OpenWeather with the fallback credential.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = OPENWEATHER_BASE_URL,
        units: str = "imperial",
        lang: str = "en",
        country_code: str = "US",
        timeout: Optional[float] = 10,
        name: str = "openweather"
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key, sent as ``appid`` when set
            base_url: Root URL exposing ``/weather`` and ``/forecast``
            units: Temperature units ("metric", "imperial", or "standard")
            lang: Language code for descriptions (e.g., "en", "de")
            country_code: Country appended to postal code queries
            timeout: HTTP request timeout in seconds, None to wait forever
            name: Label used in log lines
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.units = units
        self.lang = lang
        self.country_code = country_code
        self.timeout = timeout
        self.name = name

    def get_current(self, lat: float, lon: float) -> Dict[str, Any]:
        return self._get("weather", {"lat": lat, "lon": lon})

    def get_current_by_postal_code(self, postal_code: str) -> Dict[str, Any]:
        return self._get("weather", {"zip": f"{postal_code},{self.country_code}"})

    def get_forecast(self, lat: float, lon: float) -> Dict[str, Any]:
        return self._get("forecast", {"lat": lat, "lon": lon})

    def _get(self, endpoint: str, query: Dict[str, Any]) -> Dict[str, Any]:
        """
        Issue one GET and return the decoded JSON document.

        Raises:
            UpstreamAuthError: HTTP 401
            LocationNotFound: HTTP 404
            UpstreamUnavailable: Network error, timeout or any other HTTP failure
            MalformedUpstreamResponse: Body is not a JSON object
        """
        url = f"{self.base_url}/{endpoint}"
        params = dict(query)
        params["units"] = self.units
        params["lang"] = self.lang
        if self.api_key:
            params["appid"] = self.api_key

        try:
            logging.info(f"[{self.name}] Making OpenWeather API request: {url}")
            logging.debug(f"[{self.name}] Request parameters: {query}, units={self.units}, lang={self.lang}")

            response = requests.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logging.error(f"[{self.name}] Network error during API request: {e}")
            raise UpstreamUnavailable(f"Network error: {str(e)}")

        logging.info(f"[{self.name}] API response status: {response.status_code}")

        # Check HTTP status
        if not response.ok:
            logging.error(f"[{self.name}] API request failed with status {response.status_code}")
            self._handle_error_response(response)

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"[{self.name}] Failed to parse API response: {e}")
            raise MalformedUpstreamResponse(f"Failed to parse response: {str(e)}")

        if not isinstance(data, dict):
            raise MalformedUpstreamResponse(f"Expected a JSON object from /{endpoint}")

        logging.debug(f"[{self.name}] API response data keys: {list(data.keys())}")
        logging.debug(f"[{self.name}] API response (truncated): {str(data)[:500]}...")
        return data

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse the OpenWeather error body and raise the matching error kind."""
        try:
            error_data = response.json()
            cod = error_data.get("cod", response.status_code)
            message = error_data.get("message", "Unknown error")
            parameters = error_data.get("parameters", [])

            logging.error(f"OpenWeather API error response: {error_data}")

            error_msg = f"OpenWeather API error {cod}: {message}"
            if parameters:
                error_msg += f" (parameters: {', '.join(map(str, parameters))})"
        except (ValueError, AttributeError, TypeError):
            # Not a usable JSON error body, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            error_msg = f"HTTP {response.status_code}: {response.text[:200]}"

        if response.status_code == 401:
            raise UpstreamAuthError(error_msg)
        if response.status_code == 404:
            raise LocationNotFound(error_msg)
        raise UpstreamUnavailable(error_msg)
