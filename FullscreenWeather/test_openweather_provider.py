"""Tests for OpenWeather provider."""
import pytest
import requests
from unittest.mock import Mock, patch
from openweather_provider import OpenWeatherProvider, OPENWEATHER_BASE_URL
from weather_provider import (
    LocationNotFound,
    MalformedUpstreamResponse,
    UpstreamAuthError,
    UpstreamUnavailable,
    WeatherProviderError,
)
from conftest import make_current, make_forecast


@pytest.fixture
def provider():
    """Create OpenWeather provider instance."""
    return OpenWeatherProvider(api_key="test_key", units="imperial")


def _ok(payload):
    mock_response = Mock()
    mock_response.ok = True
    mock_response.status_code = 200
    mock_response.json.return_value = payload
    return mock_response


def _error(status_code, payload=None, text=""):
    mock_response = Mock()
    mock_response.ok = False
    mock_response.status_code = status_code
    mock_response.text = text
    if payload is None:
        mock_response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        mock_response.json.return_value = payload
    return mock_response


def test_get_current_success(provider):
    """Test successful current weather call."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _ok(make_current())

        data = provider.get_current(41.85, -87.65)

        assert data["name"] == "Chicago"
        args, kwargs = mock_get.call_args
        assert args[0] == f"{OPENWEATHER_BASE_URL}/weather"
        assert kwargs["params"] == {
            "lat": 41.85,
            "lon": -87.65,
            "units": "imperial",
            "lang": "en",
            "appid": "test_key",
        }
        assert kwargs["timeout"] == 10


def test_get_forecast_success(provider):
    """Test forecast call hits /forecast with coordinates."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _ok(make_forecast(count=8))

        data = provider.get_forecast(41.85, -87.65)

        assert len(data["list"]) == 8
        args, kwargs = mock_get.call_args
        assert args[0] == f"{OPENWEATHER_BASE_URL}/forecast"
        assert kwargs["params"]["lat"] == 41.85
        assert kwargs["params"]["lon"] == -87.65


def test_get_current_by_postal_code_appends_country(provider):
    """ZIP lookups are qualified with the country code."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _ok(make_current())

        provider.get_current_by_postal_code("60601")

        params = mock_get.call_args[1]["params"]
        assert params["zip"] == "60601,US"
        assert "lat" not in params


def test_proxy_provider_sends_no_key():
    """Without a key (proxy path) no appid parameter is sent."""
    proxy = OpenWeatherProvider(base_url="http://localhost:5000/api/openweather/", name="proxy")
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _ok(make_current())

        proxy.get_current(41.85, -87.65)

        args, kwargs = mock_get.call_args
        assert args[0] == "http://localhost:5000/api/openweather/weather"
        assert "appid" not in kwargs["params"]


def test_http_401_is_auth_error(provider):
    """Test handling of an invalid key."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _error(401, {"cod": 401, "message": "Invalid API key"})

        with pytest.raises(UpstreamAuthError) as exc_info:
            provider.get_current(41.85, -87.65)

        assert "401" in str(exc_info.value)
        assert "Invalid API key" in str(exc_info.value)


def test_http_404_is_location_not_found(provider):
    """Unknown ZIP codes come back as 404."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _error(404, {"cod": "404", "message": "city not found"})

        with pytest.raises(LocationNotFound) as exc_info:
            provider.get_current_by_postal_code("00000")

        assert "city not found" in str(exc_info.value)


def test_http_500_is_unavailable(provider):
    """Any other status maps to UpstreamUnavailable."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _error(500, {"cod": 500, "message": "Internal error", "parameters": ["lat"]})

        with pytest.raises(UpstreamUnavailable) as exc_info:
            provider.get_forecast(41.85, -87.65)

        assert "parameters: lat" in str(exc_info.value)


def test_non_json_error_body(provider):
    """Error pages that are not JSON still map by status."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _error(502, text="<html>Bad Gateway</html>")

        with pytest.raises(UpstreamUnavailable) as exc_info:
            provider.get_current(41.85, -87.65)

        assert "HTTP 502" in str(exc_info.value)


def test_network_error(provider):
    """Test handling of network errors."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("Connection refused")

        with pytest.raises(UpstreamUnavailable) as exc_info:
            provider.get_current(41.85, -87.65)

        assert "Network error" in str(exc_info.value)


def test_timeout_is_unavailable(provider):
    """Timeouts are reported like any other network failure."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.Timeout("Read timed out")

        with pytest.raises(UpstreamUnavailable):
            provider.get_forecast(41.85, -87.65)


def test_invalid_json_on_success(provider):
    """A 200 with an unreadable body is malformed, not unavailable."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_response = _ok(None)
        mock_response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = mock_response

        with pytest.raises(MalformedUpstreamResponse) as exc_info:
            provider.get_current(41.85, -87.65)

        assert "Failed to parse response" in str(exc_info.value)


def test_non_object_json(provider):
    """A JSON array where an object is expected is malformed."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _ok([1, 2, 3])

        with pytest.raises(MalformedUpstreamResponse):
            provider.get_forecast(41.85, -87.65)


def test_errors_share_base_class(provider):
    """Callers can catch every provider failure with one except clause."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _error(503, {"cod": 503, "message": "busy"})

        with pytest.raises(WeatherProviderError):
            provider.get_current(41.85, -87.65)


def test_non_string_parameters_in_error_body(provider):
    """Error bodies listing non-string parameters still map to an error kind."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _error(400, {"cod": 400, "message": "bad", "parameters": [1, None]})

        with pytest.raises(UpstreamUnavailable) as exc_info:
            provider.get_current(41.85, -87.65)

        assert "parameters: 1, None" in str(exc_info.value)


def test_unexpected_parameters_shape(provider):
    """A parameters value that cannot be iterated falls back to the HTTP status."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = _error(400, {"cod": 400, "message": "bad", "parameters": 7}, text="bad request")

        with pytest.raises(UpstreamUnavailable) as exc_info:
            provider.get_current(41.85, -87.65)

        assert "HTTP 400" in str(exc_info.value)
