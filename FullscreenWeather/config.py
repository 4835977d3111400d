"""Configuration loaded from the environment (and a .env file, if present)."""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from openweather_provider import OPENWEATHER_BASE_URL
from snapshot_cache import DEFAULT_TTL_SECONDS

DEFAULT_PROXY_URL = "http://localhost:5000/api/openweather"


@dataclass
class Settings:
    fallback_api_key: str
    proxy_url: str = DEFAULT_PROXY_URL
    api_url: str = OPENWEATHER_BASE_URL
    proxy_api_key: Optional[str] = None
    units: str = "imperial"
    lang: str = "en"
    timeout: float = 10.0
    cache_ttl_seconds: int = DEFAULT_TTL_SECONDS


def _number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError as exc:
        raise SystemExit(f"Invalid {name}: {raw!r}") from exc


def load_config() -> Settings:
    load_dotenv()
    fallback_api_key = os.getenv("WEATHER_FALLBACK_API_KEY")
    if not fallback_api_key:
        raise SystemExit("Missing WEATHER_FALLBACK_API_KEY in environment")

    settings = Settings(
        fallback_api_key=fallback_api_key,
        proxy_url=os.getenv("WEATHER_PROXY_URL", DEFAULT_PROXY_URL),
        api_url=os.getenv("WEATHER_API_URL", OPENWEATHER_BASE_URL),
        proxy_api_key=os.getenv("WEATHER_PROXY_API_KEY") or None,
        units=os.getenv("WEATHER_UNITS", "imperial"),
        lang=os.getenv("WEATHER_LANG", "en"),
        timeout=_number("WEATHER_TIMEOUT", "10", float),
        cache_ttl_seconds=_number("WEATHER_CACHE_TTL", str(DEFAULT_TTL_SECONDS), int),
    )
    logging.info(
        "Configuration loaded: proxy=%s api=%s units=%s ttl=%ss",
        settings.proxy_url,
        settings.api_url,
        settings.units,
        settings.cache_ttl_seconds,
    )
    return settings
