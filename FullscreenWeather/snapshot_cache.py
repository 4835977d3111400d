"""In-memory TTL cache of normalized weather snapshots."""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from weather_data import WeatherSnapshot

DEFAULT_TTL_SECONDS = 600


def cache_key(lat: float, lon: float) -> str:
    """Location fingerprint: coordinates rounded to 2 decimals (~1.1 km)."""
    return f"{lat:.2f},{lon:.2f}"


@dataclass
class CacheEntry:
    key: str
    value: WeatherSnapshot
    stored_at: float  # seconds, from the cache clock


class SnapshotCache:
    """
    Maps a location fingerprint to a WeatherSnapshot for ``ttl_seconds``.

    Expired entries are not purged; ``get`` skips them and the next ``set``
    for the same key overwrites them. There is no size bound.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time):
        """
        Initialize the cache.

        Args:
            ttl_seconds: How long an entry is served after it was stored
            clock: Returns the current time in seconds (swappable in tests)
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[WeatherSnapshot]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None

        age = self._clock() - entry.stored_at
        if age < self.ttl_seconds:
            logging.debug(f"Cache hit for {key} (age: {age:.1f}s, TTL: {self.ttl_seconds}s)")
            return entry.value
        logging.info(f"Cache expired for {key} (age: {age:.1f}s > TTL: {self.ttl_seconds}s)")
        return None

    def set(self, key: str, value: WeatherSnapshot) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logging.info("Weather cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
