"""In-memory caching layer for geocoding results.

Keyed by normalized address. Entries live for the lifetime of the cache
instance and are never invalidated automatically; stored and returned
values are copies so callers cannot mutate cached state.
"""

import dataclasses
import threading

from geobatch.lib.geocoder.base import GeocodeResult


class GeocodeCache:
    """Process-local geocoding result cache."""

    def __init__(self) -> None:
        self._entries: dict[str, GeocodeResult] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def lookup(self, normalized_address: str) -> GeocodeResult | None:
        """Look up a cached result.

        Args:
            normalized_address: Cache key.

        Returns:
            A copy of the cached GeocodeResult, or None on a miss.
        """
        with self._lock:
            entry = self._entries.get(normalized_address)
            if entry is None:
                self.misses += 1
                return None
            self.hits += 1
            return dataclasses.replace(entry)

    def store(self, normalized_address: str, result: GeocodeResult) -> None:
        """Store a result (success or failure) under the cache key."""
        with self._lock:
            self._entries[normalized_address] = dataclasses.replace(result)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, normalized_address: object) -> bool:
        return normalized_address in self._entries
