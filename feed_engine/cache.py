"""Read-through cache for reference data (cities, sectors).

Lives outside the ranking and gate functions; those stay pure.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

from .log import get_logger

log = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class ReferenceCache(Generic[K, V]):
    """Load a value on first `get` and keep it until invalidated or expired."""

    def __init__(
        self,
        loader: Callable[[K], V],
        ttl_s: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl = ttl_s
        self._clock = clock
        self._entries: Dict[K, Tuple[float, V]] = {}
        self._lock = threading.Lock()

    def get(self, key: K) -> V:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not self._expired(entry[0]):
                return entry[1]

        # Loader errors propagate and leave nothing cached.
        value = self._loader(key)
        with self._lock:
            self._entries[key] = (self._clock(), value)
        log.debug("Cached reference entry %r", key)
        return value

    def invalidate(self, key: Optional[K] = None) -> None:
        """Drop one entry, or everything when `key` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[call-overload]
            return entry is not None and not self._expired(entry[0])

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, loaded_at: float) -> bool:
        return self._ttl is not None and self._clock() - loaded_at >= self._ttl
