"""Memoization of serialized log contexts per fault site."""

import hashlib
import threading
from typing import Callable, Dict, Optional

from faultlog.models.kinds import Severity


def cache_key(level: Severity, message: str, file: str, line: int) -> str:
    """Digest identifying a fault site at a given severity."""
    raw = f"{int(level)}\x00{message}\x00{file}\x00{line}"
    return hashlib.sha256(raw.encode("utf-8", errors="replace")).hexdigest()


class ContextCache:
    """
    Append-only map from fault-site digest to serialized context.

    Unbounded: the number of distinct fault sites in a process is finite.
    Two threads missing on the same key both serialize; the first stored
    result wins and both callers see it.
    """

    def __init__(self):
        self._entries: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Dict[str, str]]:
        with self._lock:
            return self._entries.get(key)

    def get_or_create(self, key: str, factory: Callable[[], Dict[str, str]]) -> Dict[str, str]:
        """
        Return the cached context for ``key``, serializing it on a miss.

        Args:
            key: Digest from ``cache_key``
            factory: Produces the serialized context

        Returns:
            The cached serialized context
        """
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
                return cached
            self.misses += 1

        serialized = factory()

        with self._lock:
            return self._entries.setdefault(key, serialized)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
