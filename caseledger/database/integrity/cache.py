#!/usr/bin/env python3
"""
cache.py
--------
Time-bounded memo of per-entity evaluation results.

Keys identify an entity (type, id, validation level); values are the issue
lists the rules produced. Entries older than the TTL are treated as absent
and dropped on access. A TTL of zero disables caching. All access goes
through one lock so the cache can be shared by threads.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Hashable, List, Optional, Tuple

from .issues import IntegrityIssue


class ValidationCache:
    """
    TTL cache of evaluation results.

    Attributes:
        ttl_seconds: Entry lifetime; 0 disables the cache
        hits: Lookups served from the cache
        misses: Lookups that were absent or expired
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, List[IntegrityIssue]]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, key: Hashable) -> Optional[List[IntegrityIssue]]:
        """Cached issues for key, or None when absent or expired."""
        if not self.enabled:
            return None
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            stored_at, issues = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return list(issues)

    def set(self, key: Hashable, issues: List[IntegrityIssue]) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[key] = (self._clock(), list(issues))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
