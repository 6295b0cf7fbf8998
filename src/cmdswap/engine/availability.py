"""Tool availability oracle: is an executable present, with a TTL cache.

The cache is shared by every evaluation in the process. A single lock guards
each read-or-insert, including the live lookup on a miss; lookups are a PATH
scan and never re-enter the oracle.
"""

from __future__ import annotations

import logging
import shutil
import threading
import time
from dataclasses import dataclass
from typing import Callable, Protocol

logger = logging.getLogger("cmdswap")


class ExecutableLocator(Protocol):
    def exists_on_path(self, name: str) -> bool:
        ...


class PathLocator:
    """Resolves tools through PATH, or through an explicit path when configured."""

    def __init__(self, tool_paths: dict[str, str] | None = None) -> None:
        self._tool_paths = dict(tool_paths or {})

    def exists_on_path(self, name: str) -> bool:
        target = self._tool_paths.get(name, name)
        return shutil.which(target) is not None


@dataclass
class ToolAvailabilityEntry:
    available: bool
    checked_at: float


class ToolAvailabilityOracle:
    """Memoizing availability check.

    Args:
        locator: Performs the live lookup.
        ttl_ms: Age after which a cached entry is refreshed.
        cache_enabled: When False every call is a live lookup.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        locator: ExecutableLocator | None = None,
        ttl_ms: int = 1000,
        cache_enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._locator = locator or PathLocator()
        self.ttl = ttl_ms / 1000.0
        self.cache_enabled = cache_enabled
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, ToolAvailabilityEntry] = {}

    def is_available(self, tool_name: str) -> bool:
        if not self.cache_enabled:
            return self._lookup(tool_name)

        with self._lock:
            now = self._clock()
            entry = self._entries.get(tool_name)
            if entry is not None and now - entry.checked_at < self.ttl:
                return entry.available

            available = self._lookup(tool_name)
            self._entries[tool_name] = ToolAvailabilityEntry(available=available, checked_at=now)
            return available

    def invalidate(self, tool_name: str | None = None) -> None:
        """Forget one tool, or every tool when *tool_name* is None."""
        with self._lock:
            if tool_name is None:
                self._entries.clear()
            else:
                self._entries.pop(tool_name, None)

    def cached(self, tool_name: str) -> ToolAvailabilityEntry | None:
        with self._lock:
            return self._entries.get(tool_name)

    def _lookup(self, tool_name: str) -> bool:
        try:
            available = bool(self._locator.exists_on_path(tool_name))
        except Exception:
            logger.exception("tool=%s lookup failed, treating as unavailable", tool_name)
            return False
        logger.debug("tool=%s available=%s", tool_name, available)
        return available
