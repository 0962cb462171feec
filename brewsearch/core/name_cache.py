import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Sequence

from logly import logger

from brewsearch.config import NAME_CACHE_MAX_AGE_SEC


class NameCache:
    """Process-wide list of known package names with time-based refresh.

    The list is only ever replaced as a whole, and only while the lock is held.
    Readers go through `locked()`, which keeps the lock for the refresh check
    and the scan so a concurrent query cannot swap the list mid-scan.
    """

    def __init__(
        self,
        lister: Callable[[], list[str]],
        clock: Callable[[], float] = time.monotonic,
        max_age_sec: float = NAME_CACHE_MAX_AGE_SEC,
    ):
        """Initializes an empty cache.

        Args:
            lister: Returns the current package names (casks and formulae).
            clock: Monotonic time source in seconds.
            max_age_sec: Age after which the names are considered stale.
        """
        self._lister = lister
        self._clock = clock
        self._max_age_sec = max_age_sec
        self._lock = threading.Lock()
        self._names: tuple[str, ...] = ()
        self._last_refresh: float | None = None
        # Set without the lock so callers never wait for a running refresh.
        self._invalidated = threading.Event()
        self.refresh_count = 0

    @property
    def last_refresh(self) -> float | None:
        return self._last_refresh

    def _is_stale(self, now: float) -> bool:
        if self._last_refresh is None or self._invalidated.is_set():
            return True
        return now - self._last_refresh > self._max_age_sec

    def _ensure_fresh_locked(self) -> None:
        now = self._clock()
        if not self._is_stale(now):
            return

        # An invalidation arriving while the lister runs triggers another refresh.
        was_invalidated = self._invalidated.is_set()
        self._invalidated.clear()
        try:
            names = tuple(self._lister())
        except Exception:
            if was_invalidated:
                self._invalidated.set()
            raise
        self._names = names
        self._last_refresh = now
        self.refresh_count += 1
        logger.info(f"Package name cache refreshed count={len(names)}")

    def ensure_fresh(self) -> None:
        """Refreshes the names if they are older than the staleness window."""
        with self._lock:
            self._ensure_fresh_locked()

    @contextmanager
    def locked(self) -> Iterator[Sequence[str]]:
        """Holds the lock, refreshes if stale and yields the names."""
        with self._lock:
            self._ensure_fresh_locked()
            yield self._names

    def invalidate(self) -> None:
        """Forces a refresh on the next query. Does not wait for the lock."""
        self._invalidated.set()
