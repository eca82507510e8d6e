import time
from threading import Lock
from typing import Callable, Hashable, Optional


class ReportCache:
    """TTL cache in front of report payloads, keyed per owner.

    A ttl of zero or less turns the cache off. Expired entries are swept on
    every put and the oldest entries are evicted past max_entries.
    """

    def __init__(
        self,
        ttl_secs: float,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_secs = ttl_secs
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, object]] = {}
        self._lock = Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl_secs > 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: Hashable) -> Optional[object]:
        if not self.enabled:
            return None
        now = self._clock()
        with self._lock:
            hit = self._entries.get(key)
            if hit is None:
                return None
            expires_at, value = hit
            if now >= expires_at:
                del self._entries[key]
                return None
            return value

    def put(self, key: Hashable, value: object) -> None:
        if not self.enabled:
            return
        now = self._clock()
        with self._lock:
            expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
            for k in expired:
                del self._entries[k]
            # dicts keep insertion order, so re-inserting moves the key to the end
            self._entries.pop(key, None)
            while len(self._entries) >= self.max_entries:
                del self._entries[next(iter(self._entries))]
            self._entries[key] = (now + self.ttl_secs, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
