"""Key-value stores with per-key TTL backing the login throttle."""

from __future__ import annotations

import json
from threading import Lock
from typing import Any, Protocol

import redis

from fittrack_auth.core.clock import Clock, SystemClock


class ThrottleStoreError(RuntimeError):
    """Raised when the throttle store is unreachable or returns malformed data."""


class ThrottleStore(Protocol):
    """Minimal TTL key-value contract used by the login throttle."""

    def get(self, key: str) -> Any | None: ...

    def set_with_ttl(self, key: str, value: Any, ttl_seconds: int) -> None: ...

    def delete(self, key: str) -> None: ...

    def increment(self, key: str, ttl_seconds: int) -> int: ...


class RedisThrottleStore:
    """Store backed by a shared Redis instance.

    Values are stored as JSON. Redis owns expiry through ``EX``/``EXPIRE``.
    """

    def __init__(self, client: Any) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisThrottleStore:
        return cls(redis.from_url(url))  # type: ignore[no-untyped-call]

    def get(self, key: str) -> Any | None:
        try:
            raw = self._redis.get(key)
        except redis.RedisError as err:
            raise ThrottleStoreError(f"Failed to read {key!r} from redis: {err}") from err
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        try:
            return json.loads(raw)
        except ValueError as err:
            raise ThrottleStoreError(f"Malformed value stored under {key!r}") from err

    def set_with_ttl(self, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        try:
            self._redis.set(key, json.dumps(value), ex=int(ttl_seconds))
        except redis.RedisError as err:
            raise ThrottleStoreError(f"Failed to write {key!r} to redis: {err}") from err

    def delete(self, key: str) -> None:
        try:
            self._redis.delete(key)
        except redis.RedisError as err:
            raise ThrottleStoreError(f"Failed to delete {key!r} from redis: {err}") from err

    def increment(self, key: str, ttl_seconds: int) -> int:
        """Atomically increment a counter and reset its expiry."""
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        try:
            pipe = self._redis.pipeline()
            pipe.incr(key)
            pipe.expire(key, int(ttl_seconds))
            count, _ = pipe.execute()
        except redis.ResponseError as err:
            # INCR on a non-integer value
            raise ThrottleStoreError(f"Malformed counter stored under {key!r}") from err
        except redis.RedisError as err:
            raise ThrottleStoreError(f"Failed to increment {key!r} in redis: {err}") from err
        return int(count)


class InMemoryThrottleStore:
    """Process-local store with lazy expiry against an injected clock.

    Expired entries are dropped when read, and every ``sweep_interval`` writes
    the whole table is purged so that keys never read again do not pile up.
    """

    def __init__(self, clock: Clock | None = None, *, sweep_interval: int = 1000) -> None:
        if sweep_interval <= 0:
            raise ValueError("sweep_interval must be positive")
        self._clock = clock or SystemClock()
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = Lock()
        self._sweep_interval = sweep_interval
        self._writes = 0

    def _live_value(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock.now() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def _write(self, key: str, value: Any, ttl_seconds: int) -> None:
        # Caller holds the lock.
        now = self._clock.now()
        self._writes += 1
        if self._writes >= self._sweep_interval:
            self._writes = 0
            self._entries = {k: e for k, e in self._entries.items() if e[1] > now}
        self._entries[key] = (value, now + ttl_seconds)

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._live_value(key)

    def set_with_ttl(self, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        with self._lock:
            self._write(key, value, ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def increment(self, key: str, ttl_seconds: int) -> int:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        with self._lock:
            current = self._live_value(key)
            if current is None:
                current = 0
            if isinstance(current, bool) or not isinstance(current, int):
                raise ThrottleStoreError(f"Malformed counter stored under {key!r}")
            count = current + 1
            self._write(key, count, ttl_seconds)
            return count

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for key in list(self._entries) if self._live_value(key) is not None)
