"""Failed-login throttling with an escalating temporary lockout.

Every failed attempt for an identity/origin fingerprint increments a counter
that lives for a day after its last write, and (re)writes a block whose
duration in seconds equals that counter. A successful login drops the counter
but leaves any block to run out on its own.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from fittrack_auth.core.clock import Clock, SystemClock
from fittrack_auth.core.security import fingerprint
from fittrack_auth.core.settings import settings
from fittrack_auth.services.throttle_store import (
    InMemoryThrottleStore,
    RedisThrottleStore,
    ThrottleStore,
)

logger = logging.getLogger(__name__)

ATTEMPTS_KEY_PREFIX: Final[str] = "login_attempts_"
BLOCK_KEY_PREFIX: Final[str] = "login_block_"
DEFAULT_ATTEMPT_TTL_SECONDS: Final[int] = 86_400
ANONYMOUS_IDENTITY: Final[str] = "anonymous"


@dataclass(frozen=True)
class BlockStatus:
    """Outcome of a block lookup for a fingerprint."""

    blocked: bool
    remaining_seconds: int = 0


NOT_BLOCKED: Final[BlockStatus] = BlockStatus(blocked=False, remaining_seconds=0)


def attempts_key(identity: str, client_ip: str, user_agent: str) -> str:
    return ATTEMPTS_KEY_PREFIX + fingerprint(identity, client_ip, user_agent)


def block_key(identity: str, client_ip: str, user_agent: str) -> str:
    return BLOCK_KEY_PREFIX + fingerprint(identity, client_ip, user_agent)


def _parse_block_record(raw: Any) -> tuple[float, int] | None:
    """Return ``(blocked_at, duration)`` or None when the record is unusable."""
    if not isinstance(raw, Mapping) or not raw.get("blocked"):
        return None
    blocked_at = raw.get("blockedAt")
    duration = raw.get("blockDurationSeconds")
    for value in (blocked_at, duration):
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
    return float(blocked_at), int(duration)  # type: ignore[arg-type]


class LoginThrottle:
    """Tracks failed logins per fingerprint and enforces temporary blocks.

    Store failures are not handled here; they surface as
    :class:`~fittrack_auth.services.throttle_store.ThrottleStoreError` and the
    caller picks the fail-open or fail-closed policy.
    """

    def __init__(
        self,
        store: ThrottleStore,
        clock: Clock | None = None,
        *,
        attempt_ttl_seconds: int = DEFAULT_ATTEMPT_TTL_SECONDS,
    ) -> None:
        if attempt_ttl_seconds <= 0:
            raise ValueError("attempt_ttl_seconds must be positive")
        self._store = store
        self._clock = clock or SystemClock()
        self._attempt_ttl_seconds = int(attempt_ttl_seconds)

    def check_blocked(self, identity: str, client_ip: str, user_agent: str) -> BlockStatus:
        """Return whether the fingerprint is blocked and for how much longer.

        ``remaining_seconds`` is rounded up, so a live block never reports 0.
        """
        key = block_key(identity, client_ip, user_agent)
        parsed = _parse_block_record(self._store.get(key))
        if parsed is None:
            return NOT_BLOCKED
        blocked_at, duration = parsed
        left = blocked_at + duration - self._clock.now()
        if left <= 0:
            return NOT_BLOCKED
        return BlockStatus(blocked=True, remaining_seconds=min(duration, math.ceil(left)))

    def record_failure(self, identity: str, client_ip: str, user_agent: str) -> int:
        """Count a failed attempt, block for that many seconds, return the count."""
        count = self._store.increment(
            attempts_key(identity, client_ip, user_agent),
            self._attempt_ttl_seconds,
        )
        record = {
            "blocked": True,
            "blockedAt": self._clock.now(),
            "blockDurationSeconds": count,
        }
        self._store.set_with_ttl(block_key(identity, client_ip, user_agent), record, count)
        logger.info("Recorded failed login #%d, blocked for %ds", count, count)
        return count

    def clear_failures(self, identity: str, client_ip: str, user_agent: str) -> None:
        """Forget the failure history. An active block is left to expire."""
        self._store.delete(attempts_key(identity, client_ip, user_agent))

    def failure_count(self, identity: str, client_ip: str, user_agent: str) -> int:
        """Return the current failure count, 0 when none is recorded."""
        raw = self._store.get(attempts_key(identity, client_ip, user_agent))
        if isinstance(raw, bool) or not isinstance(raw, int):
            return 0
        return raw

    def reset(self, identity: str, client_ip: str, user_agent: str) -> None:
        """Administrative unlock: drop both the failure count and any block."""
        self._store.delete(attempts_key(identity, client_ip, user_agent))
        self._store.delete(block_key(identity, client_ip, user_agent))
        logger.info("Cleared login throttle state for fingerprint")

    @property
    def attempt_ttl_seconds(self) -> int:
        return self._attempt_ttl_seconds


_store: ThrottleStore | None = None


def build_store() -> ThrottleStore:
    """Return the process-wide store selected by ``THROTTLE_BACKEND``."""
    global _store
    if _store is None:
        if settings.throttle_backend == "memory":
            _store = InMemoryThrottleStore()
        else:
            _store = RedisThrottleStore.from_url(settings.redis_url)
    return _store


def get_login_throttle() -> LoginThrottle:
    """Return a login throttle wired from application settings."""
    return LoginThrottle(
        build_store(),
        attempt_ttl_seconds=settings.login_attempt_ttl_seconds,
    )
