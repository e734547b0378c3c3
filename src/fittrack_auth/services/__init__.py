# src/fittrack_auth/services/__init__.py
"""Business logic services for the FitTrack auth service."""

from .login_throttle import BlockStatus, LoginThrottle, get_login_throttle
from .throttle_store import (
    InMemoryThrottleStore,
    RedisThrottleStore,
    ThrottleStore,
    ThrottleStoreError,
)

__all__ = [
    "BlockStatus",
    "LoginThrottle",
    "get_login_throttle",
    "ThrottleStore",
    "ThrottleStoreError",
    "RedisThrottleStore",
    "InMemoryThrottleStore",
]
