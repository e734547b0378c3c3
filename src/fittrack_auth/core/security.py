"""Password hashing and throttle fingerprint helpers."""
from __future__ import annotations

import hashlib

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()

# Verified against when the account does not exist.
_DUMMY_HASH = _hasher.hash("fittrack-auth-dummy-password")

FINGERPRINT_SEPARATOR = "\x00"


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """Verify a password against its Argon2 hash.

    A missing hash is still run through the hasher against a dummy value and
    always fails.
    """
    if not password_hash:
        try:
            _hasher.verify(_DUMMY_HASH, password)
        except VerificationError:
            pass
        return False
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def fingerprint(identity: str, client_ip: str, user_agent: str) -> str:
    """Return a stable SHA-256 fingerprint for an identity/origin tuple.

    Fields are joined with a NUL separator so that ("ab", "c") and ("a", "bc")
    never collide.
    """
    payload = FINGERPRINT_SEPARATOR.join((identity, client_ip, user_agent))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
