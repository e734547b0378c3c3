"""Helpers for looking up and creating login accounts."""
from __future__ import annotations

from sqlalchemy import or_
from sqlalchemy.orm import Session

from fittrack_auth.core import security
from fittrack_auth.models.user import User

__all__ = [
    "UserExistsError",
    "get_user_by_identifier",
    "get_user",
    "create_user",
    "authenticate",
]


class UserExistsError(ValueError):
    """Raised when a username or email is already taken."""


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single user by primary key."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_identifier(db: Session, identifier: str) -> User | None:
    """Return the user whose username or email matches ``identifier``."""
    if not identifier:
        return None
    return (
        db.query(User)
        .filter(or_(User.username == identifier, User.email == identifier))
        .first()
    )


def create_user(
    db: Session,
    username: str,
    password: str,
    *,
    email: str | None = None,
    is_active: bool = True,
) -> User:
    """Persist a new user with an Argon2 password hash."""
    if get_user_by_identifier(db, username) is not None or (
        email and get_user_by_identifier(db, email) is not None
    ):
        raise UserExistsError(f"User {username!r} already exists")
    db_user = User(
        username=username,
        email=email,
        password_hash=security.hash_password(password),
        is_active=is_active,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def authenticate(db: Session, identifier: str, password: str) -> User | None:
    """Return the matching user if the password verifies, otherwise None.

    Unknown identifiers still pay for a hash verification.
    """
    user = get_user_by_identifier(db, identifier)
    if user is None:
        security.verify_password(password, None)
        return None
    if not security.verify_password(password, user.password_hash):
        return None
    return user
