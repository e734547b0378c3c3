# src/fittrack_auth/schemas/__init__.py
"""Pydantic schemas for the FitTrack auth API."""

from .auth import (
    AuthStatusResponse,
    BlockedResponse,
    InvalidCredentialsResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
)

__all__ = [
    "AuthStatusResponse",
    "BlockedResponse",
    "InvalidCredentialsResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
]
