# src/fittrack_auth/models/__init__.py
"""SQLAlchemy models for the FitTrack auth service."""

from .user import User

__all__ = ["User"]
