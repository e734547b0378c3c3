"""Operational scripts for the FitTrack auth service."""
