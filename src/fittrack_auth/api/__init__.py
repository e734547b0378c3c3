"""HTTP API for the FitTrack auth service."""
