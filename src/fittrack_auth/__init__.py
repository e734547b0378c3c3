"""FitTrack authentication service with failed-login throttling."""

__version__ = "0.1.0"
