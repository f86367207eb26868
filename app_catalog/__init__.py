"""App Store catalog service for a developer portfolio."""

__version__ = "1.0.0"
