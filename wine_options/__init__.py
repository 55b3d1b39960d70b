"""Wine Options - label inference and quiz generation service."""

__version__ = "1.0.0"
