"""Client for the medical appointment booking platform."""

__version__ = "1.0.0"
