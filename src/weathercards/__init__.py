"""Random user profiles with the current weather at their location."""

__version__ = "0.1.0"
