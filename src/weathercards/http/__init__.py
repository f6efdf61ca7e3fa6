"""HTTP fetch capability."""

from weathercards.http.client import HttpClient

__all__ = ["HttpClient"]
