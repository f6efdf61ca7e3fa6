"""Resilience utilities: retry with backoff and concurrent fan-out."""

from weathercards.resilience.fanout import FanOutFetcher, FanOutResult, FanOutSlot
from weathercards.resilience.retry import DEFAULT_POLICY, RetryExecutor, RetryPolicy

__all__ = [
    "DEFAULT_POLICY",
    "FanOutFetcher",
    "FanOutResult",
    "FanOutSlot",
    "RetryExecutor",
    "RetryPolicy",
]
