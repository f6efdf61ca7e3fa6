"""Wall-clock time source in epoch milliseconds."""

import time
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Current time as milliseconds since the epoch."""
    return int(time.time() * 1000)
