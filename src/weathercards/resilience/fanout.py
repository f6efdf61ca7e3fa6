"""Concurrent fan-out over independent fetches."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

logger = logging.getLogger(__name__)

D = TypeVar("D")
T = TypeVar("T")


@dataclass
class FanOutSlot(Generic[T]):
    """Outcome of one fetch, aligned with its input index."""

    value: T | None
    succeeded: bool
    error: BaseException | None = None


@dataclass
class FanOutResult(Generic[T]):
    """Ordered fan-out outcomes plus a success tally."""

    slots: list[FanOutSlot[T]] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for slot in self.slots if slot.succeeded)

    @property
    def total(self) -> int:
        return len(self.slots)

    @property
    def values(self) -> list[T | None]:
        """Values in input order, None where the fetch failed."""
        return [slot.value for slot in self.slots]

    def __len__(self) -> int:
        return len(self.slots)

    def __getitem__(self, index: int) -> FanOutSlot[T]:
        return self.slots[index]


class FanOutFetcher:
    """
    Runs N independent fetches concurrently.

    One failing fetch never cancels the others; it shows up as an
    unsuccessful slot in the result.
    """

    def __init__(self, label: str = "fetch") -> None:
        self._label = label

    async def fetch_all(
        self,
        items: Sequence[D],
        fetch: Callable[[D], Awaitable[T]],
    ) -> FanOutResult[T]:
        """
        Fetch every item concurrently.

        Args:
            items: Fetch descriptors
            fetch: Coroutine function applied to each descriptor

        Returns:
            FanOutResult with result[i] matching items[i]
        """
        if not items:
            return FanOutResult()

        async def fetch_one(item: D) -> T:
            return await fetch(item)

        outcomes = await asyncio.gather(
            *(fetch_one(item) for item in items),
            return_exceptions=True,
        )

        result: FanOutResult[T] = FanOutResult()
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.warning(f"{self._label} #{index} failed: {outcome}")
                result.slots.append(FanOutSlot(value=None, succeeded=False, error=outcome))
            else:
                result.slots.append(FanOutSlot(value=outcome, succeeded=True))

        logger.info(
            f"{self._label}: {result.success_count} of {result.total} succeeded"
        )
        return result
