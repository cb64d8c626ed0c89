"""Injectable sources of randomness and time."""

import asyncio
import random
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional


class RandomSource(ABC):
    """Abstract source of the random values used by the mock lookup."""

    @abstractmethod
    def random(self) -> float:
        """Return a float in the half-open range [0.0, 1.0)."""
        pass

    @abstractmethod
    def randrange(self, start: int, stop: int) -> int:
        """Return an integer in the half-open range [start, stop)."""
        pass


class SystemRandomSource(RandomSource):
    """RandomSource backed by the standard ``random`` module."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def random(self) -> float:
        return self._random.random()

    def randrange(self, start: int, stop: int) -> int:
        return self._random.randrange(start, stop)


class Clock(ABC):
    """Abstract clock used for timestamps and the artificial delay."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the current task for the given number of seconds."""
        pass


class SystemClock(Clock):
    """Wall clock with non-blocking sleep."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


def isoformat_utc(moment: datetime) -> str:
    """Encode a datetime as ISO-8601 UTC with millisecond precision.

    >>> isoformat_utc(datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc))
    '2024-05-01T12:30:00.000Z'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
