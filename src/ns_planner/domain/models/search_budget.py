"""Search budget domain model."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SearchBudget:
    """Wall-clock deadline for exploration work, on a monotonic clock."""

    deadline: float
    clock: Callable[[], float] = field(default=time.monotonic, compare=False, repr=False)

    @classmethod
    def starting_now(
        cls, seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> SearchBudget:
        return cls(deadline=clock() + seconds, clock=clock)

    def remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(0.0, self.deadline - self.clock())

    def expired(self) -> bool:
        return self.clock() >= self.deadline
