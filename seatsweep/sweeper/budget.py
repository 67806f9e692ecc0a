"""Loop limits for a sweep run."""

import os
import time
from dataclasses import dataclass


DEFAULT_MAX_ITERATIONS = 100
DEFAULT_RELOAD_EVERY = 5


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str) -> float | None:
    value = os.getenv(key)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class SweepBudget:
    """
    How long a sweep may run.

    Attributes:
        max_iterations: Hard ceiling on loop iterations (runaway guard).
        deadline_seconds: Optional wall-clock limit for the loop.
        reload_every: Force a page reload after this many deletions.
    """

    max_iterations: int = DEFAULT_MAX_ITERATIONS
    deadline_seconds: float | None = None
    reload_every: int = DEFAULT_RELOAD_EVERY

    @classmethod
    def from_env(cls) -> "SweepBudget":
        return cls(
            max_iterations=_env_int("SWEEP_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS),
            deadline_seconds=_env_float("SWEEP_DEADLINE_SECONDS"),
            reload_every=_env_int("SWEEP_RELOAD_EVERY", DEFAULT_RELOAD_EVERY),
        )

    def start_clock(self, clock=time.monotonic) -> "BudgetClock":
        return BudgetClock(self, clock)


class BudgetClock:
    """Tracks elapsed time against a budget's deadline."""

    def __init__(self, budget: SweepBudget, clock=time.monotonic):
        self.budget = budget
        self._clock = clock
        self._started = clock()

    def elapsed(self) -> float:
        return self._clock() - self._started

    def expired(self) -> bool:
        if self.budget.deadline_seconds is None:
            return False
        return self.elapsed() >= self.budget.deadline_seconds
