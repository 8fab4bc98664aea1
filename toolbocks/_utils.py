"""Internal helpers for toolbocks."""

from __future__ import annotations

from dataclasses import dataclass, field

MAX_ITERATIONS = 10_000


@dataclass
class IterationCap:
    """Caps a loop that might otherwise never terminate.

    The counter is owned by the caller, never by the module.

    Usage:
        cap = IterationCap(10)
        while condition() and not cap.reached:
            change_condition()
    """

    max_iterations: int = MAX_ITERATIONS
    iterations: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        try:
            limit = int(self.max_iterations)
        except (TypeError, ValueError):
            limit = MAX_ITERATIONS
        self.max_iterations = min(max(1, limit), MAX_ITERATIONS)

    @property
    def reached(self) -> bool:
        """True once the limit has been reached.

        Each read counts as one iteration.
        """
        reached = self.iterations >= self.max_iterations
        self.iterations += 1
        return reached

    @property
    def remaining(self) -> int:
        return max(0, self.max_iterations - self.iterations)
