"""Measurement of the run duration."""

from time import perf_counter
from typing import TYPE_CHECKING

from specrun.core.registry import Phase

if TYPE_CHECKING:
    from specrun.core import Kernel


class TimerAction:
    """Action measuring the time between `start` and `finish`."""

    def __init__(self) -> None:
        self.started: float | None = None
        self.finished: float | None = None

    def register(self, kernel: 'Kernel') -> None:
        """Register the action with a kernel."""
        kernel.register(Phase.START, self)
        kernel.register(Phase.FINISH, self)

    def start(self) -> None:
        self.started = perf_counter()

    def finish(self) -> None:
        self.finished = perf_counter()

    @property
    def elapsed(self) -> float:
        """Return the elapsed seconds, or 0 if the run did not finish."""
        if self.started is None or self.finished is None:
            return 0.0

        return self.finished - self.started

    def format(self) -> str:
        """Format the duration line of the run."""
        return f'Finished in {self.elapsed:f} seconds'
