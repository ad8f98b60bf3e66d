"""Counting of run results."""

from typing import TYPE_CHECKING

from specrun.core.registry import Phase
from specrun.core.state import ExampleState

if TYPE_CHECKING:
    from specrun.core import Kernel
    from specrun.core.state import FaultLog


class Tally:
    """Counters of a run."""

    def __init__(self) -> None:
        self.files = 0
        self.examples = 0
        self.expectations = 0
        self.failures = 0
        self.errors = 0

    @staticmethod
    def _plural(count: int, noun: str) -> str:
        if count == 1:
            return f'{count} {noun}'

        return f'{count} {noun}s'

    def format(self) -> str:
        """Format the counters as a single summary line.

        Returns:
            Summary such as `1 file, 2 examples, 3 expectations, 0 failures, 0 errors`.
        """
        return ', '.join((
            self._plural(self.files, 'file'),
            self._plural(self.examples, 'example'),
            self._plural(self.expectations, 'expectation'),
            self._plural(self.failures, 'failure'),
            self._plural(self.errors, 'error'),
        ))


class TallyAction:
    """Action counting files, examples, expectations and faults.

    A describe scope with faults of its own counts as a failure or an
    error, but not as an example.
    """

    def __init__(self) -> None:
        self.counter = Tally()

    def register(self, kernel: 'Kernel') -> None:
        """Register the action with a kernel."""
        kernel.register(Phase.LOAD, self)
        kernel.register(Phase.EXPECTATION, self)
        kernel.register(Phase.AFTER, self)

    def unregister(self, kernel: 'Kernel') -> None:
        """Remove the action from a kernel."""
        kernel.unregister(Phase.LOAD, self)
        kernel.unregister(Phase.EXPECTATION, self)
        kernel.unregister(Phase.AFTER, self)

    def load(self) -> None:
        self.counter.files += 1

    def expectation(self, state: 'ExampleState | None') -> None:  # noqa: ARG002
        self.counter.expectations += 1

    def after(self, state: 'FaultLog') -> None:
        if isinstance(state, ExampleState):
            self.counter.examples += 1

        if not state.has_faults:
            return

        if state.failure:
            self.counter.failures += 1
        else:
            self.counter.errors += 1

    def format(self) -> str:
        """Format the summary line of the run."""
        return self.counter.format()
