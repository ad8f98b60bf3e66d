"""Shared reporter behavior.

Formatters are actions: they receive every example state through
`after` and print a report at `finish`. This module defines the base
class collecting faulty states and rendering their fault reports.
"""

import sys
from typing import TYPE_CHECKING

from specrun.actions import TallyAction, TimerAction
from specrun.core.registry import Phase
from specrun.errors import ErrorFormatter

if TYPE_CHECKING:
    from typing import TextIO

if TYPE_CHECKING:
    from specrun.core import Kernel
    from specrun.core.state import FaultLog


class BaseFormatter:
    """Base formatter collecting faulty states.

    Subclasses implement `after` to print per-example progress and call
    `record` for states with faults.
    """

    def __init__(self, out: 'TextIO | None' = None) -> None:
        """Initialize a formatter.

        Args:
            out: Output stream; standard output if omitted.
        """
        self.out = out
        self.states: list[FaultLog] = []
        self.count = 0

        self.timer = TimerAction()
        self.tally = TallyAction()

    def register(self, kernel: 'Kernel') -> None:
        """Register the formatter and its timer and tally with a kernel."""
        self.timer.register(kernel)
        self.tally.register(kernel)

        kernel.register(Phase.AFTER, self)
        kernel.register(Phase.FINISH, self)

    def print(self, *args: str) -> None:
        (self.out or sys.stdout).write(''.join(args))

    def outcome(self, state: 'FaultLog') -> str:
        """Return `FAILED` or `ERROR` for a state with faults."""
        return 'FAILED' if state.failure else 'ERROR'

    def record(self, state: 'FaultLog') -> None:
        """Keep a faulty state for the final report."""
        self.states.append(state)

    def after(self, state: 'FaultLog') -> None:
        raise NotImplementedError  # pragma: no cover

    def finish(self) -> None:
        """Print the fault reports followed by the run summary."""
        self.print('\n')
        self.print_faults()
        self.print(f'\n{self.timer.format()}\n\n{self.tally.format()}\n')

    def print_faults(self) -> None:
        """Print a numbered report for every captured fault."""
        for state in self.states:
            outcome = self.outcome(state)
            for message, error in state.faults:
                self.count += 1
                self.print(f'\n{self.count})\n{state.description} {outcome}\n')
                if message:
                    self.print(f'{type(error).__name__} occurred during: {message}\n')
                self.print(ErrorFormatter.describe_fault(error))
                self.print('\n')
                self.print(ErrorFormatter.format_traceback(error))
                self.print('\n')
