"""Specification document formatter."""

from typing import TYPE_CHECKING

from specrun.core.registry import Phase
from specrun.core.state import ExampleState

from .base import BaseFormatter

if TYPE_CHECKING:
    from specrun.core import Kernel
    from specrun.core.state import FaultLog


class SpecdocFormatter(BaseFormatter):
    """Formatter printing the run as a specification document.

    Every describe scope is printed as a heading and every example as
    a `- ` item, suffixed with `(FAILED - n)` or `(ERROR - n)` where `n`
    refers to the numbered fault report printed at `finish`.
    """

    def register(self, kernel: 'Kernel') -> None:
        super().register(kernel)
        kernel.register(Phase.ENTER, self)

    def enter(self, description: str) -> None:
        self.print(f'\n{description}\n')

    def after(self, state: 'FaultLog') -> None:
        text = state.it if isinstance(state, ExampleState) else '<describe>'
        self.print(f'- {text}')

        if state.has_faults:
            self.record(state)
            first = sum(len(item.faults) for item in self.states[:-1]) + 1
            self.print(f' ({self.outcome(state)} - {first})')

        self.print('\n')
