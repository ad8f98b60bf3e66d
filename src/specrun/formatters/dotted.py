"""Dotted progress formatter."""

from typing import TYPE_CHECKING

from .base import BaseFormatter

if TYPE_CHECKING:
    from specrun.core.state import FaultLog


class DottedFormatter(BaseFormatter):
    """Formatter printing one character per example.

    Prints `.` for a passing example, `F` for a failure and `E` for an
    error, then the fault reports and the run summary at `finish`.
    """

    def after(self, state: 'FaultLog') -> None:
        if not state.has_faults:
            self.print('.')
            return

        self.record(state)
        self.print('F' if state.failure else 'E')
