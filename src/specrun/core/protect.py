"""Protected execution of spec code.

Spec code is user code: any exception it raises must be captured and
attributed instead of aborting the run. `protect` runs a block and
returns an `Outcome` holding either the block result or the captured
fault, which the kernel inspects to decide where the fault goes.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class Outcome[T]:
    """Result of a protected block: a value or a fault, never both."""

    __slots__ = ('fault', 'value')

    def __init__(self, value: T | None = None, *,
                 fault: Exception | None = None) -> None:
        """Initialize an outcome.

        Args:
            value: Result of the block, if it completed.
            fault: Exception raised by the block, if any.
        """
        self.value = value
        self.fault = fault

    @property
    def ok(self) -> bool:
        """Return True if the block completed without a fault."""
        return self.fault is None

    def __repr__(self) -> str:
        if self.fault is not None:
            return f'Outcome(fault={self.fault!r})'

        return f'Outcome(value={self.value!r})'


def protect[T](block: 'Callable[[], T]') -> Outcome[T]:
    """Run a block, capturing any exception it raises.

    `KeyboardInterrupt` and `SystemExit` are not captured so that a run
    can still be interrupted.

    Args:
        block: Callable to run.

    Returns:
        Outcome with the block result or the captured exception.
    """
    try:
        return Outcome(block())

    except Exception as error:  # noqa: BLE001
        return Outcome(fault=error)
