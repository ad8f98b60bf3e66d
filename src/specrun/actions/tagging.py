"""Actions maintaining and listing spec tags."""

import sys
from typing import TYPE_CHECKING

from specrun.core.registry import Phase
from specrun.core.state import ExampleState
from specrun.core.tags import SpecTag, tag_descriptions

if TYPE_CHECKING:
    from typing import TextIO

if TYPE_CHECKING:
    from specrun.core import Kernel
    from specrun.core.state import FaultLog


class TagAction:
    """Action tagging examples by their outcome.

    In normal mode, every example with faults is tagged with the
    configured kind. In verify mode, the tag is deleted for every
    example that passed, so that stale known-failure tags are purged.

    Attributes:
        written: Tags written during the run.
        deleted: Tags deleted during the run.
    """

    def __init__(self, kind: str, comment: str | None = None) -> None:
        """Initialize a tag action.

        Args:
            kind: Tag kind to write or delete.
            comment: Optional comment stored with written tags.
        """
        self.kind = kind
        self.comment = comment
        self.kernel: Kernel | None = None

        self.written: list[SpecTag] = []
        self.deleted: list[SpecTag] = []

    def register(self, kernel: 'Kernel') -> None:
        """Register the action with a kernel."""
        self.kernel = kernel
        kernel.register(Phase.AFTER, self)

    def after(self, state: 'FaultLog') -> None:
        if self.kernel is None or not isinstance(state, ExampleState):
            return

        tag = SpecTag(tag=self.kind, comment=self.comment, description=state.description)

        if self.kernel.verify_mode:
            if not state.has_faults and self.kernel.delete_tag(tag):
                self.deleted.append(tag)
        elif state.has_faults and self.kernel.write_tag(tag):
            self.written.append(tag)


class TagListAction:
    """Action printing the descriptions of tagged examples.

    Intended for report mode, where examples are visited but not run.
    """

    def __init__(self, *kinds: str, out: 'TextIO | None' = None) -> None:
        """Initialize a tag list action.

        Args:
            *kinds: Tag kinds to list.
            out: Output stream; standard output if omitted.
        """
        self.kinds = kinds
        self.out = out
        self.kernel: Kernel | None = None
        self.descriptions: set[str] = set()

    def register(self, kernel: 'Kernel') -> None:
        """Register the action with a kernel."""
        self.kernel = kernel
        kernel.register(Phase.LOAD, self)
        kernel.register(Phase.AFTER, self)

    def load(self) -> None:
        if self.kernel is not None:
            self.descriptions = tag_descriptions(self.kernel.read_tags(*self.kinds))

    def after(self, state: 'FaultLog') -> None:
        if isinstance(state, ExampleState) and state.description in self.descriptions:
            (self.out or sys.stdout).write(f'{state.description}\n')
