"""Example filters.

Filters are registered for the `include` or `exclude` phase and are
consulted with the full description of every example before it runs.
"""

from typing import TYPE_CHECKING

import structlog

from specrun.core.registry import FILTER_PHASES, Phase
from specrun.core.tags import tag_descriptions

if TYPE_CHECKING:
    from specrun.core import Kernel

log = structlog.get_logger('specrun.actions.filters')


class MatchFilter:
    """Filter matching examples whose description contains a pattern."""

    def __init__(self, phase: Phase | str, *patterns: str) -> None:
        """Initialize a filter.

        Args:
            phase: Either `include` or `exclude`.
            *patterns: Substrings matched against example descriptions.

        Raises:
            ValueError: If the phase is not a filter phase.
        """
        self.phase = Phase(phase)
        if self.phase not in FILTER_PHASES:
            raise ValueError(f'{self.phase.value!r} is not a filter phase')

        self.patterns = patterns

    def matches(self, description: str) -> bool:
        """Return True if the description contains any pattern."""
        return any(pattern in description for pattern in self.patterns)

    def include(self, description: str) -> bool:
        return self.matches(description)

    def exclude(self, description: str) -> bool:
        return self.matches(description)

    def register(self, kernel: 'Kernel') -> None:
        """Register the filter with a kernel."""
        kernel.register(self.phase, self)

    def unregister(self, kernel: 'Kernel') -> None:
        """Remove the filter from a kernel."""
        kernel.unregister(self.phase, self)


class TagFilter(MatchFilter):
    """Filter matching examples tagged in the current spec file.

    The tags of each spec file are read when the file is loaded; an
    example matches if its full description equals the description of
    one of the tags of the configured kinds.
    """

    def __init__(self, phase: Phase | str, *kinds: str) -> None:
        """Initialize a tag filter.

        Args:
            phase: Either `include` or `exclude`.
            *kinds: Tag kinds to read.
        """
        super().__init__(phase)

        self.kinds = kinds
        self.descriptions: set[str] = set()
        self.kernel: Kernel | None = None

    def load(self) -> None:
        """Read the tags of the spec file being loaded."""
        if self.kernel is None:
            return

        self.descriptions = tag_descriptions(self.kernel.read_tags(*self.kinds))
        log.debug('Tags loaded', file=self.kernel.file, tags=len(self.descriptions))

    def matches(self, description: str) -> bool:
        """Return True if the description is tagged."""
        return description in self.descriptions

    def register(self, kernel: 'Kernel') -> None:
        """Register the filter with a kernel."""
        self.kernel = kernel
        kernel.register(Phase.LOAD, self)
        super().register(kernel)

    def unregister(self, kernel: 'Kernel') -> None:
        """Remove the filter from a kernel."""
        kernel.unregister(Phase.LOAD, self)
        super().unregister(kernel)
        self.kernel = None
