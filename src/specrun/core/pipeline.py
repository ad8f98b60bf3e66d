"""Spec file processing pipeline.

This module defines a mixin responsible for running the registered
spec files: optionally shuffling their order, dispatching `load` and
`unload` actions around each file, and executing each file's top-level
code under protection so that a broken file never stops the run.
"""

from random import Random
from runpy import run_path
from typing import TYPE_CHECKING

import structlog

from specrun.core.registry import Phase

if TYPE_CHECKING:
    from collections.abc import Callable, MutableSequence

if TYPE_CHECKING:
    from specrun.core.protect import Outcome
    from specrun.core.registry import ActionRegistry
    from specrun.settings import RunnerSettings

log = structlog.get_logger('specrun.core.pipeline')


class FilePipelineMixin:
    """Mixin defining the per-file load/execute/unload sequence.

    Implementers provide the settings, the action registry, the
    protected executor and the DSL namespace exposed to spec files.

    Attributes:
        file: Spec file currently being processed, if any.
        random: Random generator used to shuffle the file order.
    """

    settings: 'RunnerSettings'
    registry: 'ActionRegistry'

    file: str | None = None
    random: Random

    def protect(self, label: str | None, block: 'Callable[[], object]') -> 'Outcome[object]':
        raise NotImplementedError  # pragma: no cover

    def dsl(self) -> dict[str, object]:
        raise NotImplementedError  # pragma: no cover

    def shuffle(self, items: 'MutableSequence[object]') -> None:
        """Shuffle a sequence in place.

        Every position `i` is swapped with a uniformly chosen position
        of the remaining unshuffled suffix `[i, n - 1]`, so that every
        permutation is equally likely.

        Args:
            items: Sequence to shuffle; an empty sequence is left as is.
        """
        size = len(items)
        for index in range(size):
            other = self.random.randint(index, size - 1)
            items[index], items[other] = items[other], items[index]

    def files(self) -> None:
        """Run every registered spec file.

        `unload` actions are dispatched for a file regardless of whether
        its top-level code raised.
        """
        files = list(self.settings.files)
        if self.settings.randomize:
            self.shuffle(files)

        for file in files:
            self.file = file
            log.debug('Loading spec file', file=file)

            self.actions(Phase.LOAD)
            self.protect(f'loading {file}', lambda file=file: self.load(file))
            self.actions(Phase.UNLOAD)

        self.file = None

    def load(self, file: str) -> None:
        """Execute the top-level code of a spec file.

        Each file runs in a fresh namespace seeded with the DSL.

        Args:
            file: Spec file path.
        """
        run_path(file, init_globals=self.dsl(), run_name='__spec__')

    def actions(self, phase: Phase | str, *args: object) -> None:
        """Dispatch the actions registered for a phase."""
        self.registry.dispatch(phase, *args)
