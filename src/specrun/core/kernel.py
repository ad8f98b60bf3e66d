"""Kernel driving a spec run.

The kernel ties together the action registry, the describe scope
stack, protected execution and the file pipeline. Spec files talk to
the kernel through the DSL namespace it seeds them with:

    @describe('Stack')
    def _():
        @it('is empty when created')
        def _():
            check(Stack().empty(), 'expected a new stack to be empty')

A run is `process`: dispatch `start` actions, run every file, dispatch
`finish` actions.
"""

from random import Random
from typing import TYPE_CHECKING, overload

import structlog
from click import echo

from specrun.core.pipeline import FilePipelineMixin
from specrun.core.protect import Outcome, protect
from specrun.core.registry import ActionRegistry, Phase
from specrun.core.state import RunState, StateStack
from specrun.core.tags import SpecTag, TagStore
from specrun.errors import ErrorFormatter, ExpectationNotMetError, SpecError
from specrun.settings import Mode, RunnerSettings

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from specrun.core.state import Block, BlockScope, ExampleState

log = structlog.get_logger('specrun.core.kernel')

#: Message of a failed `check` without an explicit message.
DEFAULT_CHECK_MESSAGE = 'Expected condition to be true'


class Kernel(FilePipelineMixin):
    """Spec runner kernel.

    Settings are set once before `process` and read-only during the run.
    The exit code starts at 0 and becomes 1 on any captured fault.
    """

    def __init__(self, settings: RunnerSettings | None = None, *,
                 registry: ActionRegistry | None = None,
                 tag_store: TagStore | None = None) -> None:
        """Initialize a kernel.

        Args:
            settings: Runner settings; defaults are used if omitted.
            registry: Action registry; a new empty one if omitted.
            tag_store: Tag store; built from the settings rewrite rules
                if omitted.
        """
        self.settings = settings or RunnerSettings()
        self.registry = registry or ActionRegistry()
        self.tag_store = tag_store or TagStore(self.settings.tags_patterns)

        self.stack = StateStack()
        self.random = Random(self.settings.seed)  # noqa: S311

        self.file = None
        self.exit_code = 0

    def process(self) -> int:
        """Run every registered spec file.

        Returns:
            The exit code of the run.
        """
        log.debug('Starting run', files=len(self.settings.files), mode=self.settings.mode.value)

        self.actions(Phase.START)
        self.files()
        self.actions(Phase.FINISH)

        return self.exit_code

    def register(self, phase: Phase | str, action: object) -> None:
        """Register an action for a phase of the run."""
        self.registry.register(phase, action)

    def unregister(self, phase: Phase | str, action: object) -> None:
        """Remove an action from a phase of the run."""
        self.registry.unregister(phase, action)

    def register_exit(self, code: int) -> None:
        """Set the exit code of the run."""
        self.exit_code = code

    @property
    def current(self) -> RunState | None:
        """Return the innermost describe scope, if any."""
        return self.stack.current

    @property
    def mode(self) -> Mode:
        """Return the execution mode."""
        return self.settings.mode

    @property
    def verify_mode(self) -> bool:
        return self.mode == Mode.VERIFY

    @property
    def report_mode(self) -> bool:
        return self.mode == Mode.REPORT

    @property
    def pretend_mode(self) -> bool:
        return self.mode == Mode.PRETEND

    @property
    def dry_run(self) -> bool:
        """Return True if spec code of examples must not be executed."""
        return self.pretend_mode or self.report_mode

    def protect(self, label: str | None, block: 'Callable[[], object]') -> Outcome[object]:
        """Run spec code, isolating any fault it raises.

        A fault sets the exit code to 1. It is recorded on the current
        describe scope if there is one; otherwise a diagnostic is
        written to the standard error stream, unless the runner is quiet.

        Args:
            label: Label of the block, e.g. `loading <file>`.
            block: Spec code to run.

        Returns:
            Outcome of the block.
        """
        outcome = protect(block)
        if outcome.fault is None:
            return outcome

        self.register_exit(1)

        if (state := self.current) is not None:
            state.record_fault(label, outcome.fault)
        elif not self.settings.quiet:
            echo(ErrorFormatter.format_diagnostic(f'{label}', outcome.fault), err=True, nl=False)

        log.debug('Fault captured', label=label, fault=type(outcome.fault).__name__)

        return outcome

    def selected(self, description: str) -> bool:
        """Return True if the filters select an example.

        An example is selected if no include filter is registered or any
        include filter matches it, and no exclude filter matches it.
        """
        if self.registry.handlers(Phase.INCLUDE) and not self.registry.matches(Phase.INCLUDE, description):
            return False

        return not self.registry.matches(Phase.EXCLUDE, description)

    @overload
    def describe(self, text: str, block: None = None) -> 'Callable[[Block], Block]':
        ...  # pragma: no cover

    @overload
    def describe(self, text: str, block: 'Block') -> 'Block':
        ...  # pragma: no cover

    def describe(self, text: str, block: 'Block | None' = None) -> 'Block | Callable[[Block], Block]':
        """Run a describe scope.

        May be used directly or as a decorator of the scope body.

        A nested scope runs as soon as it is declared, while the body of
        the enclosing scope is still running: its examples complete
        before any example or `:all` block of the enclosing scope, and
        `before` and `after` blocks of the enclosing scope do not apply
        to them.

        Args:
            text: Text of the scope.
            block: Body declaring examples and nested scopes.

        Returns:
            The body, or a decorator if the body is omitted.
        """
        if block is None:
            return lambda body: self.describe(text, body)

        state = self.stack.push(RunState(self, text, parent=self.current))
        try:
            state.describe(block)
            state.process()
        finally:
            self.stack.pop()

        return block

    def it(self, text: str, block: 'Block | None' = None) -> 'Block | Callable[[Block], Block]':
        """Declare an example in the current describe scope.

        May be used directly or as a decorator of the example body.

        Raises:
            SpecError: If called outside any describe scope.
        """
        if block is None:
            return lambda body: self.it(text, body)

        self._require_scope('it').it(text, block)

        return block

    def before(self, block: 'Block | None' = None, *,
               scope: 'BlockScope' = 'each') -> 'Block | Callable[[Block], Block]':
        """Declare a block run before each (or all) examples of the scope."""
        if block is None:
            return lambda body: self.before(body, scope=scope)

        self._require_scope('before').before(block, scope)

        return block

    def after(self, block: 'Block | None' = None, *,
              scope: 'BlockScope' = 'each') -> 'Block | Callable[[Block], Block]':
        """Declare a block run after each (or all) examples of the scope."""
        if block is None:
            return lambda body: self.after(body, scope=scope)

        self._require_scope('after').after(block, scope)

        return block

    def check(self, condition: object, message: str | None = None) -> None:
        """Check an expectation of the running example.

        `expectation` actions are dispatched before the condition is
        evaluated.

        Args:
            condition: Value expected to be truthy.
            message: Failure message.

        Raises:
            ExpectationNotMetError: If the condition is falsy.
        """
        self.actions(Phase.EXPECTATION, self.example)

        if not condition:
            raise ExpectationNotMetError(message or DEFAULT_CHECK_MESSAGE)

    @property
    def example(self) -> 'ExampleState | None':
        """Return the state of the running example, if any."""
        if (state := self.current) is None:
            return None

        return state.state

    def dsl(self) -> dict[str, object]:
        """Build the namespace a spec file is executed with."""
        return {
            'describe': self.describe,
            'it': self.it,
            'before': self.before,
            'after': self.after,
            'check': self.check,
            'kernel': self,
        }

    def tags_file(self) -> str:
        """Return the tag file path of the current spec file."""
        return f'{self.tag_store.tags_file(self._require_file())}'

    def read_tags(self, *kinds: str) -> list[SpecTag]:
        """Read tags of given kinds for the current spec file."""
        return self.tag_store.read_tags(self._require_file(), *kinds)

    def write_tag(self, tag: SpecTag) -> bool:
        """Write a tag for the current spec file."""
        return self.tag_store.write_tag(self._require_file(), tag)

    def delete_tag(self, tag: SpecTag) -> bool:
        """Delete a tag from the current spec file."""
        return self.tag_store.delete_tag(self._require_file(), tag)

    def _require_scope(self, name: str) -> RunState:
        """Return the current scope or fail for calls outside describe."""
        if (state := self.current) is None:
            raise SpecError(f'{name!r} must be called inside a describe scope')

        return state

    def _require_file(self) -> str:
        """Return the current spec file or fail outside a file run."""
        if self.file is None:
            raise SpecError('No spec file is being processed')

        return self.file
