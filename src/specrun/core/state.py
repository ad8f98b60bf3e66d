"""Run states of describe scopes and examples.

A `RunState` represents one `describe` scope: its description, the
examples and before/after blocks declared in it, and the faults
captured while it was the innermost scope. Scopes nest through an
explicit `StateStack` owned by the kernel; the `parent` link of a
state is informational only.

An `ExampleState` is the record of a single example run, handed to
`before`, `expectation` and `after` actions.
"""

from typing import TYPE_CHECKING, Literal

import structlog

from specrun.core.registry import Phase

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from specrun.core.kernel import Kernel

log = structlog.get_logger('specrun.core.state')

#: A captured fault: label of the protected block and the exception.
type Fault = tuple[str | None, BaseException]

#: Spec code block.
type Block = Callable[[], object]

#: When a before/after block runs.
type BlockScope = Literal['each', 'all']


def one_line(text: str) -> str:
    """Join the lines of a description with single spaces."""
    return ' '.join(text.splitlines())


class FaultLog:
    """Ordered record of faults captured while running spec code.

    Faults are classified for reporting: expectation mismatches
    (`AssertionError` and its subclasses) are failures, every other
    fault is an error.
    """

    description: str

    def __init__(self) -> None:
        """Initialize an empty fault log."""
        self.faults: list[Fault] = []

    def record_fault(self, message: str | None, fault: BaseException) -> None:
        """Append a captured fault.

        Args:
            message: Label of the protected block that raised.
            fault: Raised exception.
        """
        self.faults.append((message, fault))

    @staticmethod
    def is_failure(fault: BaseException) -> bool:
        """Return True if the fault is an expectation mismatch."""
        return isinstance(fault, AssertionError)

    @property
    def has_faults(self) -> bool:
        """Return True if any fault was captured."""
        return bool(self.faults)

    @property
    def failure(self) -> bool:
        """Return True if every captured fault is an expectation mismatch.

        An empty log is failure-style by vacuous truth; it is never
        reported since it implies that nothing went wrong.
        """
        return all(self.is_failure(fault) for _, fault in self.faults)


class ExampleState(FaultLog):
    """State of a single example run."""

    def __init__(self, scope: 'RunState', it: str) -> None:
        """Initialize an example state.

        Args:
            scope: Describe scope declaring the example.
            it: Example text.
        """
        super().__init__()

        self.scope = scope
        self.it = it
        self.description = one_line(f'{scope.description} {it}').strip()

    def __repr__(self) -> str:
        return f'<ExampleState {self.description!r} faults={len(self.faults)}>'


class RunState(FaultLog):
    """State of a describe scope.

    The state collects examples and before/after blocks while the body
    of its `describe` runs, then processes them. Faults raised outside
    of any example (in the describe body or in `:all` blocks) are
    recorded on the scope itself.
    """

    def __init__(self, kernel: 'Kernel', text: str,
                 parent: 'RunState | None' = None) -> None:
        """Initialize a describe scope state.

        Args:
            kernel: Kernel running the scope.
            text: Text of the describe scope.
            parent: Enclosing scope, if any.
        """
        super().__init__()

        self.kernel = kernel
        self.text = text
        self.parent = parent

        self.description = one_line(text)
        if parent and parent.description:
            self.description = f'{parent.description} {self.description}'

        self.examples: list[tuple[str, Block]] = []
        self.before_blocks: dict[BlockScope, list[Block]] = {'each': [], 'all': []}
        self.after_blocks: dict[BlockScope, list[Block]] = {'each': [], 'all': []}

        self.state: ExampleState | None = None

    def __repr__(self) -> str:
        return f'<RunState {self.description!r} examples={len(self.examples)}>'

    def it(self, text: str, block: Block) -> None:
        """Declare an example."""
        self.examples.append((text, block))

    def before(self, block: Block, scope: BlockScope = 'each') -> None:
        """Declare a block run before each example or once before all."""
        self.before_blocks[scope].append(block)

    def after(self, block: Block, scope: BlockScope = 'each') -> None:
        """Declare a block run after each example or once after all."""
        self.after_blocks[scope].append(block)

    def record_fault(self, message: str | None, fault: BaseException) -> None:
        """Record a fault on the active example, or on the scope.

        Args:
            message: Label of the protected block that raised.
            fault: Raised exception.
        """
        if self.state is not None:
            self.state.record_fault(message, fault)
        else:
            super().record_fault(message, fault)

    def describe(self, block: Block) -> None:
        """Run the describe body, collecting its declarations."""
        self.kernel.protect(self.description, block)

    def process(self) -> None:
        """Run the examples of the scope.

        Every example selected by the kernel filters gets its own
        `ExampleState`; `after` actions are dispatched exactly once per
        example. Spec code is not executed in dry-run modes.
        """
        kernel = self.kernel
        kernel.actions(Phase.ENTER, self.description)

        examples = [
            (text, block)
            for text, block in self.examples
            if kernel.selected(one_line(f'{self.description} {text}').strip())
        ]
        run_code = bool(examples) and not kernel.dry_run

        log.debug('Processing scope', description=self.description, examples=len(examples))

        if run_code:
            for block in self.before_blocks['all']:
                kernel.protect('before :all', block)

        for text, block in examples:
            self.state = state = ExampleState(self, text)
            kernel.actions(Phase.BEFORE, state)

            if run_code:
                for before_block in self.before_blocks['each']:
                    kernel.protect('before :each', before_block)
                kernel.protect(None, block)
                for after_block in self.after_blocks['each']:
                    kernel.protect('after :each', after_block)

            kernel.actions(Phase.AFTER, state)
            self.state = None

        if run_code:
            for block in self.after_blocks['all']:
                kernel.protect('after :all', block)

        if self.has_faults:
            kernel.actions(Phase.AFTER, self)

        kernel.actions(Phase.LEAVE)


class StateStack:
    """Stack of nested describe scopes.

    Frames are pushed when a describe scope begins and popped when it
    completes, in strict push/pop order.
    """

    def __init__(self) -> None:
        """Initialize an empty stack."""
        self._frames: list[RunState] = []

    def push(self, state: RunState) -> RunState:
        """Make a state the current scope."""
        self._frames.append(state)
        return state

    def pop(self) -> RunState | None:
        """Remove the current scope and return it; `None` if empty."""
        if not self._frames:
            return None

        return self._frames.pop()

    @property
    def current(self) -> RunState | None:
        """Return the innermost scope or `None` outside any scope."""
        if not self._frames:
            return None

        return self._frames[-1]

    @property
    def depth(self) -> int:
        """Return the number of nested scopes."""
        return len(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)
