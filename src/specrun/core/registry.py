"""Lifecycle hook registry.

Actions are objects registered for named phases of a run. When a phase
is dispatched, every action registered for it is called through the
method of the same name, in registration order:

- `start`: before any spec file is loaded;
- `load`: before a spec file is loaded;
- `enter`: before a describe scope is run;
- `before`: before a single example is run;
- `expectation`: before an expectation is checked;
- `after`: after a single example is run;
- `leave`: after a describe scope is run;
- `unload`: after a spec file is run;
- `finish`: after all spec files are run.

Two additional phases hold filters rather than actions: `include`
filters return True if an example should run, `exclude` filters return
True if it should NOT run.

Every phase has a handler interface in `HANDLER_TYPES`; registering an
object that does not implement it is a type error.
"""

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import structlog

if TYPE_CHECKING:
    from specrun.core.state import FaultLog

log = structlog.get_logger('specrun.core.registry')


class Phase(StrEnum):
    """Named points of the run lifecycle."""

    START = 'start'
    LOAD = 'load'
    ENTER = 'enter'
    BEFORE = 'before'
    EXPECTATION = 'expectation'
    AFTER = 'after'
    LEAVE = 'leave'
    UNLOAD = 'unload'
    FINISH = 'finish'
    INCLUDE = 'include'
    EXCLUDE = 'exclude'


#: Phases whose handlers are predicates consulted to select examples.
FILTER_PHASES = frozenset({Phase.INCLUDE, Phase.EXCLUDE})


@runtime_checkable
class StartHandler(Protocol):
    def start(self) -> None: ...


@runtime_checkable
class LoadHandler(Protocol):
    def load(self) -> None: ...


@runtime_checkable
class EnterHandler(Protocol):
    def enter(self, description: str) -> None: ...


@runtime_checkable
class BeforeHandler(Protocol):
    def before(self, state: 'FaultLog') -> None: ...


@runtime_checkable
class ExpectationHandler(Protocol):
    def expectation(self, state: 'FaultLog | None') -> None: ...


@runtime_checkable
class AfterHandler(Protocol):
    def after(self, state: 'FaultLog') -> None: ...


@runtime_checkable
class LeaveHandler(Protocol):
    def leave(self) -> None: ...


@runtime_checkable
class UnloadHandler(Protocol):
    def unload(self) -> None: ...


@runtime_checkable
class FinishHandler(Protocol):
    def finish(self) -> None: ...


@runtime_checkable
class IncludeFilter(Protocol):
    def include(self, description: str) -> bool: ...


@runtime_checkable
class ExcludeFilter(Protocol):
    def exclude(self, description: str) -> bool: ...


#: Interface a handler must implement to be registered for a phase.
HANDLER_TYPES: dict[Phase, type] = {
    Phase.START: StartHandler,
    Phase.LOAD: LoadHandler,
    Phase.ENTER: EnterHandler,
    Phase.BEFORE: BeforeHandler,
    Phase.EXPECTATION: ExpectationHandler,
    Phase.AFTER: AfterHandler,
    Phase.LEAVE: LeaveHandler,
    Phase.UNLOAD: UnloadHandler,
    Phase.FINISH: FinishHandler,
    Phase.INCLUDE: IncludeFilter,
    Phase.EXCLUDE: ExcludeFilter,
}


class ActionRegistry:
    """Ordered registry of phase handlers.

    Each phase maps to an ordered list of handlers; a handler appears at
    most once per phase. Faults raised by handlers are not caught here.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._actions: dict[Phase, list[object]] = {}

    def register(self, phase: Phase | str, action: object) -> None:
        """Register an action for a phase.

        Registering the same action twice for one phase is a no-op.

        Args:
            phase: Phase to register the action for.
            action: Object implementing the phase-named method.

        Raises:
            TypeError: If the action does not implement the phase handler
                interface.
        """
        phase = Phase(phase)
        if not isinstance(action, HANDLER_TYPES[phase]):
            raise TypeError(f'{action!r} does not respond to {phase.value!r}')

        actions = self._actions.setdefault(phase, [])
        if action not in actions:
            actions.append(action)

    def unregister(self, phase: Phase | str, action: object) -> None:
        """Remove an action from a phase.

        Removing an action that was never registered is a no-op.

        Args:
            phase: Phase to remove the action from.
            action: Previously registered object.
        """
        actions = self._actions.get(Phase(phase))
        if actions and action in actions:
            actions.remove(action)

    def handlers(self, phase: Phase | str) -> tuple[object, ...]:
        """Return a snapshot of the handlers registered for a phase."""
        return tuple(self._actions.get(Phase(phase), ()))

    def dispatch(self, phase: Phase | str, *args: object) -> None:
        """Invoke every action registered for a phase.

        Args:
            phase: Phase to dispatch.
            *args: Arguments passed to each action.
        """
        phase = Phase(phase)
        for action in self.handlers(phase):
            log.debug('Dispatching action', phase=phase.value, action=type(action).__name__)
            getattr(action, phase.value)(*args)

    def matches(self, phase: Phase | str, description: str) -> bool:
        """Consult the filters registered for a filter phase.

        Args:
            phase: Either `include` or `exclude`.
            description: Full description of the example.

        Returns:
            True if any filter of the phase matches the description.

        Raises:
            ValueError: If the phase is not a filter phase.
        """
        phase = Phase(phase)
        if phase not in FILTER_PHASES:
            raise ValueError(f'{phase.value!r} is not a filter phase')

        return any(
            getattr(action, phase.value)(description)
            for action in self.handlers(phase)
        )

    def clear(self) -> None:
        """Remove every registered action."""
        self._actions = {}
