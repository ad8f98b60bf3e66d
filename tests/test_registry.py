"""Tests for the action registry."""

import pytest

from specrun.actions import MatchFilter, TallyAction, TimerAction
from specrun.core import ActionRegistry, Phase
from specrun.core.registry import HANDLER_TYPES
from specrun.formatters import SpecdocFormatter


class Handler:
    """Action recording its invocations."""

    def __init__(self, calls: list[tuple[str, tuple]], name: str = 'handler') -> None:
        self.calls = calls
        self.name = name

    def start(self, *args: object) -> None:
        self.calls.append((self.name, args))

    def include(self, description: str) -> bool:
        return description.startswith(self.name)


@pytest.mark.parametrize('phase', (
    pytest.param(Phase.START, id='enum'),
    pytest.param('start', id='string'),
))
def test_register_twice_invokes_once(phase: Phase | str) -> None:
    """Register a handler twice and dispatch it once."""
    calls: list[tuple[str, tuple]] = []
    handler = Handler(calls)

    registry = ActionRegistry()
    registry.register(phase, handler)
    registry.register(phase, handler)
    registry.dispatch(Phase.START)

    assert calls == [('handler', ())]
    assert registry.handlers(Phase.START) == (handler,)


def test_dispatch_in_registration_order() -> None:
    """Dispatch handlers in registration order with arguments."""
    calls: list[tuple[str, tuple]] = []

    registry = ActionRegistry()
    registry.register(Phase.START, Handler(calls, 'first'))
    registry.register(Phase.START, Handler(calls, 'second'))
    registry.dispatch(Phase.START, 1, 'two')

    assert calls == [('first', (1, 'two')), ('second', (1, 'two'))]


def test_dispatch_without_handlers_is_noop() -> None:
    """Dispatch a phase with no registered handlers."""
    registry = ActionRegistry()
    registry.dispatch(Phase.FINISH)

    assert registry.handlers(Phase.FINISH) == ()


def test_unregister_unknown_handler_is_noop() -> None:
    """Unregister a handler that was never registered."""
    calls: list[tuple[str, tuple]] = []
    registered = Handler(calls, 'registered')

    registry = ActionRegistry()
    registry.register(Phase.START, registered)
    registry.unregister(Phase.START, Handler(calls, 'stranger'))
    registry.unregister(Phase.LOAD, registered)

    assert registry.handlers(Phase.START) == (registered,)
    assert registry.handlers(Phase.LOAD) == ()


def test_unregister_handler() -> None:
    """Unregistered handlers are not dispatched."""
    calls: list[tuple[str, tuple]] = []
    handler = Handler(calls)

    registry = ActionRegistry()
    registry.register(Phase.START, handler)
    registry.unregister(Phase.START, handler)
    registry.dispatch(Phase.START)

    assert calls == []


def test_register_requires_phase_method() -> None:
    """Reject handlers not responding to the phase method."""
    registry = ActionRegistry()

    with pytest.raises(TypeError, match=r"does not respond to 'finish'$"):
        registry.register(Phase.FINISH, Handler([]))


def test_register_unknown_phase() -> None:
    """Reject unknown phase names."""
    registry = ActionRegistry()

    with pytest.raises(ValueError, match=r'is not a valid Phase'):
        registry.register('teardown', Handler([]))


def test_handler_faults_propagate() -> None:
    """Faults raised by handlers are not caught by the registry."""
    class Failing:
        def start(self) -> None:
            raise RuntimeError('handler fault')

    registry = ActionRegistry()
    registry.register(Phase.START, Failing())

    with pytest.raises(RuntimeError, match=r'^handler fault$'):
        registry.dispatch(Phase.START)


@pytest.mark.parametrize('description, expected', (
    pytest.param('alpha example', True, id='first matches'),
    pytest.param('beta example', True, id='second matches'),
    pytest.param('gamma example', False, id='none matches'),
))
def test_filter_matches(description: str, expected: bool) -> None:
    """Consult include filters as predicates."""
    registry = ActionRegistry()
    registry.register(Phase.INCLUDE, Handler([], 'alpha'))
    registry.register(Phase.INCLUDE, Handler([], 'beta'))

    assert registry.matches(Phase.INCLUDE, description) is expected


def test_filter_matches_without_filters() -> None:
    """No registered filter matches nothing."""
    assert ActionRegistry().matches(Phase.EXCLUDE, 'anything') is False


def test_matches_rejects_action_phase() -> None:
    """Only filter phases can be consulted as predicates."""
    with pytest.raises(ValueError, match=r"^'start' is not a filter phase$"):
        ActionRegistry().matches(Phase.START, 'anything')


def test_clear() -> None:
    """Clear every registered handler."""
    registry = ActionRegistry()
    registry.register(Phase.START, Handler([]))
    registry.clear()

    assert registry.handlers(Phase.START) == ()


@pytest.mark.parametrize(('phase', 'handler'), (
    pytest.param(Phase.START, TimerAction(), id='timer-start'),
    pytest.param(Phase.EXPECTATION, TallyAction(), id='tally-expectation'),
    pytest.param(Phase.ENTER, SpecdocFormatter(), id='specdoc-enter'),
    pytest.param(Phase.EXCLUDE, MatchFilter(Phase.EXCLUDE, 'x'), id='filter-exclude'),
))
def test_builtin_handlers_implement_interfaces(phase: Phase, handler: object) -> None:
    """Built-in actions implement the interfaces of their phases."""
    assert isinstance(handler, HANDLER_TYPES[phase])


def test_every_phase_has_interface() -> None:
    """Every phase declares a handler interface."""
    assert set(HANDLER_TYPES) == set(Phase)
