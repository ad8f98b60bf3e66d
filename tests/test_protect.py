"""Tests for protected execution of spec code."""

from typing import TYPE_CHECKING

import pytest

from specrun.core import Kernel, RunState, protect
from specrun.settings import RunnerSettings

if TYPE_CHECKING:
    from collections.abc import Callable


def test_protect_returns_value() -> None:
    """Return the block result on success."""
    outcome = protect(lambda: 42)

    assert outcome.ok
    assert outcome.value == 42
    assert outcome.fault is None


def test_protect_captures_fault() -> None:
    """Capture the exception raised by the block."""
    error = ValueError('broken')

    def block() -> None:
        raise error

    outcome = protect(block)

    assert not outcome.ok
    assert outcome.fault is error
    assert outcome.value is None


@pytest.mark.parametrize('error', (
    pytest.param(KeyboardInterrupt(), id='interrupt'),
    pytest.param(SystemExit(3), id='exit'),
))
def test_protect_propagates_interrupts(error: BaseException) -> None:
    """Do not capture interpreter-level interrupts."""
    def block() -> None:
        raise error

    with pytest.raises(type(error)):
        protect(block)


def test_kernel_protect_records_on_current_state() -> None:
    """Attribute faults to the current describe scope."""
    kernel = Kernel()
    state = kernel.stack.push(RunState(kernel, 'Subject'))

    def block() -> None:
        raise ValueError('in scope')

    outcome = kernel.protect('before :all', block)

    assert outcome.fault is not None
    assert state.faults == [('before :all', outcome.fault)]
    assert kernel.exit_code == 1


def test_kernel_protect_writes_diagnostic(capsys: pytest.CaptureFixture[str]) -> None:
    """Write a diagnostic for faults outside any describe scope."""
    kernel = Kernel()

    def block() -> None:
        raise ValueError('outside')

    kernel.protect('loading some_spec.py', block)

    stderr = capsys.readouterr().err
    assert 'An exception occurred in loading some_spec.py:' in stderr
    assert "ValueError: 'outside'" in stderr
    assert 'Traceback (most recent call last):' in stderr
    assert kernel.exit_code == 1


def test_kernel_protect_quiet(capsys: pytest.CaptureFixture[str]) -> None:
    """Suppress the diagnostic in quiet mode but still set the exit code."""
    kernel = Kernel(RunnerSettings(quiet=True))

    def block() -> None:
        raise ValueError('outside')

    kernel.protect('loading some_spec.py', block)

    assert capsys.readouterr().err == ''
    assert kernel.exit_code == 1


@pytest.mark.parametrize('block', (
    pytest.param(lambda: None, id='none'),
    pytest.param(lambda: 'value', id='value'),
))
def test_kernel_protect_success(block: 'Callable[[], object]') -> None:
    """Leave the exit code untouched on success."""
    kernel = Kernel()

    assert kernel.protect('label', block).ok
    assert kernel.exit_code == 0
