"""Tests configurations and fixtures."""

import logging
from importlib.metadata import EntryPoint, EntryPoints
from typing import TYPE_CHECKING

import pytest

from specrun.core import Kernel
from specrun.settings import RunnerSettings
from specrun.telemetry import setup_logging

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path
    from typing import Any

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType


@pytest.fixture(autouse=True, scope='session')
def configure_logging() -> None:
    """Keep runner logs out of the captured reporter output."""
    setup_logging(logging.WARNING)


class Recorder:
    """Action recording every phase it is dispatched for."""

    def __init__(self) -> None:
        self.events: list[tuple[str, tuple[Any, ...]]] = []

    def phases(self) -> list[str]:
        return [phase for phase, _ in self.events]

    def _record(self, phase: str, *args: 'Any') -> None:
        self.events.append((phase, args))

    def start(self) -> None:
        self._record('start')

    def load(self) -> None:
        self._record('load')

    def enter(self, description: str) -> None:
        self._record('enter', description)

    def before(self, state: 'Any') -> None:
        self._record('before', state)

    def expectation(self, state: 'Any') -> None:
        self._record('expectation', state)

    def after(self, state: 'Any') -> None:
        self._record('after', state)

    def leave(self) -> None:
        self._record('leave')

    def unload(self) -> None:
        self._record('unload')

    def finish(self) -> None:
        self._record('finish')


@pytest.fixture
def recorder() -> Recorder:
    """Provide an action recording dispatched phases."""
    return Recorder()


@pytest.fixture
def make_kernel(recorder: Recorder) -> 'Callable[..., Kernel]':
    """Provide a factory of kernels with the recorder registered.

    Keyword arguments are passed to `RunnerSettings`. The recorder is
    registered for every lifecycle phase.
    """
    def make(**values: 'Any') -> Kernel:
        kernel = Kernel(RunnerSettings(**values))
        for phase in ('start', 'load', 'enter', 'before', 'expectation',
                      'after', 'leave', 'unload', 'finish'):
            kernel.register(phase, recorder)
        return kernel

    return make


@pytest.fixture
def write_spec(tmp_path: 'Path') -> 'Callable[[str, str], str]':
    """Provide a factory writing spec files under a `spec` directory.

    Returns:
        A callable taking a file name and a source, returning the
        POSIX path of the written spec file.
    """
    def write(name: str, source: str) -> str:
        path = tmp_path / 'spec' / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding='utf-8')
        return path.as_posix()

    return write


@pytest.fixture
def patch_entrypoints(mocker: 'MockerFixture') -> 'Callable[..., MockType]':
    """Provide a factory for mocking `importlib.metadata.entry_points`.

    Returns a callable that patches `entry_points()` to simulate
    discovery of formatters in the `specrun_formatters` group.
    """
    def patch(*formatters: tuple[str, object], raises: Exception | None = None) -> 'MockType':
        """Patch `entry_points` with a controlled formatter configuration.

        Args:
            formatters: Pairs of entry point names and objects returned
                by `EntryPoint.load()`.
            raises: Exception to raise when `EntryPoint.load()` is called.

        Returns:
            A mock patch object replacing `importlib.metadata.entry_points`.
        """
        entrypoints = []
        for name, formatter in formatters:
            ep = mocker.Mock(spec=EntryPoint)
            ep.group = 'specrun_formatters'
            ep.name = name
            ep.value = f'tests.examples.formatters:{name}'
            ep.load.return_value = formatter
            if raises is not None:
                ep.load.side_effect = raises
            entrypoints.append(ep)

        return mocker.patch(
            'importlib.metadata.entry_points',
            return_value=EntryPoints(entrypoints),
        )

    return patch
