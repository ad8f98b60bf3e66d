"""Tests for the spec file pipeline and the kernel entry point."""

from collections import Counter
from typing import TYPE_CHECKING

import pytest

from specrun.core import Kernel, RunState
from specrun.settings import RunnerSettings
from tests.examples import specs

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

if TYPE_CHECKING:
    from tests.conftest import Recorder


@pytest.mark.parametrize('items', (
    pytest.param([], id='empty'),
    pytest.param([1], id='single'),
    pytest.param([1, 2, 2, 3, 5, 8], id='duplicates'),
    pytest.param(list('specrun'), id='letters'),
))
def test_shuffle_is_permutation(items: list[object]) -> None:
    """Shuffling keeps the multiset of items."""
    shuffled = list(items)
    Kernel(RunnerSettings(seed=7)).shuffle(shuffled)

    assert Counter(shuffled) == Counter(items)


def test_shuffle_is_uniform() -> None:
    """Every permutation of three items is about equally likely."""
    kernel = Kernel(RunnerSettings(seed=1234))
    trials = 6000

    counts: Counter[tuple[int, ...]] = Counter()
    for _ in range(trials):
        items = [1, 2, 3]
        kernel.shuffle(items)
        counts[tuple(items)] += 1

    assert len(counts) == 6
    for count in counts.values():
        assert 800 < count < 1200


def test_process_order(make_kernel: 'Callable[..., Kernel]', recorder: 'Recorder',
                       write_spec: 'Callable[[str, str], str]') -> None:
    """Dispatch start, per-file load/unload and finish around the run."""
    first = write_spec('first_spec.py', specs.NESTED)
    second = write_spec('second_spec.py', specs.PASSING)

    kernel = make_kernel(files=(first, second))

    assert kernel.process() == 0

    phases = recorder.phases()
    assert phases[0] == 'start'
    assert phases[-1] == 'finish'
    assert phases.count('load') == 2
    assert phases.count('unload') == 2

    entered = [args[0] for phase, args in recorder.events if phase == 'enter']
    assert entered == ['Outer Inner', 'Outer', 'Stack']
    assert kernel.file is None


def test_file_fault_isolation(make_kernel: 'Callable[..., Kernel]', recorder: 'Recorder',
                              write_spec: 'Callable[[str, str], str]',
                              capsys: pytest.CaptureFixture[str]) -> None:
    """A broken file still unloads and the next file still runs."""
    broken = write_spec('broken_spec.py', specs.BROKEN_FILE)
    passing = write_spec('passing_spec.py', specs.PASSING)

    kernel = make_kernel(files=(broken, passing))

    assert kernel.process() == 1

    phases = recorder.phases()
    assert phases[:3] == ['start', 'load', 'unload']
    assert phases.count('after') == 2
    assert f'An exception occurred in loading {broken}:' in capsys.readouterr().err


def test_missing_file(make_kernel: 'Callable[..., Kernel]', recorder: 'Recorder',
                      tmp_path: 'Path', capsys: pytest.CaptureFixture[str]) -> None:
    """A missing file is a load-time fault."""
    missing = (tmp_path / 'missing_spec.py').as_posix()
    kernel = make_kernel(files=(missing,))

    assert kernel.process() == 1
    assert recorder.phases() == ['start', 'load', 'unload', 'finish']
    assert 'FileNotFoundError' in capsys.readouterr().err


def test_example_outside_scope(make_kernel: 'Callable[..., Kernel]',
                               write_spec: 'Callable[[str, str], str]',
                               capsys: pytest.CaptureFixture[str]) -> None:
    """Declaring an example outside describe is a load-time fault."""
    kernel = make_kernel(files=(write_spec('outside_spec.py', specs.OUTSIDE_SCOPE),))

    assert kernel.process() == 1
    assert "'it' must be called inside a describe scope" in capsys.readouterr().err


def test_example_faults(make_kernel: 'Callable[..., Kernel]', recorder: 'Recorder',
                        write_spec: 'Callable[[str, str], str]') -> None:
    """Example faults are captured on example states."""
    kernel = make_kernel(files=(write_spec('queue_spec.py', specs.MIXED),))

    assert kernel.process() == 1

    states = {
        args[0].description: args[0]
        for phase, args in recorder.events
        if phase == 'after'
    }
    assert not states['Queue passes'].has_faults
    assert states['Queue fails'].failure
    assert not states['Queue errors'].failure
    assert recorder.phases().count('expectation') == 2


def test_broken_describe_body(make_kernel: 'Callable[..., Kernel]', recorder: 'Recorder',
                              write_spec: 'Callable[[str, str], str]',
                              capsys: pytest.CaptureFixture[str]) -> None:
    """A broken describe body is reported on its scope, not on stderr."""
    kernel = make_kernel(files=(write_spec('broken_body_spec.py', specs.BROKEN_BODY),))

    assert kernel.process() == 1

    after = [args[0] for phase, args in recorder.events if phase == 'after']
    assert len(after) == 1
    assert isinstance(after[0], RunState)
    assert capsys.readouterr().err == ''


def test_randomized_order(write_spec: 'Callable[[str, str], str]') -> None:
    """Randomized runs load every file exactly once."""
    files = tuple(
        write_spec(f'file{index}_spec.py', specs.PASSING)
        for index in range(5)
    )

    loaded: list[str] = []

    class FileRecorder:
        def __init__(self, kernel: Kernel) -> None:
            self.kernel = kernel

        def load(self) -> None:
            loaded.append(self.kernel.file)

    kernel = Kernel(RunnerSettings(files=files, randomize=True, seed=3))
    kernel.register('load', FileRecorder(kernel))
    kernel.process()

    assert sorted(loaded) == sorted(files)

