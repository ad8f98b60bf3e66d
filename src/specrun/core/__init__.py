"""Execution kernel of the spec runner.

This package defines the core infrastructure for running spec files.

It provides:
- an ordered registry of lifecycle actions and example filters;
- explicit run states for nested describe scopes and examples;
- protected execution isolating faults raised by spec code;
- the per-file load/execute/unload pipeline;
- tag files persisting per-example markers across runs.

The primary public entry point is `Kernel`, which exposes the DSL used
by spec files and runs all registered files through `process`.
"""

from .kernel import Kernel
from .protect import Outcome, protect
from .registry import ActionRegistry, Phase
from .state import ExampleState, RunState, StateStack
from .tags import SpecTag, TagStore

__all__ = (
    'ActionRegistry',
    'ExampleState',
    'Kernel',
    'Outcome',
    'Phase',
    'RunState',
    'SpecTag',
    'StateStack',
    'TagStore',
    'protect',
)
