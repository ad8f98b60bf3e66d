"""Reporters and reporter discovery.

Formatters report the results of a run. Built-in formatters are
available by name; third-party formatters are discovered via the
`specrun_formatters` entry point group and loaded defensively:
individual failures emit warnings unless strict mode is enabled.
"""

from typing import TYPE_CHECKING
from warnings import warn

from specrun.errors import PluginError, PluginWarning

from .base import BaseFormatter
from .dotted import DottedFormatter
from .specdoc import SpecdocFormatter

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint

__all__ = (
    'BaseFormatter',
    'DottedFormatter',
    'SpecdocFormatter',
    'available_formatters',
    'get_formatter',
)

#: Entry point group of third-party formatters.
ENTRYPOINT_GROUP = 'specrun_formatters'

BUILTINS: dict[str, type[BaseFormatter]] = {
    'dotted': DottedFormatter,
    'specdoc': SpecdocFormatter,
}


def _emit_plugin_issue(message: str, strict: bool,
                       entrypoint: 'EntryPoint | None' = None) -> PluginError | None:
    """Emit a plugin warning or return the exception.

    Args:
        message: Warning message to emit.
        strict: Whether plugin issues are fatal.
        entrypoint: Entry point the issue relates to, if applicable.

    Returns:
        PluginError on strict mode, otherwise `None`
            with producing a PluginWarning.
    """
    if strict:
        return PluginError(message, entrypoint=entrypoint)

    warn(message, category=PluginWarning, stacklevel=3)

    return None


def _load_entrypoint(entrypoint: 'EntryPoint', strict: bool) -> type[BaseFormatter] | None:
    """Load a single formatter entry point.

    Args:
        entrypoint: Entry point describing the formatter class.
        strict: Whether loading issues are fatal.

    Returns:
        The formatter class, or `None` if it could not be loaded.

    Raises:
        PluginError: If any loading issue occurs on strict mode.
    """
    try:
        formatter = entrypoint.load()

    except Exception as base:
        if error := _emit_plugin_issue(
            f'Failed to load entrypoint {entrypoint.name!r}',
            strict,
            entrypoint,
        ):
            raise error from base
        return None

    if not isinstance(formatter, type) or not issubclass(formatter, BaseFormatter):
        if error := _emit_plugin_issue(
            f'Loaded from entrypoint {entrypoint.name!r} object is not a formatter',
            strict,
            entrypoint,
        ):
            raise error
        return None

    return formatter


def available_formatters(strict: bool = False) -> dict[str, type[BaseFormatter]]:
    """Return built-in and installed formatters by name.

    Installed formatters cannot shadow built-in ones.

    Args:
        strict: Whether plugin loading issues are fatal.

    Returns:
        Mapping of formatter names to formatter classes.

    Raises:
        PluginError: If any loading issue occurs on strict mode.
    """
    from importlib.metadata import entry_points  # noqa: PLC0415

    formatters = dict(BUILTINS)

    for entrypoint in entry_points().select(group=ENTRYPOINT_GROUP):
        if entrypoint.name in formatters:
            if error := _emit_plugin_issue(
                f'Formatter {entrypoint.name!r} from {entrypoint.value!r} is shadowing an existing',
                strict,
                entrypoint,
            ):
                raise error
            continue

        if formatter := _load_entrypoint(entrypoint, strict):
            formatters[entrypoint.name] = formatter

    return formatters


def get_formatter(name: str, strict: bool = False) -> type[BaseFormatter]:
    """Look up a formatter class by name.

    Args:
        name: Formatter name.
        strict: Whether plugin loading issues are fatal.

    Returns:
        The formatter class.

    Raises:
        PluginError: If the formatter is unknown.
    """
    if name in BUILTINS:
        return BUILTINS[name]

    formatters = available_formatters(strict)
    if name not in formatters:
        raise PluginError(f'Unknown formatter {name!r}')

    return formatters[name]
