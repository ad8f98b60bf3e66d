"""Runner settings.

This module defines the process-wide configuration consumed by the
kernel: the files to run, the tag path rewrite rules, the execution
mode and the randomization flag.

Settings are resolved once before a run, from keyword arguments,
`SPECRUN_*` environment variables and an optional YAML configuration
file, and are read-only while the run is in progress.
"""

from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import Field, ValidationError
from pydantic_settings import SettingsConfigDict
from yaml import safe_load
from yaml.error import MarkedYAMLError

from specrun.errors import ConfigError
from specrun.models import SettingsModel

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Any, Self

#: Default rules rewriting `path/spec/x/y_spec.py` into `path/spec/tags/x/y_tags.txt`.
DEFAULT_TAGS_PATTERNS = (
    ('spec/', 'spec/tags/'),
    (r'_spec\.py$', '_tags.txt'),
)

#: Glob used to expand directories into spec files.
SPEC_FILES_GLOB = '*_spec.py'


class Mode(StrEnum):
    """Execution mode of a run."""

    #: Examples are executed and reported.
    NORMAL = 'normal'
    #: Examples are executed to check that tagged failures still fail.
    VERIFY = 'verify'
    #: Examples are not executed; reporters list matching examples.
    REPORT = 'report'
    #: Examples are not executed; hooks are dispatched as for a dry run.
    PRETEND = 'pretend'


class RunnerSettings(SettingsModel):
    """Process-wide runner configuration."""

    model_config = SettingsConfigDict(
        env_prefix='SPECRUN_',
        frozen=True,
        extra='ignore',
    )

    files: tuple[str, ...] = Field(
        default=(),
        title='Spec files',
        description='Ordered sequence of spec file paths to run.',
    )

    tags_patterns: tuple[tuple[str, str], ...] = Field(
        default=DEFAULT_TAGS_PATTERNS,
        title='Tag path rewrite rules',
        description=(
            'Ordered `(pattern, replacement)` regular expression rules '
            'applied to a spec file path to derive its tag file path. '
            'Each rule is applied to the output of the previous one.'
        ),
    )

    mode: Mode = Field(
        default=Mode.NORMAL,
        title='Execution mode',
    )

    randomize: bool = Field(
        default=False,
        title='Randomize file order',
    )

    seed: int | None = Field(
        default=None,
        title='Random seed',
        description='Seed for the file order shuffle; random if not set.',
    )

    quiet: bool = Field(
        default=False,
        title='Quiet runner',
        description='Suppress diagnostics for faults outside any describe scope.',
    )

    formatter: str = Field(
        default='dotted',
        title='Formatter name',
    )

    @classmethod
    def from_file(cls, path: Path, **overrides: 'Any') -> 'Self':  # noqa: ANN401
        """Load settings from a YAML configuration file.

        Values passed as keyword arguments take precedence over values
        read from the file. Keyword arguments set to `None` are ignored.

        Args:
            path: Path to the YAML configuration file.
            **overrides: Explicit settings values.

        Returns:
            Validated settings.

        Raises:
            ConfigError: If the file is not valid YAML, is not a mapping,
                or contains invalid settings.
        """
        try:
            with path.open('rt', encoding='utf-8') as content:
                data = safe_load(content) or {}

        except MarkedYAMLError as base:
            raise ConfigError.from_yaml_error(base) from base

        if not isinstance(data, dict):
            raise ConfigError(
                'Configuration must be a mapping',
                context={'filename': f'{path}'},
            )

        overrides = {
            key: value
            for key, value in overrides.items()
            if value is not None
        }

        return cls.create(filename=f'{path}', **{**data, **overrides})

    @classmethod
    def create(cls, filename: str | None = None, **values: 'Any') -> 'Self':  # noqa: ANN401
        """Validate settings values.

        Args:
            filename: Configuration file the values come from, if any.
            **values: Settings values; `None` values are ignored.

        Returns:
            Validated settings.

        Raises:
            ConfigError: If any value is invalid.
        """
        try:
            return cls(**{
                key: value
                for key, value in values.items()
                if value is not None
            })

        except ValidationError as base:
            raise ConfigError.from_pydantic_error(base, filename=filename) from base


def expand_files(paths: 'Iterable[str | Path]') -> list[str]:
    """Expand spec file arguments.

    Directories are replaced with the spec files they contain,
    recursively and in sorted order; files are kept as given.

    Args:
        paths: File or directory paths.

    Returns:
        Ordered list of spec file paths.
    """
    files: list[str] = []

    for item in paths:
        path = Path(item)
        if path.is_dir():
            files.extend(
                spec.as_posix()
                for spec in sorted(path.rglob(SPEC_FILES_GLOB))
            )
        else:
            files.append(path.as_posix())

    return files
