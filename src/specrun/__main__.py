"""Command-line interface of the spec runner.

The `run` command runs spec files and exits with the kernel exit code.
The `tags` command lists the tags stored for a spec file.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from click import Choice, ClickException, File, argument, echo, group, option, pass_context
from click import Path as PathParam

from specrun.actions import MatchFilter, TagAction, TagFilter, TagListAction
from specrun.core import Kernel, Phase, TagStore
from specrun.errors import ConfigError, PluginError
from specrun.formatters import get_formatter
from specrun.settings import Mode, RunnerSettings, expand_files
from specrun.telemetry import setup_logging

if TYPE_CHECKING:
    from typing import Any, TextIO

    from click import Context

ConfigFilepath = PathParam(
    dir_okay=False,
    exists=True,
    readable=True,
    path_type=Path,
)

SpecPath = PathParam(
    exists=True,
    readable=True,
    path_type=Path,
)

LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def _load_settings(config: Path | None, **values: 'Any') -> RunnerSettings:  # noqa: ANN401
    """Resolve settings from an optional configuration file and options.

    Raises:
        ClickException: If the configuration is invalid.
    """
    try:
        if config is not None:
            return RunnerSettings.from_file(config, **values)
        return RunnerSettings.create(**values)

    except ConfigError as error:
        raise ClickException(f'{error}') from error


@group(help='Specification-style test runner.')
@option(
    '-v', '--verbose',
    count=True,
    help='Increase logging verbosity (repeat for debug output).',
)
def cli(verbose: int) -> None:
    """Root CLI group for specrun."""
    setup_logging(LOG_LEVELS[min(verbose, len(LOG_LEVELS) - 1)])


@cli.command(name='run', help='Run spec files or directories of spec files.')
@argument('paths', nargs=-1, type=SpecPath)
@option('-c', '--config', type=ConfigFilepath, help='YAML configuration file.')
@option('-r', '--randomize/--no-randomize', default=None, help='Run spec files in random order.')
@option('--seed', type=int, default=None, help='Seed for the random file order.')
@option(
    '--mode',
    type=Choice([mode.value for mode in Mode]),
    default=None,
    help='Execution mode.',
)
@option('--pretend', is_flag=True, help='Dry run: visit examples without running them.')
@option('-f', '--format', 'formatter', default=None, help='Formatter name.')
@option('-o', '--output', type=File('wt'), default=None, help='Write the report to a file.')
@option('-e', '--example', 'examples', multiple=True, help='Run only examples containing TEXT.')
@option('-E', '--exclude-example', 'excluded', multiple=True, help='Skip examples containing TEXT.')
@option('-g', '--include-tag', 'include_tags', multiple=True, help='Run only examples tagged KIND.')
@option('-G', '--exclude-tag', 'exclude_tags', multiple=True, help='Skip examples tagged KIND.')
@option('--tag-failures', 'tag_kind', default=None, help='Tag faulty examples with KIND.')
@option('--list-tags', 'list_kinds', multiple=True, help='List examples tagged KIND.')
@option('--quiet/--no-quiet', default=None, help='Suppress load-time fault diagnostics.')
@option('--strict', is_flag=True, help='Fail on formatter plugin loading issues.')
@pass_context
def run(ctx: 'Context', paths: tuple[Path, ...], config: Path | None,  # noqa: PLR0913
        randomize: bool | None, seed: int | None, mode: str | None, pretend: bool,
        formatter: str | None, output: 'TextIO | None',
        examples: tuple[str, ...], excluded: tuple[str, ...],
        include_tags: tuple[str, ...], exclude_tags: tuple[str, ...],
        tag_kind: str | None, list_kinds: tuple[str, ...],
        quiet: bool | None, strict: bool) -> None:
    """Run spec files and exit with the run exit code."""
    if pretend:
        mode = Mode.PRETEND.value
    elif list_kinds and mode is None:
        mode = Mode.REPORT.value

    settings = _load_settings(
        config,
        files=tuple(expand_files(paths)) or None,
        randomize=randomize,
        seed=seed,
        mode=mode,
        formatter=formatter,
        quiet=quiet,
    )

    if not settings.files:
        echo('No files specified')
        ctx.exit(1)

    kernel = Kernel(settings)

    if list_kinds:
        TagFilter(Phase.INCLUDE, *list_kinds).register(kernel)
        TagListAction(*list_kinds, out=output).register(kernel)
    else:
        try:
            formatter_class = get_formatter(settings.formatter, strict=strict)
        except PluginError as error:
            raise ClickException(f'{error}') from error
        formatter_class(output).register(kernel)

    if examples:
        MatchFilter(Phase.INCLUDE, *examples).register(kernel)
    if excluded:
        MatchFilter(Phase.EXCLUDE, *excluded).register(kernel)
    if include_tags:
        TagFilter(Phase.INCLUDE, *include_tags).register(kernel)
    if exclude_tags:
        TagFilter(Phase.EXCLUDE, *exclude_tags).register(kernel)
    if tag_kind:
        TagAction(tag_kind).register(kernel)

    ctx.exit(kernel.process())


@cli.command(name='tags', help='List the tags stored for a spec file.')
@argument('spec', type=PathParam(dir_okay=False, path_type=Path))
@option('-t', '--kind', 'kinds', multiple=True, default=('fails',), show_default=True,
        help='Tag kinds to list.')
@option('-c', '--config', type=ConfigFilepath, help='YAML configuration file.')
def list_tags(spec: Path, kinds: tuple[str, ...], config: Path | None) -> None:
    """Print the tags of the given kinds stored for a spec file."""
    settings = _load_settings(config)
    store = TagStore(settings.tags_patterns)

    for tag in store.read_tags(spec, *kinds):
        echo(f'{tag}')


if __name__ == '__main__':
    cli()
