"""Spec tag records and tag file persistence.

A tag marks a single example across runs, for example as a known
failure. Tags of a spec file live in a companion plain-text tag file,
one `tag(comment):description` record per line. The tag file path is
derived from the spec file path by ordered regular expression rules.

Missing tag files are treated as empty: reads return nothing and
deletes report that nothing was deleted.
"""

from pathlib import Path
from re import compile as regexp
from re import escape, sub
from typing import TYPE_CHECKING

import structlog

from specrun.models import SchemaModel
from specrun.names import TAG_PATTERN, TagComment, TagDescription, TagKind
from specrun.settings import DEFAULT_TAGS_PATTERNS

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from typing import Self

log = structlog.get_logger('specrun.core.tags')


class SpecTag(SchemaModel):
    """Persisted marker for a single example."""

    tag: TagKind

    comment: TagComment | None = None

    description: TagDescription

    @classmethod
    def parse(cls, line: str) -> 'Self | None':
        """Parse a tag file line.

        Args:
            line: Single line without the line terminator.

        Returns:
            Parsed tag or `None` if the line is not a tag record.
        """
        if not (match := TAG_PATTERN.match(line)):
            return None

        return cls(
            tag=match['tag'],
            comment=match['comment'],
            description=match['description'],
        )

    def __str__(self) -> str:
        """Serialize the tag as a single tag file line."""
        if self.comment:
            return f'{self.tag}({self.comment}):{self.description}'

        return f'{self.tag}:{self.description}'


class TagStore:
    """Reads and writes the tag files of spec files."""

    def __init__(self, patterns: 'Sequence[tuple[str, str]]' = DEFAULT_TAGS_PATTERNS) -> None:
        """Initialize a tag store.

        Args:
            patterns: Ordered `(pattern, replacement)` rewrite rules
                transforming a spec file path into a tag file path.
        """
        self.patterns = tuple(patterns)

    def tags_file(self, spec_path: str | Path) -> Path:
        """Derive the tag file path of a spec file.

        Each rule is applied (to all occurrences) on the output of the
        previous rule. With the default rules:

            path/to/spec/class/method_spec.py => path/to/spec/tags/class/method_tags.txt

        Args:
            spec_path: Spec file path.

        Returns:
            Tag file path.
        """
        path = Path(spec_path).as_posix()
        for pattern, replacement in self.patterns:
            path = sub(pattern, replacement, path)

        return Path(path)

    def _tags_path(self, spec_path: str | Path) -> Path | None:
        """Return the tag file path, or `None` if the rules leave the spec path unchanged."""
        path = self.tags_file(spec_path)
        if path == Path(spec_path):
            log.warning('Tag rules do not apply to spec file', file=f'{spec_path}')
            return None

        return path

    def read_tags(self, spec_path: str | Path, *kinds: str) -> list[SpecTag]:
        """Read the tags of given kinds from a spec file's tag file.

        Args:
            spec_path: Spec file path.
            *kinds: Tag kinds to return.

        Returns:
            Matching tags in file order; empty if the file is missing
            or the spec file has no tag file.
        """
        if (path := self._tags_path(spec_path)) is None:
            return []

        tags: list[SpecTag] = []
        for line in self._read_lines(path):
            tag = SpecTag.parse(line)
            if tag is not None and tag.tag in kinds:
                tags.append(tag)

        return tags

    def write_tag(self, spec_path: str | Path, tag: SpecTag) -> bool:
        """Append a tag unless an identical line already exists.

        Parent directories of the tag file are created as needed.

        Args:
            spec_path: Spec file path.
            tag: Tag to write.

        Returns:
            True if the tag was written, False if it was already present
            or the spec file has no tag file.
        """
        if (path := self._tags_path(spec_path)) is None:
            return False

        line = f'{tag}'
        path.parent.mkdir(parents=True, exist_ok=True)

        if line in self._read_lines(path):
            return False

        with path.open('at', encoding='utf-8') as output:
            output.write(f'{line}\n')

        log.debug('Tag written', file=f'{path}', tag=line)

        return True

    def delete_tag(self, spec_path: str | Path, tag: SpecTag) -> bool:
        """Delete every line matching a tag's kind and description.

        A line matches if it contains the literal tag kind followed, with
        any content in between, by the literal description. The tag file is
        removed when no lines remain.

        Args:
            spec_path: Spec file path.
            tag: Tag to delete.

        Returns:
            True if any line was deleted.
        """
        path = self._tags_path(spec_path)
        if path is None or not path.exists():
            return False

        pattern = regexp(f'{escape(tag.tag)}.*{escape(tag.description)}')
        lines = self._read_lines(path)
        kept = [line for line in lines if not pattern.search(line)]

        if kept:
            path.write_text(''.join(f'{line}\n' for line in kept), encoding='utf-8')
        else:
            path.unlink()

        log.debug('Tag deleted', file=f'{path}', tag=f'{tag}', deleted=len(lines) - len(kept))

        return len(kept) != len(lines)

    @staticmethod
    def _read_lines(path: Path) -> list[str]:
        """Read lines of a file without terminators; empty if missing."""
        if not path.exists():
            return []

        with path.open('rt', encoding='utf-8') as content:
            return [line.rstrip('\r\n') for line in content]


def tag_descriptions(tags: 'Iterable[SpecTag]') -> set[str]:
    """Return the descriptions of the given tags."""
    return {tag.description for tag in tags}
