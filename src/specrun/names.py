"""Tag names primitive types and parsing rules.

This module defines the patterns used to serialize and parse spec tag
records, and strongly-typed aliases used by the tag model.

A tag line has the form `tag(comment):description`, where the comment
part is optional. The rules defined here are the on-disk contract of
tag files and are relied upon by the tag store and tag actions.
"""

from re import compile as regexp
from typing import Annotated

from pydantic import Field

#: Base pattern for tag kinds.
#: Kinds may contain anything except parentheses, hashes and colons.
_KIND_PATTERN = r'[^()#:]+'

#: Compiled pattern for a single tag line.
TAG_PATTERN = regexp(
    rf'^(?P<tag>{_KIND_PATTERN})(\((?P<comment>[^)]+)?\))?:(?P<description>.*)$',
)


TagKind = Annotated[
    str, Field(
        pattern=rf'^{_KIND_PATTERN}$',
        title='Tag kind',
        description=(
            'Kind of a spec tag, for example `fails` for a known failure '
            'or `unstable` for a flaky example. Tag kinds select which '
            'tags are read by filters and written by tag actions.'
        ),
        examples=[
            'fails',
            'unstable',
        ],
    ),
]

TagComment = Annotated[
    str, Field(
        pattern=r'^[^)]+$',
        title='Tag comment',
        description=(
            'Optional free-text comment stored in parentheses after the '
            'tag kind, for example a ticket reference.'
        ),
    ),
]

TagDescription = Annotated[
    str, Field(
        pattern=r'^[^\r\n]*$',
        title='Example description',
        description='Full description of the tagged example, on a single line.',
    ),
]
