"""Built-in actions and filters.

Actions are registered with a kernel for phases of the run and
collect or persist information about it:

- `TallyAction` counts files, examples, expectations and faults;
- `TimerAction` measures the duration of the run;
- `MatchFilter` and `TagFilter` select examples by description;
- `TagAction` and `TagListAction` maintain and list spec tags.
"""

from .filters import MatchFilter, TagFilter
from .tagging import TagAction, TagListAction
from .tally import Tally, TallyAction
from .timer import TimerAction

__all__ = (
    'MatchFilter',
    'Tally',
    'TallyAction',
    'TagAction',
    'TagFilter',
    'TagListAction',
    'TimerAction',
)
