"""Issue id matching against the configured pattern.

The :class:`IssueMatcher` wraps the compiled issue pattern and the index of
the capture group holding the issue id.  It scans text left to right and
yields one id per non-overlapping match.

Design decisions:
- No pattern means extraction is disabled: every scan yields nothing and
  the text is not even looked at.
- A match whose target group did not take part in the match yields no id.
  The same holds for a group that matched the empty string, so an empty
  string is never reported as an issue id.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import Optional, Union

from commit_issue_refs.config import ExtractorConfig

logger = logging.getLogger(__name__)


class IssueMatcher:
    """Finds issue ids in text fragments.

    Parameters
    ----------
    pattern:
        The issue pattern, compiled or as a string.  *None* disables matching.
    group_index:
        Capture group holding the id.  ``0`` takes the whole match.
    """

    def __init__(
        self,
        pattern: Union[re.Pattern, str, None],
        group_index: int = 0,
    ) -> None:
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        if group_index < 0:
            raise ValueError(f"group_index must be >= 0, got {group_index}")
        self._pattern: Optional[re.Pattern] = pattern
        self._group_index = group_index

    @classmethod
    def from_config(cls, config: ExtractorConfig) -> "IssueMatcher":
        return cls(config.compiled_pattern, config.issue_pattern_group_index)

    @property
    def pattern(self) -> Optional[re.Pattern]:
        return self._pattern

    @property
    def group_index(self) -> int:
        return self._group_index

    @property
    def enabled(self) -> bool:
        return self._pattern is not None

    def iter_issue_ids(self, text: str) -> Iterator[str]:
        """Yield the issue ids found in *text*, in order, duplicates included."""
        if self._pattern is None:
            return
        logger.debug("Matching %r against %s", text, self._pattern.pattern)
        for match in self._pattern.finditer(text):
            issue_id = match.group(self._group_index)
            if issue_id:
                yield issue_id

    def find_issue_ids(self, text: str) -> list[str]:
        """Return the distinct issue ids in *text* in order of first appearance."""
        return list(dict.fromkeys(self.iter_issue_ids(text)))

    def __repr__(self) -> str:
        pattern = self._pattern.pattern if self._pattern is not None else None
        return f"IssueMatcher(pattern={pattern!r}, group_index={self._group_index})"
