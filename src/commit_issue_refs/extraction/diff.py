"""Mark occurrences that are new relative to the previous patch set."""

from __future__ import annotations

from typing import Optional

from commit_issue_refs.models.occurrence import OccurrenceIndex
from commit_issue_refs.models.zones import Added, Tag


def diff_against_predecessor(
    current: OccurrenceIndex, predecessor: Optional[OccurrenceIndex]
) -> OccurrenceIndex:
    """Add an :class:`Added` tag for every (issue id, tag) pair new in *current*.

    Original tags are kept next to their ``Added`` markers.  An issue id
    absent from *predecessor* gets ``Added`` for all of its tags, including
    ``somewhere``.  With no predecessor, *current* is returned unchanged.
    """
    if predecessor is None:
        return current

    diffed: dict[str, set[Tag]] = {}
    for issue_id, tags in current.items():
        previous_tags = predecessor.get(issue_id, frozenset())
        diffed[issue_id] = set(tags) | {
            Added(tag) for tag in tags if tag not in previous_tags
        }
    return OccurrenceIndex(diffed)
