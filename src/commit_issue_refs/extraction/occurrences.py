"""Build the occurrence index of a single commit message."""

from __future__ import annotations

from collections.abc import Iterable

from commit_issue_refs.extraction.footer import footer_key
from commit_issue_refs.extraction.matcher import IssueMatcher
from commit_issue_refs.models.occurrence import OccurrenceIndex
from commit_issue_refs.models.zones import CommitMessageZones, FooterKey, Tag, Zone


def build_occurrence_index(
    zones: CommitMessageZones, matcher: IssueMatcher
) -> OccurrenceIndex:
    """Tag every issue id in *zones* with the zones it occurs in.

    Subject, body and footer are each scanned as one text.  Keyed footer
    lines are additionally scanned one by one and tagged with their
    :class:`FooterKey` and ``footer``.  Every id found anywhere also gets
    ``somewhere``.
    """
    occurrences: dict[str, set[Tag]] = {}

    def record(issue_ids: Iterable[str], *tags: Tag) -> None:
        for issue_id in issue_ids:
            occurrences.setdefault(issue_id, {Zone.SOMEWHERE}).update(tags)

    if not matcher.enabled or zones.is_empty():
        return OccurrenceIndex()

    record(matcher.iter_issue_ids(zones.subject), Zone.SUBJECT)
    record(matcher.iter_issue_ids(zones.body_text), Zone.BODY)
    record(matcher.iter_issue_ids(zones.footer_text), Zone.FOOTER)

    # A single line can match where the joined footer does not (anchors,
    # matches running across a line break), so keyed hits carry FOOTER too.
    for line in zones.footer_lines:
        key = footer_key(line)
        if key is not None:
            record(matcher.iter_issue_ids(line), Zone.FOOTER, FooterKey(key))

    return OccurrenceIndex(occurrences)
