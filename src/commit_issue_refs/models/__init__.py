"""Data models for commit message zones, zone tags and issue occurrences."""

from commit_issue_refs.models.occurrence import OccurrenceIndex
from commit_issue_refs.models.patch_set import PatchSetRef
from commit_issue_refs.models.zones import (
    Added,
    CommitMessageZones,
    FooterKey,
    Tag,
    Zone,
    ZoneTag,
    tag_label,
)

__all__ = [
    "Added",
    "CommitMessageZones",
    "FooterKey",
    "OccurrenceIndex",
    "PatchSetRef",
    "Tag",
    "Zone",
    "ZoneTag",
    "tag_label",
]
