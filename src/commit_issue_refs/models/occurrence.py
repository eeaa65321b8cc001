"""Immutable mapping from issue id to the zone tags it occurred under."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Optional

from commit_issue_refs.models.zones import Added, FooterKey, Tag, Zone, tag_label


class OccurrenceIndex(Mapping):
    """Mapping of issue id -> ``frozenset`` of tags.

    Insertion order of issue ids follows the order in which they were first
    seen while scanning the message.  The constructor enforces the tag
    invariants:

    - every issue id carries :attr:`Zone.SOMEWHERE`
    - a :class:`FooterKey` tag implies :attr:`Zone.FOOTER`
    - an :class:`Added` tag implies the tag it wraps

    Raises:
        ValueError: If any invariant does not hold.
    """

    __slots__ = ("_tags",)

    def __init__(
        self, occurrences: Optional[Mapping[str, Iterable[Tag]]] = None
    ) -> None:
        tags: dict[str, frozenset] = {}
        for issue_id, issue_tags in (occurrences or {}).items():
            frozen = frozenset(issue_tags)
            _check_invariants(issue_id, frozen)
            tags[issue_id] = frozen
        self._tags = tags

    def __getitem__(self, issue_id: str) -> frozenset:
        return self._tags[issue_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OccurrenceIndex):
            return self._tags == other._tags
        if isinstance(other, Mapping):
            return self._tags == {k: frozenset(v) for k, v in other.items()}
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._tags.items()))

    def __repr__(self) -> str:
        return f"OccurrenceIndex({self.to_labels()!r})"

    def issue_ids(self) -> list[str]:
        """Return the issue ids in order of first occurrence."""
        return list(self._tags)

    def has_tag(self, issue_id: str, tag: Tag) -> bool:
        """Return True when *issue_id* is present and carries *tag*."""
        return tag in self._tags.get(issue_id, frozenset())

    def to_labels(self) -> dict[str, list[str]]:
        """Return a JSON-friendly ``{issue_id: sorted labels}`` dictionary."""
        return {
            issue_id: sorted(tag_label(tag) for tag in tags)
            for issue_id, tags in self._tags.items()
        }


def _check_invariants(issue_id: str, tags: frozenset) -> None:
    if Zone.SOMEWHERE not in tags:
        raise ValueError(f"Issue {issue_id!r} is missing the 'somewhere' tag")
    for tag in tags:
        if isinstance(tag, FooterKey) and Zone.FOOTER not in tags:
            raise ValueError(
                f"Issue {issue_id!r} has {tag.label!r} without 'footer'"
            )
        if isinstance(tag, Added) and tag.tag not in tags:
            raise ValueError(
                f"Issue {issue_id!r} has {tag.label!r} without {tag.tag.label!r}"
            )
