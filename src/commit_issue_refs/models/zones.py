"""Zone tags and the partitioned commit message.

A commit message is split into three structural zones: the subject line,
the body and the footer.  Every extracted issue id is tagged with the zones
it occurred in.  Tags form a closed set:

- :class:`Zone` -- ``somewhere``, ``subject``, ``body``, ``footer``
- :class:`FooterKey` -- a keyed footer line such as ``Bug: ...``
- :class:`Added` -- wraps one of the above when the occurrence is new
  relative to the previous patch set

Each tag has a stable string label (see :func:`tag_label`) which is the form
used in JSON output, e.g. ``footer-Bug`` or ``added@subject``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class Zone(str, Enum):
    """Structural zones of a commit message."""

    SOMEWHERE = "somewhere"
    SUBJECT = "subject"
    BODY = "body"
    FOOTER = "footer"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class FooterKey:
    """Occurrence on a footer line of the form ``Key: value``.

    Attributes:
        key: The footer key with its case preserved (e.g. ``Bug``).
    """

    key: str

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("FooterKey requires a non-empty key")

    @property
    def label(self) -> str:
        return f"footer-{self.key}"


@dataclass(frozen=True)
class Added:
    """Marks an occurrence that is new relative to the previous patch set.

    Attributes:
        tag: The zone or footer key tag that was newly introduced.  Nesting
            ``Added`` inside ``Added`` is not allowed.
    """

    tag: Union[Zone, FooterKey]

    def __post_init__(self) -> None:
        if not isinstance(self.tag, (Zone, FooterKey)):
            raise TypeError(
                f"Added wraps a Zone or FooterKey, got {type(self.tag).__name__}"
            )

    @property
    def label(self) -> str:
        return f"added@{self.tag.label}"


ZoneTag = Union[Zone, FooterKey]
Tag = Union[Zone, FooterKey, Added]


def tag_label(tag: Tag) -> str:
    """Return the string label of *tag* (``subject``, ``footer-Bug``, ...)."""
    return tag.label


class CommitMessageZones(BaseModel):
    """A commit message split into subject, body and footer.

    Built once per message by
    :func:`commit_issue_refs.extraction.partition.partition_message` and
    never modified afterwards.
    """

    model_config = ConfigDict(frozen=True)

    subject: str = Field(
        default="",
        description="First line of the message; empty for an empty message.",
    )
    body_lines: tuple[str, ...] = Field(
        default=(),
        description="Lines between the subject and the footer, blank separators dropped.",
    )
    footer_lines: tuple[str, ...] = Field(
        default=(),
        description="Lines of the last paragraph when the message has more than one.",
    )

    @property
    def body_text(self) -> str:
        return "\n".join(self.body_lines)

    @property
    def footer_text(self) -> str:
        return "\n".join(self.footer_lines)

    @property
    def has_footer(self) -> bool:
        return bool(self.footer_lines)

    def is_empty(self) -> bool:
        """Return True when the message has no content in any zone."""
        return not (self.subject or self.body_lines or self.footer_lines)
