"""Split a raw commit message into subject, body and footer.

Zones are decided by position only:

- The first line of the message is the subject.  A blank first line gives
  an empty subject, and the paragraph after it takes the subject's place
  as the first paragraph.
- The rest of the first paragraph starts the body.
- When the message has two or more paragraphs, the last one is the footer,
  whatever its content.  Paragraphs in between are appended to the body.

Blank lines only separate paragraphs and are dropped.  Trailing blank lines
never form an extra paragraph.
"""

from __future__ import annotations

from commit_issue_refs.models.zones import CommitMessageZones


def is_blank(line: str) -> bool:
    return not line.strip()


def split_paragraphs(lines: list[str]) -> list[list[str]]:
    """Group *lines* into runs of non-blank lines.

    Leading, repeated and trailing blank lines produce no empty paragraphs.
    """
    paragraphs: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        if is_blank(line):
            if current:
                paragraphs.append(current)
                current = []
        else:
            current.append(line)
    if current:
        paragraphs.append(current)
    return paragraphs


def partition_message(text: str) -> CommitMessageZones:
    """Partition *text* into :class:`CommitMessageZones`.

    An empty message, or one holding only blank lines, yields empty zones.
    """
    lines = text.splitlines()
    if all(is_blank(line) for line in lines):
        return CommitMessageZones()

    # A blank first line is an empty subject.  The next paragraph becomes the
    # first paragraph, so when it is the only one it is body, never footer.
    if is_blank(lines[0]):
        subject = ""
        paragraphs = split_paragraphs(lines[1:])
    else:
        subject = lines[0]
        paragraphs = split_paragraphs(lines)
        paragraphs[0] = paragraphs[0][1:]

    body = list(paragraphs[0])
    if len(paragraphs) == 1:
        return CommitMessageZones(subject=subject, body_lines=tuple(body))

    for paragraph in paragraphs[1:-1]:
        body.extend(paragraph)
    return CommitMessageZones(
        subject=subject,
        body_lines=tuple(body),
        footer_lines=tuple(paragraphs[-1]),
    )
