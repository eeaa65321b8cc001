"""Classification of footer lines into keyed and unkeyed lines."""

from __future__ import annotations

import re
from typing import Optional

# ``Key: value`` at the start of a line.  Keys look like ``Bug``,
# ``Change-Id`` or ``Signed-off-by``.
FOOTER_KEY_RE = re.compile(r"^([A-Za-z0-9][A-Za-z0-9_-]*): ")


def footer_key(line: str) -> Optional[str]:
    """Return the key of a ``Key: value`` footer line, or None if unkeyed.

    The key keeps its case: ``footer_key("Bug: bug#42")`` is ``"Bug"``.
    """
    match = FOOTER_KEY_RE.match(line)
    if match is None:
        return None
    return match.group(1)
