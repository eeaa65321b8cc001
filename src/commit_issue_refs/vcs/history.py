"""Patch set history backed by a plain mapping.

The mapping goes from change id to the revisions of its patch sets::

    {
        "I8473b95934b5732ac55d26311a706c9c2bde9940": {
            "1": "9876543211987654321298765432139876543214",
            "2": "1234567891123456789212345678931234567894"
        }
    }

JSON object keys are strings, so patch set numbers are accepted as strings
or integers.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Union

from commit_issue_refs.errors import IssueRefsError, RevisionLookupError
from commit_issue_refs.models.patch_set import PatchSetRef

logger = logging.getLogger(__name__)


class MappingPatchSetHistory:
    """Resolves patch sets to revisions from an in-memory mapping."""

    def __init__(self, revisions: Mapping[str, Mapping]) -> None:
        self._revisions: dict[str, dict[int, str]] = {
            change_id: {int(number): revision for number, revision in patch_sets.items()}
            for change_id, patch_sets in revisions.items()
        }

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "MappingPatchSetHistory":
        """Load the history from a JSON file.

        Raises
        ------
        IssueRefsError
            If the file cannot be read or does not hold a JSON object of
            objects.
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as fp:
                data = json.load(fp)
        except (OSError, json.JSONDecodeError) as exc:
            raise IssueRefsError(f"Could not load patch set history {path}: {exc}") from exc

        if not isinstance(data, dict) or not all(
            isinstance(value, dict) for value in data.values()
        ):
            raise IssueRefsError(
                f"Patch set history {path} must map change ids to objects."
            )
        try:
            history = cls(data)
        except ValueError as exc:
            raise IssueRefsError(
                f"Patch set history {path} has a non-numeric patch set: {exc}"
            ) from exc
        logger.info("Loaded patch set history for %d change(s) from %s", len(data), path)
        return history

    def revision_of(self, patch_set: PatchSetRef) -> str:
        """Return the revision of *patch_set*.

        Raises
        ------
        RevisionLookupError
            If the change or the patch set is not in the mapping.
        """
        try:
            return self._revisions[patch_set.change_id][patch_set.patch_set_number]
        except KeyError:
            raise RevisionLookupError(
                patch_set.change_id, patch_set.patch_set_number
            ) from None
