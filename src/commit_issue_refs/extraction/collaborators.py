"""Contracts of the services the issue extractor depends on.

The extractor consumes already fetched text.  Fetching commit messages and
resolving patch set history belong to these collaborators; any object with
matching methods can be plugged in.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from commit_issue_refs.models.patch_set import PatchSetRef


@runtime_checkable
class CommitMessageFetcher(Protocol):
    """Fetches the full commit message of a revision."""

    def fetch(self, project: str, revision: str) -> str:
        """Return the raw commit message of *revision* in *project*.

        Raises:
            CommitFetchError: If the message cannot be fetched.
        """
        ...


@runtime_checkable
class PatchSetHistory(Protocol):
    """Resolves patch sets of a change to their revisions."""

    def revision_of(self, patch_set: PatchSetRef) -> str:
        """Return the revision id of *patch_set*.

        Raises:
            RevisionLookupError: If the patch set is not known.
        """
        ...
