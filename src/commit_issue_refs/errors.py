"""Exception types raised by collaborators of the issue extractor.

The extractor itself never catches these: a failure to fetch a commit
message or to resolve a predecessor patch set aborts the whole extraction
and reaches the caller unchanged.
"""

from __future__ import annotations


class IssueRefsError(Exception):
    """Base class for all errors raised by this package."""


class CommitFetchError(IssueRefsError):
    """The commit message of a revision could not be fetched."""

    def __init__(self, project: str, revision: str, reason: str = "") -> None:
        self.project = project
        self.revision = revision
        self.reason = reason
        message = f"Could not fetch commit message of {revision} in {project}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RevisionLookupError(IssueRefsError):
    """The revision of a predecessor patch set is not known."""

    def __init__(self, change_id: str, patch_set_number: int) -> None:
        self.change_id = change_id
        self.patch_set_number = patch_set_number
        super().__init__(
            f"No revision recorded for patch set {patch_set_number} "
            f"of change {change_id}"
        )
