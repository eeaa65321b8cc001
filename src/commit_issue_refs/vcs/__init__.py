"""Version control backed implementations of the extractor's collaborators."""

from commit_issue_refs.vcs.git import GitCommitMessageFetcher
from commit_issue_refs.vcs.history import MappingPatchSetHistory

__all__ = ["GitCommitMessageFetcher", "MappingPatchSetHistory"]
