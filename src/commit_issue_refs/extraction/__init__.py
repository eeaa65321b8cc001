"""Issue id extraction from commit messages and patch set diffing."""

from commit_issue_refs.extraction.collaborators import (
    CommitMessageFetcher,
    PatchSetHistory,
)
from commit_issue_refs.extraction.diff import diff_against_predecessor
from commit_issue_refs.extraction.extractor import IssueExtractor
from commit_issue_refs.extraction.footer import footer_key
from commit_issue_refs.extraction.matcher import IssueMatcher
from commit_issue_refs.extraction.occurrences import build_occurrence_index
from commit_issue_refs.extraction.partition import partition_message

__all__ = [
    "CommitMessageFetcher",
    "IssueExtractor",
    "IssueMatcher",
    "PatchSetHistory",
    "build_occurrence_index",
    "diff_against_predecessor",
    "footer_key",
    "partition_message",
]
