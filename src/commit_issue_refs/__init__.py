"""Commit Issue Refs - Issue reference extraction and patch-set diffing for commit messages."""

__version__ = "0.1.0"

from commit_issue_refs.config import ExtractorConfig
from commit_issue_refs.extraction.extractor import IssueExtractor

__all__ = ["ExtractorConfig", "IssueExtractor", "__version__"]
