"""IssueExtractor -- public entry point for issue reference extraction.

Runs the extraction pipeline on a commit message:

1. :func:`partition_message` splits the message into subject, body and footer.
2. :func:`build_occurrence_index` tags each issue id with its zones.
3. For patch sets after the first, :func:`diff_against_predecessor` marks
   occurrences that the previous patch set's message did not have.

Typical usage::

    extractor = IssueExtractor.from_config(
        config,
        message_fetcher=GitCommitMessageFetcher("/srv/git"),
        patch_set_history=history,
    )
    extractor.extract_from_text("Fix crash\\n\\nBug: bug#42")
    extractor.extract_for_revision("web", "1a2b3c")
    extractor.extract_for_patch_set("web", "1a2b3c", PatchSetRef(change_id="I12", patch_set_number=2))

The extractor holds no per-call state, so one instance can serve concurrent
callers.  Errors raised by the fetcher or the patch set history are not
caught here.
"""

from __future__ import annotations

import logging
from typing import Optional

from commit_issue_refs.config import ExtractorConfig
from commit_issue_refs.extraction.collaborators import (
    CommitMessageFetcher,
    PatchSetHistory,
)
from commit_issue_refs.extraction.diff import diff_against_predecessor
from commit_issue_refs.extraction.matcher import IssueMatcher
from commit_issue_refs.extraction.occurrences import build_occurrence_index
from commit_issue_refs.extraction.partition import partition_message
from commit_issue_refs.models.occurrence import OccurrenceIndex
from commit_issue_refs.models.patch_set import PatchSetRef

logger = logging.getLogger(__name__)


class IssueExtractor:
    """Extracts issue ids from commit messages, tagged by message zone.

    Parameters
    ----------
    matcher:
        Matcher built from the configured issue pattern.
    message_fetcher:
        Source of commit messages.  Required by the revision and patch set
        operations only.
    patch_set_history:
        Resolves the revision of a previous patch set.  Required by
        :meth:`extract_for_patch_set` for patch sets after the first.
    """

    def __init__(
        self,
        matcher: IssueMatcher,
        message_fetcher: Optional[CommitMessageFetcher] = None,
        patch_set_history: Optional[PatchSetHistory] = None,
    ) -> None:
        self._matcher = matcher
        self._message_fetcher = message_fetcher
        self._patch_set_history = patch_set_history

    @classmethod
    def from_config(
        cls,
        config: ExtractorConfig,
        message_fetcher: Optional[CommitMessageFetcher] = None,
        patch_set_history: Optional[PatchSetHistory] = None,
    ) -> "IssueExtractor":
        return cls(
            IssueMatcher.from_config(config),
            message_fetcher=message_fetcher,
            patch_set_history=patch_set_history,
        )

    @property
    def matcher(self) -> IssueMatcher:
        return self._matcher

    # ------------------------------------------------------------------
    # Text operations
    # ------------------------------------------------------------------

    def issue_ids(self, text: str) -> list[str]:
        """Return the distinct issue ids in *text*, ignoring message structure."""
        return self._matcher.find_issue_ids(text)

    def extract_from_text(self, text: str) -> OccurrenceIndex:
        """Return the occurrence index of the commit message *text*."""
        return build_occurrence_index(partition_message(text), self._matcher)

    # ------------------------------------------------------------------
    # Revision operations
    # ------------------------------------------------------------------

    def extract_for_revision(self, project: str, revision: str) -> OccurrenceIndex:
        """Fetch the commit message of *revision* and extract from it."""
        return self.extract_from_text(self._fetch(project, revision))

    def extract_for_patch_set(
        self, project: str, revision: str, patch_set: PatchSetRef
    ) -> OccurrenceIndex:
        """Extract from *revision* and mark occurrences new since the previous patch set.

        For the first patch set the result equals :meth:`extract_for_revision`.
        Otherwise the previous patch set's revision is resolved and its message
        extracted before any diffing happens, so a failed lookup or fetch
        aborts the call.
        """
        current = self.extract_for_revision(project, revision)
        predecessor = self._predecessor_index(project, patch_set)
        return diff_against_predecessor(current, predecessor)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _fetch(self, project: str, revision: str) -> str:
        if self._message_fetcher is None:
            raise RuntimeError(
                "No commit message fetcher configured for IssueExtractor."
            )
        logger.debug("Fetching commit message of %s in %s", revision, project)
        return self._message_fetcher.fetch(project, revision)

    def _predecessor_index(
        self, project: str, patch_set: PatchSetRef
    ) -> Optional[OccurrenceIndex]:
        if not patch_set.has_predecessor:
            return None
        if self._patch_set_history is None:
            raise RuntimeError(
                "No patch set history configured for IssueExtractor."
            )

        previous = patch_set.predecessor()
        previous_revision = self._patch_set_history.revision_of(previous)
        logger.info(
            "Comparing patch set %d of %s against revision %s",
            patch_set.patch_set_number,
            patch_set.change_id,
            previous_revision,
        )
        return self.extract_for_revision(project, previous_revision)
