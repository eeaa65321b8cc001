"""FastMCP server exposing issue reference extraction as MCP tools.

Typical usage as an MCP server entry point::

    # Via the registered entry point (pyproject.toml):
    # [project.entry-points."mcp.servers"]
    # commit-issue-refs = "commit_issue_refs.mcp:create_server"

    # Or programmatically:
    from commit_issue_refs.mcp.server import create_server
    server = create_server()
    server.run(transport="stdio")

Tools:
- health_check -- server version and configuration summary
- extract_issue_refs -- zone-tagged issue ids of a commit message text
- extract_revision_issue_refs -- same for a revision in a local git repository
- extract_patch_set_issue_refs -- same, with ``added@`` markers against
  the previous patch set

Tool errors are returned as ``{"error": True, "message": ...}`` rather than
raised, so that the client always receives a structured answer.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastmcp import FastMCP
from pydantic import ValidationError

from commit_issue_refs import __version__
from commit_issue_refs.config import ExtractorConfig
from commit_issue_refs.errors import IssueRefsError
from commit_issue_refs.extraction.extractor import IssueExtractor
from commit_issue_refs.models.patch_set import PatchSetRef
from commit_issue_refs.vcs.git import GitCommitMessageFetcher
from commit_issue_refs.vcs.history import MappingPatchSetHistory

logger = logging.getLogger(__name__)

# Module-level server singleton.  Created on first call to create_server()
# or get_server().
_server_instance: Optional[FastMCP] = None
_config: Optional[ExtractorConfig] = None


def create_server(
    project_root: Optional[str] = None,
    config_path: Optional[str] = None,
) -> FastMCP:
    """Create and configure the FastMCP server instance.

    Loads :class:`ExtractorConfig`, applies its logging settings, creates
    the server and registers the tools.

    Parameters
    ----------
    project_root:
        Explicit project root path.  When None, the project root is
        auto-detected from the current directory.
    config_path:
        Explicit config file path.  When None, looks for
        ``<project_root>/.issue-refs/config.json``.
    """
    global _server_instance, _config

    _config = ExtractorConfig.load(
        project_root=project_root,
        config_path=config_path,
    )
    _config.configure_logging()

    logger.info("Initializing Commit Issue Refs MCP server v%s", __version__)
    logger.info("Issue pattern: %s", _config.issue_pattern or "(not configured)")

    _server_instance = FastMCP(
        name="commit-issue-refs",
        instructions=(
            "Commit Issue Refs finds issue tracker references in commit "
            "messages and reports where in the message each one occurs "
            "(subject, body, footer, footer key).  For patch sets it also "
            "reports which references are new since the previous patch set."
        ),
        version=__version__,
    )

    _register_tools(_server_instance)

    logger.info("FastMCP server created successfully. Tools registered.")

    return _server_instance


def get_server() -> FastMCP:
    """Return the existing server instance, creating it if necessary."""
    global _server_instance
    if _server_instance is None:
        return create_server()
    return _server_instance


def get_config() -> ExtractorConfig:
    """Return the ExtractorConfig used by the server.

    Raises
    ------
    RuntimeError
        If the server has not been created yet.
    """
    if _config is None:
        raise RuntimeError(
            "Server has not been initialized. Call create_server() first."
        )
    return _config


def reset_server() -> None:
    """Reset the server singleton (primarily for testing)."""
    global _server_instance, _config
    _server_instance = None
    _config = None
    logger.debug("Server singleton reset.")


# ---------------------------------------------------------------------------
# Tool registration
# ---------------------------------------------------------------------------


def _register_tools(server: FastMCP) -> None:
    """Register all MCP tools on the server instance."""

    @server.tool()
    def health_check() -> dict:
        """Check the health and configuration of the Commit Issue Refs server.

        Returns:
            A dictionary with the server version, whether an issue pattern
            is configured, the pattern and group index, the project root
            and a timestamp.
        """
        cfg = get_config()
        return {
            "server_version": __version__,
            "status": "healthy" if cfg.extraction_enabled else "degraded",
            "issue_pattern": cfg.issue_pattern,
            "issue_pattern_group_index": cfg.issue_pattern_group_index,
            "project_root": cfg.project_root,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @server.tool()
    def extract_issue_refs(message: str) -> dict:
        """Find issue references in a commit message.

        Args:
            message: The full commit message text.

        Returns:
            A dictionary whose ``issues`` entry maps each issue id to the
            sorted list of zone labels it occurred under (``somewhere``,
            ``subject``, ``body``, ``footer``, ``footer-<Key>``).
        """
        extractor = IssueExtractor.from_config(get_config())
        occurrences = extractor.extract_from_text(message)
        return {
            "error": False,
            "issues": occurrences.to_labels(),
            "issue_ids": occurrences.issue_ids(),
        }

    @server.tool()
    def extract_revision_issue_refs(
        project: str,
        revision: str,
        repos_root: str = ".",
    ) -> dict:
        """Find issue references in the commit message of a git revision.

        Args:
            project: Project name, i.e. the repository directory below
                ``repos_root``.  Use "." when ``repos_root`` is the repository.
            revision: Any git revision (sha, branch, tag, HEAD~1, ...).
            repos_root: Directory holding the project repositories.

        Returns:
            A dictionary with the project, the mapped issue tracker project,
            the revision and the zone-tagged issues, or an error.
        """
        cfg = get_config()
        extractor = IssueExtractor.from_config(
            cfg, message_fetcher=GitCommitMessageFetcher(repos_root)
        )
        try:
            occurrences = extractor.extract_for_revision(project, revision)
        except IssueRefsError as exc:
            logger.warning("extract_revision_issue_refs failed: %s", exc)
            return _error_response(str(exc))

        return {
            "error": False,
            "project": project,
            "its_project": cfg.its_project_for(project),
            "revision": revision,
            "issues": occurrences.to_labels(),
        }

    @server.tool()
    def extract_patch_set_issue_refs(
        project: str,
        revision: str,
        change_id: str,
        patch_set_number: int,
        history_path: str = "",
        repos_root: str = ".",
    ) -> dict:
        """Find issue references of a patch set and mark the newly added ones.

        Occurrences missing from the previous patch set's commit message get
        an extra ``added@<label>`` entry.  Patch set 1 gets no such entries.

        Args:
            project: Project name below ``repos_root``.
            revision: Revision of the patch set.
            change_id: Change the patch set belongs to.
            patch_set_number: Patch set number, starting at 1.
            history_path: JSON file mapping change ids to patch set
                revisions.  Needed for patch sets after the first.
            repos_root: Directory holding the project repositories.

        Returns:
            A dictionary with the zone-tagged issues, or an error.
        """
        cfg = get_config()
        try:
            ref = PatchSetRef(change_id=change_id, patch_set_number=patch_set_number)
        except ValidationError as exc:
            return _error_response(f"Invalid patch set: {exc}")

        try:
            history = (
                MappingPatchSetHistory.from_json_file(history_path)
                if history_path
                else MappingPatchSetHistory({})
            )
            extractor = IssueExtractor.from_config(
                cfg,
                message_fetcher=GitCommitMessageFetcher(repos_root),
                patch_set_history=history,
            )
            occurrences = extractor.extract_for_patch_set(project, revision, ref)
        except IssueRefsError as exc:
            logger.warning("extract_patch_set_issue_refs failed: %s", exc)
            return _error_response(str(exc))

        return {
            "error": False,
            "project": project,
            "its_project": cfg.its_project_for(project),
            "revision": revision,
            "change_id": change_id,
            "patch_set": patch_set_number,
            "issues": occurrences.to_labels(),
        }


def _error_response(message: str) -> dict:
    return {
        "error": True,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
