"""Click CLI commands for extracting issue references.

Provides the ``issue-refs`` CLI entry point with subcommands:
- ``issue-refs text``      -- Extract from a commit message file or stdin.
- ``issue-refs revision``  -- Extract from the commit message of a git revision.
- ``issue-refs patch-set`` -- Extract and mark references added since the previous patch set.
"""

from commit_issue_refs.cli.main import cli, patch_set, revision, text

__all__ = ["cli", "patch_set", "revision", "text"]
