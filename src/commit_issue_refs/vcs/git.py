"""Commit message fetching from local git repositories.

Runs ``git log -1 --format=%B <revision>`` in the repository of a project.
Projects are looked up as directories below a common repositories root;
the project name ``"."`` denotes the root itself.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Union

from commit_issue_refs.errors import CommitFetchError

logger = logging.getLogger(__name__)

# Seconds to wait for a single git invocation.
GIT_TIMEOUT_SECONDS = 10


class GitCommitMessageFetcher:
    """Fetches raw commit messages with the ``git`` command line tool.

    Parameters
    ----------
    repos_root:
        Directory containing one repository per project, or a repository
        itself when used with the project name ``"."``.
    git_binary:
        Name or path of the git executable.
    """

    def __init__(
        self,
        repos_root: Union[str, Path],
        git_binary: str = "git",
    ) -> None:
        self._repos_root = Path(repos_root).resolve()
        self._git_binary = git_binary

    @property
    def repos_root(self) -> Path:
        return self._repos_root

    def repository_path(self, project: str) -> Path:
        """Return the working directory used for *project*."""
        return (self._repos_root / project).resolve()

    def fetch(self, project: str, revision: str) -> str:
        """Return the full commit message of *revision* in *project*.

        Raises
        ------
        CommitFetchError
            If the repository is missing, git cannot be run, or git fails
            (unknown revision, not a repository, timeout).
        """
        repo = self.repository_path(project)
        if not repo.is_dir():
            raise CommitFetchError(project, revision, f"no repository at {repo}")

        # Option-like revisions would be parsed as git flags.
        if revision.startswith("-"):
            raise CommitFetchError(project, revision, "invalid revision")

        try:
            result = subprocess.run(
                [self._git_binary, "log", "-1", "--format=%B", revision],
                cwd=str(repo),
                capture_output=True,
                text=True,
                timeout=GIT_TIMEOUT_SECONDS,
            )
        except subprocess.TimeoutExpired as exc:
            raise CommitFetchError(project, revision, "git timed out") from exc
        except OSError as exc:
            raise CommitFetchError(project, revision, str(exc)) from exc

        if result.returncode != 0:
            raise CommitFetchError(project, revision, result.stderr.strip())

        logger.debug("Fetched commit message of %s from %s", revision, repo)
        # git appends a newline after the message body.
        return result.stdout[:-1] if result.stdout.endswith("\n") else result.stdout
