"""Configuration and settings module for Commit Issue Refs.

Provides the :class:`ExtractorConfig` class which centralises the settings
needed to find issue references in commit messages.  Configuration is
resolved in priority order:

1. **Environment variables** (highest priority) -- ``ISSUE_REFS_*``
2. **Config file** -- ``<project_root>/.issue-refs/config.json``
3. **Defaults** (lowest priority) -- extraction disabled, group 0

Typical usage::

    config = ExtractorConfig.load()                          # auto-detect project root
    config = ExtractorConfig.load("/path/to/project")        # explicit project root
    config = ExtractorConfig(issue_pattern=r"bug#(\\d+)",
                             issue_pattern_group_index=1)    # programmatic construction

    config.compiled_pattern        # re.Pattern, or None when not configured
    config.its_project_for("web")  # issue tracker project mapped to "web"
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Directory holding the config file, placed at the project root.
DEFAULT_CONFIG_DIR_NAME = ".issue-refs"

# Config file name inside the config directory.
CONFIG_FILE_NAME = "config.json"

# Environment variable prefix, e.g. ``ISSUE_REFS_ISSUE_PATTERN``.
ENV_PREFIX = "ISSUE_REFS_"

# Sentinel files used to detect a project root directory.  The search walks
# upward from the current working directory until one of these is found.
PROJECT_ROOT_MARKERS = (
    ".git",
    "pyproject.toml",
    DEFAULT_CONFIG_DIR_NAME,
)

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class ExtractorConfig(BaseModel):
    """Settings for issue reference extraction.

    Attributes
    ----------
    issue_pattern:
        Regular expression matching an issue reference, e.g. ``bug#(\\d+)``.
        When *None*, extraction is disabled and every lookup yields nothing.
        The pattern is compiled during validation, so a malformed expression
        is rejected here rather than at extraction time.
    issue_pattern_group_index:
        Capture group holding the issue id.  ``0`` takes the whole match.
        Must not exceed the number of groups in ``issue_pattern``.
    log_level:
        Python logging level name.  One of ``DEBUG``, ``INFO``, ``WARNING``,
        ``ERROR``, ``CRITICAL``.
    its_projects:
        Maps a version control project name to the name of the matching
        project in the issue tracker.
    project_root:
        The detected or configured project root path.
    """

    issue_pattern: Optional[str] = Field(
        default=None,
        description="Regular expression matching issue references. None disables extraction.",
    )
    issue_pattern_group_index: int = Field(
        default=0,
        ge=0,
        description="Capture group of issue_pattern holding the issue id (0 = whole match).",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL.",
    )
    its_projects: dict[str, str] = Field(
        default_factory=dict,
        description="Project name -> issue tracker project name.",
    )
    project_root: Optional[str] = Field(
        default=None,
        description="Detected or configured project root path.",
    )

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def compile_issue_pattern(self) -> "ExtractorConfig":
        """Compile ``issue_pattern`` and check the group index against it."""
        if self.issue_pattern is None or self.issue_pattern == "":
            self.issue_pattern = None
            return self

        try:
            compiled = re.compile(self.issue_pattern)
        except re.error as exc:
            raise ValueError(
                f"Invalid issue_pattern {self.issue_pattern!r}: {exc}"
            ) from exc

        if self.issue_pattern_group_index > compiled.groups:
            raise ValueError(
                f"issue_pattern_group_index {self.issue_pattern_group_index} "
                f"exceeds the {compiled.groups} group(s) of {self.issue_pattern!r}."
            )

        return self

    @model_validator(mode="after")
    def validate_log_level(self) -> "ExtractorConfig":
        """Normalise and validate the log level string."""
        normalised = self.log_level.upper().strip()
        if normalised not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level '{self.log_level}'. "
                f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}."
            )
        self.log_level = normalised
        return self

    @model_validator(mode="after")
    def resolve_project_root(self) -> "ExtractorConfig":
        if self.project_root is not None:
            self.project_root = str(Path(self.project_root).resolve())
        else:
            detected = _detect_project_root()
            self.project_root = str(detected if detected is not None else Path.cwd())
        return self

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def compiled_pattern(self) -> Optional[re.Pattern]:
        """The compiled issue pattern, or None when extraction is disabled."""
        if self.issue_pattern is None:
            return None
        return re.compile(self.issue_pattern)

    @property
    def extraction_enabled(self) -> bool:
        return self.issue_pattern is not None

    def its_project_for(self, project: str) -> Optional[str]:
        """Return the issue tracker project mapped to *project*, if any."""
        return self.its_projects.get(project)

    # ------------------------------------------------------------------
    # Factory: load from file + environment
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        project_root: Optional[str] = None,
        config_path: Optional[str] = None,
    ) -> "ExtractorConfig":
        """Load configuration with full resolution: env -> file -> defaults.

        Parameters
        ----------
        project_root:
            Explicit project root.  When *None*, auto-detection is used.
        config_path:
            Explicit path to a ``config.json`` file.  When *None*, the
            config file is looked up at
            ``<project_root>/.issue-refs/config.json``.

        Returns
        -------
        ExtractorConfig
            Fully resolved configuration object.

        Raises
        ------
        pydantic.ValidationError
            If the merged values are invalid, e.g. a malformed pattern.
        """
        if project_root is not None:
            resolved_root = str(Path(project_root).resolve())
        else:
            detected = _detect_project_root()
            resolved_root = str(detected if detected is not None else Path.cwd())

        file_values = _load_config_file(resolved_root, config_path)
        env_values = _load_env_overrides()

        merged: dict = {}
        if file_values:
            merged.update(file_values)
        if env_values:
            merged.update(env_values)
        merged["project_root"] = resolved_root

        return cls.model_validate(merged)

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------

    def configure_logging(self) -> None:
        """Apply the configured log level to the ``commit_issue_refs`` logger.

        Adds a stream handler on first use.  Calling it again only updates
        the level.
        """
        pkg_logger = logging.getLogger("commit_issue_refs")
        pkg_logger.setLevel(self.log_level)

        if not pkg_logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(self.log_level)
            formatter = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            handler.setFormatter(formatter)
            pkg_logger.addHandler(handler)

    def to_dict(self) -> dict:
        """Return all configuration values as a plain dictionary."""
        return self.model_dump()


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _detect_project_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Return the nearest directory at or above *start_path* holding a marker.

    *None* when no ancestor up to the filesystem root has one.
    """
    start = (start_path or Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in PROJECT_ROOT_MARKERS):
            return candidate
    return None


def _load_config_file(
    project_root: str,
    config_path: Optional[str] = None,
) -> dict:
    """Return the JSON object stored in the config file, or ``{}``.

    A missing, unreadable or non-object file is logged and treated as empty,
    so the defaults and environment still apply.
    """
    path = (
        Path(config_path).resolve()
        if config_path is not None
        else Path(project_root) / DEFAULT_CONFIG_DIR_NAME / CONFIG_FILE_NAME
    )
    if not path.is_file():
        logger.debug("No config file at %s. Using defaults.", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as fp:
            data = json.load(fp)
    except (OSError, json.JSONDecodeError):
        logger.warning("Could not load config file %s. Ignoring.", path, exc_info=True)
        return {}

    if not isinstance(data, dict):
        logger.warning("Config file %s does not contain a JSON object. Ignoring.", path)
        return {}
    logger.info("Loaded configuration from %s", path)
    return data


def _load_env_overrides() -> dict:
    """Read ``ISSUE_REFS_*`` environment variables and return overrides.

    Supported variables:

    - ``ISSUE_REFS_ISSUE_PATTERN`` -- override issue_pattern
    - ``ISSUE_REFS_ISSUE_PATTERN_GROUP_INDEX`` -- override the group index (integer)
    - ``ISSUE_REFS_LOG_LEVEL`` -- override log_level
    - ``ISSUE_REFS_ITS_PROJECTS`` -- override its_projects (JSON object)
    """
    overrides: dict = {}

    issue_pattern = os.environ.get(f"{ENV_PREFIX}ISSUE_PATTERN")
    if issue_pattern is not None:
        overrides["issue_pattern"] = issue_pattern

    group_index = os.environ.get(f"{ENV_PREFIX}ISSUE_PATTERN_GROUP_INDEX")
    if group_index is not None:
        try:
            overrides["issue_pattern_group_index"] = int(group_index)
        except ValueError:
            logger.warning(
                "Invalid %sISSUE_PATTERN_GROUP_INDEX value: %r. "
                "Must be an integer. Ignoring.",
                ENV_PREFIX,
                group_index,
            )

    log_level = os.environ.get(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level is not None:
        overrides["log_level"] = log_level

    its_projects = os.environ.get(f"{ENV_PREFIX}ITS_PROJECTS")
    if its_projects is not None:
        try:
            parsed = json.loads(its_projects)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            overrides["its_projects"] = parsed
        else:
            logger.warning(
                "Invalid %sITS_PROJECTS value: %r. Must be a JSON object. Ignoring.",
                ENV_PREFIX,
                its_projects,
            )

    if overrides:
        logger.info(
            "Environment overrides applied: %s",
            ", ".join(overrides.keys()),
        )

    return overrides
