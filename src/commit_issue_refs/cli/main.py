"""Main Click CLI entry point for the issue-refs command.

Provides the ``issue-refs`` CLI group with subcommands that extract issue
references from a commit message file, a git revision, or a patch set
compared against its predecessor.

Entry point registered in pyproject.toml::

    [project.scripts]
    issue-refs = "commit_issue_refs.cli.main:cli"

Usage examples::

    issue-refs --version
    git log -1 --format=%B | issue-refs --issue-pattern 'bug#(\\d+)' --group-index 1 text
    issue-refs revision . HEAD --repos-root /path/to/repo --json-output
    issue-refs patch-set web 1a2b3c --change-id I12 --patch-set 2 --history history.json
"""

from __future__ import annotations

import json
import sys
from typing import NoReturn, Optional

import click
from pydantic import ValidationError

from commit_issue_refs import __version__
from commit_issue_refs.config import ExtractorConfig
from commit_issue_refs.errors import IssueRefsError
from commit_issue_refs.extraction.extractor import IssueExtractor
from commit_issue_refs.models.occurrence import OccurrenceIndex
from commit_issue_refs.models.patch_set import PatchSetRef
from commit_issue_refs.vcs.git import GitCommitMessageFetcher
from commit_issue_refs.vcs.history import MappingPatchSetHistory

_json_output_option = click.option(
    "--json-output",
    "output_json",
    is_flag=True,
    default=False,
    help="Output issues as JSON instead of human-readable text.",
)


@click.group()
@click.version_option(version=__version__, prog_name="commit-issue-refs")
@click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Project root holding .issue-refs/config.json. Auto-detected if not set.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Explicit path to a config.json file.",
)
@click.option(
    "--issue-pattern",
    default=None,
    help="Regular expression matching issue references. Overrides the config.",
)
@click.option(
    "--group-index",
    type=click.IntRange(min=0),
    default=None,
    help="Capture group of the issue pattern holding the issue id.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    project_root: Optional[str],
    config_path: Optional[str],
    issue_pattern: Optional[str],
    group_index: Optional[int],
) -> None:
    """Commit Issue Refs -- Find issue references in commit messages."""
    ctx.ensure_object(dict)
    ctx.obj["project_root"] = project_root
    ctx.obj["config_path"] = config_path
    ctx.obj["issue_pattern"] = issue_pattern
    ctx.obj["group_index"] = group_index


@cli.command()
@click.argument("message_file", type=click.File("r"), default="-")
@_json_output_option
@click.pass_context
def text(ctx: click.Context, message_file, output_json: bool) -> None:
    """Extract issue references from a commit message file (default: stdin)."""
    config = _load_config(ctx)
    extractor = IssueExtractor.from_config(config)

    occurrences = extractor.extract_from_text(message_file.read())
    _output({"issues": occurrences.to_labels()}, occurrences, output_json)


@cli.command()
@click.argument("project")
@click.argument("revision")
@click.option(
    "--repos-root",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    show_default=True,
    help="Directory holding one git repository per project.",
)
@_json_output_option
@click.pass_context
def revision(
    ctx: click.Context,
    project: str,
    revision: str,
    repos_root: str,
    output_json: bool,
) -> None:
    """Extract issue references from the commit message of REVISION in PROJECT."""
    config = _load_config(ctx)
    extractor = IssueExtractor.from_config(
        config, message_fetcher=GitCommitMessageFetcher(repos_root)
    )

    try:
        occurrences = extractor.extract_for_revision(project, revision)
    except IssueRefsError as exc:
        _fail(str(exc))

    _output(
        _revision_data(config, project, revision, occurrences),
        occurrences,
        output_json,
    )


@cli.command("patch-set")
@click.argument("project")
@click.argument("revision")
@click.option("--change-id", required=True, help="Change the patch set belongs to.")
@click.option(
    "--patch-set",
    "patch_set_number",
    type=click.IntRange(min=1),
    required=True,
    help="Patch set number of REVISION within the change.",
)
@click.option(
    "--history",
    "history_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON file mapping change ids to patch set revisions.",
)
@click.option(
    "--repos-root",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    show_default=True,
    help="Directory holding one git repository per project.",
)
@_json_output_option
@click.pass_context
def patch_set(
    ctx: click.Context,
    project: str,
    revision: str,
    change_id: str,
    patch_set_number: int,
    history_path: Optional[str],
    repos_root: str,
    output_json: bool,
) -> None:
    """Extract issue references and mark those added since the previous patch set."""
    config = _load_config(ctx)
    try:
        ref = PatchSetRef(change_id=change_id, patch_set_number=patch_set_number)
    except ValidationError as exc:
        _fail(f"Invalid patch set: {exc}")

    try:
        history = (
            MappingPatchSetHistory.from_json_file(history_path)
            if history_path is not None
            else MappingPatchSetHistory({})
        )
        extractor = IssueExtractor.from_config(
            config,
            message_fetcher=GitCommitMessageFetcher(repos_root),
            patch_set_history=history,
        )
        occurrences = extractor.extract_for_patch_set(project, revision, ref)
    except IssueRefsError as exc:
        _fail(str(exc))

    data = _revision_data(config, project, revision, occurrences)
    data["change_id"] = change_id
    data["patch_set"] = patch_set_number
    _output(data, occurrences, output_json)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_config(ctx: click.Context) -> ExtractorConfig:
    """Load the configuration and apply command line overrides.

    Exits with status 1 when the configuration is invalid.
    """
    obj = ctx.obj or {}
    try:
        config = ExtractorConfig.load(
            project_root=obj.get("project_root"),
            config_path=obj.get("config_path"),
        )
        overrides = {}
        if obj.get("issue_pattern") is not None:
            overrides["issue_pattern"] = obj["issue_pattern"]
        if obj.get("group_index") is not None:
            overrides["issue_pattern_group_index"] = obj["group_index"]
        if overrides:
            config = ExtractorConfig.model_validate(
                {**config.model_dump(), **overrides}
            )
    except ValidationError as exc:
        _fail(f"Invalid configuration: {exc}")

    return config


def _revision_data(
    config: ExtractorConfig,
    project: str,
    revision: str,
    occurrences: OccurrenceIndex,
) -> dict:
    return {
        "project": project,
        "its_project": config.its_project_for(project),
        "revision": revision,
        "issues": occurrences.to_labels(),
    }


def _output(data: dict, occurrences: OccurrenceIndex, output_json: bool) -> None:
    if output_json:
        click.echo(json.dumps(data, indent=2, sort_keys=True))
    else:
        _render_occurrences_text(occurrences)


def _render_occurrences_text(occurrences: OccurrenceIndex) -> None:
    """Print one ``<issue id>: <labels>`` line per issue."""
    if not occurrences:
        click.secho("No issue references found.", fg="yellow")
        return
    for issue_id, labels in occurrences.to_labels().items():
        click.echo(f"{issue_id}: {', '.join(labels)}")


def _fail(message: str) -> NoReturn:
    click.secho("ERROR: " + message, fg="red", err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
