"""Tests for the FastMCP server.

Verifies server creation, configuration integration, singleton management,
tool registration and execution, and error handling.  All tests use real
config files and, for the revision tools, real git repositories in
temporary directories.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

import pytest

from commit_issue_refs.config import ENV_PREFIX, ExtractorConfig
from commit_issue_refs.mcp.server import (
    create_server,
    get_config,
    get_server,
    reset_server,
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_tool_result(result) -> dict:
    """Extract a dict from a FastMCP ToolResult.

    FastMCP tool.run() returns a ToolResult whose .content is a list of
    TextContent objects.  The first TextContent's .text is JSON-encoded.
    """
    if isinstance(result, dict):
        return result
    if isinstance(result, str):
        return json.loads(result)
    if hasattr(result, "content") and result.content:
        text = result.content[0].text
        return json.loads(text)
    raise TypeError(f"Cannot parse tool result of type {type(result)}")


def _call_tool(server, name: str, arguments: dict) -> dict:
    tools = asyncio.run(server.get_tools())
    return _parse_tool_result(asyncio.run(tools[name].run(arguments)))


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-c", "user.name=Test User",
            "-c", "user.email=test@example.org",
            "-c", "commit.gpgsign=false",
            *args,
        ],
        cwd=str(repo),
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clean_server():
    """Reset the server singleton and the package logger around each test."""
    pkg_logger = logging.getLogger("commit_issue_refs")
    saved_level = pkg_logger.level
    saved_handlers = list(pkg_logger.handlers)
    env_keys = [k for k in os.environ if k.startswith(ENV_PREFIX)]
    saved_env = {k: os.environ.pop(k) for k in env_keys}
    reset_server()
    yield
    reset_server()
    pkg_logger.setLevel(saved_level)
    pkg_logger.handlers = saved_handlers
    for k in list(os.environ.keys()):
        if k.startswith(ENV_PREFIX):
            del os.environ[k]
    os.environ.update(saved_env)


@pytest.fixture
def project_dir():
    """Create a temporary project directory with a .git marker for root detection."""
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / ".git").mkdir()
        yield tmpdir


@pytest.fixture
def project_with_config(project_dir):
    """Create a project directory whose config enables ``bug#(\\d+)``."""
    config_dir = Path(project_dir) / ".issue-refs"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.json").write_text(json.dumps({
        "issue_pattern": r"bug#(\d+)",
        "issue_pattern_group_index": 1,
        "log_level": "DEBUG",
        "its_projects": {"web": "WEB-TRACKER"},
    }))
    return project_dir


@pytest.fixture
def repos_root(tmp_path):
    """A repositories root with a ``web`` repository holding two commits."""
    repo = tmp_path / "repos" / "web"
    repo.mkdir(parents=True)
    _git(repo, "init", "-q")
    _git(repo, "commit", "--allow-empty", "-m", "subject\nbug#42\n\nChange-Id: I9")
    _git(repo, "commit", "--allow-empty", "-m", "bug#42\n\nBug: bug#16\nChange-Id: I1")
    return tmp_path / "repos"


# ---------------------------------------------------------------------------
# Server creation tests
# ---------------------------------------------------------------------------

class TestCreateServer:
    """Tests for create_server() factory function."""

    def test_returns_fastmcp_instance(self, project_dir):
        from fastmcp import FastMCP
        server = create_server(project_root=project_dir)
        assert isinstance(server, FastMCP)

    def test_server_name(self, project_dir):
        server = create_server(project_root=project_dir)
        assert server.name == "commit-issue-refs"

    def test_respects_config_file(self, project_with_config):
        create_server(project_root=project_with_config)
        cfg = get_config()
        assert cfg.issue_pattern == r"bug#(\d+)"
        assert cfg.issue_pattern_group_index == 1
        assert cfg.log_level == "DEBUG"

    def test_applies_log_level(self, project_with_config):
        create_server(project_root=project_with_config)
        assert logging.getLogger("commit_issue_refs").level == logging.DEBUG

    def test_project_root_resolves_correctly(self, project_dir):
        create_server(project_root=project_dir)
        assert get_config().project_root == str(Path(project_dir).resolve())

    def test_explicit_config_path(self, project_dir, tmp_path):
        custom = tmp_path / "custom.json"
        custom.write_text(json.dumps({"issue_pattern": r"JIRA-\d+"}))
        create_server(project_root=project_dir, config_path=str(custom))
        assert get_config().issue_pattern == r"JIRA-\d+"


class TestAccessors:
    """Tests for get_config(), get_server() and reset_server()."""

    def test_get_config_after_create(self, project_dir):
        create_server(project_root=project_dir)
        assert isinstance(get_config(), ExtractorConfig)

    def test_get_config_before_create_raises(self):
        with pytest.raises(RuntimeError, match="not been initialized"):
            get_config()

    def test_get_server_after_create(self, project_dir):
        server = create_server(project_root=project_dir)
        assert get_server() is server

    def test_get_server_creates_if_needed(self):
        assert get_server() is not None

    def test_reset_clears_config(self, project_dir):
        create_server(project_root=project_dir)
        reset_server()
        with pytest.raises(RuntimeError):
            get_config()

    def test_reset_is_idempotent(self):
        reset_server()
        reset_server()


# ---------------------------------------------------------------------------
# Tool tests
# ---------------------------------------------------------------------------

class TestToolRegistration:
    def test_all_tools_registered(self, project_dir):
        server = create_server(project_root=project_dir)
        tools = asyncio.run(server.get_tools())
        for name in (
            "health_check",
            "extract_issue_refs",
            "extract_revision_issue_refs",
            "extract_patch_set_issue_refs",
        ):
            assert name in tools


class TestHealthCheckTool:
    def test_contains_required_fields(self, project_with_config):
        server = create_server(project_root=project_with_config)
        result = _call_tool(server, "health_check", {})
        for field in (
            "server_version",
            "status",
            "issue_pattern",
            "issue_pattern_group_index",
            "project_root",
            "timestamp",
        ):
            assert field in result, f"Missing field: {field}"

    def test_healthy_with_pattern(self, project_with_config):
        server = create_server(project_root=project_with_config)
        result = _call_tool(server, "health_check", {})
        assert result["status"] == "healthy"
        assert result["issue_pattern"] == r"bug#(\d+)"

    def test_degraded_without_pattern(self, project_dir):
        server = create_server(project_root=project_dir)
        result = _call_tool(server, "health_check", {})
        assert result["status"] == "degraded"
        assert result["issue_pattern"] is None

    def test_version_matches(self, project_dir):
        from commit_issue_refs import __version__
        server = create_server(project_root=project_dir)
        assert _call_tool(server, "health_check", {})["server_version"] == __version__


class TestExtractIssueRefsTool:
    def test_zones_reported(self, project_with_config):
        server = create_server(project_root=project_with_config)
        result = _call_tool(server, "extract_issue_refs", {
            "message": "Fix bug#42\n\nSee bug#16\n\nBug: bug#16",
        })
        assert result["error"] is False
        assert result["issues"] == {
            "42": ["somewhere", "subject"],
            "16": ["body", "footer", "footer-Bug", "somewhere"],
        }
        assert sorted(result["issue_ids"]) == ["16", "42"]

    def test_no_pattern_finds_nothing(self, project_dir):
        server = create_server(project_root=project_dir)
        result = _call_tool(server, "extract_issue_refs", {"message": "Fix bug#42"})
        assert result["issues"] == {}
        assert result["issue_ids"] == []


@requires_git
class TestRevisionTools:
    def test_extract_revision(self, project_with_config, repos_root):
        server = create_server(project_root=project_with_config)
        result = _call_tool(server, "extract_revision_issue_refs", {
            "project": "web",
            "revision": "HEAD",
            "repos_root": str(repos_root),
        })
        assert result["error"] is False
        assert result["its_project"] == "WEB-TRACKER"
        assert result["issues"] == {
            "42": ["somewhere", "subject"],
            "16": ["footer", "footer-Bug", "somewhere"],
        }

    def test_extract_revision_unknown_project(self, project_with_config, repos_root):
        server = create_server(project_root=project_with_config)
        result = _call_tool(server, "extract_revision_issue_refs", {
            "project": "missing",
            "revision": "HEAD",
            "repos_root": str(repos_root),
        })
        assert result["error"] is True
        assert "Could not fetch commit message" in result["message"]

    def test_extract_patch_set(self, project_with_config, repos_root, tmp_path):
        repo = repos_root / "web"
        history = tmp_path / "history.json"
        history.write_text(json.dumps({
            "I1": {"1": _git(repo, "rev-parse", "HEAD~1"), "2": _git(repo, "rev-parse", "HEAD")},
        }))
        server = create_server(project_root=project_with_config)
        result = _call_tool(server, "extract_patch_set_issue_refs", {
            "project": "web",
            "revision": "HEAD",
            "change_id": "I1",
            "patch_set_number": 2,
            "history_path": str(history),
            "repos_root": str(repos_root),
        })
        assert result["error"] is False
        assert result["patch_set"] == 2
        assert result["issues"]["42"] == ["added@subject", "somewhere", "subject"]
        assert "added@somewhere" in result["issues"]["16"]

    def test_extract_patch_set_missing_history(self, project_with_config, repos_root):
        server = create_server(project_root=project_with_config)
        result = _call_tool(server, "extract_patch_set_issue_refs", {
            "project": "web",
            "revision": "HEAD",
            "change_id": "I1",
            "patch_set_number": 2,
            "repos_root": str(repos_root),
        })
        assert result["error"] is True
        assert "No revision recorded for patch set 1" in result["message"]

    def test_extract_patch_set_invalid_number(self, project_with_config, repos_root):
        server = create_server(project_root=project_with_config)
        result = _call_tool(server, "extract_patch_set_issue_refs", {
            "project": "web",
            "revision": "HEAD",
            "change_id": "I1",
            "patch_set_number": 0,
            "repos_root": str(repos_root),
        })
        assert result["error"] is True
        assert "Invalid patch set" in result["message"]
