"""FastMCP server and tool definitions for issue reference extraction."""

from commit_issue_refs.mcp.server import create_server

__all__ = ["create_server"]
