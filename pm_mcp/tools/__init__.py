"""MCP tools for pm-mcp."""

from pm_mcp.tools.context import ToolContext, run_tool
from pm_mcp.tools.project import register_project_tools
from pm_mcp.tools.database import register_database_tools
from pm_mcp.tools.branch import register_branch_tools
from pm_mcp.tools.worktree import register_worktree_tools

__all__ = [
    "ToolContext",
    "run_tool",
    "register_project_tools",
    "register_database_tools",
    "register_branch_tools",
    "register_worktree_tools",
]
