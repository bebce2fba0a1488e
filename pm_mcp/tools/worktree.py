# pm_mcp/tools/worktree.py
"""MCP worktree and workflow tools."""

from mcp.server.fastmcp import FastMCP
from typing import Optional

from pm_mcp.tools.context import ToolContext, confirmation_required, run_tool


def register_worktree_tools(mcp: FastMCP, context: ToolContext) -> None:
    """Register the worktree and workflow tools with the MCP server.

    Args:
        mcp: The FastMCP server instance.
        context: Settings and collaborators shared by the tools.
    """

    @mcp.tool()
    async def worktree_list(project_root: Optional[str] = None) -> dict:
        """
        List all git worktrees.

        Args:
            project_root: Project root directory (optional, defaults to cwd).
        """
        return run_tool("worktree_list", lambda: context.worktrees(project_root).list_worktrees())

    @mcp.tool()
    async def worktree_create(
        branch: str,
        new_branch: bool = False,
        project_root: Optional[str] = None
    ) -> dict:
        """
        Create a new git worktree below worktrees.base_path.

        Args:
            branch: Branch name.
            new_branch: Create a new branch (default false).
            project_root: Project root directory (optional, defaults to cwd).
        """
        return run_tool(
            "worktree_create",
            lambda: context.worktrees(project_root).create_worktree(branch, new_branch=new_branch)
        )

    @mcp.tool()
    async def worktree_remove(
        branch: str,
        confirm: bool = False,
        project_root: Optional[str] = None
    ) -> dict:
        """
        Remove a git worktree (destructive).

        Args:
            branch: Branch name.
            confirm: Must be true to confirm the destructive operation.
            project_root: Project root directory (optional, defaults to cwd).
        """
        if not confirm:
            return confirmation_required("remove worktree")
        return run_tool(
            "worktree_remove", lambda: context.worktrees(project_root).remove_worktree(branch)
        )

    @mcp.tool()
    async def workflow_create(
        branch: str,
        new_branch: bool = False,
        project_root: Optional[str] = None
    ) -> dict:
        """
        Create an isolated worktree with its own database (if db_per_worktree is enabled).

        Args:
            branch: Branch name.
            new_branch: Create a new branch (default false).
            project_root: Project root directory (optional, defaults to cwd).
        """
        return run_tool(
            "workflow_create",
            lambda: context.worktrees(project_root).create_isolated(branch, new_branch=new_branch)
        )

    @mcp.tool()
    async def workflow_remove(
        branch: str,
        confirm: bool = False,
        drop_db: bool = True,
        project_root: Optional[str] = None
    ) -> dict:
        """
        Remove a worktree and optionally drop its database (destructive).

        Args:
            branch: Branch name.
            confirm: Must be true to confirm the destructive operation.
            drop_db: Drop the associated database (default true).
            project_root: Project root directory (optional, defaults to cwd).
        """
        if not confirm:
            return confirmation_required("remove worktree")
        return run_tool(
            "workflow_remove",
            lambda: context.worktrees(project_root).remove_isolated(branch, drop_db=drop_db)
        )
