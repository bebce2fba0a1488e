# pm_mcp/tools/branch.py
"""MCP branch database tools."""

from mcp.server.fastmcp import FastMCP
from typing import Optional

from pm_mcp.tools.context import ToolContext, run_tool


def register_branch_tools(mcp: FastMCP, context: ToolContext) -> None:
    """Register the switch and checkout tools with the MCP server.

    Args:
        mcp: The FastMCP server instance.
        context: Settings and collaborators shared by the tools.
    """

    @mcp.tool()
    async def branch_switch(
        branch: Optional[str] = None,
        clone_from: Optional[str] = None,
        project_root: Optional[str] = None
    ) -> dict:
        """
        Switch the database for a branch without changing the git branch.

        Creates the branch database when it does not exist; feature branches
        are seeded from the default database unless clone_from is given.
        DATABASE_URL in .env.local is updated to the branch database.

        Args:
            branch: Branch name (optional, defaults to the current git branch).
            clone_from: Database to seed a new branch database from (optional).
            project_root: Project root directory (optional, defaults to cwd).
        """
        return run_tool(
            "branch_switch",
            lambda: context.branches(project_root).switch(branch=branch, clone_from=clone_from)
        )

    @mcp.tool()
    async def branch_checkout(
        branch: str,
        create: bool = False,
        clone_from: Optional[str] = None,
        project_root: Optional[str] = None
    ) -> dict:
        """
        Check out a git branch, then switch to its database.

        Args:
            branch: Branch name.
            create: Create the branch (git checkout -b).
            clone_from: Database to seed a new branch database from (optional).
            project_root: Project root directory (optional, defaults to cwd).
        """
        return run_tool(
            "branch_checkout",
            lambda: context.branches(project_root).checkout(
                branch, create=create, clone_from=clone_from
            )
        )
