# pm_mcp/tools/project.py
"""MCP project tool implementation."""

from mcp.server.fastmcp import FastMCP
from typing import Optional

from pm_mcp.models.results import InitSuggestion
from pm_mcp.services.project_config import (
    init_suggestion,
    project_info as load_project_info,
    wrap_in_namespace,
)
from pm_mcp.tools.context import ToolContext, run_tool


def register_project_tools(mcp: FastMCP, context: ToolContext) -> None:
    """Register the project tools with the MCP server.

    Args:
        mcp: The FastMCP server instance.
        context: Settings and collaborators shared by the tools.
    """

    @mcp.tool()
    async def project_info(project_root: Optional[str] = None) -> dict:
        """
        Get project configuration and status.

        Args:
            project_root: Project root directory (optional, defaults to cwd).

        Returns:
            Config summary, env files present and whether a compose file exists.
        """
        return run_tool(
            "project_info",
            lambda: load_project_info(context.project_root(project_root), context.environ)
        )

    @mcp.tool()
    async def project_init(project_root: Optional[str] = None, namespace: bool = False) -> dict:
        """
        Suggest a config file from the compose and env files in the project.

        Nothing is written; pass the suggestion to a file yourself or run
        ``pm init --write``.

        Args:
            project_root: Project root directory (optional, defaults to cwd).
            namespace: Nest the suggested config under a "pm" key.

        Returns:
            Suggested config JSON, detected compose services and DATABASE env vars.
        """
        def suggest() -> InitSuggestion:
            suggestion = init_suggestion(context.project_root(project_root))
            if namespace:
                suggestion.suggested_config = wrap_in_namespace(suggestion.suggested_config)
            return suggestion

        return run_tool("project_init", suggest)
