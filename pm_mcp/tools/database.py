# pm_mcp/tools/database.py
"""MCP database tools."""

from mcp.server.fastmcp import FastMCP
from typing import Optional

from pm_mcp.tools.context import ToolContext, confirmation_required, run_tool


def register_database_tools(mcp: FastMCP, context: ToolContext) -> None:
    """Register the database tools with the MCP server.

    Args:
        mcp: The FastMCP server instance.
        context: Settings and collaborators shared by the tools.
    """

    @mcp.tool()
    async def db_list(project_root: Optional[str] = None) -> dict:
        """
        List all databases in the project's database container.

        Args:
            project_root: Project root directory (optional, defaults to cwd).

        Returns:
            Databases with a flag marking the default one.
        """
        return run_tool("db_list", lambda: context.databases(project_root).list_databases())

    @mcp.tool()
    async def db_create(database: str, project_root: Optional[str] = None) -> dict:
        """
        Create a new empty database. The name must pass the allow-list.

        Args:
            database: Database name.
            project_root: Project root directory (optional, defaults to cwd).
        """
        return run_tool(
            "db_create", lambda: context.databases(project_root).create_database(database)
        )

    @mcp.tool()
    async def db_drop(
        database: str,
        confirm: bool = False,
        project_root: Optional[str] = None
    ) -> dict:
        """
        Drop a database (destructive). The default database cannot be dropped.

        Args:
            database: Database name.
            confirm: Must be true to confirm the destructive operation.
            project_root: Project root directory (optional, defaults to cwd).
        """
        if not confirm:
            return confirmation_required("drop database")
        return run_tool(
            "db_drop", lambda: context.databases(project_root).drop_database(database)
        )

    @mcp.tool()
    async def db_dump(
        database: Optional[str] = None,
        tables: Optional[list[str]] = None,
        project_root: Optional[str] = None
    ) -> dict:
        """
        Dump a database to a SQL file in the dumps directory.

        Args:
            database: Database name (optional, defaults to the DSN database).
            tables: Specific tables to dump (optional).
            project_root: Project root directory (optional, defaults to cwd).
        """
        return run_tool(
            "db_dump",
            lambda: context.databases(project_root).dump_database(database, tables)
        )

    @mcp.tool()
    async def db_import(
        database: str,
        sql_path: str,
        project_root: Optional[str] = None
    ) -> dict:
        """
        Import a SQL file into a database.

        Args:
            database: Target database name.
            sql_path: Path to the SQL file, relative to the project root or absolute.
            project_root: Project root directory (optional, defaults to cwd).
        """
        return run_tool(
            "db_import",
            lambda: context.databases(project_root).import_database(database, sql_path)
        )

    @mcp.tool()
    async def db_clone(
        target: str,
        source: Optional[str] = None,
        project_root: Optional[str] = None
    ) -> dict:
        """
        Clone a database (create if missing, dump the source, import).

        Args:
            target: Target database name.
            source: Source database (optional, defaults to the DSN database).
            project_root: Project root directory (optional, defaults to cwd).
        """
        return run_tool(
            "db_clone",
            lambda: context.databases(project_root).clone_database(target, source=source)
        )

    @mcp.tool()
    async def db_dumps(project_root: Optional[str] = None) -> dict:
        """
        List available SQL dump files, newest first.

        Args:
            project_root: Project root directory (optional, defaults to cwd).
        """
        return run_tool("db_dumps", lambda: context.databases(project_root).list_dumps())
