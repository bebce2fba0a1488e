# pm_mcp/main.py
"""Main entry point for pm: branch databases from the CLI or over MCP."""

import argparse
import logging
import sys
from typing import Optional, Sequence

from mcp.server.fastmcp import FastMCP

from pm_mcp.config import Settings
from pm_mcp.models.results import SwitchResult
from pm_mcp.services.branching import BranchDatabaseManager
from pm_mcp.services.project_config import (
    init_suggestion,
    project_info,
    wrap_in_namespace,
    write_init_config,
)
from pm_mcp.tools import (
    ToolContext,
    register_branch_tools,
    register_database_tools,
    register_project_tools,
    register_worktree_tools,
)
from pm_mcp.utils.constants import ProgressStage
from pm_mcp.utils.exceptions import ConfigExistsError, PmError

logger = logging.getLogger("pm_mcp")

SERVER_NAME = "mcp-project-manager"


def create_mcp_app(context: ToolContext) -> FastMCP:
    """Create and configure the MCP application.

    Args:
        context: Settings and collaborators handed to every tool.

    Returns:
        Configured FastMCP instance.
    """
    mcp = FastMCP(
        SERVER_NAME,
        host=context.settings.mcp_host,
        port=context.settings.mcp_port,
    )
    register_project_tools(mcp, context)
    register_database_tools(mcp, context)
    register_branch_tools(mcp, context)
    register_worktree_tools(mcp, context)
    return mcp


def run_server(settings: Settings) -> None:
    """Run the MCP server until the client disconnects.

    Args:
        settings: Application settings.
    """
    mcp = create_mcp_app(ToolContext(settings=settings))
    logger.info(
        "pm MCP server ready (transport=%s, project_root=%s)",
        settings.mcp_transport,
        settings.get_project_root(),
    )
    mcp.run(transport=settings.mcp_transport)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pm",
        description="Project manager for docker compose based development: "
                    "one database per git branch.",
    )
    parser.add_argument(
        "--mcp",
        action="store_true",
        help="Run as MCP server"
    )
    parser.add_argument(
        "--project-root",
        type=str,
        help="Project root directory (defaults to cwd)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (default INFO)"
    )

    subparsers = parser.add_subparsers(dest="command")

    checkout = subparsers.add_parser("checkout", help="Switch git branch and database")
    checkout.add_argument("branch", help="Branch to check out")
    checkout.add_argument("-c", "--create", action="store_true", help="Create new branch")
    checkout.add_argument("--clone-from", type=str, help="Clone data from this database")

    switch = subparsers.add_parser("switch", help="Switch database for the current branch")
    switch.add_argument("--clone-from", type=str, help="Clone data from this database")

    subparsers.add_parser("info", help="Show project configuration and status")

    init = subparsers.add_parser("init", help="Suggest a config file for this project")
    init.add_argument("-w", "--write", action="store_true", help="Write .haive/config.json")
    init.add_argument("-n", "--namespace", action="store_true", help="Nest the config under \"pm\"")
    return parser


def _print_progress(stage: ProgressStage, detail: str) -> None:
    print(f"  {stage.value}: {detail}", file=sys.stderr)


def _print_switch(result: SwitchResult, branch_label: str) -> None:
    print(f"✓ {branch_label}: {result.branch}")
    print(f"✓ Using database: {result.database}")
    if result.created:
        print("✓ Created new database")
    if result.cloned:
        print("✓ Cloned data from source database")


def _run_init(project_root, write: bool, namespace: bool) -> int:
    config = init_suggestion(project_root).suggested_config
    if namespace:
        config = wrap_in_namespace(config)

    if not write:
        print(config)
        return 0
    try:
        path = write_init_config(project_root, config)
    except ConfigExistsError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        print("Remove it first or run 'pm init' without --write to preview.", file=sys.stderr)
        return 1
    print(f"Created: {path}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point.

    Returns:
        Process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings()
    if args.project_root:
        settings.project_root = args.project_root
    if args.log_level:
        settings.log_level = args.log_level

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )

    if args.mcp:
        run_server(settings)
        return 0

    if args.command is None:
        parser.print_help()
        return 0

    project_root = settings.get_project_root()
    try:
        if args.command == "info":
            print(project_info(project_root).model_dump_json(indent=2))
            return 0
        if args.command == "init":
            return _run_init(project_root, write=args.write, namespace=args.namespace)

        manager = BranchDatabaseManager(
            project_root, settings=settings, progress=_print_progress
        )
        if args.command == "checkout":
            result = manager.checkout(args.branch, create=args.create, clone_from=args.clone_from)
            _print_switch(result, "Switched to branch")
        else:
            result = manager.switch(clone_from=args.clone_from)
            _print_switch(result, "Current branch")
    except PmError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
