# pm_mcp/tools/context.py
"""Shared plumbing for MCP tools."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel

from pm_mcp.config import Settings
from pm_mcp.services.branching import BranchDatabaseManager
from pm_mcp.services.databases import DatabaseService
from pm_mcp.services.executor import DatabaseExecutor
from pm_mcp.services.project_config import load_project_config
from pm_mcp.services.vcs import VCS
from pm_mcp.services.worktrees import WorktreeService
from pm_mcp.utils.constants import MCP_GENERIC_ERROR
from pm_mcp.utils.exceptions import ConfigInvalidError, PmError

logger = logging.getLogger("pm-tools")


@dataclass
class ToolContext:
    """What a tool call needs to build its services.

    Services are built per call; nothing is carried between calls.
    """

    settings: Settings
    executor: Optional[DatabaseExecutor] = None
    vcs: Optional[VCS] = None
    environ: Optional[Mapping[str, str]] = None

    def project_root(self, override: Optional[str] = None) -> Path:
        if override:
            return Path(override).expanduser().resolve()
        return self.settings.get_project_root()

    def databases(self, project_root: Optional[str] = None) -> DatabaseService:
        config = load_project_config(self.project_root(project_root), self.environ)
        return DatabaseService(config, executor=self.executor, settings=self.settings)

    def branches(self, project_root: Optional[str] = None) -> BranchDatabaseManager:
        return BranchDatabaseManager(
            self.project_root(project_root),
            settings=self.settings,
            vcs=self.vcs,
            executor=self.executor,
            environ=self.environ,
        )

    def worktrees(self, project_root: Optional[str] = None) -> WorktreeService:
        return WorktreeService(
            self.project_root(project_root),
            settings=self.settings,
            vcs=self.vcs,
            executor=self.executor,
            environ=self.environ,
        )


def run_tool(name: str, func: Callable[[], Any]) -> dict:
    """Run a tool body and shape its result.

    Args:
        name: Tool name, for logging.
        func: Zero-argument callable doing the work.

    Returns:
        ``{"status": "success", "data": ...}`` or the error payload.
    """
    try:
        result = func()
    except PmError as e:
        logger.warning("Tool %s failed: [%s] %s", name, e.code.value, e.message)
        return e.to_dict()
    except Exception as e:
        logger.exception("Tool %s failed unexpectedly", name)
        return {
            "status": "error",
            "error": {
                "code": "INTERNAL_ERROR",
                "mcp_code": MCP_GENERIC_ERROR,
                "message": str(e),
                "details": {}
            }
        }
    return {"status": "success", "data": _to_jsonable(result)}


def confirmation_required(action: str) -> dict:
    """Error payload for destructive tools called without ``confirm``."""
    return ConfigInvalidError(f"confirm must be true to {action}").to_dict()


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    return value
