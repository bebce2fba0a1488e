"""Data models for pm-mcp."""

from pm_mcp.models.dsn import DSN
from pm_mcp.models.config import (
    ProjectConfig,
    ProjectSection,
    DockerSection,
    DatabasePolicy,
    WorktreesPolicy,
    WorktreeCopyPolicy,
)
from pm_mcp.models.results import (
    SwitchResult,
    CheckoutResult,
    DatabaseInfo,
    DatabaseListResult,
    DatabaseActionResult,
    DumpResult,
    CloneResult,
    DumpFileInfo,
    WorktreeInfo,
    WorktreeCreateResult,
    WorktreeRemoveResult,
    ConfigSummary,
    ProjectInfo,
    InitSuggestion,
)

__all__ = [
    "DSN",
    "ProjectConfig",
    "ProjectSection",
    "DockerSection",
    "DatabasePolicy",
    "WorktreesPolicy",
    "WorktreeCopyPolicy",
    "SwitchResult",
    "CheckoutResult",
    "DatabaseInfo",
    "DatabaseListResult",
    "DatabaseActionResult",
    "DumpResult",
    "CloneResult",
    "DumpFileInfo",
    "WorktreeInfo",
    "WorktreeCreateResult",
    "WorktreeRemoveResult",
    "ConfigSummary",
    "ProjectInfo",
    "InitSuggestion",
]
