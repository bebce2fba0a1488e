"""Service modules for pm-mcp."""

from pm_mcp.services.naming import (
    derive_database_name,
    derive_worktree_database_name,
    is_trunk_branch,
    sanitize_worktree_name,
    validate_branch_name,
)
from pm_mcp.services.allowlist import (
    ensure_database_allowed,
    is_database_allowed,
    matches_allowed,
)
from pm_mcp.services.env_file import read_env_keys, read_env_value, upsert_env_value
from pm_mcp.services.env_resolver import lookup_env_var, resolve_env_vars
from pm_mcp.services.project_config import (
    init_suggestion,
    load_project_config,
    project_info,
    validate_project_config,
    wrap_in_namespace,
    write_init_config,
)
from pm_mcp.services.executor import (
    DatabaseExecutor,
    DockerComposeExecutor,
    MySQLExecutor,
    PostgresExecutor,
    create_executor,
)
from pm_mcp.services.vcs import VCS, GitVCS
from pm_mcp.services.databases import DatabaseService
from pm_mcp.services.branching import BranchDatabaseManager
from pm_mcp.services.worktrees import WorktreeService

__all__ = [
    # Naming
    "derive_database_name",
    "derive_worktree_database_name",
    "is_trunk_branch",
    "sanitize_worktree_name",
    "validate_branch_name",
    # Allow-list
    "ensure_database_allowed",
    "is_database_allowed",
    "matches_allowed",
    # Env
    "read_env_keys",
    "read_env_value",
    "upsert_env_value",
    "lookup_env_var",
    "resolve_env_vars",
    # Config
    "init_suggestion",
    "load_project_config",
    "project_info",
    "validate_project_config",
    "wrap_in_namespace",
    "write_init_config",
    # Collaborators
    "DatabaseExecutor",
    "DockerComposeExecutor",
    "MySQLExecutor",
    "PostgresExecutor",
    "create_executor",
    "VCS",
    "GitVCS",
    # Commands
    "DatabaseService",
    "BranchDatabaseManager",
    "WorktreeService",
]
