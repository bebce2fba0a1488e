"""Git worktrees, optionally paired with their own database."""

import fnmatch
import logging
import shutil
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

from pm_mcp.config import Settings
from pm_mcp.models.config import ProjectConfig, WorktreeCopyPolicy, WorktreesPolicy
from pm_mcp.models.results import (
    WorktreeCreateResult,
    WorktreeInfo,
    WorktreeRemoveResult,
)
from pm_mcp.services.databases import DatabaseService
from pm_mcp.services.env_file import upsert_env_value
from pm_mcp.services.executor import DatabaseExecutor
from pm_mcp.services.naming import (
    derive_worktree_database_name,
    sanitize_worktree_name,
    validate_branch_name,
)
from pm_mcp.services.project_config import load_project_config
from pm_mcp.services.vcs import VCS, GitVCS
from pm_mcp.utils.exceptions import (
    ConfigInvalidError,
    ConfigMissingError,
    PathTraversalError,
)

logger = logging.getLogger("pm-worktrees")


def check_path_traversal(path: Path, base: Path) -> None:
    """Raise if ``path`` does not stay below ``base``."""
    resolved = path.resolve()
    base_resolved = base.resolve()
    if resolved == base_resolved or not resolved.is_relative_to(base_resolved):
        raise PathTraversalError(str(path), str(base))


def copy_worktree_files(
    project_root: Path,
    worktree_path: Path,
    policy: WorktreeCopyPolicy
) -> list[str]:
    """Copy files matching the include globs from the project into a worktree.

    A matching directory is created empty; ``dir/**`` also matches every
    file below ``dir``. Paths matching an exclude pattern, or lying inside
    an excluded directory, are skipped. Existing files in the worktree are
    overwritten.

    Args:
        project_root: Directory the patterns are relative to.
        worktree_path: Worktree receiving the copies.
        policy: Include and exclude patterns.

    Returns:
        Copied paths relative to the project root, in copy order.

    Raises:
        ConfigInvalidError: If a pattern is absolute or climbs out with ``..``.
    """
    root = Path(project_root)
    worktree = Path(worktree_path)
    copied: list[str] = []
    seen: set[str] = set()

    for pattern in policy.include:
        for source in _glob(root, pattern):
            relative = source.relative_to(root).as_posix()
            if relative in seen or is_excluded(relative, policy.exclude):
                continue
            if source.resolve().is_relative_to(worktree.resolve()):
                continue
            seen.add(relative)

            target = worktree / relative
            if source.is_dir():
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, target)
            copied.append(relative)

    if copied:
        logger.info("Copied %d paths into %s", len(copied), worktree)
    return copied


def is_excluded(relative: str, patterns: Sequence[str]) -> bool:
    """True when ``relative`` matches a pattern or sits below an excluded directory."""
    for pattern in patterns:
        pattern = pattern.rstrip("/")
        if fnmatch.fnmatchcase(relative, pattern):
            return True
        if pattern.startswith("**/") and fnmatch.fnmatchcase(relative, pattern[3:]):
            return True
        if relative.startswith(pattern + "/"):
            return True
    return False


def _glob(root: Path, pattern: str) -> Iterable[Path]:
    parts = Path(pattern).parts
    if not parts or Path(pattern).is_absolute() or ".." in parts:
        raise ConfigInvalidError(
            f"worktrees.copy pattern '{pattern}' must be relative to the project root"
        )
    matches = set(root.glob(pattern))
    # A trailing ** only yields directories, so add what lies inside them
    if pattern.rstrip("/").endswith("**"):
        matches.update(root.glob(pattern.rstrip("/") + "/*"))
    return sorted(matches)


class WorktreeService:
    """Worktree commands for a project."""

    def __init__(
        self,
        project_root: Path,
        settings: Optional[Settings] = None,
        vcs: Optional[VCS] = None,
        executor: Optional[DatabaseExecutor] = None,
        environ: Optional[Mapping[str, str]] = None
    ):
        self.project_root = Path(project_root)
        self.settings = settings or Settings()
        self.vcs = vcs or GitVCS(
            self.project_root,
            git_binary=self.settings.git_binary,
            timeout=self.settings.command_timeout,
        )
        self._executor = executor
        self._environ = environ

    def list_worktrees(self) -> list[WorktreeInfo]:
        return self.vcs.worktree_list()

    def create_worktree(self, branch: str, new_branch: bool = False) -> WorktreeCreateResult:
        """Add a worktree for ``branch`` below the configured base path."""
        config = self._load()
        path = self._worktree_path(config, branch)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.vcs.worktree_add(path, branch, new_branch=new_branch)
        result = WorktreeCreateResult(path=str(path), branch=branch)

        copy_policy = self._policy(config).copy_files
        if copy_policy is not None:
            result.copied_files = copy_worktree_files(self.project_root, path, copy_policy)
        return result

    def remove_worktree(self, branch: str) -> WorktreeRemoveResult:
        config = self._load()
        path = self._worktree_path(config, branch)
        self.vcs.worktree_remove(path)
        return WorktreeRemoveResult(path=str(path))

    def create_isolated(self, branch: str, new_branch: bool = False) -> WorktreeCreateResult:
        """Add a worktree and, when ``db_per_worktree`` is set, its own database.

        The database is cloned from the default database and written to the
        worktree's env file.
        """
        config = self._load()
        result = self.create_worktree(branch, new_branch=new_branch)

        policy = self._policy(config)
        if not policy.db_per_worktree or config.database is None:
            return result

        databases = DatabaseService(config, executor=self._executor, settings=self.settings)
        database = derive_worktree_database_name(policy.db_prefix, branch)
        databases.clone_database(target=database)

        upsert_env_value(
            Path(result.path) / self.settings.env_file_name,
            self.settings.env_key,
            str(databases.dsn.with_database(database)),
        )
        logger.info("Worktree %s uses database %s", result.path, database)
        result.database = database
        return result

    def remove_isolated(self, branch: str, drop_db: bool = True) -> WorktreeRemoveResult:
        """Remove a worktree and drop its database when one was provisioned."""
        config = self._load()
        result = self.remove_worktree(branch)

        policy = self._policy(config)
        if not drop_db or not policy.db_per_worktree or config.database is None:
            return result

        databases = DatabaseService(config, executor=self._executor, settings=self.settings)
        database = derive_worktree_database_name(policy.db_prefix, branch)
        result.database = database
        if databases.exists(database):
            databases.drop_database(database, strict=False)
            result.database_dropped = True
        return result

    def _load(self) -> ProjectConfig:
        return load_project_config(self.project_root, self._environ)

    @staticmethod
    def _policy(config: ProjectConfig) -> WorktreesPolicy:
        if config.worktrees is None:
            raise ConfigMissingError("worktrees configuration is required for worktree operations")
        return config.worktrees

    def _worktree_path(self, config: ProjectConfig, branch: str) -> Path:
        validate_branch_name(branch)
        base = Path(self._policy(config).base_path).expanduser()
        if not base.is_absolute():
            base = self.project_root / base
        path = base / sanitize_worktree_name(branch)
        check_path_traversal(path, base)
        return path
