"""Version control: git subprocess wrapper."""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from pm_mcp.models.results import WorktreeInfo
from pm_mcp.services.executor import CommandRunner, run_command
from pm_mcp.utils.exceptions import VCSError

logger = logging.getLogger("pm-vcs")


@runtime_checkable
class VCS(Protocol):
    """Branch and worktree primitives."""

    def current_branch(self) -> str:
        """Name of the checked out branch."""

    def checkout(self, branch: str, create: bool = False) -> None:
        """Switch to ``branch``, creating it first when ``create`` is set."""

    def worktree_list(self) -> list[WorktreeInfo]:
        """Worktrees of the repository, main worktree first."""

    def worktree_add(self, path: Path, branch: str, new_branch: bool = False) -> None:
        """Add a worktree at ``path``."""

    def worktree_remove(self, path: Path) -> None:
        """Remove the worktree at ``path``."""


class GitVCS:
    """VCS backed by the git CLI, run in the project root."""

    def __init__(
        self,
        project_root: Path,
        git_binary: str = "git",
        timeout: Optional[float] = None,
        runner: Optional[CommandRunner] = None
    ):
        self.project_root = Path(project_root)
        self.git_binary = git_binary
        self.timeout = timeout
        self._runner = runner or run_command

    def current_branch(self) -> str:
        branch = self._git("branch", "--show-current").strip()
        if not branch:
            raise VCSError("failed to get current branch: HEAD is detached")
        return branch

    def checkout(self, branch: str, create: bool = False) -> None:
        if create:
            logger.info("Creating branch %s", branch)
            self._git("checkout", "-b", branch, action="failed to create branch")
        else:
            logger.info("Checking out branch %s", branch)
            self._git("checkout", branch, action="failed to checkout branch")

    def worktree_list(self) -> list[WorktreeInfo]:
        output = self._git("worktree", "list", "--porcelain")
        return parse_worktree_porcelain(output)

    def worktree_add(self, path: Path, branch: str, new_branch: bool = False) -> None:
        if new_branch:
            args = ("worktree", "add", "-b", branch, str(path))
        else:
            args = ("worktree", "add", str(path), branch)
        logger.info("Adding worktree %s for branch %s", path, branch)
        self._git(*args, action="failed to add worktree")

    def worktree_remove(self, path: Path) -> None:
        logger.info("Removing worktree %s", path)
        self._git("worktree", "remove", str(path), action="failed to remove worktree")

    def _git(self, *args: str, action: Optional[str] = None) -> str:
        cmd = [self.git_binary, *args]
        try:
            result = self._runner(cmd, cwd=self.project_root, timeout=self.timeout)
        except FileNotFoundError as e:
            raise VCSError(f"{self.git_binary} not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise VCSError(f"git {args[0]} timed out after {e.timeout}s") from e

        stdout = (result.stdout or b"").decode(errors="replace")
        if result.returncode != 0:
            stderr = (result.stderr or b"").decode(errors="replace")
            message = action or f"git {' '.join(args)} failed"
            raise VCSError(message, output=(stdout + stderr).strip())
        return stdout


def parse_worktree_porcelain(output: str) -> list[WorktreeInfo]:
    """Parse ``git worktree list --porcelain`` output.

    Records are separated by blank lines; the first record is the main
    worktree.
    """
    worktrees: list[WorktreeInfo] = []
    path: Optional[str] = None
    branch = ""

    def _flush() -> None:
        if path is not None:
            worktrees.append(WorktreeInfo(path=path, branch=branch, is_main=not worktrees))

    for line in output.splitlines() + [""]:
        if not line.strip():
            _flush()
            path, branch = None, ""
            continue
        key, _, value = line.partition(" ")
        if key == "worktree":
            path = value
        elif key == "branch":
            branch = value.removeprefix("refs/heads/")
    return worktrees
