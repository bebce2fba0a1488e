"""Branch, database and worktree naming rules."""

import re

from pm_mcp.utils.constants import TRUNK_BRANCHES
from pm_mcp.utils.exceptions import InvalidNameError

_DB_SEPARATORS = ("/", "-", ".")
_INVALID_BRANCH_CHARS = re.compile(r"[\s\x00-\x1f\x7f~^:?*\[\\]")


def is_trunk_branch(branch: str) -> bool:
    """True for ``main`` and ``master``."""
    return branch in TRUNK_BRANCHES


def sanitize_for_database(branch: str) -> str:
    """Replace ``/``, ``-`` and ``.`` with ``_``."""
    sanitized = branch
    for sep in _DB_SEPARATORS:
        sanitized = sanitized.replace(sep, "_")
    return sanitized


def derive_database_name(default_database: str, branch: str) -> str:
    """Database name used by a branch.

    Trunk branches use the default database unchanged; every other branch
    gets ``<default>_<sanitized branch>``.

    Args:
        default_database: Database named in the configured DSN.
        branch: Git branch name.

    Returns:
        The database name for the branch.
    """
    if is_trunk_branch(branch):
        return default_database
    return f"{default_database}_{sanitize_for_database(branch)}"


def derive_worktree_database_name(prefix: str, branch: str) -> str:
    """Database name for a per-worktree database."""
    return f"{prefix}{sanitize_for_database(branch)}"


def sanitize_worktree_name(branch: str) -> str:
    """Directory name for a branch's worktree."""
    return branch.replace("/", "-")


def validate_branch_name(branch: str) -> None:
    """Reject names git would refuse or that could escape a path.

    Raises:
        InvalidNameError: If the name is unusable.
    """
    if not branch or not branch.strip():
        raise InvalidNameError("branch name must not be empty")
    if branch.startswith("-"):
        raise InvalidNameError(f"branch name '{branch}' must not start with '-'")
    if ".." in branch:
        raise InvalidNameError(f"branch name '{branch}' must not contain '..'")
    if branch.startswith("/") or branch.endswith("/") or branch.endswith(".lock"):
        raise InvalidNameError(f"branch name '{branch}' is not a valid git ref")
    if _INVALID_BRANCH_CHARS.search(branch):
        raise InvalidNameError(f"branch name '{branch}' contains invalid characters")
