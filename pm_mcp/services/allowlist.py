"""Database name allow-list."""

from typing import Sequence

from pm_mcp.utils.exceptions import DatabaseNotAllowedError


def matches_pattern(name: str, pattern: str) -> bool:
    """Exact match, or prefix match for patterns ending in ``*``."""
    if pattern == "*":
        return True
    if pattern.endswith("*"):
        return name.startswith(pattern[:-1])
    return name == pattern


def matches_allowed(name: str, patterns: Sequence[str]) -> bool:
    """Strict check: some pattern matches the name."""
    return any(matches_pattern(name, pattern) for pattern in patterns)


def is_database_allowed(name: str, patterns: Sequence[str]) -> bool:
    """Allow-list check used when provisioning branch databases.

    On top of the strict match, a name is accepted whenever the list holds
    a bare ``*`` or the pattern ``<patterns[0]>_*``. The second rule is
    anchored on the first configured pattern only, whatever the candidate
    name looks like.
    """
    if matches_allowed(name, patterns):
        return True
    if not patterns:
        return False
    branch_wildcard = f"{patterns[0]}_*"
    return any(pattern in ("*", branch_wildcard) for pattern in patterns)


def ensure_database_allowed(name: str, patterns: Sequence[str], strict: bool = False) -> None:
    """Raise unless the name passes the allow-list.

    Args:
        name: Candidate database name.
        patterns: Configured patterns.
        strict: Skip the ``<patterns[0]>_*`` inference.

    Raises:
        DatabaseNotAllowedError: If the name is rejected.
    """
    allowed = matches_allowed(name, patterns) if strict else is_database_allowed(name, patterns)
    if not allowed:
        raise DatabaseNotAllowedError(name, list(patterns))
