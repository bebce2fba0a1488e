"""Resolution of ``${VAR}`` tokens in configuration values."""

import os
import re
from pathlib import Path
from typing import Mapping, Optional

from pm_mcp.services.env_file import read_env_value
from pm_mcp.utils.constants import ENV_FILE, ENV_LOCAL_FILE

ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def lookup_env_var(
    name: str,
    project_root: Path,
    environ: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """Find a variable in the environment, then ``.env.local``, then ``.env``.

    Empty values are treated as unset.
    """
    env = os.environ if environ is None else environ
    value = env.get(name)
    if value:
        return value

    root = Path(project_root)
    for file_name in (ENV_LOCAL_FILE, ENV_FILE):
        value = read_env_value(root / file_name, name)
        if value:
            return value
    return None


def resolve_env_vars(
    value: str,
    project_root: Path,
    environ: Optional[Mapping[str, str]] = None
) -> str:
    """Replace every ``${VAR}`` token in ``value``.

    Args:
        value: Text containing tokens, typically a DSN.
        project_root: Directory holding ``.env.local`` and ``.env``.
        environ: Process environment; ``os.environ`` when omitted.

    Returns:
        The text with resolvable tokens substituted. Unresolved tokens are
        kept verbatim.
    """
    def _replace(match: re.Match) -> str:
        resolved = lookup_env_var(match.group(1), project_root, environ)
        return resolved if resolved is not None else match.group(0)

    return ENV_VAR_PATTERN.sub(_replace, value)
