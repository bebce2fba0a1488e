"""Reading and patching dotenv style files."""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger("pm-env-file")


def read_env_value(path: Path, name: str) -> Optional[str]:
    """Return the value of ``name`` in a dotenv file.

    Blank lines and ``#`` comments are skipped; the value is stripped of
    whitespace and surrounding quotes. Missing or unreadable files yield
    None, as do empty values.
    """
    try:
        content = Path(path).read_text()
    except OSError:
        return None

    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if sep and key.strip() == name:
            value = value.strip().strip("\"'")
            return value or None
    return None


def upsert_env_value(path: Path, key: str, value: str) -> str:
    """Set ``key=value`` in a dotenv file, rewriting it in full.

    The first line starting with ``key=`` is replaced, otherwise a new line
    is appended. The result always ends with exactly one newline, so
    applying the same pair twice leaves the file byte-identical.

    Args:
        path: File to patch; created when missing.
        key: Variable name.
        value: New value, written verbatim.

    Returns:
        The written content.
    """
    path = Path(path)
    try:
        content = path.read_text()
    except FileNotFoundError:
        content = ""

    prefix = f"{key}="
    entry = f"{prefix}{value}"
    lines = content.split("\n")

    for i, line in enumerate(lines):
        if line.startswith(prefix):
            lines[i] = entry
            break
    else:
        # Drop the empty tail left by a trailing newline before appending
        while lines and lines[-1] == "":
            lines.pop()
        lines.append(entry)

    new_content = "\n".join(lines).rstrip("\n") + "\n"
    path.write_text(new_content)
    logger.info("Updated %s in %s", key, path)
    return new_content


def read_env_keys(path: Path) -> list[str]:
    """Variable names defined in a dotenv file, in file order."""
    try:
        content = Path(path).read_text()
    except OSError:
        return []

    keys = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        key, sep, _ = line.partition("=")
        if sep and key.strip():
            keys.append(key.strip())
    return keys
