# pm_mcp/utils/__init__.py
"""Utility modules for pm-mcp."""

from pm_mcp.utils.constants import ErrorCode, ERROR_MESSAGES, ProgressStage
from pm_mcp.utils.exceptions import (
    PmError,
    ConfigMissingError,
    ConfigInvalidError,
    ConfigExistsError,
    MalformedDSNError,
    DatabaseNotAllowedError,
    VCSError,
    EngineError,
    InvalidNameError,
    PathTraversalError,
    DatabaseIsDefaultError,
    FileNotFoundCommandError,
    to_mcp_code,
)

__all__ = [
    "ErrorCode",
    "ERROR_MESSAGES",
    "ProgressStage",
    "PmError",
    "ConfigMissingError",
    "ConfigInvalidError",
    "ConfigExistsError",
    "MalformedDSNError",
    "DatabaseNotAllowedError",
    "VCSError",
    "EngineError",
    "InvalidNameError",
    "PathTraversalError",
    "DatabaseIsDefaultError",
    "FileNotFoundCommandError",
    "to_mcp_code",
]
