# pm_mcp/utils/constants.py
"""Constants for pm-mcp."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error code enumeration."""

    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"
    MALFORMED_DSN = "MALFORMED_DSN"
    DB_NOT_ALLOWED = "DB_NOT_ALLOWED"
    VCS_FAILURE = "VCS_FAILURE"
    ENGINE_ERROR = "ENGINE_ERROR"
    INVALID_NAME = "INVALID_NAME"
    PATH_TRAVERSAL = "PATH_TRAVERSAL"
    DB_IS_DEFAULT = "DB_IS_DEFAULT"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    CONFIG_EXISTS = "CONFIG_EXISTS"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.CONFIG_MISSING: "Project configuration not found",
    ErrorCode.CONFIG_INVALID: "Project configuration is invalid",
    ErrorCode.MALFORMED_DSN: "Connection string could not be parsed",
    ErrorCode.DB_NOT_ALLOWED: "Database name is not in the allowed list",
    ErrorCode.VCS_FAILURE: "Git command failed",
    ErrorCode.ENGINE_ERROR: "Database command failed",
    ErrorCode.INVALID_NAME: "Invalid name",
    ErrorCode.PATH_TRAVERSAL: "Path escapes its base directory",
    ErrorCode.DB_IS_DEFAULT: "Refusing to operate on the default database",
    ErrorCode.FILE_NOT_FOUND: "File not found",
    ErrorCode.CONFIG_EXISTS: "Project configuration already exists",
}

# JSON-RPC style codes reported by the MCP front end
MCP_ERROR_CODES: dict[ErrorCode, int] = {
    ErrorCode.CONFIG_MISSING: -32001,
    ErrorCode.CONFIG_INVALID: -32002,
    ErrorCode.INVALID_NAME: -32003,
    ErrorCode.PATH_TRAVERSAL: -32004,
    ErrorCode.DB_NOT_ALLOWED: -32005,
    ErrorCode.DB_IS_DEFAULT: -32006,
    ErrorCode.FILE_NOT_FOUND: -32007,
    ErrorCode.MALFORMED_DSN: -32008,
    ErrorCode.VCS_FAILURE: -32009,
    ErrorCode.ENGINE_ERROR: -32010,
    ErrorCode.CONFIG_EXISTS: -32011,
}
MCP_GENERIC_ERROR = -32000

TRUNK_BRANCHES = ("main", "master")

CONFIG_CANDIDATES = (
    ".claude/project.json",
    ".haive/config.json",
    ".haive.json",
)
CONFIG_NAMESPACE = "pm"
INIT_CONFIG_PATH = ".haive/config.json"

ENV_LOCAL_FILE = ".env.local"
ENV_FILE = ".env"
DATABASE_URL_KEY = "DATABASE_URL"

DEFAULT_DUMPS_PATH = "var/dumps"
WORKTREE_DB_PREFIX_SUFFIX = "_wt_"

COMPOSE_FILE_NAMES = (
    "compose.yaml",
    "compose.yml",
    "docker-compose.yaml",
    "docker-compose.yml",
)


class ProgressStage(str, Enum):
    """Stages reported while provisioning a branch database."""

    DUMPING = "dumping"
    CREATING = "creating"
    IMPORTING = "importing"
    CLONING = "cloning"
    PATCHING = "patching"
