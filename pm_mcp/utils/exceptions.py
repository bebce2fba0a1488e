# pm_mcp/utils/exceptions.py
"""Exception classes for pm-mcp."""

from pm_mcp.utils.constants import (
    ErrorCode,
    ERROR_MESSAGES,
    MCP_ERROR_CODES,
    MCP_GENERIC_ERROR,
)


class PmError(Exception):
    """Base exception class for pm-mcp commands."""

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        details: dict | None = None
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "Unknown error")
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert the exception to a dictionary format.

        Returns:
            A dictionary representation of the error.
        """
        return {
            "status": "error",
            "error": {
                "code": self.code.value,
                "mcp_code": to_mcp_code(self.code),
                "message": self.message,
                "details": self.details
            }
        }


def to_mcp_code(code: ErrorCode | str) -> int:
    """Map an error code onto the numeric code reported over MCP."""
    try:
        return MCP_ERROR_CODES.get(ErrorCode(code), MCP_GENERIC_ERROR)
    except ValueError:
        return MCP_GENERIC_ERROR


class ConfigMissingError(PmError):
    """No usable project configuration."""

    def __init__(self, message: str):
        super().__init__(code=ErrorCode.CONFIG_MISSING, message=message)


class ConfigInvalidError(PmError):
    """Malformed JSON or a missing required field."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(
            code=ErrorCode.CONFIG_INVALID,
            message=message,
            details={"path": path} if path else None
        )


class MalformedDSNError(PmError):
    """Connection string could not be parsed."""

    def __init__(self, reason: str):
        super().__init__(
            code=ErrorCode.MALFORMED_DSN,
            message=f"malformed DSN: {reason}"
        )


class DatabaseNotAllowedError(PmError):
    """Database name rejected by the allow-list."""

    def __init__(self, name: str, allowed: list[str]):
        super().__init__(
            code=ErrorCode.DB_NOT_ALLOWED,
            message=f"database '{name}' is not allowed",
            details={"database": name, "allowed": list(allowed)}
        )


class VCSError(PmError):
    """Git subprocess exited with a nonzero status."""

    def __init__(self, message: str, output: str = ""):
        full = f"{message}\nOutput: {output}" if output else message
        super().__init__(
            code=ErrorCode.VCS_FAILURE,
            message=full,
            details={"output": output} if output else None
        )


class EngineError(PmError):
    """Database client subprocess failed."""

    def __init__(self, operation: str, message: str):
        super().__init__(
            code=ErrorCode.ENGINE_ERROR,
            message=f"{operation} failed: {message}",
            details={"operation": operation}
        )


class InvalidNameError(PmError):
    """Rejected branch or database name."""

    def __init__(self, message: str):
        super().__init__(code=ErrorCode.INVALID_NAME, message=message)


class PathTraversalError(PmError):
    """Computed path escapes its base directory."""

    def __init__(self, path: str, base: str):
        super().__init__(
            code=ErrorCode.PATH_TRAVERSAL,
            message=f"path '{path}' escapes base directory '{base}'",
            details={"path": path, "base": base}
        )


class DatabaseIsDefaultError(PmError):
    """Destructive operation targeted the default database."""

    def __init__(self, name: str):
        super().__init__(
            code=ErrorCode.DB_IS_DEFAULT,
            message=f"database '{name}' is the default database",
            details={"database": name}
        )


class FileNotFoundCommandError(PmError):
    """Referenced file does not exist."""

    def __init__(self, path: str):
        super().__init__(
            code=ErrorCode.FILE_NOT_FOUND,
            message=f"file not found: {path}",
            details={"path": path}
        )


class ConfigExistsError(PmError):
    """Refusing to overwrite an existing configuration file."""

    def __init__(self, path: str):
        super().__init__(
            code=ErrorCode.CONFIG_EXISTS,
            message=f"config file already exists: {path}",
            details={"path": path}
        )
