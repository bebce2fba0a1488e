"""Result models returned by pm-mcp commands."""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional


class SwitchResult(BaseModel):
    """Outcome of switching the database for a branch."""

    branch: str
    database: str
    created: bool = False
    cloned: bool = False


class CheckoutResult(SwitchResult):
    """Outcome of a git checkout followed by a database switch."""


class DatabaseInfo(BaseModel):
    """A database known to the server."""

    name: str
    is_default: bool = False


class DatabaseListResult(BaseModel):
    """Databases present in the container."""

    databases: list[DatabaseInfo] = Field(default_factory=list)

    def names(self) -> list[str]:
        return [db.name for db in self.databases]

    def contains(self, name: str) -> bool:
        return any(db.name == name for db in self.databases)


class DatabaseActionResult(BaseModel):
    """Result of create / drop / import."""

    database: str
    action: str
    sql_path: Optional[str] = None


class DumpResult(BaseModel):
    """A dump written to disk."""

    database: str
    path: str
    size_bytes: int = 0


class CloneResult(BaseModel):
    """A database cloned into another."""

    source: str
    target: str
    dump_path: str
    created: bool = False


class DumpFileInfo(BaseModel):
    """A dump file found in the dumps directory."""

    name: str
    path: str
    size_bytes: int
    modified_at: datetime


class WorktreeInfo(BaseModel):
    """A git worktree."""

    path: str
    branch: str = ""
    is_main: bool = False


class WorktreeCreateResult(BaseModel):
    """A worktree that was added."""

    path: str
    branch: str
    database: Optional[str] = None
    copied_files: list[str] = Field(default_factory=list)


class WorktreeRemoveResult(BaseModel):
    """A worktree that was removed."""

    path: str
    database: Optional[str] = None
    database_dropped: bool = False


class ConfigSummary(BaseModel):
    """Project identity shown by project_info."""

    name: str
    type: str


class InitSuggestion(BaseModel):
    """Config file proposed from what is found in a project."""

    suggested_config: str
    detected_services: dict[str, str] = Field(default_factory=dict)
    detected_env_vars: list[str] = Field(default_factory=list)


class ProjectInfo(BaseModel):
    """Project configuration and status."""

    config_summary: Optional[ConfigSummary] = None
    config_path: Optional[str] = None
    env_files: list[str] = Field(default_factory=list)
    docker_compose_exists: bool = False
