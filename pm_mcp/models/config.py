"""Project configuration models."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ProjectSection(BaseModel):
    """Project identity."""

    name: str = ""
    type: str = ""


class DockerSection(BaseModel):
    """Docker compose settings."""

    compose_files: list[str] = Field(default_factory=list)


class DatabasePolicy(BaseModel):
    """Database service, connection string and allow-list."""

    service: str = ""
    dsn: str = ""
    allowed: list[str] = Field(default_factory=list)
    dumps_path: str = ""


class WorktreeCopyPolicy(BaseModel):
    """Files copied from the project into each new worktree."""

    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)


class WorktreesPolicy(BaseModel):
    """Worktree placement and per-worktree database policy."""

    base_path: str = ""
    db_per_worktree: bool = False
    db_prefix: str = ""
    # JSON key "copy"
    copy_files: Optional[WorktreeCopyPolicy] = Field(default=None, alias="copy")

    model_config = ConfigDict(populate_by_name=True)


class ProjectConfig(BaseModel):
    """Shape of the project configuration file."""

    project: Optional[ProjectSection] = None
    docker: Optional[DockerSection] = None
    database: Optional[DatabasePolicy] = None
    worktrees: Optional[WorktreesPolicy] = None

    # Set by the loader, not read from JSON
    project_root: str = Field(default="", exclude=True)
    config_path: str = Field(default="", exclude=True)

    def is_empty(self) -> bool:
        """True when none of the known sections are present."""
        return (
            self.project is None
            and self.docker is None
            and self.database is None
            and self.worktrees is None
        )

    @property
    def compose_files(self) -> list[str]:
        """Compose files, empty when the docker section is absent."""
        return list(self.docker.compose_files) if self.docker else []
