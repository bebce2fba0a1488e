"""Database commands: list, create, drop, dump, import, clone."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence

from pm_mcp.config import Settings
from pm_mcp.models.config import DatabasePolicy, ProjectConfig
from pm_mcp.models.dsn import DSN
from pm_mcp.models.results import (
    CloneResult,
    DatabaseActionResult,
    DatabaseListResult,
    DumpFileInfo,
    DumpResult,
)
from pm_mcp.services.allowlist import ensure_database_allowed
from pm_mcp.services.executor import DatabaseExecutor, create_executor
from pm_mcp.utils.constants import ProgressStage
from pm_mcp.utils.exceptions import (
    ConfigMissingError,
    DatabaseIsDefaultError,
    FileNotFoundCommandError,
)

logger = logging.getLogger("pm-databases")

ProgressCallback = Callable[[ProgressStage, str], None]


def require_database_policy(config: ProjectConfig) -> DatabasePolicy:
    """Return the database section or fail.

    Raises:
        ConfigMissingError: If the config has no database section.
    """
    if config.database is None:
        raise ConfigMissingError("database configuration is required for database operations")
    return config.database


def build_executor(
    config: ProjectConfig,
    dsn: DSN,
    settings: Optional[Settings] = None
) -> DatabaseExecutor:
    """Executor for the project's database engine."""
    settings = settings or Settings()
    policy = require_database_policy(config)
    return create_executor(
        dsn=dsn,
        compose_files=config.compose_files,
        project_root=Path(config.project_root or settings.project_root),
        dumps_path=policy.dumps_path,
        docker_binary=settings.docker_binary,
        timeout=settings.command_timeout,
    )


class DatabaseService:
    """Database operations on the project's configured database service.

    All names that get created, dropped or written into are checked
    against the configured allow-list first.
    """

    def __init__(
        self,
        config: ProjectConfig,
        executor: Optional[DatabaseExecutor] = None,
        settings: Optional[Settings] = None
    ):
        """Initialize the service.

        Args:
            config: Loaded project configuration.
            executor: Executor to use; built from the DSN engine when omitted.
            settings: Runtime settings.

        Raises:
            ConfigMissingError: If the config has no database section.
            MalformedDSNError: If the configured DSN cannot be parsed.
        """
        self.config = config
        self.policy = require_database_policy(config)
        self.dsn = DSN.parse(self.policy.dsn)
        self.executor = executor or build_executor(config, self.dsn, settings)

    @property
    def service(self) -> str:
        return self.policy.service

    @property
    def default_database(self) -> str:
        return self.dsn.database

    @property
    def dumps_dir(self) -> Path:
        return Path(self.config.project_root) / self.policy.dumps_path

    def list_databases(self) -> DatabaseListResult:
        """Databases present on the service."""
        return self.executor.list(self.service, self.dsn, self.default_database)

    def exists(self, name: str) -> bool:
        return self.list_databases().contains(name)

    def create_database(self, name: str) -> DatabaseActionResult:
        """Create an empty database (strict allow-list)."""
        ensure_database_allowed(name, self.policy.allowed, strict=True)
        self.executor.create(self.service, self.dsn, name)
        return DatabaseActionResult(database=name, action="created")

    def drop_database(self, name: str, strict: bool = True) -> DatabaseActionResult:
        """Drop a database; the default database is never dropped."""
        if name == self.default_database:
            raise DatabaseIsDefaultError(name)
        ensure_database_allowed(name, self.policy.allowed, strict=strict)
        self.executor.drop(self.service, self.dsn, name)
        return DatabaseActionResult(database=name, action="dropped")

    def dump_database(
        self,
        database: Optional[str] = None,
        tables: Optional[Sequence[str]] = None
    ) -> DumpResult:
        """Dump a database, the default one when none is given."""
        database = database or self.default_database
        path = self.executor.dump(self.service, self.dsn, database, tables)
        size = path.stat().st_size if path.exists() else 0
        return DumpResult(database=database, path=str(path), size_bytes=size)

    def import_database(self, database: str, sql_path: str) -> DatabaseActionResult:
        """Import a SQL file; relative paths resolve against the project root."""
        ensure_database_allowed(database, self.policy.allowed, strict=True)
        path = Path(sql_path)
        if not path.is_absolute():
            path = Path(self.config.project_root) / path
        if not path.is_file():
            raise FileNotFoundCommandError(str(path))
        self.executor.import_sql(self.service, self.dsn, database, path)
        return DatabaseActionResult(database=database, action="imported", sql_path=str(path))

    def copy_data(
        self,
        source: str,
        target: str,
        progress: Optional[ProgressCallback] = None
    ) -> Path:
        """Dump ``source`` and import it into the existing ``target``.

        ``progress`` is told when the dump and the import start.
        """
        logger.info("Cloning %s into %s", source, target)
        if progress is not None:
            progress(ProgressStage.DUMPING, source)
        dump_path = self.executor.dump(self.service, self.dsn, source)
        if progress is not None:
            progress(ProgressStage.IMPORTING, target)
        self.executor.import_sql(self.service, self.dsn, target, dump_path)
        return dump_path

    def clone_database(self, target: str, source: Optional[str] = None) -> CloneResult:
        """Clone ``source`` (default database by default) into ``target``.

        The target is created when it does not exist yet.
        """
        source = source or self.default_database
        if target == self.default_database:
            raise DatabaseIsDefaultError(target)
        ensure_database_allowed(target, self.policy.allowed)

        created = False
        if not self.exists(target):
            self.executor.create(self.service, self.dsn, target)
            created = True
        dump_path = self.copy_data(source, target)
        return CloneResult(source=source, target=target, dump_path=str(dump_path), created=created)

    def list_dumps(self) -> list[DumpFileInfo]:
        """SQL files in the dumps directory, newest first."""
        if not self.dumps_dir.is_dir():
            return []
        dumps = []
        for path in self.dumps_dir.glob("*.sql"):
            stat = path.stat()
            dumps.append(DumpFileInfo(
                name=path.name,
                path=str(path),
                size_bytes=stat.st_size,
                modified_at=datetime.fromtimestamp(stat.st_mtime),
            ))
        dumps.sort(key=lambda d: (d.modified_at, d.name), reverse=True)
        return dumps
