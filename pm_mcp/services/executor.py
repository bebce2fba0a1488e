"""Database executor: runs database clients inside docker compose services."""

import logging
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Protocol, Sequence, runtime_checkable

from pm_mcp.models.dsn import DSN
from pm_mcp.models.results import DatabaseInfo, DatabaseListResult
from pm_mcp.utils.exceptions import EngineError, InvalidNameError

logger = logging.getLogger("pm-executor")

# Characters that cannot appear in a database name or its dump file name
FORBIDDEN_NAME_CHARS = ("\x00", "/", "\\")

CommandRunner = Callable[..., subprocess.CompletedProcess]


def run_command(
    args: Sequence[str],
    input: Optional[bytes] = None,
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None
) -> subprocess.CompletedProcess:
    """Run a command to completion, capturing stdout and stderr."""
    return subprocess.run(
        list(args),
        input=input,
        cwd=cwd,
        capture_output=True,
        timeout=timeout,
        check=False,
    )


@runtime_checkable
class DatabaseExecutor(Protocol):
    """Operations on the databases of one database service."""

    def list(self, service: str, dsn: DSN, default_database: str) -> DatabaseListResult:
        """List databases, flagging the default one."""

    def create(self, service: str, dsn: DSN, name: str) -> None:
        """Create an empty database."""

    def drop(self, service: str, dsn: DSN, name: str) -> None:
        """Drop a database."""

    def dump(
        self,
        service: str,
        dsn: DSN,
        database: str,
        tables: Optional[Sequence[str]] = None
    ) -> Path:
        """Dump a database to a SQL file and return its path."""

    def import_sql(self, service: str, dsn: DSN, database: str, sql_path: Path) -> None:
        """Load a SQL file into a database."""


def validate_database_name(name: str) -> None:
    """Refuse names no client can take or that would escape the dumps directory.

    Anything else, hyphens and dots included, is passed on quoted.

    Raises:
        InvalidNameError: If the name is empty or holds NUL or a path separator.
    """
    if not name or any(char in name for char in FORBIDDEN_NAME_CHARS):
        raise InvalidNameError(f"invalid database name '{name}'")


def quote_mysql_identifier(name: str) -> str:
    """Backtick quote, doubling embedded backticks."""
    return "`" + name.replace("`", "``") + "`"


def quote_postgres_identifier(name: str) -> str:
    """Double quote, doubling embedded double quotes."""
    return '"' + name.replace('"', '""') + '"'


class DockerComposeExecutor:
    """Base class for executors that use ``docker compose exec``.

    Subclasses provide the client command lines; this class builds the
    compose invocation, runs it and turns failures into EngineError.
    """

    engine = ""
    SYSTEM_DATABASES: frozenset[str] = frozenset()

    def __init__(
        self,
        compose_files: Sequence[str],
        project_root: Path,
        dumps_path: str,
        docker_binary: str = "docker",
        timeout: Optional[float] = None,
        runner: Optional[CommandRunner] = None
    ):
        """Initialize the executor.

        Args:
            compose_files: Compose files passed with ``-f``.
            project_root: Directory commands run in; dumps land below it.
            dumps_path: Dump directory, relative to the project root.
            docker_binary: Docker CLI to invoke.
            timeout: Per-command timeout in seconds, None to wait forever.
            runner: Replacement for ``run_command`` (tests).
        """
        self.compose_files = list(compose_files)
        self.project_root = Path(project_root)
        self.dumps_path = dumps_path
        self.docker_binary = docker_binary
        self.timeout = timeout
        self._runner = runner or run_command

    # Client specific pieces

    def client_env(self, dsn: DSN) -> dict[str, str]:
        raise NotImplementedError

    def list_command(self, dsn: DSN, default_database: str) -> list[str]:
        raise NotImplementedError

    def create_command(self, dsn: DSN, name: str) -> list[str]:
        raise NotImplementedError

    def drop_command(self, dsn: DSN, name: str) -> list[str]:
        raise NotImplementedError

    def dump_command(self, dsn: DSN, database: str, tables: Sequence[str]) -> list[str]:
        raise NotImplementedError

    def import_command(self, dsn: DSN, database: str) -> list[str]:
        raise NotImplementedError

    def compose_exec(self, service: str, env: dict[str, str], args: Sequence[str]) -> list[str]:
        """Full ``docker compose exec`` command line."""
        cmd = [self.docker_binary, "compose"]
        for compose_file in self.compose_files:
            cmd.extend(["-f", compose_file])
        cmd.extend(["exec", "-T"])
        for key, value in env.items():
            cmd.extend(["-e", f"{key}={value}"])
        cmd.append(service)
        cmd.extend(args)
        return cmd

    # Contract

    def list(self, service: str, dsn: DSN, default_database: str) -> DatabaseListResult:
        result = self._run("list", service, dsn, self.list_command(dsn, default_database))
        names = [
            line.strip()
            for line in result.stdout.decode(errors="replace").splitlines()
            if line.strip()
        ]
        return DatabaseListResult(databases=[
            DatabaseInfo(name=name, is_default=name == default_database)
            for name in names
            if name not in self.SYSTEM_DATABASES
        ])

    def create(self, service: str, dsn: DSN, name: str) -> None:
        validate_database_name(name)
        logger.info("Creating database %s on service %s", name, service)
        self._run("create", service, dsn, self.create_command(dsn, name))

    def drop(self, service: str, dsn: DSN, name: str) -> None:
        validate_database_name(name)
        logger.info("Dropping database %s on service %s", name, service)
        self._run("drop", service, dsn, self.drop_command(dsn, name))

    def dump(
        self,
        service: str,
        dsn: DSN,
        database: str,
        tables: Optional[Sequence[str]] = None
    ) -> Path:
        validate_database_name(database)
        out_dir = self.project_root / self.dumps_path
        out_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        dump_path = out_dir / f"{database}_{timestamp}.sql"

        logger.info("Dumping database %s to %s", database, dump_path)
        result = self._run(
            "dump", service, dsn, self.dump_command(dsn, database, list(tables or []))
        )
        dump_path.write_bytes(result.stdout)
        return dump_path

    def import_sql(self, service: str, dsn: DSN, database: str, sql_path: Path) -> None:
        validate_database_name(database)
        try:
            data = Path(sql_path).read_bytes()
        except OSError as e:
            raise EngineError("import", f"cannot read {sql_path}: {e}") from e

        logger.info("Importing %s into database %s", sql_path, database)
        self._run("import", service, dsn, self.import_command(dsn, database), input=data)

    def _run(
        self,
        operation: str,
        service: str,
        dsn: DSN,
        args: Sequence[str],
        input: Optional[bytes] = None
    ) -> subprocess.CompletedProcess:
        cmd = self.compose_exec(service, self.client_env(dsn), args)
        try:
            result = self._runner(
                cmd, input=input, cwd=self.project_root, timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise EngineError(operation, f"{self.docker_binary} not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise EngineError(operation, f"timed out after {e.timeout}s") from e

        if result.returncode != 0:
            output = (result.stderr or result.stdout or b"").decode(errors="replace").strip()
            logger.error("%s %s failed (exit %d)", self.engine, operation, result.returncode)
            raise EngineError(operation, output or f"exit status {result.returncode}")
        return result


class MySQLExecutor(DockerComposeExecutor):
    """MySQL / MariaDB client commands."""

    engine = "mysql"
    SYSTEM_DATABASES = frozenset({"information_schema", "mysql", "performance_schema", "sys"})

    def client_env(self, dsn: DSN) -> dict[str, str]:
        return {"MYSQL_PWD": dsn.password} if dsn.password else {}

    def _client(self, dsn: DSN, binary: str = "mysql") -> list[str]:
        cmd = [binary]
        if dsn.user:
            cmd.append(f"-u{dsn.user}")
        return cmd

    def list_command(self, dsn: DSN, default_database: str) -> list[str]:
        return self._client(dsn) + ["-N", "-B", "-e", "SHOW DATABASES"]

    def create_command(self, dsn: DSN, name: str) -> list[str]:
        return self._client(dsn) + ["-e", f"CREATE DATABASE {quote_mysql_identifier(name)}"]

    def drop_command(self, dsn: DSN, name: str) -> list[str]:
        return self._client(dsn) + ["-e", f"DROP DATABASE IF EXISTS {quote_mysql_identifier(name)}"]

    def dump_command(self, dsn: DSN, database: str, tables: Sequence[str]) -> list[str]:
        return (
            self._client(dsn, "mysqldump")
            + ["--single-transaction", "--routines", "--triggers", database]
            + list(tables)
        )

    def import_command(self, dsn: DSN, database: str) -> list[str]:
        return self._client(dsn) + [database]


class PostgresExecutor(DockerComposeExecutor):
    """PostgreSQL client commands."""

    engine = "postgres"
    SYSTEM_DATABASES = frozenset({"template0", "template1"})
    MAINTENANCE_DATABASE = "postgres"

    def client_env(self, dsn: DSN) -> dict[str, str]:
        return {"PGPASSWORD": dsn.password} if dsn.password else {}

    def _client(self, dsn: DSN, binary: str = "psql") -> list[str]:
        cmd = [binary]
        if dsn.user:
            cmd.extend(["-U", dsn.user])
        return cmd

    def list_command(self, dsn: DSN, default_database: str) -> list[str]:
        return self._client(dsn) + [
            "-d", self.MAINTENANCE_DATABASE,
            "-At",
            "-c", "SELECT datname FROM pg_database WHERE datistemplate = false",
        ]

    def create_command(self, dsn: DSN, name: str) -> list[str]:
        return self._client(dsn) + [
            "-d", self.MAINTENANCE_DATABASE, "-c", f"CREATE DATABASE {quote_postgres_identifier(name)}"
        ]

    def drop_command(self, dsn: DSN, name: str) -> list[str]:
        return self._client(dsn) + [
            "-d", self.MAINTENANCE_DATABASE, "-c", f"DROP DATABASE IF EXISTS {quote_postgres_identifier(name)}"
        ]

    def dump_command(self, dsn: DSN, database: str, tables: Sequence[str]) -> list[str]:
        cmd = self._client(dsn, "pg_dump") + ["--no-owner", "--no-acl"]
        for table in tables:
            cmd.extend(["-t", table])
        cmd.append(database)
        return cmd

    def import_command(self, dsn: DSN, database: str) -> list[str]:
        return self._client(dsn) + ["-d", database, "-q", "-v", "ON_ERROR_STOP=1"]


EXECUTORS: dict[str, type[DockerComposeExecutor]] = {
    MySQLExecutor.engine: MySQLExecutor,
    PostgresExecutor.engine: PostgresExecutor,
}


def create_executor(
    dsn: DSN,
    compose_files: Sequence[str],
    project_root: Path,
    dumps_path: str,
    docker_binary: str = "docker",
    timeout: Optional[float] = None,
    runner: Optional[CommandRunner] = None
) -> DockerComposeExecutor:
    """Pick the executor variant for the DSN's engine.

    Raises:
        EngineError: If the engine is not mysql or postgres.
    """
    executor_cls = EXECUTORS.get(dsn.engine_kind)
    if executor_cls is None:
        raise EngineError("executor", f"unsupported database engine '{dsn.engine}'")
    return executor_cls(
        compose_files=compose_files,
        project_root=project_root,
        dumps_path=dumps_path,
        docker_binary=docker_binary,
        timeout=timeout,
        runner=runner,
    )
