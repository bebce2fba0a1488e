"""Project configuration discovery and validation."""

import json
import logging
from pathlib import Path
from typing import Mapping, Optional

import yaml
from pydantic import ValidationError

from pm_mcp.models.config import ProjectConfig
from pm_mcp.models.dsn import DSN
from pm_mcp.models.results import ConfigSummary, InitSuggestion, ProjectInfo
from pm_mcp.services.env_file import read_env_keys, read_env_value
from pm_mcp.services.env_resolver import resolve_env_vars
from pm_mcp.utils.constants import (
    COMPOSE_FILE_NAMES,
    CONFIG_CANDIDATES,
    CONFIG_NAMESPACE,
    DATABASE_URL_KEY,
    DEFAULT_DUMPS_PATH,
    ENV_FILE,
    ENV_LOCAL_FILE,
    INIT_CONFIG_PATH,
    WORKTREE_DB_PREFIX_SUFFIX,
)
from pm_mcp.utils.exceptions import (
    ConfigExistsError,
    ConfigInvalidError,
    ConfigMissingError,
    MalformedDSNError,
)

logger = logging.getLogger("pm-config")


def load_project_config(
    project_root: Path,
    environ: Optional[Mapping[str, str]] = None
) -> ProjectConfig:
    """Load the first usable config file under ``project_root``.

    Candidates are tried in order; a file whose JSON holds none of the
    known sections is skipped. Nothing is cached: every call reads disk.

    Args:
        project_root: Project directory.
        environ: Environment used to resolve ``${VAR}`` in the DSN.

    Returns:
        The validated configuration.

    Raises:
        ConfigMissingError: If no candidate file exists.
        ConfigInvalidError: If a file is unreadable, not valid JSON, or
            fails validation.
    """
    root = Path(project_root)

    for candidate in CONFIG_CANDIDATES:
        config_path = root / candidate
        try:
            raw_text = config_path.read_text()
        except FileNotFoundError:
            continue
        except OSError as e:
            raise ConfigInvalidError(
                f"failed to read config file: {e}", path=str(config_path)
            ) from e

        try:
            data = json.loads(raw_text)
        except json.JSONDecodeError as e:
            raise ConfigInvalidError(
                f"invalid JSON in config file: {e}", path=str(config_path)
            ) from e

        if not isinstance(data, dict):
            raise ConfigInvalidError(
                "config file must contain a JSON object", path=str(config_path)
            )
        if isinstance(data.get(CONFIG_NAMESPACE), dict):
            data = data[CONFIG_NAMESPACE]

        try:
            config = ProjectConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigInvalidError(
                f"invalid config file: {e}", path=str(config_path)
            ) from e

        if config.is_empty():
            logger.debug("Skipping %s: no known sections", config_path)
            continue

        config.project_root = str(root)
        config.config_path = str(config_path)
        logger.debug("Loaded config from %s", config_path)
        return validate_project_config(config, root, environ)

    raise ConfigMissingError(
        "config file not found (tried " + ", ".join(CONFIG_CANDIDATES) + ")"
    )


def validate_project_config(
    config: ProjectConfig,
    project_root: Path,
    environ: Optional[Mapping[str, str]] = None
) -> ProjectConfig:
    """Check required fields and fill defaults.

    Raises:
        ConfigInvalidError: If a present section misses a required field.
    """
    if config.worktrees is not None and not config.worktrees.base_path:
        raise ConfigInvalidError(
            "worktrees.base_path is required when worktrees section is present"
        )

    if config.database is not None:
        if not config.database.service:
            raise ConfigInvalidError(
                "database.service is required when database section is present"
            )
        if not config.database.dsn:
            raise ConfigInvalidError(
                "database.dsn is required when database section is present"
            )
        config.database.dsn = resolve_env_vars(config.database.dsn, project_root, environ)
        if not config.database.dumps_path:
            config.database.dumps_path = DEFAULT_DUMPS_PATH

    if config.worktrees is not None and not config.worktrees.db_prefix and config.database is not None:
        try:
            default_db = DSN.parse(config.database.dsn).database
        except MalformedDSNError:
            default_db = ""
        if default_db:
            config.worktrees.db_prefix = default_db + WORKTREE_DB_PREFIX_SUFFIX

    return config


ENV_FILE_CANDIDATES = (".env", ".env.local", ".env.dev", ".env.test", ".env.prod")


def project_info(
    project_root: Path,
    environ: Optional[Mapping[str, str]] = None
) -> ProjectInfo:
    """Configuration summary and what is present in the project directory.

    A missing config file is not an error here; an invalid one is.
    """
    root = Path(project_root)
    try:
        config: Optional[ProjectConfig] = load_project_config(root, environ)
    except ConfigMissingError:
        config = None

    summary = None
    compose_files: list[str] = list(COMPOSE_FILE_NAMES)
    if config is not None:
        if config.project is not None:
            summary = ConfigSummary(name=config.project.name, type=config.project.type)
        compose_files = config.compose_files + compose_files

    return ProjectInfo(
        config_summary=summary,
        config_path=config.config_path if config is not None else None,
        env_files=[name for name in ENV_FILE_CANDIDATES if (root / name).is_file()],
        docker_compose_exists=any((root / name).is_file() for name in compose_files),
    )


# Image name fragment to engine
DATABASE_IMAGES = (
    ("mariadb", "mysql"),
    ("mysql", "mysql"),
    ("postgis", "postgres"),
    ("postgres", "postgres"),
)
DEFAULT_PORTS = {"mysql": 3306, "postgres": 5432}


def find_compose_files(project_root: Path) -> list[str]:
    """Compose files present in the project, each followed by its override."""
    root = Path(project_root)
    found = []
    for name in COMPOSE_FILE_NAMES:
        if not (root / name).is_file():
            continue
        found.append(name)
        stem, _, suffix = name.rpartition(".")
        override = f"{stem}.override.{suffix}"
        if (root / override).is_file():
            found.append(override)
    return found


def load_compose_services(project_root: Path, compose_files: list[str]) -> dict[str, dict]:
    """Merge the ``services`` mappings of the given compose files.

    Later files override the keys of services declared earlier.

    Raises:
        ConfigInvalidError: If a compose file is not valid YAML.
    """
    services: dict[str, dict] = {}
    for name in compose_files:
        path = Path(project_root) / name
        try:
            with path.open() as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigInvalidError(
                f"invalid YAML in compose file: {e}", path=str(path)
            ) from e

        if not isinstance(document, dict) or not isinstance(document.get("services"), dict):
            continue
        for service, definition in document["services"].items():
            if isinstance(definition, dict):
                services.setdefault(service, {}).update(definition)
    return services


def detect_engine(image: str) -> Optional[str]:
    """Database engine behind a container image, or None."""
    repository = image.rsplit("/", 1)[-1].split(":", 1)[0].lower()
    for fragment, engine in DATABASE_IMAGES:
        if fragment in repository:
            return engine
    return None


def _service_environment(definition: dict) -> dict[str, str]:
    environment = definition.get("environment") or {}
    if isinstance(environment, list):
        pairs = (str(item).partition("=") for item in environment)
        return {key: value for key, _, value in pairs}
    if isinstance(environment, dict):
        return {str(k): "" if v is None else str(v) for k, v in environment.items()}
    return {}


def _suggest_dsn(engine: str, service: str, definition: dict) -> str:
    environment = _service_environment(definition)
    if engine == "postgres":
        user = environment.get("POSTGRES_USER") or "postgres"
        password = environment.get("POSTGRES_PASSWORD", "")
        database = environment.get("POSTGRES_DB") or "app"
    elif environment.get("MYSQL_USER"):
        user = environment["MYSQL_USER"]
        password = environment.get("MYSQL_PASSWORD", "")
        database = environment.get("MYSQL_DATABASE") or "app"
    else:
        user = "root"
        password = environment.get("MYSQL_ROOT_PASSWORD", "")
        database = environment.get("MYSQL_DATABASE") or "app"
    return f"{engine}://{user}:{password}@{service}:{DEFAULT_PORTS[engine]}/{database}"


def detect_project_type(project_root: Path) -> str:
    root = Path(project_root)
    composer = root / "composer.json"
    if (root / "bin" / "console").is_file():
        return "symfony"
    if composer.is_file():
        return "symfony" if "symfony/" in composer.read_text() else "php"
    if (root / "package.json").is_file():
        return "node"
    if (root / "pyproject.toml").is_file() or (root / "requirements.txt").is_file():
        return "python"
    return "generic"


def init_suggestion(project_root: Path) -> InitSuggestion:
    """Propose a config file from the compose files and env files found.

    The first service whose image is a MySQL, MariaDB or PostgreSQL image
    becomes the database section; its connection string is built from the
    service's environment. Without one, a ``DATABASE_URL`` in ``.env`` is
    used as is, and with neither the database section is left out.

    Args:
        project_root: Project directory to inspect.

    Returns:
        The suggested config as indented JSON, with what was detected.

    Raises:
        ConfigInvalidError: If a compose file is not valid YAML.
    """
    root = Path(project_root).resolve()
    compose_files = find_compose_files(root)
    services = load_compose_services(root, compose_files)
    detected_services = {
        name: str(definition.get("image") or "build")
        for name, definition in services.items()
    }

    env_vars: list[str] = []
    for env_file in (ENV_FILE, ENV_LOCAL_FILE):
        for key in read_env_keys(root / env_file):
            if "DATABASE" in key and key not in env_vars:
                env_vars.append(key)

    config: dict = {"project": {"name": root.name, "type": detect_project_type(root)}}
    if compose_files:
        config["docker"] = {"compose_files": compose_files}

    dsn = None
    database_service = ""
    for name, definition in services.items():
        engine = detect_engine(str(definition.get("image") or ""))
        if engine is not None:
            database_service = name
            dsn = _suggest_dsn(engine, name, definition)
            break
    if dsn is None:
        dsn = read_env_value(root / ENV_FILE, DATABASE_URL_KEY)

    if dsn is not None:
        try:
            default_db = DSN.parse(dsn).database or "app"
        except MalformedDSNError:
            default_db = "app"
        config["database"] = {
            "service": database_service or "database",
            "dsn": dsn,
            "allowed": [default_db, f"{default_db}_*"],
            "dumps_path": DEFAULT_DUMPS_PATH,
        }

    worktrees: dict = {"base_path": f"../{root.name}-worktrees", "db_per_worktree": False}
    if (root / ENV_LOCAL_FILE).is_file():
        worktrees["copy"] = {"include": [ENV_LOCAL_FILE], "exclude": []}
    config["worktrees"] = worktrees

    logger.info("Suggested config for %s (%d services)", root, len(services))
    return InitSuggestion(
        suggested_config=json.dumps(config, indent=2),
        detected_services=detected_services,
        detected_env_vars=env_vars,
    )


def wrap_in_namespace(config_json: str) -> str:
    """Nest a config under the ``pm`` key; text that is not a JSON object is returned unchanged."""
    try:
        data = json.loads(config_json)
    except json.JSONDecodeError:
        return config_json
    if not isinstance(data, dict):
        return config_json
    return json.dumps({CONFIG_NAMESPACE: data}, indent=2)


def write_init_config(project_root: Path, content: str) -> Path:
    """Write ``content`` to ``.haive/config.json`` below the project.

    Raises:
        ConfigExistsError: If the file already exists.
    """
    path = Path(project_root) / INIT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with path.open("x") as f:
            f.write(content + "\n")
    except FileExistsError as e:
        raise ConfigExistsError(str(path)) from e
    logger.info("Wrote config to %s", path)
    return path
