"""Branch database lifecycle: switch and checkout."""

import logging
from pathlib import Path
from typing import Mapping, Optional

from pm_mcp.config import Settings
from pm_mcp.models.results import CheckoutResult, SwitchResult
from pm_mcp.services.allowlist import ensure_database_allowed
from pm_mcp.services.databases import (
    DatabaseService,
    ProgressCallback,
    require_database_policy,
)
from pm_mcp.services.env_file import upsert_env_value
from pm_mcp.services.executor import DatabaseExecutor
from pm_mcp.services.naming import derive_database_name, is_trunk_branch
from pm_mcp.services.project_config import load_project_config
from pm_mcp.services.vcs import VCS, GitVCS
from pm_mcp.utils.constants import ProgressStage

logger = logging.getLogger("pm-branching")


class BranchDatabaseManager:
    """Keeps one database per git branch.

    ``switch`` makes the current (or given) branch's database exist and
    points the env file at it. ``checkout`` changes the git branch first.

    The sequence is not transactional: a failure after the database was
    created leaves it in place, empty or partly cloned.
    """

    def __init__(
        self,
        project_root: Path,
        settings: Optional[Settings] = None,
        vcs: Optional[VCS] = None,
        executor: Optional[DatabaseExecutor] = None,
        environ: Optional[Mapping[str, str]] = None,
        progress: Optional[ProgressCallback] = None
    ):
        """Initialize the manager.

        Args:
            project_root: Project directory holding the config and env file.
            settings: Runtime settings.
            vcs: Branch primitives; git in ``project_root`` when omitted.
            executor: Database executor; chosen from the DSN when omitted.
            environ: Environment for ``${VAR}`` resolution.
            progress: Called with each provisioning stage.
        """
        self.project_root = Path(project_root)
        self.settings = settings or Settings()
        self.vcs = vcs or GitVCS(
            self.project_root,
            git_binary=self.settings.git_binary,
            timeout=self.settings.command_timeout,
        )
        self._executor = executor
        self._environ = environ
        self._progress = progress

    def switch(
        self,
        branch: Optional[str] = None,
        clone_from: Optional[str] = None
    ) -> SwitchResult:
        """Use the branch's database, creating and seeding it if needed.

        Args:
            branch: Branch to switch to; the current git branch when omitted.
            clone_from: Database to seed a newly created database from.

        Returns:
            Branch, database name and whether it was created / cloned.

        Raises:
            ConfigMissingError: If no database section is configured.
            MalformedDSNError: If the configured DSN cannot be parsed.
            DatabaseNotAllowedError: If the new database name is rejected.
            VCSError: If the current branch cannot be determined.
            EngineError: If a database command fails.
        """
        config = load_project_config(self.project_root, self._environ)
        policy = require_database_policy(config)

        if not branch:
            branch = self.vcs.current_branch()

        databases = DatabaseService(config, executor=self._executor, settings=self.settings)
        default_db = databases.default_database
        target = derive_database_name(default_db, branch)
        logger.info("Branch %s uses database %s", branch, target)

        result = SwitchResult(branch=branch, database=target)

        if databases.exists(target):
            logger.info("Database %s already exists", target)
        else:
            ensure_database_allowed(target, policy.allowed)

            self._report(ProgressStage.CREATING, target)
            databases.executor.create(databases.service, databases.dsn, target)
            result.created = True

            source = self._clone_source(branch, clone_from, default_db)
            if source:
                self._report(ProgressStage.CLONING, f"{source} -> {target}")
                databases.copy_data(source, target, progress=self._report)
                result.cloned = True

        target_dsn = databases.dsn.with_database(target)
        self._report(ProgressStage.PATCHING, self.settings.env_file_name)
        upsert_env_value(
            self.project_root / self.settings.env_file_name,
            self.settings.env_key,
            str(target_dsn),
        )
        logger.info("%s now points at %s", self.settings.env_key, target_dsn.redacted())
        return result

    def checkout(
        self,
        branch: str,
        create: bool = False,
        clone_from: Optional[str] = None
    ) -> CheckoutResult:
        """Switch git branch, then switch its database.

        Nothing touches the database or env file unless the git checkout
        succeeded.
        """
        self.vcs.checkout(branch, create=create)
        switched = self.switch(branch=branch, clone_from=clone_from)
        return CheckoutResult(**switched.model_dump())

    @staticmethod
    def _clone_source(branch: str, clone_from: Optional[str], default_db: str) -> Optional[str]:
        # explicit source > default database for non-trunk branches > nothing
        if clone_from:
            return clone_from
        if not is_trunk_branch(branch):
            return default_db
        return None

    def _report(self, stage: ProgressStage, detail: str) -> None:
        logger.debug("%s: %s", stage.value, detail)
        if self._progress is not None:
            self._progress(stage, detail)
