# pm_mcp/config.py
"""Runtime settings for pm-mcp."""

from pathlib import Path
from pydantic_settings import BaseSettings
from typing import Optional

from pm_mcp.utils.constants import DATABASE_URL_KEY, ENV_LOCAL_FILE


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Project specific settings (database service, DSN, allow-list) live in
    the project config file; these only control how pm-mcp itself runs.
    """

    # Project location
    project_root: str = "."

    # Env file patched on switch
    env_file_name: str = ENV_LOCAL_FILE
    env_key: str = DATABASE_URL_KEY

    # External tools
    git_binary: str = "git"
    docker_binary: str = "docker"
    command_timeout: Optional[float] = None

    # Logging
    log_level: str = "INFO"

    # MCP configuration
    mcp_transport: str = "stdio"
    mcp_host: str = "127.0.0.1"
    mcp_port: int = 8989

    class Config:
        env_prefix = "PM_MCP_"

    def get_project_root(self) -> Path:
        """Absolute project root.

        Returns:
            The resolved project directory.
        """
        return Path(self.project_root).expanduser().resolve()
