"""Environment-derived settings for the setup workflow."""

import getpass
import os
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs.unix import Unix

PROJECT_CONFIG_DIRNAME = ".claude"
PROJECT_CONFIG_FILENAME = "config.json"
HUMANLAYER_APP = "humanlayer"
CATALYST_APP = "catalyst"
PLACEHOLDER_TOKEN = "[NEEDS_SETUP]"
DEFAULT_TICKET_PREFIX = "PROJ"
THOUGHTS_DIRNAME = "thoughts"
REPOS_DIRNAME = "repos"
GLOBAL_DIRNAME = "global"


def _github_token(cli_token: str | None = None) -> str | None:
    """Return sanitized GitHub token (cli arg takes precedence) or None."""
    return ((cli_token or os.getenv("GH_TOKEN") or os.getenv("GITHUB_TOKEN") or "").strip()) or None


def _default_user() -> str:
    user = os.getenv("USER") or os.getenv("USERNAME")
    if user:
        return user
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "user"


@dataclass(frozen=True)
class Settings:
    # ~/.config (or $XDG_CONFIG_HOME); humanlayer reads from there on every platform
    config_home: Path = field(default_factory=lambda: Unix().user_config_path)
    project_config_dirname: str = PROJECT_CONFIG_DIRNAME
    github_source_root: Path | None = None
    default_user: str = field(default_factory=_default_user)
    github_token: str | None = None
    verify_tls: bool = True

    @classmethod
    def from_env(cls, github_token: str | None = None, verify_tls: bool = True) -> "Settings":
        source_root = os.getenv("GITHUB_SOURCE_ROOT")
        return cls(
            config_home=Unix().user_config_path,
            project_config_dirname=os.getenv("CATALYST_PROJECT_CONFIG_DIR") or PROJECT_CONFIG_DIRNAME,
            github_source_root=Path(source_root).expanduser() if source_root else None,
            default_user=_default_user(),
            github_token=_github_token(github_token),
            verify_tls=verify_tls,
        )

    def project_config_path(self, project_dir: Path) -> Path:
        return project_dir / self.project_config_dirname / PROJECT_CONFIG_FILENAME

    def host_config_path(self, project_key: str) -> Path:
        return self.config_home / HUMANLAYER_APP / f"config-{project_key}.json"

    def secrets_config_path(self, project_key: str) -> Path:
        return self.config_home / CATALYST_APP / f"config-{project_key}.json"
