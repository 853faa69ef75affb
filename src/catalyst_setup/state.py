"""Workspace state threaded through the setup steps."""

from dataclasses import dataclass, field, replace
from pathlib import Path


@dataclass(frozen=True)
class WorkspaceState:
    """Identity and resolved locations of the workspace being provisioned.

    Steps never mutate a state; they return an updated copy via :meth:`evolve`.
    """

    org_name: str = ""
    repo_name: str = ""
    project_key: str = ""
    project_dir: Path | None = None
    org_root: Path | None = None
    thoughts_repo: Path | None = None
    worktree_dir: Path | None = None
    user_name: str = ""
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def evolve(self, **changes) -> "WorkspaceState":
        return replace(self, **changes)

    def warn(self, message: str) -> "WorkspaceState":
        return replace(self, warnings=self.warnings + (message,))

    @property
    def slug(self) -> str:
        return f"{self.org_name}/{self.repo_name}"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of an external CLI invocation."""

    success: bool
    artifact: Path | None = None
    reason: str = ""
    manual_command: str = ""

    @classmethod
    def ok(cls, artifact: Path | None = None) -> "CommandResult":
        return cls(success=True, artifact=artifact)

    @classmethod
    def failed(cls, reason: str, manual_command: str = "") -> "CommandResult":
        return cls(success=False, reason=reason, manual_command=manual_command)
