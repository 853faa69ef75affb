"""Re-read everything the workflow produced and report per-artifact status."""

import enum
from dataclasses import dataclass, field
from pathlib import Path

from rich.table import Table

from .jsonstore import InvalidJSONError, dig, read_json
from .settings import THOUGHTS_DIRNAME, Settings
from .state import WorkspaceState
from .ui import console, print_error, print_header, print_success


class Status(enum.Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"


@dataclass(frozen=True)
class CheckResult:
    name: str
    status: Status
    detail: str = ""


@dataclass
class ValidationReport:
    checks: list[CheckResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(c.status is not Status.FAIL for c in self.checks)

    def get(self, name: str) -> CheckResult | None:
        for check in self.checks:
            if check.name == name:
                return check
        return None

    @property
    def failures(self) -> list[CheckResult]:
        return [c for c in self.checks if c.status is Status.FAIL]


def _load(path: Path, label: str) -> tuple[dict | None, CheckResult | None]:
    if not path.is_file():
        return None, CheckResult(label, Status.FAIL, f"not found: {path}")
    try:
        return read_json(path), None
    except InvalidJSONError as e:
        return None, CheckResult(label, Status.FAIL, f"invalid JSON ({e})")


def check_project_config(state: WorkspaceState, settings: Settings) -> CheckResult:
    doc, failure = _load(settings.project_config_path(state.project_dir), "project-config")
    if failure:
        return failure
    key = dig(doc, "catalyst", "projectKey")
    if not key:
        return CheckResult("project-config", Status.FAIL, "missing catalyst.projectKey")
    return CheckResult("project-config", Status.PASS, f"projectKey configured: {key}")


def check_host_config(state: WorkspaceState, settings: Settings) -> CheckResult:
    doc, failure = _load(settings.host_config_path(state.project_key), "host-config")
    if failure:
        return failure
    repo_path = dig(doc, "thoughts", "thoughtsRepo")
    if not repo_path or not Path(repo_path).is_dir():
        return CheckResult("host-config", Status.FAIL, f"thoughts repo not found: {repo_path}")
    return CheckResult("host-config", Status.PASS, f"thoughts repo exists: {repo_path}")


def check_secrets_config(state: WorkspaceState, settings: Settings) -> CheckResult:
    path = settings.secrets_config_path(state.project_key)
    if not path.is_file():
        return CheckResult("secrets-config", Status.WARN, "not found (okay if integrations were skipped)")
    _, failure = _load(path, "secrets-config")
    if failure:
        return failure
    return CheckResult("secrets-config", Status.PASS, "valid JSON")


def check_thoughts_links(state: WorkspaceState) -> CheckResult:
    if (state.project_dir / THOUGHTS_DIRNAME / "shared").is_symlink():
        return CheckResult("thoughts-links", Status.PASS, "thoughts symlinks created")
    return CheckResult("thoughts-links", Status.FAIL, "thoughts not initialized in project")


def check_worktree_dir(state: WorkspaceState) -> CheckResult:
    if state.worktree_dir is not None and state.worktree_dir.is_dir():
        return CheckResult("worktree-dir", Status.PASS, f"exists: {state.worktree_dir}")
    return CheckResult("worktree-dir", Status.WARN, "not created (okay if skipped)")


def validate(state: WorkspaceState, settings: Settings) -> ValidationReport:
    return ValidationReport(
        checks=[
            check_project_config(state, settings),
            check_host_config(state, settings),
            check_secrets_config(state, settings),
            check_thoughts_links(state),
            check_worktree_dir(state),
        ]
    )


LABELS = {
    "project-config": "Project config",
    "host-config": "HumanLayer config",
    "secrets-config": "Catalyst secrets config",
    "thoughts-links": "Thoughts symlinks",
    "worktree-dir": "Worktree directory",
}


def render_report(report: ValidationReport) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("", width=2)
    table.add_column("Check", style="white")
    table.add_column("Detail", style="bright_black")
    symbols = {Status.PASS: "[green]✓[/green]", Status.FAIL: "[red]✗[/red]", Status.WARN: "[yellow]⚠[/yellow]"}
    for check in report.checks:
        table.add_row(symbols[check.status], LABELS.get(check.name, check.name), check.detail)
    return table


def validate_setup(state: WorkspaceState, settings: Settings) -> ValidationReport:
    print_header("Validating Setup")
    report = validate(state, settings)
    console.print(render_report(report))
    console.print()
    if report.ok:
        print_success("All validations passed!")
    else:
        print_error("Validation failed! Please review errors above.")
    return report
