"""The end-to-end setup run: every step in order, once."""

import logging
from dataclasses import dataclass
from pathlib import Path

from rich.panel import Panel

from . import configs, integrations, locator, prerequisites, thoughts, worktrees
from .errors import SetupError
from .settings import Settings
from .state import WorkspaceState
from .ui import StepTracker, console
from .validator import ValidationReport, validate_setup

log = logging.getLogger(__name__)

STEPS = [
    ("precheck", "Check required tools"),
    ("locate", "Locate repository"),
    ("thoughts-repo", "Thoughts repository"),
    ("worktrees", "Worktree directory"),
    ("project-config", "Project configuration"),
    ("host-config", "HumanLayer configuration"),
    ("secrets", "Integration secrets"),
    ("thoughts-init", "Link thoughts into project"),
    ("thoughts-sync", "Sync thoughts index"),
    ("validate", "Validate setup"),
]


@dataclass
class SetupOutcome:
    state: WorkspaceState
    report: ValidationReport
    tracker: StepTracker


def new_tracker() -> StepTracker:
    tracker = StepTracker("Catalyst Setup")
    for key, label in STEPS:
        tracker.add(key, label)
    return tracker


def run_setup(
    prompter,
    settings: Settings,
    cwd: Path | None = None,
    check_tools: bool = True,
    tracker: StepTracker | None = None,
) -> SetupOutcome:
    """Run the whole workflow.

    FatalSetupError and SetupCancelled propagate to the caller after the
    tracker marks the step that raised them. Pass a *tracker* to render it
    on that path.
    """
    if tracker is None:
        tracker = new_tracker()
    current = "precheck"
    try:
        if check_tools:
            prerequisites.check_prerequisites(prompter)
            tracker.complete("precheck", "ok")
        else:
            tracker.skip("precheck", "skipped")

        current = "locate"
        state = locator.locate_repository(prompter, settings, cwd=cwd)
        tracker.complete("locate", state.slug)

        current = "thoughts-repo"
        state = thoughts.setup_thoughts_repo(state, prompter, settings)
        tracker.complete("thoughts-repo", str(state.thoughts_repo))

        current = "worktrees"
        state = worktrees.setup_worktree_directory(state, prompter)
        if not state.worktree_dir.is_dir():
            tracker.skip("worktrees", "declined")
        else:
            tracker.complete("worktrees", str(state.worktree_dir))

        current = "project-config"
        state = configs.setup_project_config(state, prompter, settings)
        tracker.complete("project-config", f"projectKey {state.project_key}")

        current = "host-config"
        state = configs.setup_host_config(state, prompter, settings)
        tracker.complete("host-config", str(state.thoughts_repo))

        current = "secrets"
        state, secrets_path = integrations.setup_secrets(state, prompter, settings)
        if secrets_path is None:
            tracker.skip("secrets", "kept existing")
        else:
            tracker.complete("secrets", secrets_path.name)
    except SetupError as e:
        tracker.error(current, str(e))
        raise

    state, linked = thoughts.init_thoughts(state, prompter, settings)
    (tracker.complete if linked.success else tracker.error)("thoughts-init", linked.reason or "linked")

    state, synced = thoughts.sync_thoughts(state, settings)
    (tracker.complete if synced.success else tracker.error)("thoughts-sync", synced.reason or "indexed")

    report = validate_setup(state, settings)
    failed = len(report.failures)
    (tracker.complete if report.ok else tracker.error)("validate", "passed" if report.ok else f"{failed} failed")

    for warning in state.warnings:
        log.info("Setup warning: %s", warning)
    return SetupOutcome(state=state, report=report, tracker=tracker)


def render_summary(state: WorkspaceState, settings: Settings) -> Panel:
    lines = [
        "[bold]📁 Project Configuration[/bold]",
        f"   {'Location':<12} {state.project_dir}",
        f"   {'Org/Repo':<12} {state.slug}",
        f"   {'Project Key':<12} {state.project_key}",
        "",
        "[bold]🧠 Thoughts Repository[/bold]",
        f"   {'Location':<12} {state.thoughts_repo}",
        f"   {'User':<12} {state.user_name}",
        "",
        "[bold]🌳 Worktrees[/bold]",
        f"   {'Location':<12} {state.worktree_dir}",
        "",
        "[bold]⚙️  Configuration Files[/bold]",
        f"   {'Project':<12} {settings.project_config_path(state.project_dir)}",
        f"   {'HumanLayer':<12} {settings.host_config_path(state.project_key)}",
        f"   {'Secrets':<12} {settings.secrets_config_path(state.project_key)}",
    ]
    if state.warnings:
        lines.append("")
        lines.append("[yellow]Warnings:[/yellow]")
        lines.extend(f"   • {w}" for w in state.warnings)
    return Panel("\n".join(lines), title="🎉 Catalyst Setup Complete!", border_style="green", padding=(1, 2))


def render_next_steps() -> Panel:
    steps_lines = [
        "1. Install Catalyst plugin in Claude Code:",
        "   [cyan]/plugin marketplace add coalesce-labs/catalyst[/cyan]",
        "   [cyan]/plugin install catalyst-dev[/cyan]",
        "2. Restart Claude Code to load configuration",
        "3. Try your first workflow command: [cyan]/research-codebase[/cyan]",
        "4. Create a worktree for parallel work: [cyan]/create-worktree PROJ-123 main[/cyan]",
        "",
        "[dim]Setup is idempotent. Run it again anytime to add/update integrations,[/dim]",
        "[dim]fix configuration issues, or set up additional projects in the same org.[/dim]",
    ]
    return Panel("\n".join(steps_lines), title="Next Steps", border_style="cyan", padding=(1, 2))


def print_summary(state: WorkspaceState, settings: Settings):
    console.print()
    console.print(render_summary(state, settings))
    console.print()
    console.print(render_next_steps())
