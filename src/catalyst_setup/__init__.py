#!/usr/bin/env python3
"""
Catalyst setup CLI - bootstrap a project workspace for Catalyst

Usage:
    catalyst-setup setup
    catalyst-setup check
    catalyst-setup validate

Or run without installing:
    uvx --from . catalyst-setup setup
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.align import Align
from rich.logging import RichHandler
from rich.panel import Panel
from typer.core import TyperGroup

from .commands import git_toplevel
from .errors import FatalSetupError, SetupCancelled
from .jsonstore import dig, read_json_lenient
from .locator import detect_identity
from .prerequisites import render_tool_check
from .settings import Settings
from .state import WorkspaceState
from .ui import ConsolePrompter, StepTracker, console, show_banner
from .validator import validate_setup
from .workflow import new_tracker, print_summary, run_setup

__all__ = ["app", "main", "run_setup", "Settings", "WorkspaceState"]


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help."""

    def format_help(self, ctx, formatter):
        show_banner()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="catalyst-setup",
    help="Setup tool for Catalyst workspaces, thoughts and integrations",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)


def configure_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=debug, rich_tracebacks=True)],
        force=True,
    )


def _fail(error: FatalSetupError, tracker: StepTracker | None = None):
    if tracker is not None:
        console.print()
        console.print(tracker.render())
    body = str(error)
    if error.hint:
        body += f"\n\n[dim]{error.hint}[/dim]"
    console.print()
    console.print(Panel(body, title="[red]Setup Failed[/red]", border_style="red", padding=(1, 2)))
    raise typer.Exit(1)


@app.callback()
def callback(ctx: typer.Context):
    """Show banner when no subcommand is provided."""
    if ctx.invoked_subcommand is None and "--help" not in sys.argv and "-h" not in sys.argv:
        show_banner()
        console.print(Align.center("[dim]Run 'catalyst-setup --help' for usage information[/dim]"))
        console.print()


@app.command()
def setup(
    debug: bool = typer.Option(False, "--debug", help="Show verbose diagnostic output for commands and file writes"),
    github_token: str = typer.Option(None, "--github-token", help="GitHub token for creating the thoughts backup repo (or set GH_TOKEN or GITHUB_TOKEN)"),
    skip_tls: bool = typer.Option(False, "--skip-tls", help="Skip SSL/TLS verification for GitHub API calls (not recommended)"),
):
    """
    Set up Catalyst for a project. Safe to re-run at any time.

    This command will:
    1. Check that required tools are installed (git, humanlayer)
    2. Detect the project repository, or clone it
    3. Create or repair the org-wide thoughts repository
    4. Create the worktree directory next to the project
    5. Write project, HumanLayer and secrets configuration
    6. Link thoughts into the project and build the search index
    7. Validate everything and report
    """
    configure_logging(debug)
    show_banner()

    settings = Settings.from_env(github_token=github_token, verify_tls=not skip_tls)
    prompter = ConsolePrompter()
    tracker = new_tracker()

    try:
        outcome = run_setup(prompter, settings, tracker=tracker)
    except SetupCancelled as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(0)
    except FatalSetupError as e:
        _fail(e, tracker)
    except KeyboardInterrupt:
        console.print("\n[yellow]Setup interrupted. Re-run to pick up where you left off.[/yellow]")
        raise typer.Exit(130)

    console.print()
    console.print(outcome.tracker.render())

    if not outcome.report.ok:
        console.print()
        console.print("[red]Setup completed with errors. Please review and re-run if needed.[/red]")
        raise typer.Exit(1)

    print_summary(outcome.state, settings)


@app.command()
def check():
    """Check that all required tools are installed."""
    show_banner()
    console.print("[bold]Checking for installed tools...[/bold]\n")

    _, results = render_tool_check()

    if results.get("git") and results.get("humanlayer"):
        console.print("\n[bold green]Catalyst setup is ready to run![/bold green]")
    else:
        console.print("\n[red]Install git and the HumanLayer CLI before running setup.[/red]")
        raise typer.Exit(1)
    if not results.get("gh"):
        console.print("[dim]Tip: Install the GitHub CLI to back up your thoughts repo[/dim]")
    if not results.get("linearis"):
        console.print("[dim]Tip: Install linearis >= 1.1.0 for the Linear integration[/dim]")


@app.command()
def validate(
    project_key: Optional[str] = typer.Option(None, "--project-key", help="Project key to validate (defaults to the project config, then the GitHub org)"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose diagnostic output"),
):
    """Validate an existing setup without changing anything."""
    configure_logging(debug)
    settings = Settings.from_env()

    cwd = Path.cwd()
    project_dir = git_toplevel(cwd) or cwd
    try:
        org, repo = detect_identity(project_dir)
    except FatalSetupError:
        org, repo = "", project_dir.name

    project_config = read_json_lenient(settings.project_config_path(project_dir))
    key = project_key or dig(project_config, "catalyst", "projectKey") or org
    if not key:
        _fail(FatalSetupError("Could not determine the project key", hint="Pass --project-key explicitly."))

    state = WorkspaceState(
        org_name=org,
        repo_name=repo,
        project_key=key,
        project_dir=project_dir,
        org_root=project_dir.parent,
        worktree_dir=project_dir.parent / f"{repo}-worktrees",
    )
    report = validate_setup(state, settings)
    if not report.ok:
        raise typer.Exit(1)


def main():
    app()


if __name__ == "__main__":
    main()
