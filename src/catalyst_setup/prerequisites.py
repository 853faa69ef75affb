"""Prerequisite checks for the external tools the workflow depends on."""

import logging
import re
import subprocess
import sys
from dataclasses import dataclass

import typer

from .commands import check_tool, run_command
from .errors import FatalSetupError, SetupCancelled
from .ui import StepTracker, console, print_error, print_header, print_info, print_success, print_warning

log = logging.getLogger(__name__)

GH_INSTALL_URL = "https://cli.github.com/"
LINEARIS_INSTALL_HINT = "npm install -g --install-links ryanrozich/linearis#feat/cycles-cli"
LINEARIS_MIN_VERSION = (1, 1, 0)

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


@dataclass(frozen=True)
class Tool:
    name: str
    label: str
    purpose: str
    critical: bool


TOOLS = [
    Tool("git", "Git version control", "repositories and worktrees", critical=True),
    Tool("humanlayer", "HumanLayer CLI", "thoughts system", critical=True),
    Tool("gh", "GitHub CLI", "Linear integration and thoughts backup", critical=False),
    Tool("linearis", "Linearis CLI", "Linear integration", critical=False),
]


def parse_version(output: str | None) -> tuple[int, int, int] | None:
    """Parse the last line of a ``--version`` output as ``major.minor.patch``."""
    lines = (output or "").strip().splitlines()
    if not lines:
        return None
    match = _VERSION_RE.match(lines[-1].strip())
    if not match:
        return None
    return tuple(int(part) for part in match.groups())


def linearis_version() -> tuple[int, int, int] | None:
    try:
        return parse_version(run_command(["linearis", "--version"], capture=True, check_return=False))
    except FileNotFoundError:
        return None


def offer_install_humanlayer(prompter) -> bool:
    print_info()
    print_info("HumanLayer CLI is required for the thoughts system.")
    print_info("Installation options:")
    print_info("  1. pip install humanlayer")
    print_info("  2. pipx install humanlayer")
    print_info()

    if not prompter.confirm("Attempt to install via pip now?"):
        print_warning("Skipping HumanLayer installation. Setup cannot continue.")
        return False
    try:
        run_command([sys.executable, "-m", "pip", "install", "humanlayer"])
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        print_error(f"pip install failed: {e}")
        return False
    return check_tool("humanlayer")


def offer_install_gh(prompter) -> None:
    print_info()
    print_info("GitHub CLI is useful for:")
    print_info("  - Linear integration (via gh api)")
    print_info("  - Backing up thoughts repo to GitHub")
    print_info(f"Installation: {GH_INSTALL_URL}")
    print_info()
    if prompter.confirm("Open installation page in browser?"):
        typer.launch(GH_INSTALL_URL)


def check_prerequisites(prompter) -> dict[str, bool]:
    """Check every tool, offering installs where one is possible.

    Raises FatalSetupError when a critical tool is still missing and
    SetupCancelled when the operator stops on missing optional tools.
    """
    print_header("Checking Prerequisites")

    available: dict[str, bool] = {}
    missing_critical: list[str] = []
    missing_optional: list[str] = []

    for tool in TOOLS:
        present = check_tool(tool.name)
        if tool.name == "linearis" and present:
            version = linearis_version()
            if version is not None and version < LINEARIS_MIN_VERSION:
                shown = ".".join(str(p) for p in version)
                print_warning(f"{tool.label} version {shown} is too old (need >= 1.1.0)")
                print_info(f"  Update: {LINEARIS_INSTALL_HINT}")
                present = False
            else:
                suffix = f" (v{'.'.join(str(p) for p in version)})" if version else ""
                print_success(f"{tool.label} installed{suffix}")
        elif present:
            print_success(f"{tool.label} installed")
        else:
            qualifier = "required" if tool.critical else "optional"
            print_warning(f"{tool.label} not found ({qualifier}, for {tool.purpose})")
            if tool.name == "humanlayer":
                present = offer_install_humanlayer(prompter)
            elif tool.name == "gh":
                offer_install_gh(prompter)
            elif tool.name == "linearis":
                print_info(f"  Install: {LINEARIS_INSTALL_HINT}")

        available[tool.name] = present
        if not present:
            (missing_critical if tool.critical else missing_optional).append(tool.name)

    log.debug("Tool availability: %s", available)

    if missing_critical:
        raise FatalSetupError(
            f"Critical prerequisites missing: {', '.join(missing_critical)}. Cannot continue.",
            hint="Install the missing tools and re-run setup.",
        )

    if missing_optional:
        print_info()
        print_warning("Some optional tools are missing. You can:")
        print_info("  - Continue setup (you can add integrations later)")
        print_info("  - Exit and install tools manually")
        print_info()
        if not prompter.confirm("Continue without optional tools?"):
            raise SetupCancelled("Setup cancelled. Install missing tools and re-run this command.")

    return available


def render_tool_check() -> tuple[StepTracker, dict[str, bool]]:
    """Non-interactive availability table used by the ``check`` command."""
    tracker = StepTracker("Check Available Tools")
    results: dict[str, bool] = {}
    for tool in TOOLS:
        tracker.add(tool.name, tool.label)
    for tool in TOOLS:
        if not check_tool(tool.name):
            (tracker.error if tool.critical else tracker.skip)(tool.name, "not found")
            results[tool.name] = False
            continue
        if tool.name == "linearis":
            version = linearis_version()
            if version is not None and version < LINEARIS_MIN_VERSION:
                tracker.error(tool.name, f"v{'.'.join(str(p) for p in version)} too old, need >= 1.1.0")
                results[tool.name] = False
                continue
        tracker.complete(tool.name, "available")
        results[tool.name] = True
    console.print(tracker.render())
    return tracker, results
