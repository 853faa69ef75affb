"""Thin wrappers around the external CLIs the workflow drives (git, gh, humanlayer)."""

import logging
import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from .state import CommandResult
from .ui import console

log = logging.getLogger(__name__)


def run_command(
    cmd: list[str],
    check_return: bool = True,
    capture: bool = False,
    cwd: Path | None = None,
    env: dict | None = None,
) -> Optional[str]:
    """Run a command and optionally capture output."""
    log.debug("Running %s (cwd=%s)", shlex.join(cmd), cwd or Path.cwd())
    merged_env = {**os.environ, **env} if env else None
    try:
        if capture:
            result = subprocess.run(cmd, check=check_return, capture_output=True, text=True, cwd=cwd, env=merged_env)
            return result.stdout.strip()
        else:
            subprocess.run(cmd, check=check_return, cwd=cwd, env=merged_env)
            return None
    except subprocess.CalledProcessError as e:
        if check_return:
            console.print(f"[red]Error running command:[/red] {' '.join(cmd)}")
            console.print(f"[red]Exit code:[/red] {e.returncode}")
            if hasattr(e, 'stderr') and e.stderr:
                console.print(f"[red]Error output:[/red] {e.stderr}")
            raise
        return None


def check_tool(tool: str) -> bool:
    """Check if a tool is installed."""
    return shutil.which(tool) is not None


def is_git_repo(path: Path = None) -> bool:
    """Check if the specified path is inside a git repository."""
    if path is None:
        path = Path.cwd()

    if not path.is_dir():
        return False

    try:
        subprocess.run(
            ["git", "rev-parse", "--is-inside-work-tree"],
            check=True,
            capture_output=True,
            cwd=path,
        )
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


def git_toplevel(path: Path) -> Path | None:
    try:
        out = run_command(["git", "rev-parse", "--show-toplevel"], capture=True, cwd=path, check_return=False)
    except FileNotFoundError:
        return None
    return Path(out) if out else None


def git_remote_url(path: Path, remote: str = "origin") -> str | None:
    try:
        out = run_command(
            ["git", "config", "--get", f"remote.{remote}.url"],
            capture=True,
            cwd=path,
            check_return=False,
        )
    except FileNotFoundError:
        return None
    return out or None


def init_git_repo(path: Path, message: str, quiet: bool = False) -> bool:
    """Initialize a git repository at *path* and commit whatever is in it.
    quiet: if True suppress console output (tracker handles status)
    """
    try:
        if not quiet:
            console.print("[cyan]Initializing git repository...[/cyan]")
        subprocess.run(["git", "init"], check=True, capture_output=True, cwd=path)
        subprocess.run(["git", "add", "."], check=True, capture_output=True, cwd=path)
        subprocess.run(["git", "commit", "-m", message], check=True, capture_output=True, cwd=path)
        if not quiet:
            console.print("[green]✓[/green] Git repository initialized")
        return True
    except subprocess.CalledProcessError as e:
        log.debug("git init/commit failed in %s: %s", path, e.stderr)
        if not quiet:
            console.print(f"[red]Error initializing git repository:[/red] {e}")
        return False


def git_clone(url: str, destination: Path) -> CommandResult:
    cmd = ["git", "clone", url, str(destination)]
    try:
        run_command(cmd)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        return CommandResult.failed(str(e), manual_command=shlex.join(cmd))
    return CommandResult.ok(destination)


def git_add_remote(path: Path, url: str, name: str = "origin") -> CommandResult:
    cmd = ["git", "remote", "add", name, url]
    try:
        run_command(cmd, capture=True, cwd=path)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        return CommandResult.failed(str(e), manual_command=f"cd {shlex.quote(str(path))} && {shlex.join(cmd)}")
    return CommandResult.ok(path)


def git_push_upstream(path: Path, remote: str = "origin") -> CommandResult:
    """Push the default branch, trying ``main`` first and then ``master``."""
    for branch in ("main", "master"):
        cmd = ["git", "push", "-u", remote, branch]
        try:
            run_command(cmd, capture=True, cwd=path)
            return CommandResult.ok(path)
        except subprocess.CalledProcessError:
            continue
        except FileNotFoundError as e:
            return CommandResult.failed(str(e))
    return CommandResult.failed(
        f"could not push main or master to {remote}",
        manual_command=f"cd {shlex.quote(str(path))} && git push -u {remote} main",
    )


def gh_repo_create(path: Path, name: str) -> CommandResult:
    cmd = ["gh", "repo", "create", name, "--private", "--source=.", "--push"]
    try:
        run_command(cmd, cwd=path)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        return CommandResult.failed(str(e), manual_command=f"cd {shlex.quote(str(path))} && {shlex.join(cmd)}")
    return CommandResult.ok(path)


def humanlayer(args: list[str], project_dir: Path, config_file: Path) -> CommandResult:
    """Run a ``humanlayer`` subcommand against the given per-project config."""
    cmd = ["humanlayer", *args]
    manual = (
        f"cd {shlex.quote(str(project_dir))} && "
        f"HUMANLAYER_CONFIG={shlex.quote(str(config_file))} {shlex.join(cmd)}"
    )
    try:
        run_command(cmd, cwd=project_dir, env={"HUMANLAYER_CONFIG": str(config_file)})
    except subprocess.CalledProcessError as e:
        return CommandResult.failed(f"exit code {e.returncode}", manual_command=manual)
    except FileNotFoundError:
        return CommandResult.failed("humanlayer CLI not found", manual_command=manual)
    return CommandResult.ok(project_dir)
