"""Find (or clone) the project checkout and work out its org/repo identity."""

import logging
import re
from pathlib import Path

from .commands import git_clone, git_remote_url, git_toplevel, is_git_repo
from .errors import FatalSetupError
from .settings import Settings
from .state import WorkspaceState
from .ui import print_header, print_info, print_success, print_warning

log = logging.getLogger(__name__)

REMOTE_RE = re.compile(r"github\.com[:/]([^/]+)/([^/.]+)")
PATH_RE = re.compile(r"/github/([^/]+)/([^/]+)/?$")
SLUG_RE = re.compile(r"^([^/\s]+)/([^/\s]+)$")
NAME_RE = re.compile(r"^(?!\.{1,2}$)[^/\s]+$")

LOCATION_OPTIONS = {
    "1": "I already have the repo checked out",
    "2": "Clone a fresh copy to a new location",
}


def parse_remote_url(url: str | None) -> tuple[str, str] | None:
    """Extract ``(org, repo)`` from a GitHub remote URL (ssh or https)."""
    if not url:
        return None
    match = REMOTE_RE.search(url)
    return (match.group(1), match.group(2)) if match else None


def parse_checkout_path(path: Path) -> tuple[str, str] | None:
    """Extract ``(org, repo)`` from a ``.../github/<org>/<repo>`` checkout path."""
    match = PATH_RE.search(path.resolve().as_posix())
    return (match.group(1), match.group(2)) if match else None


def parse_slug(text: str) -> tuple[str, str]:
    match = SLUG_RE.match(text.strip())
    if not match or not all(NAME_RE.match(part) for part in match.groups()):
        raise FatalSetupError(f"Invalid format '{text}'. Expected: org/repo")
    return match.group(1), match.group(2)


def detect_identity(project_dir: Path, prompter=None) -> tuple[str, str]:
    """Resolve ``(org, repo)`` from the remote, then the path, then the operator."""
    identity = parse_remote_url(git_remote_url(project_dir))
    if identity:
        log.debug("Identity from remote: %s/%s", *identity)
        return identity

    identity = parse_checkout_path(project_dir)
    if identity:
        log.debug("Identity from path: %s/%s", *identity)
        return identity

    if prompter is None:
        raise FatalSetupError(f"Could not detect GitHub org/repo for {project_dir}")

    print_info()
    print_warning("Could not detect GitHub org/repo from remote or path")
    org = prompter.ask("Enter GitHub organization name")
    repo = prompter.ask("Enter repository name")
    if not org or not repo:
        raise FatalSetupError("Organization and repository names are required")
    for label, name in (("organization", org), ("repository", repo)):
        if not NAME_RE.match(name):
            raise FatalSetupError(f"Invalid {label} name '{name}'. Expected a single name without '/' or spaces")
    return org, repo


def _state_for(project_dir: Path, org: str, repo: str) -> WorkspaceState:
    return WorkspaceState(
        org_name=org,
        repo_name=repo,
        project_key=org,
        project_dir=project_dir,
        org_root=project_dir.parent,
    )


def use_existing_checkout(path_text: str, prompter) -> WorkspaceState:
    project_dir = Path(path_text).expanduser().resolve()
    if not (project_dir / ".git").exists():
        raise FatalSetupError(f"Not a git repository: {project_dir}")
    org, repo = detect_identity(project_dir, prompter)
    return _state_for(project_dir, org, repo)


def clone_fresh(slug: str, prompter, settings: Settings) -> WorkspaceState:
    org, repo = parse_slug(slug)

    if settings.github_source_root is not None:
        org_root = settings.github_source_root / org
    else:
        default_base = Path.home() / "code-repos" / "github" / org
        answer = prompter.ask("Enter directory to clone into", default=str(default_base))
        org_root = Path(answer or default_base).expanduser()

    project_dir = org_root.resolve() / repo
    org_root.mkdir(parents=True, exist_ok=True)

    print_header("Cloning Repository")
    result = git_clone(f"git@github.com:{org}/{repo}.git", project_dir)
    if not result.success:
        raise FatalSetupError(f"Failed to clone {org}/{repo}: {result.reason}", hint=result.manual_command)
    return _state_for(project_dir, org, repo)


def determine_project_location(prompter, settings: Settings) -> WorkspaceState:
    print_info()
    choice = prompter.choose("Where is your project located?", LOCATION_OPTIONS, default="1")
    if choice == "1":
        return use_existing_checkout(prompter.ask("Enter path to existing repository"), prompter)
    if choice == "2":
        return clone_fresh(prompter.ask("Enter GitHub repo (org/repo)"), prompter, settings)
    raise FatalSetupError(f"Invalid option: {choice}")


def locate_repository(prompter, settings: Settings, cwd: Path | None = None) -> WorkspaceState:
    """Produce the workspace identity for the checkout being set up."""
    print_header("Detecting Git Repository")
    cwd = cwd or Path.cwd()

    if is_git_repo(cwd):
        project_dir = git_toplevel(cwd) or cwd
        print_success(f"Found git repository: {project_dir}")
        org, repo = detect_identity(project_dir, prompter)
        print_info()
        print_info(f"Detected repository: [bold]{org}/{repo}[/bold]")
        print_info()
        if prompter.confirm("Set up Catalyst in this repository?"):
            return _state_for(project_dir, org, repo)
    else:
        print_warning("Not currently in a git repository")

    return determine_project_location(prompter, settings)
