"""The shared "thoughts" repository: creation, repair, backup and project linking."""

import enum
import logging
import os
import shlex
import shutil
from pathlib import Path

from . import commands
from .errors import FatalSetupError, SetupCancelled
from .github import GitHubError, create_private_repo, make_client
from .settings import GLOBAL_DIRNAME, REPOS_DIRNAME, THOUGHTS_DIRNAME, Settings
from .state import CommandResult, WorkspaceState
from .ui import print_error, print_header, print_info, print_success, print_warning

log = logging.getLogger(__name__)

README = """\
# Thoughts Repository

This is a shared thoughts repository for all projects in this organization.

## Structure

```
thoughts/
├── repos/           # Per-project thoughts
│   ├── project-a/
│   │   ├── {user}/
│   │   └── shared/
│   └── project-b/
│       ├── {user}/
│       └── shared/
└── global/          # Cross-project thoughts
    ├── {user}/
    └── shared/
```

## Usage

Projects symlink into this repo via `humanlayer thoughts init`.

See: https://github.com/humanlayer/humanlayer/blob/main/hlyr/THOUGHTS.md
"""

BACKUP_OPTIONS = {
    "1": "Create new private GitHub repo",
    "2": "Link to existing GitHub repo (provide URL)",
    "3": "Skip (set up backup manually later)",
}


class RepoState(enum.Enum):
    ABSENT = "absent"
    MALFORMED = "malformed"
    VALID = "valid"


def missing_parts(path: Path) -> list[str]:
    return [name for name in (REPOS_DIRNAME, GLOBAL_DIRNAME, ".git") if not (path / name).exists()]


def classify_thoughts_repo(path: Path) -> RepoState:
    if not path.is_dir():
        return RepoState.ABSENT
    return RepoState.MALFORMED if missing_parts(path) else RepoState.VALID


def create_thoughts_repo(path: Path) -> None:
    (path / REPOS_DIRNAME).mkdir(parents=True, exist_ok=True)
    (path / GLOBAL_DIRNAME).mkdir(parents=True, exist_ok=True)
    (path / "README.md").write_text(README, encoding="utf-8")
    if not commands.init_git_repo(path, "Initial thoughts repository", quiet=True):
        print_warning("Created thoughts directories but the initial commit failed")


def repair_thoughts_repo(path: Path, prompter) -> None:
    """Add whatever is missing. Existing files are never modified or removed."""
    missing = missing_parts(path)

    if REPOS_DIRNAME in missing or GLOBAL_DIRNAME in missing:
        print_warning("Thoughts repo exists but missing expected structure")
        print_info(f"Expected: {REPOS_DIRNAME}/ and {GLOBAL_DIRNAME}/ directories")
        if prompter.confirm("Initialize proper structure?"):
            (path / REPOS_DIRNAME).mkdir(exist_ok=True)
            (path / GLOBAL_DIRNAME).mkdir(exist_ok=True)

    if ".git" in missing:
        print_warning("Thoughts repo is not a git repository")
        if prompter.confirm("Initialize as git repo?"):
            if commands.init_git_repo(path, "Initial commit", quiet=True):
                print_success("Initialized thoughts repo as git repository")
            else:
                print_warning("git init succeeded partially; commit your notes manually")


def setup_thoughts_repo(state: WorkspaceState, prompter, settings: Settings) -> WorkspaceState:
    print_header("Setting Up Thoughts Repository")

    thoughts_repo = state.org_root / THOUGHTS_DIRNAME
    state = state.evolve(thoughts_repo=thoughts_repo)
    repo_state = classify_thoughts_repo(thoughts_repo)
    log.debug("Thoughts repo %s is %s", thoughts_repo, repo_state.value)

    if repo_state is RepoState.ABSENT:
        print_info(f"Thoughts repository will be created at: {thoughts_repo}")
        print_info()
        print_info(f"This will be shared by all projects in org: {state.org_name}")
        print_info()
        if not prompter.confirm("Create thoughts repository?"):
            raise FatalSetupError("Thoughts repository required for Catalyst. Exiting.")
        create_thoughts_repo(thoughts_repo)
        print_success(f"Created thoughts repository: {thoughts_repo}")
    else:
        print_success(f"Found existing thoughts repository: {thoughts_repo}")
        if repo_state is RepoState.MALFORMED:
            repair_thoughts_repo(thoughts_repo, prompter)

    if (thoughts_repo / ".git").exists():
        state = offer_github_backup(state, prompter, settings)
    return state


def _backup_via_api(state: WorkspaceState, name: str, settings: Settings) -> CommandResult:
    if not settings.github_token:
        return CommandResult.failed(
            "GitHub CLI ('gh') not found and no GH_TOKEN/GITHUB_TOKEN set",
            manual_command=f"cd {shlex.quote(str(state.thoughts_repo))} && gh repo create {name} --private --source=. --push",
        )
    try:
        with make_client(settings.verify_tls) as client:
            url = create_private_repo(
                name,
                settings.github_token,
                client=client,
                description=f"Shared thoughts for {state.org_name}",
            )
    except GitHubError as e:
        return CommandResult.failed(str(e))
    linked = commands.git_add_remote(state.thoughts_repo, url)
    if not linked.success:
        return linked
    return commands.git_push_upstream(state.thoughts_repo)


def offer_github_backup(state: WorkspaceState, prompter, settings: Settings) -> WorkspaceState:
    """Best-effort remote backup. Failures become warnings, never errors."""
    print_header("GitHub Backup for Thoughts")

    existing = commands.git_remote_url(state.thoughts_repo)
    if existing:
        print_success(f"Thoughts repo already backed up to: {existing}")
        return state

    print_info("Your thoughts repository is not backed up to GitHub.")
    try:
        choice = prompter.choose("Back up thoughts repository?", BACKUP_OPTIONS, default="3")
    except SetupCancelled:
        choice = "3"

    if choice == "1":
        name = f"{state.org_name}-thoughts"
        print_info(f"Creating private GitHub repo: {state.org_name}/{name}")
        if commands.check_tool("gh"):
            result = commands.gh_repo_create(state.thoughts_repo, name)
        else:
            result = _backup_via_api(state, name, settings)
        if result.success:
            print_success("Thoughts backed up to GitHub!")
            return state
        print_error(f"Failed to create GitHub repo: {result.reason}")
        if result.manual_command:
            print_info(f"  {result.manual_command}")
        return state.warn("Thoughts backup to GitHub failed")

    if choice == "2":
        url = prompter.ask("Enter GitHub repo URL (git@github.com:org/repo.git)")
        if not url:
            print_warning("No URL given. Skipping GitHub backup.")
            return state.warn("Thoughts backup skipped")
        result = commands.git_add_remote(state.thoughts_repo, url)
        if not result.success:
            print_error(f"Failed to add remote: {result.reason}")
            return state.warn("Thoughts backup remote could not be added")
        if prompter.confirm("Push now?"):
            pushed = commands.git_push_upstream(state.thoughts_repo)
            if not pushed.success:
                print_error(f"Push failed: {pushed.reason}")
                return state.warn("Thoughts push to GitHub failed")
            print_success("Thoughts pushed to GitHub")
        return state

    if choice == "3":
        print_info("Skipping GitHub backup. You can set it up later with:")
        print_info(f"  cd {state.thoughts_repo}")
        print_info("  gh repo create my-thoughts --private --source=. --push")
        return state.warn("Thoughts repository has no remote backup")

    print_warning("Invalid option. Skipping GitHub backup.")
    return state.warn("Thoughts repository has no remote backup")


def _links_target(project_dir: Path) -> Path | None:
    shared = project_dir / THOUGHTS_DIRNAME / "shared"
    global_link = project_dir / THOUGHTS_DIRNAME / GLOBAL_DIRNAME
    if not (shared.is_symlink() and global_link.is_symlink()):
        return None
    target = Path(os.readlink(shared))
    if not target.is_absolute():
        target = shared.parent / target
    return target


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.resolve().relative_to(parent.resolve())
    except ValueError:
        return False
    return True


def init_thoughts(state: WorkspaceState, prompter, settings: Settings) -> tuple[WorkspaceState, CommandResult]:
    """Symlink the thoughts repository into the project via ``humanlayer thoughts init``."""
    print_header("Initializing HumanLayer Thoughts")

    project_thoughts = state.project_dir / THOUGHTS_DIRNAME
    target = _links_target(state.project_dir)
    if target is not None:
        print_success("Thoughts already initialized in this project")
        if _is_within(target, state.thoughts_repo):
            print_success("Symlinks point to correct thoughts repo")
            return state, CommandResult.ok(project_thoughts)
        print_warning(f"Symlinks point to different location: {target}")
        if not prompter.confirm("Re-initialize thoughts?"):
            return state, CommandResult.ok(project_thoughts)
        # rmtree unlinks symlinks without following them
        shutil.rmtree(project_thoughts)

    config_file = settings.host_config_path(state.project_key)
    print_info(f'Running: humanlayer thoughts init --directory "{state.repo_name}"')
    result = commands.humanlayer(
        ["thoughts", "init", "--directory", state.repo_name],
        state.project_dir,
        config_file,
    )
    if not result.success:
        print_error(f"Failed to initialize thoughts ({result.reason})")
        print_info("You can try manually:")
        print_info(f"  {result.manual_command}")
        return state.warn("humanlayer thoughts init failed"), result

    print_success("Thoughts initialized!")
    return state, CommandResult.ok(project_thoughts)


def sync_thoughts(state: WorkspaceState, settings: Settings) -> tuple[WorkspaceState, CommandResult]:
    print_info("Creating searchable index...")
    result = commands.humanlayer(
        ["thoughts", "sync"],
        state.project_dir,
        settings.host_config_path(state.project_key),
    )
    if result.success:
        print_success("Thoughts synced and indexed")
        return state, result
    print_warning("Failed to sync thoughts. You can run manually:")
    print_info(f"  {result.manual_command}")
    return state.warn("humanlayer thoughts sync failed"), result
