"""Project and user/host configuration files.

Each writer is split in two: a pure ``decide_*`` function that looks at the
existing document and the freshly resolved workspace, and a step that asks
the operator whatever the decision requires and writes the file.
"""

import enum
import logging
from pathlib import Path

from .jsonstore import dig, read_json_lenient, write_json_atomic
from .settings import DEFAULT_TICKET_PREFIX, GLOBAL_DIRNAME, REPOS_DIRNAME, Settings
from .state import WorkspaceState
from .ui import print_header, print_info, print_success, print_warning

log = logging.getLogger(__name__)


class ProjectConfigAction(enum.Enum):
    WRITE = "write"
    KEEP = "keep"
    CONFLICT = "conflict"


class HostConfigAction(enum.Enum):
    CREATE = "create"
    KEEP = "keep"
    CONFLICT = "conflict"


def decide_project_config(existing: dict | None, detected_key: str) -> tuple[ProjectConfigAction, str | None]:
    """Return the action plus the key already on disk (if any)."""
    existing_key = dig(existing, "catalyst", "projectKey")
    if not existing_key:
        return ProjectConfigAction.WRITE, None
    if existing_key == detected_key:
        return ProjectConfigAction.KEEP, existing_key
    return ProjectConfigAction.CONFLICT, existing_key


def decide_host_config(existing: dict | None, thoughts_repo: Path) -> tuple[HostConfigAction, str | None]:
    existing_repo = dig(existing, "thoughts", "thoughtsRepo")
    if not existing_repo:
        return HostConfigAction.CREATE, None
    if existing_repo == str(thoughts_repo):
        return HostConfigAction.KEEP, existing_repo
    return HostConfigAction.CONFLICT, existing_repo


def project_config_document(state: WorkspaceState, ticket_prefix: str, display_name: str) -> dict:
    return {
        "catalyst": {
            "projectKey": state.project_key,
            "repository": {"org": state.org_name, "name": state.repo_name},
            "project": {"ticketPrefix": ticket_prefix, "name": display_name},
            "thoughts": {"user": None},
        }
    }


def host_config_document(thoughts_repo: Path, user: str) -> dict:
    return {
        "thoughts": {
            "thoughtsRepo": str(thoughts_repo),
            "user": user,
            "reposDir": REPOS_DIRNAME,
            "globalDir": GLOBAL_DIRNAME,
        }
    }


def setup_project_config(state: WorkspaceState, prompter, settings: Settings) -> WorkspaceState:
    print_header("Setting Up Project Configuration")

    config_file = settings.project_config_path(state.project_dir)
    existing = read_json_lenient(config_file)
    action, existing_key = decide_project_config(existing, state.project_key)
    log.debug("Project config %s: %s", config_file, action.value)

    if action is ProjectConfigAction.KEEP:
        print_success(f"Config already has correct projectKey: {existing_key}")
        return state

    if action is ProjectConfigAction.CONFLICT:
        print_warning(f"Found existing {config_file.name} with a different projectKey")
        print_info(f"Existing projectKey: {existing_key}")
        print_info(f"Detected projectKey: {state.project_key}")
        if not prompter.confirm(f"Update to new projectKey ({state.project_key})?"):
            state = state.evolve(project_key=existing_key)
            print_warning(f"Keeping existing projectKey: {existing_key}")

    print_info()
    print_info("[bold]Ticket Prefix Configuration:[/bold]")
    print_info("  Used for Linear tickets and appears in branch names, PR titles and commits")
    print_info(f"  e.g. {state.project_key}-123-feature-name")
    ticket_prefix = prompter.ask("Enter ticket prefix (e.g., ENG, PROJ)", default=DEFAULT_TICKET_PREFIX) or DEFAULT_TICKET_PREFIX

    print_info()
    print_info("[bold]Project Name Configuration:[/bold]")
    print_info("  A human-friendly display name (not the repo name), used in docs and reports.")
    display_name = prompter.ask("Enter project name", default=state.repo_name) or state.repo_name

    write_json_atomic(config_file, project_config_document(state, ticket_prefix, display_name))

    print_success(f"Created {config_file}")
    print_info(f"  projectKey: {state.project_key}")
    print_info(f"  org/repo: {state.slug}")
    print_info(f"  ticketPrefix: {ticket_prefix}")
    return state


def setup_host_config(state: WorkspaceState, prompter, settings: Settings) -> WorkspaceState:
    """Bind the operator's thoughts user name to the thoughts repository path.

    When an existing file points elsewhere and the operator declines the
    update, the existing path wins for the rest of the run.
    """
    print_header("Setting Up HumanLayer Configuration")

    config_file = settings.host_config_path(state.project_key)
    existing = read_json_lenient(config_file)
    action, existing_repo = decide_host_config(existing, state.thoughts_repo)
    existing_user = dig(existing, "thoughts", "user", default="")
    log.debug("Host config %s: %s", config_file, action.value)

    if action is HostConfigAction.KEEP:
        print_success("Config already points to correct thoughts repo")
        return state.evolve(user_name=existing_user)

    if action is HostConfigAction.CONFLICT:
        print_warning(f"Config points to different thoughts repo: {existing_repo}")
        if not prompter.confirm(f"Update to use {state.thoughts_repo}?"):
            print_warning(f"Using existing thoughts repo: {existing_repo}")
            return state.evolve(thoughts_repo=Path(existing_repo), user_name=existing_user)

    print_info()
    print_info("[bold]Thoughts Username Configuration:[/bold]")
    print_info("  Creates a personal directory for your notes, e.g. thoughts/ryan/")
    print_info(f"  Detected system user: {settings.default_user}")
    user = prompter.ask("Enter your name for thoughts", default=settings.default_user) or settings.default_user

    write_json_atomic(config_file, host_config_document(state.thoughts_repo, user))

    print_success(f"Created HumanLayer config: {config_file}")
    print_info(f"  Thoughts repo: {state.thoughts_repo}")
    print_info(f"  User: {user}")
    return state.evolve(user_name=user)
