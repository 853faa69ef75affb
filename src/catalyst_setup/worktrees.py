"""Sibling directory that holds the project's git worktrees."""

from .state import WorkspaceState
from .ui import print_header, print_info, print_success, print_warning


def setup_worktree_directory(state: WorkspaceState, prompter) -> WorkspaceState:
    print_header("Setting Up Worktree Directory")

    worktree_dir = state.org_root / f"{state.repo_name}-worktrees"
    state = state.evolve(worktree_dir=worktree_dir)
    print_info(f"Worktrees will be created at: {worktree_dir}")
    print_info()

    if worktree_dir.is_dir():
        print_success("Worktree directory already exists")
        existing = sorted(p.name for p in worktree_dir.iterdir() if p.is_dir())
        if existing:
            print_info("Existing worktrees:")
            for name in existing:
                print_info(f"  - {name}")
    elif prompter.confirm("Create worktree directory?"):
        worktree_dir.mkdir(parents=True)
        print_success(f"Created worktree directory: {worktree_dir}")
    else:
        print_warning("Skipped worktree setup. You can create it later.")
        state = state.warn("Worktree directory not created")

    print_info()
    print_info("To create worktrees, use:")
    print_info("  /create-worktree PROJ-123 main")
    return state
