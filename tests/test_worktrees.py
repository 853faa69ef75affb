"""Tests for the worktree directory step."""

from catalyst_setup.worktrees import setup_worktree_directory


def test_creates_sibling_directory(workspace, prompter_factory):
    state = setup_worktree_directory(workspace, prompter_factory({"Create worktree directory?": True}))

    assert state.worktree_dir == workspace.org_root / "widgets-worktrees"
    assert state.worktree_dir.is_dir()
    assert state.warnings == ()


def test_existing_directory_is_left_alone(workspace, prompter_factory):
    existing = workspace.org_root / "widgets-worktrees" / "ENG-1-login"
    existing.mkdir(parents=True)
    prompter = prompter_factory()

    state = setup_worktree_directory(workspace, prompter)

    assert existing.is_dir()
    assert prompter.asked == []
    assert state.warnings == ()


def test_declined_is_a_warning(workspace, prompter_factory):
    state = setup_worktree_directory(workspace, prompter_factory({"Create worktree directory?": False}))

    assert not state.worktree_dir.exists()
    assert state.warnings == ("Worktree directory not created",)
