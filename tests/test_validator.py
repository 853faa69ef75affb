"""Tests for the post-setup validator."""

import os

import pytest

from catalyst_setup.configs import host_config_document
from catalyst_setup.jsonstore import write_json_atomic
from catalyst_setup.validator import Status, validate


@pytest.fixture
def provisioned(workspace, thoughts_repo, settings):
    """A workspace with every artifact in place."""
    write_json_atomic(settings.project_config_path(workspace.project_dir), {"catalyst": {"projectKey": "acme"}})
    write_json_atomic(settings.host_config_path("acme"), host_config_document(thoughts_repo, "alice"))
    write_json_atomic(settings.secrets_config_path("acme"), {"catalyst": {}})
    shared = thoughts_repo / "repos" / "widgets" / "shared"
    shared.mkdir(parents=True)
    links = workspace.project_dir / "thoughts"
    links.mkdir()
    os.symlink(shared, links / "shared")
    worktrees = workspace.org_root / "widgets-worktrees"
    worktrees.mkdir()
    return workspace.evolve(thoughts_repo=thoughts_repo, worktree_dir=worktrees)


def test_everything_passes(provisioned, settings):
    report = validate(provisioned, settings)

    assert report.ok
    assert all(c.status is Status.PASS for c in report.checks)
    assert [c.name for c in report.checks] == [
        "project-config",
        "host-config",
        "secrets-config",
        "thoughts-links",
        "worktree-dir",
    ]


def test_missing_project_config_fails_only_that_check(provisioned, settings):
    settings.project_config_path(provisioned.project_dir).unlink()

    report = validate(provisioned, settings)

    assert not report.ok
    assert [c.name for c in report.failures] == ["project-config"]


def test_project_config_without_key_fails(provisioned, settings):
    write_json_atomic(settings.project_config_path(provisioned.project_dir), {"catalyst": {}})

    assert validate(provisioned, settings).get("project-config").status is Status.FAIL


def test_host_config_pointing_at_missing_directory_fails(provisioned, settings, tmp_path):
    write_json_atomic(settings.host_config_path("acme"), host_config_document(tmp_path / "gone", "alice"))

    check = validate(provisioned, settings).get("host-config")

    assert check.status is Status.FAIL
    assert "gone" in check.detail


def test_absent_secrets_config_is_only_a_warning(provisioned, settings):
    settings.secrets_config_path("acme").unlink()

    report = validate(provisioned, settings)

    assert report.ok
    assert report.get("secrets-config").status is Status.WARN


def test_invalid_secrets_json_fails(provisioned, settings):
    settings.secrets_config_path("acme").write_text("{oops")

    report = validate(provisioned, settings)

    assert report.get("secrets-config").status is Status.FAIL
    assert "invalid JSON" in report.get("secrets-config").detail


def test_plain_directory_is_not_a_thoughts_link(provisioned, settings):
    link = provisioned.project_dir / "thoughts" / "shared"
    link.unlink()
    link.mkdir()

    assert validate(provisioned, settings).get("thoughts-links").status is Status.FAIL


def test_missing_worktree_directory_is_a_warning(provisioned, settings):
    provisioned.worktree_dir.rmdir()

    report = validate(provisioned, settings)

    assert report.ok
    assert report.get("worktree-dir").status is Status.WARN
