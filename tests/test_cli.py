"""Tests for the catalyst-setup command line surface."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from catalyst_setup import app
from catalyst_setup.configs import host_config_document
from catalyst_setup.errors import FatalSetupError, SetupCancelled
from catalyst_setup.jsonstore import write_json_atomic
from catalyst_setup.settings import Settings

runner = CliRunner()


def test_setup_cancelled_exits_zero():
    with patch("catalyst_setup.run_setup", side_effect=SetupCancelled("Setup cancelled.")):
        result = runner.invoke(app, ["setup"])

    assert result.exit_code == 0
    assert "Setup cancelled" in result.output


def test_setup_fatal_error_exits_one():
    error = FatalSetupError("Critical prerequisites missing: git", hint="Install git")
    with patch("catalyst_setup.run_setup", side_effect=error):
        result = runner.invoke(app, ["setup"])

    assert result.exit_code == 1
    assert "Critical prerequisites missing" in result.output


def test_setup_fatal_error_shows_failed_step():
    def fail_at_locate(prompter, settings, tracker):
        tracker.complete("precheck", "ok")
        tracker.error("locate", "not a git repository")
        raise FatalSetupError("Not a git repository: /tmp/nowhere")

    with patch("catalyst_setup.run_setup", side_effect=fail_at_locate):
        result = runner.invoke(app, ["setup"])

    assert result.exit_code == 1
    assert "Locate repository" in result.output
    assert "not a git repository" in result.output


def test_check_reports_missing_humanlayer():
    with patch("catalyst_setup.prerequisites.check_tool", side_effect=lambda tool: tool == "git"):
        result = runner.invoke(app, ["check"])

    assert result.exit_code == 1


def test_check_passes_with_required_tools():
    with patch("catalyst_setup.prerequisites.check_tool", side_effect=lambda tool: tool in ("git", "humanlayer")):
        result = runner.invoke(app, ["check"])

    assert result.exit_code == 0
    assert "ready to run" in result.output


class TestValidateCommand:
    @pytest.fixture
    def xdg(self, tmp_path, monkeypatch):
        config_home = tmp_path / "xdg"
        monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
        monkeypatch.delenv("CATALYST_PROJECT_CONFIG_DIR", raising=False)
        return config_home

    def _invoke(self, workspace, *args):
        with patch("catalyst_setup.git_toplevel", return_value=workspace.project_dir), \
             patch("catalyst_setup.detect_identity", return_value=("acme", "widgets")):
            return runner.invoke(app, ["validate", *args])

    def test_missing_configs_fail(self, workspace, xdg):
        result = self._invoke(workspace)

        assert result.exit_code == 1

    def test_complete_setup_passes(self, workspace, thoughts_repo, xdg):
        settings = Settings(config_home=xdg)
        write_json_atomic(settings.project_config_path(workspace.project_dir), {"catalyst": {"projectKey": "acme"}})
        write_json_atomic(settings.host_config_path("acme"), host_config_document(thoughts_repo, "alice"))
        shared = thoughts_repo / "repos" / "widgets" / "shared"
        shared.mkdir(parents=True)
        (workspace.project_dir / "thoughts").mkdir()
        (workspace.project_dir / "thoughts" / "shared").symlink_to(shared)

        result = self._invoke(workspace)

        assert result.exit_code == 0, result.output
        assert "All validations passed" in result.output

    def test_project_key_option_wins(self, workspace, thoughts_repo, xdg):
        settings = Settings(config_home=xdg)
        write_json_atomic(settings.project_config_path(workspace.project_dir), {"catalyst": {"projectKey": "acme"}})

        write_json_atomic(settings.host_config_path("acme"), host_config_document(thoughts_repo, "alice"))
        (workspace.project_dir / "thoughts").mkdir()
        (workspace.project_dir / "thoughts" / "shared").symlink_to(thoughts_repo / "global")

        result = self._invoke(workspace, "--project-key", "other")

        # host config is only present for "acme"
        assert result.exit_code == 1
