"""Tests for the project and user/host configuration writers."""

import json

from catalyst_setup.configs import (
    HostConfigAction,
    ProjectConfigAction,
    decide_host_config,
    decide_project_config,
    setup_host_config,
    setup_project_config,
)
from catalyst_setup.jsonstore import write_json_atomic


class TestDecideProjectConfig:
    def test_no_file(self):
        assert decide_project_config(None, "acme") == (ProjectConfigAction.WRITE, None)

    def test_file_without_key(self):
        assert decide_project_config({"catalyst": {}}, "acme") == (ProjectConfigAction.WRITE, None)

    def test_matching_key(self):
        doc = {"catalyst": {"projectKey": "acme"}}
        assert decide_project_config(doc, "acme") == (ProjectConfigAction.KEEP, "acme")

    def test_different_key(self):
        doc = {"catalyst": {"projectKey": "legacy"}}
        assert decide_project_config(doc, "acme") == (ProjectConfigAction.CONFLICT, "legacy")


class TestDecideHostConfig:
    def test_absent(self, tmp_path):
        assert decide_host_config(None, tmp_path) == (HostConfigAction.CREATE, None)

    def test_same_path(self, tmp_path):
        doc = {"thoughts": {"thoughtsRepo": str(tmp_path)}}
        assert decide_host_config(doc, tmp_path) == (HostConfigAction.KEEP, str(tmp_path))

    def test_different_path(self, tmp_path):
        doc = {"thoughts": {"thoughtsRepo": "/somewhere/else"}}
        assert decide_host_config(doc, tmp_path) == (HostConfigAction.CONFLICT, "/somewhere/else")


class TestSetupProjectConfig:
    def test_fresh_write(self, workspace, settings, prompter_factory):
        prompter = prompter_factory({"ticket prefix": "ENG", "project name": "Widgets API"})

        state = setup_project_config(workspace, prompter, settings)

        doc = json.loads(settings.project_config_path(workspace.project_dir).read_text())
        assert doc == {
            "catalyst": {
                "projectKey": "acme",
                "repository": {"org": "acme", "name": "widgets"},
                "project": {"ticketPrefix": "ENG", "name": "Widgets API"},
                "thoughts": {"user": None},
            }
        }
        assert state.project_key == "acme"

    def test_defaults(self, workspace, settings, prompter_factory):
        prompter = prompter_factory({"ticket prefix": None, "project name": None})

        setup_project_config(workspace, prompter, settings)

        doc = json.loads(settings.project_config_path(workspace.project_dir).read_text())
        assert doc["catalyst"]["project"] == {"ticketPrefix": "PROJ", "name": "widgets"}

    def test_matching_key_short_circuits(self, workspace, settings, prompter_factory):
        path = settings.project_config_path(workspace.project_dir)
        write_json_atomic(path, {"catalyst": {"projectKey": "acme", "project": {"ticketPrefix": "ENG"}}})
        before = path.read_bytes()
        prompter = prompter_factory()

        setup_project_config(workspace, prompter, settings)

        assert path.read_bytes() == before
        assert prompter.asked == []

    def test_conflict_keep_existing_key(self, workspace, settings, prompter_factory):
        path = settings.project_config_path(workspace.project_dir)
        write_json_atomic(path, {"catalyst": {"projectKey": "legacy"}})
        prompter = prompter_factory({
            "Update to new projectKey": False,
            "ticket prefix": "LEG",
            "project name": None,
        })

        state = setup_project_config(workspace, prompter, settings)

        assert state.project_key == "legacy"
        assert json.loads(path.read_text())["catalyst"]["projectKey"] == "legacy"

    def test_conflict_take_detected_key(self, workspace, settings, prompter_factory):
        path = settings.project_config_path(workspace.project_dir)
        write_json_atomic(path, {"catalyst": {"projectKey": "legacy"}})
        prompter = prompter_factory({
            "Update to new projectKey": True,
            "ticket prefix": None,
            "project name": None,
        })

        state = setup_project_config(workspace, prompter, settings)

        assert state.project_key == "acme"
        assert json.loads(path.read_text())["catalyst"]["projectKey"] == "acme"


class TestSetupHostConfig:
    def test_create_with_default_user(self, workspace, thoughts_repo, settings, prompter_factory):
        state = workspace.evolve(thoughts_repo=thoughts_repo)
        prompter = prompter_factory({"your name for thoughts": None})

        state = setup_host_config(state, prompter, settings)

        doc = json.loads(settings.host_config_path("acme").read_text())
        assert doc == {
            "thoughts": {
                "thoughtsRepo": str(thoughts_repo),
                "user": "alice",
                "reposDir": "repos",
                "globalDir": "global",
            }
        }
        assert state.user_name == "alice"

    def test_same_path_is_noop(self, workspace, thoughts_repo, settings, prompter_factory):
        path = settings.host_config_path("acme")
        write_json_atomic(path, {"thoughts": {"thoughtsRepo": str(thoughts_repo), "user": "bob"}})
        before = path.read_bytes()
        prompter = prompter_factory()

        state = setup_host_config(workspace.evolve(thoughts_repo=thoughts_repo), prompter, settings)

        assert path.read_bytes() == before
        assert prompter.asked == []
        assert state.user_name == "bob"

    def test_declined_update_keeps_existing_path(self, workspace, thoughts_repo, tmp_path, settings, prompter_factory):
        older = tmp_path / "old" / "thoughts"
        path = settings.host_config_path("acme")
        write_json_atomic(path, {"thoughts": {"thoughtsRepo": str(older), "user": "bob"}})
        before = path.read_bytes()
        prompter = prompter_factory({"Update to use": False})

        state = setup_host_config(workspace.evolve(thoughts_repo=thoughts_repo), prompter, settings)

        assert state.thoughts_repo == older
        assert state.user_name == "bob"
        assert path.read_bytes() == before

    def test_confirmed_update_repoints(self, workspace, thoughts_repo, tmp_path, settings, prompter_factory):
        path = settings.host_config_path("acme")
        write_json_atomic(path, {"thoughts": {"thoughtsRepo": str(tmp_path / "old"), "user": "bob"}})
        prompter = prompter_factory({"Update to use": True, "your name for thoughts": "carol"})

        state = setup_host_config(workspace.evolve(thoughts_repo=thoughts_repo), prompter, settings)

        assert state.thoughts_repo == thoughts_repo
        assert json.loads(path.read_text())["thoughts"] == {
            "thoughtsRepo": str(thoughts_repo),
            "user": "carol",
            "reposDir": "repos",
            "globalDir": "global",
        }
