"""Shared fixtures for catalyst-setup tests."""

import pytest

from catalyst_setup.settings import Settings
from catalyst_setup.state import WorkspaceState


class ScriptedPrompter:
    """Answers prompts from a table of ``question fragment -> answer``.

    An answer of ``None`` for ``ask`` accepts the offered default, and an
    exception instance is raised as if the operator cancelled. A question
    that matches no fragment fails the test, so unexpected prompts surface.
    """

    def __init__(self, answers=None):
        self.answers = dict(answers or {})
        self.asked = []

    def _answer(self, question):
        self.asked.append(question)
        for fragment, answer in self.answers.items():
            if fragment in question:
                if isinstance(answer, Exception):
                    raise answer
                return answer
        raise AssertionError(f"Unexpected prompt: {question!r}")

    def confirm(self, question, default=True):
        return bool(self._answer(question))

    def ask(self, question, default=None):
        answer = self._answer(question)
        if answer is None:
            return default or ""
        return answer

    def choose(self, question, options, default=None):
        answer = self._answer(question)
        return default if answer is None else answer

    def was_asked(self, fragment):
        return any(fragment in q for q in self.asked)


@pytest.fixture
def prompter_factory():
    return ScriptedPrompter


@pytest.fixture
def settings(tmp_path):
    return Settings(config_home=tmp_path / "config", default_user="alice")


@pytest.fixture
def workspace(tmp_path):
    org_root = tmp_path / "github" / "acme"
    project_dir = org_root / "widgets"
    (project_dir / ".git").mkdir(parents=True)
    return WorkspaceState(
        org_name="acme",
        repo_name="widgets",
        project_key="acme",
        project_dir=project_dir,
        org_root=org_root,
    )


@pytest.fixture
def thoughts_repo(workspace):
    """A valid thoughts repository next to the project."""
    repo = workspace.org_root / "thoughts"
    for name in ("repos", "global", ".git"):
        (repo / name).mkdir(parents=True)
    return repo
