"""Test configuration and fixtures."""

from __future__ import annotations

import pytest

from github_cherry_pick.orchestrator.config import (
    Identity,
    RunConfig,
    TriggeringPullRequest,
)

_ENV_VARS = (
    "INPUT_TOKEN",
    "INPUT_COMMITTER",
    "INPUT_AUTHOR",
    "INPUT_BRANCH",
    "INPUT_LABELS",
    "INPUT_EXCLUDE-LABELS",
    "INPUT_ASSIGNEES",
    "INPUT_REVIEWERS",
    "INPUT_TEAM-REVIEWERS",
    "INPUT_TITLE-PREFIX",
    "INPUT_CHERRY-PICK-REPO",
    "GITHUB_REPOSITORY",
    "GITHUB_SHA",
    "GITHUB_EVENT_PATH",
    "GITHUB_API_URL",
    "GITHUB_SERVER_URL",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Isolate settings from the real environment and any local `.env`."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def run_config() -> RunConfig:
    """Provide a test run configuration."""
    return RunConfig(
        token="test-token",
        committer=Identity(name="GitHub", email="noreply@github.com"),
        author=Identity(name="Octo Cat", email="octocat@example.com"),
        target_branch="release",
        destination_repo="fork-org/octo-repo",
        sha="0123456789abcdef0123456789abcdef01234567",
        source_repo="octo-org/octo-repo",
        pull_request=TriggeringPullRequest(title="Fix bug", body="Body", labels=()),
    )
