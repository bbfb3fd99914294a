"""Unit tests for run settings and input parsing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from github_cherry_pick.orchestrator.config import (
    CherryPickSettings,
    Identity,
    TriggeringPullRequest,
    load_triggering_pull_request,
    parse_display_name_email,
    parse_list_input,
    validate_repository_ref,
)


def _set_required(env: pytest.MonkeyPatch) -> None:
    env.setenv("INPUT_TOKEN", "test-token")
    env.setenv("INPUT_BRANCH", "release")
    env.setenv("GITHUB_REPOSITORY", "octo-org/octo-repo")
    env.setenv("GITHUB_SHA", "0123456789abcdef")


def test_parse_list_input_trims_and_drops_empty_entries() -> None:
    assert parse_list_input(" a, b ,,c ,") == ("a", "b", "c")
    assert parse_list_input("one\ntwo") == ("one", "two")
    assert parse_list_input("") == ()
    assert parse_list_input(None) == ()


def test_parse_display_name_email() -> None:
    identity = parse_display_name_email("Octo Cat <octocat@example.com>")
    assert identity == Identity(name="Octo Cat", email="octocat@example.com")
    assert str(identity) == "Octo Cat <octocat@example.com>"


def test_parse_display_name_email_rejects_bare_email() -> None:
    with pytest.raises(ValueError, match="not a valid email address with display name"):
        parse_display_name_email("octocat@example.com")


@pytest.mark.parametrize("value", ["owner", "owner/", "/repo", "a/b/c"])
def test_validate_repository_ref_rejects_malformed(value: str) -> None:
    with pytest.raises(ValueError):
        validate_repository_ref(value)


def test_settings_from_action_inputs(clean_env: pytest.MonkeyPatch) -> None:
    _set_required(clean_env)
    clean_env.setenv("INPUT_LABELS", "hotfix, backport")
    clean_env.setenv("INPUT_EXCLUDE-LABELS", "wip")
    clean_env.setenv("INPUT_TEAM-REVIEWERS", "core")
    clean_env.setenv("INPUT_TITLE-PREFIX", "[release] ")
    clean_env.setenv("INPUT_CHERRY-PICK-REPO", "fork-org/octo-repo")

    config = CherryPickSettings().to_run_config()

    assert config.token == "test-token"
    assert config.target_branch == "release"
    assert config.labels == ("hotfix", "backport")
    assert config.exclude_labels == ("wip",)
    assert config.team_reviewers == ("core",)
    assert config.reviewers == ()
    assert config.title_prefix == "[release] "
    assert config.destination_repo == "fork-org/octo-repo"
    assert config.destination_owner == "fork-org"
    assert config.source_repo == "octo-org/octo-repo"
    assert config.remote_url == "git@github.com:fork-org/octo-repo.git"
    assert config.pull_request is None


def test_empty_title_prefix_is_absent(clean_env: pytest.MonkeyPatch) -> None:
    _set_required(clean_env)
    clean_env.setenv("INPUT_TITLE-PREFIX", "")

    assert CherryPickSettings().to_run_config().title_prefix is None


def test_destination_defaults_to_current_repository(clean_env: pytest.MonkeyPatch) -> None:
    _set_required(clean_env)

    config = CherryPickSettings().to_run_config()

    assert config.destination_repo == "octo-org/octo-repo"


def test_server_url_sets_remote_host(clean_env: pytest.MonkeyPatch) -> None:
    _set_required(clean_env)
    clean_env.setenv("GITHUB_SERVER_URL", "https://github.example.com")

    config = CherryPickSettings().to_run_config()

    assert config.remote_url == "git@github.example.com:octo-org/octo-repo.git"


def test_field_name_overrides_take_precedence(clean_env: pytest.MonkeyPatch) -> None:
    _set_required(clean_env)

    settings = CherryPickSettings.with_overrides({"branch": "stable", "labels": "a,b"})

    assert settings.branch == "stable"
    assert settings.to_run_config().labels == ("a", "b")


def test_token_is_required(clean_env: pytest.MonkeyPatch) -> None:
    _set_required(clean_env)
    clean_env.delenv("INPUT_TOKEN")

    with pytest.raises(ValidationError, match="token"):
        CherryPickSettings()


def test_invalid_committer_is_rejected(clean_env: pytest.MonkeyPatch) -> None:
    _set_required(clean_env)
    clean_env.setenv("INPUT_COMMITTER", "nobody")

    with pytest.raises(ValidationError, match="not a valid email address"):
        CherryPickSettings()


def test_invalid_destination_repository_is_rejected(clean_env: pytest.MonkeyPatch) -> None:
    _set_required(clean_env)
    clean_env.setenv("INPUT_CHERRY-PICK-REPO", "not-a-repo")

    with pytest.raises(ValidationError, match="owner/repo"):
        CherryPickSettings()


def test_load_triggering_pull_request(tmp_path: Path) -> None:
    event = tmp_path / "event.json"
    event.write_text(
        json.dumps(
            {
                "pull_request": {
                    "title": "Fix bug",
                    "body": None,
                    "labels": [{"name": "hotfix"}, {"name": "wip"}, {"color": "fff"}],
                }
            }
        ),
        encoding="utf-8",
    )

    assert load_triggering_pull_request(event) == TriggeringPullRequest(
        title="Fix bug", body=None, labels=("hotfix", "wip")
    )


def test_load_triggering_pull_request_without_pull_request(tmp_path: Path) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps({"ref": "refs/heads/main"}), encoding="utf-8")

    assert load_triggering_pull_request(event) is None
    assert load_triggering_pull_request(tmp_path / "missing.json") is None
    assert load_triggering_pull_request(None) is None


def test_settings_read_event_payload(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _set_required(clean_env)
    event = tmp_path / "event.json"
    event.write_text(
        json.dumps({"pull_request": {"title": "Fix bug", "body": "Details", "labels": []}}),
        encoding="utf-8",
    )
    clean_env.setenv("GITHUB_EVENT_PATH", str(event))

    config = CherryPickSettings().to_run_config()

    assert config.pull_request == TriggeringPullRequest(title="Fix bug", body="Details")
