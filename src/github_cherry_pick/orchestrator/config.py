"""Configuration for a single cherry-pick run.

Configuration is loaded from:
- GitHub Actions inputs (`INPUT_<NAME>` environment variables)
- the ambient GitHub Actions environment (`GITHUB_REPOSITORY`, `GITHUB_SHA`, ...)
- and a local `.env` file (if present)

Settings are validated once and then frozen into a `RunConfig`, which is the only
object the orchestrator and publisher see.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_COMMITTER = "GitHub <noreply@github.com>"
DEFAULT_AUTHOR = (
    "github-actions[bot] <41898282+github-actions[bot]@users.noreply.github.com>"
)
DEFAULT_REMOTE_NAME = "cherrypick"

_DISPLAY_NAME_EMAIL = re.compile(r"^([^<]+)\s*<([^>]+)>$")


@dataclass(frozen=True, slots=True)
class Identity:
    """A git identity parsed from "Display Name <email@example.com>"."""

    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True, slots=True)
class TriggeringPullRequest:
    """The pull request fields read from the triggering event payload."""

    title: str | None
    body: str | None
    labels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Immutable snapshot of run parameters, built once at start."""

    token: str
    committer: Identity
    author: Identity
    target_branch: str
    destination_repo: str
    sha: str
    labels: tuple[str, ...] = ()
    exclude_labels: tuple[str, ...] = ()
    assignees: tuple[str, ...] = ()
    reviewers: tuple[str, ...] = ()
    team_reviewers: tuple[str, ...] = ()
    title_prefix: str | None = None
    source_repo: str | None = None
    pull_request: TriggeringPullRequest | None = None
    remote_name: str = DEFAULT_REMOTE_NAME
    server_host: str = "github.com"
    api_url: str = "https://api.github.com"

    @property
    def destination_owner(self) -> str:
        return self.destination_repo.split("/")[0]

    @property
    def remote_url(self) -> str:
        return f"git@{self.server_host}:{self.destination_repo}.git"


def parse_list_input(value: str | None) -> tuple[str, ...]:
    """Split a comma (or newline) separated input, trimming and dropping empty entries."""

    if not value:
        return ()
    parts = (p.strip() for p in re.split(r"[,\n]", value))
    return tuple(p for p in parts if p)


def parse_display_name_email(value: str) -> Identity:
    match = _DISPLAY_NAME_EMAIL.match(value.strip())
    if match is None:
        raise ValueError(
            f"The format of '{value}' is not a valid email address with display name"
        )
    return Identity(name=match.group(1).strip(), email=match.group(2).strip())


def validate_repository_ref(value: str) -> str:
    """Return `value` if it has the form "owner/repo", otherwise raise ValueError."""

    owner, sep, repo = value.partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise ValueError(f"Repository must be in the form 'owner/repo', got '{value}'")
    return value


def load_triggering_pull_request(event_path: Path | None) -> TriggeringPullRequest | None:
    """Read the triggering pull request from a GitHub event payload file.

    Returns None when there is no payload or the payload is not a pull request event.
    """

    if event_path is None or not event_path.is_file():
        return None

    payload: Any = json.loads(event_path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        return None
    pull = payload.get("pull_request")
    if not isinstance(pull, dict):
        return None

    title = pull.get("title")
    body = pull.get("body")
    labels: list[str] = []
    raw_labels = pull.get("labels")
    if isinstance(raw_labels, list):
        for item in raw_labels:
            name = item.get("name") if isinstance(item, dict) else None
            if isinstance(name, str) and name:
                labels.append(name)

    return TriggeringPullRequest(
        title=title if isinstance(title, str) else None,
        body=body if isinstance(body, str) else None,
        labels=tuple(labels),
    )


class CherryPickSettings(BaseSettings):
    """Settings for one cherry-pick run.

    Environment variables (GitHub Actions inputs):
    - INPUT_TOKEN
    - INPUT_COMMITTER, INPUT_AUTHOR
    - INPUT_BRANCH
    - INPUT_LABELS, INPUT_EXCLUDE-LABELS, INPUT_ASSIGNEES, INPUT_REVIEWERS,
      INPUT_TEAM-REVIEWERS (comma-separated)
    - INPUT_TITLE-PREFIX (not trimmed)
    - INPUT_CHERRY-PICK-REPO

    Ambient environment:
    - GITHUB_REPOSITORY, GITHUB_SHA, GITHUB_EVENT_PATH
    - GITHUB_API_URL, GITHUB_SERVER_URL (optional)
    - LOG_LEVEL (optional)
    """

    token: str = Field(default="", validation_alias="INPUT_TOKEN")
    committer: str = Field(default=DEFAULT_COMMITTER, validation_alias="INPUT_COMMITTER")
    author: str = Field(default=DEFAULT_AUTHOR, validation_alias="INPUT_AUTHOR")
    branch: str = Field(default="", validation_alias="INPUT_BRANCH")
    labels: str = Field(default="", validation_alias="INPUT_LABELS")
    exclude_labels: str = Field(default="", validation_alias="INPUT_EXCLUDE-LABELS")
    assignees: str = Field(default="", validation_alias="INPUT_ASSIGNEES")
    reviewers: str = Field(default="", validation_alias="INPUT_REVIEWERS")
    team_reviewers: str = Field(default="", validation_alias="INPUT_TEAM-REVIEWERS")
    title_prefix: str = Field(
        default="",
        validation_alias="INPUT_TITLE-PREFIX",
        description="Prefix prepended verbatim to the pull request title",
    )
    cherry_pick_repo: str = Field(
        default="",
        validation_alias="INPUT_CHERRY-PICK-REPO",
        description="Destination repository 'owner/repo' (defaults to GITHUB_REPOSITORY)",
    )

    github_repository: str = Field(default="", validation_alias="GITHUB_REPOSITORY")
    github_sha: str = Field(default="", validation_alias="GITHUB_SHA")
    github_event_path: Path | None = Field(default=None, validation_alias="GITHUB_EVENT_PATH")
    github_api_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_API_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    github_server_url: str = Field(
        default="https://github.com",
        validation_alias="GITHUB_SERVER_URL",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def with_overrides(cls, overrides: dict[str, Any]) -> CherryPickSettings:
        """Load settings, letting `overrides` (keyed by field name) win over the environment."""

        by_alias: dict[str, Any] = {}
        for name, value in overrides.items():
            alias = cls.model_fields[name].validation_alias
            by_alias[alias if isinstance(alias, str) else name] = value
        return cls(**by_alias)

    @field_validator(
        "token",
        "committer",
        "author",
        "branch",
        "cherry_pick_repo",
        "github_repository",
        "github_sha",
        mode="before",
    )
    @classmethod
    def _strip(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("github_event_path", mode="before")
    @classmethod
    def _empty_path_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _validate_inputs(self) -> CherryPickSettings:
        if not self.token:
            raise ValueError("Input 'token' is required")
        if not self.branch:
            raise ValueError("Input 'branch' is required")
        if not self.github_sha:
            raise ValueError("GITHUB_SHA is required")

        if not self.cherry_pick_repo:
            self.cherry_pick_repo = self.github_repository
        if not self.cherry_pick_repo:
            raise ValueError("Input 'cherry-pick-repo' is required outside of GitHub Actions")
        validate_repository_ref(self.cherry_pick_repo)
        if self.github_repository:
            validate_repository_ref(self.github_repository)

        parse_display_name_email(self.committer)
        parse_display_name_email(self.author)
        return self

    @property
    def server_host(self) -> str:
        return urlparse(self.github_server_url).hostname or "github.com"

    def to_run_config(self) -> RunConfig:
        """Freeze these settings into the run's `RunConfig`."""

        return RunConfig(
            token=self.token,
            committer=parse_display_name_email(self.committer),
            author=parse_display_name_email(self.author),
            target_branch=self.branch,
            destination_repo=self.cherry_pick_repo,
            sha=self.github_sha,
            labels=parse_list_input(self.labels),
            exclude_labels=parse_list_input(self.exclude_labels),
            assignees=parse_list_input(self.assignees),
            reviewers=parse_list_input(self.reviewers),
            team_reviewers=parse_list_input(self.team_reviewers),
            title_prefix=self.title_prefix or None,
            source_repo=self.github_repository or None,
            pull_request=load_triggering_pull_request(self.github_event_path),
            server_host=self.server_host,
            api_url=self.github_api_url,
        )
