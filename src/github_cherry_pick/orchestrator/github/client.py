"""GitHub API client wrapper.

This intentionally wraps PyGithub and the REST API to keep GitHub calls out of the
orchestration code and make tests easy. Error classification for recoverable
failures happens here, once, so callers only ever see typed exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import requests
from github import Auth, Github
from github.Repository import Repository

logger = logging.getLogger(__name__)

ERROR_PR_REVIEW_FROM_AUTHOR = "Review cannot be requested from pull request author"


class GitHubApiError(RuntimeError):
    """A non-successful GitHub REST response."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ReviewFromAuthorError(GitHubApiError):
    """A reviewer was requested from the pull request's own author."""


@dataclass(frozen=True, slots=True)
class PullRequestCreated:
    number: int
    url: str | None


class GitHubClient:
    """Small wrapper around PyGithub for the operations a cherry-pick run needs."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        base_url: str = "https://api.github.com",
        repo: Repository | None = None,
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not repository:
            raise ValueError("GitHub repository is required")

        self._repository_name = repository.strip().strip("/")
        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "github-cherry-pick",
            }
        )

        if repo is not None:
            self._repo = repo
            self._github = None
            logger.debug("Using injected Repository instance")
            return

        auth = Auth.Token(token)
        self._github = github_api or Github(auth=auth, base_url=self._rest_base_url)

        self._repo = self._github.get_repo(self._repository_name)
        logger.info(
            "Authenticated with GitHub and connected to repository",
            extra={"repo": self._repository_name},
        )

    @property
    def repository(self) -> str:
        """Return the configured repository name ("owner/repo")."""

        return self._repository_name

    def _repo_url(self, *, path: str) -> str:
        path = path.strip("/")
        base = f"{self._rest_base_url}/repos/{self._repository_name}"
        return f"{base}/{path}" if path else base

    def _issues_url(self, *, issue_number: int, suffix: str) -> str:
        if issue_number <= 0:
            raise ValueError("issue_number must be a positive integer")
        return self._repo_url(path=f"issues/{issue_number}/{suffix}")

    def _pulls_url(self, *, pull_number: int, suffix: str) -> str:
        if pull_number <= 0:
            raise ValueError("pull_number must be a positive integer")
        return self._repo_url(path=f"pulls/{pull_number}/{suffix}")

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        try:
            data: Any = resp.json()
        except ValueError:
            data = None

        if isinstance(data, dict):
            message = data.get("message")
            parts = [message] if isinstance(message, str) and message else []
            # Validation failures carry the useful text in `errors`.
            errors = data.get("errors")
            if isinstance(errors, list):
                for item in errors:
                    if isinstance(item, dict) and isinstance(item.get("message"), str):
                        parts.append(item["message"])
                    elif isinstance(item, str):
                        parts.append(item)
            if parts:
                return "; ".join(parts)

        return resp.text or f"HTTP {resp.status_code}"

    def _raise_for_status(self, resp: requests.Response) -> None:
        if resp.ok:
            return
        raise GitHubApiError(self._error_message(resp), status_code=resp.status_code)

    def create_pull_request(
        self,
        *,
        title: str | None,
        body: str | None,
        head: str,
        base: str,
    ) -> PullRequestCreated:
        """Open a pull request in the configured repository."""

        kwargs: dict[str, Any] = {}
        if title is not None:
            kwargs["title"] = title
        if body is not None:
            kwargs["body"] = body

        pull = self._repo.create_pull(base=base, head=head, **kwargs)
        html_url = getattr(pull, "html_url", None)
        if not isinstance(html_url, str) or not html_url.strip():
            html_url = None

        logger.info(
            "Pull request created",
            extra={
                "repo": self._repository_name,
                "pull_number": pull.number,
                "head": head,
                "base": base,
            },
        )
        return PullRequestCreated(number=pull.number, url=html_url)

    def add_labels(self, *, issue_number: int, labels: Sequence[str]) -> None:
        url = self._issues_url(issue_number=issue_number, suffix="labels")
        resp = self._session.post(url, json={"labels": list(labels)}, timeout=30)
        self._raise_for_status(resp)
        logger.info(
            "Labels added",
            extra={"repo": self._repository_name, "issue_number": issue_number, "labels": list(labels)},
        )

    def add_assignees(self, *, issue_number: int, assignees: Sequence[str]) -> None:
        url = self._issues_url(issue_number=issue_number, suffix="assignees")
        resp = self._session.post(url, json={"assignees": list(assignees)}, timeout=30)
        self._raise_for_status(resp)
        logger.info(
            "Assignees added",
            extra={
                "repo": self._repository_name,
                "issue_number": issue_number,
                "assignees": list(assignees),
            },
        )

    def request_reviewers(
        self,
        *,
        pull_number: int,
        reviewers: Sequence[str] | None = None,
        team_reviewers: Sequence[str] | None = None,
    ) -> None:
        """Request user and/or team reviews on a pull request.

        Raises:
            ReviewFromAuthorError: if GitHub refuses because a reviewer authored the PR.
            GitHubApiError: for any other unsuccessful response.
        """

        payload: dict[str, list[str]] = {}
        if reviewers:
            payload["reviewers"] = list(reviewers)
        if team_reviewers:
            payload["team_reviewers"] = list(team_reviewers)
        if not payload:
            raise ValueError("At least one reviewer or team reviewer is required")

        url = self._pulls_url(pull_number=pull_number, suffix="requested_reviewers")
        resp = self._session.post(url, json=payload, timeout=30)
        if not resp.ok:
            message = self._error_message(resp)
            if ERROR_PR_REVIEW_FROM_AUTHOR in message:
                raise ReviewFromAuthorError(message, status_code=resp.status_code)
            raise GitHubApiError(message, status_code=resp.status_code)

        logger.info(
            "Reviewers requested",
            extra={"repo": self._repository_name, "pull_number": pull_number, **payload},
        )

    def close(self) -> None:
        self._session.close()
        if self._github is not None:
            self._github.close()
