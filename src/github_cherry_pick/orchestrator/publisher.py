"""Open the follow-up pull request for a pushed cherry-pick branch.

The pull request is created in the repository the run was triggered from, with its
head on the destination repository's branch. Labels, assignees and reviewers are
attached afterwards, one call each.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from github_cherry_pick.orchestrator.config import RunConfig
from github_cherry_pick.orchestrator.github.client import (
    ERROR_PR_REVIEW_FROM_AUTHOR,
    GitHubClient,
    PullRequestCreated,
    ReviewFromAuthorError,
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[[RunConfig], GitHubClient]


def build_title(prefix: str | None, title: str | None) -> str | None:
    """Prefix the original title verbatim; no separator is inserted."""

    if prefix:
        return f"{prefix}{title or ''}"
    return title


def merge_labels(
    labels: Sequence[str],
    pull_request_labels: Iterable[str],
    *,
    target_branch: str,
    exclude_labels: Sequence[str],
) -> list[str]:
    """Return the configured labels plus the carried-over labels of the original PR.

    A carried-over label is skipped when it names the target branch, is excluded, or
    is already present. Inputs are not modified.
    """

    merged: list[str] = []
    for label in labels:
        if label not in merged:
            merged.append(label)
    for label in pull_request_labels:
        if label == target_branch or label in exclude_labels or label in merged:
            continue
        merged.append(label)
    return merged


def _default_client_factory(config: RunConfig) -> GitHubClient:
    if config.source_repo is None:
        raise ValueError("A source repository is required to open a pull request")
    return GitHubClient(
        token=config.token, repository=config.source_repo, base_url=config.api_url
    )


class PullRequestPublisher:
    """Create the cherry-pick pull request and attach its metadata."""

    def __init__(self, client_factory: ClientFactory | None = None) -> None:
        self._client_factory = client_factory or _default_client_factory

    def publish(self, config: RunConfig, branch_name: str) -> PullRequestCreated | None:
        if config.source_repo is None:
            logger.info("No source repository available; skipping pull request creation")
            return None

        github = self._client_factory(config)
        try:
            return self._publish(github, config, branch_name)
        finally:
            github.close()

    def _publish(
        self, github: GitHubClient, config: RunConfig, branch_name: str
    ) -> PullRequestCreated:
        original = config.pull_request
        original_title = original.title if original else None
        body = original.body if original else None

        title = build_title(config.title_prefix, original_title)
        logger.info(f"Using title '{title}'")
        logger.info(f"Using body '{body}'")

        pull = github.create_pull_request(
            title=title,
            body=body,
            head=f"{config.destination_owner}:{branch_name}",
            base=config.target_branch,
        )

        if config.labels:
            labels = merge_labels(
                config.labels,
                original.labels if original else (),
                target_branch=config.target_branch,
                exclude_labels=config.exclude_labels,
            )
            logger.info(f"Applying labels '{','.join(labels)}'")
            github.add_labels(issue_number=pull.number, labels=labels)

        if config.assignees:
            logger.info(f"Applying assignees '{','.join(config.assignees)}'")
            github.add_assignees(issue_number=pull.number, assignees=config.assignees)

        try:
            if config.reviewers:
                logger.info(f"Requesting reviewers '{','.join(config.reviewers)}'")
                github.request_reviewers(pull_number=pull.number, reviewers=config.reviewers)
            if config.team_reviewers:
                logger.info(f"Requesting team reviewers '{','.join(config.team_reviewers)}'")
                github.request_reviewers(
                    pull_number=pull.number, team_reviewers=config.team_reviewers
                )
        except ReviewFromAuthorError:
            logger.warning(ERROR_PR_REVIEW_FROM_AUTHOR, extra={"pull_number": pull.number})

        return pull
