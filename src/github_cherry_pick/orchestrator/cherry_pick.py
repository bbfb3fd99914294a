"""Cherry-pick the triggering commit onto a target branch and push it.

Steps run strictly in order; any failing git command aborts the run. Nothing is
cleaned up after a failure: the remote and branch created so far stay in place.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

from github_cherry_pick.orchestrator.config import RunConfig
from github_cherry_pick.orchestrator.git import GitCommandError, GitIdentity, GitRunner
from github_cherry_pick.orchestrator.github.client import PullRequestCreated
from github_cherry_pick.orchestrator.logging import log_step
from github_cherry_pick.orchestrator.publisher import PullRequestPublisher

logger = logging.getLogger(__name__)

CHERRYPICK_EMPTY = "The previous cherry-pick is now empty, possibly due to conflict resolution."


def working_branch_name(
    target_branch: str, sha: str, *, make_id: Callable[[], str] | None = None
) -> str:
    unique = make_id() if make_id is not None else str(uuid.uuid4())
    return f"cherry-pick_{target_branch}_{sha[:8]}_{unique}"


class CherryPickOrchestrator:
    """Drive one cherry-pick run from git setup through pull request creation."""

    def __init__(
        self,
        *,
        git: GitRunner,
        publisher: PullRequestPublisher | None = None,
        make_id: Callable[[], str] | None = None,
    ) -> None:
        self._git = git
        self._publisher = publisher or PullRequestPublisher()
        self._make_id = make_id

    def execute(self, config: RunConfig) -> PullRequestCreated | None:
        """Run every step; returns the created pull request, or None if publishing was skipped."""

        logger.info(f"Cherry pick into branch {config.target_branch}!")

        branch = working_branch_name(config.target_branch, config.sha, make_id=self._make_id)

        with log_step(logger, "Configuring the committer and author"):
            git = self._git.with_identity(
                GitIdentity.for_run(author=config.author, committer=config.committer)
            )
            logger.info(f"Configured git committer as '{config.committer}'")

        with log_step(logger, "Setup cherry-pick branch remote"):
            git.check(["remote", "add", config.remote_name, config.remote_url])

        with log_step(logger, "Fetch all branches"):
            git.check(["remote", "update"])
            git.check(["fetch", "--all"])

        with log_step(logger, f"Create new branch from {config.target_branch}"):
            git.check(["checkout", "-b", branch, f"origin/{config.target_branch}"])

        with log_step(logger, "Cherry picking"):
            self._cherry_pick(git, config.sha)

        with log_step(logger, "Setting original author for the cherry-picked commit"):
            shown = git.check(["show", "-s", "--format=%an <%ae>", config.sha])
            original_author = shown.stdout.strip()
            # An empty pick can only be amended with --allow-empty.
            git.check(
                ["commit", "--amend", "--allow-empty", f"--author={original_author}", "--no-edit"]
            )

        with log_step(logger, "Push new branch to remote"):
            git.check(["push", "-u", config.remote_name, branch])

        with log_step(logger, "Opening pull request"):
            return self._publisher.publish(config, branch)

    @staticmethod
    def _cherry_pick(git: GitRunner, sha: str) -> None:
        args = ["cherry-pick", "-m", "1", "--strategy=recursive", "--strategy-option=theirs", sha]
        result = git.run(args)
        if result.ok:
            return
        if CHERRYPICK_EMPTY in result.stderr:
            # git leaves the pick in progress (CHERRY_PICK_HEAD set) until it is committed.
            logger.info("Cherry-pick is empty after conflict resolution; committing it empty")
            git.check(["commit", "--allow-empty", "--no-edit"])
            return
        raise GitCommandError(f"Unexpected error: {result.stderr}", args=args, result=result)
