"""CLI entrypoint for a cherry-pick run.

Inputs come from the GitHub Actions environment; any flag given on the command line
overrides the matching input.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from github_cherry_pick import __version__
from github_cherry_pick.orchestrator.cherry_pick import CherryPickOrchestrator
from github_cherry_pick.orchestrator.config import CherryPickSettings
from github_cherry_pick.orchestrator.git import GitRunner
from github_cherry_pick.orchestrator.logging import configure_logging

logger = logging.getLogger(__name__)

# (flag, settings field, help)
_INPUT_FLAGS: tuple[tuple[str, str, str], ...] = (
    ("--token", "token", "Token for the GitHub API"),
    ("--committer", "committer", "Committer as 'Display Name <email@example.com>'"),
    ("--author", "author", "Author as 'Display Name <email@example.com>'"),
    ("--branch", "branch", "Destination branch for the cherry-pick"),
    ("--labels", "labels", "Comma-separated labels for the new pull request"),
    ("--exclude-labels", "exclude_labels", "Comma-separated labels never carried over"),
    ("--assignees", "assignees", "Comma-separated assignees"),
    ("--reviewers", "reviewers", "Comma-separated reviewers"),
    ("--team-reviewers", "team_reviewers", "Comma-separated team reviewers"),
    ("--title-prefix", "title_prefix", "Prefix for the pull request title (not trimmed)"),
    ("--cherry-pick-repo", "cherry_pick_repo", "Destination repository 'owner/repo'"),
    ("--sha", "github_sha", "Commit to cherry-pick (defaults to GITHUB_SHA)"),
    ("--log-level", "log_level", "Logging level"),
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cherry-pick-pr",
        description="Cherry-pick a merged commit into a branch and open a pull request",
    )
    parser.add_argument("--version", action="version", version=f"github-cherry-pick {__version__}")
    for flag, dest, help_text in _INPUT_FLAGS:
        parser.add_argument(flag, dest=dest, default=None, help=help_text)
    parser.add_argument(
        "--workdir",
        type=Path,
        default=None,
        help="Local clone to operate on (defaults to the current directory)",
    )
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        dest: getattr(args, dest)
        for _, dest, _ in _INPUT_FLAGS
        if getattr(args, dest) is not None
    }


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = CherryPickSettings.with_overrides(_overrides(args))
    except ValidationError as e:
        configure_logging("INFO")
        logger.error("Invalid configuration", extra={"errors": e.errors(include_url=False)})
        print(str(e), file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        config = settings.to_run_config()
        orchestrator = CherryPickOrchestrator(git=GitRunner(cwd=args.workdir))
        pull = orchestrator.execute(config)
        if pull is not None:
            print(f"Created pull request #{pull.number}" + (f": {pull.url}" if pull.url else ""))
        return 0

    except Exception as e:
        logger.exception("Cherry-pick failed")
        print(str(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
