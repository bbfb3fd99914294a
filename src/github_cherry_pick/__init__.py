"""GitHub cherry-pick automation.

Cherry-picks a merged commit into a target branch and opens a follow-up pull
request carrying the original change's labels, assignees and reviewers.
"""

__version__ = "0.1.0"

from github_cherry_pick.orchestrator.config import CherryPickSettings, RunConfig

__all__ = ["__version__", "CherryPickSettings", "RunConfig"]
