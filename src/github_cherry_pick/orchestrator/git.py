"""Git command runner.

Every command is executed synchronously against a working directory that is already
checked out at the triggering commit. `run` never raises on a non-zero exit code; the
caller inspects the returned `CommandResult`. `check` is the raising variant.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from github_cherry_pick.orchestrator.config import Identity

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output of one git invocation."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class GitCommandError(RuntimeError):
    """Raised when a git command exits with a non-zero code."""

    def __init__(self, message: str, *, args: Sequence[str], result: CommandResult) -> None:
        super().__init__(message)
        self.command = list(args)
        self.result = result


@dataclass(frozen=True, slots=True)
class GitIdentity:
    """Identity passed to every git invocation instead of global git config."""

    user_name: str
    user_email: str

    @classmethod
    def for_run(cls, *, author: Identity, committer: Identity) -> GitIdentity:
        # The picked commit is amended to its original author later on, so only
        # the committer email strictly matters here.
        return cls(user_name=author.name, user_email=committer.email)

    def as_options(self) -> list[str]:
        return ["-c", f"user.name={self.user_name}", "-c", f"user.email={self.user_email}"]


class GitRunner:
    """Run git commands in a local clone."""

    def __init__(
        self,
        *,
        cwd: Path | None = None,
        identity: GitIdentity | None = None,
        git_path: str | None = None,
    ) -> None:
        resolved = git_path or shutil.which("git")
        if not resolved:
            raise FileNotFoundError("Unable to locate executable file: git")
        self._git = resolved
        self._cwd = cwd
        self.identity = identity

    def with_identity(self, identity: GitIdentity) -> GitRunner:
        return GitRunner(cwd=self._cwd, identity=identity, git_path=self._git)

    def run(self, args: Sequence[str]) -> CommandResult:
        command = [self._git]
        if self.identity is not None:
            command.extend(self.identity.as_options())
        command.extend(args)

        logger.debug("Running git", extra={"args": list(args)})
        completed = subprocess.run(
            command,
            cwd=self._cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        result = CommandResult(
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            exit_code=completed.returncode,
        )

        if result.ok:
            logger.info(result.stdout.strip(), extra={"args": list(args)})
        else:
            logger.info(
                result.stderr.strip(),
                extra={"args": list(args), "exit_code": result.exit_code},
            )
        return result

    def check(self, args: Sequence[str]) -> CommandResult:
        """Run a git command and raise `GitCommandError` if it fails."""

        result = self.run(args)
        if not result.ok:
            raise GitCommandError(
                f"git {' '.join(args)} failed with exit code {result.exit_code}: "
                f"{result.stderr.strip()}",
                args=args,
                result=result,
            )
        return result
