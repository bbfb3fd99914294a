"""Console entrypoint; the implementation lives in `github_cherry_pick.orchestrator.main`."""

from __future__ import annotations

from github_cherry_pick.orchestrator.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
