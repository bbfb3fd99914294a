"""Cherry-pick run components.

- Settings loaded from GitHub Actions inputs
- Structured logging
- A git command runner and a GitHub API client
- The orchestrator and pull request publisher
"""
