"""Source adapters for fetching revisions and diffs."""

from article_monitor.adapters.sources.github_source import GitHubSource

__all__ = ["GitHubSource"]
