"""GitHub REST access for the gh> commands."""

from orbit_bot.github.client import GitHubClient, get_github_client, reset_client

__all__ = ["GitHubClient", "get_github_client", "reset_client"]
