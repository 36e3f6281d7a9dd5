"""GitHub sub-package -- API client, token provider and dossier fetching.

Public API
----------
- :class:`GitHubClient` -- REST and GraphQL client
- :class:`GitHubError` -- API error response
- :func:`get_client` -- client from the configured token, or ``None``
- :func:`fetch_author_dossier` -- contributor profile with score
"""

from pr_console.github.auth import get_client, get_github_token
from pr_console.github.client import GitHubClient, GitHubError
from pr_console.github.dossier import fetch_author_dossier

__all__ = [
    "GitHubClient",
    "GitHubError",
    "fetch_author_dossier",
    "get_client",
    "get_github_token",
]
