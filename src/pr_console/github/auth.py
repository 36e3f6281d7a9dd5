"""Token provider for the GitHub client.

Credentials are read from environment variables (the CLI loads ``.env``
first via python-dotenv):

- ``GITHUB_TOKEN`` -- personal access / OAuth token (preferred)
- ``GH_TOKEN`` -- fallback used by the ``gh`` CLI
- ``GITHUB_API_URL`` -- API root (default: ``https://api.github.com``)

When no token is configured callers get ``None`` and must treat the
request as unauthenticated.
"""

from __future__ import annotations

import logging
import os

from pr_console import DEFAULT_API_URL
from pr_console.github.client import GitHubClient

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


def get_github_token() -> str | None:
    """Return the configured GitHub token, or ``None`` when unset."""
    for name in TOKEN_ENV_VARS:
        token = os.environ.get(name, "").strip()
        if token:
            return token
    return None


def get_client(token: str | None = None) -> GitHubClient | None:
    """Build an authenticated :class:`GitHubClient`.

    Args:
        token: Explicit token; falls back to :func:`get_github_token`.

    Returns:
        A client, or ``None`` when no token is available.
    """
    token = token or get_github_token()
    if not token:
        logger.warning(
            "GitHub token not configured. Set GITHUB_TOKEN to enable "
            "authenticated requests."
        )
        return None
    base_url = os.environ.get("GITHUB_API_URL", "").strip() or DEFAULT_API_URL
    return GitHubClient(token, base_url=base_url)
