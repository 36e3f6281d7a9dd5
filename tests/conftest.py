"""Shared pytest fixtures for the pr-console test suite.

Provides:
    cache_conn      -- in-memory SQLite cache with full schema applied
    fake_client     -- MagicMock standing in for GitHubClient
    dossier_payload -- realistic ``data`` member of the dossier query
"""

from unittest.mock import MagicMock

import pytest

from pr_console.cache.manager import get_connection, init_db
from pr_console.github.client import GitHubClient


# ---------------------------------------------------------------------------
# cache_conn fixture
# ---------------------------------------------------------------------------

@pytest.fixture()
def cache_conn():
    """Yield an initialised in-memory cache connection."""
    conn = get_connection(":memory:")
    init_db(conn)
    yield conn
    conn.close()


# ---------------------------------------------------------------------------
# fake_client fixture
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_client():
    """Return a MagicMock with the GitHubClient interface.

    Every remote call succeeds with an empty dict unless a test
    overrides it.
    """
    client = MagicMock(spec=GitHubClient)
    for name in (
        "update_pull",
        "merge_pull",
        "create_review",
        "create_review_comment",
        "create_issue_comment",
        "put_content",
        "graphql",
    ):
        getattr(client, name).return_value = {}
    return client


# ---------------------------------------------------------------------------
# dossier_payload fixture
# ---------------------------------------------------------------------------

@pytest.fixture()
def dossier_payload() -> dict:
    """Return a dossier query ``data`` member for user ``mona``.

    mona: 1 200 followers, 40 public repos, joined 2018-03-01, member of
    the ``Octo`` organization, 12 merged / 3 closed / 2 open PRs in the
    repository, 25 reviews, 4 issues, 4 top repositories.
    """
    return {
        "user": {
            "login": "mona",
            "name": "Mona Lisa",
            "avatarUrl": "https://avatars.example.com/u/1",
            "bio": "Builds things.",
            "company": "@octo",
            "location": "Lisbon",
            "websiteUrl": "https://mona.example.com",
            "twitterUsername": "mona",
            "repositories": {"totalCount": 40},
            "followers": {"totalCount": 1200},
            "following": {"totalCount": 10},
            "createdAt": "2018-03-01T12:00:00Z",
            "__typename": "User",
            "topRepositories": {
                "nodes": [
                    {
                        "name": "engine",
                        "nameWithOwner": "mona/engine",
                        "stargazerCount": 5400,
                        "primaryLanguage": {"name": "Python"},
                    },
                    {
                        "name": "dotfiles",
                        "nameWithOwner": "mona/dotfiles",
                        "stargazerCount": 120,
                        "primaryLanguage": None,
                    },
                    {
                        "name": "notes",
                        "nameWithOwner": "mona/notes",
                        "stargazerCount": 30,
                        "primaryLanguage": {"name": "Markdown"},
                    },
                    {
                        "name": "scratch",
                        "nameWithOwner": "mona/scratch",
                        "stargazerCount": 2,
                        "primaryLanguage": {"name": "Go"},
                    },
                ]
            },
            "organizations": {
                "nodes": [
                    {"login": "Octo", "avatarUrl": "https://avatars.example.com/o/1"},
                    {"login": "friends", "avatarUrl": "https://avatars.example.com/o/2"},
                ]
            },
        },
        "openPrs": {"issueCount": 2},
        "mergedPrs": {"issueCount": 12},
        "closedPrs": {"issueCount": 3},
        "issues": {"issueCount": 4},
        "reviews": {"issueCount": 25},
    }
