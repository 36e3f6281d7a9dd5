"""Contributor dossier fetching.

Runs one aggregated GraphQL query for a pull-request author, adapts the
response into a :class:`ContributorSnapshot`, scores it, and returns the
dossier dict consumed by the UI.  Failures are logged and reported as
``None``; this module never raises to its caller.
"""

from __future__ import annotations

import datetime
import logging
import sqlite3

import requests

from pr_console.cache.manager import cache_get, cache_set
from pr_console.github.client import GitHubClient, GitHubError
from pr_console.scoring import ContributorSnapshot, compute_contributor_score

logger = logging.getLogger(__name__)

DOSSIER_TIMEOUT = 8
DOSSIER_TTL_SECONDS = 5 * 60
TOP_REPOS_SHOWN = 3

DOSSIER_QUERY = """
query(
  $login: String!,
  $openPrs: String!,
  $mergedPrs: String!,
  $closedPrs: String!,
  $issues: String!,
  $reviews: String!
) {
  user(login: $login) {
    login
    name
    avatarUrl
    bio
    company
    location
    websiteUrl
    twitterUsername
    repositories { totalCount }
    followers { totalCount }
    following { totalCount }
    createdAt
    __typename
    topRepositories(first: 6, orderBy: {field: STARGAZERS, direction: DESC}) {
      nodes { name nameWithOwner stargazerCount primaryLanguage { name } }
    }
    organizations(first: 10) {
      nodes { login avatarUrl }
    }
  }
  openPrs: search(query: $openPrs, type: ISSUE, first: 0) { issueCount }
  mergedPrs: search(query: $mergedPrs, type: ISSUE, first: 0) { issueCount }
  closedPrs: search(query: $closedPrs, type: ISSUE, first: 0) { issueCount }
  issues: search(query: $issues, type: ISSUE, first: 0) { issueCount }
  reviews: search(query: $reviews, type: ISSUE, first: 0) { issueCount }
}
"""


def dossier_key(owner: str, repo: str, author_login: str) -> str:
    return f"dossier:{owner}/{repo}/{author_login}".lower()


def build_search_variables(owner: str, repo: str, author_login: str) -> dict:
    """Return the GraphQL variables for the dossier query."""
    slug = f"{owner}/{repo}"
    return {
        "login": author_login,
        "openPrs": f"repo:{slug} author:{author_login} type:pr is:open",
        "mergedPrs": f"repo:{slug} author:{author_login} type:pr is:merged",
        "closedPrs": (
            f"repo:{slug} author:{author_login} type:pr is:unmerged is:closed"
        ),
        "issues": f"repo:{slug} author:{author_login} type:issue",
        "reviews": f"repo:{slug} reviewed-by:{author_login} type:pr",
    }


def _issue_count(data: dict, alias: str) -> int:
    return int((data.get(alias) or {}).get("issueCount") or 0)


def _total(node: dict, field: str) -> int:
    return int((node.get(field) or {}).get("totalCount") or 0)


def build_dossier(
    data: dict,
    owner: str,
    author_login: str,
    now: datetime.datetime,
) -> dict | None:
    """Adapt a dossier query ``data`` payload and score the contributor.

    Args:
        data: The ``data`` member of the GraphQL response.
        owner: Repository owner login.
        author_login: The pull-request author being profiled.
        now: Reference instant for the account-age signal.

    Returns:
        The dossier dict, or ``None`` when the user does not exist.
    """
    user = data.get("user")
    if not user:
        return None

    orgs = [
        {"login": org.get("login"), "avatar_url": org.get("avatarUrl")}
        for org in (user.get("organizations") or {}).get("nodes") or []
        if org
    ]
    top_repos = [
        {
            "name": node.get("name"),
            "full_name": node.get("nameWithOwner"),
            "stargazers_count": node.get("stargazerCount") or 0,
            "language": (node.get("primaryLanguage") or {}).get("name"),
        }
        for node in (user.get("topRepositories") or {}).get("nodes") or []
        if node
    ]
    is_org_member = any(
        (org["login"] or "").lower() == owner.lower() for org in orgs
    )

    open_prs = _issue_count(data, "openPrs")
    merged_prs = _issue_count(data, "mergedPrs")
    closed_prs = _issue_count(data, "closedPrs")
    issue_count = _issue_count(data, "issues")
    review_count = _issue_count(data, "reviews")

    prs_in_repo = (
        [{"state": "merged"}] * merged_prs
        + [{"state": "closed"}] * closed_prs
        + [{"state": "open"}] * open_prs
    )
    contribution_count = merged_prs + review_count

    snapshot = ContributorSnapshot(
        followers=_total(user, "followers"),
        public_repos=_total(user, "repositories"),
        account_created=user.get("createdAt") or "",
        commits_in_repo=merged_prs,
        prs_in_repo=tuple(prs_in_repo),
        reviews_in_repo=review_count,
        is_contributor=contribution_count > 0,
        contribution_count=contribution_count,
        is_org_member=is_org_member,
        is_owner=author_login.lower() == owner.lower(),
        top_repo_stars=tuple(r["stargazers_count"] for r in top_repos),
    )
    score = compute_contributor_score(snapshot, now)

    return {
        "author": {
            "login": user.get("login"),
            "name": user.get("name"),
            "avatar_url": user.get("avatarUrl"),
            "bio": user.get("bio"),
            "company": user.get("company"),
            "location": user.get("location"),
            "blog": user.get("websiteUrl"),
            "twitter_username": user.get("twitterUsername"),
            "public_repos": _total(user, "repositories"),
            "followers": _total(user, "followers"),
            "following": _total(user, "following"),
            "created_at": user.get("createdAt"),
            "type": "Bot" if user.get("__typename") == "Bot" else "User",
        },
        "orgs": orgs,
        "top_repos": top_repos[:TOP_REPOS_SHOWN],
        "is_org_member": is_org_member,
        "is_owner": snapshot.is_owner,
        "score": score.as_dict(),
        "contribution_count": contribution_count,
        "repo_activity": {
            "commits": merged_prs,
            "prs": open_prs + merged_prs + closed_prs,
            "reviews": review_count,
            "issues": issue_count,
        },
    }


def fetch_author_dossier(
    client: GitHubClient | None,
    owner: str,
    repo: str,
    author_login: str,
    conn: sqlite3.Connection | None = None,
    now: datetime.datetime | None = None,
) -> dict | None:
    """Fetch, adapt and score the dossier of one pull-request author.

    Args:
        client: Authenticated client, or ``None`` when signed out.
        owner: Repository owner login.
        repo: Repository name.
        author_login: Login of the author to profile.
        conn: Optional cache connection; fresh dossiers are reused for
              five minutes.
        now: Reference instant for scoring (defaults to the current time).

    Returns:
        The dossier dict, or ``None`` when signed out, the user does not
        exist, or the request fails.
    """
    if client is None:
        return None

    key = dossier_key(owner, repo, author_login)
    if conn is not None:
        cached = cache_get(conn, key)
        if cached is not None:
            logger.debug("Dossier cache hit for %s", key)
            return cached

    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc)

    try:
        data = client.graphql(
            DOSSIER_QUERY,
            build_search_variables(owner, repo, author_login),
            timeout=DOSSIER_TIMEOUT,
        )
        dossier = build_dossier(data, owner, author_login, now)
    except (GitHubError, requests.RequestException):
        logger.exception(
            "Failed to fetch dossier for %s in %s/%s", author_login, owner, repo
        )
        return None

    if dossier is None:
        logger.info("No GitHub user found for login %r", author_login)
        return None

    if conn is not None:
        cache_set(conn, key, dossier, ttl_seconds=DOSSIER_TTL_SECONDS)

    logger.info(
        "Dossier for %s in %s/%s: score=%.1f (%s)",
        author_login, owner, repo,
        dossier["score"]["score"], dossier["score"]["tier"],
    )
    return dossier
