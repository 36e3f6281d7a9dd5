"""GitHub REST and GraphQL client.

A thin wrapper over :class:`requests.Session` that adds authentication
headers, decodes JSON bodies and turns API-level failures into
:class:`GitHubError`.  Transport failures surface as
``requests.RequestException``.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from pr_console import DEFAULT_API_URL

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20


class GitHubError(Exception):
    """An error response from the GitHub API."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class GitHubClient:
    """Authenticated client for the GitHub REST and GraphQL APIs.

    Args:
        token: Personal access or OAuth token sent as a Bearer token.
        base_url: API root; ``/graphql`` is appended for GraphQL calls.
        timeout: Default request timeout in seconds.
        session: Optional pre-built session (used by tests).
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def rest(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
        headers: dict | None = None,
    ) -> Any:
        """Send a REST request and return the decoded body.

        Raises:
            GitHubError: The API answered with a non-2xx status.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        resp = self.session.request(
            method,
            url,
            params=params,
            json=json,
            headers=headers,
            timeout=self.timeout,
        )
        logger.debug("%s %s -> %d", method, url, resp.status_code)

        if not resp.ok:
            raise GitHubError(_error_message(resp), status=resp.status_code)

        if not resp.content:
            return {}
        content_type = resp.headers.get("Content-Type", "")
        if "json" not in content_type:
            return resp.text
        return resp.json()

    def graphql(
        self,
        query: str,
        variables: dict | None = None,
        timeout: float | None = None,
    ) -> dict:
        """Execute a GraphQL query and return its ``data`` member.

        Raises:
            GitHubError: Non-2xx status, or a non-empty ``errors`` list
                (the first error's message is used).
        """
        resp = self.session.post(
            f"{self.base_url}/graphql",
            json={"query": query, "variables": variables or {}},
            timeout=timeout or self.timeout,
        )
        if not resp.ok:
            raise GitHubError(_error_message(resp), status=resp.status_code)

        try:
            body = resp.json()
        except ValueError:
            raise GitHubError("GraphQL endpoint returned non-JSON response")

        errors = body.get("errors") or []
        if errors:
            raise GitHubError(errors[0].get("message") or "GraphQL error")
        return body.get("data") or {}

    # ------------------------------------------------------------------
    # Users and repositories
    # ------------------------------------------------------------------

    def get_authenticated_user(self) -> dict | None:
        """Return the token owner's profile, or ``None`` if it cannot be read."""
        try:
            return self.rest("GET", "/user")
        except (GitHubError, requests.RequestException):
            logger.warning("Could not load the authenticated user")
            return None

    def list_branches(self, owner: str, repo: str, per_page: int = 100) -> list:
        return self.rest(
            "GET",
            f"/repos/{owner}/{repo}/branches",
            params={"per_page": per_page},
        ) or []

    def get_readme_html(self, owner: str, repo: str) -> str:
        """Return the repository README rendered to HTML by GitHub."""
        return self.rest(
            "GET",
            f"/repos/{owner}/{repo}/readme",
            headers={"Accept": "application/vnd.github.html+json"},
        )

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    def get_pull(self, owner: str, repo: str, pull_number: int) -> dict:
        return self.rest("GET", f"/repos/{owner}/{repo}/pulls/{pull_number}")

    def update_pull(self, owner: str, repo: str, pull_number: int, **fields) -> dict:
        """PATCH a pull request (``title``, ``base``, ``state``, ...)."""
        return self.rest(
            "PATCH", f"/repos/{owner}/{repo}/pulls/{pull_number}", json=fields
        )

    def merge_pull(self, owner: str, repo: str, pull_number: int, **fields) -> dict:
        return self.rest(
            "PUT", f"/repos/{owner}/{repo}/pulls/{pull_number}/merge", json=fields
        )

    def create_review(self, owner: str, repo: str, pull_number: int, **fields) -> dict:
        return self.rest(
            "POST", f"/repos/{owner}/{repo}/pulls/{pull_number}/reviews", json=fields
        )

    def create_review_comment(
        self, owner: str, repo: str, pull_number: int, **fields
    ) -> dict:
        return self.rest(
            "POST", f"/repos/{owner}/{repo}/pulls/{pull_number}/comments", json=fields
        )

    def create_issue_comment(
        self, owner: str, repo: str, issue_number: int, body: str
    ) -> dict:
        return self.rest(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            json={"body": body},
        )

    # ------------------------------------------------------------------
    # Contents and git database
    # ------------------------------------------------------------------

    def get_content(self, owner: str, repo: str, path: str, ref: str | None = None):
        params = {"ref": ref} if ref else None
        return self.rest(
            "GET", f"/repos/{owner}/{repo}/contents/{path}", params=params
        )

    def put_content(self, owner: str, repo: str, path: str, **fields) -> dict:
        """Create or update a file (``message``, ``content``, ``sha``, ``branch``)."""
        return self.rest(
            "PUT", f"/repos/{owner}/{repo}/contents/{path}", json=fields
        )

    def get_ref(self, owner: str, repo: str, ref: str) -> dict:
        return self.rest("GET", f"/repos/{owner}/{repo}/git/ref/{ref}")

    def update_ref(self, owner: str, repo: str, ref: str, sha: str, force: bool = False) -> dict:
        return self.rest(
            "PATCH",
            f"/repos/{owner}/{repo}/git/refs/{ref}",
            json={"sha": sha, "force": force},
        )

    def get_commit(self, owner: str, repo: str, commit_sha: str) -> dict:
        return self.rest("GET", f"/repos/{owner}/{repo}/git/commits/{commit_sha}")

    def create_blob(self, owner: str, repo: str, content: str, encoding: str = "base64") -> dict:
        return self.rest(
            "POST",
            f"/repos/{owner}/{repo}/git/blobs",
            json={"content": content, "encoding": encoding},
        )

    def create_tree(self, owner: str, repo: str, base_tree: str, tree: list[dict]) -> dict:
        return self.rest(
            "POST",
            f"/repos/{owner}/{repo}/git/trees",
            json={"base_tree": base_tree, "tree": tree},
        )

    def create_commit(self, owner: str, repo: str, **fields) -> dict:
        """Create a commit (``message``, ``tree``, ``parents``, ``author``)."""
        return self.rest("POST", f"/repos/{owner}/{repo}/git/commits", json=fields)


def _error_message(resp: requests.Response) -> str:
    """Extract the API's ``message`` field, falling back to the status line."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {resp.status_code}: {resp.reason or 'error'}"
