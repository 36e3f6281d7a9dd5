"""Pull-request actions forwarded to the GitHub API.

Each public method of :class:`PullRequestActions` describes one remote
call (or a short sequence of them) and hands it to a single executor,
which checks authentication, converts failures into ``{"error": ...}``
results and invalidates the affected views on success.  No method
raises to its caller.
"""

from __future__ import annotations

import datetime
import logging
import sqlite3
from typing import Callable

import requests

from pr_console.actions.registry import get_action_spec, revalidate_after_pr_mutation
from pr_console.cache.manager import cache_get, cache_set, pull_request_key
from pr_console.github.client import GitHubClient, GitHubError
from pr_console.github.utils import (
    apply_suggestion,
    commit_author,
    decode_content,
    encode_content,
    get_error_message,
)

logger = logging.getLogger(__name__)

MERGE_METHODS = ("merge", "squash", "rebase")
REVIEW_EVENTS = ("APPROVE", "REQUEST_CHANGES", "COMMENT")
DIFF_SIDES = ("LEFT", "RIGHT")

PULL_REQUEST_TTL_SECONDS = 60

NOT_AUTHENTICATED = "Not authenticated"

RESOLVE_THREAD_MUTATION = """
mutation($threadId: ID!) {
  resolveReviewThread(input: { threadId: $threadId }) {
    thread { id isResolved }
  }
}
"""

UNRESOLVE_THREAD_MUTATION = """
mutation($threadId: ID!) {
  unresolveReviewThread(input: { threadId: $threadId }) {
    thread { id isResolved }
  }
}
"""


class ActionError(Exception):
    """A pull-request action was rejected before or between remote calls."""


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class PullRequestActions:
    """Forward pull-request mutations to GitHub and invalidate cached views.

    Args:
        client: Authenticated client, or ``None`` when signed out.
        conn: Cache connection used for invalidation and cached reads.
        clock: Returns the current time; used for commit author dates.
    """

    def __init__(
        self,
        client: GitHubClient | None,
        conn: sqlite3.Connection,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.conn = conn
        self.clock = clock

    # ------------------------------------------------------------------
    # Executor
    # ------------------------------------------------------------------

    def _execute(
        self,
        action: str,
        owner: str,
        repo: str,
        pull_number: int,
        call: Callable[[GitHubClient], dict | None],
    ) -> dict:
        """Run *call*, then invalidate the views *action* makes stale.

        Returns:
            ``{"success": True, **extras}`` where *extras* is whatever
            *call* returned, or ``{"error": message}`` on failure.
        """
        if self.client is None:
            return {"error": NOT_AUTHENTICATED}

        spec = get_action_spec(action)
        try:
            extras = call(self.client) or {}
        except (GitHubError, ActionError, requests.RequestException) as exc:
            message = get_error_message(exc) or spec.failure_message
            logger.warning(
                "%s on %s/%s#%d failed: %s",
                action, owner, repo, pull_number, message,
            )
            return {"error": message}

        revalidate_after_pr_mutation(self.conn, owner, repo, pull_number, action)
        logger.info("%s on %s/%s#%d succeeded", action, owner, repo, pull_number)
        return {"success": True, **extras}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_branch_names(self, owner: str, repo: str) -> list[str]:
        """Return the repository's branch names, or ``[]`` on any failure."""
        if self.client is None:
            return []
        try:
            branches = self.client.list_branches(owner, repo)
        except (GitHubError, requests.RequestException):
            logger.exception("Failed to list branches for %s/%s", owner, repo)
            return []
        return [b["name"] for b in branches or [] if b.get("name")]

    def fetch_pull_request(
        self, owner: str, repo: str, pull_number: int
    ) -> dict | None:
        """Return the pull request, served from cache for up to a minute."""
        key = pull_request_key(owner, repo, pull_number)
        cached = cache_get(self.conn, key)
        if cached is not None:
            return cached
        if self.client is None:
            return None
        try:
            pull = self.client.get_pull(owner, repo, pull_number)
        except (GitHubError, requests.RequestException):
            logger.exception(
                "Failed to load %s/%s#%d", owner, repo, pull_number
            )
            return None
        cache_set(self.conn, key, pull, ttl_seconds=PULL_REQUEST_TTL_SECONDS)
        return pull

    # ------------------------------------------------------------------
    # Pull request state
    # ------------------------------------------------------------------

    def _update_pull(
        self, action: str, owner: str, repo: str, pull_number: int, **fields
    ) -> dict:
        def call(gh: GitHubClient) -> None:
            gh.update_pull(owner, repo, pull_number, **fields)

        return self._execute(action, owner, repo, pull_number, call)

    def update_base_branch(
        self, owner: str, repo: str, pull_number: int, base: str
    ) -> dict:
        return self._update_pull("update_base", owner, repo, pull_number, base=base)

    def rename(self, owner: str, repo: str, pull_number: int, title: str) -> dict:
        return self._update_pull("rename", owner, repo, pull_number, title=title)

    def close(self, owner: str, repo: str, pull_number: int) -> dict:
        return self._update_pull("close", owner, repo, pull_number, state="closed")

    def reopen(self, owner: str, repo: str, pull_number: int) -> dict:
        return self._update_pull("reopen", owner, repo, pull_number, state="open")

    def merge(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        method: str = "merge",
        commit_title: str | None = None,
        commit_message: str | None = None,
    ) -> dict:
        """Merge the pull request with ``merge``, ``squash`` or ``rebase``."""

        def call(gh: GitHubClient) -> None:
            if method not in MERGE_METHODS:
                raise ActionError(f"Unsupported merge method: {method}")
            fields = {"merge_method": method}
            if commit_title:
                fields["commit_title"] = commit_title
            if commit_message:
                fields["commit_message"] = commit_message
            gh.merge_pull(owner, repo, pull_number, **fields)

        return self._execute("merge", owner, repo, pull_number, call)

    # ------------------------------------------------------------------
    # Reviews and comments
    # ------------------------------------------------------------------

    def submit_review(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        event: str,
        body: str | None = None,
    ) -> dict:
        """Submit a review: ``APPROVE``, ``REQUEST_CHANGES`` or ``COMMENT``."""

        def call(gh: GitHubClient) -> None:
            if event not in REVIEW_EVENTS:
                raise ActionError(f"Unsupported review event: {event}")
            fields = {"event": event}
            if body:
                fields["body"] = body
            gh.create_review(owner, repo, pull_number, **fields)

        return self._execute("review", owner, repo, pull_number, call)

    def add_comment(self, owner: str, repo: str, pull_number: int, body: str) -> dict:
        """Add a conversation comment (pull requests share the issue thread)."""

        def call(gh: GitHubClient) -> None:
            gh.create_issue_comment(owner, repo, pull_number, body)

        return self._execute("comment", owner, repo, pull_number, call)

    def add_review_comment(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        body: str,
        commit_id: str,
        path: str,
        line: int,
        side: str,
        start_line: int | None = None,
        start_side: str | None = None,
    ) -> dict:
        """Comment on a diff line, or on a range when *start_line* differs."""

        def call(gh: GitHubClient) -> None:
            if side not in DIFF_SIDES:
                raise ActionError(f"Unsupported diff side: {side}")
            fields = {
                "body": body,
                "commit_id": commit_id,
                "path": path,
                "line": line,
                "side": side,
            }
            if start_line is not None and start_line != line:
                fields["start_line"] = start_line
                fields["start_side"] = start_side or side
            gh.create_review_comment(owner, repo, pull_number, **fields)

        return self._execute("review_comment", owner, repo, pull_number, call)

    def _set_thread_resolution(
        self,
        action: str,
        mutation: str,
        thread_id: str,
        owner: str,
        repo: str,
        pull_number: int,
    ) -> dict:
        def call(gh: GitHubClient) -> None:
            gh.graphql(mutation, {"threadId": thread_id})

        return self._execute(action, owner, repo, pull_number, call)

    def resolve_thread(
        self, thread_id: str, owner: str, repo: str, pull_number: int
    ) -> dict:
        return self._set_thread_resolution(
            "resolve_thread", RESOLVE_THREAD_MUTATION,
            thread_id, owner, repo, pull_number,
        )

    def unresolve_thread(
        self, thread_id: str, owner: str, repo: str, pull_number: int
    ) -> dict:
        return self._set_thread_resolution(
            "unresolve_thread", UNRESOLVE_THREAD_MUTATION,
            thread_id, owner, repo, pull_number,
        )

    # ------------------------------------------------------------------
    # File edits
    # ------------------------------------------------------------------

    def commit_suggestion(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        path: str,
        branch: str,
        start_line: int,
        end_line: int,
        suggestion: str,
        commit_message: str | None = None,
    ) -> dict:
        """Apply a suggested change to lines ``start_line..end_line`` of *path*."""

        def call(gh: GitHubClient) -> None:
            file_data = gh.get_content(owner, repo, path, ref=branch)
            if not isinstance(file_data, dict) or file_data.get("type") != "file":
                raise ActionError("Not a file")

            try:
                content = decode_content(file_data.get("content", ""))
            except ValueError:
                raise ActionError("File content is not valid base64")
            new_content = apply_suggestion(content, start_line, end_line, suggestion)
            gh.put_content(
                owner, repo, path,
                message=commit_message
                or f"Apply suggestion to {path} (lines {start_line}-{end_line})",
                content=encode_content(new_content),
                sha=file_data.get("sha"),
                branch=branch,
            )

        return self._execute("suggestion", owner, repo, pull_number, call)

    def commit_file_edit(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        path: str,
        branch: str,
        content: str,
        sha: str,
        commit_message: str,
    ) -> dict:
        """Commit a full-file edit; the result carries the blob's ``new_sha``."""

        def call(gh: GitHubClient) -> dict:
            data = gh.put_content(
                owner, repo, path,
                message=commit_message,
                content=encode_content(content),
                sha=sha,
                branch=branch,
            )
            return {"new_sha": (data.get("content") or {}).get("sha")}

        return self._execute("file_commit", owner, repo, pull_number, call)

    def commit_merge_conflict_resolution(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        head_branch: str,
        base_branch: str,
        resolved_files: list[dict],
        commit_message: str | None = None,
    ) -> dict:
        """Commit resolved files as a merge of *base_branch* into *head_branch*.

        Steps:
            1. Read the head and base branch tips.
            2. Read the head commit's tree.
            3. Upload one blob per resolved file.
            4. Create a tree over the head tree with those blobs.
            5. Create a commit with parents ``[head, base]``.
            6. Move the head branch to the new commit.

        The result carries ``merge_commit_sha``.
        """

        def call(gh: GitHubClient) -> dict:
            head_sha = gh.get_ref(owner, repo, f"heads/{head_branch}")["object"]["sha"]
            base_sha = gh.get_ref(owner, repo, f"heads/{base_branch}")["object"]["sha"]
            head_commit = gh.get_commit(owner, repo, head_sha)

            tree_entries = []
            for resolved in resolved_files:
                blob = gh.create_blob(owner, repo, encode_content(resolved["content"]))
                tree_entries.append({
                    "path": resolved["path"],
                    "mode": "100644",
                    "type": "blob",
                    "sha": blob["sha"],
                })

            new_tree = gh.create_tree(
                owner, repo, head_commit["tree"]["sha"], tree_entries
            )

            fields = {
                "message": commit_message
                or f"Merge branch '{base_branch}' into {head_branch}",
                "tree": new_tree["sha"],
                "parents": [head_sha, base_sha],
            }
            user = gh.get_authenticated_user()
            if user:
                fields["author"] = commit_author(user, self.clock())
            merge_commit = gh.create_commit(owner, repo, **fields)

            gh.update_ref(owner, repo, f"heads/{head_branch}", merge_commit["sha"])
            return {"merge_commit_sha": merge_commit["sha"]}

        return self._execute("conflict_resolution", owner, repo, pull_number, call)
