"""Pull-request action table and post-mutation invalidation.

Every action kind maps to the views it makes stale and the message shown
when it fails.  The executor in :mod:`pr_console.actions.pulls` reads
this table instead of each action carrying its own error handling.
"""

import logging
import sqlite3
from typing import NamedTuple

from pr_console.cache.manager import invalidate_pull_request_cache, revalidate_path

logger = logging.getLogger(__name__)

DETAIL = "detail"
LIST = "list"
LAYOUT = "layout"


class ActionSpec(NamedTuple):
    scopes: tuple
    failure_message: str


PR_ACTIONS: dict[str, ActionSpec] = {
    "merge": ActionSpec((DETAIL, LIST, LAYOUT), "Failed to merge"),
    "close": ActionSpec((DETAIL, LIST, LAYOUT), "Failed to close"),
    "reopen": ActionSpec((DETAIL, LIST, LAYOUT), "Failed to reopen"),
    "rename": ActionSpec((DETAIL, LIST), "Failed to rename"),
    "update_base": ActionSpec((DETAIL, LIST), "Failed to update base branch"),
    "review": ActionSpec((DETAIL,), "Failed to submit review"),
    "comment": ActionSpec((DETAIL,), "Failed to add comment"),
    "review_comment": ActionSpec((DETAIL,), "Failed to add review comment"),
    "suggestion": ActionSpec((DETAIL,), "Failed to commit suggestion"),
    "file_commit": ActionSpec((DETAIL,), "Failed to commit file edit"),
    "resolve_thread": ActionSpec((DETAIL,), "Failed to resolve thread"),
    "unresolve_thread": ActionSpec((DETAIL,), "Failed to unresolve thread"),
    "conflict_resolution": ActionSpec(
        (DETAIL, LIST), "Failed to commit merge resolution"
    ),
}

_FALLBACK = ActionSpec((DETAIL,), "Action failed")


def get_action_spec(action: str) -> ActionSpec:
    """Return the spec for *action*; unknown kinds only touch the detail view."""
    return PR_ACTIONS.get(action, _FALLBACK)


def revalidate_after_pr_mutation(
    conn: sqlite3.Connection,
    owner: str,
    repo: str,
    pull_number: int,
    action: str,
) -> list[str]:
    """Invalidate cached data and record stale views after a mutation.

    Scopes:
        - detail -> ``/repos/{owner}/{repo}/pulls/{n}``
        - list   -> ``/repos/{owner}/{repo}/pulls``
        - layout -> ``/repos/{owner}/{repo}`` (layout)

    Returns:
        The revalidated paths, in the order recorded.
    """
    scopes = get_action_spec(action).scopes
    invalidate_pull_request_cache(conn, owner, repo, pull_number)

    paths: list[str] = []
    if DETAIL in scopes:
        path = f"/repos/{owner}/{repo}/pulls/{pull_number}"
        revalidate_path(conn, path)
        paths.append(path)
    if LIST in scopes:
        path = f"/repos/{owner}/{repo}/pulls"
        revalidate_path(conn, path)
        paths.append(path)
    if LAYOUT in scopes:
        path = f"/repos/{owner}/{repo}"
        revalidate_path(conn, path, kind="layout")
        paths.append(path)

    logger.debug("Revalidated after %s: %s", action, ", ".join(paths))
    return paths
