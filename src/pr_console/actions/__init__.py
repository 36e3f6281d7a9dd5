"""Actions sub-package -- pull-request mutations forwarded to GitHub.

Usage::

    from pr_console.actions import PullRequestActions

    actions = PullRequestActions(client, conn)
    actions.merge("octo", "app", 7, method="squash")
"""

from pr_console.actions.pulls import ActionError, PullRequestActions
from pr_console.actions.registry import PR_ACTIONS, revalidate_after_pr_mutation

__all__ = [
    "PR_ACTIONS",
    "ActionError",
    "PullRequestActions",
    "revalidate_after_pr_mutation",
]
