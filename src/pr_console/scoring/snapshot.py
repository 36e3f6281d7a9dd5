"""Input and output records for the contributor scorer.

A :class:`ContributorSnapshot` is built once per request from the dossier
query and never mutated.  Numeric fields are clamped to non-negative
integers on construction so the scorer can treat them as trusted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any

PR_STATES = ("merged", "closed", "open")

BREAKDOWN_KEYS = (
    "followers",
    "public_repos",
    "account_age",
    "contributions",
    "pr_mix",
    "reviews",
    "fame",
    "status_bonus",
)

# camelCase keys as produced by the web layer -> snapshot field names
_ALIASES = {
    "publicRepos": "public_repos",
    "accountCreated": "account_created",
    "commitsInRepo": "commits_in_repo",
    "prsInRepo": "prs_in_repo",
    "reviewsInRepo": "reviews_in_repo",
    "isContributor": "is_contributor",
    "contributionCount": "contribution_count",
    "isOrgMember": "is_org_member",
    "isOwner": "is_owner",
    "topRepoStars": "top_repo_stars",
}


def to_count(value: Any) -> int:
    """Coerce *value* to a non-negative int, clamping anything invalid to 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        # ints past float range must not go through float()
        return max(0, min(value, 10 ** 18))
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
        try:
            value = float(value)
        except ValueError:
            return 0
    try:
        number = float(value)
    except OverflowError:
        return 10 ** 18
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or number <= 0:
        return 0
    if math.isinf(number):
        return 10 ** 18
    return int(min(number, 10 ** 18))


def _to_state(pr: Any) -> str:
    if isinstance(pr, str):
        return pr.lower()
    if isinstance(pr, dict):
        return str(pr.get("state") or "").lower()
    return ""


@dataclass(frozen=True)
class ContributorSnapshot:
    """Account and in-repository activity of one contributor."""

    followers: int = 0
    public_repos: int = 0
    account_created: str = ""
    commits_in_repo: int = 0
    prs_in_repo: tuple = ()
    reviews_in_repo: int = 0
    is_contributor: bool = False
    contribution_count: int = 0
    is_org_member: bool = False
    is_owner: bool = False
    top_repo_stars: tuple = ()

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        for name in (
            "followers",
            "public_repos",
            "commits_in_repo",
            "reviews_in_repo",
            "contribution_count",
        ):
            object.__setattr__(self, name, to_count(getattr(self, name)))
        object.__setattr__(
            self, "account_created", str(self.account_created or "")
        )
        object.__setattr__(
            self,
            "prs_in_repo",
            tuple({"state": _to_state(pr)} for pr in (self.prs_in_repo or ())),
        )
        object.__setattr__(
            self,
            "top_repo_stars",
            tuple(to_count(s) for s in (self.top_repo_stars or ())),
        )
        for name in ("is_contributor", "is_org_member", "is_owner"):
            object.__setattr__(self, name, bool(getattr(self, name)))

    @classmethod
    def from_dict(cls, data: dict) -> "ContributorSnapshot":
        """Build a snapshot from a mapping with snake_case or camelCase keys.

        Unknown keys are ignored; missing keys take their defaults.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = _ALIASES.get(key, key)
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)

    def pr_state_counts(self) -> dict[str, int]:
        """Return ``{"merged": n, "closed": n, "open": n}`` for ``prs_in_repo``."""
        counts = {state: 0 for state in PR_STATES}
        for pr in self.prs_in_repo:
            state = pr["state"]
            if state in counts:
                counts[state] += 1
        return counts


@dataclass(frozen=True)
class ContributorScore:
    """Final score in ``[0, 100]`` with its per-signal breakdown."""

    score: float
    tier: str
    followers: float = 0.0
    public_repos: float = 0.0
    account_age: float = 0.0
    contributions: float = 0.0
    pr_mix: float = 0.0
    reviews: float = 0.0
    fame: float = 0.0
    status_bonus: float = 0.0

    def as_dict(self) -> dict:
        """Return a JSON-friendly dict with a ``breakdown`` sub-dict."""
        return {
            "score": self.score,
            "tier": self.tier,
            "breakdown": {key: getattr(self, key) for key in BREAKDOWN_KEYS},
        }
