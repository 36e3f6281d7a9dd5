"""Account-level scoring dimensions for the contributor scorer.

Scores the parts of a contributor that do not depend on the target
repository: audience (followers), breadth (public repositories) and
tenure (account age).  Maximum score: 30 points.
"""

from __future__ import annotations

import datetime
import logging

from pr_console.scoring.normalize import linear_norm, log1p_norm, points
from pr_console.scoring.snapshot import ContributorSnapshot

logger = logging.getLogger(__name__)

FOLLOWERS_MAX = 15
FOLLOWERS_CAP = 10_000

PUBLIC_REPOS_MAX = 5
PUBLIC_REPOS_CAP = 200

ACCOUNT_AGE_MAX = 10
ACCOUNT_AGE_CAP_YEARS = 8

_DAYS_PER_YEAR = 365.25


def calculate_followers_score(snapshot: ContributorSnapshot) -> float:
    """Logarithmic follower score, saturating at 10 000 followers.

    Returns:
        A float between 0 and 15.
    """
    return points(log1p_norm(snapshot.followers, FOLLOWERS_CAP), FOLLOWERS_MAX)


def calculate_public_repos_score(snapshot: ContributorSnapshot) -> float:
    """Logarithmic public-repository score, saturating at 200 repositories.

    Returns:
        A float between 0 and 5.
    """
    return points(
        log1p_norm(snapshot.public_repos, PUBLIC_REPOS_CAP), PUBLIC_REPOS_MAX
    )


def parse_timestamp(value: str) -> datetime.datetime | None:
    """Parse an ISO-8601 timestamp, returning ``None`` when unparseable.

    A trailing ``Z`` is accepted and naive values are taken as UTC.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def account_age_days(account_created: str, now: datetime.datetime) -> float:
    """Days between *account_created* and *now*; 0 when unknown or in the future."""
    created = parse_timestamp(account_created)
    if created is None:
        return 0.0
    if now.tzinfo is None:
        now = now.replace(tzinfo=datetime.timezone.utc)
    age = (now - created).total_seconds() / 86400
    return max(0.0, age)


def calculate_account_age_score(
    snapshot: ContributorSnapshot, now: datetime.datetime
) -> float:
    """Linear tenure score, saturating at 8 years.

    Args:
        snapshot: The contributor snapshot.
        now: Reference instant the account age is measured against.

    Returns:
        A float between 0 and 10.  Missing or unparseable creation
        timestamps score 0.
    """
    years = account_age_days(snapshot.account_created, now) / _DAYS_PER_YEAR
    score = points(linear_norm(years, ACCOUNT_AGE_CAP_YEARS), ACCOUNT_AGE_MAX)
    logger.debug(
        "Account age score: %.2f (created=%r, years=%.2f)",
        score, snapshot.account_created, years,
    )
    return score
