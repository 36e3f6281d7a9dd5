"""In-repository activity dimensions for the contributor scorer.

Scores what a contributor has done inside the target repository:
merged contribution volume, the merged/closed/open mix of their pull
requests, and review activity.  Maximum score: 40 points.
"""

from __future__ import annotations

import logging

from pr_console.scoring.normalize import log1p_norm, points
from pr_console.scoring.snapshot import ContributorSnapshot

logger = logging.getLogger(__name__)

COMMITS_MAX = 15
COMMITS_CAP = 200
CONTRIBUTION_COUNT_MAX = 5
CONTRIBUTION_COUNT_CAP = 300

PR_MIX_MAX = 10
PR_VOLUME_CAP = 50

REVIEWS_MAX = 10
REVIEWS_CAP = 200


def calculate_contribution_score(snapshot: ContributorSnapshot) -> float:
    """Score merged contribution volume.

    Two logarithmic parts:
        - ``commits_in_repo``    -> up to 15, saturating at 200
        - ``contribution_count`` -> up to 5, saturating at 300

    Returns:
        A float between 0 and 20.
    """
    commits = points(log1p_norm(snapshot.commits_in_repo, COMMITS_CAP), COMMITS_MAX)
    total = points(
        log1p_norm(snapshot.contribution_count, CONTRIBUTION_COUNT_CAP),
        CONTRIBUTION_COUNT_MAX,
    )
    return commits + total


def calculate_pr_mix_score(snapshot: ContributorSnapshot) -> float:
    """Score the merged share of authored pull requests, weighted by volume.

    ``merged / total`` is multiplied by a logarithmic volume factor that
    saturates at 50 pull requests, so one merged PR out of one scores far
    below fifty merged out of fifty.  PRs with an unknown state count
    towards neither side.

    Returns:
        A float between 0 and 10.  No pull requests scores 0.
    """
    counts = snapshot.pr_state_counts()
    total = counts["merged"] + counts["closed"] + counts["open"]
    if total == 0:
        return 0.0

    ratio = counts["merged"] / total
    volume = log1p_norm(total, PR_VOLUME_CAP)
    score = points(ratio * volume, PR_MIX_MAX)

    logger.debug(
        "PR mix score: %.2f (merged=%d, closed=%d, open=%d)",
        score, counts["merged"], counts["closed"], counts["open"],
    )
    return score


def calculate_review_score(snapshot: ContributorSnapshot) -> float:
    """Logarithmic review score, saturating at 200 reviews.

    Returns:
        A float between 0 and 10.
    """
    return points(log1p_norm(snapshot.reviews_in_repo, REVIEWS_CAP), REVIEWS_MAX)
