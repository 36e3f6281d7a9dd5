"""Composite contributor scorer.

Combines every scoring dimension into a single score in ``[0, 100]`` and
classifies the contributor into a display tier.
"""

from __future__ import annotations

import datetime
import logging

from pr_console.scoring.account import (
    calculate_account_age_score,
    calculate_followers_score,
    calculate_public_repos_score,
)
from pr_console.scoring.activity import (
    calculate_contribution_score,
    calculate_pr_mix_score,
    calculate_review_score,
)
from pr_console.scoring.fame import calculate_fame_score
from pr_console.scoring.normalize import clamp
from pr_console.scoring.snapshot import ContributorScore, ContributorSnapshot
from pr_console.scoring.status import calculate_status_bonus

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100

TIERS = (
    (70, "core"),
    (40, "established"),
    (15, "emerging"),
)


def classify_tier(score: float) -> str:
    """Return the display tier for *score* (first threshold met wins).

    Thresholds:
        - >= 70 -> core
        - >= 40 -> established
        - >= 15 -> emerging
        - else  -> newcomer
    """
    for threshold, tier in TIERS:
        if score >= threshold:
            return tier
    return "newcomer"


def compute_contributor_score(
    snapshot: ContributorSnapshot, now: datetime.datetime
) -> ContributorScore:
    """Compute the contributor score for *snapshot*.

    Dimensions:
        - Followers     (max 15)
        - Public repos  (max 5)
        - Account age   (max 10)
        - Contributions (max 20)
        - PR mix        (max 10)
        - Reviews       (max 10)
        - Fame          (max 10)
        - Status bonus  (max 22, flat additive)

    The sum is clamped to ``[0, 100]`` and rounded to one decimal.  The
    function is pure: the same snapshot and *now* always give the same
    result, and no input makes it raise.

    Args:
        snapshot: The contributor snapshot to score.
        now: Reference instant used for account age.

    Returns:
        A :class:`ContributorScore`.
    """
    followers = calculate_followers_score(snapshot)
    public_repos = calculate_public_repos_score(snapshot)
    account_age = calculate_account_age_score(snapshot, now)
    contributions = calculate_contribution_score(snapshot)
    pr_mix = calculate_pr_mix_score(snapshot)
    reviews = calculate_review_score(snapshot)
    fame = calculate_fame_score(snapshot)
    status_bonus = calculate_status_bonus(snapshot)

    total = (
        followers
        + public_repos
        + account_age
        + contributions
        + pr_mix
        + reviews
        + fame
        + status_bonus
    )
    final_score = round(clamp(total, MIN_SCORE, MAX_SCORE), 1)
    tier = classify_tier(final_score)

    logger.debug(
        "Contributor score: total=%.1f (%s) "
        "[fol=%.1f, rep=%.1f, age=%.1f, con=%.1f, mix=%.1f, rev=%.1f, "
        "fame=%.1f, bonus=%.1f]",
        final_score, tier, followers, public_repos, account_age,
        contributions, pr_mix, reviews, fame, status_bonus,
    )

    return ContributorScore(
        score=final_score,
        tier=tier,
        followers=round(followers, 2),
        public_repos=round(public_repos, 2),
        account_age=round(account_age, 2),
        contributions=round(contributions, 2),
        pr_mix=round(pr_mix, 2),
        reviews=round(reviews, 2),
        fame=round(fame, 2),
        status_bonus=status_bonus,
    )
