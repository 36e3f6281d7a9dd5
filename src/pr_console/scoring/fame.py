"""Fame scoring dimension for the contributor scorer.

Uses the most-starred repository among the contributor's top
repositories.  Maximum score: 10 points.
"""

from __future__ import annotations

from pr_console.scoring.normalize import log1p_norm, points
from pr_console.scoring.snapshot import ContributorSnapshot

FAME_MAX = 10
STARS_CAP = 50_000


def calculate_fame_score(snapshot: ContributorSnapshot) -> float:
    """Logarithmic score of the peak stargazer count, saturating at 50 000.

    Returns:
        A float between 0 and 10.  An empty ``top_repo_stars`` scores 0.
    """
    if not snapshot.top_repo_stars:
        return 0.0
    peak = max(snapshot.top_repo_stars)
    return points(log1p_norm(peak, STARS_CAP), FAME_MAX)
