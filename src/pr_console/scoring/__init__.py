"""Scoring sub-package for the pr-console project.

Exports the contributor scorer and its records so other modules can do::

    from pr_console.scoring import ContributorSnapshot, compute_contributor_score
"""

from pr_console.scoring.composite import MAX_SCORE, compute_contributor_score
from pr_console.scoring.snapshot import ContributorScore, ContributorSnapshot

__all__ = [
    "MAX_SCORE",
    "ContributorScore",
    "ContributorSnapshot",
    "compute_contributor_score",
]
