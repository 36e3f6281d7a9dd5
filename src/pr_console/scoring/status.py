"""Status bonuses for the contributor scorer.

Flat, additive bonuses for the contributor's relationship with the
repository.  Each flag contributes independently of the others, so the
order they are applied in never matters.  Maximum bonus: 22 points.
"""

from __future__ import annotations

from pr_console.scoring.snapshot import ContributorSnapshot

CONTRIBUTOR_BONUS = 5
ORG_MEMBER_BONUS = 7
OWNER_BONUS = 10


def calculate_status_bonus(snapshot: ContributorSnapshot) -> float:
    """Sum the bonuses for the flags that are set.

    Bonuses:
        - ``is_contributor`` -> +5
        - ``is_org_member``  -> +7
        - ``is_owner``       -> +10

    Returns:
        A float between 0 and 22.
    """
    bonus = 0.0
    if snapshot.is_contributor:
        bonus += CONTRIBUTOR_BONUS
    if snapshot.is_org_member:
        bonus += ORG_MEMBER_BONUS
    if snapshot.is_owner:
        bonus += OWNER_BONUS
    return bonus
