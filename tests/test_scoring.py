"""Tests for the contributor scoring engine.

Covers the properties every score must hold:

* **Bounded** -- always a finite value in [0, 100], for any input
* **Monotone** -- raising any count never lowers the score
* **Additive bonuses** -- each status flag adds its bonus independently
* **Deterministic** -- same snapshot and instant, same result

Each individual dimension is also tested to ensure it stays within its max.
"""

import datetime
import math

import pytest

from pr_console.scoring import MAX_SCORE, ContributorSnapshot, compute_contributor_score
from pr_console.scoring.account import (
    account_age_days,
    calculate_account_age_score,
    calculate_followers_score,
    calculate_public_repos_score,
    parse_timestamp,
)
from pr_console.scoring.activity import (
    calculate_contribution_score,
    calculate_pr_mix_score,
    calculate_review_score,
)
from pr_console.scoring.composite import classify_tier
from pr_console.scoring.fame import calculate_fame_score
from pr_console.scoring.normalize import clamp, linear_norm, log1p_norm
from pr_console.scoring.snapshot import BREAKDOWN_KEYS, to_count
from pr_console.scoring.status import calculate_status_bonus


NOW = datetime.datetime(2026, 1, 1, tzinfo=datetime.timezone.utc)

COUNT_FIELDS = (
    "followers",
    "public_repos",
    "commits_in_repo",
    "reviews_in_repo",
    "contribution_count",
)

LADDER = (0, 1, 2, 5, 10, 50, 100, 1_000, 10_000, 1_000_000, 10 ** 12)


def _years_ago(years: float) -> str:
    return (NOW - datetime.timedelta(days=years * 365.25)).isoformat()


def _merged(n: int) -> tuple:
    return tuple({"state": "merged"} for _ in range(n))


def _moderate_snapshot(**overrides) -> ContributorSnapshot:
    """A mid-range contributor scoring about 28 points with no status flags.

    50 followers, 10 repos, 2-year-old account, 5 commits, 3 merged PRs,
    2 reviews, top repository with 100 stars.
    """
    fields = dict(
        followers=50,
        public_repos=10,
        account_created=_years_ago(2),
        commits_in_repo=5,
        prs_in_repo=_merged(3),
        reviews_in_repo=2,
        contribution_count=5,
        top_repo_stars=(100, 7),
    )
    fields.update(overrides)
    return ContributorSnapshot(**fields)


def _score(snapshot: ContributorSnapshot) -> float:
    return compute_contributor_score(snapshot, NOW).score


# ---------------------------------------------------------------------------
# Empty and saturated contributors
# ---------------------------------------------------------------------------

class TestExtremes:
    """The emptiest and strongest possible contributors."""

    def test_empty_snapshot_scores_zero(self):
        """A snapshot with only defaults scores 0 and is a newcomer."""
        result = compute_contributor_score(ContributorSnapshot(), NOW)

        assert result.score == 0.0
        assert result.tier == "newcomer"
        assert all(
            value == 0 for value in result.as_dict()["breakdown"].values()
        )

    def test_saturated_snapshot_is_capped(self):
        """Every signal past its cap plus every flag clamps to exactly 100."""
        snapshot = ContributorSnapshot(
            followers=10 ** 9,
            public_repos=10 ** 9,
            account_created="2000-01-01T00:00:00Z",
            commits_in_repo=10 ** 9,
            prs_in_repo=_merged(60),
            reviews_in_repo=10 ** 9,
            is_contributor=True,
            contribution_count=10 ** 9,
            is_org_member=True,
            is_owner=True,
            top_repo_stars=(10 ** 9,),
        )
        result = compute_contributor_score(snapshot, NOW)

        assert result.score == MAX_SCORE
        assert result.tier == "core"

    def test_saturated_without_flags_is_eighty(self):
        """Base signals alone top out at 80 points."""
        snapshot = ContributorSnapshot(
            followers=10 ** 9,
            public_repos=10 ** 9,
            account_created="2000-01-01T00:00:00Z",
            commits_in_repo=10 ** 9,
            prs_in_repo=_merged(60),
            reviews_in_repo=10 ** 9,
            contribution_count=10 ** 9,
            top_repo_stars=(10 ** 9,),
        )
        assert _score(snapshot) == 80.0

    @pytest.mark.parametrize("value", [-5, -1e9, float("nan"), "abc", None, True])
    def test_invalid_counts_score_like_zero(self, value):
        """Negative, NaN, non-numeric and bool counts are treated as 0."""
        kwargs = {name: value for name in COUNT_FIELDS}
        snapshot = ContributorSnapshot(**kwargs, top_repo_stars=(value,))

        assert _score(snapshot) == 0.0

    def test_infinite_counts_stay_bounded(self):
        """Infinite counts saturate instead of overflowing."""
        kwargs = {name: float("inf") for name in COUNT_FIELDS}
        result = compute_contributor_score(ContributorSnapshot(**kwargs), NOW)

        assert math.isfinite(result.score)
        assert 0 <= result.score <= MAX_SCORE

    def test_integers_beyond_float_range_saturate(self):
        """A 400-digit count scores the same as a count at the cap."""
        huge = ContributorSnapshot.from_dict(
            {"followers": 10 ** 400, "topRepoStars": [10 ** 400]}
        )
        capped = ContributorSnapshot(followers=10_000, top_repo_stars=(50_000,))

        assert huge.followers == 10 ** 18
        assert huge.top_repo_stars == (10 ** 18,)
        assert _score(huge) == _score(capped) == 25.0

    def test_huge_negative_integer_is_zero(self):
        assert _score(ContributorSnapshot(reviews_in_repo=-(10 ** 400))) == 0.0


# ---------------------------------------------------------------------------
# Monotonicity
# ---------------------------------------------------------------------------

class TestMonotonicity:
    """Raising any count never lowers the score."""

    @pytest.mark.parametrize("field_name", COUNT_FIELDS)
    def test_count_fields(self, field_name):
        """Scores along the ladder of values are non-decreasing."""
        scores = [_score(_moderate_snapshot(**{field_name: v})) for v in LADDER]
        assert scores == sorted(scores)

    def test_top_repo_stars(self):
        """A more-starred top repository never lowers the score."""
        scores = [_score(_moderate_snapshot(top_repo_stars=(v,))) for v in LADDER]
        assert scores == sorted(scores)

    def test_account_age(self):
        """An older account never scores lower."""
        scores = [
            _score(_moderate_snapshot(account_created=_years_ago(y)))
            for y in (0, 0.5, 1, 3, 8, 20)
        ]
        assert scores == sorted(scores)

    def test_merged_pull_requests(self):
        """More merged pull requests never lower the score."""
        scores = [_score(_moderate_snapshot(prs_in_repo=_merged(n))) for n in range(0, 80, 7)]
        assert scores == sorted(scores)

    def test_counts_past_cap_saturate(self):
        """Values past a dimension's cap score the same as the cap."""
        at_cap = _score(_moderate_snapshot(followers=10_000))
        past_cap = _score(_moderate_snapshot(followers=10 ** 7))
        assert at_cap == past_cap


# ---------------------------------------------------------------------------
# Status bonuses
# ---------------------------------------------------------------------------

class TestStatusBonus:
    """Each status flag adds its bonus independently of the others."""

    @pytest.mark.parametrize(
        "flag, bonus",
        [("is_contributor", 5), ("is_org_member", 7), ("is_owner", 10)],
    )
    def test_single_flag_adds_bonus(self, flag, bonus):
        """Setting one flag on a mid-range contributor adds its bonus."""
        base = _score(_moderate_snapshot())
        flagged = _score(_moderate_snapshot(**{flag: True}))
        assert flagged - base == pytest.approx(bonus, abs=0.11)

    def test_flags_are_additive(self):
        """All three flags together add 22 points."""
        base = _score(_moderate_snapshot())
        flagged = _score(
            _moderate_snapshot(is_contributor=True, is_org_member=True, is_owner=True)
        )
        assert flagged - base == pytest.approx(22, abs=0.11)

    def test_owner_and_member_combine(self):
        """Owner and member bonuses measured apart add up to both together."""
        base = _score(_moderate_snapshot())
        owner = _score(_moderate_snapshot(is_owner=True))
        member = _score(_moderate_snapshot(is_org_member=True))
        both = _score(_moderate_snapshot(is_owner=True, is_org_member=True))

        assert (owner - base) + (member - base) == pytest.approx(both - base, abs=0.21)

    def test_bonus_values(self):
        """calculate_status_bonus sums the flags that are set."""
        assert calculate_status_bonus(ContributorSnapshot()) == 0
        assert calculate_status_bonus(ContributorSnapshot(is_owner=True)) == 10
        assert calculate_status_bonus(
            ContributorSnapshot(is_contributor=True, is_org_member=True)
        ) == 12


# ---------------------------------------------------------------------------
# Determinism and result shape
# ---------------------------------------------------------------------------

class TestDeterminism:
    """Same snapshot and instant always give the same result."""

    def test_repeated_calls_are_equal(self):
        snapshot = _moderate_snapshot(is_org_member=True)
        first = compute_contributor_score(snapshot, NOW)
        second = compute_contributor_score(snapshot, NOW)

        assert first == second
        assert first.as_dict() == second.as_dict()

    def test_as_dict_shape(self):
        """as_dict returns score, tier and the full breakdown."""
        result = compute_contributor_score(_moderate_snapshot(), NOW).as_dict()

        assert set(result) == {"score", "tier", "breakdown"}
        assert tuple(result["breakdown"]) == BREAKDOWN_KEYS

    def test_breakdown_sums_to_score(self):
        """Below the cap the breakdown adds up to the final score."""
        result = compute_contributor_score(_moderate_snapshot(), NOW)
        total = sum(result.as_dict()["breakdown"].values())
        assert total == pytest.approx(result.score, abs=0.1)

    def test_moderate_contributor_is_emerging(self):
        """The mid-range fixture lands in the emerging tier."""
        result = compute_contributor_score(_moderate_snapshot(), NOW)
        assert 15 <= result.score < 40
        assert result.tier == "emerging"


# ---------------------------------------------------------------------------
# Individual dimensions stay within their max
# ---------------------------------------------------------------------------

class TestDimensionRanges:
    """Each dimension respects its maximum."""

    def test_followers(self):
        assert calculate_followers_score(ContributorSnapshot()) == 0
        assert calculate_followers_score(
            ContributorSnapshot(followers=10_000)
        ) == pytest.approx(15)
        assert calculate_followers_score(ContributorSnapshot(followers=10 ** 9)) <= 15

    def test_public_repos(self):
        assert calculate_public_repos_score(
            ContributorSnapshot(public_repos=200)
        ) == pytest.approx(5)

    def test_contributions(self):
        """Commits give up to 15 and the contribution count up to 5."""
        snapshot = ContributorSnapshot(commits_in_repo=200, contribution_count=300)
        assert calculate_contribution_score(snapshot) == pytest.approx(20)
        only_commits = ContributorSnapshot(commits_in_repo=200)
        assert calculate_contribution_score(only_commits) == pytest.approx(15)

    def test_reviews(self):
        assert calculate_review_score(
            ContributorSnapshot(reviews_in_repo=200)
        ) == pytest.approx(10)

    def test_fame_uses_peak_stars(self):
        """Only the most-starred repository counts."""
        snapshot = ContributorSnapshot(top_repo_stars=(3, 50_000, 10))
        assert calculate_fame_score(snapshot) == pytest.approx(10)

    def test_fame_empty(self):
        assert calculate_fame_score(ContributorSnapshot(top_repo_stars=())) == 0


class TestPullRequestMix:
    """The merged share of authored PRs, weighted by volume."""

    def test_no_pull_requests(self):
        assert calculate_pr_mix_score(ContributorSnapshot()) == 0

    def test_volume_outweighs_single_merge(self):
        """One merged PR of one scores far below fifty of fifty."""
        one = calculate_pr_mix_score(ContributorSnapshot(prs_in_repo=_merged(1)))
        fifty = calculate_pr_mix_score(ContributorSnapshot(prs_in_repo=_merged(50)))

        assert fifty == pytest.approx(10)
        assert one < 2

    def test_closed_pull_requests_lower_ratio(self):
        """Half merged scores half of all merged at the same volume."""
        all_merged = ContributorSnapshot(prs_in_repo=_merged(10))
        half_merged = ContributorSnapshot(
            prs_in_repo=_merged(5) + ({"state": "closed"},) * 5
        )
        assert calculate_pr_mix_score(half_merged) == pytest.approx(
            calculate_pr_mix_score(all_merged) / 2
        )

    def test_only_open_pull_requests(self):
        snapshot = ContributorSnapshot(prs_in_repo=({"state": "open"},) * 4)
        assert calculate_pr_mix_score(snapshot) == 0

    def test_state_strings_accepted(self):
        """States may be plain strings in any case."""
        snapshot = ContributorSnapshot(prs_in_repo=("MERGED", "closed"))
        assert snapshot.pr_state_counts() == {"merged": 1, "closed": 1, "open": 0}


class TestAccountAge:
    """Linear tenure score saturating at 8 years."""

    def test_four_years_is_half(self):
        snapshot = ContributorSnapshot(account_created=_years_ago(4))
        assert calculate_account_age_score(snapshot, NOW) == pytest.approx(5)

    def test_saturates_at_eight_years(self):
        snapshot = ContributorSnapshot(account_created=_years_ago(30))
        assert calculate_account_age_score(snapshot, NOW) == pytest.approx(10)

    @pytest.mark.parametrize("created", ["", "not a date", "2031-01-01T00:00:00Z"])
    def test_unknown_or_future_is_zero(self, created):
        """Missing, unparseable and future timestamps score 0."""
        snapshot = ContributorSnapshot(account_created=created)
        assert calculate_account_age_score(snapshot, NOW) == 0

    def test_parse_timestamp_accepts_z(self):
        parsed = parse_timestamp("2020-05-17T08:30:00Z")
        assert parsed == datetime.datetime(
            2020, 5, 17, 8, 30, tzinfo=datetime.timezone.utc
        )

    def test_naive_timestamps_are_utc(self):
        assert account_age_days("2025-12-31T00:00:00", NOW) == pytest.approx(1)


# ---------------------------------------------------------------------------
# Tier classification
# ---------------------------------------------------------------------------

class TestTierClassification:
    """Thresholds: >=70 core, >=40 established, >=15 emerging."""

    @pytest.mark.parametrize(
        "score, tier",
        [
            (100, "core"),
            (70, "core"),
            (69.9, "established"),
            (40, "established"),
            (39.9, "emerging"),
            (15, "emerging"),
            (14.9, "newcomer"),
            (0, "newcomer"),
        ],
    )
    def test_thresholds(self, score, tier):
        assert classify_tier(score) == tier


# ---------------------------------------------------------------------------
# Snapshot construction
# ---------------------------------------------------------------------------

class TestSnapshot:
    """Snapshot normalisation and dict construction."""

    def test_from_dict_accepts_camel_case(self):
        snapshot = ContributorSnapshot.from_dict({
            "followers": 12,
            "publicRepos": 3,
            "accountCreated": "2019-01-01T00:00:00Z",
            "prsInRepo": [{"state": "merged"}],
            "isOrgMember": True,
            "topRepoStars": [40, 2],
            "somethingElse": "ignored",
        })

        assert snapshot.followers == 12
        assert snapshot.public_repos == 3
        assert snapshot.account_created == "2019-01-01T00:00:00Z"
        assert snapshot.prs_in_repo == ({"state": "merged"},)
        assert snapshot.is_org_member is True
        assert snapshot.top_repo_stars == (40, 2)

    def test_from_dict_empty(self):
        assert ContributorSnapshot.from_dict({}) == ContributorSnapshot()

    def test_counts_are_normalised(self):
        snapshot = ContributorSnapshot(followers="42", public_repos=3.9, reviews_in_repo=-2)
        assert snapshot.followers == 42
        assert snapshot.public_repos == 3
        assert snapshot.reviews_in_repo == 0

    def test_snapshot_is_frozen(self):
        snapshot = ContributorSnapshot()
        with pytest.raises(AttributeError):
            snapshot.followers = 5

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, 0), (True, 0), ("", 0), (" 7 ", 7), (2.5, 2), (-7, 0),
            (float("inf"), 10 ** 18), (10 ** 400, 10 ** 18), (1e300, 10 ** 18),
        ],
    )
    def test_to_count(self, value, expected):
        assert to_count(value) == expected


class TestNormalize:
    """Saturating scale helpers."""

    def test_log1p_norm_bounds(self):
        assert log1p_norm(0, 100) == 0
        assert log1p_norm(-3, 100) == 0
        assert log1p_norm(100, 100) == pytest.approx(1)
        assert log1p_norm(10 ** 6, 100) == pytest.approx(1)

    def test_linear_norm(self):
        assert linear_norm(2, 8) == pytest.approx(0.25)
        assert linear_norm(20, 8) == 1

    def test_clamp(self):
        assert clamp(-1) == 0
        assert clamp(2) == 1
        assert clamp(150, 0, 100) == 100
