"""
Tests for the pure aggregation functions.
"""

from datetime import datetime, timedelta, timezone

import pytest

from profile_cards.aggregate import (
    account_age_years,
    build_stats,
    dedupe_repositories,
    language_distribution,
    repository_totals,
    total_commits,
    total_contributions,
)
from profile_cards.models import (
    ContributionYear,
    Language,
    LanguageContribution,
    Profile,
    Repository,
)

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def repo(repo_id, name, stars=0, forks=0):
    return Repository(id=repo_id, name=name, stars=stars, forks=forks)


def row(name, count, color=None):
    language = Language(name, color) if name else None
    return LanguageContribution(language=language, count=count)


class TestRepositoryTotals:
    """Tests for star/fork totals."""

    def test_duplicates_counted_once(self):
        repos = [repo(1, "a", 5, 1), repo(1, "a", 5, 1), repo(2, "b", 3, 0)]
        assert repository_totals(repos) == (8, 1)

    def test_first_duplicate_wins(self, capsys):
        repos = [repo("X", "mine", 10, 4), repo("X", "org-copy", 99, 99)]
        assert repository_totals(repos) == (10, 4)
        assert "Skipping duplicate repository: org-copy (ID: X)" in capsys.readouterr().out

    def test_excluded_names(self):
        repos = [repo(1, "a", 5, 1), repo(2, "dotfiles", 100, 50)]
        assert repository_totals(repos, frozenset({"dotfiles"})) == (5, 1)

    def test_empty(self):
        assert repository_totals([]) == (0, 0)

    def test_dedupe_keeps_order(self):
        repos = [repo(2, "b"), repo(1, "a"), repo(2, "b2"), repo(3, "c")]
        assert [r.name for r in dedupe_repositories(repos)] == ["b", "a", "c"]


class TestContributionTotals:
    """Tests for the capped contribution and commit sums."""

    YEARS = [ContributionYear(year=2025 - i, commits=10, total=100) for i in range(8)]

    def test_contributions_capped_at_seven_years(self):
        assert total_contributions(self.YEARS, 7) == 700

    def test_commits_capped_at_five_years(self):
        assert total_commits(self.YEARS, 5) == 50

    def test_fewer_years_than_cap(self):
        assert total_contributions(self.YEARS[:2], 7) == 200
        assert total_commits([], 5) == 0


class TestLanguageDistribution:
    """Tests for grouping languages and computing shares."""

    def test_commit_weighted_shares(self):
        stats = language_distribution([row("Go", 30, "#00ADD8"), row("Rust", 70, "#dea584")])

        assert stats["Go"].share == pytest.approx(30.0)
        assert stats["Rust"].share == pytest.approx(70.0)
        assert stats["Rust"].color == "#dea584"

    def test_accumulates_and_keeps_first_color(self):
        stats = language_distribution(
            [row("Go", 1, "#00ADD8"), row("Go", 1, "#000000"), row("Python", 2, "#3572A5")]
        )

        assert stats["Go"].count == 2
        assert stats["Go"].color == "#00ADD8"
        assert stats["Go"].share == pytest.approx(50.0)

    def test_shares_sum_to_one_hundred(self):
        stats = language_distribution([row("A", 1), row("B", 2), row("C", 3), row("D", 7)])
        assert sum(lang.share for lang in stats.values()) == pytest.approx(100.0)

    def test_exclusion_is_case_insensitive(self):
        stats = language_distribution(
            [row("HTML", 5), row("Go", 5), row("Jupyter Notebook", 3)],
            frozenset({"html", "jupyter notebook"}),
        )
        assert list(stats) == ["Go"]
        assert stats["Go"].share == pytest.approx(100.0)

    def test_skips_missing_languages_and_zero_counts(self):
        stats = language_distribution([row(None, 5), row("Go", 0), row("Rust", 2)])
        assert list(stats) == ["Rust"]

    def test_empty(self):
        assert language_distribution([]) == {}


class TestAccountAge:
    """Tests for whole-year account age."""

    def test_three_and_a_half_years(self):
        created = NOW - timedelta(days=3.5 * 365.25)
        assert account_age_years(created, NOW) == 3

    def test_just_under_a_year(self):
        created = NOW - timedelta(days=365)
        assert account_age_years(created, NOW) == 0

    def test_exactly_one_year(self):
        created = NOW - timedelta(days=365.25)
        assert account_age_years(created, NOW) == 1


class TestBuildStats:
    """Tests for the aggregated snapshot."""

    def profile(self, **overrides):
        fields = dict(login="octocat", created_at=datetime(2020, 1, 1, tzinfo=timezone.utc))
        fields.update(overrides)
        return Profile(**fields)

    def test_snapshot(self):
        years = [ContributionYear(year=2025 - i, commits=i + 1, total=10 * (i + 1)) for i in range(8)]
        stats = build_stats(
            self.profile(name="The Octocat", contributed_to=12),
            [repo(1, "a", 5, 1), repo(1, "a", 5, 1), repo(2, "b", 3, 0)],
            years,
            now=NOW,
        )

        assert stats.name == "The Octocat"
        assert stats.total_stars == 8
        assert stats.total_forks == 1
        assert stats.total_contributions == 10 * sum(range(1, 8))
        assert stats.total_commits == sum(range(1, 6))
        assert stats.years_ago == 5
        assert stats.repo_count == 12

    def test_fallbacks(self):
        stats = build_stats(self.profile(), [repo(1, "a"), repo(2, "b")], [], now=NOW)

        assert stats.name == "octocat"
        assert stats.repo_count == 2
        assert stats.total_contributions == 0

    def test_configured_limits(self):
        years = [ContributionYear(year=2025 - i, commits=1, total=1) for i in range(8)]
        stats = build_stats(
            self.profile(), [], years, contribution_year_limit=2, commit_year_limit=3, now=NOW
        )

        assert stats.total_contributions == 2
        assert stats.total_commits == 3
