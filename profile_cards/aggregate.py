"""
Pure reductions from fetched data to the numbers shown on the cards.
"""

import datetime

from .models import AggregatedStats, LanguageStat

SECONDS_PER_YEAR = 365.25 * 24 * 60 * 60


def dedupe_repositories(repositories, excluded_repos=frozenset()):
    """
    Drop excluded repositories (by name) and repeated ids.

    The first repository seen with a given id wins; later ones are reported
    and discarded.
    """
    seen = set()
    kept = []
    for repo in repositories:
        if repo.name in excluded_repos:
            continue
        if repo.id in seen:
            print(f"       Skipping duplicate repository: {repo.display_name} (ID: {repo.id})")
            continue
        seen.add(repo.id)
        kept.append(repo)
    return kept


def repository_totals(repositories, excluded_repos=frozenset()):
    """Returns (total stars, total forks) over the deduplicated repositories"""
    kept = dedupe_repositories(repositories, excluded_repos)
    return sum(repo.stars for repo in kept), sum(repo.forks for repo in kept)


def total_contributions(years, limit):
    """Sum of calendar contributions over the first `limit` contribution years"""
    return sum(record.total for record in years[:limit])


def total_commits(years, limit):
    """Sum of commit contributions over the first `limit` contribution years"""
    return sum(record.commits for record in years[:limit])


def language_distribution(contributions, excluded_langs=frozenset()):
    """
    Group language contributions by language name.

    Rows without a language, with a non-positive count, or whose language
    (compared case-insensitively) is excluded are skipped. The first color
    seen for a language is kept. Shares are computed once every row has
    been accumulated.
    """
    counts = {}
    colors = {}
    for row in contributions:
        if row.language is None or row.count <= 0:
            continue
        name = row.language.name
        if name.lower() in excluded_langs:
            continue
        if name not in counts:
            counts[name] = 0
            colors[name] = row.language.color
        counts[name] += row.count

    total = sum(counts.values())
    return {
        name: LanguageStat(
            name=name,
            count=count,
            color=colors[name],
            share=100 * count / total if total else 0.0,
        )
        for name, count in counts.items()
    }


def account_age_years(created_at, now=None):
    """Whole years since `created_at`, using 365.25-day years"""
    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc)
    elapsed = (now - created_at).total_seconds()
    return max(int(elapsed // SECONDS_PER_YEAR), 0)


def build_stats(
    profile,
    repositories,
    years,
    excluded_repos=frozenset(),
    contribution_year_limit=7,
    commit_year_limit=5,
    now=None,
):
    """Combine everything fetched into the snapshot handed to the renderer"""
    stars, forks = repository_totals(repositories, excluded_repos)
    return AggregatedStats(
        name=profile.name or profile.login,
        total_stars=stars,
        total_forks=forks,
        total_contributions=total_contributions(years, contribution_year_limit),
        total_commits=total_commits(years, commit_year_limit),
        years_ago=account_age_years(profile.created_at, now),
        repo_count=profile.contributed_to or len(repositories),
    )
