"""
Fetch a user's GitHub activity and regenerate the profile cards.

The fetches form a small task graph run on a bounded thread pool:

    profile -> repository pages -> organization repositories -> totals
    contribution years -> per-year contribution stats
    commit languages      (independent)
    repository languages  (independent)

Pagination stays sequential; everything else that does not depend on a
previous response is fetched concurrently.
"""

import sys
import time
from concurrent.futures import ThreadPoolExecutor

from .aggregate import build_stats, language_distribution
from .client import GraphQLClient
from .config import load_config
from .errors import CardsError
from .fetchers import (
    fetch_all_organization_repositories,
    fetch_all_repositories,
    fetch_commit_languages,
    fetch_contribution_years,
    fetch_contribution_years_stats,
    fetch_repo_languages,
)
from .render import (
    LANGUAGES_COMMIT_OUTPUT,
    LANGUAGES_COMMIT_TITLE,
    LANGUAGES_REPO_OUTPUT,
    LANGUAGES_REPO_TITLE,
    render_languages,
    render_overview,
    render_summary,
    update_readme,
)


def run(config, client=None, now=None):
    """
    Generate every artifact for `config`.

    Returns a mapping of artifact name to the path it was written to (the
    summary entry holds the summary text). Raises CardsError on any fatal
    failure; artifacts written before the failure stay on disk.
    """
    if client is None:
        client = GraphQLClient(config.access_token)
    login = config.username
    year_limit = max(config.contribution_year_limit, config.commit_year_limit)

    with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
        years_future = pool.submit(fetch_contribution_years, client, login)
        commit_langs_future = pool.submit(fetch_commit_languages, client, login)
        repo_langs_future = pool.submit(fetch_repo_languages, client, login)

        print("\n[1/6] Fetching profile and repositories...")
        profile, repositories = fetch_all_repositories(client, login)
        print(f"       Name: {profile.name or profile.login}")
        print(f"       Found {len(repositories)} repositories")

        if config.include_orgs:
            print(
                "\n[2/6] Fetching repositories from organizations: "
                + ", ".join(config.include_orgs)
            )
            repositories += fetch_all_organization_repositories(
                client, config.include_orgs, pool
            )
        else:
            print("\n[2/6] No organizations configured, skipping")

        print("\n[3/6] Fetching contributions...")
        years = years_future.result()
        if years:
            print(f"       Found contribution years: {', '.join(map(str, years))}")
        contribution_years = fetch_contribution_years_stats(
            client, login, years[:year_limit], pool
        )

        print("\n[4/6] Fetching language usage...")
        repo_languages = language_distribution(
            repo_langs_future.result(), config.excluded_langs
        )
        commit_languages = language_distribution(
            commit_langs_future.result(), config.excluded_langs
        )
        print(f"       {len(repo_languages)} languages by repo")
        print(f"       {len(commit_languages)} languages by commits")

        print("\n[5/6] Aggregating...")
        stats = build_stats(
            profile,
            repositories,
            contribution_years,
            excluded_repos=config.excluded_repos,
            contribution_year_limit=config.contribution_year_limit,
            commit_year_limit=config.commit_year_limit,
            now=now,
        )
        print(f"       Stars: {stats.total_stars:,} | Forks: {stats.total_forks:,}")
        print(f"       Contributions: {stats.total_contributions:,}")
        print(f"       Commits: {stats.total_commits:,}")
        print(f"       Joined GitHub: {stats.years_ago} years ago")

        print("\n[6/6] Generating cards...")
        renders = {
            "overview": pool.submit(
                render_overview, stats, config.template_dir, config.output_dir
            ),
            "languages-repo": pool.submit(
                render_languages,
                repo_languages,
                LANGUAGES_REPO_OUTPUT,
                LANGUAGES_REPO_TITLE,
                config.template_dir,
                config.output_dir,
            ),
            "languages-commit": pool.submit(
                render_languages,
                commit_languages,
                LANGUAGES_COMMIT_OUTPUT,
                LANGUAGES_COMMIT_TITLE,
                config.template_dir,
                config.output_dir,
            ),
            "summary": pool.submit(
                render_summary,
                stats,
                profile,
                config.output_dir,
                config.summary_intro,
            ),
        }
        artifacts = {name: future.result() for name, future in renders.items()}

    update_readme(config.readme_path, artifacts["summary"])
    return artifacts


def main():
    print("=" * 60)
    print("GitHub Profile Cards Generator")
    print("=" * 60)

    start_time = time.perf_counter()
    client = None
    try:
        config = load_config()
        print(f"\nUser: {config.username}")
        if config.excluded_langs:
            print(f"Excluding languages: {', '.join(sorted(config.excluded_langs))}")
        print("-" * 60)
        client = GraphQLClient(config.access_token)
        run(config, client)
    except CardsError as e:
        print(f"\nFailed to generate statistics: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"\nUnexpected failure: {e!r}", file=sys.stderr)
        return 1

    total_time = time.perf_counter() - start_time
    print("\n" + "=" * 60)
    print(f"  Total time: {total_time:.2f} seconds")
    print(f"  API calls: {client.total_queries}")
    print("=" * 60)
    print("\nDone!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
