"""
Query-specific fetchers for the GitHub GraphQL API.

Every query is a static document; logins, cursors and dates travel as
GraphQL variables. Fetchers whose data only decorates the cards
(contribution years, language usage, organization repositories) report
failures and fall back to empty results. Everything else propagates.
"""

import sys

from .errors import CardsError
from .models import (
    LanguageContribution,
    decode_contribution_year,
    decode_language,
    decode_profile,
    decode_repository_page,
    require,
)

REPOSITORY_FIELDS = """
    nodes {
        id
        name
        nameWithOwner
        stargazerCount
        forkCount
        primaryLanguage { name color }
        languages(first: 10, orderBy: {field: SIZE, direction: DESC}) {
            edges {
                size
                node { name color }
            }
        }
    }
    pageInfo {
        hasNextPage
        endCursor
    }
"""

PROFILE_QUERY = (
    """
query Profile($login: String!) {
    user(login: $login) {
        name
        login
        createdAt
        repositoriesContributedTo(first: 1, includeUserRepositories: true, privacy: PUBLIC,
            contributionTypes: [COMMIT, ISSUE, PULL_REQUEST, REPOSITORY]) {
            totalCount
        }
        pullRequests(first: 1) { totalCount }
        issues(first: 1) { totalCount }
        followers { totalCount }
        repositories(first: 100, orderBy: {field: STARGAZERS, direction: DESC}, isFork: false) {
            totalCount
"""
    + REPOSITORY_FIELDS
    + """
        }
    }
}"""
)

REPOSITORY_PAGE_QUERY = (
    """
query RepositoryPage($login: String!, $cursor: String) {
    user(login: $login) {
        repositories(first: 100, after: $cursor, orderBy: {field: STARGAZERS, direction: DESC}, isFork: false) {
"""
    + REPOSITORY_FIELDS
    + """
        }
    }
}"""
)

ORGANIZATION_REPOSITORIES_QUERY = (
    """
query OrganizationRepositories($org: String!) {
    organization(login: $org) {
        repositories(first: 100, orderBy: {field: STARGAZERS, direction: DESC}, isFork: false) {
"""
    + REPOSITORY_FIELDS
    + """
        }
    }
}"""
)

CONTRIBUTION_YEARS_QUERY = """
query ContributionYears($login: String!) {
    user(login: $login) {
        contributionsCollection {
            contributionYears
        }
    }
}"""

CONTRIBUTION_YEAR_QUERY = """
query ContributionYear($login: String!, $from: DateTime!, $to: DateTime!) {
    user(login: $login) {
        contributionsCollection(from: $from, to: $to) {
            totalCommitContributions
            totalIssueContributions
            totalPullRequestContributions
            totalPullRequestReviewContributions
            contributionCalendar {
                totalContributions
            }
        }
    }
}"""

COMMIT_LANGUAGES_QUERY = """
query CommitLanguages($login: String!) {
    user(login: $login) {
        contributionsCollection {
            commitContributionsByRepository(maxRepositories: 100) {
                repository {
                    primaryLanguage { name color }
                }
                contributions { totalCount }
            }
        }
    }
}"""

REPO_LANGUAGES_QUERY = """
query RepoLanguages($login: String!, $cursor: String) {
    user(login: $login) {
        repositories(isFork: false, first: 100, after: $cursor, ownerAffiliations: OWNER) {
            nodes {
                primaryLanguage { name color }
            }
            pageInfo {
                endCursor
                hasNextPage
            }
        }
    }
}"""


def _warn(message):
    print(f"       Warning: {message}", file=sys.stderr)


def paginate(fetch_page, first_page=None):
    """
    Collect the nodes of every page of a connection.

    `fetch_page(cursor)` returns a RepositoryPage. Starts from `first_page`
    when the first page has already been fetched, otherwise from no cursor.
    Stops once the API reports no next page or omits the cursor.
    """
    page = first_page if first_page is not None else fetch_page(None)
    nodes = list(page.nodes)
    while page.has_next_page and page.end_cursor:
        page = fetch_page(page.end_cursor)
        nodes.extend(page.nodes)
    return nodes


def fan_out(pool, func, items):
    """Run func over items on the pool; results keep input order, first failure propagates"""
    futures = [pool.submit(func, item) for item in items]
    return [future.result() for future in futures]


def fetch_profile(client, login):
    """Gets the user profile together with the first page of their repositories"""
    data = client.execute(PROFILE_QUERY, {"login": login}, tag="fetch_profile")
    user = require(data, "user", "fetch_profile")
    profile = decode_profile(user)
    first_page = decode_repository_page(user.get("repositories"))
    return profile, first_page


def fetch_repository_page(client, login, cursor):
    """Gets the page of the user's repositories that follows `cursor`"""
    data = client.execute(
        REPOSITORY_PAGE_QUERY,
        {"login": login, "cursor": cursor},
        tag="fetch_repository_page",
    )
    user = require(data, "user", "fetch_repository_page")
    return decode_repository_page(user.get("repositories"))


def fetch_all_repositories(client, login):
    """Profile plus every own (non-fork) repository, walking the pagination"""
    profile, first_page = fetch_profile(client, login)
    repositories = paginate(
        lambda cursor: fetch_repository_page(client, login, cursor), first_page
    )
    return profile, repositories


def fetch_organization_repositories(client, org):
    """Gets the first 100 non-fork repositories of an organization, most starred first"""
    try:
        data = client.execute(
            ORGANIZATION_REPOSITORIES_QUERY,
            {"org": org},
            tag="fetch_organization_repositories",
        )
        organization = require(data, "organization", "fetch_organization_repositories")
        page = decode_repository_page(organization.get("repositories"))
    except CardsError as e:
        _warn(f"could not fetch repositories for {org}: {e}")
        return []
    print(f"       Found {len(page.nodes)} repositories in {org}")
    return list(page.nodes)


def fetch_all_organization_repositories(client, orgs, pool):
    """One request per organization, in parallel, concatenated in configuration order"""
    results = fan_out(pool, lambda org: fetch_organization_repositories(client, org), orgs)
    return [repo for repos in results for repo in repos]


def fetch_contribution_years(client, login):
    """Gets all years the user has contributed, most recent first"""
    try:
        data = client.execute(
            CONTRIBUTION_YEARS_QUERY, {"login": login}, tag="fetch_contribution_years"
        )
        user = require(data, "user", "fetch_contribution_years")
    except CardsError as e:
        _warn(f"could not fetch contribution years: {e}")
        return []
    collection = user.get("contributionsCollection") or {}
    return [int(year) for year in collection.get("contributionYears") or []]


def fetch_contribution_year(client, login, year):
    """Gets commit, issue, PR, review and calendar totals for one calendar year"""
    data = client.execute(
        CONTRIBUTION_YEAR_QUERY,
        {
            "login": login,
            "from": f"{year}-01-01T00:00:00Z",
            "to": f"{year}-12-31T23:59:59Z",
        },
        tag="fetch_contribution_year",
    )
    user = require(data, "user", "fetch_contribution_year")
    record = decode_contribution_year(year, user.get("contributionsCollection"))
    print(f"       {year}: {record.total:,} contributions, {record.commits:,} commits")
    return record


def fetch_contribution_years_stats(client, login, years, pool):
    """Per-year totals for `years`, fetched in parallel, returned in the same order"""
    return fan_out(pool, lambda year: fetch_contribution_year(client, login, year), years)


def fetch_commit_languages(client, login):
    """
    Gets the primary language and commit count of every repository the user
    committed to (GitHub caps this at 100 repositories).
    """
    try:
        data = client.execute(
            COMMIT_LANGUAGES_QUERY, {"login": login}, tag="fetch_commit_languages"
        )
        user = require(data, "user", "fetch_commit_languages")
    except CardsError as e:
        _warn(f"could not fetch commit languages: {e}")
        return []

    collection = user.get("contributionsCollection") or {}
    rows = []
    for item in collection.get("commitContributionsByRepository") or []:
        repository = item.get("repository") or {}
        rows.append(
            LanguageContribution(
                language=decode_language(repository.get("primaryLanguage")),
                count=(item.get("contributions") or {}).get("totalCount") or 0,
            )
        )
    return rows


def _decode_language_node(node):
    return LanguageContribution(
        language=decode_language((node or {}).get("primaryLanguage")), count=1
    )


def fetch_repo_language_page(client, login, cursor):
    data = client.execute(
        REPO_LANGUAGES_QUERY,
        {"login": login, "cursor": cursor},
        tag="fetch_repo_languages",
    )
    user = require(data, "user", "fetch_repo_languages")
    return decode_repository_page(user.get("repositories"), _decode_language_node)


def fetch_repo_languages(client, login):
    """One row per owned, non-fork repository with its primary language"""
    try:
        return paginate(lambda cursor: fetch_repo_language_page(client, login, cursor))
    except CardsError as e:
        _warn(f"could not fetch repository languages: {e}")
        return []

