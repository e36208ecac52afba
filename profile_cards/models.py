"""
Typed snapshots of the GitHub GraphQL responses, and their decoders.

Identity fields (logins, ids, names, timestamps) are required: a response
without them raises DecodeError. Counts and connections are tolerated
missing and read as zero or empty.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from dateutil import parser as date_parser

from .errors import DecodeError


@dataclass(frozen=True)
class Language:
    name: str
    color: Optional[str] = None


@dataclass(frozen=True)
class Repository:
    id: str
    name: str
    name_with_owner: Optional[str] = None
    stars: int = 0
    forks: int = 0
    primary_language: Optional[Language] = None
    languages: tuple = ()  # (Language, size in bytes) pairs

    @property
    def display_name(self):
        return self.name_with_owner or self.name


@dataclass(frozen=True)
class RepositoryPage:
    nodes: tuple
    has_next_page: bool = False
    end_cursor: Optional[str] = None


@dataclass(frozen=True)
class Profile:
    login: str
    created_at: datetime
    name: Optional[str] = None
    issues: int = 0
    pull_requests: int = 0
    followers: int = 0
    contributed_to: int = 0
    repository_count: int = 0


@dataclass(frozen=True)
class ContributionYear:
    year: int
    commits: int = 0
    issues: int = 0
    pull_requests: int = 0
    reviews: int = 0
    total: int = 0


@dataclass(frozen=True)
class LanguageContribution:
    """One row feeding a language distribution: a commit count or a single repo"""

    language: Optional[Language]
    count: int


@dataclass(frozen=True)
class LanguageStat:
    name: str
    count: int
    color: Optional[str]
    share: float


@dataclass(frozen=True)
class AggregatedStats:
    name: str
    total_stars: int
    total_forks: int
    total_contributions: int
    total_commits: int
    years_ago: int
    repo_count: int


def require(obj, key, context):
    """Return obj[key], raising DecodeError if the object or the field is missing"""
    if not isinstance(obj, dict):
        raise DecodeError(f"{context}: expected an object, got {type(obj).__name__}")
    value = obj.get(key)
    if value is None:
        raise DecodeError(f"{context}: missing required field '{key}'")
    return value


def total_count(obj, key):
    """Read obj[key].totalCount, treating anything absent as 0"""
    connection = (obj or {}).get(key) or {}
    return connection.get("totalCount") or 0


def decode_language(data):
    if not data or not data.get("name"):
        return None
    return Language(name=data["name"], color=data.get("color"))


def decode_repository(data):
    languages = []
    for edge in ((data or {}).get("languages") or {}).get("edges") or []:
        language = decode_language(edge.get("node"))
        if language is not None:
            languages.append((language, edge.get("size") or 0))

    return Repository(
        id=require(data, "id", "repository"),
        name=require(data, "name", "repository"),
        name_with_owner=data.get("nameWithOwner"),
        stars=data.get("stargazerCount") or 0,
        forks=data.get("forkCount") or 0,
        primary_language=decode_language(data.get("primaryLanguage")),
        languages=tuple(languages),
    )


def decode_repository_page(connection, decode_node=decode_repository):
    connection = connection or {}
    page_info = connection.get("pageInfo") or {}
    return RepositoryPage(
        nodes=tuple(decode_node(node) for node in connection.get("nodes") or []),
        has_next_page=bool(page_info.get("hasNextPage")),
        end_cursor=page_info.get("endCursor"),
    )


def decode_profile(user):
    created_at = date_parser.isoparse(require(user, "createdAt", "user"))
    return Profile(
        login=require(user, "login", "user"),
        created_at=created_at,
        name=user.get("name"),
        issues=total_count(user, "issues"),
        pull_requests=total_count(user, "pullRequests"),
        followers=total_count(user, "followers"),
        contributed_to=total_count(user, "repositoriesContributedTo"),
        repository_count=total_count(user, "repositories"),
    )


def decode_contribution_year(year, collection):
    collection = collection or {}
    calendar = collection.get("contributionCalendar") or {}
    return ContributionYear(
        year=year,
        commits=collection.get("totalCommitContributions") or 0,
        issues=collection.get("totalIssueContributions") or 0,
        pull_requests=collection.get("totalPullRequestContributions") or 0,
        reviews=collection.get("totalPullRequestReviewContributions") or 0,
        total=calendar.get("totalContributions") or 0,
    )
