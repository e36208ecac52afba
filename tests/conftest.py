"""
Pytest configuration and shared fixtures for testing the profile cards generator.
"""

import json
from pathlib import Path

import pytest
import responses
from lxml import etree

from profile_cards.client import GraphQLClient
from profile_cards.config import Config

ROOT_DIR = Path(__file__).resolve().parents[1]
TEMPLATE_DIR = ROOT_DIR / "templates"
XHTML = "{http://www.w3.org/1999/xhtml}"


def repo_node(repo_id, name, stars=0, forks=0, language=None, color=None, owner="octocat"):
    """A repository node shaped like the GraphQL response"""
    primary = {"name": language, "color": color} if language else None
    edges = [{"size": 1000, "node": primary}] if primary else []
    return {
        "id": repo_id,
        "name": name,
        "nameWithOwner": f"{owner}/{name}",
        "stargazerCount": stars,
        "forkCount": forks,
        "primaryLanguage": primary,
        "languages": {"edges": edges},
    }


def connection(nodes, has_next_page=False, end_cursor=None, total_count=None):
    result = {
        "nodes": nodes,
        "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
    }
    if total_count is not None:
        result["totalCount"] = total_count
    return result


def operation_name(request):
    """Name of the GraphQL operation in a mocked request, e.g. 'Profile'"""
    query = json.loads(request.body)["query"]
    return query.split("query ", 1)[1].split("(", 1)[0].strip()


def request_variables(request):
    return json.loads(request.body).get("variables") or {}


def progress_items(content):
    """Segments drawn inside the progress bar of a rendered languages badge"""
    root = etree.fromstring(content.encode("utf-8"))
    (bar,) = [el for el in root.iter(f"{XHTML}span") if el.get("class") == "progress"]
    return list(bar)


@pytest.fixture
def client():
    return GraphQLClient("test_token_12345")


@pytest.fixture
def config(tmp_path):
    """Configuration writing into a temporary directory"""
    return Config(
        access_token="test_token_12345",
        username="octocat",
        template_dir=TEMPLATE_DIR,
        output_dir=tmp_path / "output",
        readme_path=tmp_path / "README.md",
        max_workers=4,
    )


@pytest.fixture
def sample_profile_response():
    """Sample GitHub GraphQL response for the profile query."""
    return {
        "data": {
            "user": {
                "name": "The Octocat",
                "login": "octocat",
                "createdAt": "2020-01-15T10:30:00Z",
                "repositoriesContributedTo": {"totalCount": 12},
                "pullRequests": {"totalCount": 34},
                "issues": {"totalCount": 1234},
                "followers": {"totalCount": 42},
                "repositories": connection(
                    [
                        repo_node("R1", "hello-world", stars=10, forks=2, language="Go", color="#00ADD8"),
                        repo_node("R2", "spoon-knife", stars=5, forks=1, language="Rust", color="#dea584"),
                    ],
                    has_next_page=True,
                    end_cursor="CURSOR1",
                    total_count=3,
                ),
            }
        }
    }


@pytest.fixture
def sample_repository_page_response():
    """Second (and last) page of the user's repositories."""
    return {
        "data": {
            "user": {
                "repositories": connection(
                    [repo_node("R3", "linguist", stars=1, forks=0, language="Go", color="#00ADD8")]
                )
            }
        }
    }


@pytest.fixture
def mocked_responses():
    """Activate responses mock for HTTP requests."""
    with responses.RequestsMock() as rsps:
        yield rsps
