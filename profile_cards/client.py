"""
Minimal GitHub GraphQL client.
"""

import sys
import threading
from collections import Counter

import requests

from .errors import ProtocolError, TransportError

GRAPHQL_ENDPOINT = "https://api.github.com/graphql"


class GraphQLClient:
    """Posts queries with a bearer token and unwraps the {data, errors} envelope"""

    def __init__(self, token, endpoint=GRAPHQL_ENDPOINT):
        self.endpoint = endpoint
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self.query_count = Counter()
        self._count_lock = threading.Lock()

    def count_query(self, tag):
        """Counts how many times the GitHub GraphQL API is called, per caller"""
        with self._count_lock:
            self.query_count[tag] += 1

    @property
    def total_queries(self):
        with self._count_lock:
            return sum(self.query_count.values())

    def execute(self, query, variables=None, tag="graphql"):
        """
        Send one query and return its data object.

        Raises TransportError for network failures and non-200 responses,
        ProtocolError when the response lists GraphQL errors. Nothing is
        retried: the caller decides whether a failure is fatal.
        """
        self.count_query(tag)
        payload = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            request = requests.post(self.endpoint, json=payload, headers=self.headers)
        except requests.RequestException as e:
            print(f"       {tag}() request failed: {e}", file=sys.stderr)
            raise TransportError(f"{tag}() request failed: {e}") from e

        if request.status_code != 200:
            print(
                f"       {tag}() failed with status {request.status_code}",
                file=sys.stderr,
            )
            raise TransportError(
                f"{tag}() failed with status {request.status_code}: {request.text}"
            )

        try:
            response = request.json()
        except ValueError as e:
            print(f"       {tag}() returned a non-JSON body", file=sys.stderr)
            raise TransportError(f"{tag}() returned a non-JSON body: {e}") from e

        if response.get("errors"):
            print(f"       API Error: {response['errors']}", file=sys.stderr)
            raise ProtocolError(tag, response["errors"])

        return response.get("data") or {}
