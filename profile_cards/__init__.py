"""
GitHub profile cards: overview and language badges plus a README summary,
generated from the GitHub GraphQL API.
"""

from .generate import main, run

__all__ = ["main", "run"]
