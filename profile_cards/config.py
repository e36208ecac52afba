"""
Run configuration, read from the environment (and a .env file if present).
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError

# GitHub logins: alphanumerics and hyphens, at most 39 characters. Older
# accounts may have doubled or trailing hyphens.
LOGIN_PATTERN = re.compile(r"[A-Za-z0-9-]{1,39}")

DEFAULT_CONTRIBUTION_YEAR_LIMIT = 7
DEFAULT_COMMIT_YEAR_LIMIT = 5
DEFAULT_MAX_WORKERS = 8


@dataclass(frozen=True)
class Config:
    access_token: str
    username: str
    excluded_repos: frozenset = field(default_factory=frozenset)
    excluded_langs: frozenset = field(default_factory=frozenset)
    include_orgs: tuple = ()
    contribution_year_limit: int = DEFAULT_CONTRIBUTION_YEAR_LIMIT
    commit_year_limit: int = DEFAULT_COMMIT_YEAR_LIMIT
    max_workers: int = DEFAULT_MAX_WORKERS
    template_dir: Path = Path("templates")
    output_dir: Path = Path("output")
    readme_path: Path = Path("README.md")
    summary_intro: str = ""


def split_list(value):
    """Split a comma-separated setting, dropping blanks"""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def validate_login(login, setting):
    """Reject anything that is not a well-formed GitHub login"""
    if not LOGIN_PATTERN.fullmatch(login):
        raise ConfigError(f"{setting} is not a valid GitHub login: {login!r}")
    return login


def _int_setting(env, name, default):
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigError(f"{name} must be at least 1, got {value}")
    return value


def load_config(env=None):
    """
    Build the run configuration.

    Reads ACCESS_TOKEN and GITHUB_ACTOR (or USER_NAME), the optional
    EXCLUDED_REPOS / EXCLUDED_LANGS / INCLUDE_ORGS lists, the year limits,
    and the template/output/README locations.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    access_token = env.get("ACCESS_TOKEN", "").strip()
    if not access_token:
        raise ConfigError("ACCESS_TOKEN environment variable is required")

    username = (env.get("GITHUB_ACTOR") or env.get("USER_NAME") or "").strip()
    if not username:
        raise ConfigError("GITHUB_ACTOR environment variable is required")
    validate_login(username, "GITHUB_ACTOR")

    include_orgs = tuple(
        validate_login(org, "INCLUDE_ORGS") for org in split_list(env.get("INCLUDE_ORGS"))
    )

    return Config(
        access_token=access_token,
        username=username,
        excluded_repos=frozenset(split_list(env.get("EXCLUDED_REPOS"))),
        excluded_langs=frozenset(
            lang.lower() for lang in split_list(env.get("EXCLUDED_LANGS"))
        ),
        include_orgs=include_orgs,
        contribution_year_limit=_int_setting(
            env, "CONTRIBUTION_YEAR_LIMIT", DEFAULT_CONTRIBUTION_YEAR_LIMIT
        ),
        commit_year_limit=_int_setting(env, "COMMIT_YEAR_LIMIT", DEFAULT_COMMIT_YEAR_LIMIT),
        max_workers=_int_setting(env, "MAX_WORKERS", DEFAULT_MAX_WORKERS),
        template_dir=Path(env.get("TEMPLATE_DIR") or "templates"),
        output_dir=Path(env.get("OUTPUT_DIR") or "output"),
        readme_path=Path(env.get("README_PATH") or "README.md"),
        summary_intro=env.get("SUMMARY_INTRO", "").strip(),
    )
