"""Releases of projects hosted on GitHub, via the GraphQL API."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

import requests

from cuppa.config import Config, load_config
from cuppa.providers.base import TIMEOUT, Provider, check_status
from cuppa.results import NotFoundError, Result, ResultSet, UnavailableError

GRAPHQL_API = "https://api.github.com/graphql"
SOURCE_FORMAT = "https://github.com/{}/archive/{}.tar.gz"
SOURCE_REGEX = re.compile(r"github.com/([^/]+/[^/.]+)")
DEFAULT_MAXIMUM = 100

_REPO_QUERY = """
query {{
    repository(owner: "{owner}", name: "{repo}") {{
        releases (last: {maximum}) {{
            nodes {{
                name
                publishedAt
                isPrerelease
                tag {{
                    name
                }}
            }}
        }}
        refs (refPrefix: "refs/tags/", last: {maximum}){{
            nodes {{
                name
            }}
        }}
    }}
}}
"""

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def _parse_rfc3339(text: Any) -> datetime | None:
    if not isinstance(text, str):
        return None
    match = _RFC3339.fullmatch(text)
    if not match:
        return None
    date, clock, fraction, zone = match.groups()
    micro = (fraction or "")[:6].ljust(6, "0")
    zone = "+00:00" if zone == "Z" else zone
    try:
        return datetime.fromisoformat(f"{date}T{clock}.{micro}{zone}")
    except ValueError:
        return None


def _nodes(data: Any, *path: str) -> list[dict]:
    current = data
    for key in path:
        current = current.get(key) if isinstance(current, dict) else None
    if not isinstance(current, list):
        return []
    return [node for node in current if isinstance(node, dict)]


def _text(node: Any, key: str) -> str:
    value = node.get(key) if isinstance(node, dict) else None
    return value if isinstance(value, str) else ""


def build_query(owner: str, repo: str, maximum: int) -> str:
    """Return the GraphQL query for the last ``maximum`` releases and tags."""
    return _REPO_QUERY.format(owner=owner, repo=repo, maximum=maximum)


def convert_repo_query(data: Any, name: str) -> ResultSet:
    """Turn a repository query response into a result set, skipping prereleases."""
    repository = ("data", "repository")
    releases = _nodes(data, *repository, "releases", "nodes")
    results = ResultSet(name)
    for tag in _nodes(data, *repository, "refs", "nodes"):
        tag_name = _text(tag, "name")
        prerelease = False
        published = None
        for release in releases:
            if _text(release.get("tag"), "name") != tag_name:
                continue
            if release.get("isPrerelease") is True:
                prerelease = True
            published = _parse_rfc3339(release.get("publishedAt"))
        if prerelease:
            continue
        location = SOURCE_FORMAT.format(name, tag_name)
        results.add(Result.create(name, tag_name, location, published))
    return results


class GitHubProvider(Provider):
    """Provider for GitHub repositories."""

    name = "GitHub"

    def __init__(self, config: Config | None = None) -> None:
        self.config = config if config is not None else load_config()

    def match(self, query: str) -> str | None:
        found = SOURCE_REGEX.search(query)
        return found.group(1) if found else None

    def get_releases(self, name: str, maximum: int) -> ResultSet:
        """Fetch up to ``maximum`` tags of ``owner/repo`` as results."""
        names = name.split("/")
        if len(names) < 2:
            raise NotFoundError(f"not an owner/repository name: {name!r}")
        payload = {"query": build_query(names[0], names[1], maximum)}
        headers = {}
        if self.config.github_key:
            headers["Authorization"] = "token " + self.config.github_key
        try:
            response = requests.post(GRAPHQL_API, json=payload, headers=headers, timeout=TIMEOUT)
        except requests.RequestException as err:
            raise UnavailableError(str(err)) from err
        check_status(response)
        try:
            data = response.json()
        except ValueError as err:
            raise UnavailableError(f"invalid JSON from {GRAPHQL_API}: {err}") from err
        return convert_repo_query(data, name)

    def latest(self, name: str) -> Result:
        return self.get_releases(name, DEFAULT_MAXIMUM).last()

    def releases(self, name: str) -> ResultSet:
        return self.get_releases(name, DEFAULT_MAXIMUM)