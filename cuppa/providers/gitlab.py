"""Releases of projects hosted on GitLab, read from repository tags."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from cuppa.providers.base import Provider, get_json
from cuppa.results import Result, ResultSet, UnavailableError

SOURCE_FORMAT = "https://gitlab.com/{}/-/archive/{}/{}.tar.gz"
TAGS_ENDPOINT = "https://gitlab.com/api/v4/projects/{}/repository/tags"
SOURCE_REGEX = re.compile(r"gitlab.com/([^/]+/[^/.]+)")
VERSION_REGEX = re.compile(r"(?:\d+\.)*\d+\w*", re.ASCII)

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


def _text(node: Any, key: str) -> str:
    value = node.get(key) if isinstance(node, dict) else None
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class GitLabTag:
    """A repository tag as returned by the GitLab API."""

    name: str = ""
    authored_date: str = ""
    release_tag: str = ""
    description: str = ""

    @classmethod
    def from_json(cls, data: Any) -> GitLabTag:
        """Build a tag from a decoded JSON object."""
        if not isinstance(data, dict):
            raise UnavailableError("unexpected GitLab tag document")
        commit = data.get("commit")
        release = data.get("release")
        return cls(
            name=_text(data, "name"),
            authored_date=_text(commit, "authored_date"),
            release_tag=_text(release, "tag_name"),
            description=_text(release, "description"),
        )

    def convert(self, name: str) -> Result:
        """Turn the tag into a result for the project ``owner/repo``."""
        published = _parse_rfc3339(self.authored_date)
        pieces = name.split("/")
        project = pieces[1] if len(pieces) > 1 else pieces[0]
        location = SOURCE_FORMAT.format(name, self.name, f"{project}-{self.name}")
        return Result.create(name, self.release_tag, location, published)


def convert_tags(tags: Iterable[GitLabTag], name: str) -> ResultSet:
    """Collect the tags into a result set."""
    results = ResultSet(name)
    for tag in tags:
        results.add(tag.convert(name))
    return results


class GitLabProvider(Provider):
    """Provider for projects on gitlab.com."""

    name = "GitLab"

    def match(self, query: str) -> str | None:
        found = SOURCE_REGEX.search(query)
        return found.group(1) if found else None

    def latest(self, name: str) -> Result:
        return self.releases(name).last()

    def releases(self, name: str) -> ResultSet:
        encoded = name.replace("/", "%2f", 1)
        data = get_json(TAGS_ENDPOINT.format(encoded))
        if not isinstance(data, list):
            raise UnavailableError(f"unexpected GitLab tag list for {name}")
        return convert_tags((GitLabTag.from_json(item) for item in data), name)