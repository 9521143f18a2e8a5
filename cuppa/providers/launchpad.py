"""Releases of projects hosted on Launchpad."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

import requests

from cuppa.providers.base import TIMEOUT, Provider, get_json
from cuppa.results import NotFoundError, Result, ResultSet, UnavailableError

FILES_API = "https://api.launchpad.net/1.0/{}/{}/{}/files"
RELEASES_API = "https://api.launchpad.net/1.0/{}/{}/releases"
SERIES_API = "https://api.launchpad.net/1.0/{}/series"
SOURCE_FORMAT = "https://launchpad.net/{0}/{1}/{2}/+download/{0}-{2}.tar.gz"
SOURCE_REGEX = re.compile(r"https?://launchpad.net/(.*)/.*/.*/\+download/.*.tar.gz")

STABLE_STATUSES = frozenset({"Active Development", "Current Stable Release", "Supported"})
TARBALL_TYPE = "Code Release Tarball"

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def _parse_rfc3339(text: str) -> datetime | None:
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


def _entries(data: Any) -> list[dict]:
    entries = data.get("entries") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        return []
    return [entry for entry in entries if isinstance(entry, dict)]


@dataclass(frozen=True)
class LaunchpadRelease:
    """One release of a project series, with the upload time of its tarball."""

    name: str = ""
    release: str = ""
    series: str = ""
    uploaded: str = ""

    def convert(self) -> Result:
        """Turn the release into a result."""
        location = SOURCE_FORMAT.format(self.name, self.series, self.release)
        return Result.create(self.name, self.release, location, _parse_rfc3339(self.uploaded))


def convert_releases(releases: Iterable[LaunchpadRelease], name: str) -> ResultSet:
    """Collect the releases into a result set."""
    results = ResultSet(name)
    for release in releases:
        results.add(release.convert())
    return results


def _fetch_entries(url: str) -> list[dict] | None:
    try:
        response = requests.get(url, timeout=TIMEOUT)
        data = response.json()
    except (requests.RequestException, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return _entries(data)


def _tarball_release(files: list[dict], name: str, series: str, number: str) -> LaunchpadRelease:
    uploaded = None
    for entry in files:
        if _text(entry, "file_type") == TARBALL_TYPE:
            uploaded = _text(entry, "date_uploaded")
    if uploaded is None:
        # Without a tarball the release carries nothing and is dropped on conversion.
        return LaunchpadRelease()
    return LaunchpadRelease(name=name, release=number, series=series, uploaded=uploaded)


class LaunchpadProvider(Provider):
    """Provider for Launchpad projects."""

    name = "Launchpad"

    def match(self, query: str) -> str | None:
        found = SOURCE_REGEX.search(query)
        return found.group(1) if found else None

    def latest(self, name: str) -> Result:
        return self.releases(name).last()

    def releases(self, name: str) -> ResultSet:
        data = get_json(SERIES_API.format(name), {"Accept": "application/json"})
        if not isinstance(data, dict):
            raise UnavailableError(f"unexpected Launchpad series list for {name}")
        found: list[LaunchpadRelease] = []
        for series in _entries(data):
            if series.get("active") is not True:
                continue
            if _text(series, "status") not in STABLE_STATUSES:
                continue
            series_name = _text(series, "name")
            versions = _fetch_entries(RELEASES_API.format(name, series_name))
            if versions is None:
                continue
            for version in reversed(versions):
                number = _text(version, "version")
                files = _fetch_entries(FILES_API.format(name, series_name, number))
                if files is None:
                    continue
                found.append(_tarball_release(files, name, series_name, number))
        if not found:
            raise NotFoundError(f"no releases of {name}")
        return convert_releases(found, name)