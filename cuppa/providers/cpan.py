"""Releases of Perl distributions published on CPAN."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from cuppa.providers.base import Provider, get_json
from cuppa.results import NotFoundError, Result, ResultSet, UnavailableError
from cuppa.version import NOT_AVAILABLE

API_RELEASE = "https://fastapi.metacpan.org/v1/release/{}"
API_DOWNLOAD_URL = "https://fastapi.metacpan.org/v1/download_url/{}"

SEARCH_REGEX = re.compile(r"https?://*(?:/.*cpan.org)(?:/CPAN)?/authors/id/(.+)\Z")

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


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class CpanRelease:
    """A release record as returned by the metacpan API."""

    version: str = ""
    status: str = ""
    date: str = ""
    location: str = ""
    error: str = ""

    @classmethod
    def from_json(cls, data: Any) -> CpanRelease:
        """Build a release from a decoded JSON object."""
        if not isinstance(data, dict):
            raise UnavailableError("unexpected CPAN release document")
        return cls(
            version=_text(data, "version"),
            status=_text(data, "status"),
            date=_text(data, "date"),
            location=_text(data, "download_url"),
            error=_text(data, "error"),
        )

    def convert(self, name: str) -> Result | None:
        """Turn the release into a result, or None if it is not the latest one."""
        if self.status != "latest":
            return None
        result = Result.create(name, self.version, self.location, _parse_rfc3339(self.date))
        if result.version[0] == NOT_AVAILABLE:
            return None
        return result


def convert_releases(releases: Iterable[CpanRelease], name: str) -> ResultSet:
    """Collect the convertible releases into a result set."""
    results = ResultSet(name)
    for release in releases:
        results.add(release.convert(name))
    return results


class CpanProvider(Provider):
    """Provider for the Comprehensive Perl Archive Network."""

    name = "CPAN"

    def match(self, query: str) -> str | None:
        found = SEARCH_REGEX.search(query)
        if not found:
            return None
        filename = found.group(1).split("/")[-1]
        pieces = filename.split("-")
        package = "-".join(pieces[:-1]) if len(pieces) > 2 else pieces[0]
        return package or None

    def _module(self, name: str) -> str:
        data = get_json(API_RELEASE.format(name))
        if not isinstance(data, dict):
            raise UnavailableError(f"unexpected CPAN release document for {name}")
        return _text(data, "main_module")

    def latest(self, name: str) -> Result:
        module = self._module(name)
        release = CpanRelease.from_json(get_json(API_DOWNLOAD_URL.format(module)))
        if release.error:
            raise NotFoundError(release.error)
        result = release.convert(name)
        if result is None:
            raise NotFoundError(f"no stable release of {name}")
        return result

    def releases(self, name: str) -> ResultSet:
        results = ResultSet(name)
        results.add(self.latest(name))
        return results