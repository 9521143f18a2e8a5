"""Releases of Haskell packages published on Hackage."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

import requests

from cuppa.providers.base import TIMEOUT, Provider, get_json
from cuppa.results import NotFoundError, Result, ResultSet, UnavailableError

TARBALL_API = "https://hackage.haskell.org/package/{0}-{1}/{0}-{1}.tar.gz"
UPLOAD_TIME_API = "https://hackage.haskell.org/package/{}-{}/upload-time"
VERSIONS_API = "https://hackage.haskell.org/package/{}/preferred"
TARBALL_REGEX = re.compile(r"https?://hackage.haskell.org/package/.*/(.*)-(.*?).tar.gz")

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_UNIX_DATE = re.compile(
    r"(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun) (" + "|".join(_MONTHS) + r") ( ?\d{1,2}) "
    r"(\d{1,2}):(\d{2}):(\d{2}) ([A-Z]{3,5}) (\d{4})",
    re.ASCII,
)


def _valid_zone(zone: str) -> bool:
    if zone.startswith("GMT") and len(zone) > 3:
        return False
    if len(zone) == 3:
        return True
    if len(zone) == 4:
        return zone[3] == "T" or zone == "WITA"
    return zone[4] == "T"


def _parse_unix_date(text: str) -> datetime | None:
    # Zone abbreviations carry no offset here and are read as UTC.
    match = _UNIX_DATE.fullmatch(text)
    if not match or not _valid_zone(match.group(7)):
        return None
    month, day, hour, minute, second, _, year = match.groups()
    try:
        return datetime(
            int(year),
            _MONTHS.index(month) + 1,
            int(day.strip()),
            int(hour),
            int(minute),
            int(second),
            tzinfo=timezone.utc,
        )
    except ValueError:
        return None


@dataclass(frozen=True)
class HackageRelease:
    """One published version of a Hackage package."""

    name: str
    version: str
    released: str = ""

    def convert(self) -> Result:
        """Turn the release into a result."""
        location = TARBALL_API.format(self.name, self.version)
        return Result.create(self.name, self.version, location, _parse_unix_date(self.released))


def convert_releases(releases: Iterable[HackageRelease], name: str) -> ResultSet:
    """Collect the releases into a result set."""
    results = ResultSet(name)
    for release in releases:
        results.add(release.convert())
    return results


def _upload_time(name: str, version: str) -> str | None:
    try:
        response = requests.get(UPLOAD_TIME_API.format(name, version), timeout=TIMEOUT)
    except requests.RequestException:
        return None
    return response.text


class HackageProvider(Provider):
    """Provider for the Haskell package archive."""

    name = "Hackage"

    def match(self, query: str) -> str | None:
        found = TARBALL_REGEX.search(query)
        return (found.group(1) or None) if found else None

    def latest(self, name: str) -> Result:
        return self.releases(name).first()

    def releases(self, name: str) -> ResultSet:
        data = get_json(VERSIONS_API.format(name), {"Accept": "application/json"})
        if not isinstance(data, dict):
            raise UnavailableError(f"unexpected Hackage version list for {name}")
        versions = data.get("normal-version") or []
        if not isinstance(versions, list):
            raise UnavailableError(f"unexpected Hackage version list for {name}")
        found = []
        for version in versions:
            if not isinstance(version, str):
                continue
            released = _upload_time(name, version)
            if released is None:
                continue
            found.append(HackageRelease(name, version, released))
        if not found:
            raise NotFoundError(f"no releases of {name}")
        return convert_releases(found, name)