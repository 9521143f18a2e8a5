"""Releases of KDE software, read from the download site's full file listing."""

from __future__ import annotations

import bz2
import re
from datetime import datetime, timezone

import requests

from cuppa.providers.base import TIMEOUT, Provider
from cuppa.results import Result, ResultSet

LISTING_URL = "https://download.kde.org/ls-lR.bz2"
LISTING_PREFIX = "/srv/archives/ftp/"
SOURCE_FORMAT4 = "https://download.kde.org/{}/{}/{}/{}-{}.tar.xz"
SOURCE_FORMAT5 = "https://download.kde.org/{}/{}/{}/{}/{}-{}.tar.xz"
SOURCE_FORMAT6 = "https://download.kde.org/{}/{}/{}/{}/{}/{}-{}.tar.xz"
TARBALL_REGEX = re.compile(r"https?://.*download.kde.org/(.+)")

_UPDATED = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}", re.ASCII)


def _parse_updated(text: str) -> datetime | None:
    if not _UPDATED.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d %H:%M").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _location(pieces: list[str], version: str, package: str) -> str:
    if len(pieces) == 4:
        return SOURCE_FORMAT4.format(pieces[0], pieces[1], version, package, version)
    if len(pieces) == 5:
        return SOURCE_FORMAT5.format(pieces[0], pieces[1], version, pieces[3], package, version)
    return SOURCE_FORMAT6.format(
        pieces[0], pieces[1], version, pieces[3], pieces[4], package, version
    )


def parse_listing(listing: str, name: str) -> ResultSet:
    """Collect the releases of the source path ``name`` from an ``ls -lR`` listing.

    ``name`` is the path of a known source below the download root, such as
    ``stable/plasma/5.12.0/kwin-5.12.0.tar.xz``.
    """
    pieces = name.split("/")
    package = "-".join(pieces[-1].split("-")[:-1])
    results = ResultSet(package)
    if len(pieces) == 4:
        parent = pieces[:-2]
    elif len(pieces) in (5, 6):
        parent = pieces[:-3]
    else:
        return results
    header = LISTING_PREFIX + "/".join(parent) + ":"
    # Only lines that end in a newline count; a trailing partial line is ignored.
    lines = iter(listing.split("\n")[:-1])
    # Advance the iterator up to and past the directory's header.
    if not any(line == header for line in lines):
        return results
    for line in lines:
        if line == "":
            break
        fields = line.split()
        if not fields:
            continue
        version = fields[-1]
        if not "0" <= version[0] <= "9":
            continue
        updated = _parse_updated(" ".join(fields[-3:-2]))
        results.add(Result.create(package, version, _location(pieces, version, package), updated))
    return results


def _download_listing() -> str:
    try:
        response = requests.get(LISTING_URL, timeout=TIMEOUT)
    except requests.RequestException:
        return ""
    if response.status_code != 200:
        return ""
    try:
        return bz2.decompress(response.content).decode("utf-8", errors="replace")
    except (OSError, ValueError):
        return ""


class KdeProvider(Provider):
    """Provider for sources on download.kde.org."""

    name = "KDE"

    def __init__(self) -> None:
        self._listing = ""

    def match(self, query: str) -> str | None:
        found = TARBALL_REGEX.search(query)
        if not found:
            return None
        path = found.group(1)
        if not 4 <= len(path.split("/")) <= 6:
            return None
        return path

    def latest(self, name: str) -> Result:
        return self.releases(name).last()

    def releases(self, name: str) -> ResultSet:
        if not self._listing:
            self._listing = _download_listing()
        return parse_listing(self._listing, name)