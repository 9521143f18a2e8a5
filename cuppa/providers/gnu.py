"""Releases of GNU packages, listed over FTP from a GNU mirror."""

from __future__ import annotations

import ftplib
import re
from datetime import datetime, timezone
from typing import Iterable, Mapping

from cuppa.providers.base import TIMEOUT, Provider
from cuppa.results import NotFoundError, Result, ResultSet, UnavailableError

MIRROR_HOST = "mirrors.rit.edu"
MIRROR_PORT = 21
GNU_FORMAT = "https://mirrors.rit.edu/gnu/{}/{}"
MIRRORS_REGEX = re.compile(r"(?:https?|ftp)://[^\/]+/gnu/(.+)/[^\/]+\Z")
TARBALL_REGEX = re.compile(r"\A(.+)-(.+)\.tar\..+z\Z")

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_LIST_KINDS = {"-": "file", "d": "dir", "l": "link"}

Entry = tuple[str, Mapping[str, str]]


def _parse_modify(text: str | None) -> datetime | None:
    if not text:
        return None
    try:
        return datetime.strptime(text[:14], "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def tarball_results(name: str, entries: Iterable[Entry]) -> ResultSet:
    """Collect the tarballs of a directory listing into a result set.

    Entries are ``(filename, facts)`` pairs as produced by an MLSD listing.
    """
    results = ResultSet(name)
    for filename, facts in entries:
        if facts.get("type") != "file":
            continue
        found = TARBALL_REGEX.search(filename)
        if not found:
            continue
        location = GNU_FORMAT.format(name, filename)
        published = _parse_modify(facts.get("modify"))
        results.add(Result.create(found.group(1), found.group(2), location, published))
    return results


def _list_time(month: str, day: str, year_or_clock: str, now: datetime) -> datetime | None:
    if month not in _MONTHS:
        return None
    try:
        if ":" in year_or_clock:
            hour, minute = (int(part) for part in year_or_clock.split(":", 1))
            moment = datetime(now.year, _MONTHS.index(month) + 1, int(day), hour, minute, tzinfo=timezone.utc)
            if moment > now:
                moment = moment.replace(year=now.year - 1)
            return moment
        return datetime(int(year_or_clock), _MONTHS.index(month) + 1, int(day), tzinfo=timezone.utc)
    except ValueError:
        return None


def _parse_list_line(line: str, now: datetime) -> Entry | None:
    fields = line.split(None, 8)
    if len(fields) < 9 or not fields[0]:
        return None
    kind = _LIST_KINDS.get(fields[0][0], "other")
    filename = fields[8]
    if kind == "link":
        filename = filename.split(" -> ", 1)[0]
    facts = {"type": kind}
    modified = _list_time(fields[5], fields[6], fields[7], now)
    if modified is not None:
        facts["modify"] = modified.strftime("%Y%m%d%H%M%S")
    return filename, facts


def _list_directory(client: ftplib.FTP, path: str) -> list[Entry]:
    try:
        return list(client.mlsd(path, facts=["type", "modify"]))
    except ftplib.error_perm:
        lines: list[str] = []
        client.retrlines(f"LIST {path}", lines.append)
        now = datetime.now(timezone.utc)
        parsed = (_parse_list_line(line, now) for line in lines)
        return [entry for entry in parsed if entry is not None]


class GnuProvider(Provider):
    """Provider for packages on the GNU FTP mirrors."""

    name = "GNU"

    def match(self, query: str) -> str | None:
        found = MIRRORS_REGEX.search(query)
        return found.group(1) if found else None

    def latest(self, name: str) -> Result:
        results = self.releases(name)
        results.sort()
        return results.last()

    def releases(self, name: str) -> ResultSet:
        client = ftplib.FTP(timeout=TIMEOUT)
        try:
            try:
                client.connect(MIRROR_HOST, MIRROR_PORT)
                client.login("anonymous", "anonymous")
            except (OSError, ftplib.Error) as err:
                raise UnavailableError(f"cannot reach {MIRROR_HOST}: {err}") from err
            try:
                entries = _list_directory(client, "gnu/" + name)
            except (OSError, ftplib.Error) as err:
                raise NotFoundError(f"FTP Error: {err}") from err
        finally:
            client.close()
        return tarball_results(name, entries)