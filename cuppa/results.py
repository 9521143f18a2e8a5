"""Query results, result sets and provider errors."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from functools import cmp_to_key
from typing import Iterator

from cuppa.version import NOT_AVAILABLE, Version, parse_version

SKIP_WORDS = frozenset(
    {
        "master", "Master", "MASTER",
        "rc", "RC",
        "alpha", "Alpha", "ALPHA",
        "beta", "Beta", "BETA",
        "dev", "DEV",
        "unstable", "Unstable", "UNSTABLE",
        "eap", "EAP",
    }
)


class Status(IntEnum):
    """The state of a provider query upon completion."""

    OK = 0
    NOT_FOUND = 1
    UNAVAILABLE = 2


class ProviderError(Exception):
    """A provider query that did not produce results."""

    status = Status.UNAVAILABLE


class NotFoundError(ProviderError):
    """The query completed without results."""

    status = Status.NOT_FOUND


class UnavailableError(ProviderError):
    """The provider could not be reached or answered badly."""

    status = Status.UNAVAILABLE


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    offset = moment.utcoffset()
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


@dataclass
class Result:
    """A single release found by a provider."""

    name: str
    version: Version
    location: str
    published: datetime | None = None

    @classmethod
    def create(cls, name: str, version: str, location: str, published: datetime | None) -> Result:
        """Build a result, guessing the date from the version when none is given."""
        parsed = parse_version(version)
        if published is None:
            published = parsed.find_date()
        return cls(name, parsed, location, published)

    def format(self) -> str:
        """Render the result as a labelled block followed by a blank line."""
        lines = [f"{'Name':<10}: {self.name}", f"{'Version':<10}: {self.version}"]
        if self.location:
            lines.append(f"{'Location':<10}: {self.location}")
        if self.published is not None:
            lines.append(f"{'Published':<10}: {_rfc3339(self.published)}")
        return "\n".join(lines) + "\n\n"

    def format_simple(self) -> str:
        """Render only the version and the location."""
        return f"{self.version} {self.location}\n"


def _precedes(first: Result, second: Result) -> bool:
    if first.published is not None and second.published is not None:
        return first.published < second.published
    return not first.version.less(second.version)


def _order(first: Result, second: Result) -> int:
    if _precedes(first, second):
        return -1
    if _precedes(second, first):
        return 1
    return 0


class ResultSet:
    """The results of one provider query, oldest first once sorted."""

    def __init__(self, query: str) -> None:
        self.query = query
        self.results: list[Result] = []

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[Result]:
        return iter(self.results)

    def add(self, result: Result | None) -> None:
        """Add a result unless it is missing, unversioned or unstable."""
        if result is None or result.version[0] == NOT_AVAILABLE:
            return
        if any(part in SKIP_WORDS for part in result.version):
            return
        self.results.append(result)

    def empty(self) -> bool:
        """Tell whether the set holds no results."""
        return not self.results

    def first(self) -> Result:
        """Return the first result in the order it was added."""
        if not self.results:
            raise NotFoundError(f"no results for {self.query!r}")
        return self.results[0]

    def last(self) -> Result:
        """Return the newest result."""
        if not self.results:
            raise NotFoundError(f"no results for {self.query!r}")
        if len(self.results) > 1:
            self.sort()
        return self.results[-1]

    def sort(self) -> None:
        """Order by publication date where known, else by version, newest last."""
        self.results.sort(key=cmp_to_key(_order))

    def format_all(self) -> str:
        """Render a summary header followed by every result, sorted."""
        header = (
            f"{'Results of Query':<25}: '{self.query}'\n"
            f"{'Total Number of Results':<25}: {len(self.results)}\n\n"
        )
        self.sort()
        return header + "".join(result.format() for result in self.results)

    def format_first(self) -> str:
        """Render the first result with a header."""
        return f"First Result of Query: '{self.query}'\n" + self.first().format()