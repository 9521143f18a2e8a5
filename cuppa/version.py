"""Parsing and comparison of release version numbers."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

NOT_AVAILABLE = "N/A"

_SEPARATORS = re.compile(r"[.\-_]")
_RUNS = re.compile(r"\d+|\D+")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_COMPACT_DATE = re.compile(r"[0-9]{8}")
_DATE_WINDOW_YEARS = 20


def _atoi(text: str) -> int | None:
    """Parse a plain decimal integer, or return None if the text is not one."""
    if _INTEGER.fullmatch(text):
        return int(text)
    return None


def _starts_with_digit(part: str) -> bool:
    return "0" <= part[0] <= "9"


class Version(tuple):
    """A version number as a sequence of digit and word pieces."""

    def __str__(self) -> str:
        return ".".join(self)

    def compare(self, old: Version) -> int:
        """Compare with another version.

        The result is negative when this version is newer than ``old``,
        positive when it is older and zero when both are equivalent.
        """
        for index, piece in enumerate(self):
            if index == len(old):
                return -1
            other = old[index]
            if other == piece:
                continue
            current, previous = _atoi(piece), _atoi(other)
            if current is None and previous is None:
                return (piece > other) - (piece < other)
            if current is None:
                return -1
            if previous is None:
                return 1
            result = previous - current
            if result != 0:
                return result
        return 0

    def less(self, other: Version) -> bool:
        """Report whether ``compare`` places this version below ``other``."""
        return self.compare(other) < 0

    def find_date(self) -> datetime | None:
        """Interpret the version as a date if it looks like one."""
        first = self[0]
        if _COMPACT_DATE.fullmatch(first):
            try:
                return datetime.strptime(first, "%Y%m%d").replace(tzinfo=timezone.utc)
            except ValueError:
                pass
        this_year = datetime.now().year
        year = _atoi(first)
        if year is None:
            return None
        if year > this_year or year < this_year - _DATE_WINDOW_YEARS:
            return None
        month = (_atoi(self[1]) or 0) if len(self) > 1 else 0
        day = (_atoi(self[2]) or 0) if len(self) > 2 else 0
        # Out-of-range months and days roll over into neighbouring ones.
        try:
            base_year, month_index = divmod(year * 12 + month - 1, 12)
            start = datetime(base_year, month_index + 1, 1, tzinfo=timezone.utc)
            return start + timedelta(days=day - 1)
        except (ValueError, OverflowError):
            return None


def parse_version(raw: str) -> Version:
    """Parse a version from a tag, file name fragment or version string."""
    pieces = [piece for piece in _SEPARATORS.split(raw) if piece]
    parts: list[str] = []
    for piece in pieces:
        for part in _RUNS.findall(piece):
            if parts or _starts_with_digit(part):
                parts.append(part)
    while parts and not _starts_with_digit(parts[-1]):
        parts.pop()
    if not parts:
        return Version((NOT_AVAILABLE,))
    return Version(parts)