"""Releases of Python packages published on PyPI."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from cuppa.providers.base import Provider, get_json
from cuppa.results import NotFoundError, Result, ResultSet, UnavailableError

SOURCE_API = "https://pypi.python.org/pypi/{}/json"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
TARBALL_REGEX = re.compile(r"https?://[^/]*py[^/]*/packages/(?:[^/]+/)+(.+)\Z")

_UPLOAD_TIME = re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:[.,](\d+))?", re.ASCII)


def _parse_upload_time(text: str) -> datetime | None:
    match = _UPLOAD_TIME.fullmatch(text)
    if not match:
        return None
    try:
        moment = datetime.strptime(match.group(1), DATE_FORMAT)
    except ValueError:
        return None
    micro = int((match.group(2) or "")[:6].ljust(6, "0"))
    return moment.replace(microsecond=micro, tzinfo=timezone.utc)


def _text(node: Any, key: str) -> str:
    value = node.get(key) if isinstance(node, dict) else None
    return value if isinstance(value, str) else ""


def convert_urls(urls: Any, name: str, version: str) -> Result | None:
    """Turn the file list of one version into a result, using its last file."""
    entries = [entry for entry in urls if isinstance(entry, dict)] if isinstance(urls, list) else []
    if not entries:
        return None
    last = entries[-1]
    published = _parse_upload_time(_text(last, "upload_time"))
    return Result.create(name, version, _text(last, "url"), published)


def convert_latest(data: Any, name: str) -> Result:
    """Turn a package document into a result for its current version."""
    if not isinstance(data, dict):
        raise UnavailableError(f"unexpected PyPI document for {name}")
    result = convert_urls(data.get("urls"), name, _text(data.get("info"), "version"))
    if result is None:
        raise NotFoundError(f"no files for the latest release of {name}")
    return result


def convert_releases(data: Any, name: str) -> ResultSet:
    """Collect every version listed in a package document."""
    results = ResultSet(name)
    releases = data.get("releases") if isinstance(data, dict) else None
    if not isinstance(releases, dict):
        return results
    for version, urls in releases.items():
        results.add(convert_urls(urls, name, version))
    return results


class PyPIProvider(Provider):
    """Provider for the Python Package Index."""

    name = "PyPi"

    def match(self, query: str) -> str | None:
        found = TARBALL_REGEX.search(query)
        if not found:
            return None
        pieces = found.group(1).split("-")
        package = "-".join(pieces[:-1]) if len(pieces) > 2 else pieces[0]
        return package or None

    def latest(self, name: str) -> Result:
        return convert_latest(get_json(SOURCE_API.format(name)), name)

    def releases(self, name: str) -> ResultSet:
        data = get_json(SOURCE_API.format(name))
        if not isinstance(data, dict):
            raise UnavailableError(f"unexpected PyPI document for {name}")
        if not data.get("releases"):
            raise NotFoundError(f"no releases of {name}")
        return convert_releases(data, name)