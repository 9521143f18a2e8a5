"""Releases of GNOME modules, read from the download site's cache files."""

from __future__ import annotations

import re
from typing import Any, Mapping

from cuppa.providers.base import Provider, get_json
from cuppa.results import Result, ResultSet, UnavailableError

CACHE_API = "https://download.gnome.org/sources/{}/cache.json"
SOURCE_FORMAT = "https://download.gnome.org/sources/{}/{}"
TARBALL_REGEX = re.compile(
    r"https?://(?:ftp.gnome.org/pub/gnome|download.gnome.org)/sources/(.+?)/.*"
)

_ARCHIVE_KINDS = ("tar.xz", "tar.gz", "tar.bz2")
_INTEGER = re.compile(r"[+-]?[0-9]+")


def merge(name: str, sources: Mapping[str, Any], versions: Mapping[str, Any]) -> ResultSet:
    """Combine the source and version tables of a cache file, keeping stable releases."""
    results = ResultSet(name)
    module_sources = sources.get(name)
    module_versions = versions.get(name)
    if module_sources is None or module_versions is None:
        return results
    for version in module_versions:
        if not isinstance(version, str):
            continue
        pieces = version.split(".")
        if len(pieces) < 2 or not _INTEGER.fullmatch(pieces[1]):
            continue
        minor = int(pieces[1])
        # Odd minor numbers mark development releases.
        if minor > 0 and minor % 2 == 1:
            continue
        files = module_sources.get(version) if isinstance(module_sources, dict) else None
        if not isinstance(files, dict) or not files:
            continue
        archive = next(
            (files[kind] for kind in _ARCHIVE_KINDS if isinstance(files.get(kind), str)),
            None,
        )
        if archive is None:
            continue
        location = SOURCE_FORMAT.format(name, archive)
        results.add(Result.create(name, version, location, None))
    return results


class GnomeProvider(Provider):
    """Provider for modules on download.gnome.org."""

    name = "GNOME"

    def match(self, query: str) -> str | None:
        found = TARBALL_REGEX.search(query)
        return found.group(1) if found else None

    def latest(self, name: str) -> Result:
        return self.releases(name).last()

    def releases(self, name: str) -> ResultSet:
        raw = get_json(CACHE_API.format(name))
        if not isinstance(raw, list) or len(raw) < 3:
            raise UnavailableError(f"unexpected GNOME cache file for {name}")
        sources, versions = raw[1], raw[2]
        if not isinstance(sources, dict) or not isinstance(versions, dict):
            raise UnavailableError(f"unexpected GNOME cache file for {name}")
        return merge(name, sources, versions)