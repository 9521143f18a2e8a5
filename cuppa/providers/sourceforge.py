"""Releases of projects hosted on SourceForge, read from their RSS feeds."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from xml.etree import ElementTree

import requests

from cuppa.providers.base import TIMEOUT, Provider, check_status
from cuppa.results import NotFoundError, Result, ResultSet, UnavailableError

API = "https://sourceforge.net/projects/{}/rss?path=/{}"

TARBALL_REGEX = re.compile(
    r"https?://.*sourceforge.net/projects?/(.+)/files/(.+/)?(.+?)-([\d]+(?:.\d+)*\w*?)"
    r"\.(?:zip|tar\..+z.*)(?:\/download)?\Z",
    re.ASCII,
)

PROJECT_REGEX = re.compile(
    r"https?://.*sourceforge.net/projects?/(.+)/(?:files/)?(.+?/)?(.+?)-([\d]+(?:.\d+)*\w*?).+\Z",
    re.ASCII,
)

_RFC1123 = re.compile(r"(\w{3}, \d{2} \w{3} \d{4} \d{2}:\d{2}:\d{2}) ([A-Z]{3,5})", re.ASCII)


def _valid_zone(zone: str) -> bool:
    if zone.startswith("GMT") and len(zone) > 3:
        return False
    if len(zone) == 3:
        return True
    if len(zone) == 4:
        return zone[3] == "T" or zone == "WITA"
    return zone[4] == "T"


def _parse_rfc1123(text: str) -> datetime | None:
    # Zone abbreviations carry no offset here and are read as UTC.
    match = _RFC1123.fullmatch(text)
    if not match or not _valid_zone(match.group(2)):
        return None
    try:
        moment = datetime.strptime(match.group(1), "%a, %d %b %Y %H:%M:%S")
    except ValueError:
        return None
    return moment.replace(tzinfo=timezone.utc)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ElementTree.Element, name: str) -> str:
    text = ""
    for child in element:
        if _local(child.tag) == name:
            text = "".join(child.itertext())
    return text


def parse_feed(text: str | bytes, name: str) -> ResultSet:
    """Collect the archive links of an RSS feed into a result set."""
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as err:
        raise UnavailableError(f"invalid feed: {err}") from err
    if _local(root.tag) != "rss":
        raise UnavailableError(f"expected an rss document, found <{_local(root.tag)}>")
    results = ResultSet(name)
    for channel in root:
        if _local(channel.tag) != "channel":
            continue
        for item in channel:
            if _local(item.tag) != "item":
                continue
            link = _child_text(item, "link")
            found = TARBALL_REGEX.search(link)
            if not found:
                continue
            published = _parse_rfc1123(_child_text(item, "pubDate") + "C")
            results.add(Result.create(name, found.group(4), link, published))
    return results


class SourceForgeProvider(Provider):
    """Provider for SourceForge file releases."""

    name = "SourceForge"

    def match(self, query: str) -> str | None:
        found = TARBALL_REGEX.search(query) or PROJECT_REGEX.search(query)
        return found.group(0) if found else None

    def latest(self, name: str) -> Result:
        return self.releases(name).first()

    def releases(self, name: str) -> ResultSet:
        found = TARBALL_REGEX.search(name)
        if found:
            project, path, package = found.group(1), found.group(2) or "", found.group(3)
        else:
            found = PROJECT_REGEX.search(name)
            if not found:
                raise NotFoundError(f"not a SourceForge source: {name}")
            project, path, package = found.group(3), found.group(2) or "", found.group(1)
        url = API.format(project, path)
        try:
            response = requests.get(url, timeout=TIMEOUT)
        except requests.RequestException as err:
            raise UnavailableError(str(err)) from err
        check_status(response)
        results = parse_feed(response.content, package)
        if results.empty():
            raise NotFoundError(f"no releases in {url}")
        return results