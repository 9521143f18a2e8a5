"""The common provider interface and HTTP helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

import requests

from cuppa.results import NotFoundError, Result, ResultSet, UnavailableError

TIMEOUT = 60


class Provider(ABC):
    """An upstream source of releases."""

    name: str = ""

    @abstractmethod
    def match(self, query: str) -> str | None:
        """Return the provider's name for the query's package, or None."""

    def latest(self, name: str) -> Result:
        """Return the newest stable release."""
        return self.releases(name).last()

    @abstractmethod
    def releases(self, name: str) -> ResultSet:
        """Return all stable releases."""


def check_status(response: requests.Response) -> None:
    """Raise the provider error that matches an HTTP status code."""
    if response.status_code == 200:
        return
    if response.status_code == 404:
        raise NotFoundError(f"not found: {response.url}")
    raise UnavailableError(f"HTTP {response.status_code}: {response.url}")


def get_json(url: str, headers: Mapping[str, str] | None = None) -> Any:
    """Fetch and decode a JSON document."""
    try:
        response = requests.get(url, headers=dict(headers or {}), timeout=TIMEOUT)
    except requests.RequestException as err:
        raise UnavailableError(str(err)) from err
    check_status(response)
    try:
        return response.json()
    except ValueError as err:
        raise UnavailableError(f"invalid JSON from {url}: {err}") from err