"""Releases taken from the tags of a remote git repository."""

from __future__ import annotations

import subprocess

from cuppa.providers.base import Provider
from cuppa.results import NotFoundError, Result, ResultSet

PREFIX = "git|"


def _repo_name(url: str) -> str:
    return url.split("/")[-1].split(".")[0]


def tag_results(output: str, url: str) -> list[Result]:
    """Turn ``git ls-remote --tags`` output into results, in listing order."""
    repo = _repo_name(url)
    found = []
    for line in output.splitlines():
        pieces = line.split("/")
        tag = pieces[-1]
        if tag.endswith("{}"):
            continue
        found.append(Result.create(repo, tag, PREFIX + url, None))
    return found


def _ls_remote(url: str) -> str:
    try:
        completed = subprocess.run(
            ["git", "ls-remote", "--tags", url],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return ""
    return completed.stdout


class GitProvider(Provider):
    """Provider for plain git repositories."""

    name = "Git"

    def match(self, query: str) -> str | None:
        if not (query.startswith(PREFIX) or query.endswith(".git")):
            return None
        pieces = query.split("|")
        return pieces[1] if len(pieces) > 1 else pieces[0]

    def latest(self, name: str) -> Result:
        found = tag_results(_ls_remote(name), name)
        if not found:
            raise NotFoundError(f"no tags for {name}")
        return found[-1]

    def releases(self, name: str) -> ResultSet:
        results = ResultSet(_repo_name(name))
        for result in tag_results(_ls_remote(name), name):
            results.add(result)
        if results.empty():
            raise NotFoundError(f"no tags for {name}")
        return results