"""User configuration read from a TOML file."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Config:
    """Runtime settings; all fields are optional."""

    github_key: str = ""


def default_config_path() -> Path:
    """Return the location of the user's configuration file."""
    return Path.home() / ".config" / "cuppa"


def load_config(path: str | Path | None = None) -> Config:
    """Load the configuration, falling back to defaults if it cannot be read."""
    if path is None:
        try:
            path = default_config_path()
        except RuntimeError:
            return Config()
    try:
        with open(path, "rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return Config()
    github = data.get("github", {})
    key = github.get("key", "") if isinstance(github, dict) else ""
    return Config(github_key=key if isinstance(key, str) else "")