"""Persistent JSON config helpers.

Stores defaults for the command line: starting revision, git timeout,
traversal cap, ancestry mode and theme. All access is defensive: malformed
or missing config falls back safely.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "lastchange"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

DEFAULT_REVISION = "HEAD"
DEFAULT_GIT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class Settings:
    """Effective defaults after validating the config file."""

    default_revision: str = DEFAULT_REVISION
    git_timeout_seconds: float = DEFAULT_GIT_TIMEOUT_SECONDS
    max_revisions: int | None = None
    strict_ancestry: bool = False
    theme: str | None = None


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored so a read-only config
    directory never breaks a listing.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def _nonempty_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _positive_number(value: object) -> float | None:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if value > 0 else None


def _positive_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


def load_settings() -> Settings:
    """Return validated settings; invalid keys keep their defaults."""
    data = load_config()
    strict = data.get("strict_ancestry")
    return Settings(
        default_revision=_nonempty_str(data.get("default_revision")) or DEFAULT_REVISION,
        git_timeout_seconds=_positive_number(data.get("git_timeout_seconds")) or DEFAULT_GIT_TIMEOUT_SECONDS,
        max_revisions=_positive_int(data.get("max_revisions")),
        strict_ancestry=strict if isinstance(strict, bool) else False,
        theme=_nonempty_str(data.get("theme")),
    )


def save_default_revision(revision: str) -> None:
    """Persist the revision used when ``--rev`` is omitted."""
    stripped = str(revision).strip()
    if not stripped:
        return
    config = load_config()
    config["default_revision"] = stripped
    save_config(config)


def save_theme_name(theme_name: str) -> None:
    stripped = str(theme_name).strip()
    if not stripped:
        return
    config = load_config()
    config["theme"] = stripped
    save_config(config)


__all__ = [
    "CONFIG_PATH",
    "Settings",
    "load_config",
    "save_config",
    "load_settings",
    "save_default_revision",
    "save_theme_name",
]
