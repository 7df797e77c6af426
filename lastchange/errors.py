"""Error taxonomy for provenance resolution.

Every user-facing failure derives from :class:`LastChangeError` so the CLI can
report it as a one-line message. :class:`InternalConsistencyError` is kept
outside that hierarchy: it signals a bug, not bad input.
"""

from __future__ import annotations


class LastChangeError(Exception):
    """Base class for errors that abort a single listing invocation."""


class UnrecognizedModeError(LastChangeError):
    """Backend reported a file mode outside the known entry kinds."""

    def __init__(self, mode: int) -> None:
        self.mode = mode
        super().__init__(f"unrecognized file mode: {mode:o}")


class PathNotFoundError(LastChangeError):
    """Requested path does not exist at the given revision."""

    def __init__(self, path: str, revision: str | None = None) -> None:
        self.path = path
        self.revision = revision
        where = f" at {revision}" if revision else ""
        super().__init__(f"Path not found: {path or '.'}{where}")


class RevisionNotFoundError(LastChangeError):
    """Revision spec does not name a commit."""

    def __init__(self, spec: str) -> None:
        self.spec = spec
        super().__init__(f"Revision not found: {spec}")


class BackendReadError(LastChangeError):
    """Object store or I/O failure while reading history.

    ``detail`` carries the backend's own diagnostic (for git: stderr).
    """

    def __init__(self, message: str, detail: str = "") -> None:
        self.detail = detail.strip()
        text = f"{message}: {self.detail}" if self.detail else message
        super().__init__(text)


class NotARepositoryError(BackendReadError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class HistoryLimitExceededError(LastChangeError):
    """Ancestry holds more revisions than the configured cap."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"history exceeds max_revisions={limit}")


class TraversalCancelledError(LastChangeError):
    def __init__(self) -> None:
        super().__init__("history traversal cancelled")


class InternalConsistencyError(RuntimeError):
    """A live entry has no attribution after the full ancestry walk."""


__all__ = [
    "LastChangeError",
    "UnrecognizedModeError",
    "PathNotFoundError",
    "RevisionNotFoundError",
    "BackendReadError",
    "NotARepositoryError",
    "HistoryLimitExceededError",
    "TraversalCancelledError",
    "InternalConsistencyError",
]
