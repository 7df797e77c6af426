"""Read-only version-history backends.

The core consumes history only through :class:`HistoryBackend`:
- commit lookup (revision spec -> id, root directory, parents, summary)
- directory listing and single-child lookup by object id

``GitBackend`` shells out to the ``git`` CLI; ``MemoryBackend`` builds
histories from plain dicts.
"""

from __future__ import annotations

from typing import Protocol

from ..object_model import DirectoryEntry, ObjectId, RevisionId


class HistoryBackend(Protocol):
    def resolve_revision(self, spec: str) -> RevisionId:
        """Return the commit id for ``spec`` or raise ``RevisionNotFoundError``."""
        ...

    def root_directory_of(self, revision: RevisionId) -> ObjectId:
        ...

    def parents_of(self, revision: RevisionId) -> tuple[RevisionId, ...]:
        """Ordered parent ids; empty for a root commit."""
        ...

    def directory_entries(self, object_id: ObjectId) -> tuple[DirectoryEntry, ...]:
        ...

    def descend(self, object_id: ObjectId, name: str) -> DirectoryEntry | None:
        """Child ``name`` of directory ``object_id``, or ``None`` when absent."""
        ...

    def summary_message_of(self, revision: RevisionId) -> str:
        ...


def __getattr__(name: str):
    if name == "GitBackend":
        from .git import GitBackend

        return GitBackend
    if name == "MemoryBackend":
        from .memory import MemoryBackend

        return MemoryBackend
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["HistoryBackend", "GitBackend", "MemoryBackend"]
