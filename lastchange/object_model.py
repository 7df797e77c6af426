"""Typed directory entries as recorded in version history.

Git tree entries carry a numeric mode; ``classify_mode`` maps it onto the
closed set of entry kinds. Anything outside that set is rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import UnrecognizedModeError

RevisionId = str
ObjectId = str


class EntryKind(Enum):
    DIRECTORY = "directory"
    REGULAR_FILE = "file"
    EXECUTABLE_FILE = "executable"
    SYMLINK = "symlink"
    SUBMODULE_LINK = "submodule"


MODE_DIRECTORY = 0o040000
MODE_REGULAR_FILE = 0o100644
MODE_GROUP_WRITABLE_FILE = 0o100664
MODE_EXECUTABLE_FILE = 0o100755
MODE_SYMLINK = 0o120000
MODE_SUBMODULE_LINK = 0o160000

_KIND_BY_MODE: dict[int, EntryKind] = {
    MODE_DIRECTORY: EntryKind.DIRECTORY,
    MODE_REGULAR_FILE: EntryKind.REGULAR_FILE,
    # Legacy mode still found in old repositories.
    MODE_GROUP_WRITABLE_FILE: EntryKind.REGULAR_FILE,
    MODE_EXECUTABLE_FILE: EntryKind.EXECUTABLE_FILE,
    MODE_SYMLINK: EntryKind.SYMLINK,
    MODE_SUBMODULE_LINK: EntryKind.SUBMODULE_LINK,
}

MODE_BY_KIND: dict[EntryKind, int] = {
    EntryKind.DIRECTORY: MODE_DIRECTORY,
    EntryKind.REGULAR_FILE: MODE_REGULAR_FILE,
    EntryKind.EXECUTABLE_FILE: MODE_EXECUTABLE_FILE,
    EntryKind.SYMLINK: MODE_SYMLINK,
    EntryKind.SUBMODULE_LINK: MODE_SUBMODULE_LINK,
}


def classify_mode(mode: int) -> EntryKind:
    """Return the entry kind for a backend-reported mode.

    Raises :class:`UnrecognizedModeError` for any mode outside the standard
    set instead of guessing.
    """
    try:
        return _KIND_BY_MODE[mode]
    except KeyError:
        raise UnrecognizedModeError(mode) from None


@dataclass(frozen=True)
class DirectoryEntry:
    """One child of a directory object."""

    name: str
    kind: EntryKind
    fingerprint: ObjectId

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(frozen=True)
class AnnotatedEntry:
    """Directory entry joined with the revision it is attributed to."""

    name: str
    kind: EntryKind
    fingerprint: ObjectId
    attributed_revision: RevisionId
    attributed_message: str


__all__ = [
    "RevisionId",
    "ObjectId",
    "EntryKind",
    "MODE_BY_KIND",
    "classify_mode",
    "DirectoryEntry",
    "AnnotatedEntry",
]
