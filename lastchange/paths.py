"""Repository-relative path handling.

User paths may be absolute, carry a drive, or contain ``.``/``..``. They are
reduced to a tuple of child names under the repository root, then resolved
one directory level at a time against any revision's root tree.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePath, PureWindowsPath

from .backend import HistoryBackend
from .errors import PathNotFoundError
from .object_model import EntryKind, ObjectId, RevisionId

RepoPath = tuple[str, ...]


def _relative_parts(path: str | PurePath) -> tuple[str, ...]:
    """Path components with any drive/root anchor removed."""
    if isinstance(path, PurePath):
        pure = path
    else:
        windows = PureWindowsPath(path)
        pure = windows if windows.drive else PurePath(path)
    parts = pure.parts
    return parts[1:] if pure.anchor else parts


def normalize_path(path: str | PurePath) -> RepoPath:
    """Reduce ``path`` to child names relative to the repository root.

    Anchors (drive and root) are dropped, ``.`` components vanish and ``..``
    removes the preceding name. A ``..`` with nothing left to remove is
    discarded like any other leading marker.
    """
    names: list[str] = []
    for part in _relative_parts(path):
        if part in {"", "."}:
            continue
        if part == "..":
            if names:
                names.pop()
            continue
        names.append(part)
    return tuple(names)


def format_repo_path(names: RepoPath) -> str:
    return "/".join(names)


def repo_relative_path(target: Path, repo_root: Path) -> RepoPath:
    """Express a filesystem path as names under ``repo_root``.

    ``target`` is made absolute and normalized lexically, so a symlink in the
    work tree names the link entry itself rather than what it points at.
    Only ``repo_root`` is resolved; callers resolve the directory ``target``
    is relative to. Raises :class:`PathNotFoundError` when ``target`` lies
    outside the work tree.
    """
    absolute = Path(os.path.abspath(target))
    root = repo_root.resolve()
    if not absolute.is_relative_to(root):
        raise PathNotFoundError(str(target))
    return normalize_path(absolute.relative_to(root))


@dataclass(frozen=True)
class ResolvedObject:
    """Terminal object found by walking a repository path."""

    kind: EntryKind
    object_id: ObjectId

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


def resolve_object(
    backend: HistoryBackend,
    root: ObjectId,
    names: RepoPath,
    revision: RevisionId | None = None,
) -> ResolvedObject:
    """Walk ``names`` down from the directory ``root``.

    Every intermediate step must land on a directory; a missing child or a
    step through a file raises :class:`PathNotFoundError`.
    """
    current = ResolvedObject(EntryKind.DIRECTORY, root)
    for depth, name in enumerate(names):
        if not current.is_directory:
            raise PathNotFoundError(format_repo_path(names[:depth + 1]), revision)
        child = backend.descend(current.object_id, name)
        if child is None:
            raise PathNotFoundError(format_repo_path(names[:depth + 1]), revision)
        current = ResolvedObject(child.kind, child.fingerprint)
    return current


def resolve_directory(
    backend: HistoryBackend,
    root: ObjectId,
    names: RepoPath,
    revision: RevisionId | None = None,
) -> ObjectId:
    """Like :func:`resolve_object` but the terminal object must be a directory."""
    resolved = resolve_object(backend, root, names, revision)
    if not resolved.is_directory:
        raise PathNotFoundError(format_repo_path(names), revision)
    return resolved.object_id


def resolve_directory_at(
    backend: HistoryBackend,
    revision: RevisionId,
    names: RepoPath,
) -> ObjectId | None:
    """Directory object for ``names`` at ``revision``, or ``None`` when absent."""
    try:
        return resolve_directory(backend, backend.root_directory_of(revision), names, revision)
    except PathNotFoundError:
        return None


__all__ = [
    "RepoPath",
    "normalize_path",
    "format_repo_path",
    "repo_relative_path",
    "ResolvedObject",
    "resolve_object",
    "resolve_directory",
    "resolve_directory_at",
]
