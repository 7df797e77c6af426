"""In-memory history backend.

Histories are built from nested dicts, e.g.
``backend.commit({"dir": {"f.txt": "hello"}}, message="A")``. Object ids are
computed in git's object format so equal content always shares a
fingerprint, exactly as in a real repository.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import hashlib

from ..errors import BackendReadError, RevisionNotFoundError
from ..object_model import MODE_BY_KIND, DirectoryEntry, EntryKind, ObjectId, RevisionId
from .git import summary_of_message


@dataclass(frozen=True)
class Executable:
    content: str | bytes


@dataclass(frozen=True)
class Symlink:
    target: str


@dataclass(frozen=True)
class Submodule:
    commit: str


@dataclass(frozen=True)
class _Commit:
    tree: ObjectId
    parents: tuple[RevisionId, ...]
    message: str


def _as_bytes(content: str | bytes) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else content


def _object_id(object_type: str, payload: bytes) -> ObjectId:
    header = f"{object_type} {len(payload)}\0".encode("ascii")
    return hashlib.sha1(header + payload).hexdigest()


def _tree_sort_key(entry: DirectoryEntry) -> bytes:
    # git orders directories as if their name ended with "/".
    suffix = "/" if entry.kind is EntryKind.DIRECTORY else ""
    return (entry.name + suffix).encode("utf-8", "surrogateescape")


class MemoryBackend:
    """``HistoryBackend`` over commits and trees held in dicts.

    ``parent_reads`` counts ``parents_of`` calls per revision so callers can
    check how often each commit was visited.
    """

    def __init__(self) -> None:
        self._commits: dict[RevisionId, _Commit] = {}
        self._trees: dict[ObjectId, dict[str, DirectoryEntry]] = {}
        self._refs: dict[str, RevisionId] = {}
        self.parent_reads: Counter[RevisionId] = Counter()

    def _store_tree(self, spec: Mapping[str, object]) -> ObjectId:
        entries: list[DirectoryEntry] = []
        for name, value in spec.items():
            if not name or "/" in name or name in {".", ".."}:
                raise ValueError(f"invalid entry name: {name!r}")
            entries.append(self._store_entry(name, value))
        entries.sort(key=_tree_sort_key)

        payload = b"".join(
            f"{MODE_BY_KIND[entry.kind]:o} {entry.name}\0".encode("utf-8", "surrogateescape") + bytes.fromhex(entry.fingerprint)
            for entry in entries
        )
        tree_id = _object_id("tree", payload)
        self._trees[tree_id] = {entry.name: entry for entry in entries}
        return tree_id

    def _store_entry(self, name: str, value: object) -> DirectoryEntry:
        if isinstance(value, Mapping):
            return DirectoryEntry(name, EntryKind.DIRECTORY, self._store_tree(value))
        if isinstance(value, Executable):
            return DirectoryEntry(name, EntryKind.EXECUTABLE_FILE, _object_id("blob", _as_bytes(value.content)))
        if isinstance(value, Symlink):
            return DirectoryEntry(name, EntryKind.SYMLINK, _object_id("blob", _as_bytes(value.target)))
        if isinstance(value, Submodule):
            return DirectoryEntry(name, EntryKind.SUBMODULE_LINK, value.commit)
        if isinstance(value, (str, bytes)):
            return DirectoryEntry(name, EntryKind.REGULAR_FILE, _object_id("blob", _as_bytes(value)))
        raise TypeError(f"unsupported tree value for {name!r}: {type(value).__name__}")

    def commit(
        self,
        tree: Mapping[str, object],
        parents: Iterable[RevisionId] = (),
        message: str = "",
        ref: str | None = "HEAD",
    ) -> RevisionId:
        """Record a commit and return its id; moves ``ref`` to it when given."""
        parent_ids = tuple(parents)
        for parent in parent_ids:
            if parent not in self._commits:
                raise ValueError(f"unknown parent revision: {parent}")
        tree_id = self._store_tree(tree)
        lines = [f"tree {tree_id}"]
        lines.extend(f"parent {parent}" for parent in parent_ids)
        # Sequence number keeps otherwise identical commits distinct.
        lines.append(f"sequence {len(self._commits)}")
        payload = ("\n".join(lines) + "\n\n" + message).encode("utf-8")
        revision = _object_id("commit", payload)
        self._commits[revision] = _Commit(tree=tree_id, parents=parent_ids, message=message)
        if ref is not None:
            self._refs[ref] = revision
        return revision

    def set_ref(self, name: str, revision: RevisionId) -> None:
        self._commit(revision)
        self._refs[name] = revision

    def _commit(self, revision: RevisionId) -> _Commit:
        try:
            return self._commits[revision]
        except KeyError:
            raise BackendReadError("missing commit object", revision) from None

    def _tree(self, object_id: ObjectId) -> dict[str, DirectoryEntry]:
        try:
            return self._trees[object_id]
        except KeyError:
            raise BackendReadError("missing tree object", object_id) from None

    def resolve_revision(self, spec: str) -> RevisionId:
        if spec in self._refs:
            return self._refs[spec]
        if spec in self._commits:
            return spec
        if len(spec) >= 4:
            matches = [revision for revision in self._commits if revision.startswith(spec)]
            if len(matches) == 1:
                return matches[0]
        raise RevisionNotFoundError(spec)

    def root_directory_of(self, revision: RevisionId) -> ObjectId:
        return self._commit(revision).tree

    def parents_of(self, revision: RevisionId) -> tuple[RevisionId, ...]:
        parents = self._commit(revision).parents
        self.parent_reads[revision] += 1
        return parents

    def directory_entries(self, object_id: ObjectId) -> tuple[DirectoryEntry, ...]:
        return tuple(self._tree(object_id).values())

    def descend(self, object_id: ObjectId, name: str) -> DirectoryEntry | None:
        return self._tree(object_id).get(name)

    def summary_message_of(self, revision: RevisionId) -> str:
        return summary_of_message(self._commit(revision).message)


__all__ = ["MemoryBackend", "Executable", "Symlink", "Submodule"]
