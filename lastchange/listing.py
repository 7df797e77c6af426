"""Annotated directory listing, the public entry point of the core.

Resolves the target at the starting revision, builds the provenance index
over the full ancestry, and joins each live entry against it.
"""

from __future__ import annotations

import logging
import threading
from pathlib import PurePath

from .backend import HistoryBackend
from .errors import InternalConsistencyError
from .object_model import AnnotatedEntry, DirectoryEntry, RevisionId
from .paths import RepoPath, format_repo_path, normalize_path, resolve_directory, resolve_object
from .provenance import ProvenanceIndex, build_provenance_index

logger = logging.getLogger(__name__)


def annotate_entries(
    backend: HistoryBackend,
    entries: tuple[DirectoryEntry, ...],
    index: ProvenanceIndex,
) -> list[AnnotatedEntry]:
    """Join ``entries`` against ``index`` in the order given.

    A fingerprint missing from the index means the traversal skipped the
    starting revision, which is a bug rather than a user error.
    """
    messages: dict[RevisionId, str] = {}
    annotated: list[AnnotatedEntry] = []
    for entry in entries:
        revision = index.get(entry.fingerprint)
        if revision is None:
            raise InternalConsistencyError(
                f"{format_repo_path((*index.path, entry.name))} ({entry.fingerprint}) has no attribution"
            )
        if revision not in messages:
            messages[revision] = backend.summary_message_of(revision)
        annotated.append(
            AnnotatedEntry(
                name=entry.name,
                kind=entry.kind,
                fingerprint=entry.fingerprint,
                attributed_revision=revision,
                attributed_message=messages[revision],
            )
        )
    return annotated


def build_listing(
    backend: HistoryBackend,
    starting_revision: str,
    path: str | PurePath | RepoPath = "",
    *,
    max_revisions: int | None = None,
    cancel_event: threading.Event | None = None,
    strict_ancestry: bool = False,
) -> list[AnnotatedEntry]:
    """Annotate the entries under ``path`` at ``starting_revision``.

    ``path`` is repository-relative (anchors and dot components are
    normalized away); a tuple is taken as already-normalized names. A
    directory yields one row per immediate child in backend order; a file
    path yields a single row for that file.
    """
    names = tuple(path) if isinstance(path, tuple) else normalize_path(path)
    revision = backend.resolve_revision(starting_revision)
    root = backend.root_directory_of(revision)
    target = resolve_object(backend, root, names, revision)

    if target.is_directory:
        directory_names = names
        entries = backend.directory_entries(target.object_id)
    else:
        directory_names = names[:-1]
        parent = resolve_directory(backend, root, directory_names, revision)
        entry = backend.descend(parent, names[-1])
        if entry is None:
            raise InternalConsistencyError(f"{format_repo_path(names)} vanished between lookups")
        entries = (entry,)

    logger.debug("listing %r at %s: %d entries", format_repo_path(names), revision, len(entries))
    index = build_provenance_index(
        backend,
        revision,
        directory_names,
        max_revisions=max_revisions,
        cancel_event=cancel_event,
        strict_ancestry=strict_ancestry,
    )
    return annotate_entries(backend, entries, index)


__all__ = ["annotate_entries", "build_listing"]
