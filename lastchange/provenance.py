"""Provenance index: content fingerprint -> oldest revision carrying it.

The ancestry of the starting revision is walked with an explicit worklist
(each commit read once, merges included) and then ordered topologically,
children before parents. Replaying revisions in that order with
insert-or-overwrite leaves every fingerprint attributed to the oldest
revision whose directory at the path contained it.

Content that disappears and later comes back (a revert) keeps its original
attribution; fingerprints introduced independently on unrelated branches
resolve to whichever of those revisions the topological order places last.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
import heapq
import logging
import threading

from .backend import HistoryBackend
from .errors import HistoryLimitExceededError, TraversalCancelledError
from .object_model import ObjectId, RevisionId
from .paths import RepoPath, format_repo_path, resolve_directory_at

logger = logging.getLogger(__name__)


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise TraversalCancelledError()


@dataclass
class AncestryGraph:
    """Reachable commits of ``start`` with their parent links.

    ``discovered`` lists revisions in breadth-first discovery order.
    """

    start: RevisionId
    parents: dict[RevisionId, tuple[RevisionId, ...]]
    discovered: tuple[RevisionId, ...]
    _ancestor_bits: dict[RevisionId, int] | None = field(default=None, repr=False)
    _positions: dict[RevisionId, int] | None = field(default=None, repr=False)

    def __len__(self) -> int:
        return len(self.discovered)

    def topological_order(self) -> list[RevisionId]:
        """Revisions ordered so every child precedes all of its parents.

        Kahn's algorithm over the reachable subgraph; among ready revisions
        the earliest discovered goes first so the order is reproducible.
        """
        discovery_index = {revision: index for index, revision in enumerate(self.discovered)}
        pending_children: dict[RevisionId, int] = dict.fromkeys(self.discovered, 0)
        for revision_parents in self.parents.values():
            for parent in revision_parents:
                pending_children[parent] += 1

        ready = [(discovery_index[revision], revision) for revision, count in pending_children.items() if count == 0]
        heapq.heapify(ready)
        ordered: list[RevisionId] = []
        while ready:
            _index, revision = heapq.heappop(ready)
            ordered.append(revision)
            for parent in self.parents[revision]:
                pending_children[parent] -= 1
                if pending_children[parent] == 0:
                    heapq.heappush(ready, (discovery_index[parent], parent))
        return ordered

    def _build_ancestor_bits(self) -> tuple[dict[RevisionId, int], dict[RevisionId, int]]:
        ordered = self.topological_order()
        positions = {revision: index for index, revision in enumerate(ordered)}
        bits: dict[RevisionId, int] = {}
        # Parents come after children in ``ordered``, so walk it backwards.
        for revision in reversed(ordered):
            mask = 0
            for parent in self.parents[revision]:
                mask |= bits[parent] | (1 << positions[parent])
            bits[revision] = mask
        self._ancestor_bits = bits
        self._positions = positions
        return bits, positions

    def is_proper_ancestor(self, candidate: RevisionId, descendant: RevisionId) -> bool:
        """True when ``candidate`` is reachable from ``descendant`` via parents."""
        bits, positions = self._ancestor_bits, self._positions
        if bits is None or positions is None:
            bits, positions = self._build_ancestor_bits()
        return bool((bits[descendant] >> positions[candidate]) & 1)


def collect_ancestry(
    backend: HistoryBackend,
    start: RevisionId,
    max_revisions: int | None = None,
    cancel_event: threading.Event | None = None,
) -> AncestryGraph:
    """Read every revision reachable from ``start`` exactly once."""
    parents: dict[RevisionId, tuple[RevisionId, ...]] = {}
    discovered: list[RevisionId] = []
    seen = {start}
    worklist = deque([start])
    while worklist:
        _check_cancelled(cancel_event)
        revision = worklist.popleft()
        discovered.append(revision)
        if max_revisions is not None and len(discovered) > max_revisions:
            raise HistoryLimitExceededError(max_revisions)
        revision_parents = tuple(backend.parents_of(revision))
        parents[revision] = revision_parents
        for parent in revision_parents:
            if parent not in seen:
                seen.add(parent)
                worklist.append(parent)
    logger.debug("collected %d revisions reachable from %s", len(discovered), start)
    return AncestryGraph(start=start, parents=parents, discovered=tuple(discovered))


@dataclass(frozen=True)
class ProvenanceIndex:
    """Attribution map plus the traversal it was built from.

    ``visited`` is the processing order; ``indexed`` holds the revisions
    where the path existed as a directory.
    """

    path: RepoPath
    attributions: Mapping[ObjectId, RevisionId]
    visited: tuple[RevisionId, ...]
    indexed: tuple[RevisionId, ...]

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self.attributions

    def __len__(self) -> int:
        return len(self.attributions)

    def get(self, fingerprint: ObjectId) -> RevisionId | None:
        return self.attributions.get(fingerprint)


def build_provenance_index(
    backend: HistoryBackend,
    start: RevisionId,
    names: RepoPath,
    *,
    max_revisions: int | None = None,
    cancel_event: threading.Event | None = None,
    strict_ancestry: bool = False,
) -> ProvenanceIndex:
    """Attribute every fingerprint seen directly under ``names`` in history.

    With ``strict_ancestry`` a stored attribution is only replaced by a
    revision that is a proper ancestor of it, so the result no longer depends
    on the order revisions are replayed in. Backend errors propagate and no
    partial index is returned.
    """
    graph = collect_ancestry(backend, start, max_revisions=max_revisions, cancel_event=cancel_event)
    ordered = graph.topological_order()

    attributions: dict[ObjectId, RevisionId] = {}
    indexed: list[RevisionId] = []
    for revision in ordered:
        _check_cancelled(cancel_event)
        directory = resolve_directory_at(backend, revision, names)
        if directory is None:
            logger.debug("%s: %r absent, skipped", revision, format_repo_path(names))
            continue
        indexed.append(revision)
        for entry in backend.directory_entries(directory):
            stored = attributions.get(entry.fingerprint)
            if stored is not None and strict_ancestry and not graph.is_proper_ancestor(revision, stored):
                continue
            attributions[entry.fingerprint] = revision

    logger.debug(
        "indexed %d fingerprints from %d of %d revisions",
        len(attributions),
        len(indexed),
        len(ordered),
    )
    return ProvenanceIndex(
        path=names,
        attributions=attributions,
        visited=tuple(ordered),
        indexed=tuple(indexed),
    )


__all__ = [
    "AncestryGraph",
    "collect_ancestry",
    "ProvenanceIndex",
    "build_provenance_index",
]
