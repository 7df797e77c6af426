"""Tests for ancestry traversal and oldest-revision attribution."""

from __future__ import annotations

import threading
import unittest
from unittest import mock

from lastchange.backend.memory import MemoryBackend
from lastchange.errors import HistoryLimitExceededError, TraversalCancelledError
from lastchange.paths import resolve_directory
from lastchange.provenance import build_provenance_index, collect_ancestry


def _entries(backend: MemoryBackend, revision: str, names: tuple[str, ...] = ()) -> dict[str, str]:
    directory = resolve_directory(backend, backend.root_directory_of(revision), names)
    return {entry.name: entry.fingerprint for entry in backend.directory_entries(directory)}


class LinearHistoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = MemoryBackend()
        self.r0 = self.backend.commit({"f.txt": "v1", "g.txt": "v1"}, message="R0")
        self.r1 = self.backend.commit({"f.txt": "v1", "g.txt": "v1", "h.txt": "new"}, [self.r0], "R1")
        self.r2 = self.backend.commit({"f.txt": "v2", "g.txt": "v1", "h.txt": "new"}, [self.r1], "R2")

    def test_changed_content_is_attributed_to_changing_revision(self) -> None:
        index = build_provenance_index(self.backend, self.r2, ())
        current = _entries(self.backend, self.r2)
        self.assertEqual(index.get(current["f.txt"]), self.r2)

    def test_unchanged_sibling_keeps_oldest_attribution(self) -> None:
        index = build_provenance_index(self.backend, self.r2, ())
        current = _entries(self.backend, self.r2)
        self.assertEqual(index.get(current["g.txt"]), self.r0)
        self.assertEqual(index.get(current["h.txt"]), self.r1)

    def test_index_covers_every_live_fingerprint(self) -> None:
        index = build_provenance_index(self.backend, self.r2, ())
        for name, fingerprint in _entries(self.backend, self.r2).items():
            with self.subTest(name=name):
                self.assertIn(fingerprint, index)

    def test_starting_from_older_revision_ignores_newer_history(self) -> None:
        index = build_provenance_index(self.backend, self.r1, ())
        self.assertEqual(index.visited, (self.r1, self.r0))
        self.assertNotIn(_entries(self.backend, self.r2)["f.txt"], index)

    def test_visit_order_is_children_before_parents(self) -> None:
        index = build_provenance_index(self.backend, self.r2, ())
        self.assertEqual(index.visited, (self.r2, self.r1, self.r0))

    def test_reverted_content_keeps_original_attribution(self) -> None:
        r3 = self.backend.commit({"f.txt": "v1", "g.txt": "v1", "h.txt": "new"}, [self.r2], "revert f")
        index = build_provenance_index(self.backend, r3, ())
        self.assertEqual(index.get(_entries(self.backend, r3)["f.txt"]), self.r0)


class MergeTopologyTests(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = MemoryBackend()
        self.base = self.backend.commit({"shared": "base"}, message="base")
        self.left = self.backend.commit({"shared": "base", "left": "L"}, [self.base], "left")
        self.right = self.backend.commit({"shared": "base", "right": "R"}, [self.base], "right")
        self.merge = self.backend.commit(
            {"shared": "base", "left": "L", "right": "R"},
            [self.left, self.right],
            "merge",
        )

    def test_diamond_visits_each_revision_once(self) -> None:
        index = build_provenance_index(self.backend, self.merge, ())
        self.assertEqual(len(index.visited), 4)
        self.assertEqual(set(index.visited), {self.base, self.left, self.right, self.merge})
        self.assertEqual(set(self.backend.parent_reads.values()), {1})

    def test_shared_ancestor_comes_after_both_branches(self) -> None:
        order = collect_ancestry(self.backend, self.merge).topological_order()
        self.assertEqual(order[0], self.merge)
        self.assertEqual(order[-1], self.base)

    def test_branch_content_is_attributed_to_its_branch(self) -> None:
        index = build_provenance_index(self.backend, self.merge, ())
        current = _entries(self.backend, self.merge)
        self.assertEqual(index.get(current["shared"]), self.base)
        self.assertEqual(index.get(current["left"]), self.left)
        self.assertEqual(index.get(current["right"]), self.right)

    def test_long_side_branch_still_yields_topological_order(self) -> None:
        backend = MemoryBackend()
        root = backend.commit({"f": "0"}, message="root")
        side = root
        for step in range(5):
            side = backend.commit({"f": "0", "side": str(step)}, [side], f"side {step}")
        main = backend.commit({"f": "0", "main": "m"}, [root], "main")
        merge = backend.commit({"f": "0", "side": "4", "main": "m"}, [main, side], "merge")

        graph = collect_ancestry(backend, merge)
        order = graph.topological_order()
        position = {revision: index for index, revision in enumerate(order)}
        for revision, parents in graph.parents.items():
            for parent in parents:
                self.assertLess(position[revision], position[parent])
        index = build_provenance_index(backend, merge, ())
        self.assertEqual(index.get(_entries(backend, merge)["f"]), root)


class IndependentIntroductionTests(unittest.TestCase):
    """Same content added on two unrelated branches of an empty root."""

    def setUp(self) -> None:
        self.backend = MemoryBackend()
        self.root = self.backend.commit({}, message="root")
        self.first = self.backend.commit({"f": "x"}, [self.root], "first")
        self.second = self.backend.commit({"f": "x"}, [self.root], "second")
        self.merge = self.backend.commit({"f": "x"}, [self.first, self.second], "merge")
        self.fingerprint = _entries(self.backend, self.merge)["f"]

    def test_overwrite_mode_keeps_last_replayed_branch(self) -> None:
        index = build_provenance_index(self.backend, self.merge, ())
        self.assertEqual(index.get(self.fingerprint), self.second)

    def test_strict_ancestry_only_moves_to_proper_ancestors(self) -> None:
        index = build_provenance_index(self.backend, self.merge, (), strict_ancestry=True)
        self.assertEqual(index.get(self.fingerprint), self.first)

    def test_ancestor_queries(self) -> None:
        graph = collect_ancestry(self.backend, self.merge)
        self.assertTrue(graph.is_proper_ancestor(self.root, self.merge))
        self.assertTrue(graph.is_proper_ancestor(self.first, self.merge))
        self.assertFalse(graph.is_proper_ancestor(self.first, self.second))
        self.assertFalse(graph.is_proper_ancestor(self.merge, self.merge))

    def test_ancestor_bits_are_built_once(self) -> None:
        graph = collect_ancestry(self.backend, self.merge)
        with mock.patch.object(graph, "topological_order", wraps=graph.topological_order) as order:
            self.assertTrue(graph.is_proper_ancestor(self.root, self.second))
            self.assertFalse(graph.is_proper_ancestor(self.second, self.first))
        self.assertEqual(order.call_count, 1)

    def test_strict_mode_agrees_on_linear_history(self) -> None:
        backend = MemoryBackend()
        a = backend.commit({"f": "1", "g": "1"}, message="a")
        b = backend.commit({"f": "2", "g": "1"}, [a], "b")
        loose = build_provenance_index(backend, b, ())
        strict = build_provenance_index(backend, b, (), strict_ancestry=True)
        self.assertEqual(dict(loose.attributions), dict(strict.attributions))


class MissingPathTests(unittest.TestCase):
    def test_revisions_without_path_contribute_nothing(self) -> None:
        backend = MemoryBackend()
        r0 = backend.commit({"README": "hi"}, message="R0")
        r1 = backend.commit({"README": "hi", "dir": {"x": "1"}}, [r0], "R1")
        r2 = backend.commit({"README": "hi", "dir": {"x": "1", "y": "2"}}, [r1], "R2")

        index = build_provenance_index(backend, r2, ("dir",))
        self.assertEqual(index.visited, (r2, r1, r0))
        self.assertEqual(index.indexed, (r2, r1))
        current = _entries(backend, r2, ("dir",))
        self.assertEqual(index.get(current["x"]), r1)
        self.assertEqual(index.get(current["y"]), r2)

    def test_path_that_was_a_file_earlier_is_skipped(self) -> None:
        backend = MemoryBackend()
        r0 = backend.commit({"dir": "was a file"}, message="R0")
        r1 = backend.commit({"dir": {"x": "1"}}, [r0], "R1")
        index = build_provenance_index(backend, r1, ("dir",))
        self.assertEqual(index.indexed, (r1,))

    def test_deleted_and_recreated_directory(self) -> None:
        backend = MemoryBackend()
        r0 = backend.commit({"dir": {"x": "1"}}, message="R0")
        r1 = backend.commit({}, [r0], "R1")
        r2 = backend.commit({"dir": {"x": "1"}}, [r1], "R2")
        index = build_provenance_index(backend, r2, ("dir",))
        self.assertEqual(index.indexed, (r2, r0))
        self.assertEqual(index.get(_entries(backend, r2, ("dir",))["x"]), r0)


class TraversalLimitTests(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = MemoryBackend()
        head = self.backend.commit({"f": "0"}, message="0")
        for step in range(1, 4):
            head = self.backend.commit({"f": str(step)}, [head], str(step))
        self.head = head

    def test_max_revisions_aborts_large_histories(self) -> None:
        with self.assertRaises(HistoryLimitExceededError) as ctx:
            build_provenance_index(self.backend, self.head, (), max_revisions=2)
        self.assertEqual(ctx.exception.limit, 2)

    def test_max_revisions_equal_to_history_size_is_allowed(self) -> None:
        index = build_provenance_index(self.backend, self.head, (), max_revisions=4)
        self.assertEqual(len(index.visited), 4)

    def test_cancel_event_stops_traversal(self) -> None:
        cancel = threading.Event()
        cancel.set()
        with self.assertRaises(TraversalCancelledError):
            build_provenance_index(self.backend, self.head, (), cancel_event=cancel)


if __name__ == "__main__":
    unittest.main()
