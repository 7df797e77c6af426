"""History backend backed by the ``git`` command-line tool.

Commits are read with ``git cat-file commit`` and trees with
``git ls-tree -z``. Parsed objects are memoized per backend instance: git
objects are immutable, so a cached read never goes stale.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import logging
import subprocess
from pathlib import Path

from ..errors import BackendReadError, NotARepositoryError, RevisionNotFoundError
from ..object_model import DirectoryEntry, ObjectId, RevisionId, classify_mode

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
TREE_CACHE_MAX = 4096


@dataclass(frozen=True)
class CommitRecord:
    """Parsed commit headers plus message."""

    tree: ObjectId
    parents: tuple[RevisionId, ...]
    message: str


def _git_command(repo_root: Path, args: list[str]) -> list[str]:
    return ["git", "-C", str(repo_root), *args]


def _run_git(
    repo_root: Path,
    args: list[str],
    timeout_seconds: float,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute a git subcommand, turning every failure into ``BackendReadError``.

    With ``check=False`` a non-zero exit status is returned to the caller
    instead of raising; launch failures and timeouts always raise.
    """
    command = _git_command(repo_root, args)
    logger.debug("running %s", " ".join(command))
    try:
        proc = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            check=False,
            timeout=timeout_seconds,
        )
    except subprocess.TimeoutExpired as exc:
        raise BackendReadError(f"git {args[0]} timed out after {timeout_seconds}s") from exc
    except OSError as exc:
        raise BackendReadError(f"could not run git {args[0]}", str(exc)) from exc
    if check and proc.returncode != 0:
        raise BackendReadError(f"git {args[0]} exited with status {proc.returncode}", proc.stderr)
    return proc


def discover_repository(path: Path, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> Path:
    """Return the work-tree root containing ``path``.

    Raises :class:`NotARepositoryError` when ``path`` is not inside a git
    work tree.
    """
    probe = path if path.is_dir() else path.parent
    proc = _run_git(probe, ["rev-parse", "--show-toplevel"], timeout_seconds, check=False)
    toplevel = proc.stdout.strip()
    if proc.returncode != 0 or not toplevel:
        raise NotARepositoryError(str(path))
    return Path(toplevel).resolve()


def parse_commit(raw: str) -> CommitRecord:
    """Parse ``git cat-file commit`` output.

    Headers end at the first blank line; continuation lines (signatures)
    start with a space and are ignored.
    """
    header, _sep, message = raw.partition("\n\n")
    tree = ""
    parents: list[RevisionId] = []
    for line in header.splitlines():
        if line.startswith("tree "):
            tree = line[5:].strip()
        elif line.startswith("parent "):
            parents.append(line[7:].strip())
    if not tree:
        raise BackendReadError("malformed commit object", "missing tree header")
    return CommitRecord(tree=tree, parents=tuple(parents), message=message)


def summary_of_message(message: str) -> str:
    """First paragraph of a commit message folded onto one line, as ``%s`` does."""
    lines: list[str] = []
    for line in message.strip().splitlines():
        if not line.strip():
            break
        lines.append(line.strip())
    return " ".join(lines)


def parse_ls_tree(output: str) -> dict[str, DirectoryEntry]:
    """Parse ``git ls-tree -z`` records into entries keyed by name."""
    entries: dict[str, DirectoryEntry] = {}
    for record in output.split("\0"):
        if not record:
            continue
        meta, tab, name = record.partition("\t")
        parts = meta.split()
        if not tab or len(parts) != 3:
            raise BackendReadError("malformed ls-tree record", record)
        mode_text, _object_type, object_id = parts
        try:
            mode = int(mode_text, 8)
        except ValueError as exc:
            raise BackendReadError("malformed ls-tree mode", mode_text) from exc
        entries[name] = DirectoryEntry(name=name, kind=classify_mode(mode), fingerprint=object_id)
    return entries


class GitBackend:
    """``HistoryBackend`` reading from a local git repository."""

    def __init__(self, repo_root: Path, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.repo_root = Path(repo_root)
        self.timeout_seconds = timeout_seconds
        self._commits: dict[RevisionId, CommitRecord] = {}
        self._trees: OrderedDict[ObjectId, dict[str, DirectoryEntry]] = OrderedDict()

    @classmethod
    def discover(cls, path: Path, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> "GitBackend":
        return cls(discover_repository(path, timeout_seconds), timeout_seconds)

    def _git(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess[str]:
        return _run_git(self.repo_root, args, self.timeout_seconds, check=check)

    def resolve_revision(self, spec: str) -> RevisionId:
        if not spec or spec.startswith("-"):
            raise RevisionNotFoundError(spec)
        proc = self._git(["rev-parse", "--verify", "--quiet", f"{spec}^{{commit}}"], check=False)
        revision = proc.stdout.strip()
        if proc.returncode != 0 or not revision:
            raise RevisionNotFoundError(spec)
        return revision

    def _commit(self, revision: RevisionId) -> CommitRecord:
        record = self._commits.get(revision)
        if record is None:
            proc = self._git(["cat-file", "commit", revision])
            record = parse_commit(proc.stdout)
            self._commits[revision] = record
        return record

    def _tree(self, object_id: ObjectId) -> dict[str, DirectoryEntry]:
        cached = self._trees.get(object_id)
        if cached is not None:
            self._trees.move_to_end(object_id)
            return cached
        proc = self._git(["ls-tree", "-z", object_id])
        entries = parse_ls_tree(proc.stdout)
        self._trees[object_id] = entries
        while len(self._trees) > TREE_CACHE_MAX:
            self._trees.popitem(last=False)
        return entries

    def root_directory_of(self, revision: RevisionId) -> ObjectId:
        return self._commit(revision).tree

    def parents_of(self, revision: RevisionId) -> tuple[RevisionId, ...]:
        return self._commit(revision).parents

    def directory_entries(self, object_id: ObjectId) -> tuple[DirectoryEntry, ...]:
        return tuple(self._tree(object_id).values())

    def descend(self, object_id: ObjectId, name: str) -> DirectoryEntry | None:
        return self._tree(object_id).get(name)

    def summary_message_of(self, revision: RevisionId) -> str:
        return summary_of_message(self._commit(revision).message)


__all__ = [
    "CommitRecord",
    "GitBackend",
    "discover_repository",
    "parse_commit",
    "parse_ls_tree",
    "summary_of_message",
]
