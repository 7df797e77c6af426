"""Public package surface for lastchange.

Exports ``build_listing`` (the provenance core) and ``main`` for
programmatic CLI invocation. Implementation lives in submodules.
"""

from __future__ import annotations

from .errors import InternalConsistencyError, LastChangeError
from .listing import build_listing
from .object_model import AnnotatedEntry, DirectoryEntry, EntryKind


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "main",
    "build_listing",
    "AnnotatedEntry",
    "DirectoryEntry",
    "EntryKind",
    "LastChangeError",
    "InternalConsistencyError",
]
