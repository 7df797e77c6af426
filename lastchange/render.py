"""Text rendering for annotated listings.

One row per entry: decorated name, abbreviated revision, summary message.
Name and revision columns are padded by display width so colored or wide
names stay aligned.
"""

from __future__ import annotations

from collections.abc import Sequence

from .ansi import display_width, pad_to_width, sanitize_terminal_text
from .object_model import AnnotatedEntry, EntryKind
from .ui_theme import PLAIN_THEME, UITheme

SHORT_REVISION_LENGTH = 12
COLUMN_GAP = "  "

_NAME_SUFFIX = {
    EntryKind.DIRECTORY: "/",
    EntryKind.REGULAR_FILE: "",
    EntryKind.EXECUTABLE_FILE: "*",
    EntryKind.SYMLINK: "@",
    EntryKind.SUBMODULE_LINK: " [submodule]",
}


def _name_color(kind: EntryKind, theme: UITheme) -> str:
    if kind is EntryKind.DIRECTORY:
        return theme.entry_dir
    if kind is EntryKind.EXECUTABLE_FILE:
        return theme.entry_executable
    if kind is EntryKind.SYMLINK:
        return theme.entry_symlink
    if kind is EntryKind.SUBMODULE_LINK:
        return theme.entry_submodule
    return theme.entry_file


def _paint(text: str, color: str, theme: UITheme) -> str:
    if not color or not text:
        return text
    return f"{color}{text}{theme.reset}"


def display_name(entry: AnnotatedEntry) -> str:
    return sanitize_terminal_text(entry.name) + _NAME_SUFFIX[entry.kind]


def format_revision(revision: str, full_hash: bool = False) -> str:
    return revision if full_hash else revision[:SHORT_REVISION_LENGTH]


def render_listing(
    entries: Sequence[AnnotatedEntry],
    theme: UITheme = PLAIN_THEME,
    full_hash: bool = False,
) -> str:
    """Render ``entries`` as aligned text rows, each ending in a newline."""
    if not entries:
        return ""

    names = [display_name(entry) for entry in entries]
    revisions = [format_revision(entry.attributed_revision, full_hash) for entry in entries]
    name_width = max(display_width(name) for name in names)
    revision_width = max(display_width(revision) for revision in revisions)

    out: list[str] = []
    for entry, name, revision in zip(entries, names, revisions):
        message = sanitize_terminal_text(entry.attributed_message)
        columns = [
            pad_to_width(_paint(name, _name_color(entry.kind, theme), theme), name_width),
            pad_to_width(_paint(revision, theme.revision, theme), revision_width),
        ]
        if message:
            columns.append(_paint(message, theme.message, theme))
        out.append(COLUMN_GAP.join(columns).rstrip() + "\n")
    return "".join(out)


__all__ = ["SHORT_REVISION_LENGTH", "display_name", "format_revision", "render_listing"]
