"""Command-line front door for lastchange.

``lastchange glcm [PATH]`` lists the entries of PATH with the commit each
one is attributed to. ``lastchange config`` shows or updates persisted
defaults.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import config
from .backend.git import GitBackend
from .errors import LastChangeError
from .listing import build_listing
from .paths import repo_relative_path
from .render import render_listing
from .ui_theme import available_theme_names, resolve_theme

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lastchange",
        description="Show the commit that last changed each entry of a directory.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log traversal details to stderr.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    glcm = subparsers.add_parser("glcm", help="Get latest commit modifying a given file or directory.")
    glcm.add_argument("path", nargs="?", default=None, help="File or directory. Defaults to current directory.")
    glcm.add_argument("--rev", default=None, help="Starting revision (default: config default_revision or HEAD).")
    glcm.add_argument("-C", "--repo", default=None, help="Run as if started in this directory.")
    glcm.add_argument(
        "--max-revisions",
        type=_positive_int,
        default=None,
        help="Abort when the history holds more revisions than this.",
    )
    glcm.add_argument(
        "--strict-ancestry",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Only move an attribution to a proper ancestor of the stored revision.",
    )
    glcm.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    glcm.add_argument(
        "--theme",
        default=None,
        help=f"Color theme ({', '.join(available_theme_names())}).",
    )
    glcm.add_argument("--full-hash", action="store_true", help="Print full revision ids.")

    config_parser = subparsers.add_parser("config", help="Show or update persisted defaults.")
    config_parser.add_argument("--default-rev", default=None, help="Persist the default starting revision.")
    config_parser.add_argument("--theme", default=None, help="Persist the color theme.")
    return parser


def _checked_theme_name(name: str) -> str:
    normalized = name.strip().lower()
    if normalized not in available_theme_names():
        raise SystemExit(f"Unknown theme: {name}")
    return normalized


def run_glcm(args: argparse.Namespace, default_path: Path) -> None:
    settings = config.load_settings()
    theme_name = _checked_theme_name(args.theme) if args.theme is not None else settings.theme
    base = (Path(args.repo) if args.repo is not None else default_path).resolve()
    # Symlinks below ``base`` are repository entries; keep them unresolved.
    target = base / args.path if args.path is not None else base

    backend = GitBackend.discover(base, settings.git_timeout_seconds)
    names = repo_relative_path(target, backend.repo_root)
    revision = args.rev or settings.default_revision
    strict = settings.strict_ancestry if args.strict_ancestry is None else args.strict_ancestry
    max_revisions = args.max_revisions if args.max_revisions is not None else settings.max_revisions
    logger.debug("repository %s, path %r, revision %s", backend.repo_root, "/".join(names), revision)

    entries = build_listing(
        backend,
        revision,
        names,
        max_revisions=max_revisions,
        strict_ancestry=strict,
    )
    no_color = args.no_color or not sys.stdout.isatty()
    theme = resolve_theme(theme_name, no_color=no_color)
    sys.stdout.write(render_listing(entries, theme, full_hash=args.full_hash))


def run_config(args: argparse.Namespace) -> None:
    if args.default_rev is not None:
        config.save_default_revision(args.default_rev)
    if args.theme is not None:
        config.save_theme_name(_checked_theme_name(args.theme))

    settings = config.load_settings()
    sys.stdout.write(f"config_path: {config.CONFIG_PATH}\n")
    sys.stdout.write(f"default_revision: {settings.default_revision}\n")
    sys.stdout.write(f"git_timeout_seconds: {settings.git_timeout_seconds:g}\n")
    sys.stdout.write(f"max_revisions: {settings.max_revisions if settings.max_revisions is not None else '-'}\n")
    sys.stdout.write(f"strict_ancestry: {str(settings.strict_ancestry).lower()}\n")
    sys.stdout.write(f"theme: {settings.theme or 'default'}\n")


def main(default_path: Path | None = None) -> None:
    """Parse CLI arguments and dispatch the selected subcommand.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used. User-facing failures exit with a one-line message.
    """
    args = _build_parser().parse_args()
    _configure_logging(args.verbose)
    if default_path is None:
        default_path = Path.cwd()

    try:
        if args.command == "glcm":
            run_glcm(args, default_path)
        else:
            run_config(args)
    except LastChangeError as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
