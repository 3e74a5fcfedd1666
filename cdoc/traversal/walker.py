"""Depth-first traversal of a source tree.

Yields directory and file entries in pre-order with siblings sorted by
name, applying ignore rules before descending into a directory.
Per-entry failures are handed to an error callback and never abort the
walk.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from cdoc.errors import TraversalError
from cdoc.parsers.structure import EntryKind, SourceEntry
from cdoc.traversal.ignore import build_ignore_rules, is_ignored

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[TraversalError], None]
IgnoreCallback = Callable[[str], None]


def _log_error(error: TraversalError) -> None:
    logger.warning("Skipping %s: %s", error.path, error.reason)


def _describe(exc: OSError) -> str:
    if isinstance(exc, PermissionError):
        return "permission denied"
    return exc.strerror or str(exc)


class TreeWalker:
    """Enumerates the entries of a source directory.

    Args:
        source_dir: Root of the tree to walk.
        ignore_patterns: Glob-style patterns excluding entries.
        on_error: Called with a TraversalError for each skipped entry.
            Errors are logged as warnings when omitted.
        on_ignore: Called with the relative path of each ignored entry.
        exclude: Absolute paths skipped without reporting.
        follow_symlinks: Whether symbolic links are followed.
    """

    def __init__(
        self,
        source_dir: os.PathLike | str,
        ignore_patterns: Iterable[str] = (),
        on_error: Optional[ErrorCallback] = None,
        on_ignore: Optional[IgnoreCallback] = None,
        exclude: Iterable[os.PathLike | str] = (),
        follow_symlinks: bool = True,
    ) -> None:
        self.root = Path(os.path.abspath(source_dir))
        self.rules = build_ignore_rules(ignore_patterns)
        self.on_error = on_error or _log_error
        self.on_ignore = on_ignore
        self.exclude = {Path(os.path.abspath(p)) for p in exclude}
        self.follow_symlinks = follow_symlinks

    def walk(self) -> Iterator[SourceEntry]:
        """Yield every non-ignored entry below the root in pre-order."""
        try:
            root_stat = self.root.stat()
        except OSError as exc:
            self.on_error(TraversalError(".", _describe(exc)))
            return

        yield from self._walk_dir(self.root, "", frozenset({_inode(root_stat)}))

    def _walk_dir(
        self,
        directory: Path,
        rel_dir: str,
        ancestors: frozenset[tuple[int, int]],
    ) -> Iterator[SourceEntry]:
        try:
            with os.scandir(directory) as it:
                dirents = sorted(it, key=lambda d: d.name)
        except OSError as exc:
            self.on_error(TraversalError(rel_dir or ".", _describe(exc)))
            return

        for dirent in dirents:
            rel_path = f"{rel_dir}/{dirent.name}" if rel_dir else dirent.name
            path = Path(dirent.path)

            if path in self.exclude:
                logger.debug("Excluding %s from traversal", rel_path)
                continue

            if self.rules and is_ignored(rel_path, self.rules):
                logger.debug("Ignoring %s", rel_path)
                if self.on_ignore is not None:
                    self.on_ignore(rel_path)
                continue

            is_link = False
            try:
                is_link = dirent.is_symlink()
                if is_link and not self.follow_symlinks:
                    logger.debug("Not following symbolic link %s", rel_path)
                    continue
                entry_stat = dirent.stat(follow_symlinks=True)
            except OSError as exc:
                if is_link and isinstance(exc, FileNotFoundError):
                    reason = "broken symbolic link"
                else:
                    reason = _describe(exc)
                self.on_error(TraversalError(rel_path, reason))
                continue

            if stat.S_ISDIR(entry_stat.st_mode):
                key = _inode(entry_stat)
                if key in ancestors:
                    self.on_error(TraversalError(rel_path, "symbolic link cycle"))
                    continue
                yield SourceEntry(path, rel_path, EntryKind.DIRECTORY)
                yield from self._walk_dir(path, rel_path, ancestors | {key})
            elif stat.S_ISREG(entry_stat.st_mode):
                yield SourceEntry(path, rel_path, EntryKind.FILE)
            else:
                logger.debug("Skipping special file %s", rel_path)


def _inode(st: os.stat_result) -> tuple[int, int]:
    return (st.st_dev, st.st_ino)


def walk(
    source_dir: os.PathLike | str,
    ignore_patterns: Iterable[str] = (),
    on_error: Optional[ErrorCallback] = None,
    on_ignore: Optional[IgnoreCallback] = None,
    **kwargs: object,
) -> Iterator[SourceEntry]:
    """Walk a source tree, skipping ignored entries.

    Args:
        source_dir: Root of the tree to walk.
        ignore_patterns: Glob-style patterns excluding entries.
        on_error: Callback for per-entry traversal errors.
        on_ignore: Callback for ignored relative paths.
        **kwargs: Extra TreeWalker options (``exclude``,
            ``follow_symlinks``).

    Returns:
        A lazy, single-pass iterator of SourceEntry objects.
    """
    walker = TreeWalker(
        source_dir,
        ignore_patterns,
        on_error=on_error,
        on_ignore=on_ignore,
        **kwargs,  # type: ignore[arg-type]
    )
    return walker.walk()
