"""Documentation generation pipeline.

``process_dir`` validates its inputs, walks the source tree and, for
every file, extracts documentation, renders it and writes
the artifact to the mirrored path under the target directory. Files
are handled one at a time, so progress events arrive in traversal
order. Per-file failures are reported and counted; only invalid
inputs abort the run.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from cdoc.errors import ConfigurationError, EntryError, TraversalError
from cdoc.output.markdown import ArtifactWriter, MarkdownRenderer
from cdoc.parsers.extractor import DocExtractor
from cdoc.parsers.structure import SourceEntry
from cdoc.parsers.syntax import SyntaxTable
from cdoc.pipeline.progress import (
    EntryCompleted,
    EntryFailed,
    EntryIgnored,
    EntryStarted,
    ProgressReporter,
    RunCompleted,
    make_reporter,
)
from cdoc.traversal.walker import TreeWalker
from cdoc.utils.config import AppConfig

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Outcome of one pipeline run.

    Attributes:
        processed: Files whose documentation was written.
        failed: Entries that failed to traverse, read or write.
        ignored: Entries excluded by ignore patterns.
        failures: ``(path, reason)`` for each failed entry, in order.
    """

    processed: int = 0
    failed: int = 0
    ignored: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.failed == 0


class DocProcessor:
    """Runs extraction, rendering and writing over a source tree."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        reporter: Optional[ProgressReporter] = None,
    ) -> None:
        """Initialize the processor.

        Args:
            config: Application configuration; defaults are used if omitted.
            reporter: Progress observer; a quiet reporter if omitted.
        """
        self.config = config or AppConfig()
        self.reporter = reporter or make_reporter(False)
        self.syntax_table = SyntaxTable(
            self.config.parser.extensions, default=self.config.parser.default_syntax
        )
        self.extractor = DocExtractor(
            syntax_table=self.syntax_table, tag_marker=self.config.parser.tag_marker
        )
        self.renderer = MarkdownRenderer(
            extension=self.config.output.extension,
            placeholder=self.config.output.placeholder,
        )

    def run(
        self, source_dir: Path, target_dir: Path, ignore_patterns: Sequence[str] = ()
    ) -> RunSummary:
        """Process every file below source_dir.

        Args:
            source_dir: Validated, absolute source directory.
            target_dir: Validated, absolute target directory.
            ignore_patterns: Patterns added to the configured ones.

        Returns:
            Counts of processed, failed and ignored entries.
        """
        summary = RunSummary()
        writer = ArtifactWriter(target_dir)
        patterns = [*self.config.traversal.ignore, *ignore_patterns]

        def on_error(error: TraversalError) -> None:
            self._fail(summary, error)

        def on_ignore(rel_path: str) -> None:
            summary.ignored += 1
            self.reporter.report(EntryIgnored(rel_path))

        exclude = [target_dir] if source_dir in target_dir.parents else []
        walker = TreeWalker(
            source_dir,
            patterns,
            on_error=on_error,
            on_ignore=on_ignore,
            exclude=exclude,
            follow_symlinks=self.config.traversal.follow_symlinks,
        )

        for entry in walker.walk():
            if entry.is_dir:
                continue
            self._process_file(entry, writer, summary)

        self.reporter.report(RunCompleted(summary.processed, summary.failed))
        logger.info(
            "Processed %d files from %s (%d failed, %d ignored)",
            summary.processed,
            source_dir,
            summary.failed,
            summary.ignored,
        )
        return summary

    def _process_file(
        self, entry: SourceEntry, writer: ArtifactWriter, summary: RunSummary
    ) -> None:
        self.reporter.report(EntryStarted(entry.relative_path))
        try:
            contents = read_source(entry)
            node = self.extractor.extract(entry.relative_path, contents, entry=entry)
            if node.is_empty:
                logger.debug("No documentation in %s", entry.relative_path)
            artifact = self.renderer.render(node)
            writer.write(artifact)
        except EntryError as e:
            self._fail(summary, e)
            return

        summary.processed += 1
        self.reporter.report(EntryCompleted(entry.relative_path, artifact.relative_path))

    def _fail(self, summary: RunSummary, error: EntryError) -> None:
        logger.warning("Skipping %s: %s", error.path, error.reason)
        summary.failed += 1
        summary.failures.append((error.path, error.reason))
        self.reporter.report(EntryFailed(error.path, error.reason))


def read_source(entry: SourceEntry) -> str:
    """Read a source file as text.

    Undecodable bytes are replaced rather than rejected and a UTF-8
    byte order mark is dropped.

    Args:
        entry: File entry to read.

    Returns:
        The file's text.

    Raises:
        TraversalError: If the file cannot be read.
    """
    try:
        data = entry.path.read_bytes()
    except OSError as e:
        reason = "permission denied" if isinstance(e, PermissionError) else (e.strerror or str(e))
        raise TraversalError(entry.relative_path, reason) from e
    return data.decode("utf-8-sig", errors="replace")


def _validate_dirs(source_dir: str | os.PathLike, target_dir: str | os.PathLike) -> tuple[Path, Path]:
    """Check run inputs before anything is written.

    Raises:
        ConfigurationError: If the source is missing or not a directory,
            or the target exists but is not a directory, or both name
            the same directory.
    """
    if source_dir is None or str(source_dir) == "":
        raise ConfigurationError("Source directory is required")
    if target_dir is None or str(target_dir) == "":
        raise ConfigurationError("Target directory is required")

    source = Path(os.path.abspath(source_dir))
    target = Path(os.path.abspath(target_dir))

    if not source.exists():
        raise ConfigurationError(f"Source directory does not exist: {source_dir}")
    if not source.is_dir():
        raise ConfigurationError(f"Source path is not a directory: {source_dir}")
    if target.exists() and not target.is_dir():
        raise ConfigurationError(f"Target path is not a directory: {target_dir}")
    if os.path.realpath(source) == os.path.realpath(target):
        raise ConfigurationError("Source and target directories must differ")
    return source, target


def process_dir(
    source_dir: str | os.PathLike,
    target_dir: str | os.PathLike,
    ignore_patterns: Sequence[str] = (),
    reporter: Optional[ProgressReporter] = None,
    verbose: bool = True,
    config: Optional[AppConfig] = None,
) -> RunSummary:
    """Generate mirrored documentation for a source tree.

    Args:
        source_dir: Directory to document.
        target_dir: Directory receiving the documentation tree; created
            if missing.
        ignore_patterns: Glob-style patterns excluding entries.
        reporter: Progress observer. When omitted, one is chosen from
            ``verbose``.
        verbose: Whether progress is printed; ignored if a reporter is
            given.
        config: Application configuration; defaults if omitted.

    Returns:
        Summary of the run, including per-entry failures.

    Raises:
        ConfigurationError: If the directories are invalid or the target
            cannot be created. Nothing is written in that case.
    """
    source, target = _validate_dirs(source_dir, target_dir)
    processor = DocProcessor(config=config, reporter=reporter or make_reporter(verbose))

    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"Cannot create target directory {target_dir}: {e}") from e

    logger.debug("Generating documentation from %s into %s", source, target)
    return processor.run(source, target, list(ignore_patterns))
