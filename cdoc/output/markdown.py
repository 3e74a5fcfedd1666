"""Markdown rendering and mirrored output writing.

Renders each DocNode through a Jinja2 template into a Markdown
document whose path mirrors the source file's relative path, and
writes artifacts under the target directory with an atomic replace.
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
import tempfile
from pathlib import Path, PurePosixPath
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from cdoc.errors import WriteError
from cdoc.parsers.structure import DocNode, OutputArtifact

logger = logging.getLogger(__name__)

_DEFAULT_TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
_DOCUMENT_TEMPLATE = "document.md.j2"

_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


class MarkdownRenderer:
    """Renders documentation nodes as Markdown artifacts.

    Each block becomes a second-level heading built from its summary,
    followed by the documented declaration, the body prose and a
    ``- name: value`` list of tags. Nodes without blocks render a
    placeholder so every source file gets a page.
    """

    def __init__(
        self,
        extension: str = ".md",
        placeholder: str = "No documentation found.",
        templates_dir: Optional[str] = None,
    ) -> None:
        """Initialize the renderer.

        Args:
            extension: Extension substituted for the source extension.
            placeholder: Text rendered for files without documentation.
            templates_dir: Directory holding document.md.j2. Uses the
                bundled templates if not specified.
        """
        self.extension = extension
        self.placeholder = placeholder
        templates_path = Path(templates_dir) if templates_dir else _DEFAULT_TEMPLATES_DIR
        self._env = Environment(
            loader=FileSystemLoader(str(templates_path)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            autoescape=False,
        )
        logger.debug("Markdown renderer using templates in %s", templates_path)

    def output_path(self, relative_path: str) -> str:
        """Map a source relative path to its documentation path.

        Args:
            relative_path: POSIX-style path relative to the source root.

        Returns:
            The same path with its extension replaced.
        """
        rel = PurePosixPath(relative_path)
        stem = rel.stem if rel.suffix else rel.name
        return str(rel.with_name(stem + self.extension))

    def render(self, node: DocNode) -> OutputArtifact:
        """Render a documentation node into an output artifact.

        Args:
            node: The node to render; may have zero blocks.

        Returns:
            The artifact, with its mirrored relative path and content.
        """
        template = self._env.get_template(_DOCUMENT_TEMPLATE)
        content = template.render(
            path=node.entry.relative_path,
            blocks=node.blocks,
            placeholder=self.placeholder,
        )
        content = _EXTRA_BLANK_LINES.sub("\n\n", content).rstrip() + "\n"

        return OutputArtifact(
            source=node.entry,
            relative_path=self.output_path(node.entry.relative_path),
            content=content,
        )


class ArtifactWriter:
    """Writes artifacts under a target directory.

    Intermediate directories are created as needed, each file is
    written to a temporary sibling and moved into place, and two
    artifacts from different sources may not claim the same path in one
    run: the first one wins and the second raises WriteError.
    """

    def __init__(self, target_dir: str | os.PathLike) -> None:
        """Initialize the writer.

        Args:
            target_dir: Root of the documentation tree.
        """
        self.target_dir = Path(os.path.abspath(target_dir))
        self._claimed: dict[Path, str] = {}

    def write(
        self, artifact: OutputArtifact, target_dir: Optional[str | os.PathLike] = None
    ) -> Path:
        """Write an artifact to its mirrored path.

        Args:
            artifact: The rendered artifact.
            target_dir: Root to write under; defaults to the writer's
                target directory.

        Returns:
            Absolute path of the written file.

        Raises:
            WriteError: If the path escapes the target directory,
                collides with another source's output, or cannot be
                written.
        """
        root = Path(os.path.abspath(target_dir)) if target_dir else self.target_dir
        final = artifact.target_path(root)

        owner = self._claimed.get(final)
        if owner is not None and owner != artifact.source.relative_path:
            raise WriteError(
                artifact.relative_path, f"output path already written for {owner}"
            )

        try:
            final.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(final, artifact.content.encode("utf-8"))
        except OSError as e:
            raise WriteError(artifact.relative_path, e.strerror or str(e)) from e

        self._claimed[final] = artifact.source.relative_path
        logger.debug("Wrote %s", final)
        return final


def atomic_write(path: Path, data: bytes) -> None:
    """Write bytes to a path so that it is either fully written or untouched.

    Args:
        path: Final file path; its directory must exist.
        data: Complete file content.

    Raises:
        OSError: If the temporary file cannot be written or moved.
    """
    fd, tmp_name = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise
