"""Data models shared by the walker, extractors and renderers.

Defines dataclasses for source entries, documentation tags, blocks,
per-file documentation nodes and rendered output artifacts. These
models form the shared vocabulary between pipeline stages.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any, Optional

from cdoc.errors import WriteError


class EntryKind(str, Enum):
    """Kinds of filesystem entries produced by the walker."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class SourceEntry:
    """A file or directory encountered during traversal.

    Attributes:
        path: Absolute filesystem path of the entry.
        relative_path: POSIX-style path relative to the source directory.
        kind: Whether the entry is a file or a directory.
    """

    path: Path
    relative_path: str
    kind: EntryKind = EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary.

        Returns:
            Dictionary representation of this entry.
        """
        return {
            "path": str(self.path),
            "relative_path": self.relative_path,
            "kind": self.kind.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SourceEntry:
        """Deserialize from a dictionary.

        Args:
            data: Dictionary with entry fields.

        Returns:
            A new SourceEntry instance.
        """
        return cls(
            path=Path(data["path"]),
            relative_path=data["relative_path"],
            kind=EntryKind(data.get("kind", "file")),
        )


@dataclass
class Tag:
    """A single ``@name value`` annotation inside a documentation block."""

    name: str
    value: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        return cls(name=data["name"], value=data.get("value", ""))


@dataclass
class DocBlock:
    """One extracted unit of documentation.

    Attributes:
        summary: First line of the block.
        body: Remaining free text, with tag lines removed.
        tags: Tag annotations in the order they were encountered. Names
            may repeat.
        declaration: Name of the declaration the block documents, if any.
        line_number: 1-based line where the block starts.
    """

    summary: str = ""
    body: str = ""
    tags: list[Tag] = field(default_factory=list)
    declaration: Optional[str] = None
    line_number: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary.

        Returns:
            Dictionary representation of this block.
        """
        return {
            "summary": self.summary,
            "body": self.body,
            "tags": [t.to_dict() for t in self.tags],
            "declaration": self.declaration,
            "line_number": self.line_number,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocBlock:
        """Deserialize from a dictionary.

        Args:
            data: Dictionary with block fields.

        Returns:
            A new DocBlock instance.
        """
        return cls(
            summary=data.get("summary", ""),
            body=data.get("body", ""),
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
            declaration=data.get("declaration"),
            line_number=data.get("line_number", 0),
        )


@dataclass
class DocNode:
    """Documentation extracted from one source file.

    A file without documentation still yields a node, with an empty
    block list.

    Attributes:
        entry: The source entry the node was extracted from.
        blocks: Documentation blocks in source order.
        syntax: Name of the comment syntax used for extraction.
        warnings: Recoverable extraction problems, such as a comment
            left open at end of file.
    """

    entry: SourceEntry
    blocks: list[DocBlock] = field(default_factory=list)
    syntax: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary.

        Returns:
            Dictionary representation of this node.
        """
        return {
            "entry": self.entry.to_dict(),
            "blocks": [b.to_dict() for b in self.blocks],
            "syntax": self.syntax,
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocNode:
        """Deserialize from a dictionary.

        Args:
            data: Dictionary with node fields.

        Returns:
            A new DocNode instance.
        """
        return cls(
            entry=SourceEntry.from_dict(data["entry"]),
            blocks=[DocBlock.from_dict(b) for b in data.get("blocks", [])],
            syntax=data.get("syntax"),
            warnings=list(data.get("warnings", [])),
        )


@dataclass
class OutputArtifact:
    """Rendered documentation for one source file.

    Attributes:
        source: The entry the artifact was rendered from.
        relative_path: POSIX-style output path relative to the target
            directory.
        content: Rendered document text.
    """

    source: SourceEntry
    relative_path: str
    content: str

    def target_path(self, target_dir: Path) -> Path:
        """Resolve the artifact's final path under a target directory.

        Args:
            target_dir: Root of the documentation tree.

        Returns:
            Absolute path of the output file.

        Raises:
            WriteError: If the path would fall outside target_dir.
        """
        root = Path(os.path.abspath(target_dir))
        rel = PurePosixPath(self.relative_path)
        if rel.is_absolute() or ".." in rel.parts or not rel.parts:
            raise WriteError(self.relative_path, "output path escapes target directory")

        final = Path(os.path.normpath(root.joinpath(*rel.parts)))
        if final == root or root not in final.parents:
            raise WriteError(self.relative_path, "output path escapes target directory")
        return final
