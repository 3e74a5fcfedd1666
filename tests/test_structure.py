"""Tests for documentation data models and serialization."""

import json
from pathlib import Path

import pytest

from cdoc.errors import WriteError
from cdoc.parsers.structure import (
    DocBlock,
    DocNode,
    EntryKind,
    OutputArtifact,
    SourceEntry,
    Tag,
)


def _entry(rel: str = "a/b.js", kind: EntryKind = EntryKind.FILE) -> SourceEntry:
    return SourceEntry(Path("/src") / rel, rel, kind)


class TestSourceEntry:
    """Tests for SourceEntry dataclass."""

    def test_kind_properties(self) -> None:
        assert _entry().is_dir is False
        assert _entry("a", EntryKind.DIRECTORY).is_dir is True

    def test_hashable(self) -> None:
        assert len({_entry(), _entry()}) == 1

    def test_from_dict(self) -> None:
        entry = SourceEntry.from_dict(
            {"path": "/src/x.py", "relative_path": "x.py", "kind": "directory"}
        )
        assert entry.path == Path("/src/x.py")
        assert entry.kind == EntryKind.DIRECTORY

    def test_kind_defaults_to_file(self) -> None:
        entry = SourceEntry.from_dict({"path": "/src/x.py", "relative_path": "x.py"})
        assert entry.kind == EntryKind.FILE


class TestDocBlock:
    """Tests for DocBlock dataclass."""

    def test_defaults(self) -> None:
        block = DocBlock()
        assert block.summary == ""
        assert block.tags == []
        assert block.declaration is None

    def test_to_dict(self) -> None:
        block = DocBlock("Does X", "Detail.", [Tag("param", "n")], "foo", 3)
        assert block.to_dict() == {
            "summary": "Does X",
            "body": "Detail.",
            "tags": [{"name": "param", "value": "n"}],
            "declaration": "foo",
            "line_number": 3,
        }


class TestDocNode:
    """Tests for DocNode dataclass."""

    def test_empty_node(self) -> None:
        node = DocNode(entry=_entry())
        assert node.is_empty is True
        assert node.warnings == []

    def test_json_serializable(self) -> None:
        node = DocNode(
            entry=_entry(),
            blocks=[DocBlock("Does X", tags=[Tag("param", "n")], declaration="foo")],
            syntax="c-style",
            warnings=["unterminated comment at line 4 closed at end of file"],
        )
        restored = DocNode.from_dict(json.loads(json.dumps(node.to_dict())))
        assert restored == node


class TestOutputArtifact:
    """Tests for resolving artifact paths under the target directory."""

    def test_nested_path(self, tmp_path: Path) -> None:
        artifact = OutputArtifact(_entry(), "a/b.md", "x")
        assert artifact.target_path(tmp_path) == tmp_path / "a" / "b.md"

    @pytest.mark.parametrize("rel", ["../escape.md", "a/../../x.md", "/etc/x.md", ""])
    def test_escaping_paths_rejected(self, tmp_path: Path, rel: str) -> None:
        artifact = OutputArtifact(_entry(), rel, "x")
        with pytest.raises(WriteError, match="escapes target directory"):
            artifact.target_path(tmp_path)
