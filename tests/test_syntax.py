"""Tests for comment syntax descriptors and extension dispatch."""

import pytest

from cdoc.errors import ConfigurationError
from cdoc.parsers.syntax import (
    C_STYLE,
    COFFEE,
    HASH,
    PYTHON,
    SYNTAXES,
    TRIPLE_SLASH,
    Language,
    SyntaxKind,
    SyntaxTable,
    language_for_path,
)


@pytest.fixture
def table() -> SyntaxTable:
    """Create a SyntaxTable with the built-in mapping only."""
    return SyntaxTable(default=None)


class TestBuiltinMapping:
    """Tests for the built-in extension mapping."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("a/b.js", C_STYLE),
            ("a/b.tsx", C_STYLE),
            ("lib/util.coffee", COFFEE),
            ("src/main.rs", TRIPLE_SLASH),
            ("bin/run.sh", HASH),
            ("pkg/mod.py", PYTHON),
        ],
    )
    def test_known_extensions(self, table: SyntaxTable, path: str, expected: object) -> None:
        assert table.lookup(path) is expected

    def test_extension_case_insensitive(self, table: SyntaxTable) -> None:
        assert table.lookup("MOD.PY") is PYTHON

    def test_unknown_extension_without_default(self, table: SyntaxTable) -> None:
        assert table.lookup("notes.txt") is None
        assert table.lookup("Makefile") is None

    def test_kinds(self) -> None:
        assert C_STYLE.kind == SyntaxKind.BLOCK
        assert HASH.kind == SyntaxKind.LINE
        assert PYTHON.kind == SyntaxKind.DOCSTRING

    def test_registry_by_name(self) -> None:
        assert SYNTAXES["c-style"] is C_STYLE
        assert set(SYNTAXES) == {"c-style", "coffee", "triple-slash", "hash", "dash", "python"}


class TestSyntaxTable:
    """Tests for configurable extension lookup."""

    def test_unknown_extension_uses_default(self) -> None:
        table = SyntaxTable()
        assert table.lookup("a/b.ext") is C_STYLE
        assert table.lookup("Makefile") is C_STYLE
        assert table.lookup("x.py") is PYTHON

    def test_custom_default(self) -> None:
        assert SyntaxTable(default="hash").lookup("notes.txt") is HASH

    def test_unknown_default_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown comment syntax"):
            SyntaxTable(default="nope")

    def test_override_adds_extension(self) -> None:
        table = SyntaxTable({".es6": "c-style"}, default=None)
        assert table.lookup("app.es6") is C_STYLE

    def test_override_without_dot(self) -> None:
        table = SyntaxTable({"jsm": "c-style"}, default=None)
        assert table.lookup("mod.jsm") is C_STYLE

    def test_override_replaces_builtin(self) -> None:
        table = SyntaxTable({".h": "triple-slash"})
        assert table.lookup("a.h") is TRIPLE_SLASH

    def test_unknown_syntax_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown comment syntax"):
            SyntaxTable({".x": "nope"})


class TestLanguageForPath:
    """Tests for declaration-detection language lookup."""

    def test_javascript_family(self) -> None:
        assert language_for_path("a.js") == Language.JAVASCRIPT
        assert language_for_path("a.mjs") == Language.JAVASCRIPT
        assert language_for_path("a.ts") == Language.TYPESCRIPT
        assert language_for_path("a.tsx") == Language.TSX

    def test_other(self) -> None:
        assert language_for_path("A.java") == Language.OTHER
