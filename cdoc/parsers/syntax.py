"""Comment syntax descriptors and file extension dispatch.

Each supported syntax is a CommentSyntax value tagged with its kind:
block comments with open and close markers, runs of prefixed line
comments, or Python docstrings. ``SyntaxTable`` maps a file's extension
to its descriptor.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Mapping, Optional

from cdoc.errors import ConfigurationError


class SyntaxKind(str, Enum):
    """How documentation comments are delimited."""

    BLOCK = "block"
    LINE = "line"
    DOCSTRING = "docstring"


class Language(str, Enum):
    """Languages with dedicated declaration detection."""

    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    TSX = "tsx"
    PYTHON = "python"
    OTHER = "other"


@dataclass(frozen=True)
class CommentSyntax:
    """Descriptor for one documentation comment style.

    Attributes:
        name: Identifier used in configuration.
        kind: Block, line or docstring delimiting.
        open: Opening marker for block comments.
        close: Closing marker for block comments.
        prefix: Marker starting each line of a line-comment block.
        decoration: Leading character stripped from block continuation
            lines, such as the ``*`` in JSDoc comments.
    """

    name: str
    kind: SyntaxKind
    open: str = ""
    close: str = ""
    prefix: str = ""
    decoration: str = ""


C_STYLE = CommentSyntax(
    name="c-style", kind=SyntaxKind.BLOCK, open="/**", close="*/", decoration="*"
)
COFFEE = CommentSyntax(name="coffee", kind=SyntaxKind.BLOCK, open="###", close="###")
TRIPLE_SLASH = CommentSyntax(name="triple-slash", kind=SyntaxKind.LINE, prefix="///")
HASH = CommentSyntax(name="hash", kind=SyntaxKind.LINE, prefix="##")
DASH = CommentSyntax(name="dash", kind=SyntaxKind.LINE, prefix="---")
PYTHON = CommentSyntax(name="python", kind=SyntaxKind.DOCSTRING)

SYNTAXES: dict[str, CommentSyntax] = {
    s.name: s for s in (C_STYLE, COFFEE, TRIPLE_SLASH, HASH, DASH, PYTHON)
}

_SYNTAX_BY_SUFFIX: dict[str, CommentSyntax] = {
    ".js": C_STYLE,
    ".jsx": C_STYLE,
    ".mjs": C_STYLE,
    ".cjs": C_STYLE,
    ".ts": C_STYLE,
    ".tsx": C_STYLE,
    ".java": C_STYLE,
    ".kt": C_STYLE,
    ".scala": C_STYLE,
    ".c": C_STYLE,
    ".h": C_STYLE,
    ".cc": C_STYLE,
    ".cpp": C_STYLE,
    ".hpp": C_STYLE,
    ".cs": C_STYLE,
    ".php": C_STYLE,
    ".swift": C_STYLE,
    ".go": C_STYLE,
    ".css": C_STYLE,
    ".scss": C_STYLE,
    ".less": C_STYLE,
    ".coffee": COFFEE,
    ".rs": TRIPLE_SLASH,
    ".d": TRIPLE_SLASH,
    ".sh": HASH,
    ".bash": HASH,
    ".zsh": HASH,
    ".rb": HASH,
    ".pl": HASH,
    ".pm": HASH,
    ".r": HASH,
    ".lua": DASH,
    ".sql": DASH,
    ".py": PYTHON,
    ".pyi": PYTHON,
}

_LANGUAGE_BY_SUFFIX: dict[str, Language] = {
    ".js": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".mjs": Language.JAVASCRIPT,
    ".cjs": Language.JAVASCRIPT,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TSX,
    ".py": Language.PYTHON,
    ".pyi": Language.PYTHON,
}


class SyntaxTable:
    """Extension-to-syntax lookup with optional configured overrides.

    Files whose extension has no entry use the default syntax, so every
    source file is scanned for documentation.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, str]] = None,
        default: Optional[str] = "c-style",
    ) -> None:
        """Build the table.

        Args:
            overrides: Mapping of file extension to syntax name, taking
                precedence over the built-in mapping.
            default: Syntax name used for unmapped extensions. None
                leaves them without a syntax, so they render as
                undocumented.

        Raises:
            ConfigurationError: If an override or the default names an
                unknown syntax.
        """
        self._table = dict(_SYNTAX_BY_SUFFIX)
        for suffix, name in (overrides or {}).items():
            self._table[_normalize_suffix(suffix)] = _resolve(name, f"extension {suffix!r}")
        self.default = _resolve(default, "the default") if default is not None else None

    def lookup(self, path: str | PurePath) -> Optional[CommentSyntax]:
        """Return the syntax for a file path.

        Args:
            path: File path; only its extension is inspected.

        Returns:
            The mapped CommentSyntax, otherwise the default syntax,
            which may be None.
        """
        return self._table.get(_normalize_suffix(PurePath(path).suffix), self.default)


def _resolve(name: str, target: str) -> CommentSyntax:
    if name not in SYNTAXES:
        raise ConfigurationError(
            f"Unknown comment syntax {name!r} for {target}; "
            f"expected one of {', '.join(sorted(SYNTAXES))}"
        )
    return SYNTAXES[name]


def _normalize_suffix(suffix: str) -> str:
    suffix = suffix.lower()
    if suffix and not suffix.startswith("."):
        suffix = "." + suffix
    return suffix


def language_for_path(path: str | PurePath) -> Language:
    """Return the language used for declaration detection."""
    return _LANGUAGE_BY_SUFFIX.get(
        _normalize_suffix(PurePath(path).suffix), Language.OTHER
    )
