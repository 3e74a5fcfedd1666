"""Documentation block extraction from source file contents.

Locates documentation comments using the syntax registered for the
file's extension, ties each comment to the declaration that follows
it, and splits the comment text into a summary line, a free-text body
and ``@tag value`` annotations.
"""

import logging
import re
import textwrap
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Optional

from cdoc.errors import ExtractionError
from cdoc.parsers.js_parser import JSDeclarationFinder
from cdoc.parsers.python_parser import PythonDocstringParser
from cdoc.parsers.structure import DocBlock, DocNode, EntryKind, SourceEntry, Tag
from cdoc.parsers.syntax import (
    HASH,
    CommentSyntax,
    Language,
    SyntaxKind,
    SyntaxTable,
    language_for_path,
)

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"^(?P<name>[A-Za-z_][\w-]*)(?P<value>(?:\s.*|\{.*)?)$")

_SKIP_NAMES = {"if", "for", "while", "switch", "return", "catch", "else", "do", "elif"}

# Heuristic declaration patterns for languages without a dedicated parser
_DECLARATION_PATTERNS = [
    re.compile(r"^(?:(?:export|default|async|local)\s+)*function\s*\*?\s*(?P<name>[\w$.:]+)"),
    re.compile(r"^func\s+\([^)]*\)\s*(?P<name>\w+)"),
    re.compile(
        r"^(?:(?:public|private|protected|internal|static|final|abstract|export|"
        r"default|sealed|open|data|pub(?:\([\w\s]+\))?|unsafe|extern|inline|"
        r"virtual|override|async|const|typedef)\s+)*"
        r"(?:class|struct|interface|enum|trait|impl|type|module|namespace|object|"
        r"record|union|fn|func|fun|def|sub|macro_rules!)\s+(?P<name>[\w$:.?!]+)"
    ),
    re.compile(
        r"^create\s+(?:or\s+replace\s+)?(?:table|view|function|procedure|index|trigger)"
        r"\s+(?:if\s+not\s+exists\s+)?(?P<name>[\w.\"]+)",
        re.IGNORECASE,
    ),
    re.compile(r"^(?P<name>[\w$.@]+)\s*:\s*(?:\([^)]*\)\s*)?[-=]>"),
    re.compile(r"^(?P<name>[\w$]+)\s*:\s*(?:async\s+)?function\b"),
    re.compile(
        r"^(?:(?:export|const|let|var|local|readonly|static|pub|public|private|"
        r"protected|final|val|mut)\s+)*(?P<name>[\w$.@]+)\s*(?::[^=]+)?=(?![=>])"
    ),
    re.compile(r"^(?:[\w$<>\[\],*&:\s]+?\s+)?[*&]*(?P<name>[\w$:~]+)\s*\([^;]*$"),
]


@dataclass
class RawComment:
    """A documentation comment before summary, body and tag parsing.

    Attributes:
        lines: Comment text lines with delimiters removed.
        start_line: 0-based index of the line holding the opening marker.
        end_line: 0-based index of the comment's last line.
        terminated: False when the comment ran into end of file.
        tail: Code following the close marker on the comment's last line.
    """

    lines: list[str]
    start_line: int
    end_line: int
    terminated: bool = True
    tail: str = ""


class DocExtractor:
    """Extracts documentation nodes from source files.

    The comment syntax is chosen from the file extension. JavaScript
    and TypeScript declarations are located with tree-sitter, Python
    docstrings with ast, and other languages with line heuristics.
    """

    def __init__(
        self,
        syntax_table: Optional[SyntaxTable] = None,
        tag_marker: str = "@",
    ) -> None:
        """Initialize the extractor.

        Args:
            syntax_table: Extension lookup; the built-in table if omitted.
            tag_marker: Symbol introducing a tag line.
        """
        self.syntax_table = syntax_table or SyntaxTable()
        self.tag_marker = tag_marker
        self._python = PythonDocstringParser()

    def extract(
        self,
        file_path: str,
        file_contents: str,
        entry: Optional[SourceEntry] = None,
    ) -> DocNode:
        """Extract all documentation blocks from a file's contents.

        Args:
            file_path: Path of the file; its extension selects the syntax.
            file_contents: Full text of the file.
            entry: Source entry to attach to the node. Built from
                file_path when omitted.

        Returns:
            A DocNode, with zero blocks when nothing was found or the
            file has no comment syntax.
        """
        if entry is None:
            entry = SourceEntry(
                Path(file_path), PurePath(file_path).as_posix(), EntryKind.FILE
            )

        syntax = self.syntax_table.lookup(file_path)
        node = DocNode(entry=entry, syntax=syntax.name if syntax else None)
        if syntax is None:
            logger.debug("No comment syntax registered for %s", file_path)
            return node

        if syntax.kind == SyntaxKind.DOCSTRING:
            node.blocks = self._extract_docstrings(file_path, file_contents, node)
        else:
            node.blocks = self._extract_comments(file_path, file_contents, syntax, node)

        logger.debug(
            "Extracted %d blocks from %s (%s)", len(node.blocks), file_path, syntax.name
        )
        return node

    def _extract_comments(
        self,
        file_path: str,
        source: str,
        syntax: CommentSyntax,
        node: DocNode,
    ) -> list[DocBlock]:
        lines = split_lines(source)
        if syntax.kind == SyntaxKind.BLOCK:
            comments = scan_block_comments(lines, syntax)
        else:
            comments = scan_line_comments(lines, syntax)

        if not comments:
            return []

        for comment in comments:
            if not comment.terminated:
                self._warn(
                    node,
                    ExtractionError(
                        file_path,
                        f"unterminated comment at line {comment.start_line + 1} "
                        "closed at end of file",
                    ),
                )

        declarations = self._find_declarations(file_path, source)
        blocks = []
        for comment in comments:
            # Code may follow the close marker on the same line
            if comment.tail:
                code_line, code = comment.end_line, comment.tail
            else:
                code_line = _next_code_line(lines, comment.end_line + 1)
                code = lines[code_line] if code_line is not None else ""

            declaration = None
            if code_line is not None:
                if declarations is not None:
                    declaration = declarations.get(code_line)
                else:
                    declaration = guess_declaration(code)

            block = self.parse_block(comment.lines)
            block.declaration = declaration
            block.line_number = comment.start_line + 1
            blocks.append(block)
        return blocks

    def _extract_docstrings(
        self, file_path: str, source: str, node: DocNode
    ) -> list[DocBlock]:
        try:
            docstrings = self._python.parse_source(source, file_path)
        except (SyntaxError, ValueError) as e:
            self._warn(
                node,
                ExtractionError(
                    file_path, f"cannot parse Python source ({e}); using ## comments"
                ),
            )
            return self._extract_comments(file_path, source, HASH, node)

        blocks = []
        for doc in docstrings:
            block = self.parse_block(doc.text.splitlines())
            block.declaration = doc.declaration
            block.line_number = doc.line_number
            blocks.append(block)
        return blocks

    def _find_declarations(self, file_path: str, source: str) -> Optional[dict[int, str]]:
        """Locate declarations with tree-sitter for JavaScript-family files.

        Returns:
            Mapping of 0-based row to name, or None when the language has
            no dedicated parser and line heuristics should be used.
        """
        language = language_for_path(file_path)
        if language not in (Language.JAVASCRIPT, Language.TYPESCRIPT, Language.TSX):
            return None
        return JSDeclarationFinder(language).find_declarations(source)

    def parse_block(self, lines: list[str]) -> DocBlock:
        """Split comment text into summary, body and tags.

        The first non-blank, non-tag line is the summary. Lines starting
        with the tag marker followed by an identifier become tags;
        deeper-indented lines right after a tag continue its value.
        Marker lines that do not parse as tags stay in the body.

        Args:
            lines: Comment text lines with delimiters removed.

        Returns:
            A DocBlock without declaration or line information.
        """
        summary: Optional[str] = None
        body_lines: list[str] = []
        tags: list[Tag] = []
        last_tag: Optional[Tag] = None
        last_indent = 0

        for line in lines:
            stripped = line.strip()
            indent = len(line) - len(line.lstrip())

            if not stripped:
                last_tag = None
                if summary is not None:
                    body_lines.append("")
                continue

            tag = self._parse_tag(stripped)
            if tag is not None:
                tags.append(tag)
                last_tag, last_indent = tag, indent
                continue

            if last_tag is not None and indent > last_indent:
                last_tag.value = f"{last_tag.value} {stripped}".strip()
                continue
            last_tag = None

            if summary is None:
                summary = stripped
                continue
            body_lines.append(line.rstrip())

        body = textwrap.dedent("\n".join(body_lines)).strip("\n")
        return DocBlock(summary=summary or "", body=body, tags=tags)

    def _parse_tag(self, stripped: str) -> Optional[Tag]:
        if not stripped.startswith(self.tag_marker):
            return None
        match = _TAG_RE.match(stripped[len(self.tag_marker) :])
        if not match:
            logger.debug("Folding unparseable tag line into body: %s", stripped)
            return None
        return Tag(name=match.group("name"), value=match.group("value").strip())

    def _warn(self, node: DocNode, error: ExtractionError) -> None:
        logger.warning("%s", error)
        node.warnings.append(error.reason)


def scan_block_comments(lines: list[str], syntax: CommentSyntax) -> list[RawComment]:
    """Find block documentation comments.

    A comment opens on a line whose first non-blank text is the open
    marker, which must not be followed by a repeat of its last
    character (so ``/***`` banners and ``####`` rulers are skipped). A
    comment missing its close marker is closed at end of file.

    Args:
        lines: Source lines.
        syntax: A BLOCK syntax descriptor.

    Returns:
        Comments in source order.
    """
    comments: list[RawComment] = []
    i = 0
    while i < len(lines):
        stripped = lines[i].lstrip()
        if not _opens(stripped, syntax.open):
            i += 1
            continue

        start = i
        rest = stripped[len(syntax.open) :]
        close_at = rest.find(syntax.close)
        if close_at != -1:
            text = rest[:close_at].strip()
            tail = rest[close_at + len(syntax.close) :].strip()
            comments.append(RawComment([text] if text else [], start, i, tail=tail))
            i += 1
            continue

        collected = [rest.strip()] if rest.strip() else []
        terminated = False
        tail = ""
        i += 1
        while i < len(lines):
            line = lines[i]
            close_at = line.find(syntax.close)
            if close_at != -1:
                before = line[:close_at]
                if before.strip() and before.strip() != syntax.decoration:
                    collected.append(before)
                tail = line[close_at + len(syntax.close) :].strip()
                terminated = True
                break
            collected.append(line)
            i += 1

        end = min(i, len(lines) - 1)
        comments.append(
            RawComment(
                _clean_block_lines(collected, syntax), start, end, terminated, tail
            )
        )
        i += 1
    return comments


def scan_line_comments(lines: list[str], syntax: CommentSyntax) -> list[RawComment]:
    """Merge runs of contiguous prefixed comment lines into comments.

    Args:
        lines: Source lines.
        syntax: A LINE syntax descriptor.

    Returns:
        Comments in source order.
    """
    comments: list[RawComment] = []
    i = 0
    while i < len(lines):
        if not _opens(lines[i].lstrip(), syntax.prefix):
            i += 1
            continue

        start = i
        collected = []
        while i < len(lines) and _opens(lines[i].lstrip(), syntax.prefix):
            text = lines[i].lstrip()[len(syntax.prefix) :]
            collected.append(text[1:] if text.startswith(" ") else text)
            i += 1
        comments.append(RawComment(collected, start, i - 1))
    return comments


def guess_declaration(line: str) -> Optional[str]:
    """Guess the name declared by a line of code.

    Args:
        line: A single source line.

    Returns:
        The declared name, or None if no pattern matches.
    """
    stripped = line.strip()
    for pattern in _DECLARATION_PATTERNS:
        match = pattern.match(stripped)
        if match and match.group("name") not in _SKIP_NAMES:
            return match.group("name")
    return None


def _opens(stripped: str, marker: str) -> bool:
    if not marker or not stripped.startswith(marker):
        return False
    following = stripped[len(marker) : len(marker) + 1]
    if following == marker[-1]:
        return False
    # "/**/" is an empty ordinary comment
    return not (marker == "/**" and following == "/")


def _clean_block_lines(lines: list[str], syntax: CommentSyntax) -> list[str]:
    """Remove continuation decoration and common indentation."""
    if syntax.decoration:
        cleaned = []
        for line in lines:
            stripped = line.lstrip()
            if stripped.startswith(syntax.decoration):
                stripped = stripped[len(syntax.decoration) :]
                cleaned.append(stripped[1:] if stripped.startswith(" ") else stripped)
            else:
                cleaned.append(line)
        return cleaned
    return textwrap.dedent("\n".join(lines)).split("\n") if lines else []


def _next_code_line(lines: list[str], start: int) -> Optional[int]:
    for index in range(start, len(lines)):
        if lines[index].strip():
            return index
    return None


def split_lines(source: str) -> list[str]:
    """Split source text on ``\\n`` only, dropping a trailing ``\\r``.

    Line numbers then agree with tree-sitter rows, which count only
    newline characters, even when the text holds form feeds or Unicode
    line separators.
    """
    return [line[:-1] if line.endswith("\r") else line for line in source.split("\n")]
