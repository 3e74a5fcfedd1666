"""Python docstring extraction using the ast module.

Collects module, class and function docstrings, including nested
definitions, in source order. Each docstring is reported with the line
it starts on and the qualified name of the definition it belongs to.
"""

import ast
import logging
from dataclasses import dataclass
from typing import Optional, Union

logger = logging.getLogger(__name__)

_DefinitionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef]


@dataclass
class RawDocstring:
    """A docstring before summary, body and tag parsing.

    Attributes:
        text: Cleaned docstring text (indentation normalised).
        line_number: 1-based line where the docstring literal starts.
        declaration: Qualified name of the documented definition, or
            None for the module docstring.
    """

    text: str
    line_number: int
    declaration: Optional[str] = None


class PythonDocstringParser:
    """Extracts docstrings from Python source."""

    def parse_source(self, source: str, file_path: str = "<string>") -> list[RawDocstring]:
        """Parse Python source and collect its docstrings.

        Args:
            source: Python source code as a string.
            file_path: File path used in syntax error messages.

        Returns:
            Docstrings ordered by line number.

        Raises:
            SyntaxError: If the source contains invalid Python syntax.
            ValueError: If the source contains null bytes.
        """
        tree = ast.parse(source, filename=file_path)
        found: list[RawDocstring] = []

        docstring = ast.get_docstring(tree)
        if docstring:
            found.append(RawDocstring(docstring, tree.body[0].lineno))

        self._collect(tree, "", found)
        found.sort(key=lambda d: d.line_number)

        logger.debug("Parsed %s: %d docstrings", file_path, len(found))
        return found

    def _collect(self, node: ast.AST, prefix: str, found: list[RawDocstring]) -> None:
        """Recursively collect docstrings of definitions below a node.

        Args:
            node: Module, class or function node to descend into.
            prefix: Qualified name of the enclosing definition.
            found: Accumulator for discovered docstrings.
        """
        for child in ast.iter_child_nodes(node):
            if not isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                continue

            name = f"{prefix}.{child.name}" if prefix else child.name
            docstring = ast.get_docstring(child)
            if docstring:
                found.append(
                    RawDocstring(docstring, self._docstring_line(child), name)
                )
            self._collect(child, name, found)

    def _docstring_line(self, node: _DefinitionNode) -> int:
        return node.body[0].lineno if node.body else node.lineno
