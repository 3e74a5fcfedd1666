"""JavaScript and TypeScript declaration lookup using tree-sitter.

Maps the starting line of every named declaration (functions, classes,
methods, interfaces, type aliases, enums and variables bound at module
or class level) to its name, so documentation comments can be tied to
the declaration that follows them.
"""

import logging
from typing import Optional

import tree_sitter
import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts

from cdoc.parsers.syntax import Language

logger = logging.getLogger(__name__)

_JS_LANGUAGE = tree_sitter.Language(tsjs.language())
_TS_LANGUAGE = tree_sitter.Language(tsts.language_typescript())
_TSX_LANGUAGE = tree_sitter.Language(tsts.language_tsx())

# Node types that declare a single name through their "name" field
_NAMED_TYPES = {
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "abstract_class_declaration",
    "method_definition",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
    "internal_module",
    "module",
}
_FIELD_TYPES = {
    "field_definition",
    "public_field_definition",
}
_VARIABLE_TYPES = {
    "lexical_declaration",
    "variable_declaration",
}
# Node types whose children may hold further documented declarations
_CONTAINER_TYPES = {
    "program",
    "export_statement",
    "class_body",
    "interface_body",
    "statement_block",
    "expression_statement",
    "ambient_declaration",
}


class JSDeclarationFinder:
    """Finds named declarations in JavaScript and TypeScript source."""

    def __init__(self, language: Language = Language.JAVASCRIPT) -> None:
        """Initialize the finder for a language variant.

        Args:
            language: JAVASCRIPT, TYPESCRIPT or TSX.
        """
        if language == Language.TSX:
            ts_lang = _TSX_LANGUAGE
        elif language == Language.TYPESCRIPT:
            ts_lang = _TS_LANGUAGE
        else:
            ts_lang = _JS_LANGUAGE
        self.language = language
        self._parser = tree_sitter.Parser(ts_lang)

    def find_declarations(self, source: str) -> dict[int, str]:
        """Map declaration start lines to declaration names.

        Args:
            source: JavaScript or TypeScript source code.

        Returns:
            Mapping of 0-based row to the name declared on that row. When
            several declarations start on one row the outermost wins.
        """
        source_bytes = source.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        found: dict[int, str] = {}
        self._visit(tree.root_node, source_bytes, found)
        logger.debug("Found %d %s declarations", len(found), self.language.value)
        return found

    def _visit(
        self,
        node: tree_sitter.Node,
        source_bytes: bytes,
        found: dict[int, str],
    ) -> None:
        for child in node.children:
            name = self._declaration_name(child, source_bytes)
            if name:
                found.setdefault(child.start_point.row, name)

            if child.type in _CONTAINER_TYPES:
                self._visit(child, source_bytes, found)
            elif child.type in ("class_declaration", "abstract_class_declaration", "class"):
                body = child.child_by_field_name("body")
                if body is not None:
                    self._visit(body, source_bytes, found)
            elif child.type in ("internal_module", "module"):
                body = child.child_by_field_name("body")
                if body is not None:
                    self._visit(body, source_bytes, found)

    def _declaration_name(
        self, node: tree_sitter.Node, source_bytes: bytes
    ) -> Optional[str]:
        """Return the name a node declares, or None.

        Args:
            node: Candidate declaration node.
            source_bytes: Source as bytes.

        Returns:
            The declared name, or None when the node declares nothing
            nameable.
        """
        if node.type in _NAMED_TYPES:
            name_node = node.child_by_field_name("name")
            return self._node_text(name_node, source_bytes) if name_node else None

        if node.type in _FIELD_TYPES:
            name_node = node.child_by_field_name("name") or node.child_by_field_name(
                "property"
            )
            return self._node_text(name_node, source_bytes) if name_node else None

        if node.type in _VARIABLE_TYPES:
            for child in node.children:
                if child.type != "variable_declarator":
                    continue
                name_node = child.child_by_field_name("name")
                if name_node is not None and name_node.type == "identifier":
                    return self._node_text(name_node, source_bytes)
            return None

        if node.type == "expression_statement":
            # module.exports.foo = ... / Foo.prototype.bar = function () {}
            expr = node.named_children[0] if node.named_children else None
            if expr is not None and expr.type == "assignment_expression":
                left = expr.child_by_field_name("left")
                if left is not None and left.type in ("member_expression", "identifier"):
                    return self._node_text(left, source_bytes)
        return None

    def _node_text(self, node: tree_sitter.Node, source_bytes: bytes) -> str:
        return source_bytes[node.start_byte : node.end_byte].decode("utf-8")
