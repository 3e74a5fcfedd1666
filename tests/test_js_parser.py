"""Tests for the JavaScript/TypeScript declaration finder."""

import textwrap

import pytest

from cdoc.parsers.js_parser import JSDeclarationFinder
from cdoc.parsers.syntax import Language


@pytest.fixture
def finder() -> JSDeclarationFinder:
    """Create a JSDeclarationFinder for JavaScript."""
    return JSDeclarationFinder()


class TestJavaScript:
    """Tests for declaration lookup in JavaScript."""

    def test_empty_source(self, finder: JSDeclarationFinder) -> None:
        assert finder.find_declarations("") == {}

    def test_function(self, finder: JSDeclarationFinder) -> None:
        assert finder.find_declarations("function hello() { return 42; }\n") == {0: "hello"}

    def test_generator_function(self, finder: JSDeclarationFinder) -> None:
        assert finder.find_declarations("function* ids() {}\n") == {0: "ids"}

    def test_variables(self, finder: JSDeclarationFinder) -> None:
        source = "const a = 1;\nlet b = () => 2;\nvar c = function () {};\n"
        assert finder.find_declarations(source) == {0: "a", 1: "b", 2: "c"}

    def test_destructuring_ignored(self, finder: JSDeclarationFinder) -> None:
        assert finder.find_declarations("const { a, b } = obj;\n") == {}

    def test_class_and_methods(self, finder: JSDeclarationFinder) -> None:
        source = textwrap.dedent("""\
            class Animal {
              constructor(name) {
                this.name = name;
              }

              speak() {
                return this.name;
              }
            }
        """)
        assert finder.find_declarations(source) == {
            0: "Animal",
            1: "constructor",
            5: "speak",
        }

    def test_exports(self, finder: JSDeclarationFinder) -> None:
        source = "export function run() {}\nexport class App {}\nexport const x = 1;\n"
        assert finder.find_declarations(source) == {0: "run", 1: "App", 2: "x"}

    def test_assignments(self, finder: JSDeclarationFinder) -> None:
        source = "module.exports.helper = function () {};\nFoo.prototype.bar = 1;\n"
        assert finder.find_declarations(source) == {
            0: "module.exports.helper",
            1: "Foo.prototype.bar",
        }

    def test_outermost_declaration_wins(self, finder: JSDeclarationFinder) -> None:
        source = "const outer = function inner() {};\n"
        assert finder.find_declarations(source) == {0: "outer"}

    def test_local_declarations_not_reported(self, finder: JSDeclarationFinder) -> None:
        source = textwrap.dedent("""\
            function outer() {
              const local = 1;
              return local;
            }
        """)
        assert finder.find_declarations(source) == {0: "outer"}


class TestTypeScript:
    """Tests for declaration lookup in TypeScript and TSX."""

    def test_interface_type_and_enum(self) -> None:
        finder = JSDeclarationFinder(Language.TYPESCRIPT)
        source = textwrap.dedent("""\
            interface Shape {
              area(): number;
            }
            type Id = string;
            enum Color { Red, Green }
        """)
        found = finder.find_declarations(source)
        assert found[0] == "Shape"
        assert found[3] == "Id"
        assert found[4] == "Color"

    def test_class_fields(self) -> None:
        finder = JSDeclarationFinder(Language.TYPESCRIPT)
        source = textwrap.dedent("""\
            export class Counter {
              private count: number = 0;

              increment(): void {
                this.count++;
              }
            }
        """)
        assert finder.find_declarations(source) == {
            0: "Counter",
            1: "count",
            3: "increment",
        }

    def test_tsx_component(self) -> None:
        finder = JSDeclarationFinder(Language.TSX)
        source = "export const Button = () => <button>Go</button>;\n"
        assert finder.find_declarations(source) == {0: "Button"}
