"""
Tests for symbol enumeration and lookup.
"""
import pytest

from repomap_engine import (
    GrammarRegistry, SymbolExtractor, SymbolKind, select_grammar,
)


JS_SOURCE = '''import fs from "fs";

// Helper
function helper(a, b) {
  return a + b;
}

const limit = 10, other = 5;

class Widget {
  constructor(size) {
    this.size = size;
  }

  render() {
    function inner() {}
    return inner;
  }
}

export function exported() {}

export class Panel {}

export const settings = { a: 1 };

if (true) {
  function nested() {}
}
'''

PY_SOURCE = '''import os

CONSTANT = 3

@decorator
def decorated():
    pass

def plain(x):
    def inner():
        pass
    return inner

class Service:
    def __init__(self):
        self.x = 1

    @property
    def value(self):
        return self.x

    class Inner:
        def hidden(self):
            pass
'''

TS_SOURCE = '''interface User { id: number; }

export abstract class Repo {
  abstract find(): void;
}

class Store {
  private items: string[] = [];
  add(item: string) { this.items.push(item); }
}

function load(): Store { return new Store(); }
'''

C_SOURCE = '''#include <stdio.h>

struct point {
  int x;
  int y;
};

static int add(int a, int b) {
  return a + b;
}

#ifdef DEBUG
void trace(const char *msg) {
  puts(msg);
}
#endif
'''

CPP_SOURCE = '''class Vec {
public:
  Vec(double x) : x_(x) {}
  double length() const { return x_; }
private:
  double x_;
};

namespace geo {
  int helper() { return 1; }
}

template <typename T>
T identity(T value) { return value; }
'''


def summary(symbols):
    return [(s.name, s.kind.value, s.parent_class) for s in symbols]


@pytest.fixture
def extractor():
    return SymbolExtractor()


class TestExtractSymbols:
    """Enumerating the symbols of a file."""

    def test_javascript(self, parse, extractor):
        symbols = extractor.extract_symbols(parse(JS_SOURCE, ".js"))

        assert summary(symbols) == [
            ("helper", "function", None),
            ("limit", "variable", None),
            ("Widget", "class", None),
            ("constructor", "method", "Widget"),
            ("render", "method", "Widget"),
            ("exported", "function", None),
            ("Panel", "class", None),
            ("settings", "variable", None),
        ]

    def test_javascript_lines_and_signatures(self, parse, extractor):
        symbols = {s.name: s for s in extractor.extract_symbols(parse(JS_SOURCE, ".js"))}

        assert symbols["helper"].declaration_line == 4
        assert symbols["helper"].signature == "function helper(a, b) {"
        assert symbols["limit"].signature == "limit = 10"
        # Exports keep the keyword in their signature
        assert symbols["exported"].signature == "export function exported() {}"
        assert symbols["render"].declaration_line == 15

    def test_signature_is_truncated(self, parse, extractor):
        code = "function f(" + ", ".join(f"arg{i}" for i in range(60)) + ") {}\n"
        symbols = extractor.extract_symbols(parse(code, ".js"))

        assert len(symbols[0].signature) == 120
        assert code.startswith(symbols[0].signature)

    def test_python(self, parse, extractor):
        symbols = extractor.extract_symbols(parse(PY_SOURCE, ".py"))

        assert summary(symbols) == [
            ("decorated", "function", None),
            ("plain", "function", None),
            ("Service", "class", None),
            ("__init__", "method", "Service"),
            ("value", "method", "Service"),
        ]
        value = symbols[-1]
        assert value.signature == "def value(self):"

    def test_typescript(self, parse, extractor):
        symbols = extractor.extract_symbols(parse(TS_SOURCE, ".ts"))

        assert summary(symbols) == [
            ("Repo", "class", None),
            ("Store", "class", None),
            ("add", "method", "Store"),
            ("load", "function", None),
        ]

    def test_c(self, parse, extractor):
        symbols = extractor.extract_symbols(parse(C_SOURCE, ".c"))

        assert summary(symbols) == [
            ("point", "struct", None),
            ("add", "function", None),
            ("trace", "function", None),
        ]

    def test_cpp(self, parse, extractor):
        symbols = extractor.extract_symbols(parse(CPP_SOURCE, ".cpp"))

        assert summary(symbols) == [
            ("Vec", "class", None),
            ("Vec", "method", "Vec"),
            ("length", "method", "Vec"),
            ("identity", "function", None),
        ]

    def test_empty_file(self, parse, extractor):
        assert extractor.extract_symbols(parse("", ".js")) == []

    def test_to_dict(self, parse, extractor):
        symbols = extractor.extract_symbols(parse(PY_SOURCE, ".py"))

        assert symbols[3].to_dict() == {
            "name": "__init__",
            "kind": "method",
            "signature": "def __init__(self):",
            "line": 15,
            "parent_class": "Service",
        }
        assert "parent_class" not in symbols[0].to_dict()


class TestFindSymbol:
    """Locating a single symbol."""

    def test_find_function(self, parse, extractor):
        located = extractor.find_symbol(parse(JS_SOURCE, ".js"), "helper", "function")

        assert located is not None
        assert located.text == "function helper(a, b) {\n  return a + b;\n}"
        assert (located.range.start_line, located.range.start_column) == (3, 0)
        assert (located.range.end_line, located.range.end_column) == (5, 1)

    def test_nested_declarations_are_not_found(self, parse, extractor):
        parsed = parse(JS_SOURCE, ".js")

        assert extractor.find_symbol(parsed, "nested", "function") is None
        assert extractor.find_symbol(parsed, "inner", "function") is None

    def test_kind_must_match(self, parse, extractor):
        parsed = parse(JS_SOURCE, ".js")

        assert extractor.find_symbol(parsed, "helper", "class") is None
        assert extractor.find_symbol(parsed, "Widget", SymbolKind.CLASS) is not None

    def test_first_declarator_takes_statement(self, parse, extractor):
        parsed = parse(JS_SOURCE, ".js")

        first = extractor.find_symbol(parsed, "limit", "variable")
        second = extractor.find_symbol(parsed, "other", "variable")

        assert first.text == "const limit = 10, other = 5;"
        assert second.text == "other = 5"

    def test_exported_declaration(self, parse, extractor):
        parsed = parse(JS_SOURCE, ".js")

        located = extractor.find_symbol(parsed, "exported", "function")

        assert located.text == "function exported() {}"
        assert located.wrapper_prefix == "export"
        assert located.wrapper_range.start_column == 0
        assert located.range.start_column == len("export ")

    def test_export_kind_returns_statement(self, parse, extractor):
        located = extractor.find_symbol(parse(JS_SOURCE, ".js"), "settings", "export")

        assert located.text == "export const settings = { a: 1 };"
        assert located.wrapper_range is None

    def test_decorated_function(self, parse, extractor):
        located = extractor.find_symbol(parse(PY_SOURCE, ".py"), "decorated", "function")

        assert located.text.startswith("def decorated():")
        assert located.wrapper_prefix == "@"
        assert located.wrapper_range.start_line == 4

    def test_member_without_parent_class(self, parse, extractor):
        located = extractor.find_symbol(parse(JS_SOURCE, ".js"), "render", "method")

        assert located is not None
        assert located.symbol.parent_class == "Widget"

    def test_character_columns(self, parse, extractor):
        code = 'const s = "héllo"; function f() {}\n'
        located = extractor.find_symbol(parse(code, ".js"), "f", "function")

        assert located.range.start_column == code.index("function")
        assert located.range.end_column == len(code) - 1

    def test_enumerated_symbols_can_be_located(self, parse, extractor):
        """Every listed top-level symbol is found again at the same line."""
        for source, extension in ((JS_SOURCE, ".js"), (PY_SOURCE, ".py"),
                                  (TS_SOURCE, ".ts"), (C_SOURCE, ".c"),
                                  (CPP_SOURCE, ".cpp")):
            parsed = parse(source, extension)
            for symbol in extractor.extract_symbols(parsed):
                located = extractor.find_symbol(parsed, symbol.name, symbol.kind)
                assert located is not None, (extension, symbol.name)
                assert located.symbol.declaration_line == symbol.declaration_line


class TestFindSymbolInClass:
    """Class-scoped lookup."""

    def _class_node(self, extractor, parsed, name):
        located = extractor.find_symbol(parsed, name, "class")
        assert located is not None
        return located.node

    def test_constructor_by_convention(self, parse, extractor):
        parsed = parse(PY_SOURCE, ".py")
        service = self._class_node(extractor, parsed, "Service")

        located = extractor.find_symbol_in_class(parsed, service, "constructor", "constructor")

        assert located.symbol.name == "__init__"
        assert located.symbol.parent_class == "Service"

    def test_nested_class_members_are_skipped(self, parse, extractor):
        parsed = parse(PY_SOURCE, ".py")
        service = self._class_node(extractor, parsed, "Service")

        assert extractor.find_symbol_in_class(parsed, service, "hidden", "method") is None

    def test_locals_are_not_members(self, parse, extractor):
        parsed = parse(JS_SOURCE, ".js")
        widget = self._class_node(extractor, parsed, "Widget")

        assert extractor.find_symbol_in_class(parsed, widget, "inner", "method") is None

    def test_python_property_assignment(self, parse, extractor):
        code = "class Settings:\n    debug = False\n\n    def run(self):\n        debug = True\n"
        parsed = parse(code, ".py")
        settings = self._class_node(extractor, parsed, "Settings")

        located = extractor.find_symbol_in_class(parsed, settings, "debug", "property")

        assert located.text == "debug = False"
        assert located.range.start_line == 1

    def test_typescript_field(self, parse, extractor):
        parsed = parse(TS_SOURCE, ".ts")
        store = self._class_node(extractor, parsed, "Store")

        located = extractor.find_symbol_in_class(parsed, store, "items", "property")

        assert located is not None
        assert located.text.startswith("private items: string[]")


class FakeNode:
    """Minimal syntax node for exercising a custom parser factory."""

    def __init__(self, type, start, end, code, children=(), fields=None):
        self.type = type
        self.start_byte = start
        self.end_byte = end
        self.children = list(children)
        self.named_children = list(children)
        self.fields = fields or {}
        self.parent = None
        self.start_point = self._point(code, start)
        self.end_point = self._point(code, end)
        for child in self.children:
            child.parent = self

    @staticmethod
    def _point(code, offset):
        before = code[:offset]
        row = before.count("\n")
        return row, len(before) - (before.rfind("\n") + 1)

    def child_by_field_name(self, name):
        return self.fields.get(name)


class FakeParser:
    def parse(self, source):
        code = source.decode("utf-8")
        name = FakeNode("identifier", 9, 13, code)
        function = FakeNode("function_declaration", 0, len(code), code, [name], {"name": name})
        root = FakeNode("program", 0, len(code), code, [function])
        return type("Tree", (), {"root_node": root})()


class TestCustomParserFactory:
    """The extractor works with any grammar that exposes node types and fields."""

    def test_symbols_from_custom_parser(self):
        registry = GrammarRegistry(parser_factory=lambda name: FakeParser())
        parsed = registry.parse("function demo() {}", select_grammar(".js"))

        symbols = SymbolExtractor().extract_symbols(parsed)

        assert summary(symbols) == [("demo", "function", None)]
        located = SymbolExtractor().find_symbol(parsed, "demo", "function")
        assert located.text == "function demo() {}"
