#!/usr/bin/env python3
"""
RepoMap Engine - Structural Symbol Index and Syntax-Aware Symbol Editing
A tree-sitter based engine for mapping and editing source files.

Features:
- Symbol enumeration for JavaScript, TypeScript, Python, C and C++
- Repository map rendering (declaration line of every top-level symbol)
- Create, replace or delete a single named symbol in place
- Class-scoped edits for methods, constructors and properties
- Heuristic fast path for top-level JavaScript/TypeScript functions

License: MIT
"""

import sys
import re
import json
import argparse
import difflib
from pathlib import Path
from typing import Dict, List, Optional, Any, Tuple, Iterator, Callable
from dataclasses import dataclass, field
from enum import Enum

from gitignore_parser import rule_from_pattern

# -----------------------------------------------------------------------------
# LOGGING - All logs go to stderr, never stdout
# -----------------------------------------------------------------------------

def log_info(msg: str) -> None:
    """Log info message to stderr."""
    print(f"[REPOMAP:INFO] {msg}", file=sys.stderr)

def log_error(msg: str) -> None:
    """Log error message to stderr."""
    print(f"[REPOMAP:ERROR] {msg}", file=sys.stderr)

def log_warn(msg: str) -> None:
    """Log warning message to stderr."""
    print(f"[REPOMAP:WARN] {msg}", file=sys.stderr)

def log_debug(msg: str, verbose: bool = False) -> None:
    """Log debug message to stderr if verbose mode."""
    if verbose:
        print(f"[REPOMAP:DEBUG] {msg}", file=sys.stderr)

# -----------------------------------------------------------------------------
# CONSTANTS & CONFIGURATION
# -----------------------------------------------------------------------------

class SymbolKind(Enum):
    FUNCTION = "function"
    CLASS = "class"
    VARIABLE = "variable"
    METHOD = "method"
    EXPORT = "export"
    CONSTRUCTOR = "constructor"
    PROPERTY = "property"
    STRUCT = "struct"

    @classmethod
    def parse(cls, value: Any) -> "SymbolKind":
        """Convert a user supplied kind ("function", "Method", ...) to a SymbolKind."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            expected = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown symbol kind: {value!r}. Expected one of: {expected}") from None

# Kinds that live inside a class body and may carry a parent class
CLASS_MEMBER_KINDS = {SymbolKind.METHOD, SymbolKind.CONSTRUCTOR, SymbolKind.PROPERTY}

# File extension -> tree-sitter-languages grammar name
EXTENSION_GRAMMARS: Dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".py": "python",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cxx": "cpp",
    ".hxx": "cpp",
}

SUPPORTED_EXTENSIONS: Tuple[str, ...] = tuple(EXTENSION_GRAMMARS)

# Extensions eligible for the regex/brace-counting fast path
JS_FAMILY_EXTENSIONS = {".js", ".jsx", ".ts", ".tsx"}

# Grammar node type -> symbol kind, shared by every grammar
SYMBOL_NODE_KINDS: Dict[str, SymbolKind] = {
    "function_declaration": SymbolKind.FUNCTION,
    "generator_function_declaration": SymbolKind.FUNCTION,
    "function_definition": SymbolKind.FUNCTION,
    "method_definition": SymbolKind.METHOD,
    "class_declaration": SymbolKind.CLASS,
    "abstract_class_declaration": SymbolKind.CLASS,
    "class_definition": SymbolKind.CLASS,
    "class_specifier": SymbolKind.CLASS,
    "struct_specifier": SymbolKind.STRUCT,
    "variable_declarator": SymbolKind.VARIABLE,
    "lexical_declaration": SymbolKind.VARIABLE,
    "variable_declaration": SymbolKind.VARIABLE,
    "export_statement": SymbolKind.EXPORT,
}

FUNCTION_NODE_TYPES = {"function_declaration", "generator_function_declaration", "function_definition"}
CLASS_NODE_TYPES = {"class_declaration", "abstract_class_declaration", "class_definition", "class_specifier"}
METHOD_NODE_TYPES = {"method_definition"}
EXPORT_NODE_TYPES = {"export_statement"}
VARIABLE_DECLARATION_TYPES = {"lexical_declaration", "variable_declaration"}
DECLARATOR_NODE_TYPES = {"variable_declarator"}

# Containers whose children are treated as if they sat at the container's depth
PREPROC_CONTAINER_TYPES = {"preproc_ifdef", "preproc_if", "preproc_else", "preproc_elif", "template_declaration"}
DECORATED_NODE_TYPE = "decorated_definition"

# Wrapper node type -> leading token of its source text
WRAPPER_PREFIXES: Dict[str, str] = {
    "export_statement": "export",
    "decorated_definition": "@",
}

# Relaxed kind -> node types used when locating a single top-level symbol
LOCATE_NODE_TYPES: Dict[SymbolKind, set] = {
    SymbolKind.FUNCTION: FUNCTION_NODE_TYPES,
    SymbolKind.CLASS: CLASS_NODE_TYPES,
    SymbolKind.STRUCT: {"struct_specifier"},
    SymbolKind.VARIABLE: VARIABLE_DECLARATION_TYPES,
    SymbolKind.EXPORT: EXPORT_NODE_TYPES,
}

# Kind -> node types accepted inside a class body
MEMBER_NODE_TYPES: Dict[SymbolKind, set] = {
    SymbolKind.METHOD: {"method_definition", "function_definition"},
    SymbolKind.CONSTRUCTOR: {"method_definition", "function_definition"},
    SymbolKind.PROPERTY: {
        "field_definition",
        "public_field_definition",
        "property_definition",
        "field_declaration",
        "assignment",
        "method_definition",
        "function_definition",
    },
}
ALL_MEMBER_NODE_TYPES = set().union(*MEMBER_NODE_TYPES.values())

# Fields tried, in order, when resolving a declaration's name
NAME_FIELDS = ("name", "property", "left")

SIGNATURE_MAX_LENGTH = 120

# Directories skipped while collecting map files
IGNORE_DIRS = {
    "node_modules", ".git", ".svn", ".hg", "__pycache__", ".pytest_cache",
    ".mypy_cache", ".tox", ".nox", ".eggs", "dist", "build",
    ".next", ".nuxt", ".output", "coverage", ".cache", ".turbo",
    "venv", ".venv", "env", "virtualenv", "target", "out", "bin",
    "obj", ".idea", ".vs", "vendor", "bower_components", ".repomap",
    "site-packages",
}

# Max file size to map (5MB)
MAX_FILE_SIZE = 5 * 1024 * 1024

# RepoMap config directory name
CONFIG_DIR = ".repomap"
CONFIG_FILE = "config.json"

MAP_PREAMBLE = (
    "// These are snippets of the symbols in the project. This DOES NOT contain "
    "the full file contents. This only includes relevant symbols for you to "
    "reference so you know what to retrieve with the retrieveFiles tool:\n"
)

@dataclass
class MapItem:
    """A file or directory to include in the repository map."""
    path: str
    ignore: List[str] = field(default_factory=list)  # .gitignore style patterns

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapItem":
        ignore = data.get("ignore") or []
        if isinstance(ignore, str):
            ignore = [pattern.strip() for pattern in re.split(r"[,\n]", ignore) if pattern.strip()]
        return cls(path=str(data["path"]), ignore=list(ignore))

@dataclass
class EngineConfig:
    """Engine settings loaded from .repomap/config.json."""
    heuristic_fast_path: bool = True
    items: List[MapItem] = field(default_factory=lambda: [MapItem(path=".")])

def load_config(project_root: Path, verbose: bool = False) -> EngineConfig:
    """Load engine configuration, falling back to defaults on any problem."""
    config = EngineConfig()
    path = Path(project_root) / CONFIG_DIR / CONFIG_FILE
    if not path.is_file():
        log_debug(f"No config file at {path}, using defaults", verbose)
        return config

    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, json.JSONDecodeError) as e:
        log_warn(f"Could not read {path}: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        log_warn(f"Ignoring {path}: expected a JSON object")
        return config

    if "heuristic_fast_path" in data:
        config.heuristic_fast_path = bool(data["heuristic_fast_path"])

    items = data.get("items")
    if isinstance(items, list):
        parsed_items = []
        for item in items:
            if not isinstance(item, dict) or not item.get("path"):
                log_warn(f"Ignoring invalid map item: {item!r}")
                continue
            parsed_items.append(MapItem.from_dict(item))
        config.items = parsed_items

    log_debug(f"Loaded config from {path}", verbose)
    return config

# -----------------------------------------------------------------------------
# DATA STRUCTURES
# -----------------------------------------------------------------------------

@dataclass
class Symbol:
    """A named declaration found in a source file."""
    name: str
    kind: SymbolKind
    signature: str               # First source line, truncated
    declaration_line: int        # 1-based
    parent_class: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "name": self.name,
            "kind": self.kind.value,
            "signature": self.signature,
            "line": self.declaration_line,
        }
        if self.parent_class:
            result["parent_class"] = self.parent_class
        return result

@dataclass(frozen=True)
class SourceRange:
    """Half-open span of source text; 0-based lines and character columns."""
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def __post_init__(self):
        if self.start_line > self.end_line or (
            self.start_line == self.end_line and self.start_column > self.end_column
        ):
            raise ValueError(
                f"Invalid range {self.start_line}:{self.start_column}-"
                f"{self.end_line}:{self.end_column}"
            )

@dataclass
class LocatedSymbol:
    """A symbol together with the exact source span it occupies."""
    symbol: Symbol
    range: SourceRange
    text: str
    node: Any = None
    wrapper_range: Optional[SourceRange] = None  # enclosing export/decorator
    wrapper_prefix: Optional[str] = None

@dataclass
class EditIntent:
    """A request to create, replace or delete one symbol."""
    file_path: str
    symbol_name: str
    symbol_kind: Any
    new_content: Optional[str]
    parent_class: Optional[str] = None

    @property
    def is_delete(self) -> bool:
        return self.new_content == ""

# -----------------------------------------------------------------------------
# GRAMMAR REGISTRY
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Grammar:
    """A tree-sitter grammar and the conventions edits rely on."""
    name: str
    constructor_name: Optional[str] = None  # None: constructors are named after the class
    indent_unit: str = "  "
    uses_braces: bool = True

    def constructor_for(self, class_name: Optional[str]) -> Optional[str]:
        return self.constructor_name or class_name

GRAMMARS: Dict[str, Grammar] = {
    "javascript": Grammar("javascript", constructor_name="constructor"),
    "typescript": Grammar("typescript", constructor_name="constructor"),
    "tsx": Grammar("tsx", constructor_name="constructor"),
    "python": Grammar("python", constructor_name="__init__", indent_unit="    ", uses_braces=False),
    "c": Grammar("c"),
    "cpp": Grammar("cpp"),
}

def select_grammar(extension: str) -> Optional[Grammar]:
    """Map a file extension to its grammar, or None when unsupported."""
    grammar_name = EXTENSION_GRAMMARS.get((extension or "").lower())
    if grammar_name is None:
        return None
    return GRAMMARS[grammar_name]

@dataclass
class ParsedSource:
    """Source text paired with its syntax tree."""
    code: str
    source_bytes: bytes
    tree: Any
    grammar: Grammar
    lines: List[str] = field(init=False, repr=False)
    byte_lines: List[bytes] = field(init=False, repr=False)

    def __post_init__(self):
        self.lines = self.code.split('\n')
        self.byte_lines = self.source_bytes.split(b'\n')

    @property
    def root(self) -> Any:
        return self.tree.root_node

    def node_text(self, node: Any) -> str:
        """Get the text content of a node."""
        return self.source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def char_column(self, row: int, byte_column: int) -> int:
        """Convert a tree-sitter byte column to a character column."""
        if row >= len(self.byte_lines):
            return byte_column
        return len(self.byte_lines[row][:byte_column].decode("utf-8", errors="surrogateescape"))

    def node_range(self, node: Any) -> SourceRange:
        start_row, start_col = node.start_point
        end_row, end_col = node.end_point
        return SourceRange(
            start_row, self.char_column(start_row, start_col),
            end_row, self.char_column(end_row, end_col),
        )

class GrammarRegistry:
    """Builds tree-sitter parsers for the supported grammars."""

    def __init__(self, parser_factory: Optional[Callable[[str], Any]] = None,
                 verbose: bool = False):
        self.verbose = verbose
        self.parser_factory = parser_factory
        if self.parser_factory is None:
            self._init_parsers()

    def _init_parsers(self) -> None:
        """Bind the tree-sitter-languages parser factory."""
        try:
            import tree_sitter_languages
            self.parser_factory = tree_sitter_languages.get_parser
            log_debug("tree-sitter-languages loaded successfully", self.verbose)
        except ImportError as e:
            log_error(f"Failed to import tree-sitter-languages: {e}")
            log_error("Install with: pip install tree-sitter-languages")

    def select(self, extension: str) -> Optional[Grammar]:
        return select_grammar(extension)

    def get_parser(self, grammar: Grammar) -> Optional[Any]:
        """Create a fresh parser for the grammar."""
        if self.parser_factory is None:
            return None

        try:
            parser = self.parser_factory(grammar.name)
        except Exception as e:
            log_debug(f"No parser available for {grammar.name}: {e}", self.verbose)
            return None
        log_debug(f"Created parser for {grammar.name}", self.verbose)
        return parser

    def parse(self, code: str, grammar: Grammar) -> Optional[ParsedSource]:
        """Parse code, returning None when no parser can be built."""
        parser = self.get_parser(grammar)
        if parser is None:
            return None

        source_bytes = code.encode("utf-8", errors="surrogateescape")
        tree = parser.parse(source_bytes)
        return ParsedSource(code, source_bytes, tree, grammar)

# -----------------------------------------------------------------------------
# SYMBOL EXTRACTOR - Enumerate and locate declarations
# -----------------------------------------------------------------------------

class SymbolExtractor:
    """Walks syntax trees to list symbols or find a single one.

    Only depth-1 declarations (direct children of the file root) are
    indexed, plus the methods of those classes. Export statements,
    decorators and preprocessor conditionals are looked through.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    # -------------------------------------------------------------------------
    # Node helpers
    # -------------------------------------------------------------------------

    def _resolve_name(self, node: Any, parsed: ParsedSource) -> Optional[str]:
        """Extract the identifier a declaration node introduces."""
        for field_name in NAME_FIELDS:
            name_node = node.child_by_field_name(field_name)
            if name_node is not None:
                return parsed.node_text(name_node) or None

        # C/C++: int *name(void) nests the identifier in declarators
        declarator = node.child_by_field_name("declarator")
        while declarator is not None:
            inner = declarator.child_by_field_name("declarator")
            if inner is None:
                return parsed.node_text(declarator) or None
            declarator = inner

        named_children = node.named_children
        if named_children:
            return parsed.node_text(named_children[0]) or None
        return None

    def _first_declarator(self, node: Any) -> Optional[Any]:
        """Depth-first search for the first variable declarator."""
        for child in node.named_children:
            if child.type in DECLARATOR_NODE_TYPES:
                return child
            found = self._first_declarator(child)
            if found is not None:
                return found
        return None

    def _declarator_name(self, declarator: Any, parsed: ParsedSource) -> Optional[str]:
        name_node = declarator.child_by_field_name("name")
        if name_node is None:
            return None
        return parsed.node_text(name_node) or None

    def _signature(self, node: Any, parsed: ParsedSource) -> str:
        return parsed.node_text(node).split('\n')[0][:SIGNATURE_MAX_LENGTH]

    def _make_symbol(self, node: Any, parsed: ParsedSource, name: str, kind: SymbolKind,
                     parent_class: Optional[str] = None) -> Symbol:
        return Symbol(
            name=name,
            kind=kind,
            signature=self._signature(node, parsed),
            declaration_line=node.start_point[0] + 1,
            parent_class=parent_class,
        )

    def _expand_transparent(self, node: Any) -> Optional[List[Any]]:
        """Children to visit in place of a wrapper node, or None."""
        if node.type == DECORATED_NODE_TYPE:
            definition = node.child_by_field_name("definition")
            return [definition] if definition is not None else []
        if node.type in PREPROC_CONTAINER_TYPES:
            return list(node.children)
        return None

    def _top_level_nodes(self, nodes: List[Any]) -> Iterator[Any]:
        """Yield the depth-1 declarations, looking through transparent wrappers."""
        for node in nodes:
            expanded = self._expand_transparent(node)
            if expanded is None:
                yield node
            else:
                yield from self._top_level_nodes(expanded)

    def _unwrap_export(self, node: Any, parsed: ParsedSource
                       ) -> Optional[Tuple[SymbolKind, str, Any]]:
        """Resolve an export statement to (inner kind, inner name, declaration)."""
        declaration = node.child_by_field_name("declaration")
        if declaration is None:
            return None

        if declaration.type in FUNCTION_NODE_TYPES:
            kind = SymbolKind.FUNCTION
            name_node = declaration.child_by_field_name("name")
        elif declaration.type in CLASS_NODE_TYPES:
            kind = SymbolKind.CLASS
            name_node = declaration.child_by_field_name("name")
        elif declaration.type in VARIABLE_DECLARATION_TYPES:
            kind = SymbolKind.VARIABLE
            declarator = self._first_declarator(declaration)
            name_node = declarator.child_by_field_name("name") if declarator is not None else None
        else:
            return None

        if name_node is None:
            return None
        name = parsed.node_text(name_node)
        if not name:
            return None
        return kind, name, declaration

    def _wrapper_of(self, node: Any) -> Optional[Any]:
        parent = getattr(node, "parent", None)
        if parent is not None and parent.type in WRAPPER_PREFIXES:
            return parent
        return None

    def _locate(self, node: Any, parsed: ParsedSource, symbol: Symbol) -> LocatedSymbol:
        located = LocatedSymbol(
            symbol=symbol,
            range=parsed.node_range(node),
            text=parsed.node_text(node),
            node=node,
        )
        wrapper = self._wrapper_of(node)
        if wrapper is not None:
            located.wrapper_range = parsed.node_range(wrapper)
            located.wrapper_prefix = WRAPPER_PREFIXES[wrapper.type]
        return located

    # -------------------------------------------------------------------------
    # Enumerate
    # -------------------------------------------------------------------------

    def extract_symbols(self, parsed: ParsedSource) -> List[Symbol]:
        """List every indexed symbol in depth-first, source order."""
        symbols: List[Symbol] = []
        self._walk(parsed.root, parsed, symbols, 0, None)
        return symbols

    def _walk(self, node: Any, parsed: ParsedSource, symbols: List[Symbol],
              depth: int, parent: Optional[Symbol]) -> None:
        """Recursively walk the tree and collect symbols."""
        expanded = self._expand_transparent(node)
        if expanded is not None:
            for child in expanded:
                self._walk(child, parsed, symbols, depth, parent)
            return

        kind = SYMBOL_NODE_KINDS.get(node.type)
        if kind is not None:
            if node.type in EXPORT_NODE_TYPES:
                if depth == 1:
                    self._record_export(node, parsed, symbols)
                return

            if node.type in VARIABLE_DECLARATION_TYPES:
                if depth == 1:
                    self._record_variable(node, parsed, symbols)
                return

            if parent is not None and parent.kind is SymbolKind.CLASS and (
                node.type in METHOD_NODE_TYPES or kind is SymbolKind.FUNCTION
            ):
                name = self._resolve_name(node, parsed)
                if name:
                    symbols.append(self._make_symbol(
                        node, parsed, name, SymbolKind.METHOD, parent_class=parent.name
                    ))
                    log_debug(f"Found method: {parent.name}.{name}", self.verbose)
                return

            if depth == 1:
                name = self._resolve_name(node, parsed)
                if name:
                    symbol = self._make_symbol(node, parsed, name, kind)
                    symbols.append(symbol)
                    log_debug(f"Found {kind.value}: {name}", self.verbose)

                    if kind is SymbolKind.CLASS:
                        for child in node.children:
                            self._walk(child, parsed, symbols, depth + 1, symbol)
                        return
            elif kind is SymbolKind.CLASS:
                # Members of unindexed nested classes are not credited to the outer one
                parent = None

        for child in node.children:
            self._walk(child, parsed, symbols, depth + 1, parent)

    def _record_export(self, node: Any, parsed: ParsedSource, symbols: List[Symbol]) -> None:
        unwrapped = self._unwrap_export(node, parsed)
        if unwrapped is None:
            return
        kind, name, _declaration = unwrapped
        # The signature keeps the export keyword visible
        symbols.append(self._make_symbol(node, parsed, name, kind))

    def _record_variable(self, node: Any, parsed: ParsedSource, symbols: List[Symbol]) -> None:
        declarator = self._first_declarator(node)
        if declarator is None:
            return
        name = self._declarator_name(declarator, parsed)
        if name:
            symbols.append(self._make_symbol(declarator, parsed, name, SymbolKind.VARIABLE))

    # -------------------------------------------------------------------------
    # Locate one
    # -------------------------------------------------------------------------

    def find_symbol(self, parsed: ParsedSource, name: str, kind: Any) -> Optional[LocatedSymbol]:
        """Find the first top-level symbol matching (name, kind)."""
        kind = SymbolKind.parse(kind)

        if kind in CLASS_MEMBER_KINDS:
            for class_node, class_name in self._top_level_classes(parsed):
                found = self.find_symbol_in_class(parsed, class_node, name, kind, class_name)
                if found is not None:
                    return found
            return None

        for node in self._top_level_nodes(parsed.root.children):
            found = self._match_top_level(node, parsed, name, kind)
            if found is not None:
                log_debug(f"Located {kind.value} '{name}' at line {found.symbol.declaration_line}",
                          self.verbose)
                return found
        return None

    def _match_top_level(self, node: Any, parsed: ParsedSource, name: str,
                         kind: SymbolKind) -> Optional[LocatedSymbol]:
        if node.type in EXPORT_NODE_TYPES:
            unwrapped = self._unwrap_export(node, parsed)
            if unwrapped is None:
                return None
            inner_kind, inner_name, declaration = unwrapped

            if kind is SymbolKind.EXPORT:
                if inner_name != name:
                    return None
                return self._locate(node, parsed, self._make_symbol(node, parsed, name, kind))

            if inner_kind is not kind:
                return None
            if kind is SymbolKind.VARIABLE:
                located = self._match_variable(declaration, parsed, name)
            elif inner_name == name:
                located = self._locate(declaration, parsed, self._make_symbol(declaration, parsed, name, kind))
            else:
                located = None
            if located is not None and located.node is declaration:
                located.symbol.signature = self._signature(node, parsed)
                located.symbol.declaration_line = node.start_point[0] + 1
            return located

        if node.type not in LOCATE_NODE_TYPES.get(kind, ()):
            return None

        if kind is SymbolKind.VARIABLE:
            return self._match_variable(node, parsed, name)

        if self._resolve_name(node, parsed) != name:
            return None
        return self._locate(node, parsed, self._make_symbol(node, parsed, name, kind))

    def _match_variable(self, node: Any, parsed: ParsedSource, name: str) -> Optional[LocatedSymbol]:
        """Match a declaration statement; later declarators are located on their own."""
        declarators = [child for child in node.named_children if child.type in DECLARATOR_NODE_TYPES]
        for index, declarator in enumerate(declarators):
            if self._declarator_name(declarator, parsed) != name:
                continue
            symbol = self._make_symbol(declarator, parsed, name, SymbolKind.VARIABLE)
            target = node if index == 0 else declarator
            return self._locate(target, parsed, symbol)
        return None

    def _top_level_classes(self, parsed: ParsedSource) -> Iterator[Tuple[Any, Optional[str]]]:
        """Yield (class node, class name) for every top-level class, exported or not."""
        for node in self._top_level_nodes(parsed.root.children):
            if node.type in EXPORT_NODE_TYPES:
                declaration = node.child_by_field_name("declaration")
                if declaration is not None and declaration.type in CLASS_NODE_TYPES:
                    yield declaration, self._resolve_name(declaration, parsed)
            elif node.type in CLASS_NODE_TYPES:
                yield node, self._resolve_name(node, parsed)

    # -------------------------------------------------------------------------
    # Class-scoped locate
    # -------------------------------------------------------------------------

    def find_symbol_in_class(self, parsed: ParsedSource, class_node: Any, name: str,
                             kind: Any, class_name: Optional[str] = None
                             ) -> Optional[LocatedSymbol]:
        """Find a member of one class, ignoring members of nested classes."""
        kind = SymbolKind.parse(kind)
        target_types = MEMBER_NODE_TYPES.get(kind, LOCATE_NODE_TYPES.get(kind, set()))
        if class_name is None:
            class_name = self._resolve_name(class_node, parsed)

        wanted = {name}
        if kind is SymbolKind.CONSTRUCTOR:
            constructor_name = parsed.grammar.constructor_for(class_name)
            if constructor_name:
                wanted.add(constructor_name)

        return self._search_members(class_node, parsed, wanted, kind, target_types, class_name)

    def _search_members(self, node: Any, parsed: ParsedSource, wanted: set, kind: SymbolKind,
                        target_types: set, class_name: Optional[str]) -> Optional[LocatedSymbol]:
        for child in node.children:
            if child.type in CLASS_NODE_TYPES:
                continue

            if child.type in target_types:
                member_name = self._resolve_name(child, parsed)
                if member_name in wanted:
                    symbol = self._make_symbol(child, parsed, member_name, kind, parent_class=class_name)
                    return self._locate(child, parsed, symbol)

            # Members do not nest; their bodies hold locals
            if child.type in ALL_MEMBER_NODE_TYPES:
                continue

            found = self._search_members(child, parsed, wanted, kind, target_types, class_name)
            if found is not None:
                return found
        return None

# -----------------------------------------------------------------------------
# TEXT SPLICER - Line-oriented edits on located ranges
# -----------------------------------------------------------------------------

def get_indentation(line: str) -> str:
    match = re.match(r"^(\s*)", line)
    return match.group(1) if match else ""

class TextSplicer:
    """Applies replace, delete and insert edits without reformatting."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def generate_diff(self, old_content: str, new_content: str, file_path: str) -> str:
        """Generate unified diff between old and new content."""
        diff = difflib.unified_diff(
            old_content.split('\n'),
            new_content.split('\n'),
            fromfile=f"a/{file_path}",
            tofile=f"b/{file_path}",
            lineterm=''
        )
        return '\n'.join(diff)

    @staticmethod
    def collapse_blank_lines(code: str) -> str:
        return re.sub(r"\n{3,}", "\n\n", code)

    def _check_range(self, lines: List[str], source_range: SourceRange) -> None:
        if source_range.end_line >= len(lines):
            raise ValueError(
                f"Range ends at line {source_range.end_line + 1} but the source has {len(lines)} lines"
            )

    def replace_range(self, code: str, source_range: SourceRange, new_content: str) -> str:
        """Replace the text inside a range, keeping the rest of its boundary lines."""
        lines = code.split('\n')
        self._check_range(lines, source_range)
        start, end = source_range.start_line, source_range.end_line

        if start == end:
            line = lines[start]
            lines[start] = (line[:source_range.start_column] + new_content
                            + line[source_range.end_column:])
            return '\n'.join(lines)

        prefix = lines[start][:source_range.start_column]
        suffix = lines[end][source_range.end_column:]

        new_lines = new_content.split('\n')
        new_lines[0] = prefix + new_lines[0]
        new_lines[-1] = new_lines[-1] + suffix

        lines[start:end + 1] = new_lines
        return '\n'.join(lines)

    def delete_range(self, code: str, source_range: SourceRange) -> str:
        """Delete a range; whole-line spans take their lines with them."""
        lines = code.split('\n')
        self._check_range(lines, source_range)
        start, end = source_range.start_line, source_range.end_line

        prefix = lines[start][:source_range.start_column]
        suffix = lines[end][source_range.end_column:]
        if prefix.strip() or suffix.strip():
            replaced = self.replace_range(code, source_range, "")
            return self.collapse_blank_lines(replaced)

        del lines[start:end + 1]

        # Do not leave two blank lines where the symbol used to be
        if 0 < start < len(lines):
            if lines[start].strip() == "" and lines[start - 1].strip() == "":
                del lines[start]

        return '\n'.join(lines)

    def create_in_class(self, code: str, class_range: SourceRange, content: str,
                        grammar: Grammar) -> str:
        """Insert a member at the end of a class body."""
        lines = code.split('\n')
        self._check_range(lines, class_range)

        class_indent = get_indentation(lines[class_range.start_line])
        member_indent = class_indent + grammar.indent_unit
        indented = [member_indent + line if line.strip() else line
                    for line in content.split('\n')]

        if not grammar.uses_braces:
            insert_at = class_range.end_line + 1
            lines[insert_at:insert_at] = [""] + indented
            return '\n'.join(lines)

        last_line = lines[class_range.end_line]
        brace_column = last_line.rfind("}", 0, class_range.end_column)
        if brace_column == -1:
            raise ValueError(f"No closing brace found on line {class_range.end_line + 1}")

        before_brace = last_line[:brace_column]
        after_brace = last_line[brace_column:]
        lines[class_range.end_line] = (
            before_brace + '\n' + '\n'.join(indented) + '\n' + class_indent + after_brace
        )
        return '\n'.join(lines)

    def append_top_level(self, code: str, content: str) -> str:
        """Add a new top-level symbol at the end of the file."""
        if not code.strip():
            return content.strip()
        return f"{code.strip()}\n{content.strip()}"

    def splice_span(self, code: str, start: int, end: int, new_content: str) -> str:
        """Replace the character span [start, end)."""
        if new_content == "":
            return self.collapse_blank_lines(code[:start] + code[end:])
        return code[:start] + new_content + code[end:]

# -----------------------------------------------------------------------------
# HEURISTIC MATCHER - Top-level functions without a grammar
# -----------------------------------------------------------------------------

def _find_closing(code: str, open_index: int, open_char: str, close_char: str) -> Optional[int]:
    """Index of the bracket closing the one at open_index, by depth counting."""
    depth = 0
    for i in range(open_index, len(code)):
        ch = code[i]
        if ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return i
    return None

def find_top_level_function_range(code: str, name: str) -> Optional[Tuple[int, int]]:
    """Locate `function <name>(...) {...}` at the start of a line.

    Returns the half-open character span of the declaration. Braces inside
    strings, comments and template literals are counted like any other, so
    such functions can be mis-measured.
    """
    pattern = re.compile(r"(^|\n)[ \t]*function\s+" + re.escape(name) + r"\s*\(")
    match = pattern.search(code)
    if not match:
        return None

    start = match.start() + len(match.group(1))
    close_paren = _find_closing(code, match.end() - 1, "(", ")")
    if close_paren is None:
        return None

    open_brace = code.find("{", close_paren + 1)
    if open_brace == -1:
        return None

    close_brace = _find_closing(code, open_brace, "{", "}")
    if close_brace is None:
        return None
    return start, close_brace + 1

# -----------------------------------------------------------------------------
# REPO MAP - Renderer and service
# -----------------------------------------------------------------------------

class RepoMapRenderer:
    """Turns a file's symbols into a compact list of declaration lines."""

    COMMENT_PREFIXES = ("//", "*", "/**", "*/")

    def _is_comment_or_empty(self, line: str) -> bool:
        trimmed = line.strip()
        return trimmed == "" or trimmed.startswith(self.COMMENT_PREFIXES)

    def important_lines(self, code: str, symbols: List[Symbol]) -> List[int]:
        """0-based line indexes worth showing, ascending and unique."""
        lines = code.split('\n')
        important = set()

        for symbol in symbols:
            line_index = symbol.declaration_line - 1

            while line_index >= 0 and self._is_comment_or_empty(lines[line_index]):
                line_index -= 1

            while line_index < len(lines) and (
                line_index < 0 or self._is_comment_or_empty(lines[line_index])
            ):
                line_index += 1

            if 0 <= line_index < len(lines):
                important.add(line_index)

        return sorted(important)

    def format_file_output(self, file_path: str, code: str, symbols: List[Symbol]) -> str:
        lines = code.split('\n')
        output = f"{file_path}:\n"
        for line_index in self.important_lines(code, symbols):
            output += f"- {lines[line_index].strip()}\n"
        return output

class RepoMapService:
    """Builds the repository map one file at a time."""

    def __init__(self, file_system: Any, registry: GrammarRegistry,
                 extractor: SymbolExtractor, renderer: RepoMapRenderer,
                 verbose: bool = False):
        self.file_system = file_system
        self.registry = registry
        self.extractor = extractor
        self.renderer = renderer
        self.verbose = verbose

    def render_file(self, file_path: str) -> Optional[str]:
        """Map block for one file; None when the file is skipped."""
        grammar = self.registry.select(Path(file_path).suffix)
        if grammar is None:
            return None

        code = self.file_system.get_file(file_path)
        if code is None:
            log_error(f"Could not read content for file {file_path}. Skipping.")
            return None

        parsed = self.registry.parse(code, grammar)
        if parsed is None:
            log_error(f"No parser available for {file_path}. Skipping.")
            return None

        symbols = self.extractor.extract_symbols(parsed)
        log_debug(f"Mapped {file_path}: {len(symbols)} symbols", self.verbose)
        return self.renderer.format_file_output(file_path, code, symbols)

    def build_map(self, files: List[str]) -> Optional[str]:
        """Render every file; a failing file never aborts the batch."""
        repo_map = []
        for file_path in files:
            try:
                output = self.render_file(file_path)
            except Exception as e:
                log_error(f"Error processing file {file_path}: {e}")
                continue
            if output:
                repo_map.append(output)

        if not repo_map:
            return None
        return MAP_PREAMBLE + "\n".join(repo_map)

    def get_memories(self, files: List[str]) -> Iterator[Dict[str, str]]:
        """Yield the map as a chat memory message."""
        repo_map = self.build_map(files)
        if repo_map:
            yield {"role": "user", "content": repo_map}

# -----------------------------------------------------------------------------
# FILE SYSTEM - Local collaborator for reads, writes and file discovery
# -----------------------------------------------------------------------------

class LocalFileSystem:
    """Reads and writes project files relative to a root directory."""

    def __init__(self, project_root: Path, verbose: bool = False):
        self.project_root = Path(project_root).resolve()
        self.verbose = verbose
        self.dirty = False

    def _resolve(self, file_path: str) -> Path:
        path = Path(file_path)
        if not path.is_absolute():
            path = self.project_root / path
        return path

    def exists(self, file_path: str) -> bool:
        return self._resolve(file_path).is_file()

    def get_file(self, file_path: str) -> Optional[str]:
        try:
            # surrogateescape round-trips bytes that are not valid UTF-8
            with open(self._resolve(file_path), "r", encoding="utf-8",
                      errors="surrogateescape", newline="") as handle:
                return handle.read()
        except OSError as e:
            log_debug(f"Error reading {file_path}: {e}", self.verbose)
            return None

    def write_file(self, file_path: str, content: str) -> bool:
        path = self._resolve(file_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # newline='' keeps the content's own line endings
            with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as handle:
                handle.write(content)
        except (OSError, UnicodeEncodeError) as e:
            log_error(f"Error writing {file_path}: {e}")
            return False
        return True

    def set_dirty(self, dirty: bool) -> None:
        self.dirty = dirty

    def _should_ignore(self, path: Path) -> bool:
        """Check if a path should be ignored."""
        for part in path.parts:
            if part in IGNORE_DIRS:
                return True
            # Ignore hidden directories except specific ones
            if part.startswith('.') and part not in ('.github', '.vscode'):
                return True
        return False

    def _build_ignore_matcher(self, patterns: List[str], base_dir: Path) -> Optional[Callable[[Path], bool]]:
        """
        Compile .gitignore style patterns anchored at base_dir.

        Rules are evaluated like a .gitignore file: the last matching rule
        decides, so a later '!pattern' re-includes a path. Files below an
        ignored directory are ignored as well.
        """
        rules = []
        for pattern in patterns:
            rule = rule_from_pattern(pattern.strip(), base_path=base_dir)
            if rule:
                rules.append(rule)
        if not rules:
            return None

        def ignored_by_rules(path: Path) -> bool:
            for rule in reversed(rules):
                if rule.match(str(path)):
                    return not rule.negation
            return False

        def matches(path: Path) -> bool:
            try:
                parts = path.relative_to(base_dir).parts
            except ValueError:
                return False
            return any(ignored_by_rules(base_dir.joinpath(*parts[:depth]))
                       for depth in range(1, len(parts) + 1))

        return matches

    def collect_files(self, items: List[MapItem]) -> List[str]:
        """Gather project-relative paths for the configured map items."""
        files = set()
        for item in items:
            base = self._resolve(item.path).resolve()
            if base.is_file():
                candidates = [base]
                ignored = self._build_ignore_matcher(item.ignore, base.parent)
            elif base.is_dir():
                candidates = [p for p in base.rglob('*') if p.is_file()]
                ignored = self._build_ignore_matcher(item.ignore, base)
            else:
                log_warn(f"Map item not found: {item.path}")
                continue

            for path in candidates:
                try:
                    rel_path = path.resolve().relative_to(self.project_root)
                except ValueError:
                    continue
                if self._should_ignore(rel_path):
                    continue
                rel_path_str = rel_path.as_posix()
                if ignored and ignored(path.resolve()):
                    continue
                try:
                    if path.stat().st_size > MAX_FILE_SIZE:
                        log_debug(f"Skipping large file: {rel_path_str}", self.verbose)
                        continue
                except OSError:
                    continue
                files.add(rel_path_str)

        return sorted(files)

# -----------------------------------------------------------------------------
# SYMBOL TOOL - Create, replace or delete one symbol
# -----------------------------------------------------------------------------

def _error(code: str, message: str) -> Dict[str, Any]:
    return {"success": False, "error": code, "message": message}

class SymbolTool:
    """Edits a single named symbol in one file."""

    NAME = "repo-map/symbol"

    def __init__(self, file_system: Any, registry: GrammarRegistry,
                 extractor: SymbolExtractor, splicer: TextSplicer,
                 config: EngineConfig, verbose: bool = False):
        self.file_system = file_system
        self.registry = registry
        self.extractor = extractor
        self.splicer = splicer
        self.config = config
        self.verbose = verbose

    def execute(self, intent: EditIntent, dry_run: bool = False) -> Dict[str, Any]:
        """Apply an edit intent and write the result back."""
        if not intent.file_path or not intent.symbol_name or not intent.symbol_kind \
                or intent.new_content is None:
            return _error(
                "missing_args",
                "Missing required parameters. Please provide path, symbol name, "
                "symbol kind, and content."
            )

        try:
            kind = SymbolKind.parse(intent.symbol_kind)
        except ValueError as e:
            return _error("invalid_kind", str(e))

        file_path = intent.file_path
        name = intent.symbol_name
        content = intent.new_content
        parent_class = intent.parent_class
        if parent_class and kind not in CLASS_MEMBER_KINDS:
            log_warn(f"Ignoring parent class '{parent_class}' for {kind.value} '{name}'")
            parent_class = None

        description = (f"{kind.value} '{name}' in class '{parent_class}'"
                       if parent_class else f"{kind.value} '{name}'")
        log_info(f"[{self.NAME}] Modifying {description} in {file_path}")

        if not self.file_system.exists(file_path):
            return _error("file_not_found",
                          f"File {file_path} not found. Please create the file first.")

        extension = Path(file_path).suffix.lower()
        grammar = self.registry.select(extension)
        if grammar is None:
            return _error(
                "unsupported_file_type",
                f"Unsupported file type '{extension or '(none)'}' for {file_path}. "
                f"Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
            )

        original = self.file_system.get_file(file_path)
        if original is None:
            return _error("unreadable_file", f"Could not read content for file {file_path}.")

        try:
            new_code, error = self._compute(original, file_path, extension, grammar,
                                            name, kind, content, parent_class)
        except Exception as e:
            log_error(f"[{self.NAME}] Error modifying {description}: {e}")
            return _error("execution_failed", f"Error modifying symbol: {e}")

        if error:
            return error
        if new_code is None:
            return _error("generate_failed", "Failed to generate modified code.")

        diff_str = self.splicer.generate_diff(original, new_code, file_path)

        if dry_run:
            return {
                "success": True,
                "diff": diff_str,
                "new_content": new_code,
                "message": "Dry run - no changes applied"
            }

        if not self.file_system.write_file(file_path, new_code):
            return _error("write_failed", f"Failed to write changes to {file_path}")

        self.file_system.set_dirty(True)
        log_info(f"[{self.NAME}] Successfully modified {description} in {file_path}")
        return {
            "success": True,
            "diff": diff_str,
            "message": f"{description} successfully modified"
        }

    def _use_fast_path(self, extension: str, kind: SymbolKind,
                       parent_class: Optional[str]) -> bool:
        return (self.config.heuristic_fast_path
                and not parent_class
                and kind is SymbolKind.FUNCTION
                and extension in JS_FAMILY_EXTENSIONS)

    def _compute(self, original: str, file_path: str, extension: str, grammar: Grammar,
                 name: str, kind: SymbolKind, content: str,
                 parent_class: Optional[str]) -> Tuple[Optional[str], Optional[Dict[str, Any]]]:
        """Work out the new file content. Returns (new_code, error_dict)."""
        if self._use_fast_path(extension, kind, parent_class):
            log_debug(f"Using heuristic matcher for function '{name}'", self.verbose)
            span = find_top_level_function_range(original, name)
            if span is None:
                return self.splicer.append_top_level(original, content), None
            start, end = span
            return self.splicer.splice_span(original, start, end, content), None

        parsed = self.registry.parse(original, grammar)
        if parsed is None:
            return None, _error(
                "grammar_unavailable",
                f"No parser available for {grammar.name}; cannot edit {file_path}."
            )

        if parent_class:
            class_symbol = (self.extractor.find_symbol(parsed, parent_class, SymbolKind.CLASS)
                            or self.extractor.find_symbol(parsed, parent_class, SymbolKind.STRUCT))
            if class_symbol is None:
                return None, _error("parent_class_not_found",
                                    f"Parent class '{parent_class}' not found in {file_path}.")

            member = self.extractor.find_symbol_in_class(
                parsed, class_symbol.node, name, kind, parent_class
            )
            if member is not None:
                return self._apply_located(original, member, content), None
            if content == "":
                return None, _error("symbol_not_found",
                                    f"{kind.value} '{name}' not found in class '{parent_class}'.")
            return self.splicer.create_in_class(original, class_symbol.range, content, grammar), None

        located = self.extractor.find_symbol(parsed, name, kind)
        if located is None:
            return self.splicer.append_top_level(original, content), None
        return self._apply_located(original, located, content), None

    def _target_range(self, located: LocatedSymbol, content: str) -> SourceRange:
        """Pick the wrapper span when deleting, or when the content restates the wrapper."""
        if located.wrapper_range is None:
            return located.range
        if content == "" or content.lstrip().startswith(located.wrapper_prefix):
            return located.wrapper_range
        return located.range

    def _apply_located(self, original: str, located: LocatedSymbol, content: str) -> str:
        target = self._target_range(located, content)
        if content == "":
            return self.splicer.delete_range(original, target)
        return self.splicer.replace_range(original, target, content)

# -----------------------------------------------------------------------------
# REPOMAP ENGINE - Main coordinator
# -----------------------------------------------------------------------------

class RepoMapEngine:
    """Main engine that coordinates all components."""

    def __init__(self, project_root: str, config: Optional[EngineConfig] = None,
                 file_system: Any = None,
                 parser_factory: Optional[Callable[[str], Any]] = None,
                 verbose: bool = False):
        self.project_root = Path(project_root).resolve()
        self.verbose = verbose
        self.config = config if config is not None else load_config(self.project_root, verbose)

        # Initialize components
        self.file_system = file_system if file_system is not None else LocalFileSystem(self.project_root, verbose)
        self.registry = GrammarRegistry(parser_factory, verbose)
        self.extractor = SymbolExtractor(verbose)
        self.splicer = TextSplicer(verbose)
        self.renderer = RepoMapRenderer()
        self.map_service = RepoMapService(
            self.file_system, self.registry, self.extractor, self.renderer, verbose
        )
        self.symbol_tool = SymbolTool(
            self.file_system, self.registry, self.extractor, self.splicer, self.config, verbose
        )

    # -------------------------------------------------------------------------
    # Map Operations
    # -------------------------------------------------------------------------

    def collect_map_files(self) -> List[str]:
        return self.file_system.collect_files(self.config.items)

    def build_repo_map(self, files: Optional[List[str]] = None) -> Optional[str]:
        """Render the repository map for the given or configured files."""
        if files is None:
            files = self.collect_map_files()
        log_info(f"Building repository map for {len(files)} files")
        return self.map_service.build_map(files)

    def get_memories(self, files: Optional[List[str]] = None) -> Iterator[Dict[str, str]]:
        if files is None:
            files = self.collect_map_files()
        yield from self.map_service.get_memories(files)

    def list_symbols(self, file_path: str) -> Dict[str, Any]:
        """List the symbols of one file."""
        if not self.file_system.exists(file_path):
            return _error("file_not_found", f"File not found: {file_path}")

        grammar = self.registry.select(Path(file_path).suffix)
        if grammar is None:
            return _error("unsupported_file_type",
                          f"Unsupported file type for {file_path}. "
                          f"Supported: {', '.join(SUPPORTED_EXTENSIONS)}")

        code = self.file_system.get_file(file_path)
        if code is None:
            return _error("unreadable_file", f"Could not read content for file {file_path}")

        parsed = self.registry.parse(code, grammar)
        if parsed is None:
            return _error("grammar_unavailable", f"No parser available for {grammar.name}")

        symbols = self.extractor.extract_symbols(parsed)
        return {
            "success": True,
            "file": file_path,
            "total_symbols": len(symbols),
            "symbols": [s.to_dict() for s in symbols]
        }

    # -------------------------------------------------------------------------
    # Modification Operations
    # -------------------------------------------------------------------------

    def modify_symbol(self, file_path: str, symbol_name: str, symbol_kind: Any,
                      content: Optional[str], parent_class: Optional[str] = None,
                      dry_run: bool = False) -> Dict[str, Any]:
        """Create, replace or delete (empty content) one symbol."""
        intent = EditIntent(
            file_path=file_path,
            symbol_name=symbol_name,
            symbol_kind=symbol_kind,
            new_content=content,
            parent_class=parent_class,
        )
        return self.symbol_tool.execute(intent, dry_run=dry_run)

# -----------------------------------------------------------------------------
# CLI INTERFACE
# -----------------------------------------------------------------------------

def output_json(data: Any) -> None:
    """Output data as JSON to stdout."""
    print(json.dumps(data, indent=2, ensure_ascii=False))

def main():
    # Ensure UTF-8 encoding for cross-platform compatibility
    sys.stdout.reconfigure(encoding="utf-8", errors="backslashreplace")
    sys.stderr.reconfigure(encoding="utf-8")

    parser = argparse.ArgumentParser(
        description="RepoMap Engine - Symbol map and syntax-aware symbol editing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Repository map
  repomap map
  repomap map --project ../webapp

  # Symbols of one file
  repomap symbols src/auth.js

  # Editing (defaults to dry-run)
  repomap symbol src/auth.js --name login --kind function --content-file login.js
  repomap symbol src/auth.js --name login --kind function --content-file login.js --apply
  repomap symbol src/auth.js --name logout --kind function --content "" --apply
  repomap symbol src/app.py --name __init__ --kind constructor --parent-class App --content-file init.py
        """
    )

    parser.add_argument(
        "action",
        choices=["map", "symbols", "symbol"],
        help="Action to perform"
    )

    parser.add_argument(
        "target",
        nargs="?",
        help="File path for symbols/symbol"
    )

    parser.add_argument(
        "--project", "-p",
        default=".",
        help="Project root directory (default: current directory)"
    )

    parser.add_argument(
        "--name", "-n",
        help="Symbol name to create, replace or delete"
    )

    parser.add_argument(
        "--kind", "-k",
        choices=[kind.value for kind in SymbolKind],
        help="Symbol kind"
    )

    parser.add_argument(
        "--parent-class",
        help="Enclosing class for methods, constructors and properties"
    )

    parser.add_argument(
        "--content", "-c",
        help="Full new source of the symbol; an empty string deletes it"
    )

    parser.add_argument(
        "--content-file",
        help="Read the new symbol source from a file"
    )

    parser.add_argument(
        "--apply",
        action="store_true",
        help="Actually apply changes (default is dry-run)"
    )

    parser.add_argument(
        "--no-fast-path",
        action="store_true",
        help="Always use tree-sitter, never the heuristic function matcher"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging to stderr"
    )

    args = parser.parse_args()

    # Initialize engine
    try:
        project_root = Path(args.project).resolve()
        config = load_config(project_root, args.verbose)
        if args.no_fast_path:
            config.heuristic_fast_path = False
        engine = RepoMapEngine(str(project_root), config=config, verbose=args.verbose)
    except Exception as e:
        output_json({"success": False, "error": "init_failed", "message": str(e)})
        sys.exit(1)

    try:
        if args.action == "map":
            found = False
            for memory in engine.get_memories():
                found = True
                print("Repository map:")
                print(memory["content"])
            if not found:
                print("No repository map found. Ensure map items are configured.")
            sys.exit(0)

        if not args.target:
            output_json({"success": False, "error": "missing_target",
                         "message": "File path required"})
            sys.exit(1)

        if args.action == "symbols":
            result = engine.list_symbols(args.target)

        else:
            content = args.content
            if args.content_file:
                content = Path(args.content_file).read_text(encoding='utf-8')
            if not args.name or not args.kind or content is None:
                output_json({"success": False, "error": "missing_args",
                             "message": "--name, --kind and --content or --content-file required"})
                sys.exit(1)
            result = engine.modify_symbol(
                args.target, args.name, args.kind, content,
                parent_class=args.parent_class, dry_run=not args.apply
            )

        output_json(result)
        sys.exit(0 if result.get("success", False) else 1)

    except Exception as e:
        import traceback
        output_json({
            "success": False,
            "error": "execution_failed",
            "message": str(e),
            "traceback": traceback.format_exc() if args.verbose else str(e.__class__.__name__)
        })
        sys.exit(1)

if __name__ == "__main__":
    main()
