"""
Go syntax adapter built on tree-sitter.

Parses directives files into a navigable tree, exposes the import
specifications and the directive list literal, and renders byte-range
edits back into validated source text.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional

try:
    from tree_sitter import Parser, Language, Node
    import tree_sitter_go as tsgo
    TREE_SITTER_AVAILABLE = True
except ImportError:
    TREE_SITTER_AVAILABLE = False

from caddyext.exceptions import GrammarNotFoundError, ParseError, RenderError
from caddyext.logging_config import logger
from caddyext.schemas import ImportSpec, ListElement

STRING_LITERALS = ("interpreted_string_literal", "raw_string_literal")

_parsers: Dict[str, "Parser"] = {}


def get_go_parser() -> "Parser":
    """
    Return a tree-sitter parser for Go, creating it on first use.

    Raises:
        GrammarNotFoundError: If tree-sitter or the Go grammar is missing.
    """
    if not TREE_SITTER_AVAILABLE:
        raise GrammarNotFoundError("go", "pip install tree-sitter tree-sitter-go")

    if "go" not in _parsers:
        go_parser = Parser()
        go_parser.language = Language(tsgo.language())
        _parsers["go"] = go_parser
        logger.debug("Initialized tree-sitter Go parser")
    return _parsers["go"]


class Edit(NamedTuple):
    """Replace source bytes [start, end) with text. start == end inserts."""
    start: int
    end: int
    text: str


@dataclass
class ImportDeclaration:
    """An `import` declaration, either grouped `import (...)` or single."""
    start_byte: int
    end_byte: int
    grouped: bool
    specs: List[ImportSpec] = field(default_factory=list)
    # Byte offsets just after "(" and at ")" for grouped declarations
    open_byte: Optional[int] = None
    close_byte: Optional[int] = None


@dataclass
class ListLiteral:
    """The `{...}` body of the directive order composite literal."""
    open_byte: int
    close_byte: int
    elements: List[ListElement]
    trailing_comma: bool


GO_SIMPLE_ESCAPES = {
    "a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r",
    "t": "\t", "v": "\v", "\\": "\\", "'": "'", "\"": "\"",
}
GO_ESCAPE = re.compile(
    r"\\(?:([abfnrtv\\'\"])|x([0-9A-Fa-f]{2})|([0-7]{3})"
    r"|u([0-9A-Fa-f]{4})|U([0-9A-Fa-f]{8}))"
)


def go_unquote(literal: str) -> str:
    """
    Value of a Go string literal, like strconv.Unquote.

    \\x and octal escapes are single bytes; the result is decoded as UTF-8.
    """
    if literal.startswith("`"):
        # Carriage returns are discarded from raw strings
        return literal[1:-1].replace("\r", "")

    body = literal[1:-1]
    out = bytearray()
    position = 0
    for match in GO_ESCAPE.finditer(body):
        out += body[position:match.start()].encode("utf-8")
        simple, hex_byte, octal, short, long = match.groups()
        if simple is not None:
            out += GO_SIMPLE_ESCAPES[simple].encode("utf-8")
        elif hex_byte is not None:
            out.append(int(hex_byte, 16))
        elif octal is not None:
            out.append(int(octal, 8) & 0xFF)
        else:
            out += chr(int(short or long, 16)).encode("utf-8")
        position = match.end()
    out += body[position:].encode("utf-8")
    return out.decode("utf-8", errors="replace")


def go_quote(value: str) -> str:
    """Double-quoted Go literal for value, like strconv.Quote."""
    parts = []
    for char in value:
        if char in ("\"", "\\"):
            parts.append("\\" + char)
        elif char in "\a\b\f\n\r\t\v":
            parts.append("\\" + "abfnrtv"["\a\b\f\n\r\t\v".index(char)])
        elif char.isprintable():
            parts.append(char)
        elif ord(char) < 0x80:
            parts.append(f"\\x{ord(char):02x}")
        elif ord(char) <= 0xFFFF:
            parts.append(f"\\u{ord(char):04x}")
        else:
            parts.append(f"\\U{ord(char):08x}")
    return "\"" + "".join(parts) + "\""


def _string_value(node: "Node") -> str:
    return go_unquote(node.text.decode("utf-8"))


def _find_errors(node: "Node") -> List["Node"]:
    """Recursively find all ERROR and missing nodes."""
    errors = []
    if node.type == "ERROR" or node.is_missing:
        errors.append(node)

    for child in node.children:
        errors.extend(_find_errors(child))

    return errors


def _element_nodes(literal_value: "Node") -> List["Node"]:
    """Element nodes of a literal value, unwrapped from literal_element."""
    elements = []
    for child in literal_value.named_children:
        if child.type == "comment":
            continue
        if child.type in ("literal_element", "element"):
            inner = [c for c in child.named_children if c.type != "comment"]
            if inner:
                child = inner[0]
        elements.append(child)
    return elements


class GoSource:
    """
    A parsed Go file. Offsets reported by this class are byte offsets into
    the UTF-8 encoded text.
    """

    def __init__(self, text: str, tree, file_path: str = "<memory>"):
        self.text = text
        self.data = text.encode("utf-8")
        self.tree = tree
        self.file_path = file_path

    @property
    def root(self) -> "Node":
        return self.tree.root_node

    @property
    def newline(self) -> str:
        """Line ending style of the file (LF vs CRLF)."""
        if "\r\n" in self.text:
            return "\r\n"
        return "\n"

    def line_start(self, offset: int) -> int:
        return self.data.rfind(b"\n", 0, offset) + 1

    def line_end(self, offset: int) -> int:
        """Offset just past the newline ending the line containing offset."""
        end = self.data.find(b"\n", offset)
        return len(self.data) if end == -1 else end + 1

    def line_indent(self, offset: int) -> str:
        start = self.line_start(offset)
        line = self.data[start:offset].decode("utf-8")
        return line[:len(line) - len(line.lstrip(" \t"))]

    def starts_line(self, offset: int) -> bool:
        """True if only whitespace precedes offset on its line."""
        return not self.data[self.line_start(offset):offset].strip()

    def same_line(self, a: int, b: int) -> bool:
        return b"\n" not in self.data[min(a, b):max(a, b)]

    def package_clause_end(self) -> int:
        for child in self.root.children:
            if child.type == "package_clause":
                return child.end_byte
        return 0

    def import_declarations(self) -> List[ImportDeclaration]:
        """All import declarations, in file order."""
        declarations = []
        for child in self.root.children:
            if child.type != "import_declaration":
                continue

            declaration = ImportDeclaration(
                start_byte=child.start_byte,
                end_byte=child.end_byte,
                grouped=False,
            )
            for part in child.children:
                if part.type == "import_spec":
                    declaration.specs.append(self._import_spec(part))
                elif part.type == "import_spec_list":
                    declaration.grouped = True
                    for item in part.children:
                        if item.type == "(":
                            declaration.open_byte = item.end_byte
                        elif item.type == ")":
                            declaration.close_byte = item.start_byte
                        elif item.type == "import_spec":
                            declaration.specs.append(self._import_spec(item))
            declarations.append(declaration)
        return declarations

    def imports(self) -> List[ImportSpec]:
        """All import specifications, in declaration order."""
        return [
            spec
            for declaration in self.import_declarations()
            for spec in declaration.specs
        ]

    def _import_spec(self, node: "Node") -> ImportSpec:
        path_node = node.child_by_field_name("path")
        name_node = node.child_by_field_name("name")
        return ImportSpec(
            path=_string_value(path_node),
            alias=name_node.text.decode("utf-8") if name_node is not None else None,
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            line=node.start_point[0] + 1,
        )

    def list_literal(self, name: str) -> Optional[ListLiteral]:
        """
        Locate the top-level `var <name> = T{...}` declaration.

        Args:
            name: Variable name of the list literal

        Returns:
            ListLiteral, or None if no such declaration exists
        """
        for child in self.root.children:
            if child.type != "var_declaration":
                continue
            for spec in self._descendants(child, "var_spec"):
                body = self._var_spec_body(spec, name)
                if body is not None:
                    return self._list_literal(body)
        return None

    def _descendants(self, node: "Node", node_type: str) -> List["Node"]:
        found = []
        for child in node.named_children:
            if child.type == node_type:
                found.append(child)
            else:
                found.extend(self._descendants(child, node_type))
        return found

    def _var_spec_body(self, spec: "Node", name: str) -> Optional["Node"]:
        names = [n.text.decode("utf-8") for n in spec.children_by_field_name("name")]
        if name not in names:
            return None

        value = spec.child_by_field_name("value")
        if value is None:
            return None
        values = value.named_children if value.type == "expression_list" else [value]
        index = names.index(name)
        if index >= len(values) or values[index].type != "composite_literal":
            return None
        return values[index].child_by_field_name("body")

    def _list_literal(self, body: "Node") -> ListLiteral:
        open_byte = body.start_byte + 1
        close_byte = body.end_byte - 1
        for child in body.children:
            if child.type == "{":
                open_byte = child.end_byte
            elif child.type == "}":
                close_byte = child.start_byte

        elements = [self._list_element(node) for node in _element_nodes(body)]

        trailing_comma = False
        if elements:
            tail = self.data[elements[-1].end_byte:close_byte].lstrip()
            trailing_comma = tail.startswith(b",")

        return ListLiteral(
            open_byte=open_byte,
            close_byte=close_byte,
            elements=elements,
            trailing_comma=trailing_comma,
        )

    def _list_element(self, node: "Node") -> ListElement:
        name = qualifier = None

        if node.type == "identifier":
            name = qualifier = node.text.decode("utf-8")
        elif node.type == "selector_expression":
            operand = node.child_by_field_name("operand")
            if operand is not None and operand.type == "identifier":
                name = qualifier = operand.text.decode("utf-8")
        elif node.type == "literal_value":
            # {"name", pkg.Setup}
            for part in _element_nodes(node):
                if part.type in STRING_LITERALS and name is None:
                    name = _string_value(part)
                elif part.type == "selector_expression" and qualifier is None:
                    operand = part.child_by_field_name("operand")
                    if operand is not None and operand.type == "identifier":
                        qualifier = operand.text.decode("utf-8")
                elif part.type == "identifier" and qualifier is None:
                    qualifier = part.text.decode("utf-8")

        return ListElement(
            name=name,
            qualifier=qualifier,
            text=node.text.decode("utf-8"),
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            line=node.start_point[0] + 1,
        )


def parse_go(text: str, file_path: str = "<memory>") -> GoSource:
    """
    Parse Go source text.

    Args:
        text: Source text
        file_path: Path used in diagnostics

    Returns:
        GoSource wrapping the tree

    Raises:
        ParseError: If the tree contains syntax errors.
    """
    parser = get_go_parser()
    tree = parser.parse(text.encode("utf-8"))

    errors = _find_errors(tree.root_node) if tree.root_node.has_error else []
    if errors:
        first = errors[0]
        line = first.start_point[0] + 1
        col = first.start_point[1] + 1
        kind = f"missing {first.type}" if first.is_missing else "syntax error"
        raise ParseError(
            file_path,
            f"{kind} at line {line}, column {col}",
            line=line,
            column=col,
        )

    return GoSource(text, tree, file_path)


def render(source: GoSource, edits: List[Edit]) -> GoSource:
    """
    Apply edits to the source and re-parse the result.

    Edits sharing a start offset are inserted in the order given.

    Raises:
        RenderError: If the edited text is not valid Go.
    """
    data = source.data
    ordered = sorted(enumerate(edits), key=lambda item: (item[1].start, item[0]))
    for _, edit in reversed(ordered):
        data = data[:edit.start] + edit.text.encode("utf-8") + data[edit.end:]

    try:
        return parse_go(data.decode("utf-8"), source.file_path)
    except ParseError as e:
        raise RenderError(source.file_path, e.message) from e
