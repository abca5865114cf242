"""
Unit tests for the tree-sitter Go adapter.
"""

import pytest

from caddyext.directives.syntax import Edit, go_quote, go_unquote, parse_go, render
from caddyext.exceptions import ParseError, RenderError


class TestParseGo:
    """Parsing and import enumeration."""

    def test_imports_in_declaration_order(self, skeleton_text):
        source = parse_go(skeleton_text)
        paths = [spec.path for spec in source.imports()]
        assert paths == [
            "github.com/mholt/caddy/caddy/https",
            "github.com/mholt/caddy/caddy/parse",
            "github.com/mholt/caddy/caddy/setup",
            "github.com/mholt/caddy/middleware",
        ]
        assert all(spec.alias is None for spec in source.imports())

    def test_aliased_and_single_imports(self):
        source = parse_go(
            'package caddy\n\n'
            'import "github.com/mholt/caddy/middleware"\n'
            'import (\n\tcors "github.com/x/caddy-cors"\n\t"github.com/x/jwt/v2"\n)\n'
        )
        declarations = source.import_declarations()
        assert [d.grouped for d in declarations] == [False, True]

        specs = source.imports()
        assert [s.package_name for s in specs] == ["middleware", "cors", "jwt"]
        assert specs[1].alias == "cors"
        assert specs[1].line == 5

    def test_syntax_error_reports_position(self):
        with pytest.raises(ParseError) as exc_info:
            parse_go("package caddy\n\nvar directiveOrder = []directive{\n", "broken.go")

        error = exc_info.value
        assert error.file_path == "broken.go"
        assert error.line is not None
        assert "broken.go" in str(error)

    def test_crlf_newline_detected(self, skeleton_text):
        assert parse_go(skeleton_text).newline == "\n"
        assert parse_go(skeleton_text.replace("\n", "\r\n")).newline == "\r\n"


class TestListLiteral:
    """Locating and reading the directive order list."""

    def test_missing_declaration(self):
        source = parse_go("package caddy\n\nvar other = []string{}\n")
        assert source.list_literal("directiveOrder") is None

    def test_empty_literal(self, skeleton_text):
        literal = parse_go(skeleton_text).list_literal("directiveOrder")
        assert literal is not None
        assert literal.elements == []

    def test_element_forms(self):
        source = parse_go(
            "package caddy\n\n"
            "var directiveOrder = []directive{\n"
            '\t{"root", setup.Root},\n'
            "\t// comments are not elements\n"
            "\tgzip.Setup,\n"
            "\tcors,\n"
            "}\n"
        )
        literal = source.list_literal("directiveOrder")
        described = [(e.name, e.qualifier) for e in literal.elements]
        assert described == [("root", "setup"), ("gzip", "gzip"), ("cors", "cors")]
        assert literal.trailing_comma
        assert literal.elements[0].line == 4

    def test_grouped_var_declaration(self):
        source = parse_go(
            "package caddy\n\n"
            "var (\n"
            "\tother = 1\n"
            "\tdirectiveOrder = []directive{cors}\n"
            ")\n"
        )
        literal = source.list_literal("directiveOrder")
        assert [e.name for e in literal.elements] == ["cors"]
        assert not literal.trailing_comma

    def test_unrecognized_element_has_no_name(self):
        source = parse_go("package caddy\n\nvar directiveOrder = []int{1 + 2}\n")
        element = source.list_literal("directiveOrder").elements[0]
        assert element.name is None
        assert element.text == "1 + 2"


class TestRender:
    """Byte-range edits and re-validation."""

    def test_inserts_at_same_offset_keep_order(self):
        source = parse_go("package caddy\n")
        at = len(source.data)
        rendered = render(source, [
            Edit(at, at, "\nvar a = 1\n"),
            Edit(at, at, "var b = 2\n"),
        ])
        assert rendered.text == "package caddy\n\nvar a = 1\nvar b = 2\n"

    def test_replacement(self):
        source = parse_go("package caddy\n\nvar a = 1\n")
        start = source.data.index(b"1")
        rendered = render(source, [Edit(start, start + 1, "42")])
        assert rendered.text.endswith("var a = 42\n")

    def test_invalid_result_raises_render_error(self):
        source = parse_go("package caddy\n", "directives.go")
        at = len(source.data)
        with pytest.raises(RenderError) as exc_info:
            render(source, [Edit(at, at, "var = \n")])
        assert exc_info.value.file_path == "directives.go"
        assert isinstance(exc_info.value.__cause__, ParseError)

    def test_offsets_are_bytes(self):
        source = parse_go('package caddy\n\n// héllo\nvar a = "ü"\n')
        start = source.data.index(b"\xc3\xbc")
        rendered = render(source, [Edit(start, start + 2, "u")])
        assert rendered.text.endswith('var a = "u"\n')


class TestGoStrings:
    """Quoting and unquoting follow Go's string literal rules."""

    @pytest.mark.parametrize("literal, value", [
        ('"github.com/x/directive1"', "github.com/x/directive1"),
        ('"github.com/x/\\u0064irective1"', "github.com/x/directive1"),
        ('"\\x41\\101\\U00000041"', "AAA"),
        ('"tab\\there \\"quoted\\" back\\\\slash"', 'tab\there "quoted" back\\slash'),
        ('"\\xc3\\xbc"', "ü"),
        ("`raw\\n\r\nline`", "raw\\n\nline"),
    ])
    def test_unquote(self, literal, value):
        assert go_unquote(literal) == value

    @pytest.mark.parametrize("value, literal", [
        ("github.com/x/directive1", '"github.com/x/directive1"'),
        ('a"b\\c', '"a\\"b\\\\c"'),
        ("line\nbreak", '"line\\nbreak"'),
        ("\x00", '"\\x00"'),
        ("grüße", '"grüße"'),
    ])
    def test_quote(self, value, literal):
        assert go_quote(value) == literal

    def test_quoted_value_parses_back(self):
        value = 'odd "path"\twith\\escapes'
        source = parse_go(f"package caddy\n\nimport {go_quote(value)}\n")
        assert source.imports()[0].path == value
