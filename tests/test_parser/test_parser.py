"""Tests for the slot expression parser, the CSS template reader and the source scanner."""

from pathlib import Path

import pytest

from styledshift.model.expr import (
    Arrow,
    Binary,
    Block,
    BooleanLiteral,
    Call,
    Conditional,
    Identifier,
    IdentParam,
    IfStatement,
    Logical,
    Member,
    NullLiteral,
    NumericLiteral,
    ObjectPatternParam,
    PatternProp,
    ReturnStatement,
    StringLiteral,
    TaggedTemplate,
    TemplateLiteral,
    Unary,
    Unparsed,
    member_path,
    to_source,
)
from styledshift.model.rules import CssValue, Declaration, Rule, SlotPart, StaticPart
from styledshift.parser import (
    ParseError,
    SourceScanError,
    parse_css,
    parse_expression,
    parse_keyframes,
    parse_slot,
    parse_template,
    scan_source,
)
from styledshift.parser.scanner import read_template, skip_balanced
from styledshift.parser.template import resolve_selector, strip_comments

FIXTURES = Path(__file__).parent.parent / "fixtures"


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


class TestExpressionLiterals:
    def test_identifier(self) -> None:
        assert parse_expression("SIZE") == Identifier("SIZE")

    def test_string_double_and_single(self) -> None:
        assert parse_expression('"red"') == StringLiteral("red")
        assert parse_expression("'red'") == StringLiteral("red")

    def test_string_escape(self) -> None:
        assert parse_expression(r'"a\"b"') == StringLiteral('a"b')

    def test_number_keeps_raw(self) -> None:
        assert parse_expression("4") == NumericLiteral(4, "4")
        assert parse_expression("0.5") == NumericLiteral(0.5, "0.5")

    def test_keywords(self) -> None:
        assert parse_expression("true") == BooleanLiteral(True)
        assert parse_expression("false") == BooleanLiteral(False)
        assert parse_expression("null") == NullLiteral()

    def test_template_literal(self) -> None:
        expr = parse_expression("`${p.$w}px`")
        assert isinstance(expr, TemplateLiteral)
        assert expr.quasis == ("", "px")
        assert expr.expressions == (Member(Identifier("p"), "$w"),)

    def test_tagged_template(self) -> None:
        expr = parse_expression("css`color: red;`")
        assert expr == TaggedTemplate(
            Identifier("css"), TemplateLiteral(("color: red;",), ())
        )


class TestExpressionOperators:
    def test_member_chain(self) -> None:
        expr = parse_expression("props.theme.colors.primary")
        assert member_path(expr) == ["props", "theme", "colors", "primary"]

    def test_computed_member(self) -> None:
        expr = parse_expression("p.theme.colors[p.$bg]")
        assert isinstance(expr, Member)
        assert expr.computed
        assert expr.prop == Member(Identifier("p"), "$bg")
        assert member_path(expr) is None

    def test_optional_member(self) -> None:
        expr = parse_expression("p.theme?.space")
        assert isinstance(expr, Member)
        assert expr.optional
        assert expr.prop == "space"

    def test_call(self) -> None:
        expr = parse_expression('spacing("md", 2)')
        assert expr == Call(Identifier("spacing"), (StringLiteral("md"), NumericLiteral(2, "2")))

    def test_logical_precedence(self) -> None:
        expr = parse_expression("a || b && c")
        assert expr == Logical(
            "||", Identifier("a"), Logical("&&", Identifier("b"), Identifier("c"))
        )

    def test_nullish(self) -> None:
        expr = parse_expression('a ?? "x"')
        assert isinstance(expr, Logical)
        assert expr.operator == "??"

    def test_equality(self) -> None:
        expr = parse_expression('p.$size === "large"')
        assert expr == Binary("===", Member(Identifier("p"), "$size"), StringLiteral("large"))

    def test_arithmetic_precedence(self) -> None:
        expr = parse_expression("a + b * 2")
        assert isinstance(expr, Binary)
        assert expr.operator == "+"
        assert isinstance(expr.right, Binary)
        assert expr.right.operator == "*"

    def test_unary_not(self) -> None:
        assert parse_expression("!p.$on") == Unary("!", Member(Identifier("p"), "$on"))

    def test_nested_ternary_is_right_associative(self) -> None:
        expr = parse_expression('a ? "x" : b ? "y" : "z"')
        assert isinstance(expr, Conditional)
        assert isinstance(expr.alternate, Conditional)


class TestExpressionFunctions:
    def test_bare_param_arrow(self) -> None:
        expr = parse_expression("props => props.$size")
        assert expr == Arrow((IdentParam("props"),), Member(Identifier("props"), "$size"))

    def test_paren_param_arrow_with_ternary(self) -> None:
        expr = parse_expression("(p) => (p.$on ? 'a' : 'b')")
        assert isinstance(expr, Arrow)
        assert isinstance(expr.body, Conditional)

    def test_destructured_params_with_default(self) -> None:
        expr = parse_expression('({ $size = "4px", theme: t }) => $size')
        assert isinstance(expr, Arrow)
        param = expr.params[0]
        assert isinstance(param, ObjectPatternParam)
        assert param.props == (
            PatternProp("$size", "$size", StringLiteral("4px")),
            PatternProp("theme", "t"),
        )

    def test_block_body(self) -> None:
        expr = parse_expression(
            '(p) => { if (p.$tone === "danger") return "red"; return "black"; }'
        )
        assert isinstance(expr, Arrow)
        assert isinstance(expr.body, Block)
        first, last = expr.body.statements
        assert isinstance(first, IfStatement)
        assert first.consequent == ReturnStatement(StringLiteral("red"))
        assert last == ReturnStatement(StringLiteral("black"))

    def test_function_expression(self) -> None:
        expr = parse_expression("function (p) { return p.$w; }")
        assert isinstance(expr, Arrow)
        assert expr.params == (IdentParam("p"),)

    def test_nested_template_in_arrow(self) -> None:
        expr = parse_expression("(p) => p.$on && css`color: ${p.$c};`")
        assert isinstance(expr, Arrow)
        assert isinstance(expr.body, Logical)
        tagged = expr.body.right
        assert isinstance(tagged, TaggedTemplate)
        assert tagged.quasi.expressions == (Member(Identifier("p"), "$c"),)


class TestExpressionErrors:
    def test_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse_expression("a +")

    def test_parse_slot_falls_back_to_unparsed(self) -> None:
        assert parse_slot("a +") == Unparsed("a +")

    def test_unparsed_kind(self) -> None:
        assert parse_slot("{ a: 1 }").kind == "unknown"


class TestToSource:
    def test_arrow_round_trip_text(self) -> None:
        expr = parse_expression("(p) => p.$on ? 'a' : 'b'")
        assert to_source(expr) == '(p) => p.$on ? "a" : "b"'

    def test_wraps_operands(self) -> None:
        expr = parse_expression("(a + b) * 2")
        assert to_source(expr) == "(a + b) * 2"

    def test_template(self) -> None:
        expr = parse_expression("`${p.$w}px`")
        assert to_source(expr) == "`${p.$w}px`"


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


class TestScanner:
    def test_read_template_with_nested_backticks(self) -> None:
        text = "`a ${x ? `b` : 'c'} d`"
        quasis, exprs, end = read_template(text, 0)
        assert quasis == ["a ", " d"]
        assert exprs == ["x ? `b` : 'c'"]
        assert end == len(text)

    def test_read_template_unterminated(self) -> None:
        with pytest.raises(ParseError):
            read_template("`abc", 0)

    def test_skip_balanced_generic_with_arrow(self) -> None:
        text = "<{ fn: () => void }>rest"
        assert text[skip_balanced(text, 0):] == "rest"


# ---------------------------------------------------------------------------
# CSS templates
# ---------------------------------------------------------------------------


def _static(prop: str, value: str, important: bool = False) -> Declaration:
    return Declaration(prop, CssValue.static(value), important)


class TestParseCss:
    def test_flat_declarations(self) -> None:
        rules = parse_css("color: red; font-size: 12px;")
        assert rules == (Rule("&", (), (_static("color", "red"), _static("font-size", "12px"))),)

    def test_nested_pseudo(self) -> None:
        rules = parse_css("color: blue;\n&:hover { color: red; }")
        assert rules == (
            Rule("&", (), (_static("color", "blue"),)),
            Rule("&:hover", (), (_static("color", "red"),)),
        )

    def test_media_keeps_base_rule(self) -> None:
        rules = parse_css("@media (max-width: 600px) { color: red; }")
        assert rules == (
            Rule("&", (), ()),
            Rule("&", ("@media (max-width: 600px)",), (_static("color", "red"),)),
        )

    def test_pseudo_inside_media(self) -> None:
        rules = parse_css("@media (hover: hover) { &:hover { color: red; } }")
        assert rules[-1] == Rule("&:hover", ("@media (hover: hover)",), (_static("color", "red"),))

    def test_same_selector_merges(self) -> None:
        rules = parse_css("&:hover { color: red; }\ncolor: blue;\n&:hover { opacity: 1; }")
        hover = [r for r in rules if r.selector == "&:hover"]
        assert len(hover) == 1
        assert [d.property for d in hover[0].declarations] == ["color", "opacity"]

    def test_important(self) -> None:
        rules = parse_css("color: red !important;")
        assert rules[0].declarations == (_static("color", "red", important=True),)

    def test_quoted_semicolon(self) -> None:
        rules = parse_css('content: "a;b";')
        assert rules[0].declarations == (_static("content", '"a;b"'),)

    def test_parenthesized_semicolon(self) -> None:
        rules = parse_css("background: url(data:image/png;base64,AAA);")
        assert rules[0].declarations[0].value.text == "url(data:image/png;base64,AAA)"

    def test_comments_are_stripped(self) -> None:
        rules = parse_css("/* note */ color: red;\n// line\nmargin: 0;")
        assert [d.property for d in rules[0].declarations] == ["color", "margin"]

    def test_unexpected_close(self) -> None:
        with pytest.raises(ParseError):
            parse_css("color: red; }")

    def test_unbalanced_open(self) -> None:
        with pytest.raises(ParseError):
            parse_css("&:hover { color: red;")

    def test_invalid_declaration(self) -> None:
        with pytest.raises(ParseError):
            parse_css("color red;")

    def test_strip_comments_keeps_urls(self) -> None:
        assert strip_comments("background: url(http://x.y/z);") == "background: url(http://x.y/z);"


class TestParseTemplate:
    def test_value_slot(self) -> None:
        rules = parse_template(["color: ", ";"])
        decl = rules[0].declarations[0]
        assert decl.property == "color"
        assert decl.value == CssValue((SlotPart(0),))

    def test_slot_with_static_text(self) -> None:
        rules = parse_template(["border: 1px solid ", ";"])
        assert rules[0].declarations[0].value.parts == (StaticPart("1px solid "), SlotPart(0))

    def test_whole_block_slots(self) -> None:
        rules = parse_template(["\n  ", "\n  color: red;\n  ", "\n"])
        decls = rules[0].declarations
        assert decls[0] == Declaration(None, CssValue((SlotPart(0),)))
        assert decls[1] == _static("color", "red")
        assert decls[2] == Declaration(None, CssValue((SlotPart(1),)))

    def test_slot_before_nested_block(self) -> None:
        rules = parse_template(["\n  ", "\n  &:hover { color: red; }\n"])
        assert rules[0].declarations == (Declaration(None, CssValue((SlotPart(0),))),)

    def test_slot_in_selector(self) -> None:
        rules = parse_template(["&:hover ", " { color: red; }"])
        assert rules[-1].selector == "&:hover __SLOT_0__"

    def test_affixes(self) -> None:
        value = parse_template(["width: calc(", " + 4px);"])[0].declarations[0].value
        assert value.affixes() == ("calc(", " + 4px)")


class TestParseKeyframes:
    def test_frames_in_order(self) -> None:
        frames = parse_keyframes(
            ["\n  from { opacity: 0; }\n  50% { opacity: 0.5; color: red; }\n  to { opacity: 1 }\n"]
        )
        assert frames == (
            ("from", (_static("opacity", "0"),)),
            ("50%", (_static("opacity", "0.5"), _static("color", "red"))),
            ("to", (_static("opacity", "1"),)),
        )

    def test_selector_list_is_kept(self) -> None:
        frames = parse_keyframes(["0%,   100% { opacity: 0; }"])
        assert frames[0][0] == "0%, 100%"

    def test_interpolation_is_rejected(self) -> None:
        with pytest.raises(ParseError, match="Interpolations in keyframes"):
            parse_keyframes(["from { opacity: ", "; }"])

    def test_missing_selector(self) -> None:
        with pytest.raises(ParseError, match="without a selector"):
            parse_keyframes(["{ opacity: 0; }"])

    def test_nested_block(self) -> None:
        with pytest.raises(ParseError, match="Nested blocks"):
            parse_keyframes(["from { &:hover { opacity: 0; } }"])

    def test_stray_text(self) -> None:
        with pytest.raises(ParseError, match="Unexpected text"):
            parse_keyframes(["from { opacity: 0; } opacity: 1;"])


class TestResolveSelector:
    def test_ampersand(self) -> None:
        assert resolve_selector("&:hover", "&") == "&:hover"

    def test_bare_pseudo(self) -> None:
        assert resolve_selector(":hover", "&") == "&:hover"

    def test_descendant(self) -> None:
        assert resolve_selector(".child", "&") == "& .child"

    def test_comma_list(self) -> None:
        assert resolve_selector("&:hover, &:focus", "&") == "&:hover, &:focus"

    def test_nested_parent(self) -> None:
        assert resolve_selector("&::before", "&:hover") == "&:hover::before"


# ---------------------------------------------------------------------------
# Source files
# ---------------------------------------------------------------------------


class TestScanSource:
    @pytest.fixture()
    def source(self):
        path = FIXTURES / "button.tsx"
        return scan_source(path.read_text(), str(path))

    def test_declaration_order(self, source) -> None:
        assert [d.name for d in source.declarations] == ["truncate", "Button", "Icon", "Toolbar"]

    def test_css_helper(self, source) -> None:
        truncate = source.declarations[0]
        assert truncate.is_css_helper
        assert truncate.base is None

    def test_intrinsic_base(self, source) -> None:
        button = source.declarations[1]
        assert button.base is not None
        assert button.base.tag == "button"
        assert button.base.is_intrinsic

    def test_prop_types_from_interface(self, source) -> None:
        button = source.declarations[1]
        assert button.prop_types == {"$size": ("small", "medium", "large")}

    def test_slots_are_parsed(self, source) -> None:
        button = source.declarations[1]
        assert button.slots[0] == Identifier("truncate")
        assert button.slots[1] == Identifier("GAP")
        assert isinstance(button.slots[2], Arrow)

    def test_imports(self, source) -> None:
        assert source.imports["styled"].imported == "default"
        assert source.imports["css"].source == "styled-components"

    def test_constants(self, source) -> None:
        assert source.constants == {"GAP": StringLiteral("12px")}

    def test_location(self, source) -> None:
        button = source.declarations[1]
        assert button.location is not None
        assert button.location.file.endswith("button.tsx")
        assert button.location.line == 15

    def test_styled_component_base_and_attrs(self) -> None:
        text = (
            'import styled from "styled-components";\n'
            "const Link = styled(Button).attrs({ type: \"button\" })`\n  color: red;\n`;\n"
        )
        decl = scan_source(text).declarations[0]
        assert decl.base is not None
        assert decl.base.component == "Button"
        assert decl.uses_attrs

    def test_inline_generic(self) -> None:
        text = "const Box = styled.div<{ $tone: 'a' | 'b' }>`color: red;`;"
        assert scan_source(text).declarations[0].prop_types == {"$tone": ("a", "b")}

    def test_renamed_styled_import(self) -> None:
        text = 'import sc from "styled-components";\nconst Box = sc.div`color: red;`;'
        assert [d.name for d in scan_source(text).declarations] == ["Box"]

    def test_css_parse_error_is_recorded(self) -> None:
        decl = scan_source("const Box = styled.div`color red;`;").declarations[0]
        assert decl.parse_error is not None
        assert decl.rules == ()

    def test_unterminated_template_raises(self) -> None:
        with pytest.raises(SourceScanError):
            scan_source("const Box = styled.div`color: red;")

    def test_non_styled_declarations_are_ignored(self) -> None:
        text = "const x = 1;\nconst y = foo`bar`;\n"
        assert scan_source(text).declarations == ()

    def test_keyframes(self) -> None:
        text = (
            'import styled, { keyframes } from "styled-components";\n'
            "const fadeIn = keyframes`from { opacity: 0; } to { opacity: 1; }`;\n"
            "const Box = styled.div`animation: ${fadeIn} 1s;`;\n"
        )
        source = scan_source(text, "anim.tsx")
        assert [d.name for d in source.declarations] == ["Box"]
        [animation] = source.keyframes
        assert animation.name == "fadeIn"
        assert [selector for selector, _ in animation.frames] == ["from", "to"]
        assert animation.location is not None
        assert animation.location.line == 2
        assert animation.parse_error is None

    def test_renamed_keyframes_import(self) -> None:
        text = (
            'import { keyframes as kf } from "styled-components";\n'
            "const spin = kf`to { transform: rotate(360deg); }`;\n"
        )
        assert [k.name for k in scan_source(text).keyframes] == ["spin"]

    def test_keyframes_parse_error_is_recorded(self) -> None:
        text = "const pulse = keyframes`from { opacity: ${low}; }`;"
        [animation] = scan_source(text).keyframes
        assert animation.frames == ()
        assert animation.parse_error is not None
        assert "Interpolations in keyframes" in animation.parse_error
