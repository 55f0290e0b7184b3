"""Lark Transformer that converts slot expression source into the Expr model."""

from __future__ import annotations

import functools
from pathlib import Path

from lark import Lark, Token, Transformer

from styledshift.model.expr import (
    Arrow,
    Binary,
    Block,
    BooleanLiteral,
    Call,
    Conditional,
    Expr,
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
    VarDeclaration,
)
from styledshift.parser.errors import ParseError
from styledshift.parser.scanner import extract_templates

GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


def _unquote(raw: str) -> str:
    body = raw[1:-1]
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _exprs(items: list[object]) -> list[object]:
    return [i for i in items if not isinstance(i, Token)]


class ExpressionTransformer(Transformer):  # type: ignore[type-arg]
    """Transform a Lark parse tree into frozen Expr nodes.

    Template placeholders are resolved against *templates*, the already
    parsed template literals extracted before lexing.
    """

    def __init__(self, templates: list[TemplateLiteral]) -> None:
        super().__init__()
        self._templates = templates

    def _template(self, token: Token) -> TemplateLiteral:
        index = int(str(token)[len("__TPL_"):-2])
        return self._templates[index]

    # ---- literals ----

    def identifier(self, items: list[Token]) -> Identifier:
        return Identifier(str(items[0]))

    def number(self, items: list[Token]) -> NumericLiteral:
        raw = str(items[0])
        value: int | float
        try:
            value = int(raw)
        except ValueError:
            value = float(raw)
        return NumericLiteral(value, raw)

    def string(self, items: list[Token]) -> StringLiteral:
        return StringLiteral(_unquote(str(items[0])))

    def template(self, items: list[Token]) -> TemplateLiteral:
        return self._template(items[0])

    def true_lit(self, items: list[Token]) -> BooleanLiteral:
        return BooleanLiteral(True)

    def false_lit(self, items: list[Token]) -> BooleanLiteral:
        return BooleanLiteral(False)

    def null_lit(self, items: list[Token]) -> NullLiteral:
        return NullLiteral()

    # ---- operators ----

    def ternary(self, items: list[Expr]) -> Conditional:
        return Conditional(items[0], items[1], items[2])

    def logical(self, items: list[object]) -> Logical:
        return Logical(str(items[1]), items[0], items[2])  # type: ignore[arg-type]

    def binary(self, items: list[object]) -> Binary:
        return Binary(str(items[1]), items[0], items[2])  # type: ignore[arg-type]

    def unary(self, items: list[object]) -> Unary:
        return Unary(str(items[0]), items[1])  # type: ignore[arg-type]

    # ---- access ----

    def member(self, items: list[object]) -> Member:
        return Member(items[0], str(items[1]))  # type: ignore[arg-type]

    def optional_member(self, items: list[object]) -> Member:
        return Member(items[0], str(items[-1]), optional=True)  # type: ignore[arg-type]

    def computed_member(self, items: list[object]) -> Member:
        return Member(items[0], items[1], computed=True)  # type: ignore[arg-type]

    def call(self, items: list[object]) -> Call:
        args = items[1] if len(items) > 1 else ()
        return Call(items[0], tuple(args))  # type: ignore[arg-type]

    def arguments(self, items: list[Expr]) -> tuple[Expr, ...]:
        return tuple(items)

    def tagged_template(self, items: list[object]) -> TaggedTemplate:
        return TaggedTemplate(items[0], self._template(items[1]))  # type: ignore[arg-type]

    # ---- functions ----

    def bare_param(self, items: list[Token]) -> tuple[IdentParam, ...]:
        return (IdentParam(str(items[0])),)

    def paren_params(self, items: list[object]) -> tuple[object, ...]:
        return tuple(items[0]) if items else ()

    def param_list(self, items: list[object]) -> list[object]:
        return list(items)

    def ident_param(self, items: list[object]) -> IdentParam:
        default = items[1] if len(items) > 1 else None
        return IdentParam(str(items[0]), default)  # type: ignore[arg-type]

    def pattern_param(self, items: list[object]) -> ObjectPatternParam:
        default = items[1] if len(items) > 1 else None
        return ObjectPatternParam(items[0], default)  # type: ignore[arg-type]

    def object_pattern(self, items: list[PatternProp]) -> tuple[PatternProp, ...]:
        return tuple(items)

    def pattern_prop(self, items: list[object]) -> PatternProp:
        names = [str(i) for i in items if isinstance(i, Token)]
        defaults = _exprs(items)
        key = names[0]
        local = names[1] if len(names) > 1 else key
        return PatternProp(key, local, defaults[0] if defaults else None)  # type: ignore[arg-type]

    def arrow(self, items: list[object]) -> Arrow:
        return Arrow(items[0], items[1])  # type: ignore[arg-type]

    def function_expr(self, items: list[object]) -> Arrow:
        rest = [i for i in items if not isinstance(i, Token)]
        params = rest[0] if len(rest) > 1 else ()
        return Arrow(tuple(params), rest[-1])  # type: ignore[arg-type]

    # ---- statements ----

    def block(self, items: list[object]) -> Block:
        return Block(tuple(items))  # type: ignore[arg-type]

    def if_stmt(self, items: list[object]) -> IfStatement:
        alternate = items[2] if len(items) > 2 else None
        return IfStatement(items[0], items[1], alternate)  # type: ignore[arg-type]

    def return_stmt(self, items: list[Expr]) -> ReturnStatement:
        return ReturnStatement(items[0] if items else None)

    def var_stmt(self, items: list[object]) -> VarDeclaration:
        return VarDeclaration(str(items[0]), str(items[1]), items[2])  # type: ignore[arg-type]


@functools.lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark(GRAMMAR_PATH.read_text(), parser="earley", lexer="basic", start="start")


def parse_expression(source: str) -> Expr:
    """Parse a JS expression (as found inside ``${...}``) into an Expr."""
    rewritten, raw_templates = extract_templates(source)
    templates = [
        TemplateLiteral(tuple(quasis), tuple(parse_expression(e) for e in exprs))
        for quasis, exprs in raw_templates
    ]
    try:
        tree = _parser().parse(rewritten)
    except Exception as e:
        line = getattr(e, "line", None)
        column = getattr(e, "column", None)
        raise ParseError(str(e), line=line, column=column) from e
    return ExpressionTransformer(templates).transform(tree)


def parse_slot(source: str) -> Expr:
    """Like :func:`parse_expression`, but unsupported syntax becomes ``Unparsed``."""
    try:
        return parse_expression(source)
    except ParseError:
        return Unparsed(source)
