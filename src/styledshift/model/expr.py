"""Expression model: the closed set of JS expression shapes found in template slots."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Union


# ---------------------------------------------------------------------------
# Literals and names
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identifier:
    name: str
    kind = "identifier"


@dataclass(frozen=True)
class StringLiteral:
    value: str
    kind = "string literal"


@dataclass(frozen=True)
class NumericLiteral:
    value: int | float
    raw: str
    kind = "numeric literal"


@dataclass(frozen=True)
class BooleanLiteral:
    value: bool
    kind = "boolean literal"


@dataclass(frozen=True)
class NullLiteral:
    kind = "null literal"


@dataclass(frozen=True)
class TemplateLiteral:
    """A backtick string: ``quasis`` has one more entry than ``expressions``."""

    quasis: tuple[str, ...]
    expressions: tuple[Expr, ...]
    kind = "template literal"


@dataclass(frozen=True)
class TaggedTemplate:
    tag: Expr
    quasi: TemplateLiteral
    kind = "tagged template"


# ---------------------------------------------------------------------------
# Operators and access
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Member:
    """Property access. ``prop`` is a name unless ``computed`` is set."""

    object: Expr
    prop: str | Expr
    computed: bool = False
    optional: bool = False
    kind = "member expression"


@dataclass(frozen=True)
class Call:
    callee: Expr
    args: tuple[Expr, ...]
    kind = "call expression"


@dataclass(frozen=True)
class Unary:
    operator: str
    argument: Expr
    kind = "unary expression"


@dataclass(frozen=True)
class Binary:
    operator: str
    left: Expr
    right: Expr
    kind = "binary expression"


@dataclass(frozen=True)
class Logical:
    operator: str
    left: Expr
    right: Expr
    kind = "logical expression"


@dataclass(frozen=True)
class Conditional:
    test: Expr
    consequent: Expr
    alternate: Expr
    kind = "conditional expression"


# ---------------------------------------------------------------------------
# Functions and statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IdentParam:
    name: str
    default: Expr | None = None


@dataclass(frozen=True)
class PatternProp:
    """One ``key: local = default`` entry of an object destructuring pattern."""

    key: str
    local: str
    default: Expr | None = None


@dataclass(frozen=True)
class ObjectPatternParam:
    props: tuple[PatternProp, ...]
    default: Expr | None = None


Param = Union[IdentParam, ObjectPatternParam]


@dataclass(frozen=True)
class Arrow:
    params: tuple[Param, ...]
    body: Expr | Block
    kind = "arrow function"


@dataclass(frozen=True)
class ReturnStatement:
    argument: Expr | None


@dataclass(frozen=True)
class IfStatement:
    test: Expr
    consequent: Statement
    alternate: Statement | None = None


@dataclass(frozen=True)
class VarDeclaration:
    keyword: str
    name: str
    init: Expr


@dataclass(frozen=True)
class Block:
    statements: tuple[Statement, ...]


Statement = Union[ReturnStatement, IfStatement, VarDeclaration, Block]


@dataclass(frozen=True)
class Unparsed:
    """Source text the expression grammar does not cover."""

    source: str
    kind = "unknown"


Expr = Union[
    Identifier,
    StringLiteral,
    NumericLiteral,
    BooleanLiteral,
    NullLiteral,
    TemplateLiteral,
    TaggedTemplate,
    Member,
    Call,
    Unary,
    Binary,
    Logical,
    Conditional,
    Arrow,
    Unparsed,
]

LITERAL_TYPES = (StringLiteral, NumericLiteral, BooleanLiteral, NullLiteral)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_literal(expr: object) -> bool:
    return isinstance(expr, LITERAL_TYPES)


def literal_text(expr: Expr) -> str | None:
    """Return the CSS text for a string/number literal (or a static template)."""
    if isinstance(expr, StringLiteral):
        return expr.value
    if isinstance(expr, NumericLiteral):
        return expr.raw
    if isinstance(expr, TemplateLiteral) and not expr.expressions:
        return expr.quasis[0]
    return None


def member_path(expr: Expr) -> list[str] | None:
    """Flatten ``a.b.c`` (non-computed) into ``["a", "b", "c"]``."""
    parts: list[str] = []
    node = expr
    while isinstance(node, Member):
        if node.computed or not isinstance(node.prop, str):
            return None
        parts.append(node.prop)
        node = node.object
    if not isinstance(node, Identifier):
        return None
    parts.append(node.name)
    parts.reverse()
    return parts


def to_source(node: Expr | Statement | Param) -> str:
    """Print an expression back to compact JS source."""
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, StringLiteral):
        return json.dumps(node.value)
    if isinstance(node, NumericLiteral):
        return node.raw
    if isinstance(node, BooleanLiteral):
        return "true" if node.value else "false"
    if isinstance(node, NullLiteral):
        return "null"
    if isinstance(node, TemplateLiteral):
        out = "`" + node.quasis[0]
        for expr, quasi in zip(node.expressions, node.quasis[1:]):
            out += "${" + to_source(expr) + "}" + quasi
        return out + "`"
    if isinstance(node, TaggedTemplate):
        return to_source(node.tag) + to_source(node.quasi)
    if isinstance(node, Member):
        obj = _wrap(node.object)
        if node.computed:
            dot = "?." if node.optional else ""
            return f"{obj}{dot}[{to_source(node.prop)}]"  # type: ignore[arg-type]
        dot = "?." if node.optional else "."
        return f"{obj}{dot}{node.prop}"
    if isinstance(node, Call):
        return f"{_wrap(node.callee)}({', '.join(to_source(a) for a in node.args)})"
    if isinstance(node, Unary):
        space = " " if node.operator.isalpha() else ""
        return f"{node.operator}{space}{_wrap(node.argument)}"
    if isinstance(node, (Binary, Logical)):
        return f"{_wrap(node.left)} {node.operator} {_wrap(node.right)}"
    if isinstance(node, Conditional):
        return (
            f"{_wrap(node.test)} ? {to_source(node.consequent)}"
            f" : {to_source(node.alternate)}"
        )
    if isinstance(node, Arrow):
        params = ", ".join(to_source(p) for p in node.params)
        return f"({params}) => {to_source(node.body)}"
    if isinstance(node, IdentParam):
        if node.default is not None:
            return f"{node.name} = {to_source(node.default)}"
        return node.name
    if isinstance(node, ObjectPatternParam):
        props = []
        for p in node.props:
            text = p.key if p.key == p.local else f"{p.key}: {p.local}"
            if p.default is not None:
                text += f" = {to_source(p.default)}"
            props.append(text)
        return "{ " + ", ".join(props) + " }"
    if isinstance(node, Block):
        return "{ " + " ".join(to_source(s) for s in node.statements) + " }"
    if isinstance(node, ReturnStatement):
        if node.argument is None:
            return "return;"
        return f"return {to_source(node.argument)};"
    if isinstance(node, IfStatement):
        out = f"if ({to_source(node.test)}) {to_source(node.consequent)}"
        if node.alternate is not None:
            out += f" else {to_source(node.alternate)}"
        return out
    if isinstance(node, VarDeclaration):
        return f"{node.keyword} {node.name} = {to_source(node.init)};"
    if isinstance(node, Unparsed):
        return node.source
    raise TypeError(f"Cannot print {type(node).__name__}")


def _wrap(node: Expr) -> str:
    text = to_source(node)
    if isinstance(node, (Binary, Logical, Conditional, Arrow, Unary)):
        return f"({text})"
    return text


def iter_children(node: object):
    """Yield the direct Expr/Statement children of *node*."""
    for value in vars(node).values():
        if isinstance(value, tuple):
            for item in value:
                if hasattr(item, "__dataclass_fields__"):
                    yield item
        elif hasattr(value, "__dataclass_fields__"):
            yield value


def walk(node: object):
    """Depth-first iteration over *node* and all of its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_children(current))))
