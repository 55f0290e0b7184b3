"""Recognizers that split prop conditions into variant branches."""

from __future__ import annotations

from typing import Any

from styledshift.css.props import expand_declaration, output_property
from styledshift.lowering.recognizers.base import (
    DeclarationContext,
    PropsFunction,
    condition_text,
    conjoin,
    drop_candidates,
    entries_for,
    equality_operands,
    is_empty_branch,
    join_chunks,
    negate,
    props_function,
    resolve_static,
)
from styledshift.lowering.naming import param_name
from styledshift.model.diagnostic import BailCategory
from styledshift.model.expr import (
    Arrow,
    Block,
    Conditional,
    Expr,
    IfStatement,
    Logical,
    ObjectPatternParam,
    ReturnStatement,
    StringLiteral,
    TaggedTemplate,
    TemplateLiteral,
    literal_text,
    member_path,
)
from styledshift.model.outcome import (
    EmitStyleFunction,
    KeepOriginal,
    Outcome,
    SplitVariants,
    VariantBranch,
)
from styledshift.model.result import ImportSpec, JsExpr
from styledshift.model.rules import SlotPart, StaticPart
from styledshift.parser.errors import ParseError
from styledshift.parser.template import parse_css, parse_template
from styledshift.selectors import Base, PseudoClasses, classify

Entry = tuple[str, Any, tuple[str, ...]]


# ---------------------------------------------------------------------------
# Branch collection
# ---------------------------------------------------------------------------


def _equality_chain(expr: Expr, fn: PropsFunction) -> list[tuple[str, Expr]] | None:
    """``p.x === "a" ? A : p.x === "b" ? B : C`` on one prop, as exclusive arms.

    The final arm gets ``!(x === "a" || x === "b")`` so it reads as the single
    negated default.
    """
    arms: list[tuple[str, Expr]] = []
    prop = None
    node: Expr = expr
    while isinstance(node, Conditional):
        operands = equality_operands(node.test, fn)
        if operands is None or isinstance(node.consequent, Conditional):
            return None
        if prop is not None and operands[0] != prop:
            return None
        prop = operands[0]
        text = condition_text(node.test, fn)
        if text is None:
            return None
        arms.append((text, node.consequent))
        node = node.alternate
    if len(arms) < 2:
        return None
    default = "!(" + " || ".join(text for text, _ in arms) + ")"
    return arms + [(default, node)]


def _collect(expr: Expr, fn: PropsFunction, when: str | None = None) -> list[tuple[str, Expr]] | None:
    """Flatten ternaries and ``&&`` into ``(condition, branch)`` pairs."""
    if isinstance(expr, Conditional):
        if when is None:
            chain = _equality_chain(expr, fn)
            if chain is not None:
                return chain
        test = condition_text(expr.test, fn)
        if test is None:
            return None
        positive = conjoin(when, test) if when else test
        negative = conjoin(when, negate(test)) if when else negate(test)
        left = _collect(expr.consequent, fn, positive)
        right = _collect(expr.alternate, fn, negative)
        if left is None or right is None:
            return None
        return left + right
    if isinstance(expr, Logical) and expr.operator == "&&":
        test = condition_text(expr.left, fn)
        if test is None:
            return None
        return _collect(expr.right, fn, conjoin(when, test) if when else test)
    if when is None:
        return None
    return [(when, expr)]


def _test_props(expr: Expr, fn: PropsFunction) -> list[str]:
    found: list[str] = []
    node: Any = expr
    stack = [node]
    while stack:
        node = stack.pop()
        if isinstance(node, Conditional):
            found.extend(fn.props_in(node.test))
            stack.extend([node.consequent, node.alternate])
        elif isinstance(node, Logical) and node.operator == "&&":
            found.extend(fn.props_in(node.left))
            stack.append(node.right)
    return list(dict.fromkeys(found))


# ---------------------------------------------------------------------------
# Branch values
# ---------------------------------------------------------------------------


class _NoMatch(Exception):
    """A branch is not a form this recognizer lowers."""


class _Bail(Exception):
    """A branch is recognized but cannot be lowered safely."""

    def __init__(self, outcome: KeepOriginal) -> None:
        super().__init__(outcome.reason)
        self.outcome = outcome


def _value_entries(
    expr: Expr, dctx: DeclarationContext, fn: PropsFunction
) -> tuple[list[Entry], tuple[ImportSpec, ...]]:
    if is_empty_branch(expr):
        return [], ()
    resolved = resolve_static(expr, dctx.run, fn)
    if resolved is None:
        raise _NoMatch
    if isinstance(resolved, KeepOriginal):
        raise _Bail(resolved)
    entries = [(prop, value, ()) for prop, value in entries_for(dctx, resolved.value)]
    return entries, resolved.imports


def _css_text(expr: Expr, dctx: DeclarationContext) -> tuple[tuple[str, ...], tuple[Expr, ...]] | None:
    """Template pieces of a ``css`` tagged template or a plain CSS string."""
    if isinstance(expr, TaggedTemplate):
        tag = member_path(expr.tag)
        if tag is None or tag[-1] not in dctx.run.config.css_helper_names:
            return None
        return expr.quasi.quasis, expr.quasi.expressions
    if isinstance(expr, TemplateLiteral):
        return expr.quasis, expr.expressions
    if isinstance(expr, StringLiteral):
        return (expr.value,), ()
    return None


def _block_entries(
    expr: Expr, dctx: DeclarationContext, fn: PropsFunction
) -> tuple[list[Entry], tuple[ImportSpec, ...]]:
    """Lower a CSS block branch into entries; inner slots must be static."""
    if is_empty_branch(expr):
        return [], ()
    pieces = _css_text(expr, dctx)
    if pieces is None:
        raise _NoMatch
    quasis, inner = pieces
    try:
        rules = parse_template(quasis) if len(quasis) > 1 else parse_css(quasis[0])
    except ParseError as exc:
        raise _Bail(KeepOriginal(f"Conditional CSS block could not be parsed: {exc}")) from exc
    entries: list[Entry] = []
    imports: tuple[ImportSpec, ...] = ()
    for rule in rules:
        shape = classify(rule.selector)
        if rule.at_rules or not isinstance(shape, (Base, PseudoClasses)):
            raise _Bail(
                KeepOriginal(
                    f"Unsupported selector in conditional CSS block: {rule.selector}",
                    BailCategory.UNSUPPORTED_SELECTOR,
                )
            )
        pseudos = shape.pseudos if isinstance(shape, PseudoClasses) else ()
        if pseudos and not dctx.scope.is_base:
            raise _Bail(
                KeepOriginal(
                    "Pseudo selectors in a conditional CSS block under a nested selector",
                    BailCategory.CONTEXT_LOSS,
                )
            )
        for decl in rule.declarations:
            if decl.property is None:
                raise _Bail(KeepOriginal("Interpolated block inside a conditional CSS block"))
            chunks: list[Any] = []
            for part in decl.value.parts:
                if isinstance(part, StaticPart):
                    chunks.append(part.text)
                    continue
                assert isinstance(part, SlotPart)
                resolved = resolve_static(inner[part.slot_id], dctx.run, fn)
                if resolved is None:
                    raise _Bail(
                        KeepOriginal(
                            f"Conditional CSS block interpolates a dynamic value for '{decl.property}'"
                        )
                    )
                if isinstance(resolved, KeepOriginal):
                    raise _Bail(resolved)
                chunks.append(resolved.value)
                imports += resolved.imports
            value = join_chunks(chunks)
            if isinstance(value, str):
                pairs = expand_declaration(decl.property, value, decl.important)
            else:
                if decl.important:
                    value = join_chunks([value, " !important"])
                pairs = [(output_property(decl.property), value)]
            entries.extend((prop, v, pseudos) for prop, v in pairs)
    return entries, imports


def _branches(
    arms: list[tuple[str, Expr]], dctx: DeclarationContext, fn: PropsFunction
) -> tuple[list[VariantBranch], tuple[ImportSpec, ...]]:
    reader = _value_entries if dctx.prop is not None else _block_entries
    branches: list[VariantBranch] = []
    imports: tuple[ImportSpec, ...] = ()
    for when, expr in arms:
        entries, found = reader(expr, dctx, fn)
        imports += found
        if entries:
            branches.append(VariantBranch(when, tuple(entries)))
    return branches, imports


def _split(arms: list[tuple[str, Expr]], dctx: DeclarationContext, fn: PropsFunction, props: list[str]) -> Outcome | None:
    try:
        branches, imports = _branches(arms, dctx, fn)
    except _NoMatch:
        return None
    except _Bail as bail:
        return bail.outcome
    return SplitVariants(tuple(branches), drop_candidates(props), imports)


# ---------------------------------------------------------------------------
# Recognizers
# ---------------------------------------------------------------------------


def conditional_value(dctx: DeclarationContext) -> Outcome | None:
    """``p => p.$on ? "red" : "blue"`` and ``p => p.$on && css`...```."""
    if not dctx.single:
        return None
    fn = props_function(dctx.expr)
    if fn is None:
        return None
    body = fn.returned()
    if not isinstance(body, (Conditional, Logical)):
        return None
    arms = _collect(body, fn)
    if arms is None:
        return None
    return _split(arms, dctx, fn, _test_props(body, fn))


def _returned_value(statement: object) -> Expr | None:
    if isinstance(statement, Block) and len(statement.statements) == 1:
        statement = statement.statements[0]
    if isinstance(statement, ReturnStatement):
        return statement.argument
    return None


def enum_if_chain(dctx: DeclarationContext) -> Outcome | None:
    """``if (p.x === "a") return "1"; ... return "d";`` over one enum prop."""
    if not dctx.single:
        return None
    fn = props_function(dctx.expr)
    if fn is None or not isinstance(fn.body, Block):
        return None
    statements = fn.body.statements
    if len(statements) < 2 or not isinstance(statements[-1], ReturnStatement):
        return None
    arms: list[tuple[str, Expr]] = []
    prop = None
    for statement in statements[:-1]:
        if not isinstance(statement, IfStatement) or statement.alternate is not None:
            return None
        operands = equality_operands(statement.test, fn)
        value = _returned_value(statement.consequent)
        if operands is None or value is None:
            return None
        if prop is not None and operands[0] != prop:
            return None
        prop = operands[0]
        text = condition_text(statement.test, fn)
        if text is None:
            return None
        arms.append((text, value))
    default = statements[-1].argument
    if default is not None:
        arms.append(("!(" + " || ".join(text for text, _ in arms) + ")", default))
    return _split(arms, dctx, fn, [prop] if prop else [])


def logical_or_default(dctx: DeclarationContext) -> Outcome | None:
    """``p => p.$x || "16px"``: fallback into the style, the prop as a function."""
    if dctx.prop is None or not dctx.single:
        return None
    expr = dctx.expr
    fn = props_function(expr)
    if fn is None:
        return None
    body = fn.returned()
    if isinstance(body, Logical) and body.operator in ("||", "??"):
        prop = fn.prop_of(body.left)
        fallback_expr = body.right
        condition_op = body.operator
    elif body is not None and fn.prop_of(body) is not None and _pattern_default(expr, fn, body) is not None:
        prop = fn.prop_of(body)
        fallback_expr = _pattern_default(expr, fn, body)
        condition_op = "default"
    else:
        return None
    if prop is None or fallback_expr is None:
        return None
    fallback = resolve_static(fallback_expr, dctx.run, fn)
    if fallback is None:
        return None
    if isinstance(fallback, KeepOriginal):
        return fallback
    param = param_name(prop)
    if condition_op == "||":
        condition = prop
    elif condition_op == "??":
        condition = f"{prop} != null"
    else:
        condition = f"{prop} !== undefined"
    values = tuple(entries_for(dctx, JsExpr(param)))
    return EmitStyleFunction(
        source_prop=prop,
        param=param,
        values=values,
        fallback=tuple(entries_for(dctx, fallback.value)),
        condition=condition,
        imports=fallback.imports,
    )


def _pattern_default(expr: Expr | None, fn: PropsFunction, body: Expr) -> Expr | None:
    """Default of a destructured prop: ``({ $x = "4px" }) => $x``."""
    if not isinstance(expr, Arrow) or not expr.params:
        return None
    param = expr.params[0]
    if not isinstance(param, ObjectPatternParam):
        return None
    prop = fn.prop_of(body)
    for entry in param.props:
        if entry.key == prop and entry.default is not None and literal_text(entry.default) is not None:
            return entry.default
    return None
