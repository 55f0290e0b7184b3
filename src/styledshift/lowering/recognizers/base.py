"""Shared recognizer inputs and expression helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable

from styledshift.adapter import CssVariableContext, ImportedValueContext, ThemeValueContext
from styledshift.css.props import (
    border_props,
    expand_declaration,
    output_property,
    split_border,
    static_value,
)
from styledshift.lowering.accumulator import Accumulator, Scope
from styledshift.model.context import LoweringContext
from styledshift.model.diagnostic import BailCategory
from styledshift.model.expr import (
    Arrow,
    Binary,
    Block,
    Expr,
    Identifier,
    IdentParam,
    Logical,
    Member,
    NullLiteral,
    BooleanLiteral,
    ObjectPatternParam,
    ReturnStatement,
    StringLiteral,
    TemplateLiteral,
    Unary,
    is_literal,
    iter_children,
    literal_text,
    member_path,
    to_source,
)
from styledshift.model.outcome import KeepOriginal, Outcome
from styledshift.model.result import ImportSpec, JsExpr
from styledshift.model.rules import Declaration, SlotPart, StaticPart, StyledDeclaration


@dataclass(frozen=True)
class DeclarationContext:
    """One dynamic declaration plus everything a recognizer may consult.

    Attributes:
        component: The declaration's owner.
        declaration: The declaration being lowered.
        scope: Pseudo/media/pseudo-element scope of the enclosing rule.
        selector: Rule selector text, for diagnostics.
        run: Shared run context (adapter, registries).
        accumulator: Builder state of the owning component so far.
    """

    component: StyledDeclaration
    declaration: Declaration
    scope: Scope
    selector: str
    run: LoweringContext
    accumulator: Accumulator

    @property
    def slot_ids(self) -> list[int]:
        return self.declaration.value.slot_ids

    @property
    def single(self) -> bool:
        return len(self.slot_ids) == 1

    @property
    def expr(self) -> Expr | None:
        if not self.slot_ids:
            return None
        return self.component.slot(self.slot_ids[0])

    @property
    def prop(self) -> str | None:
        return self.declaration.property

    @property
    def affixes(self) -> tuple[str, str]:
        return self.declaration.value.affixes() or ("", "")

    @property
    def static_text(self) -> str:
        return "".join(
            p.text for p in self.declaration.value.parts if isinstance(p, StaticPart)
        )

    def output_property(self) -> str:
        return output_property(self.prop or "", self.static_text)


Recognizer = Callable[[DeclarationContext], "Outcome | None"]


# ---------------------------------------------------------------------------
# Props functions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PropsFunction:
    """An interpolated function of the component's props.

    Attributes:
        props_param: Name of an identifier props param (``p`` in ``p => ...``).
        locals: Destructured local name -> prop name.
        theme_local: Local bound to ``theme`` when destructured.
        body: The function body.
    """

    props_param: str | None
    locals: dict[str, str] = field(default_factory=dict, hash=False)
    theme_local: str | None = None
    body: Expr | Block | None = None

    def returned(self) -> Expr | None:
        if isinstance(self.body, Block):
            statements = self.body.statements
            if len(statements) == 1 and isinstance(statements[0], ReturnStatement):
                return statements[0].argument
            return None
        return self.body

    def prop_of(self, expr: Expr) -> str | None:
        if (
            isinstance(expr, Member)
            and not expr.computed
            and isinstance(expr.object, Identifier)
            and expr.object.name == self.props_param
            and expr.prop != "theme"
        ):
            return expr.prop  # type: ignore[return-value]
        if isinstance(expr, Identifier) and expr.name in self.locals:
            return self.locals[expr.name]
        return None

    def theme_path(self, expr: Expr) -> str | None:
        path = member_path(expr)
        if not path:
            return None
        if path[0] == self.props_param and len(path) > 2 and path[1] == "theme":
            return ".".join(path[2:])
        if self.theme_local and path[0] == self.theme_local and len(path) > 1:
            return ".".join(path[1:])
        return None

    def theme_root(self, expr: Expr) -> bool:
        """True for ``p.theme`` / destructured ``theme`` itself."""
        path = member_path(expr)
        if not path:
            return False
        if path == [self.props_param, "theme"] and self.props_param:
            return True
        return self.theme_local is not None and path == [self.theme_local]

    def props_in(self, expr: Expr | Block) -> list[str]:
        """Component props referenced by *expr* (theme access excluded)."""
        found: list[str] = []
        stack: list[object] = [expr]
        while stack:
            node = stack.pop()
            if isinstance(node, Member) and self.theme_path(node) is not None:
                continue
            prop = self.prop_of(node) if isinstance(node, (Member, Identifier)) else None
            if prop is not None:
                if prop not in found:
                    found.append(prop)
                continue
            if isinstance(node, Identifier) and node.name == self.props_param:
                if "*" not in found:
                    found.append("*")
                continue
            stack.extend(reversed(list(iter_children(node))))
        return found

    def uses_props(self, expr: Expr | Block) -> bool:
        return bool(self.props_in(expr))


def props_function(expr: Expr | None) -> PropsFunction | None:
    if not isinstance(expr, Arrow) or len(expr.params) > 1:
        return None
    if not expr.params:
        return PropsFunction(None, body=expr.body)
    param = expr.params[0]
    if isinstance(param, IdentParam):
        return PropsFunction(param.name, body=expr.body)
    if isinstance(param, ObjectPatternParam):
        locals_: dict[str, str] = {}
        theme_local = None
        for prop in param.props:
            if prop.key == "theme":
                theme_local = prop.local
            else:
                locals_[prop.local] = prop.key
        return PropsFunction(None, locals_, theme_local, expr.body)
    return None


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------


def _simple(cond: str) -> bool:
    return " " not in cond and "(" not in cond


def negate(cond: str) -> str:
    """Negate condition text; ``!x`` becomes ``x``."""
    if cond.startswith("!") and _simple(cond[1:]):
        return cond[1:]
    if _simple(cond):
        return "!" + cond
    return f"!({cond})"


def conjoin(left: str, right: str) -> str:
    return f"{left} && {right}"


def condition_text(test: Expr, fn: PropsFunction) -> str | None:
    """Render a prop-based test as condition text, or None when not prop-based."""
    prop = fn.prop_of(test)
    if prop is not None:
        return prop
    if isinstance(test, Unary) and test.operator == "!":
        inner = condition_text(test.argument, fn)
        return negate(inner) if inner is not None else None
    if isinstance(test, Binary) and test.operator in ("===", "==", "!==", "!="):
        strict = "===" if test.operator in ("===", "==") else "!=="
        for side, other in ((test.left, test.right), (test.right, test.left)):
            side_prop = fn.prop_of(side)
            if side_prop is not None and is_literal(other):
                return f"{side_prop} {strict} {to_source(other)}"
        return None
    if isinstance(test, Logical) and test.operator == "&&":
        left = condition_text(test.left, fn)
        right = condition_text(test.right, fn)
        if left is None or right is None:
            return None
        return conjoin(left, right)
    return None


def equality_operands(test: Expr, fn: PropsFunction) -> tuple[str, str] | None:
    """``p.size === "large"`` -> ``("size", "large")``."""
    if not isinstance(test, Binary) or test.operator not in ("===", "=="):
        return None
    for side, other in ((test.left, test.right), (test.right, test.left)):
        prop = fn.prop_of(side)
        if prop is not None and isinstance(other, StringLiteral):
            return prop, other.value
    return None


def is_empty_branch(expr: Expr) -> bool:
    """Falsy branches (``null``, ``undefined``, ``false``, ``""``) add no style."""
    if isinstance(expr, NullLiteral):
        return True
    if isinstance(expr, BooleanLiteral) and not expr.value:
        return True
    if isinstance(expr, Identifier) and expr.name == "undefined":
        return True
    return literal_text(expr) == ""


# ---------------------------------------------------------------------------
# Static values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StaticValue:
    """A slot value known at build time: literal text or a resolved expression."""

    value: str | JsExpr
    imports: tuple[ImportSpec, ...] = ()

    @property
    def is_literal(self) -> bool:
        return isinstance(self.value, str)


def _import_value(expr: Expr, run: LoweringContext) -> StaticValue | KeepOriginal | None:
    path = member_path(expr)
    if not path:
        return None
    binding = run.import_for(path[0])
    if binding is None:
        return None
    context = ImportedValueContext(
        binding.imported, binding.source, ".".join(path[1:]) or None
    )
    result = run.adapter.resolve_value(context)
    if result is None:
        return KeepOriginal(
            "Adapter resolveValue returned undefined for imported value",
            BailCategory.ADAPTER_FAILURE,
        )
    return StaticValue(JsExpr(result.expr), result.imports)


def _theme_value(path: str, run: LoweringContext) -> StaticValue | KeepOriginal:
    result = run.adapter.resolve_value(ThemeValueContext(path))
    if result is None:
        return KeepOriginal(
            f"Adapter resolveValue returned undefined for theme path '{path}'",
            BailCategory.ADAPTER_FAILURE,
        )
    return StaticValue(JsExpr(result.expr), result.imports)


def _keyframes_value(name: str, run: LoweringContext) -> StaticValue | KeepOriginal:
    if run.is_bailed(name):
        return KeepOriginal(
            f"Keyframes '{name}' was not lowered (it bailed)",
            BailCategory.UNSAFE_COMPOSITION,
        )
    return StaticValue(JsExpr(name))


def resolve_static(
    expr: Expr, run: LoweringContext, fn: PropsFunction | None = None
) -> StaticValue | KeepOriginal | None:
    """Resolve *expr* without component props, or return None."""
    text = literal_text(expr)
    if text is not None:
        return StaticValue(text)
    if isinstance(expr, Identifier) and expr.name in run.constants:
        return StaticValue(literal_text(run.constants[expr.name]) or "")
    if fn is not None:
        path = fn.theme_path(expr)
        if path is not None:
            return _theme_value(path, run)
        if fn.uses_props(expr):
            return None
    if isinstance(expr, TemplateLiteral):
        chunks: list[str | JsExpr] = [expr.quasis[0]]
        imports: tuple[ImportSpec, ...] = ()
        for inner, quasi in zip(expr.expressions, expr.quasis[1:]):
            resolved = resolve_static(inner, run, fn)
            if resolved is None or isinstance(resolved, KeepOriginal):
                return resolved
            chunks.extend([resolved.value, quasi])
            imports += resolved.imports
        return StaticValue(join_chunks(chunks), imports)
    if isinstance(expr, Identifier) and expr.name in run.keyframes:
        return _keyframes_value(expr.name, run)
    if isinstance(expr, (Identifier, Member)):
        return _import_value(expr, run)
    if isinstance(expr, Arrow):
        inner_fn = props_function(expr)
        body = inner_fn.returned() if inner_fn else None
        if inner_fn is None or body is None:
            return None
        return resolve_static(body, run, inner_fn)
    return None


# ---------------------------------------------------------------------------
# Value assembly
# ---------------------------------------------------------------------------


def _escape_template(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def join_chunks(chunks: list[str | JsExpr]) -> str | JsExpr:
    """Concatenate text and expressions; plain text stays a string."""
    chunks = [c for c in chunks if not (isinstance(c, str) and c == "")]
    if all(isinstance(c, str) for c in chunks):
        return "".join(chunks)  # type: ignore[arg-type]
    if len(chunks) == 1:
        return chunks[0]
    out = "`"
    for chunk in chunks:
        if isinstance(chunk, JsExpr):
            out += "${" + chunk.source + "}"
        else:
            out += _escape_template(chunk)
    return JsExpr(out + "`")


_VAR_RE = re.compile(r"\bvar\(")


def _call_end(text: str, i: int) -> int | None:
    """Index after the ``)`` matching the ``(`` at *i*."""
    depth = 0
    for j in range(i, len(text)):
        if text[j] == "(":
            depth += 1
        elif text[j] == ")":
            depth -= 1
            if depth == 0:
                return j + 1
    return None


def resolve_css_variables(
    text: str, run: LoweringContext, suffix: str = ""
) -> tuple[str | JsExpr, tuple[ImportSpec, ...]]:
    """Substitute adapter expressions for ``var(--name, fallback)`` references.

    A reference the adapter declines is kept as written; its fallback is
    then searched for further references. *suffix* is appended to the text.
    """
    chunks: list[str | JsExpr] = []
    imports: tuple[ImportSpec, ...] = ()
    pos = 0
    for match in _VAR_RE.finditer(text):
        if match.start() < pos:
            continue
        end = _call_end(text, match.end() - 1)
        if end is None:
            break
        name, comma, fallback = text[match.end():end - 1].partition(",")
        name = name.strip()
        if not name.startswith("--"):
            continue
        context = CssVariableContext(name, fallback.strip() if comma else None)
        result = run.adapter.resolve_value(context)
        if result is None:
            continue
        chunks.extend([text[pos:match.start()], JsExpr(result.expr)])
        imports += result.imports
        pos = end
    chunks.append(text[pos:] + suffix)
    return join_chunks(chunks), imports


def variable_entries(
    prop: str, text: str, important: bool, run: LoweringContext
) -> tuple[list[tuple[str, Any]], tuple[ImportSpec, ...]] | None:
    """One output entry for static *text* with resolved CSS variables, or None."""
    value, imports = resolve_css_variables(text, run, " !important" if important else "")
    if not isinstance(value, JsExpr):
        return None
    return [(output_property(prop, text), value)], imports


def with_affixes(value: str | JsExpr, dctx: DeclarationContext) -> str | JsExpr:
    """Wrap a slot value in the declaration's static text (and ``!important``)."""
    prefix, suffix = dctx.affixes
    if dctx.declaration.important:
        suffix += " !important"
    return join_chunks([prefix, value, suffix])


def entries_for(
    dctx: DeclarationContext, value: str | JsExpr, *, joined: bool = False
) -> list[tuple[str, Any]]:
    """Output (property, value) pairs for a resolved slot value.

    *joined* means *value* already includes the declaration's static text.
    Literal text goes through shorthand expansion; a border shorthand with a
    dynamic color keeps its static width/style as separate longhands.
    """
    prop = dctx.prop or ""
    important = dctx.declaration.important
    prefix, suffix = ("", "") if joined else dctx.affixes
    if isinstance(value, str):
        return expand_declaration(prop, prefix + value + suffix, important)
    borders = border_props(prop)
    if borders is not None and not joined and (prefix or suffix):
        width, style, color = split_border(prefix + suffix)
        if color is None:
            entries: list[tuple[str, Any]] = []
            if width is not None:
                entries.append((borders[0], static_value(width, important, borders[0])))
            if style is not None:
                entries.append((borders[1], static_value(style, important, borders[1])))
            color_value = join_chunks([value, " !important"]) if important else value
            entries.append((borders[2], color_value))
            return entries
    if joined:
        final = join_chunks([value, " !important"]) if important else value
    else:
        final = with_affixes(value, dctx)
    return [(dctx.output_property(), final)]


def resolve_declaration(
    dctx: DeclarationContext,
) -> tuple[str | JsExpr, tuple[ImportSpec, ...]] | KeepOriginal | None:
    """Resolve every slot of the declaration statically and join with its text."""
    chunks: list[str | JsExpr] = []
    imports: tuple[ImportSpec, ...] = ()
    for part in dctx.declaration.value.parts:
        if isinstance(part, StaticPart):
            chunks.append(part.text)
            continue
        assert isinstance(part, SlotPart)
        expr = dctx.component.slot(part.slot_id)
        if expr is None:
            return None
        resolved = resolve_static(expr, dctx.run)
        if resolved is None or isinstance(resolved, KeepOriginal):
            return resolved
        chunks.append(resolved.value)
        imports += resolved.imports
    return join_chunks(chunks), imports


def drop_candidates(props: list[str]) -> tuple[str, ...]:
    return tuple(p for p in props if p != "*")
