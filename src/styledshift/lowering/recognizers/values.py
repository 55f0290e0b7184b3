"""Recognizers for values resolvable at build time, keyframes, helper calls and inline styles."""

from __future__ import annotations

import re
from typing import Any

from styledshift.adapter import CallArg, CallContext
from styledshift.css.props import static_value as css_literal
from styledshift.lowering.recognizers.base import (
    DeclarationContext,
    PropsFunction,
    drop_candidates,
    entries_for,
    join_chunks,
    props_function,
    resolve_declaration,
    resolve_static,
    variable_entries,
    with_affixes,
)
from styledshift.model.diagnostic import BailCategory
from styledshift.model.expr import (
    Binary,
    BooleanLiteral,
    Call,
    Expr,
    Identifier,
    Member,
    NullLiteral,
    NumericLiteral,
    StringLiteral,
    TemplateLiteral,
    member_path,
    to_source,
    walk,
)
from styledshift.model.outcome import (
    EmitInlineStyleValue,
    Expand,
    KeepOriginal,
    Outcome,
    ResolvedStyles,
    ResolvedValue,
)
from styledshift.model.result import ImportSpec, JsExpr
from styledshift.parser.template import SLOT_RE, split_top_level


def static_value(dctx: DeclarationContext) -> Outcome | None:
    """Literals, literal constants, theme paths, imported tokens and keyframes.

    Every slot of the declaration must resolve. With a single slot the static
    text around it stays separate so border shorthands can still be split.
    Literal text is checked for ``var()`` references the adapter maps.
    """
    if dctx.prop is None:
        return None
    if not dctx.single:
        resolved = resolve_declaration(dctx)
        if resolved is None or isinstance(resolved, KeepOriginal):
            return resolved
        value, imports = resolved
        if isinstance(value, str):
            variables = _variable_outcome(dctx, value, imports)
            if variables is not None:
                return variables
        return Expand(tuple(entries_for(dctx, value, joined=True)), imports)

    expr = dctx.expr
    if expr is None:
        return None
    lone = resolve_static(expr, dctx.run)
    if lone is None or isinstance(lone, KeepOriginal):
        return lone
    if lone.is_literal:
        prefix, suffix = dctx.affixes
        variables = _variable_outcome(dctx, f"{prefix}{lone.value}{suffix}", lone.imports)
        if variables is not None:
            return variables
    entries = entries_for(dctx, lone.value)
    if len(entries) == 1 and isinstance(entries[0][1], JsExpr):
        return ResolvedValue(entries[0][1], lone.imports)
    return Expand(tuple(entries), lone.imports)


def _variable_outcome(
    dctx: DeclarationContext, text: str, imports: tuple[ImportSpec, ...]
) -> Outcome | None:
    assert dctx.prop is not None
    resolved = variable_entries(dctx.prop, text, dctx.declaration.important, dctx.run)
    if resolved is None:
        return None
    entries, variable_imports = resolved
    return Expand(tuple(entries), imports + variable_imports)


# ---------------------------------------------------------------------------
# Keyframes
# ---------------------------------------------------------------------------

_TIME_RE = re.compile(r"^(?:\d+|\d*\.\d+)(?:ms|s)$")
_TIMING_RE = re.compile(
    r"^(?:linear|ease(?:-in|-out|-in-out)?|step-start|step-end|cubic-bezier\(.*\)|steps\(.*\))$"
)
_ITERATION_RE = re.compile(r"^(?:infinite|\d+)$")

# Initial values fill longhands a segment leaves out.
_ANIMATION_INITIAL = {
    "animationDuration": "0s",
    "animationTimingFunction": "ease",
    "animationDelay": "0s",
    "animationIterationCount": "1",
}


def _animation_segment(
    token_text: str, dctx: DeclarationContext
) -> dict[str, str] | Outcome | None:
    tokens = split_top_level(" ".join(token_text.split()), " ")
    slot = SLOT_RE.fullmatch(tokens[0]) if tokens else None
    if slot is None:
        return None
    expr = dctx.component.slot(int(slot.group(1)))
    if not isinstance(expr, Identifier) or expr.name not in dctx.run.keyframes:
        return None
    name = resolve_static(expr, dctx.run)
    if isinstance(name, KeepOriginal):
        return name
    parsed = {"animationName": expr.name}
    for token in tokens[1:]:
        if _TIME_RE.match(token):
            key = "animationDelay" if "animationDuration" in parsed else "animationDuration"
        elif _TIMING_RE.match(token):
            key = "animationTimingFunction"
        elif _ITERATION_RE.match(token):
            key = "animationIterationCount"
        else:
            return None
        if key in parsed:
            return None
        parsed[key] = token
    return parsed


def keyframes_animation(dctx: DeclarationContext) -> Outcome | None:
    """``animation: ${fadeIn} 2s linear infinite`` -> animation longhands.

    Each comma-separated segment must start with a keyframes reference;
    longhand values are joined across segments.
    """
    if dctx.prop is None or dctx.prop.strip() != "animation":
        return None
    segments: list[dict[str, str]] = []
    for text in split_top_level(dctx.declaration.value.text):
        segment = _animation_segment(text, dctx)
        if not isinstance(segment, dict):
            return segment
        segments.append(segment)
    if not segments:
        return None

    important = dctx.declaration.important
    chunks: list[str | JsExpr] = []
    for index, segment in enumerate(segments):
        if index:
            chunks.append(", ")
        chunks.append(JsExpr(segment["animationName"]))
    if important:
        chunks.append(" !important")
    entries: list[tuple[str, Any]] = [("animationName", join_chunks(chunks))]
    for prop, initial in _ANIMATION_INITIAL.items():
        if any(prop in segment for segment in segments):
            text = ", ".join(segment.get(prop, initial) for segment in segments)
            entries.append((prop, css_literal(text, important, prop)))
    return Expand(tuple(entries))


# ---------------------------------------------------------------------------
# Helper calls
# ---------------------------------------------------------------------------


def _call_arg(arg: Expr, fn: PropsFunction | None) -> CallArg:
    if isinstance(arg, StringLiteral):
        return CallArg("literal", arg.value)
    if isinstance(arg, NumericLiteral):
        return CallArg("literal", arg.value)
    if isinstance(arg, BooleanLiteral):
        return CallArg("literal", arg.value)
    if isinstance(arg, NullLiteral):
        return CallArg("literal", None)
    if isinstance(arg, TemplateLiteral) and not arg.expressions:
        return CallArg("literal", arg.quasis[0])
    if fn is not None:
        path = fn.theme_path(arg)
        if path is not None:
            return CallArg("theme", path=path)
    return CallArg("unknown")


def helper_call(dctx: DeclarationContext) -> Outcome | None:
    """``${color("primary")}`` or ``${(p) => space(p.theme.gap)}`` via resolve_call."""
    if not dctx.single:
        return None
    expr = dctx.expr
    fn = props_function(expr)
    if fn is not None:
        expr = fn.returned()
    if not isinstance(expr, Call):
        return None
    callee = member_path(expr.callee)
    if not callee:
        return None
    binding = dctx.run.import_for(callee[0])
    if binding is None:
        return None
    args = tuple(_call_arg(a, fn) for a in expr.args)
    if any(a.kind == "unknown" for a in args):
        if fn is not None and fn.uses_props(expr):
            return None
        return KeepOriginal(
            f"Unsupported call expression: arguments of {to_source(expr.callee)} are not static",
        )
    imported = ".".join([binding.imported, *callee[1:]])
    result = dctx.run.adapter.resolve_call(CallContext(imported, binding.source, args))
    if result is None:
        return KeepOriginal(
            f"Adapter resolveCall returned undefined for {imported}",
            BailCategory.ADAPTER_FAILURE,
        )
    if result.usage == "create" or dctx.prop is None:
        return ResolvedStyles(result.expr, result.imports)
    return Expand(tuple(entries_for(dctx, JsExpr(result.expr))), result.imports)


# ---------------------------------------------------------------------------
# Inline style values
# ---------------------------------------------------------------------------


def _computed_from_props(expr: Expr, fn: PropsFunction) -> bool:
    """Arithmetic, method calls or string building over props."""
    if isinstance(expr, (Binary, Call, TemplateLiteral)):
        return fn.uses_props(expr)
    if isinstance(expr, Member) and expr.computed:
        return fn.uses_props(expr)
    return False


def inline_style_value(dctx: DeclarationContext) -> Outcome | None:
    """A render-time computation over props becomes an inline style prop."""
    if dctx.prop is None or not dctx.single:
        return None
    fn = props_function(dctx.expr)
    if fn is None:
        return None
    body = fn.returned()
    if body is None or not _computed_from_props(body, fn):
        return None
    if any(fn.theme_path(node) for node in _members(body)):
        return None
    if not dctx.scope.is_base:
        return KeepOriginal(
            "Inline style values cannot be applied under nested selectors/at-rules",
            BailCategory.CONTEXT_LOSS,
        )
    call = JsExpr(f"({to_source(dctx.expr)})(props)")  # type: ignore[arg-type]
    value = with_affixes(call, dctx)
    source = value.source if isinstance(value, JsExpr) else repr(value)
    props = drop_candidates(fn.props_in(body))
    return EmitInlineStyleValue(source, props)


def _members(expr: Expr) -> list[Expr]:
    return [n for n in walk(expr) if isinstance(n, (Member, Identifier))]
