"""Recognizers that turn a prop-driven value into a parameterized style function."""

from __future__ import annotations

from styledshift.adapter import ImportedValueContext, ResolveValueResult, ThemeValueContext
from styledshift.lowering.naming import param_name
from styledshift.lowering.recognizers.base import (
    DeclarationContext,
    PropsFunction,
    entries_for,
    join_chunks,
    props_function,
)
from styledshift.model.diagnostic import BailCategory
from styledshift.model.expr import Expr, Member, TemplateLiteral, member_path
from styledshift.model.outcome import EmitStyleFunction, KeepOriginal, Outcome
from styledshift.model.result import JsExpr


def _indexed_object(
    obj: Expr, dctx: DeclarationContext, fn: PropsFunction
) -> ResolveValueResult | KeepOriginal | None:
    """Resolve the object of ``theme.colors[...]`` or ``tokens[...]``."""
    path = fn.theme_path(obj)
    if path is not None:
        result = dctx.run.adapter.resolve_value(ThemeValueContext(path))
        if result is None:
            return KeepOriginal(
                f"Adapter resolveValue returned undefined for theme path '{path}'",
                BailCategory.ADAPTER_FAILURE,
            )
        return result
    parts = member_path(obj)
    if not parts:
        return None
    binding = dctx.run.import_for(parts[0])
    if binding is None:
        return None
    context = ImportedValueContext(binding.imported, binding.source, ".".join(parts[1:]) or None)
    result = dctx.run.adapter.resolve_value(context)
    if result is None:
        return KeepOriginal(
            "Adapter resolveValue returned undefined for imported value",
            BailCategory.ADAPTER_FAILURE,
        )
    return result


def theme_indexed_lookup(dctx: DeclarationContext) -> Outcome | None:
    """``p => p.theme.colors[p.$bg]`` -> ``(bg) => ({prop: colors[bg]})``."""
    if dctx.prop is None or not dctx.single:
        return None
    fn = props_function(dctx.expr)
    if fn is None:
        return None
    body = fn.returned()
    if not isinstance(body, Member) or not body.computed:
        return None
    prop = fn.prop_of(body.prop)  # type: ignore[arg-type]
    if prop is None:
        return None
    resolved = _indexed_object(body.object, dctx, fn)
    if resolved is None or isinstance(resolved, KeepOriginal):
        return resolved
    param = param_name(prop)
    return EmitStyleFunction(
        source_prop=prop,
        param=param,
        values=tuple(entries_for(dctx, JsExpr(f"{resolved.expr}[{param}]"))),
        imports=resolved.imports,
    )


def _template_of_prop(body: TemplateLiteral, fn: PropsFunction) -> tuple[str, list[str | JsExpr]] | None:
    """``\\`${p.$w}px\\``` with exactly one prop and static quasis."""
    if len(body.expressions) != 1:
        return None
    prop = fn.prop_of(body.expressions[0])
    if prop is None:
        return None
    param = param_name(prop)
    return prop, [body.quasis[0], JsExpr(param), body.quasis[1]]


def prop_access(dctx: DeclarationContext) -> Outcome | None:
    """``p => p.$size`` / ``({ $size }) => $size`` -> style function keyed by the prop."""
    if dctx.prop is None or not dctx.single:
        return None
    fn = props_function(dctx.expr)
    if fn is None:
        return None
    body = fn.returned()
    if body is None:
        return None
    prop = fn.prop_of(body)
    if prop is not None:
        param = param_name(prop)
        value: str | JsExpr = JsExpr(param)
    elif isinstance(body, TemplateLiteral):
        found = _template_of_prop(body, fn)
        if found is None:
            return None
        prop, chunks = found
        param = param_name(prop)
        value = join_chunks(chunks)
    else:
        return None
    return EmitStyleFunction(
        source_prop=prop,
        param=param,
        values=tuple(entries_for(dctx, value)),
    )
