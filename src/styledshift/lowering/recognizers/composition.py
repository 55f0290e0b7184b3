"""Recognizers for context guards and mixin composition."""

from __future__ import annotations

from styledshift.adapter import ImportedValueContext
from styledshift.lowering.recognizers.base import DeclarationContext, props_function
from styledshift.model.diagnostic import BailCategory
from styledshift.model.expr import Call, member_path
from styledshift.model.outcome import ComposeMixin, KeepOriginal, Outcome, ResolvedStyles


def pseudo_element_guard(dctx: DeclarationContext) -> Outcome | None:
    """Prop-driven values inside ``::before``/``::after`` have no static form."""
    if dctx.scope.pseudo_element is None:
        return None
    for slot_id in dctx.slot_ids:
        fn = props_function(dctx.component.slot(slot_id))
        if fn is not None and fn.body is not None and fn.uses_props(fn.body):
            return KeepOriginal(
                "Dynamic styles inside pseudo elements (::before/::after) are not supported",
                BailCategory.CONTEXT_LOSS,
            )
    return None


def css_helper_mixin(dctx: DeclarationContext) -> Outcome | None:
    """A whole-block slot naming a ``css`` helper (``${truncate}``) composes it."""
    if dctx.prop is not None or not dctx.single:
        return None
    expr = dctx.expr
    if isinstance(expr, Call) and not expr.args:
        expr = expr.callee
    path = member_path(expr) if expr is not None else None
    if not path:
        return None
    if len(path) == 1 and path[0] in dctx.run.declarations:
        target = dctx.run.declarations[path[0]]
        if target.name == dctx.component.name:
            return KeepOriginal(
                "Component references itself as a mixin", BailCategory.UNSAFE_COMPOSITION
            )
        if not target.is_css_helper:
            return KeepOriginal(
                "Using styled-components components as mixins is not supported",
                BailCategory.UNSAFE_COMPOSITION,
            )
        return ComposeMixin(target.name)
    binding = dctx.run.import_for(path[0])
    if binding is None:
        return None
    context = ImportedValueContext(binding.imported, binding.source, ".".join(path[1:]) or None)
    result = dctx.run.adapter.resolve_value(context)
    if result is None:
        return KeepOriginal(
            "Adapter resolveValue returned undefined for imported value",
            BailCategory.ADAPTER_FAILURE,
        )
    return ResolvedStyles(result.expr, result.imports)
