"""Composition & synthesis: turn a component's accumulator into result entries."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from styledshift.lowering.accumulator import DEFAULT, Accumulator, MixinRef
from styledshift.lowering.bail import BailSignal
from styledshift.lowering.naming import capitalize, dimension_key, variant_key
from styledshift.model.context import LoweringContext
from styledshift.model.diagnostic import BailCategory
from styledshift.model.result import (
    DimensionUse,
    JsExpr,
    LoweredComponent,
    StyleFunction,
    StyleFunctionCall,
    VariantDimension,
    VariantUse,
)
from styledshift.model.rules import StyledDeclaration

_EQUALITY_RE = re.compile(r'^(\$?[A-Za-z_][\w$]*) === ("(?:[^"\\]|\\.)*")$')

_MISSING = object()


@dataclass
class Synthesis:
    """Everything one component writes, held back until the commit.

    Attributes:
        record: The immutable output record.
        pending: Result entries in write order.
        replaced_mixin_keys: Mixin keys superseded by a patched copy.
        base_values: Statically known base values, for later mixin backfill.
    """

    record: LoweredComponent
    pending: dict[str, Any] = field(default_factory=dict)
    replaced_mixin_keys: list[str] = field(default_factory=list)
    base_values: dict[str, Any] = field(default_factory=dict)


class _Keys:
    """Allocates result keys, suffixing a number on collision."""

    def __init__(self, run: LoweringContext, pending: dict[str, Any]) -> None:
        self.run = run
        self.pending = pending

    def allocate(self, key: str) -> str:
        candidate = key
        n = 2
        while candidate in self.pending or candidate in self.run.results:
            candidate = f"{key}{n}"
            n += 1
        return candidate


# ---------------------------------------------------------------------------
# Variant buckets
# ---------------------------------------------------------------------------


def _equality(condition: str) -> tuple[str, str] | None:
    match = _EQUALITY_RE.match(condition)
    if not match:
        return None
    return match.group(1), json.loads(match.group(2))


def group_dimensions(
    variants: dict[str, dict[str, Any]], prop_types: dict[str, tuple[str, ...]]
) -> dict[str, dict[str, dict[str, Any]]]:
    """Group ``prop === "v"`` buckets into per-prop dimension entries.

    A prop qualifies when it has at least two buckets and a declared value
    set of two or more members covering every bucket value. Declared values
    without a bucket map to ``{}``.
    """
    by_prop: dict[str, dict[str, str]] = {}
    for condition in variants:
        parsed = _equality(condition)
        if parsed is not None:
            by_prop.setdefault(parsed[0], {})[parsed[1]] = condition
    dimensions: dict[str, dict[str, dict[str, Any]]] = {}
    for prop, conditions in by_prop.items():
        declared = prop_types.get(prop, ())
        if len(conditions) < 2 or len(declared) < 2:
            continue
        if not set(conditions) <= set(declared):
            continue
        dimensions[prop] = {
            value: variants[conditions[value]] if value in conditions else {}
            for value in declared
        }
    return dimensions


def _condition_order(condition: str) -> int:
    return 1 if "&&" in condition else 0


# ---------------------------------------------------------------------------
# After-base mixin patching
# ---------------------------------------------------------------------------


def _known_base(prop: str, acc: Accumulator, run: LoweringContext) -> Any:
    """Base value for *prop* in merge order: before-base mixins, then own base."""
    if prop in acc.style.base:
        return acc.style.base[prop]
    found = _MISSING
    for ref in acc.mixins:
        if ref.after_base:
            continue
        values = run.base_values.get(ref.name, {})
        if prop in values:
            found = values[prop]
    return found


def patch_after_base(
    key: str, acc: Accumulator, run: LoweringContext
) -> dict[str, Any] | None:
    """Patched copy of mixin style *key*, or None when nothing needs patching.

    A pseudo/media map whose default is None would unset the component's own
    base value when applied after it; the default is replaced by that value.
    """
    style = run.results.get(key)
    if not isinstance(style, dict):
        return None
    patched: dict[str, Any] | None = None
    for prop, value in style.items():
        if not isinstance(value, dict) or DEFAULT not in value or value[DEFAULT] is not None:
            continue
        known = _known_base(prop, acc, run)
        if known is _MISSING or known is None:
            continue
        if isinstance(known, (JsExpr, dict)):
            raise BailSignal(
                BailCategory.UNSAFE_COMPOSITION,
                f"Cannot infer base default for after-base mixin property '{prop}' "
                "(base value is non-literal)",
                mixin_key=key,
                property=prop,
            )
        if patched is None:
            patched = dict(style)
        patched[prop] = {**value, DEFAULT: known}
    return patched


def _mixin_keys(
    ref: MixinRef, acc: Accumulator, run: LoweringContext, keys: _Keys, out: Synthesis
) -> list[str]:
    if not ref.after_base:
        return list(ref.keys)
    resolved: list[str] = []
    for key in ref.keys:
        patched = patch_after_base(key, acc, run)
        if patched is None:
            resolved.append(key)
            continue
        new_key = keys.allocate(f"{key}In{capitalize(acc.style_key)}")
        out.pending[new_key] = patched
        out.replaced_mixin_keys.append(key)
        resolved.append(new_key)
    return resolved


# ---------------------------------------------------------------------------
# Synthesis
# ---------------------------------------------------------------------------


def synthesize(decl: StyledDeclaration, acc: Accumulator, run: LoweringContext) -> Synthesis:
    """Finalize builders into result entries and the component record.

    Nothing is written to the run here; the engine commits the returned
    :class:`Synthesis` only when no bail was raised.
    """
    out = Synthesis(record=LoweredComponent(decl.name, acc.style_key))
    keys = _Keys(run, out.pending)
    style_key = keys.allocate(acc.style_key)
    out.pending[style_key] = acc.style.finalize()

    extra_before: list[str] = []
    extra_after: list[str] = []
    for ref in acc.mixins:
        target = extra_after if ref.after_base else extra_before
        target.extend(_mixin_keys(ref, acc, run, keys, out))

    for builder in acc.variants.values():
        builder.refresh_defaults()
    finalized = {cond: builder.finalize() for cond, builder in acc.variants.items()}
    dimensions: list[DimensionUse] = []
    grouped = group_dimensions(finalized, decl.prop_types)
    for prop, entries in grouped.items():
        key = keys.allocate(dimension_key(style_key, prop))
        out.pending[key] = VariantDimension(prop, entries)
        dimensions.append(DimensionUse(key, prop))
    consumed = set()
    for condition in finalized:
        parsed = _equality(condition)
        if parsed is not None and parsed[0] in grouped:
            consumed.add(condition)

    variants: list[VariantUse] = []
    remaining = [c for c in finalized if c not in consumed and finalized[c]]
    for condition in sorted(remaining, key=_condition_order):
        key = keys.allocate(variant_key(style_key, condition))
        out.pending[key] = finalized[condition]
        variants.append(VariantUse(key, condition))

    renamed: dict[str, str] = {}
    for key, draft in acc.functions.items():
        final_key = keys.allocate(key)
        renamed[key] = final_key
        draft.body.refresh_defaults()
        out.pending[final_key] = StyleFunction((draft.param,), draft.body.finalize())
    calls = tuple(
        StyleFunctionCall(renamed.get(call.key, call.key), call.args, call.condition)
        for call in acc.function_calls
    )

    attribute_keys: list[tuple[str, str]] = []
    for kind, (key, builder) in acc.attributes.items():
        final_key = keys.allocate(key)
        out.pending[final_key] = builder.finalize()
        attribute_keys.append((kind, final_key))
    sibling_keys: list[tuple[str, str]] = []
    for kind, (key, builder) in acc.siblings.items():
        final_key = keys.allocate(key)
        out.pending[final_key] = builder.finalize()
        sibling_keys.append((kind, final_key))

    out.record = LoweredComponent(
        name=decl.name,
        style_key=style_key,
        extra_before=tuple(extra_before),
        extra_after=tuple(extra_after),
        external_styles=tuple(acc.external_styles),
        mixins=tuple(ref.name for ref in acc.mixins),
        variants=tuple(variants),
        dimensions=tuple(dimensions),
        style_function_calls=calls,
        inline_styles=tuple(acc.inline_styles),
        attribute_keys=tuple(attribute_keys),
        sibling_keys=tuple(sibling_keys),
        needs_wrapper=acc.needs_wrapper,
        should_forward_prop_drop=frozenset(acc.forward_drop),
        is_css_helper=decl.is_css_helper,
        imports=tuple(acc.imports),
    )
    out.base_values = {**acc.composed, **acc.style.base}
    return out
