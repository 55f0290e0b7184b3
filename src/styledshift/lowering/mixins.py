"""Mixin composition: import a lowered declaration's styles into another."""

from __future__ import annotations

from styledshift.lowering.accumulator import Accumulator, MixinRef
from styledshift.lowering.bail import BailSignal
from styledshift.model.context import LoweringContext
from styledshift.model.diagnostic import BailCategory


def mixin_closure(name: str, run: LoweringContext) -> list[str]:
    """Return *name* and every mixin it composed, transitively, in visit order.

    Walks an explicit worklist instead of recursing. Raises BailSignal when
    any member of the closure was not lowered.
    """
    order: list[str] = []
    seen: set[str] = set()
    worklist = [name]
    while worklist:
        current = worklist.pop(0)
        if current in seen:
            continue
        seen.add(current)
        if run.is_bailed(current):
            raise BailSignal(
                BailCategory.UNSAFE_COMPOSITION,
                f"Mixin '{current}' was not lowered (it bailed)",
                mixin=current,
            )
        record = run.lowered.get(current)
        if record is None:
            raise BailSignal(
                BailCategory.UNSAFE_COMPOSITION,
                f"Mixin '{current}' is not lowered before its use",
                mixin=current,
            )
        if record.variants or record.dimensions or record.style_function_calls:
            raise BailSignal(
                BailCategory.UNSAFE_COMPOSITION,
                f"Mixin '{current}' has prop-dependent styles",
                mixin=current,
            )
        order.append(current)
        worklist.extend(record.mixins)
    return order


def compose_mixin(acc: Accumulator, name: str, run: LoweringContext) -> MixinRef:
    """Compose lowered declaration *name* into *acc* at the current position.

    The mixin goes after base when the accumulator already has base styles.
    Its keys already include its own mixins, flattened in application order.
    """
    mixin_closure(name, run)
    record = run.lowered[name]
    ref = MixinRef(name, list(record.style_keys), after_base=acc.has_base_styles)
    acc.compose(ref, run.base_values.get(name, {}))
    for expr, _after in record.external_styles:
        acc.external_styles.append((expr, ref.after_base))
    acc.inline_styles.extend(record.inline_styles)
    acc.drop_props(sorted(record.should_forward_prop_drop))
    acc.add_imports(record.imports)
    if record.needs_wrapper:
        acc.needs_wrapper = True
    return ref
