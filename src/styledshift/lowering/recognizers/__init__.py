"""Pattern recognizer chain: first recognizer to claim a declaration wins."""

from __future__ import annotations

import logging

from styledshift.lowering.recognizers.base import DeclarationContext, Recognizer
from styledshift.lowering.recognizers.composition import css_helper_mixin, pseudo_element_guard
from styledshift.lowering.recognizers.conditionals import (
    conditional_value,
    enum_if_chain,
    logical_or_default,
)
from styledshift.lowering.recognizers.functions import prop_access, theme_indexed_lookup
from styledshift.lowering.recognizers.values import (
    helper_call,
    inline_style_value,
    keyframes_animation,
    static_value,
)
from styledshift.model.outcome import KeepOriginal, Outcome

logger = logging.getLogger(__name__)

BUILTIN_RECOGNIZERS: list[Recognizer] = [
    pseudo_element_guard,
    css_helper_mixin,
    keyframes_animation,
    static_value,
    theme_indexed_lookup,
    enum_if_chain,
    conditional_value,
    logical_or_default,
    prop_access,
    helper_call,
    inline_style_value,
]


def run_chain(
    dctx: DeclarationContext, recognizers: list[Recognizer] | None = None
) -> Outcome:
    """Try each recognizer in order; exhaustion keeps the original source."""
    for recognizer in recognizers if recognizers is not None else BUILTIN_RECOGNIZERS:
        outcome = recognizer(dctx)
        if outcome is not None:
            logger.debug(
                "%s: %s matched %s", dctx.component.name, recognizer.__name__, type(outcome).__name__
            )
            return outcome
    expr = dctx.expr
    kind = expr.kind if expr is not None else "missing slot"
    return KeepOriginal(f"Unsupported interpolation: {kind}")


__all__ = [
    "BUILTIN_RECOGNIZERS",
    "DeclarationContext",
    "Recognizer",
    "run_chain",
]
