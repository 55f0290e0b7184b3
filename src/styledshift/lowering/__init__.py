"""Lowering engine: styled declarations -> static-first style objects."""

from styledshift.lowering.accumulator import Accumulator, Scope, StyleBuilder
from styledshift.lowering.bail import BailController, BailSignal
from styledshift.lowering.engine import LoweringResult, lower, lower_component, lower_source
from styledshift.lowering.recognizers import BUILTIN_RECOGNIZERS, run_chain

__all__ = [
    "Accumulator",
    "BailController",
    "BailSignal",
    "BUILTIN_RECOGNIZERS",
    "LoweringResult",
    "Scope",
    "StyleBuilder",
    "lower",
    "lower_component",
    "lower_source",
    "run_chain",
]
