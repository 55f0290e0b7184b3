"""Recognizer outcomes: how one dynamic declaration is lowered."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from styledshift.model.diagnostic import BailCategory
from styledshift.model.result import ImportSpec


@dataclass(frozen=True)
class ResolvedValue:
    """The slot became one static-first value for the declaration's property."""

    value: Any
    imports: tuple[ImportSpec, ...] = ()


@dataclass(frozen=True)
class Expand:
    """The declaration became several output properties (shorthand expansion)."""

    values: tuple[tuple[str, Any], ...]
    imports: tuple[ImportSpec, ...] = ()


@dataclass(frozen=True)
class ResolvedStyles:
    """The slot is an externally resolved style object, applied as an extra key."""

    expr: str
    imports: tuple[ImportSpec, ...] = ()


@dataclass(frozen=True)
class VariantBranch:
    """One arm of a conditional: ``entries`` apply when ``when`` holds.

    Each entry is ``(property, value, pseudos)``; empty ``pseudos`` means the
    declaration's own scope. A ``when`` starting with ``!`` marks the negated
    (fallback) arm.
    """

    when: str
    entries: tuple[tuple[str, Any, tuple[str, ...]], ...] = field(hash=False)

    @property
    def is_negated(self) -> bool:
        return self.when.startswith("!")


@dataclass(frozen=True)
class SplitVariants:
    branches: tuple[VariantBranch, ...]
    props: tuple[str, ...] = ()
    imports: tuple[ImportSpec, ...] = ()


@dataclass(frozen=True)
class EmitStyleFunction:
    """Value is driven by one prop; becomes a parameterized style function.

    Attributes:
        source_prop: Component prop passed at the call site (e.g. ``$size``).
        param: Function parameter name.
        values: Body entries, usually the param for the declaration's property.
        fallback: Static entries merged into the style before the body.
        condition: Call-site guard; None means always call.
    """

    source_prop: str
    param: str
    values: tuple[tuple[str, Any], ...]
    fallback: tuple[tuple[str, Any], ...] = ()
    condition: str | None = None
    imports: tuple[ImportSpec, ...] = ()



@dataclass(frozen=True)
class EmitInlineStyleValue:
    """Value is computed at render time as an inline style prop."""

    expr: str
    props: tuple[str, ...] = ()


@dataclass(frozen=True)
class KeepOriginal:
    """Known CSS-in-JS-only pattern with no safe static translation."""

    reason: str
    category: BailCategory = BailCategory.UNRESOLVABLE_INTERPOLATION


@dataclass(frozen=True)
class ComposeMixin:
    """Whole-block slot referencing another declaration by identity."""

    name: str


Outcome = Union[
    ResolvedValue,
    Expand,
    ResolvedStyles,
    SplitVariants,
    EmitStyleFunction,
    EmitInlineStyleValue,
    KeepOriginal,
    ComposeMixin,
]
