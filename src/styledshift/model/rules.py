"""Rule model: parsed styled-component declarations with expression slots."""

from __future__ import annotations

from dataclasses import dataclass, field

from styledshift.model.diagnostic import Location
from styledshift.model.expr import Expr


# ---------------------------------------------------------------------------
# CSS values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StaticPart:
    text: str


@dataclass(frozen=True)
class SlotPart:
    slot_id: int


ValuePart = StaticPart | SlotPart


@dataclass(frozen=True)
class CssValue:
    """A declaration value: static text, or static text interleaved with slots.

    Attributes:
        parts: Ordered fragments. A static value has exactly one StaticPart.
    """

    parts: tuple[ValuePart, ...]

    @classmethod
    def static(cls, text: str) -> CssValue:
        return cls((StaticPart(text),))

    @property
    def is_static(self) -> bool:
        return all(isinstance(p, StaticPart) for p in self.parts)

    @property
    def text(self) -> str:
        """Static text; slots render as their placeholder."""
        out = []
        for part in self.parts:
            if isinstance(part, StaticPart):
                out.append(part.text)
            else:
                out.append(f"__SLOT_{part.slot_id}__")
        return "".join(out)

    @property
    def slot_ids(self) -> list[int]:
        return [p.slot_id for p in self.parts if isinstance(p, SlotPart)]

    def affixes(self) -> tuple[str, str] | None:
        """Return ``(prefix, suffix)`` static text around a single slot."""
        if len(self.slot_ids) != 1:
            return None
        prefix, suffix, seen = "", "", False
        for part in self.parts:
            if isinstance(part, SlotPart):
                seen = True
            elif seen:
                suffix += part.text
            else:
                prefix += part.text
        return prefix, suffix


@dataclass(frozen=True)
class Declaration:
    """One CSS declaration. ``property`` is None for a whole-block slot."""

    property: str | None
    value: CssValue
    important: bool = False

    @property
    def is_static(self) -> bool:
        return self.property is not None and self.value.is_static


@dataclass(frozen=True)
class Rule:
    selector: str
    at_rules: tuple[str, ...] = ()
    declarations: tuple[Declaration, ...] = ()


# ---------------------------------------------------------------------------
# Styled declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComponentBase:
    """What a styled declaration wraps: an intrinsic tag or another component."""

    tag: str | None = None
    component: str | None = None

    @property
    def is_intrinsic(self) -> bool:
        return self.tag is not None


@dataclass(frozen=True)
class StyledDeclaration:
    """One source ``styled.x`` / ``styled(X)`` / ``css`` declaration.

    Attributes:
        name: Local binding name.
        base: Wrapped tag or component; None for ``css`` helpers.
        rules: Ordered rules read from the template.
        slots: Expressions interpolated into the template, by slot id.
        prop_types: Declared literal value sets per prop name.
        is_css_helper: True for ``css`` helper declarations.
        location: Source position of the declaration.
        uses_attrs: Declaration chains ``.attrs(...)``.
        parse_error: CSS template error, when the template could not be read.
    """

    name: str
    base: ComponentBase | None
    rules: tuple[Rule, ...]
    slots: tuple[Expr, ...] = ()
    prop_types: dict[str, tuple[str, ...]] = field(default_factory=dict, hash=False)
    is_css_helper: bool = False
    location: Location | None = None
    uses_attrs: bool = False
    parse_error: str | None = None

    def slot(self, slot_id: int) -> Expr | None:
        if 0 <= slot_id < len(self.slots):
            return self.slots[slot_id]
        return None


@dataclass(frozen=True)
class KeyframesDeclaration:
    """One source ``keyframes`` declaration.

    Attributes:
        name: Local binding name.
        frames: ``(selector, declarations)`` per keyframe block, in source order.
        location: Source position of the declaration.
        parse_error: Template error, when the frames could not be read.
    """

    name: str
    frames: tuple[tuple[str, tuple[Declaration, ...]], ...]
    location: Location | None = None
    parse_error: str | None = None


@dataclass(frozen=True)
class ImportBinding:
    """A local name bound by an ``import`` statement."""

    local: str
    imported: str
    source: str
