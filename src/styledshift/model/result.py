"""Output model: style objects, style functions and the shared result map."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator


class ResultConflictError(Exception):
    """Raised when a result key is written twice without an explicit replace."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Style key '{key}' is already defined")


# ---------------------------------------------------------------------------
# Value and key markers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JsExpr:
    """A JS expression emitted verbatim (theme tokens, params, helpers)."""

    source: str

    def __str__(self) -> str:
        return self.source


@dataclass(frozen=True)
class ComputedKey:
    """A computed object key, e.g. a media query resolved by the adapter."""

    expr: str

    def __str__(self) -> str:
        return f"[{self.expr}]"


@dataclass(frozen=True)
class AncestorKey:
    """Condition key that matches when a marked ancestor is in ``pseudo``."""

    pseudo: str

    def __str__(self) -> str:
        return f'[stylex.when.ancestor("{self.pseudo}")]'


@dataclass(frozen=True)
class ImportName:
    imported: str
    local: str


@dataclass(frozen=True)
class ImportSpec:
    """An import the emitted code needs (from an adapter result).

    Attributes:
        source: Module specifier or absolute path.
        names: Imported names.
        absolute: True when ``source`` is an absolute file path.
    """

    source: str
    names: tuple[ImportName, ...]
    absolute: bool = False


# ---------------------------------------------------------------------------
# Style artifacts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StyleFunction:
    """A parameterized style: ``(params) => ({...body})``."""

    params: tuple[str, ...]
    body: dict[str, Any] = field(hash=False)


@dataclass(frozen=True)
class VariantDimension:
    """Style objects for one enum-valued prop, one entry per declared value."""

    prop: str
    entries: dict[str, dict[str, Any]] = field(hash=False)


@dataclass(frozen=True)
class Keyframes:
    """A ``stylex.keyframes`` animation: frame selector to style object."""

    frames: dict[str, dict[str, Any]] = field(hash=False)


@dataclass(frozen=True)
class StyleFunctionCall:
    """Call site: ``styles[key](props[arg] ...)``."""

    key: str
    args: tuple[str, ...]
    condition: str | None = None


@dataclass(frozen=True)
class VariantUse:
    """A variant style key applied when ``condition`` holds."""

    key: str
    condition: str


@dataclass(frozen=True)
class DimensionUse:
    key: str
    prop: str


@dataclass(frozen=True)
class InlineStyleProp:
    """A style property computed at render time outside the static styles."""

    property: str
    expr: str


@dataclass(frozen=True)
class LoweredComponent:
    """Everything downstream emission needs for one successfully lowered component.

    Attributes:
        name: Component local name.
        style_key: Key of the component's base style object in the result map.
        extra_before: Keys applied before the base style (mixins, helpers).
        extra_after: Keys applied after the base style.
        external_styles: Adapter-resolved style expressions with their placement
            (True when applied after the base style).
        mixins: Names of composed mixin declarations, in composition order.
        variants: Boolean/compound variant keys with their conditions.
        dimensions: Enum dimension keys.
        style_function_calls: Parameterized style calls.
        inline_styles: Render-time style props.
        attribute_keys: Attribute-selector keys, by attribute kind.
        sibling_keys: Sibling-selector keys, by sibling kind.
        needs_wrapper: Component must be emitted as a wrapper function.
        should_forward_prop_drop: Props consumed by styles, not forwarded.
        ancestor_marker: Component is referenced by a descendant override.
        overrides: Cross-component override keys applied to this component.
        imports: Imports required by resolved expressions.
    """

    name: str
    style_key: str
    extra_before: tuple[str, ...] = ()
    extra_after: tuple[str, ...] = ()
    external_styles: tuple[tuple[str, bool], ...] = ()
    mixins: tuple[str, ...] = ()
    variants: tuple[VariantUse, ...] = ()
    dimensions: tuple[DimensionUse, ...] = ()
    style_function_calls: tuple[StyleFunctionCall, ...] = ()
    inline_styles: tuple[InlineStyleProp, ...] = ()
    attribute_keys: tuple[tuple[str, str], ...] = ()
    sibling_keys: tuple[tuple[str, str], ...] = ()
    needs_wrapper: bool = False
    should_forward_prop_drop: frozenset[str] = frozenset()
    ancestor_marker: bool = False
    overrides: tuple[str, ...] = ()
    is_css_helper: bool = False
    imports: tuple[ImportSpec, ...] = ()

    @property
    def style_keys(self) -> tuple[str, ...]:
        """All static keys in application order."""
        return (*self.extra_before, self.style_key, *self.extra_after)


# ---------------------------------------------------------------------------
# Result map
# ---------------------------------------------------------------------------


class ResultMap:
    """Key-set-once mapping from style key to emitted style artifact."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        """Define *key*; raises :class:`ResultConflictError` if already set."""
        if key in self._data:
            raise ResultConflictError(key)
        self._data[key] = value

    def replace(self, key: str, value: Any) -> None:
        """Explicitly overwrite an existing key."""
        if key not in self._data:
            raise KeyError(key)
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def items(self) -> list[tuple[str, Any]]:
        return list(self._data.items())

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of the current mapping."""
        return dict(self._data)

    def __repr__(self) -> str:
        return f"ResultMap(keys={list(self._data)})"
