"""Per-component accumulator: style builders with pseudo/media default backfill."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from styledshift.model.result import (
    ComputedKey,
    ImportSpec,
    InlineStyleProp,
    StyleFunctionCall,
)

DEFAULT = "default"


def scalar_default(value: Any) -> Any:
    """The unconditioned part of a style value (``default`` of a conditional map)."""
    if isinstance(value, dict):
        return scalar_default(value.get(DEFAULT))
    return value


@dataclass(frozen=True)
class Scope:
    """Where a value applies: pseudo-classes, a media condition, a pseudo element."""

    pseudos: tuple[str, ...] = ()
    media: str | ComputedKey | None = None
    pseudo_element: str | None = None

    @property
    def is_base(self) -> bool:
        return not self.pseudos and self.media is None and self.pseudo_element is None

    @property
    def is_conditional(self) -> bool:
        return bool(self.pseudos) or self.media is not None


BASE_SCOPE = Scope()


class StyleBuilder:
    """Builds one style object.

    Every conditional map gets its ``default`` entry when it is created:
    the builder's own base value, else ``fallback(prop)``, else None. A base
    value set later updates that default. Defaults taken from the fallback
    are listed in ``backfilled`` so they can be re-read once the fallback
    source is complete.
    """

    def __init__(self, fallback: Callable[[str], Any] | None = None) -> None:
        self._fallback = fallback
        self.base: dict[str, Any] = {}
        self.conditional: dict[str, dict[Any, Any]] = {}
        self.nested: dict[str, StyleBuilder] = {}
        self._order: list[str] = []
        self.backfilled: set[str] = set()

    def __bool__(self) -> bool:
        return bool(self.base or self.conditional or any(self.nested.values()))

    def default_for(self, prop: str) -> Any:
        if prop in self.base:
            return scalar_default(self.base[prop])
        if self._fallback is not None:
            return self._fallback(prop)
        return None

    def _track(self, prop: str) -> None:
        if prop not in self._order:
            self._order.append(prop)

    def nested_builder(self, name: str) -> StyleBuilder:
        if name not in self.nested:
            self.nested[name] = StyleBuilder()
            self._track(name)
        return self.nested[name]

    def set(self, prop: str, value: Any, scope: Scope = BASE_SCOPE) -> None:
        if scope.pseudo_element is not None:
            inner = Scope(scope.pseudos, scope.media)
            self.nested_builder(scope.pseudo_element).set(prop, value, inner)
            return
        self._track(prop)
        if not scope.is_conditional:
            self.base[prop] = value
            self.backfilled.discard(prop)
            if prop in self.conditional:
                self.conditional[prop][DEFAULT] = value
            return
        cmap = self.conditional.get(prop)
        if cmap is None:
            cmap = {DEFAULT: self.default_for(prop)}
            self.conditional[prop] = cmap
            if prop not in self.base:
                self.backfilled.add(prop)
        if scope.pseudos and scope.media is not None:
            for pseudo in scope.pseudos:
                inner = cmap.get(pseudo)
                if not isinstance(inner, dict):
                    inner = {DEFAULT: inner}
                    cmap[pseudo] = inner
                inner[scope.media] = value
        elif scope.pseudos:
            for pseudo in scope.pseudos:
                existing = cmap.get(pseudo)
                if isinstance(existing, dict):
                    existing[DEFAULT] = value
                else:
                    cmap[pseudo] = value
        else:
            cmap[scope.media] = value

    def refresh_defaults(self) -> None:
        """Re-read backfilled defaults from the fallback."""
        if self._fallback is None:
            return
        for prop in self.backfilled:
            self.conditional[prop][DEFAULT] = self._fallback(prop)

    def finalize(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for prop in self._order:
            if prop in self.nested:
                nested = self.nested[prop].finalize()
                if nested:
                    out[prop] = nested
            elif prop in self.conditional:
                cmap = dict(self.conditional[prop])
                if prop in self.base:
                    cmap[DEFAULT] = self.base[prop]
                out[prop] = cmap
            else:
                out[prop] = self.base[prop]
        return out


# ---------------------------------------------------------------------------
# Accumulator
# ---------------------------------------------------------------------------


@dataclass
class MixinRef:
    name: str
    keys: list[str]
    after_base: bool


@dataclass
class StyleFunctionDraft:
    source_prop: str
    param: str
    body: StyleBuilder
    condition: str | None = None


@dataclass
class OverrideDraft:
    """Pending cross-component override for one ``(child, parent)`` pair.

    ``buckets`` maps an ancestor pseudo (None for unconditioned) to property
    values. ``backfilled`` lists unconditioned entries copied from the
    child's base rather than declared.
    """

    child: str
    parent: str
    buckets: dict[str | None, dict[str, Any]] = field(default_factory=dict)
    backfilled: set[str] = field(default_factory=set)

    def set(self, prop: str, value: Any, pseudo: str | None, child_base: Any) -> None:
        base = self.buckets.setdefault(None, {})
        if pseudo is None:
            base[prop] = value
            self.backfilled.discard(prop)
            return
        if prop not in base:
            base[prop] = child_base
            self.backfilled.add(prop)
        self.buckets.setdefault(pseudo, {})[prop] = value

    def merge(self, other: OverrideDraft) -> None:
        """Fold another component's draft for the same pair into this one."""
        for pseudo, bucket in other.buckets.items():
            for prop, value in bucket.items():
                if pseudo is None and prop in other.backfilled:
                    base = self.buckets.setdefault(None, {})
                    if prop not in base:
                        base[prop] = value
                        self.backfilled.add(prop)
                else:
                    self.set(prop, value, pseudo, None)


class Accumulator:
    """Everything gathered while lowering one component, merged at the end."""

    def __init__(self, style_key: str) -> None:
        self.style_key = style_key
        self.composed: dict[str, Any] = {}
        self.style = StyleBuilder(self._composed_default)
        self.variants: dict[str, StyleBuilder] = {}
        self.functions: dict[str, StyleFunctionDraft] = {}
        self.function_calls: list[StyleFunctionCall] = []
        self.inline_styles: list[InlineStyleProp] = []
        self.mixins: list[MixinRef] = []
        self.external_styles: list[tuple[str, bool]] = []
        self.attributes: dict[str, tuple[str, StyleBuilder]] = {}
        self.siblings: dict[str, tuple[str, StyleBuilder]] = {}
        self.overrides: dict[str, OverrideDraft] = {}
        self.forward_drop: set[str] = set()
        self.imports: list[ImportSpec] = []
        self.needs_wrapper = False
        self.marked_parents: set[str] = set()

    def _composed_default(self, prop: str) -> Any:
        return scalar_default(self.composed.get(prop))

    @property
    def has_base_styles(self) -> bool:
        return bool(self.style)

    # --- composition ----------------------------------------------------------

    def compose(self, ref: MixinRef, values: dict[str, Any]) -> None:
        """Record a mixin; its known values feed default backfill (later wins)."""
        self.mixins.append(ref)
        for prop, value in values.items():
            self.composed[prop] = value

    # --- buckets --------------------------------------------------------------

    def variant(self, condition: str) -> StyleBuilder:
        if condition not in self.variants:
            self.variants[condition] = StyleBuilder(self.style.default_for)
        return self.variants[condition]

    def function(self, key: str, source_prop: str, param: str, condition: str | None) -> StyleFunctionDraft:
        draft = self.functions.get(key)
        if draft is None:
            draft = StyleFunctionDraft(source_prop, param, StyleBuilder(self.style.default_for), condition)
            self.functions[key] = draft
            self.function_calls.append(StyleFunctionCall(key, (source_prop,), condition))
        return draft

    def attribute(self, kind: str, key: str) -> StyleBuilder:
        if kind not in self.attributes:
            self.attributes[kind] = (key, StyleBuilder())
        return self.attributes[kind][1]

    def sibling(self, kind: str, key: str) -> StyleBuilder:
        if kind not in self.siblings:
            self.siblings[kind] = (key, StyleBuilder())
        return self.siblings[kind][1]

    def override(self, key: str, child: str, parent: str) -> OverrideDraft:
        if key not in self.overrides:
            self.overrides[key] = OverrideDraft(child, parent)
        return self.overrides[key]

    def add_imports(self, imports: tuple[ImportSpec, ...]) -> None:
        for spec in imports:
            if spec not in self.imports:
                self.imports.append(spec)

    def drop_props(self, props: tuple[str, ...] | list[str]) -> None:
        for prop in props:
            if prop.startswith("$"):
                self.forward_drop.add(prop)
