"""Value resolution adapter: theme, import, helper-call and selector lookups."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal, Protocol, Union

from styledshift.config import LoweringConfig
from styledshift.model.result import ImportName, ImportSpec

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Resolution contexts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ThemeValueContext:
    """``props.theme.colors.primary`` -> path ``"colors.primary"``."""

    path: str


@dataclass(frozen=True)
class CssVariableContext:
    """A ``var(--name, fallback)`` reference in static CSS text."""

    name: str
    fallback: str | None = None


@dataclass(frozen=True)
class ImportedValueContext:
    """An imported binding, optionally with a member path (``tokens.space.s``)."""

    imported_name: str
    source: str
    path: str | None = None


ValueContext = Union[ThemeValueContext, CssVariableContext, ImportedValueContext]


@dataclass(frozen=True)
class CallArg:
    """One helper-call argument: a literal, a theme path, or unknown."""

    kind: Literal["literal", "theme", "unknown"]
    value: str | int | float | bool | None = None
    path: str | None = None


@dataclass(frozen=True)
class CallContext:
    callee_imported_name: str
    callee_source: str
    args: tuple[CallArg, ...] = ()


@dataclass(frozen=True)
class SelectorContext:
    """An interpolated selector (``@media ${bp.phone}``) bound to an import."""

    imported_name: str
    source: str
    path: str | None = None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolveValueResult:
    expr: str
    imports: tuple[ImportSpec, ...] = ()


@dataclass(frozen=True)
class CallResolveResult:
    """``usage="props"`` is a value for one property; ``"create"`` is a style object."""

    usage: Literal["props", "create"]
    expr: str
    imports: tuple[ImportSpec, ...] = ()


@dataclass(frozen=True)
class SelectorResolveResult:
    kind: Literal["media"]
    expr: str
    imports: tuple[ImportSpec, ...] = ()


class ValueAdapter(Protocol):
    """Synchronous resolver consulted by the lowering engine.

    Every method returns None to decline. The engine bails on a decline,
    except for CSS variables, whose ``var()`` text is then kept as written.
    """

    def resolve_value(self, context: ValueContext) -> ResolveValueResult | None: ...

    def resolve_call(self, context: CallContext) -> CallResolveResult | None: ...

    def resolve_selector(self, context: SelectorContext) -> SelectorResolveResult | None: ...


# ---------------------------------------------------------------------------
# Config-driven adapter
# ---------------------------------------------------------------------------


def _import_spec(source: str | None, expr: str) -> tuple[ImportSpec, ...]:
    if not source:
        return ()
    root = re.match(r"[A-Za-z_$][\w$]*", expr)
    if not root:
        return ()
    name = root.group(0)
    return (ImportSpec(source, (ImportName(name, name),), absolute=source.startswith("/")),)


def _import_key(source: str, name: str, path: str | None) -> str:
    return f"{source}#{name}" + (f".{path}" if path else "")


class MappingAdapter:
    """Adapter backed by the lookup tables of a :class:`LoweringConfig`."""

    def __init__(self, config: LoweringConfig | None = None) -> None:
        self.config = config or LoweringConfig()

    def resolve_value(self, context: ValueContext) -> ResolveValueResult | None:
        if isinstance(context, ThemeValueContext):
            return self._resolve_theme(context.path)
        if isinstance(context, CssVariableContext):
            return self._resolve_variable(context.name)
        key = _import_key(context.source, context.imported_name, context.path)
        expr = self.config.imported_values.get(key)
        if expr is None:
            logger.debug("No mapping for imported value %s", key)
            return None
        return ResolveValueResult(expr)

    def _resolve_variable(self, name: str) -> ResolveValueResult | None:
        entry = self.config.css_variables.get(name)
        if entry is None:
            logger.debug("No mapping for CSS variable %s", name)
            return None
        if isinstance(entry, dict):
            return ResolveValueResult(entry["expr"], _import_spec(entry.get("import"), entry["expr"]))
        return ResolveValueResult(entry)

    def _resolve_theme(self, path: str) -> ResolveValueResult | None:
        fallback = self.config.theme_fallback
        expr = self.config.theme_tokens.get(path)
        if expr is None and fallback.get("object"):
            expr = f"{fallback['object']}.{path}"
        if expr is None:
            logger.debug("No mapping for theme path %s", path)
            return None
        return ResolveValueResult(expr, _import_spec(fallback.get("import"), expr))

    def resolve_call(self, context: CallContext) -> CallResolveResult | None:
        entry = self.config.helper_calls.get(context.callee_imported_name)
        if entry is None:
            return None
        args: list[str] = []
        for arg in context.args:
            if arg.kind == "literal":
                args.append(str(arg.value))
            elif arg.kind == "theme" and arg.path is not None:
                theme = self._resolve_theme(arg.path)
                if theme is None:
                    return None
                args.append(theme.expr)
            else:
                return None
        try:
            expr = entry["expr"].format(*args)
        except (IndexError, KeyError) as exc:
            logger.warning(
                "Helper %s expects other arguments: %s", context.callee_imported_name, exc
            )
            return None
        usage = entry.get("usage", "props")
        if usage not in ("props", "create"):
            return None
        return CallResolveResult(usage, expr, _import_spec(entry.get("import"), expr))  # type: ignore[arg-type]

    def resolve_selector(self, context: SelectorContext) -> SelectorResolveResult | None:
        key = _import_key(context.source, context.imported_name, context.path)
        expr = self.config.selectors.get(key)
        if expr is None:
            return None
        return SelectorResolveResult("media", expr)
