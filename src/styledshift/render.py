"""Render a lowering result as StyleX source text or JSON."""

from __future__ import annotations

import dataclasses
import json
import re
from typing import Any

from styledshift.config import LoweringConfig
from styledshift.lowering.engine import LoweringResult
from styledshift.model.result import (
    AncestorKey,
    ComputedKey,
    ImportSpec,
    JsExpr,
    Keyframes,
    StyleFunction,
    VariantDimension,
)

_IDENT_RE = re.compile(r"^[A-Za-z_$][\w$]*$")

STYLEX_IMPORT = 'import * as stylex from "@stylexjs/stylex";'


# ---------------------------------------------------------------------------
# JS text
# ---------------------------------------------------------------------------


def _key(key: Any) -> str:
    if isinstance(key, (ComputedKey, AncestorKey)):
        return str(key)
    text = str(key)
    if _IDENT_RE.match(text):
        return text
    return json.dumps(text)


def _value(value: Any, indent: int) -> str:
    if isinstance(value, JsExpr):
        return value.source
    if isinstance(value, dict):
        return _object(value, indent)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(str(value))


def _object(style: dict[Any, Any], indent: int) -> str:
    if not style:
        return "{}"
    pad = "  " * (indent + 1)
    lines = [f"{pad}{_key(k)}: {_value(v, indent + 1)}," for k, v in style.items()]
    return "{\n" + "\n".join(lines) + "\n" + "  " * indent + "}"


def _entry(value: Any, indent: int) -> str:
    if isinstance(value, StyleFunction):
        params = ", ".join(value.params)
        return f"({params}) => ({_object(value.body, indent)})"
    return _value(value, indent)


def _import_lines(result: LoweringResult) -> list[str]:
    by_source: dict[str, list[str]] = {}
    for record in result.lowered.values():
        for spec in record.imports:
            names = by_source.setdefault(spec.source, [])
            for name in _import_names(spec):
                if name not in names:
                    names.append(name)
    return [
        f'import {{ {", ".join(names)} }} from "{source}";'
        for source, names in by_source.items()
    ]


def _import_names(spec: ImportSpec) -> list[str]:
    return [
        n.imported if n.imported == n.local else f"{n.imported} as {n.local}"
        for n in spec.names
    ]


def render_js(result: LoweringResult, config: LoweringConfig | None = None) -> str:
    """Render the result map as ``stylex.create`` calls.

    Keyframes come first as ``stylex.keyframes`` bindings. Style objects and
    style functions share one ``stylex.create`` object; each variant
    dimension gets its own.
    """
    config = config or LoweringConfig()
    lines = [STYLEX_IMPORT, *_import_lines(result), ""]
    main: list[str] = []
    dimensions: list[tuple[str, VariantDimension]] = []
    for key, value in result.results.items():
        if isinstance(value, Keyframes):
            lines.append(f"const {key} = stylex.keyframes({_object(value.frames, 0)});")
            lines.append("")
            continue
        if isinstance(value, VariantDimension):
            dimensions.append((key, value))
            continue
        main.append(f"  {_key(key)}: {_entry(value, 1)},")
    lines.append(f"const {config.style_object_name} = stylex.create({{")
    lines.extend(main)
    lines.append("});")
    for key, dimension in dimensions:
        lines.append("")
        lines.append(f"const {key} = stylex.create({_object(dimension.entries, 0)});")
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def _jsonable(value: Any) -> Any:
    if isinstance(value, JsExpr):
        return {"expr": value.source}
    if isinstance(value, StyleFunction):
        return {"params": list(value.params), "body": _jsonable(value.body)}
    if isinstance(value, VariantDimension):
        return {"prop": value.prop, "entries": _jsonable(value.entries)}
    if isinstance(value, Keyframes):
        return {"frames": _jsonable(value.frames)}
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


def _default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return str(value)


def to_dict(result: LoweringResult) -> dict[str, Any]:
    """Plain-data view of a lowering result."""
    return {
        "styles": {key: _jsonable(value) for key, value in result.results.items()},
        "components": {
            name: dataclasses.asdict(record) for name, record in result.lowered.items()
        },
        "bailed": sorted(result.bailed),
        "diagnostics": [
            {
                "severity": d.severity.value,
                "type": d.type,
                "component": d.component,
                "category": d.category.value if d.category else None,
                "location": str(d.location) if d.location else None,
                "context": d.context,
            }
            for d in result.diagnostics
        ],
    }


def render_json(result: LoweringResult) -> str:
    return json.dumps(to_dict(result), indent=2, default=_default)
