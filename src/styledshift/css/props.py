"""CSS property mapping: names, literal values and shorthand expansion."""

from __future__ import annotations

import re
from typing import Any

from styledshift.parser.template import split_top_level

BORDER_STYLES = frozenset({
    "none",
    "hidden",
    "solid",
    "dashed",
    "dotted",
    "double",
    "groove",
    "ridge",
    "inset",
    "outset",
})

# Props whose unitless numbers must stay strings.
_STRING_NUMERIC_PROPS = frozenset({"flex", "flexGrow", "flexShrink", "fontWeight"})

_LENGTH_RE = re.compile(
    r"^-?\d*\.?\d+(px|rem|em|vh|vw|vmin|vmax|ch|ex|lh|svh|svw|dvh|dvw|cqw|cqh|%)?$"
)
_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")
_BORDER_PROP_RE = re.compile(r"^border(-top|-right|-bottom|-left)?$")
_DIRECTIONAL = ("padding", "margin")


def looks_like_length(token: str) -> bool:
    return bool(_LENGTH_RE.match(token))


def to_camel(prop: str) -> str:
    """``font-size`` -> ``fontSize``; custom properties are kept as written."""
    prop = prop.strip()
    if prop.startswith("--"):
        return prop
    if prop.startswith("-"):
        prop = prop[1:]
        head, *rest = prop.split("-")
        return head.capitalize() + "".join(p.capitalize() for p in rest)
    head, *rest = prop.split("-")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def is_background_image(value: str) -> bool:
    return bool(re.search(r"\b(url|(repeating-)?(linear|radial|conic)-gradient)\(", value))


def static_value(raw: str, important: bool = False, prop: str | None = None) -> Any:
    """Convert literal CSS text into an output value (numbers become numbers)."""
    raw = raw.strip()
    if important:
        if prop == "borderStyle" or "!important" in raw:
            return raw
        return f"{raw} !important"
    if _NUMBER_RE.match(raw) and prop not in _STRING_NUMERIC_PROPS:
        return float(raw) if "." in raw else int(raw)
    return raw


# ---------------------------------------------------------------------------
# Shorthands
# ---------------------------------------------------------------------------


def _direction(prop: str) -> str:
    match = _BORDER_PROP_RE.match(prop)
    suffix = match.group(1) if match else ""
    return suffix[1:].capitalize() if suffix else ""


def border_props(prop: str) -> tuple[str, str, str] | None:
    """Longhand (width, style, color) names for a ``border``/``border-<side>`` prop."""
    if not _BORDER_PROP_RE.match(prop.strip()):
        return None
    direction = _direction(prop.strip())
    return (f"border{direction}Width", f"border{direction}Style", f"border{direction}Color")


def split_border(value: str) -> tuple[str | None, str | None, str | None]:
    """Split ``1px solid red`` into (width, style, color)."""
    width: str | None = None
    style: str | None = None
    color_parts: list[str] = []
    for token in split_top_level(" ".join(value.split()), " "):
        if width is None and looks_like_length(token):
            width = token
        elif style is None and token in BORDER_STYLES:
            style = token
        else:
            color_parts.append(token)
    return width, style, " ".join(color_parts) or None


def _border(prop: str, raw: str, important: bool) -> list[tuple[str, Any]]:
    width_prop, style_prop, color_prop = border_props(prop)  # type: ignore[misc]
    value = raw.strip()
    if value == "none":
        return [
            (width_prop, static_value("0", important, width_prop)),
            (style_prop, static_value("none", important, style_prop)),
        ]
    width, style, color = split_border(value)
    out: list[tuple[str, Any]] = []
    for name, part in ((width_prop, width), (style_prop, style), (color_prop, color)):
        if part is not None:
            out.append((name, static_value(part, important, name)))
    if not out:
        return [(to_camel(prop), static_value(value, important))]
    return out


def split_directional(prop: str, raw: str, important: bool = False) -> list[tuple[str, str]]:
    """Expand ``padding``/``margin`` into logical or physical longhands."""
    values = split_top_level(" ".join(raw.split()), " ")
    mark = " !important" if important else ""
    if not values:
        return []
    if len(values) == 1 and not important:
        return [(prop, values[0])]
    top = values[0]
    right = values[1] if len(values) > 1 else top
    bottom = values[2] if len(values) > 2 else top
    left = values[3] if len(values) > 3 else right
    if len(values) == 2 and not important:
        return [(f"{prop}Block", top), (f"{prop}Inline", right)]
    return [
        (f"{prop}Top", top + mark),
        (f"{prop}Right", right + mark),
        (f"{prop}Bottom", bottom + mark),
        (f"{prop}Left", left + mark),
    ]


def expand_declaration(prop: str, raw: str, important: bool = False) -> list[tuple[str, Any]]:
    """Map one static CSS declaration to output (property, value) pairs."""
    prop = prop.strip()
    if prop in _DIRECTIONAL:
        entries = split_directional(prop, raw, important)
        # The important marker is already applied per longhand.
        return [(name, static_value(value, False, name)) for name, value in entries]
    if prop == "background":
        name = "backgroundImage" if is_background_image(raw) else "backgroundColor"
        return [(name, static_value(raw, important, name))]
    if border_props(prop) is not None:
        return _border(prop, raw, important)
    name = to_camel(prop)
    return [(name, static_value(raw, important, name))]


def output_property(prop: str, value_hint: str = "") -> str:
    """Output name for a property whose value is dynamic (no shorthand split)."""
    prop = prop.strip()
    if prop == "background":
        return "backgroundImage" if is_background_image(value_hint) else "backgroundColor"
    return to_camel(prop)
