"""Deterministic names for style keys, variant keys and style-function params."""

from __future__ import annotations

import re


def to_style_key(name: str) -> str:
    """``Button`` -> ``button``."""
    return name[:1].lower() + name[1:]


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _identifier_safe(text: str) -> str:
    parts = [p for p in re.split(r"[^A-Za-z0-9_]+", text) if p]
    if not parts:
        return ""
    return parts[0] + "".join(capitalize(p) for p in parts[1:])


def param_name(prop: str) -> str:
    """Style-function parameter for a component prop: ``$size`` -> ``size``."""
    raw = prop[1:] if prop.startswith("$") else prop
    return _identifier_safe(raw) or "value"


def suffix_from_condition(condition: str) -> str:
    """Key suffix for a prop or condition text.

    ``$isActive`` -> ``Active``, ``size === "large"`` -> ``SizeLarge``,
    ``!$on`` -> ``NotOn``, ``a && b`` -> ``AB``.
    """
    raw = condition.strip()
    if raw.startswith("$"):
        raw = raw[1:]
    if not raw:
        return "Variant"
    if "&&" in raw:
        parts = [p.strip() for p in raw.split("&&") if p.strip()]
        if parts:
            return "".join(suffix_from_condition(p) for p in parts)
    if raw.startswith("!") and not raw.startswith("!="):
        inner = raw[1:].strip()
        if inner.startswith("(") and inner.endswith(")"):
            inner = inner[1:-1]
        return "Not" + suffix_from_condition(inner)
    operator = "!==" if "!==" in raw else "===" if "===" in raw else None
    if operator:
        lhs, _, rhs = raw.partition(operator)
        lhs = lhs.strip().lstrip("$") or "Variant"
        rhs = rhs.strip().strip("\"'") or ("NotMatch" if operator == "!==" else "Match")
        lhs_suffix = capitalize(_identifier_safe(lhs))
        rhs_suffix = capitalize(_identifier_safe(rhs)) or "Empty"
        if operator == "!==":
            return f"{lhs_suffix}Not{rhs_suffix}"
        return f"{lhs_suffix}{rhs_suffix}"
    if raw.startswith("is") and len(raw) > 2 and raw[2].isupper():
        return raw[2:]
    return capitalize(_identifier_safe(raw))


def variant_key(style_key: str, condition: str) -> str:
    return style_key + suffix_from_condition(condition)


def dimension_key(style_key: str, prop: str) -> str:
    return f"{style_key}{suffix_from_condition(prop)}Variants"
