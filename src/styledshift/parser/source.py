"""Source scanner: find styled declarations, imports and literal constants in JS/TS."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from styledshift.config import LoweringConfig
from styledshift.model.diagnostic import Location
from styledshift.model.expr import Expr, NumericLiteral, StringLiteral
from styledshift.model.rules import (
    ComponentBase,
    ImportBinding,
    KeyframesDeclaration,
    StyledDeclaration,
)
from styledshift.parser.errors import ParseError, SourceScanError
from styledshift.parser.expression import parse_slot
from styledshift.parser.scanner import line_col, read_template, skip_balanced
from styledshift.parser.template import parse_keyframes, parse_template

logger = logging.getLogger(__name__)

STYLED_SOURCE = "styled-components"

_IMPORT_RE = re.compile(
    r"""import\s+(?:type\s+)?
        (?:(?P<default>[A-Za-z_$][\w$]*)\s*,?\s*)?
        (?:\*\s+as\s+(?P<namespace>[A-Za-z_$][\w$]*)\s*)?
        (?:\{(?P<named>[^}]*)\}\s*)?
        from\s*["'](?P<source>[^"']+)["']""",
    re.VERBOSE,
)

_DECL_RE = re.compile(
    r"(?:export\s+)?(?:const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)\s*(?::[^=\n]+)?=\s*"
)

_CONST_RE = re.compile(
    r"""(?:export\s+)?const\s+(?P<name>[A-Za-z_$][\w$]*)\s*=\s*
        (?P<value>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*'|-?\d+(?:\.\d+)?)\s*(?:;|\n|$)""",
    re.VERBOSE,
)

_TYPE_DECL_RE = re.compile(
    r"(?:interface\s+(?P<iface>[A-Za-z_$][\w$]*)\s*(?:extends[^{]*)?"
    r"|type\s+(?P<alias>[A-Za-z_$][\w$]*)\s*=\s*)(?=\{)"
)

_LITERAL = r"""(?:"[^"]*"|'[^']*')"""
_UNION_MEMBER_RE = re.compile(
    rf"(?P<prop>\$?[A-Za-z_][\w$]*)\??\s*:\s*(?P<union>{_LITERAL}(?:\s*\|\s*{_LITERAL})*)"
)


@dataclass(frozen=True)
class SourceFile:
    """Everything the lowering engine needs from one source file.

    Attributes:
        path: File path, if read from disk.
        declarations: Styled declarations in source order.
        imports: Local name -> import binding.
        constants: Top-level ``const`` bindings to string/number literals.
        keyframes: ``keyframes`` declarations in source order.
    """

    path: str | None
    declarations: tuple[StyledDeclaration, ...]
    imports: dict[str, ImportBinding] = field(default_factory=dict)
    constants: dict[str, Expr] = field(default_factory=dict)
    keyframes: tuple[KeyframesDeclaration, ...] = ()


# ---------------------------------------------------------------------------
# Imports and constants
# ---------------------------------------------------------------------------


def scan_imports(text: str) -> dict[str, ImportBinding]:
    imports: dict[str, ImportBinding] = {}
    for match in _IMPORT_RE.finditer(text):
        source = match.group("source")
        if match.group("default"):
            local = match.group("default")
            imports[local] = ImportBinding(local, "default", source)
        if match.group("namespace"):
            local = match.group("namespace")
            imports[local] = ImportBinding(local, "*", source)
        for entry in (match.group("named") or "").split(","):
            entry = entry.strip()
            if entry.startswith("type "):
                continue
            if not entry:
                continue
            imported, _, local = entry.partition(" as ")
            imported = imported.strip()
            local = local.strip() or imported
            imports[local] = ImportBinding(local, imported, source)
    return imports


def scan_constants(text: str) -> dict[str, Expr]:
    constants: dict[str, Expr] = {}
    for match in _CONST_RE.finditer(text):
        raw = match.group("value")
        if raw[0] in "\"'":
            constants[match.group("name")] = StringLiteral(raw[1:-1])
        else:
            value: int | float = float(raw) if "." in raw else int(raw)
            constants[match.group("name")] = NumericLiteral(value, raw)
    return constants


def scan_prop_types(text: str) -> dict[str, dict[str, tuple[str, ...]]]:
    """Map interface/type alias names to their literal-union members."""
    types: dict[str, dict[str, tuple[str, ...]]] = {}
    for match in _TYPE_DECL_RE.finditer(text):
        name = match.group("iface") or match.group("alias")
        body_end = skip_balanced(text, match.end())
        types[name] = literal_unions(text[match.end():body_end])
    return types


def literal_unions(body: str) -> dict[str, tuple[str, ...]]:
    """Extract ``prop: "a" | "b"`` members from a type body."""
    unions: dict[str, tuple[str, ...]] = {}
    for match in _UNION_MEMBER_RE.finditer(body):
        values = re.findall(r"""["']([^"']*)["']""", match.group("union"))
        unions[match.group("prop")] = tuple(dict.fromkeys(values))
    return unions


# ---------------------------------------------------------------------------
# Styled declarations
# ---------------------------------------------------------------------------


def _styled_names(imports: dict[str, ImportBinding], config: LoweringConfig) -> set[str]:
    names = set(config.styled_names)
    for local, binding in imports.items():
        if binding.source == STYLED_SOURCE and binding.imported in ("default", "styled"):
            names.add(local)
    return names


def _css_names(imports: dict[str, ImportBinding], config: LoweringConfig) -> set[str]:
    names = set(config.css_helper_names)
    for local, binding in imports.items():
        if binding.source == STYLED_SOURCE and binding.imported == "css":
            names.add(local)
    return names


def _skip_ws(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def _read_head(
    text: str, i: int, styled: set[str], css: set[str]
) -> tuple[ComponentBase | None, bool, int] | None:
    """Match ``styled.tag`` / ``styled(X)`` / ``css`` at *i*.

    Returns ``(base, is_css_helper, index_after_head)`` or None.
    """
    match = re.compile(r"[A-Za-z_$][\w$]*").match(text, i)
    if not match:
        return None
    ident = match.group(0)
    j = match.end()
    if ident in css:
        return None, True, j
    if ident not in styled:
        return None
    if text.startswith(".", j):
        tag = re.compile(r"\.([A-Za-z][\w]*)").match(text, j)
        if not tag or tag.group(1) in ("attrs", "withConfig"):
            return None
        return ComponentBase(tag=tag.group(1)), False, tag.end()
    if text.startswith("(", j):
        end = skip_balanced(text, j)
        inner = text[j + 1:end - 1].strip()
        if inner[:1] in "\"'":
            return ComponentBase(tag=inner[1:-1]), False, end
        if re.fullmatch(r"[A-Za-z_$][\w$.]*", inner):
            return ComponentBase(component=inner), False, end
    return None


def _keyframes_names(imports: dict[str, ImportBinding], config: LoweringConfig) -> set[str]:
    names = set(config.keyframes_names)
    for local, binding in imports.items():
        if binding.source == STYLED_SOURCE and binding.imported == "keyframes":
            names.add(local)
    return names


def _read_keyframes(
    text: str, match: re.Match[str], names: set[str], path: str | None
) -> KeyframesDeclaration | None:
    """Read a ``keyframes`` template declared at *match*, or return None."""
    head = re.compile(r"[A-Za-z_$][\w$]*").match(text, match.end())
    if not head or head.group(0) not in names:
        return None
    j = _skip_ws(text, head.end())
    if not text.startswith("`", j):
        return None
    name = match.group("name")
    line, column = line_col(text, match.start())
    try:
        quasis, _, _ = read_template(text, j)
    except ParseError as exc:
        raise SourceScanError(f"Cannot read keyframes '{name}': {exc}", line, column) from exc
    try:
        frames = parse_keyframes(quasis)
        parse_error = None
    except ParseError as exc:
        logger.warning("Cannot parse keyframes %s: %s", name, exc)
        frames = ()
        parse_error = str(exc)
    return KeyframesDeclaration(name, frames, Location(line, column, path), parse_error)


def scan_source(
    text: str, path: str | None = None, config: LoweringConfig | None = None
) -> SourceFile:
    """Scan JS/TS *text* for styled declarations in source order."""
    config = config or LoweringConfig()
    imports = scan_imports(text)
    styled = _styled_names(imports, config)
    css = _css_names(imports, config)
    keyframes_names = _keyframes_names(imports, config)
    named_types = scan_prop_types(text)
    declarations: list[StyledDeclaration] = []
    keyframes: list[KeyframesDeclaration] = []

    for match in _DECL_RE.finditer(text):
        animation = _read_keyframes(text, match, keyframes_names, path)
        if animation is not None:
            keyframes.append(animation)
            continue
        head = _read_head(text, match.end(), styled, css)
        if head is None:
            continue
        base, is_css_helper, j = head
        uses_attrs = False
        prop_types: dict[str, tuple[str, ...]] = {}
        try:
            while True:
                j = _skip_ws(text, j)
                if text.startswith(".attrs(", j) or text.startswith(".withConfig(", j):
                    uses_attrs = uses_attrs or text.startswith(".attrs(", j)
                    j = skip_balanced(text, text.index("(", j))
                elif text.startswith("<", j):
                    end = skip_balanced(text, j)
                    prop_types.update(_generic_types(text[j + 1:end - 1], named_types))
                    j = end
                else:
                    break
            if not text.startswith("`", j):
                continue
            quasis, sources, _ = read_template(text, j)
        except ParseError as exc:
            line, column = line_col(text, match.start())
            raise SourceScanError(
                f"Cannot read declaration '{match.group('name')}': {exc}", line, column
            ) from exc

        line, column = line_col(text, match.start())
        name = match.group("name")
        slots = tuple(parse_slot(s) for s in sources)
        try:
            rules = parse_template(quasis)
            parse_error = None
        except ParseError as exc:
            logger.warning("Cannot parse CSS for %s: %s", name, exc)
            rules = ()
            parse_error = str(exc)
        declarations.append(
            StyledDeclaration(
                name=name,
                base=base,
                rules=rules,
                slots=slots,
                prop_types=prop_types,
                is_css_helper=is_css_helper,
                location=Location(line, column, path),
                uses_attrs=uses_attrs,
                parse_error=parse_error,
            )
        )

    logger.debug(
        "Scanned %d styled declaration(s) and %d keyframes from %s",
        len(declarations),
        len(keyframes),
        path or "<text>",
    )
    return SourceFile(
        path, tuple(declarations), imports, scan_constants(text), tuple(keyframes)
    )


def _generic_types(
    generic: str, named: dict[str, dict[str, tuple[str, ...]]]
) -> dict[str, tuple[str, ...]]:
    generic = generic.strip()
    if generic.startswith("{"):
        return literal_unions(generic)
    unions: dict[str, tuple[str, ...]] = {}
    for name in re.findall(r"[A-Za-z_$][\w$]*", generic):
        unions.update(named.get(name, {}))
    return unions
