"""CSS template reader: nested CSS text with slot placeholders -> ordered rules."""

from __future__ import annotations

import re

from styledshift.model.rules import CssValue, Declaration, Rule, SlotPart, StaticPart
from styledshift.parser.errors import ParseError
from styledshift.parser.scanner import line_col

SLOT_RE = re.compile(r"__SLOT_(\d+)__")
_LEADING_SLOT_RE = re.compile(r"^\s*__SLOT_(\d+)__[ \t]*;?[ \t]*\n", re.DOTALL)
_IMPORTANT_RE = re.compile(r"\s*!\s*important\s*$", re.IGNORECASE)


def slot_placeholder(slot_id: int) -> str:
    return f"__SLOT_{slot_id}__"


def join_quasis(quasis: list[str] | tuple[str, ...]) -> str:
    """Join template quasis with ``__SLOT_n__`` placeholders."""
    out = [quasis[0]]
    for index, quasi in enumerate(quasis[1:]):
        out.append(slot_placeholder(index))
        out.append(quasi)
    return "".join(out)


def parse_value(text: str) -> CssValue:
    """Split value text into static and slot parts."""
    parts: list[StaticPart | SlotPart] = []
    pos = 0
    for match in SLOT_RE.finditer(text):
        if match.start() > pos:
            parts.append(StaticPart(text[pos:match.start()]))
        parts.append(SlotPart(int(match.group(1))))
        pos = match.end()
    if pos < len(text) or not parts:
        parts.append(StaticPart(text[pos:]))
    return CssValue(tuple(parts))


# ---------------------------------------------------------------------------
# Text preparation
# ---------------------------------------------------------------------------


def strip_comments(text: str) -> str:
    """Drop ``/* */`` comments and whole-line ``//`` comments."""
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            end = _skip_css_string(text, i)
            out.append(text[i:end])
            i = end
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                line, column = line_col(text, i)
                raise ParseError("Unterminated CSS comment", line, column)
            i = end + 2
            continue
        if text.startswith("//", i) and text[text.rfind("\n", 0, i) + 1:i].strip() == "":
            end = text.find("\n", i)
            i = len(text) if end == -1 else end
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _skip_css_string(text: str, i: int) -> int:
    quote = text[i]
    j = i + 1
    while j < len(text):
        if text[j] == "\\":
            j += 2
            continue
        if text[j] == quote:
            return j + 1
        j += 1
    line, column = line_col(text, i)
    raise ParseError("Unterminated string in CSS", line, column)


def _matching_brace(text: str, i: int) -> int:
    depth = 0
    j = i
    while j < len(text):
        ch = text[j]
        if ch in "\"'":
            j = _skip_css_string(text, j)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return j
        j += 1
    line, column = line_col(text, i)
    raise ParseError("Unbalanced '{' in CSS template", line, column)


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on *sep* outside quotes, parentheses and brackets."""
    parts: list[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            i = _skip_css_string(text, i)
            continue
        if ch in "([":
            depth += 1
        elif ch in ")]":
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append(text[start:i])
            start = i + 1
        i += 1
    parts.append(text[start:])
    return [p.strip() for p in parts if p.strip()]


def resolve_selector(prelude: str, parent: str) -> str:
    """Resolve a nested selector against its parent (``&`` substitution)."""
    resolved: list[str] = []
    for parent_part in split_top_level(parent):
        for part in split_top_level(prelude):
            if "&" in part:
                resolved.append(part.replace("&", parent_part))
            elif part.startswith(":"):
                resolved.append(parent_part + part)
            else:
                resolved.append(f"{parent_part} {part}")
    return ", ".join(resolved)


# ---------------------------------------------------------------------------
# Block reader
# ---------------------------------------------------------------------------


class _RuleBuilder:
    """Collects declarations per (selector, at-rules), first-seen order."""

    def __init__(self) -> None:
        self._rules: dict[tuple[str, tuple[str, ...]], list[Declaration]] = {}

    def add(self, selector: str, at_rules: tuple[str, ...], decl: Declaration) -> None:
        self._rules.setdefault((selector, at_rules), []).append(decl)

    def touch(self, selector: str, at_rules: tuple[str, ...]) -> None:
        self._rules.setdefault((selector, at_rules), [])

    def build(self) -> tuple[Rule, ...]:
        return tuple(
            Rule(selector, at_rules, tuple(decls))
            for (selector, at_rules), decls in self._rules.items()
        )


def _split_leading_slots(segment: str) -> tuple[list[int], str]:
    """Peel standalone ``__SLOT_n__`` lines off the front of a segment."""
    slots: list[int] = []
    while True:
        match = _LEADING_SLOT_RE.match(segment)
        if not match:
            return slots, segment
        slots.append(int(match.group(1)))
        segment = segment[match.end():]


def _whole_block(slot_id: int) -> Declaration:
    return Declaration(None, CssValue((SlotPart(slot_id),)))


def _read_declaration(segment: str, text: str, offset: int) -> list[Declaration]:
    slots, rest = _split_leading_slots(segment)
    decls = [_whole_block(s) for s in slots]
    rest = rest.strip()
    if not rest:
        return decls
    if ":" not in rest:
        only_slots = SLOT_RE.sub("", rest).strip() == ""
        if only_slots:
            return decls + [_whole_block(int(m)) for m in SLOT_RE.findall(rest)]
        line, column = line_col(text, offset)
        raise ParseError(f"Invalid CSS declaration: {rest!r}", line, column)
    prop, _, value = rest.partition(":")
    prop = prop.strip()
    value = value.strip()
    important = False
    if _IMPORTANT_RE.search(value):
        important = True
        value = _IMPORTANT_RE.sub("", value)
    return decls + [Declaration(prop, parse_value(value), important)]


def _parse_block(
    text: str,
    start: int,
    end: int,
    selector: str,
    at_rules: tuple[str, ...],
    builder: _RuleBuilder,
) -> None:
    i = start
    seg_start = start
    depth = 0
    while i < end:
        ch = text[i]
        if ch in "\"'":
            i = _skip_css_string(text, i)
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif depth == 0 and ch == ";":
            for decl in _read_declaration(text[seg_start:i], text, seg_start):
                builder.add(selector, at_rules, decl)
            seg_start = i + 1
        elif depth == 0 and ch == "{":
            slots, prelude = _split_leading_slots(text[seg_start:i])
            for slot_id in slots:
                builder.add(selector, at_rules, _whole_block(slot_id))
            prelude = " ".join(prelude.split())
            close = _matching_brace(text, i)
            if prelude.startswith("@"):
                nested_selector, nested_at = selector, at_rules + (prelude,)
            else:
                nested_selector, nested_at = resolve_selector(prelude, selector), at_rules
            builder.touch(nested_selector, nested_at)
            _parse_block(text, i + 1, close, nested_selector, nested_at, builder)
            i = close + 1
            seg_start = i
            continue
        elif ch == "}":
            line, column = line_col(text, i)
            raise ParseError("Unexpected '}' in CSS template", line, column)
        i += 1
    for decl in _read_declaration(text[seg_start:end], text, seg_start):
        builder.add(selector, at_rules, decl)


def parse_css(text: str) -> tuple[Rule, ...]:
    """Parse nested CSS text (with slot placeholders) into ordered rules."""
    text = strip_comments(text)
    builder = _RuleBuilder()
    builder.touch("&", ())
    _parse_block(text, 0, len(text), "&", (), builder)
    return tuple(r for r in builder.build() if r.declarations or r.selector == "&")


def parse_template(quasis: list[str] | tuple[str, ...]) -> tuple[Rule, ...]:
    """Parse template quasis (slots between them) into ordered rules."""
    return parse_css(join_quasis(quasis))


def parse_keyframes(
    quasis: list[str] | tuple[str, ...],
) -> tuple[tuple[str, tuple[Declaration, ...]], ...]:
    """Read the ``from { ... } 50% { ... }`` blocks of a keyframes template."""
    if len(quasis) > 1:
        raise ParseError("Interpolations in keyframes are not supported", 1, 1)
    text = strip_comments(quasis[0])
    frames: list[tuple[str, tuple[Declaration, ...]]] = []
    i = 0
    while True:
        start = text.find("{", i)
        if start == -1:
            rest = text[i:].strip()
            if rest:
                line, column = line_col(text, i)
                raise ParseError(f"Unexpected text in keyframes: {rest!r}", line, column)
            return tuple(frames)
        selector = " ".join(text[i:start].split())
        if not selector:
            line, column = line_col(text, start)
            raise ParseError("Keyframe block without a selector", line, column)
        end = _matching_brace(text, start)
        body = text[start + 1:end]
        if "{" in body:
            line, column = line_col(text, start)
            raise ParseError("Nested blocks in keyframes are not supported", line, column)
        declarations: list[Declaration] = []
        for segment in split_top_level(body, ";"):
            declarations.extend(_read_declaration(segment, text, start + 1))
        frames.append((selector, tuple(declarations)))
        i = end + 1
