"""Selector classifier: raw selector text -> closed set of selector shapes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from styledshift.parser.template import split_top_level

COMPONENT_MARKER_RE = re.compile(r"__COMPONENT_([A-Za-z_$][\w$]*)__")


def component_marker(name: str) -> str:
    return f"__COMPONENT_{name}__"


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Base:
    pass


@dataclass(frozen=True)
class PseudoClasses:
    """One or more pseudo-class keys; ``(":hover", ":focus")`` for a comma list."""

    pseudos: tuple[str, ...]


@dataclass(frozen=True)
class PseudoElement:
    name: str


@dataclass(frozen=True)
class Attribute:
    """A supported attribute condition, e.g. ``&[type="checkbox"]``."""

    kind: str
    suffix: str
    pseudo_element: str | None = None


@dataclass(frozen=True)
class DescendantOf:
    """``${Parent}:hover &``: this component reacts to an ancestor's state."""

    component: str
    pseudo: str | None = None


@dataclass(frozen=True)
class AncestorOf:
    """``&:hover ${Child}``: this component styles a descendant component."""

    component: str
    pseudo: str | None = None


@dataclass(frozen=True)
class AdjacentSibling:
    pass


@dataclass(frozen=True)
class GeneralSiblingAfterClass:
    class_name: str


@dataclass(frozen=True)
class Unsupported:
    reason: str


SelectorShape = Union[
    Base,
    PseudoClasses,
    PseudoElement,
    Attribute,
    DescendantOf,
    AncestorOf,
    AdjacentSibling,
    GeneralSiblingAfterClass,
    Unsupported,
]


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

_ATTRIBUTE_PSEUDOS = {"disabled": ":disabled", "readonly": ":read-only"}

# (regex over the bracket body, kind, suffix, required base tag)
_ATTRIBUTE_FORMS: list[tuple[re.Pattern[str], str, str, str]] = [
    (re.compile(r"""^type=["']?checkbox["']?$"""), "typeCheckbox", "Checkbox", "input"),
    (re.compile(r"""^type=["']?radio["']?$"""), "typeRadio", "Radio", "input"),
    (re.compile(r"""^href\^=["']https["']$"""), "hrefStartsWith", "Https", "a"),
    (re.compile(r"""^href\$=["']\.pdf["']$"""), "hrefEndsWith", "Pdf", "a"),
    (re.compile(r"""^target=["']_blank["']$"""), "targetBlankAfter", "External", "a"),
]

ATTRIBUTE_BASE_TAGS = {kind: tag for _, kind, _, tag in _ATTRIBUTE_FORMS}

_TOKEN_RE = re.compile(
    r"""
    (?P<element>::[A-Za-z-]+)
  | (?P<pseudo>:[A-Za-z-]+(?:\((?P<arg>[^()]*(?:\([^()]*\)[^()]*)*)\))?)
  | (?P<attr>\[(?P<attr_body>[^\]]*)\])
  | (?P<cls>\.[A-Za-z_-][\w-]*)
  | (?P<id>\#[A-Za-z_-][\w-]*)
    """,
    re.VERBOSE,
)

_SIMPLE_PSEUDO_RE = re.compile(r"^:[A-Za-z-]+$")


def strip_specificity_hack(selector: str) -> str:
    """``&&`` (and longer runs) is a specificity bump; treat it as ``&``."""
    return re.sub(r"&{2,}", "&", selector)


def normalize_attribute_pseudos(selector: str) -> str:
    """``&[disabled]`` -> ``&:disabled``, ``&[readonly]`` -> ``&:read-only``."""

    def repl(match: re.Match[str]) -> str:
        return _ATTRIBUTE_PSEUDOS[match.group(1)]

    return re.sub(r"\[(disabled|readonly)\]", repl, selector)


def normalize(selector: str) -> str:
    return normalize_attribute_pseudos(strip_specificity_hack(" ".join(selector.split())))


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify(selector: str) -> SelectorShape:
    """Classify a normalized selector (component references already marked)."""
    selector = normalize(selector)
    if "__SLOT_" in selector:
        return Unsupported("interpolated selector")

    parts = split_top_level(selector)
    if len(parts) > 1:
        pseudos: list[str] = []
        for part in parts:
            shape = _classify_single(part)
            if not isinstance(shape, PseudoClasses):
                return Unsupported("comma-separated selectors must all be simple pseudos")
            pseudos.extend(shape.pseudos)
        return PseudoClasses(tuple(pseudos))
    return _classify_single(parts[0] if parts else "&")


def _classify_single(part: str) -> SelectorShape:
    if part == "&":
        return Base()
    if COMPONENT_MARKER_RE.search(part):
        return _classify_component_relation(part)
    if re.fullmatch(r"&\s*\+\s*&", part):
        return AdjacentSibling()
    sibling = re.fullmatch(r"\.([A-Za-z_-][\w-]*)\s*~\s*&", part)
    if sibling:
        return GeneralSiblingAfterClass(sibling.group(1))
    if not part.startswith("&"):
        if part.startswith("*"):
            return Unsupported("universal selector")
        return Unsupported("descendant/child/sibling selector")

    rest = part[1:]
    if rest[:1].isspace():
        if rest.lstrip().startswith(":"):
            return Unsupported("descendant pseudo selector (space before pseudo)")
        return Unsupported("descendant/child/sibling selector")
    if rest[:1] in (">", "+", "~"):
        return Unsupported("descendant/child/sibling selector")
    return _classify_compound(rest)


def _classify_component_relation(part: str) -> SelectorShape:
    pseudo = r"((?::[A-Za-z-]+(?:\([^)]*\))?)*)"
    marker = r"__COMPONENT_([A-Za-z_$][\w$]*)__"
    match = re.fullmatch(rf"{marker}{pseudo}\s+&", part)
    if match:
        return DescendantOf(match.group(1), match.group(2) or None)
    match = re.fullmatch(rf"&{pseudo}\s+{marker}", part)
    if match:
        return AncestorOf(match.group(2), match.group(1) or None)
    if re.search(r"[+~]", part):
        return Unsupported("sibling combinator with component reference")
    return Unsupported("unknown component selector")


def _classify_compound(rest: str) -> SelectorShape:
    pseudo_classes: list[str] = []
    elements: list[str] = []
    attributes: list[str] = []
    pos = 0
    while pos < len(rest):
        match = _TOKEN_RE.match(rest, pos)
        if not match:
            if rest[pos].isspace() or rest[pos] in ">+~":
                return Unsupported("descendant/child/sibling selector")
            if rest[pos] == "*":
                return Unsupported("universal selector")
            return Unsupported("element selector")
        if match.group("cls"):
            return Unsupported("class selector")
        if match.group("id"):
            return Unsupported("id selector")
        if match.group("element"):
            elements.append(match.group("element"))
        elif match.group("attr"):
            attributes.append(match.group("attr_body").strip())
        else:
            text = match.group("pseudo")
            arg = match.group("arg")
            if arg is not None and text.startswith(":not("):
                if not _SIMPLE_PSEUDO_RE.match(arg.strip()):
                    return Unsupported("complex :not() selector")
                text = f":not({arg.strip()})"
            pseudo_classes.append(text)
        pos = match.end()

    if attributes:
        if len(attributes) > 1 or pseudo_classes:
            return Unsupported("attribute selector")
        return _classify_attribute(attributes[0], elements)
    if elements:
        if len(elements) > 1 or pseudo_classes:
            return Unsupported("pseudo-element combined with other selectors")
        return PseudoElement(elements[0])
    if pseudo_classes:
        return PseudoClasses(("".join(pseudo_classes),))
    return Base()


def _classify_attribute(body: str, elements: list[str]) -> SelectorShape:
    for pattern, kind, suffix, _tag in _ATTRIBUTE_FORMS:
        if not pattern.match(body):
            continue
        if kind == "targetBlankAfter":
            if elements != ["::after"]:
                return Unsupported("attribute selector")
            return Attribute(kind, suffix, "::after")
        if elements:
            return Unsupported("attribute selector")
        return Attribute(kind, suffix)
    return Unsupported("attribute selector")
