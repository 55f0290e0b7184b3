"""Validation rules for scanned source files.

Each rule is a function taking a SourceFile and returning a list of
Diagnostic objects describing any issues found before lowering starts.
"""

from __future__ import annotations

import re

from styledshift.model.diagnostic import Diagnostic, Severity
from styledshift.model.expr import Unparsed
from styledshift.model.rules import StyledDeclaration
from styledshift.parser.source import SourceFile

_SLOT_RE = re.compile(r"__SLOT_(\d+)__")


def _referenced_slots(decl: StyledDeclaration) -> set[int]:
    found: set[int] = set()
    for rule in decl.rules:
        for text in (rule.selector, *rule.at_rules):
            found.update(int(m) for m in _SLOT_RE.findall(text))
        for declaration in rule.declarations:
            found.update(declaration.value.slot_ids)
    return found


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def check_parse_error(source: SourceFile) -> list[Diagnostic]:
    """Templates, keyframes included, must be readable CSS."""
    return [
        Diagnostic(
            severity=Severity.ERROR,
            type="template parse error",
            component=decl.name,
            location=decl.location,
            context={"error": decl.parse_error},
        )
        for decl in (*source.declarations, *source.keyframes)
        if decl.parse_error is not None
    ]


def check_duplicate_names(source: SourceFile) -> list[Diagnostic]:
    """Each declaration or keyframes name is bound once."""
    diagnostics: list[Diagnostic] = []
    seen: set[str] = set()
    for decl in (*source.declarations, *source.keyframes):
        if decl.name in seen:
            diagnostics.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    type="duplicate declaration name",
                    component=decl.name,
                    location=decl.location,
                )
            )
        seen.add(decl.name)
    return diagnostics


def check_missing_slots(source: SourceFile) -> list[Diagnostic]:
    """Every slot placeholder in a template must have an expression."""
    diagnostics: list[Diagnostic] = []
    for decl in source.declarations:
        for slot_id in sorted(_referenced_slots(decl)):
            if decl.slot(slot_id) is None:
                diagnostics.append(
                    Diagnostic(
                        severity=Severity.ERROR,
                        type="slot without expression",
                        component=decl.name,
                        location=decl.location,
                        context={"slot": slot_id},
                    )
                )
    return diagnostics


def check_unknown_base(source: SourceFile) -> list[Diagnostic]:
    """``styled(X)`` should wrap a declaration or an imported component."""
    names = {d.name for d in source.declarations}
    diagnostics: list[Diagnostic] = []
    for decl in source.declarations:
        if decl.base is None or decl.base.is_intrinsic:
            continue
        base = decl.base.component or ""
        if base.split(".")[0] in names or base.split(".")[0] in source.imports:
            continue
        diagnostics.append(
            Diagnostic(
                severity=Severity.WARNING,
                type="unknown base component",
                component=decl.name,
                location=decl.location,
                context={"base": base},
            )
        )
    return diagnostics


def check_empty_template(source: SourceFile) -> list[Diagnostic]:
    """A declaration with no declarations in any rule emits an empty style."""
    return [
        Diagnostic(
            severity=Severity.INFO,
            type="empty template",
            component=decl.name,
            location=decl.location,
        )
        for decl in source.declarations
        if decl.parse_error is None
        and not any(rule.declarations for rule in decl.rules)
    ]


def check_attrs_usage(source: SourceFile) -> list[Diagnostic]:
    """Props injected by ``.attrs()`` are invisible to the lowering engine."""
    return [
        Diagnostic(
            severity=Severity.WARNING,
            type=".attrs() props are not visible to lowering",
            component=decl.name,
            location=decl.location,
        )
        for decl in source.declarations
        if decl.uses_attrs
    ]


def check_unparsed_slots(source: SourceFile) -> list[Diagnostic]:
    """Slot expressions the grammar cannot read will not lower."""
    diagnostics: list[Diagnostic] = []
    for decl in source.declarations:
        for slot_id, expr in enumerate(decl.slots):
            if isinstance(expr, Unparsed):
                source_text = expr.source if len(expr.source) <= 60 else expr.source[:57] + "..."
                diagnostics.append(
                    Diagnostic(
                        severity=Severity.WARNING,
                        type="unparsed slot expression",
                        component=decl.name,
                        location=decl.location,
                        context={"slot": slot_id, "source": source_text},
                    )
                )
    return diagnostics


ALL_RULES = [
    check_parse_error,
    check_duplicate_names,
    check_missing_slots,
    check_unknown_base,
    check_empty_template,
    check_attrs_usage,
    check_unparsed_slots,
]
