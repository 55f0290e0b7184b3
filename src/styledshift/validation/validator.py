"""Pre-lowering checks for a scanned source file.

Validation looks only at what the scanner produced. It never consults the
adapter, so a clean report does not promise that every component lowers.
"""

from __future__ import annotations

from typing import Callable

from styledshift.model.diagnostic import Diagnostic
from styledshift.parser.source import SourceFile
from styledshift.validation.rules import ALL_RULES


class ValidationError(Exception):
    """A source file has problems that would make its lowering meaningless."""

    def __init__(self, path: str | None, diagnostics: list[Diagnostic]) -> None:
        self.path = path
        self.diagnostics = diagnostics
        blocking = [d for d in diagnostics if d.is_error]
        where = path or "<source>"
        details = "\n".join(f"  {d}" for d in blocking)
        super().__init__(f"{where}: {len(blocking)} blocking problem(s) found\n{details}")


RuleFunc = Callable[[SourceFile], list[Diagnostic]]


def validate(
    source: SourceFile, extra_rules: list[RuleFunc] | None = None
) -> list[Diagnostic]:
    """Check *source* with the built-in rules, then any *extra_rules*.

    Findings come back in rule order, every severity included.
    """
    diagnostics: list[Diagnostic] = []
    for rule in [*ALL_RULES, *(extra_rules or [])]:
        diagnostics.extend(rule(source))
    return diagnostics


def validate_or_raise(
    source: SourceFile, extra_rules: list[RuleFunc] | None = None
) -> list[Diagnostic]:
    """Like :func:`validate`, but a blocking problem raises :class:`ValidationError`."""
    diagnostics = validate(source, extra_rules=extra_rules)
    if any(d.is_error for d in diagnostics):
        raise ValidationError(source.path, diagnostics)
    return diagnostics
