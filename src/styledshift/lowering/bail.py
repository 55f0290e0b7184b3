"""Per-component bail controller: ``clean -> bailed``, terminal."""

from __future__ import annotations

import logging
from typing import Any

from styledshift.model.context import LoweringContext
from styledshift.model.diagnostic import BailCategory, Diagnostic, Severity
from styledshift.model.rules import KeyframesDeclaration, StyledDeclaration

logger = logging.getLogger(__name__)


class BailController:
    """Tracks whether one component has bailed and records why.

    The first bail wins: later calls are ignored so each component logs
    exactly one bail diagnostic.
    """

    def __init__(
        self, declaration: StyledDeclaration | KeyframesDeclaration, run: LoweringContext
    ) -> None:
        self.declaration = declaration
        self.run = run
        self.bailed = False

    def bail(
        self,
        category: BailCategory,
        reason: str,
        *,
        severity: Severity = Severity.WARNING,
        **context: Any,
    ) -> None:
        if self.bailed:
            return
        self.bailed = True
        name = self.declaration.name
        self.run.bailed.add(name)
        self.run.diagnostics.append(
            Diagnostic(
                severity=severity,
                type=reason,
                component=name,
                category=category,
                location=self.declaration.location,
                context={k: v for k, v in context.items() if v is not None},
            )
        )
        if category is BailCategory.ADAPTER_FAILURE:
            logger.warning("%s: adapter declined: %s", name, reason)
        else:
            logger.info("%s: bailed (%s): %s", name, category.value, reason)

    def __bool__(self) -> bool:
        return self.bailed


class BailSignal(Exception):
    """Raised inside one component's lowering to abort it.

    Caught by the engine, which hands it to the component's
    :class:`BailController`.
    """

    def __init__(self, category: BailCategory, reason: str, **context: Any) -> None:
        super().__init__(reason)
        self.category = category
        self.reason = reason
        self.context = context
