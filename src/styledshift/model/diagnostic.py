"""Diagnostic model: structured findings produced while lowering components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    """Severity level for a diagnostic message."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class BailCategory(Enum):
    """Why a component could not be lowered."""

    UNSUPPORTED_SELECTOR = "unsupported-selector"
    UNRESOLVABLE_INTERPOLATION = "unresolvable-interpolation"
    ADAPTER_FAILURE = "adapter-failure"
    UNSAFE_COMPOSITION = "unsafe-composition"
    CONTEXT_LOSS = "context-loss"


@dataclass(frozen=True)
class Location:
    """A 1-based line/column position in a source file."""

    line: int
    column: int = 1
    file: str | None = None

    def __str__(self) -> str:
        prefix = f"{self.file}:" if self.file else ""
        return f"{prefix}{self.line}:{self.column}"


@dataclass(frozen=True)
class Diagnostic:
    """A single finding about one styled component.

    Attributes:
        severity: How serious the issue is.
        type: Short machine-stable description, e.g. ``"class selector"``.
        component: Local name of the component involved, if applicable.
        category: Bail taxonomy entry when the finding aborted lowering.
        location: Source position of the component, if known.
        context: Extra detail (selector text, property, expression shape).
    """

    severity: Severity
    type: str
    component: str | None = None
    category: BailCategory | None = None
    location: Location | None = None
    context: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    def __str__(self) -> str:
        where = ""
        if self.location:
            where = f" {self.location}"
        if self.component:
            where += f" [component={self.component}]"
        detail = ""
        if self.context:
            detail = " (" + ", ".join(f"{k}={v}" for k, v in self.context.items()) + ")"
        return f"{self.severity.value}{where}: {self.type}{detail}"


class DiagnosticLog:
    """Append-only diagnostics shared by every component in one lowering run."""

    def __init__(self) -> None:
        self._entries: list[Diagnostic] = []

    def append(self, diagnostic: Diagnostic) -> None:
        self._entries.append(diagnostic)

    def for_component(self, name: str) -> list[Diagnostic]:
        return [d for d in self._entries if d.component == name]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self._entries if d.is_error]

    def __iter__(self):
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DiagnosticLog(entries={len(self._entries)})"
