"""styledshift model layer -- public type re-exports."""

from styledshift.model.context import LoweringContext
from styledshift.model.diagnostic import (
    BailCategory,
    Diagnostic,
    DiagnosticLog,
    Location,
    Severity,
)
from styledshift.model.result import (
    AncestorKey,
    ComputedKey,
    ImportName,
    ImportSpec,
    JsExpr,
    LoweredComponent,
    ResultConflictError,
    ResultMap,
    StyleFunction,
    VariantDimension,
)
from styledshift.model.rules import (
    ComponentBase,
    CssValue,
    Declaration,
    ImportBinding,
    Rule,
    SlotPart,
    StaticPart,
    StyledDeclaration,
)

__all__ = [
    # rules
    "StaticPart",
    "SlotPart",
    "CssValue",
    "Declaration",
    "Rule",
    "ComponentBase",
    "StyledDeclaration",
    "ImportBinding",
    # diagnostic
    "Severity",
    "BailCategory",
    "Location",
    "Diagnostic",
    "DiagnosticLog",
    # result
    "JsExpr",
    "ComputedKey",
    "AncestorKey",
    "ImportName",
    "ImportSpec",
    "StyleFunction",
    "VariantDimension",
    "LoweredComponent",
    "ResultMap",
    "ResultConflictError",
    # context
    "LoweringContext",
]
