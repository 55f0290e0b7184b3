from styledshift.validation.rules import ALL_RULES
from styledshift.validation.validator import (
    RuleFunc,
    ValidationError,
    validate,
    validate_or_raise,
)

__all__ = ["ALL_RULES", "RuleFunc", "ValidationError", "validate", "validate_or_raise"]
