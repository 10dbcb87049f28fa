"""Stage 2: Validation - полный список дефектов документа."""

from .field_rules import FIELD_RULES, check_field
from .stage import (
    ValidationFinding,
    ValidationResult,
    ValidationStage,
    validate_document,
)

__all__ = [
    "FIELD_RULES",
    "ValidationFinding",
    "ValidationResult",
    "ValidationStage",
    "check_field",
    "validate_document",
]
