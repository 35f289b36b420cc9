from .input_validator import (
    ValidationIssue,
    issues_from_validation_error,
    sanitize_inputs,
    validate_inputs,
)

__all__ = [
    "ValidationIssue",
    "issues_from_validation_error",
    "sanitize_inputs",
    "validate_inputs",
]
