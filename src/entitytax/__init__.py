"""Enterprise vs Sdn Bhd after-tax comparison engine (Malaysia, YA2024/2025)."""

from .calculator.engine import (
    ComparisonEngine,
    EvaluationOutcome,
    compare_structures,
    get_default_engine,
    reset_default_engine,
)
from .calculator.tax_year_config import TaxYearConfig
from .models import ComparisonResult, StructureChoice, TaxCalculationInputs
from .validation import ValidationIssue, sanitize_inputs, validate_inputs

__version__ = "1.0.0"

__all__ = [
    "ComparisonEngine",
    "EvaluationOutcome",
    "compare_structures",
    "get_default_engine",
    "reset_default_engine",
    "TaxYearConfig",
    "ComparisonResult",
    "StructureChoice",
    "TaxCalculationInputs",
    "ValidationIssue",
    "sanitize_inputs",
    "validate_inputs",
]
