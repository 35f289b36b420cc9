"""
Input validation and sanitization.

``validate_inputs`` reports every problem as a field-tagged issue and never
raises. ``sanitize_inputs`` repairs the same problems (negatives and
non-finite values to 0, percentages into [0, 100], whole employee counts),
so calculators downstream can rely on their preconditions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from entitytax.calculator.decimal_math import is_valid_number, round_whole
from entitytax.models.inputs import TargetMode, TaxCalculationInputs


@dataclass
class ValidationIssue:
    field: str
    message: str
    severity: str = "error"  # "error" | "warning"


# Optional top-level money fields: (field, label)
_OPTIONAL_AMOUNTS = (
    ("monthly_salary", "Monthly salary"),
    ("compliance_costs", "Compliance costs"),
    ("audit_cost", "Audit cost"),
)

_AUDIT_FIELDS = (
    ("revenue", "Revenue"),
    ("total_assets", "Total assets"),
    ("employees", "Number of employees"),
)


def _check_amount(issues: List[ValidationIssue], field: str, label: str, value: Any) -> None:
    if not is_valid_number(value):
        issues.append(ValidationIssue(field, f"{label} must be a finite number"))
    elif value < 0:
        issues.append(ValidationIssue(field, f"{label} cannot be negative"))


def validate_inputs(inputs: TaxCalculationInputs) -> List[ValidationIssue]:
    """
    Check a set of inputs and return every issue found.

    Salary above business profit is not an issue: it models a loss-making
    year and shows up as an affordability warning in the comparison.
    """
    issues: List[ValidationIssue] = []

    _check_amount(issues, "business_profit", "Business profit", inputs.business_profit)
    _check_amount(issues, "other_income", "Other income", inputs.other_income)

    for field, label in _OPTIONAL_AMOUNTS:
        value = getattr(inputs, field)
        if value is not None:
            _check_amount(issues, field, label, value)

    if inputs.audit_criteria is not None:
        for field, label in _AUDIT_FIELDS:
            _check_amount(issues, f"audit_criteria.{field}", label, getattr(inputs.audit_criteria, field))
        employees = inputs.audit_criteria.employees
        if is_valid_number(employees) and employees >= 0 and employees != math.floor(employees):
            issues.append(
                ValidationIssue(
                    "audit_criteria.employees",
                    "Number of employees should be a whole number; it will be rounded.",
                    severity="warning",
                )
            )

    if inputs.reliefs is not None:
        for name, amount in inputs.reliefs.items().items():
            _check_amount(issues, f"reliefs.{name}", f"Relief '{name}'", amount)

    percent = inputs.dividend_distribution_percent
    if percent is not None:
        if not is_valid_number(percent) or percent < 0 or percent > 100:
            issues.append(
                ValidationIssue(
                    "dividend_distribution_percent",
                    "Dividend distribution percentage must be between 0 and 100",
                )
            )

    if isinstance(inputs.mode, TargetMode):
        _check_amount(issues, "mode.target_net_income", "Target net income", inputs.mode.target_net_income)

    zakat = inputs.zakat
    if zakat is not None:
        if zakat.amount_paid is not None:
            _check_amount(issues, "zakat.amount_paid", "Zakat paid", zakat.amount_paid)
        if zakat.deductions is not None:
            for field in ("epf", "expenses", "other"):
                _check_amount(
                    issues, f"zakat.deductions.{field}", "Zakat deduction", getattr(zakat.deductions, field)
                )

    return issues


def issues_from_validation_error(exc: ValidationError) -> List[ValidationIssue]:
    """Convert pydantic structural errors into validation issues."""
    return [
        ValidationIssue(".".join(str(part) for part in error["loc"]), error["msg"])
        for error in exc.errors()
    ]


# =============================================================================
# SANITIZATION
# =============================================================================

def _amount(value: Any) -> float:
    """Finite, non-negative float; anything else becomes 0."""
    if not is_valid_number(value) or value <= 0:
        return 0.0
    return float(value)


def _optional_amount(value: Any) -> Optional[float]:
    return None if value is None else _amount(value)


def _percent(value: Any) -> Optional[float]:
    if value is None:
        return None
    if not is_valid_number(value):
        return 0.0
    return float(min(100.0, max(0.0, value)))


def _as_dict(value: Any) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Expected a mapping or model, got {type(value).__name__}")


def sanitize_inputs(
    partial: Union[TaxCalculationInputs, Mapping[str, Any]],
) -> TaxCalculationInputs:
    """
    Repair inputs so that calculators accept them.

    Accepts a model or a (possibly partial) mapping. Missing profit and
    other income become 0; optional fields left out stay unset so their
    defaults apply later. Flags, zakat settings and the input mode are
    carried through with their amounts repaired.

    Raises:
        TypeError: if ``partial`` (or a nested section) is not a mapping
            or model.
        pydantic.ValidationError: if a non-numeric field has the wrong type.
    """
    data = _as_dict(partial) or {}
    result: Dict[str, Any] = dict(data)

    result["business_profit"] = _amount(data.get("business_profit"))
    result["other_income"] = _amount(data.get("other_income"))

    for field, _ in _OPTIONAL_AMOUNTS:
        if field in data:
            result[field] = _optional_amount(data[field])

    audit = _as_dict(data.get("audit_criteria"))
    if audit is not None:
        result["audit_criteria"] = {
            "revenue": _amount(audit.get("revenue")),
            "total_assets": _amount(audit.get("total_assets")),
            "employees": round_whole(_amount(audit.get("employees"))),
        }

    reliefs = _as_dict(data.get("reliefs"))
    if reliefs is not None:
        result["reliefs"] = {name: _amount(amount) for name, amount in reliefs.items()}

    if "dividend_distribution_percent" in data:
        result["dividend_distribution_percent"] = _percent(data["dividend_distribution_percent"])

    mode = _as_dict(data.get("mode"))
    if mode is not None and mode.get("kind") == "target":
        mode["target_net_income"] = _amount(mode.get("target_net_income"))
        result["mode"] = mode

    zakat = _as_dict(data.get("zakat"))
    if zakat is not None:
        if zakat.get("amount_paid") is not None:
            zakat["amount_paid"] = _amount(zakat["amount_paid"])
        deductions = _as_dict(zakat.get("deductions"))
        if deductions is not None:
            zakat["deductions"] = {name: _amount(amount) for name, amount in deductions.items()}
        result["zakat"] = zakat

    return TaxCalculationInputs.model_validate(result)
