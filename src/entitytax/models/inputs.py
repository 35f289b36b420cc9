"""
Request-side models for an Enterprise vs Sdn Bhd comparison.

These models describe what the caller supplied. They deliberately do not
enforce non-negativity: ``entitytax.validation`` reports bad values and
``sanitize_inputs`` repairs them, so a caller can show every problem at
once instead of failing on the first one.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Relief categories claimed per child; the statutory figure is a per-child
# amount, so the declared total is not capped.
UNCAPPED_RELIEFS = frozenset({"children"})


class Reliefs(BaseModel):
    """
    Personal relief profile (YA2024/2025).

    Known categories are capped at their statutory limit when totalled.
    Any additional named relief (e.g. ``lifestyle=2500``) is accepted as an
    extra field and added uncapped.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    basic: float = Field(default=0.0, description="Individual relief (max RM9,000)")
    epf_and_life_insurance: float = Field(
        default=0.0, description="EPF + life insurance, combined (max RM7,000)"
    )
    medical: float = Field(default=0.0, description="Medical insurance/expenses (max RM8,000)")
    spouse: float = Field(default=0.0, description="Spouse without income (max RM4,000)")
    children: float = Field(default=0.0, description="Sum of per-child reliefs (RM2,000 each)")
    education: float = Field(default=0.0, description="Education fees (max RM8,000)")

    @model_validator(mode="before")
    @classmethod
    def coerce_extra_reliefs(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        coerced = dict(data)
        for key, value in data.items():
            if key in cls.model_fields:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Relief '{key}' must be a number")
            coerced[key] = float(value)
        return coerced

    def items(self) -> Dict[str, float]:
        """Every relief category with its declared amount, extras included."""
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values.update(self.model_extra or {})
        return values

    def total(self, limits: Mapping[str, float]) -> float:
        """
        Sum of reliefs with known categories capped at ``limits``.

        Non-finite and negative amounts count as zero.
        """
        total = 0.0
        for name, amount in self.items().items():
            if not math.isfinite(amount) or amount <= 0:
                continue
            if name in limits and name not in UNCAPPED_RELIEFS:
                amount = min(amount, limits[name])
            total += amount
        return total

    def with_epf_relief(self, epf_relief: float) -> "Reliefs":
        """Copy of this profile with the EPF/life relief replaced."""
        return self.model_copy(update={"epf_and_life_insurance": epf_relief})


class AuditCriteria(BaseModel):
    """Figures used for the Companies Act audit-exemption test."""
    model_config = ConfigDict(frozen=True)

    revenue: float = 0.0
    total_assets: float = 0.0
    employees: float = 0.0


class ZakatMethod(str, Enum):
    """How zakat is computed when it is auto-calculated."""
    GROSS_INCOME = "gross_income"
    NET_INCOME = "net_income"


class ZakatDeductions(BaseModel):
    """Amounts subtracted from income under the net-income method."""
    model_config = ConfigDict(frozen=True)

    epf: float = 0.0
    expenses: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return self.epf + self.expenses + self.other


class ZakatInput(BaseModel):
    """
    Zakat settings.

    When ``amount_paid`` is omitted and ``auto_calculate`` is not explicitly
    False, the amount is derived at 2.5% of the relevant income.
    """
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    amount_paid: Optional[float] = None
    auto_calculate: Optional[bool] = None
    method: ZakatMethod = ZakatMethod.GROSS_INCOME
    deductions: Optional[ZakatDeductions] = None

    @property
    def should_auto_calculate(self) -> bool:
        return self.auto_calculate is not False and self.amount_paid is None


class ProfitMode(BaseModel):
    """Business profit is given directly."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["profit"] = "profit"


class TargetMode(BaseModel):
    """Business profit is derived from a desired monthly take-home."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["target"] = "target"
    target_net_income: float = Field(default=0.0, description="Desired net cash per month (RM)")


InputMode = Annotated[Union[ProfitMode, TargetMode], Field(discriminator="kind")]


class TaxCalculationInputs(BaseModel):
    """Financial profile for one comparison."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    business_profit: float = Field(description="Annual business profit before owner pay (RM)")
    other_income: float = Field(default=0.0, description="Employment, rental or other income (RM)")

    # Sdn Bhd assumptions
    monthly_salary: Optional[float] = Field(default=None, description="Director salary per month (RM)")
    compliance_costs: Optional[float] = Field(
        default=None, description="Annual secretarial, tax-filing and accounting fees (RM)"
    )
    audit_cost: Optional[float] = Field(default=None, description="Statutory audit fee (RM)")
    audit_criteria: Optional[AuditCriteria] = None

    reliefs: Optional[Reliefs] = None

    apply_ya2025_dividend_surcharge: bool = False
    dividend_distribution_percent: Optional[float] = Field(
        default=None, description="Share of post-tax profit paid out (0-100)"
    )
    has_foreign_ownership: bool = False

    mode: InputMode = Field(default_factory=ProfitMode)
    zakat: Optional[ZakatInput] = None


@dataclass(frozen=True)
class ResolvedInputs:
    """
    Inputs with every default applied and the input mode settled.

    Calculators only ever see this shape, so none of them needs to ask
    whether an optional field was supplied.
    """
    business_profit: float
    other_income: float
    monthly_salary: float
    compliance_costs: float
    audit_cost: float
    audit_criteria: Optional[AuditCriteria]
    reliefs: Reliefs
    apply_dividend_surcharge: bool
    dividend_distribution_percent: float
    has_foreign_ownership: bool
    zakat: ZakatInput
    target_net_income: Optional[float] = None  # annual, target mode only

    def with_business_profit(self, business_profit: float) -> "ResolvedInputs":
        """Copy with a different profit (used by the crossover search)."""
        return replace(self, business_profit=business_profit)

    def cache_key(self) -> str:
        """Serialized form of everything except the business profit."""
        payload = {
            "other_income": self.other_income,
            "monthly_salary": self.monthly_salary,
            "compliance_costs": self.compliance_costs,
            "audit_cost": self.audit_cost,
            "audit_criteria": self.audit_criteria.model_dump() if self.audit_criteria else None,
            "reliefs": self.reliefs.items(),
            "apply_dividend_surcharge": self.apply_dividend_surcharge,
            "dividend_distribution_percent": self.dividend_distribution_percent,
            "has_foreign_ownership": self.has_foreign_ownership,
            "zakat": self.zakat.model_dump(mode="json"),
        }
        return json.dumps(payload, sort_keys=True)
