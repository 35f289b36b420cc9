"""
Response-side structures.

Every result is a frozen dataclass built once per calculation and never
mutated afterwards; sequences are tuples. ``to_dict()`` gives collaborators
(UI, reports) a plain, JSON-friendly view.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class _Serializable:
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class StepKind(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    EQUALS = "equals"
    TOTAL = "total"


class StructureChoice(str, Enum):
    """Which structure leaves the owner with more cash."""
    SOLE_PROP = "soleProp"
    SDN_BHD = "sdnBhd"
    SIMILAR = "similar"


@dataclass(frozen=True)
class WaterfallStep(_Serializable):
    """One signed line of a cash-flow trace."""
    label: str
    amount: float
    kind: StepKind
    indent: bool = False
    highlight: bool = False


@dataclass(frozen=True)
class TaxBracketBreakdown(_Serializable):
    """Portion of an amount taxed inside one bracket."""
    bracket_min: float
    bracket_max: Optional[float]
    rate: float
    amount_in_bracket: float
    tax_for_bracket: float


@dataclass(frozen=True)
class ZakatResult(_Serializable):
    """
    Zakat outcome for one scenario.

    ``tax_benefit`` is the rebate against personal tax for an Enterprise,
    and the deduction from aggregate income for a Sdn Bhd.
    """
    enabled: bool
    zakat_amount: float
    meets_nisab: bool
    tax_benefit: float
    excess_zakat: float = 0.0


@dataclass(frozen=True)
class SalaryAffordability(_Serializable):
    max_affordable_salary: float  # annual
    is_affordable: bool
    shortfall: float
    company_would_be_insolvent: bool


@dataclass(frozen=True)
class SolePropBreakdown(_Serializable):
    business_profit: float
    other_income: float
    total_income: float
    total_reliefs: float
    taxable_income: float


@dataclass(frozen=True)
class SolePropScenarioResult(_Serializable):
    personal_tax: float
    net_cash: float
    effective_tax_rate: float
    breakdown: SolePropBreakdown
    waterfall: Tuple[WaterfallStep, ...]
    insights: Tuple[str, ...]
    tax_bracket_breakdown: Tuple[TaxBracketBreakdown, ...]
    zakat: Optional[ZakatResult] = None
    tax_before_zakat_rebate: Optional[float] = None


@dataclass(frozen=True)
class SdnBhdBreakdown(_Serializable):
    annual_salary: float
    company_taxable_profit: float
    post_tax_profit: float
    dividends: float
    dividend_tax: float
    retained_earnings: float
    salary_after_epf: float
    salary_after_tax: float
    other_income: float
    business_profit: float


@dataclass(frozen=True)
class SdnBhdScenarioResult(_Serializable):
    corporate_tax: float
    personal_tax: float
    employer_epf: float
    employee_epf: float
    employer_socso: float
    employee_socso: float
    total_compliance_cost: float
    net_cash: float
    salary_affordability: SalaryAffordability
    breakdown: SdnBhdBreakdown
    company_waterfall: Tuple[WaterfallStep, ...]
    personal_waterfall: Tuple[WaterfallStep, ...]
    insights: Tuple[str, ...]
    epf_savings: float
    corporate_tax_bracket_breakdown: Tuple[TaxBracketBreakdown, ...]
    personal_tax_bracket_breakdown: Tuple[TaxBracketBreakdown, ...]
    zakat: Optional[ZakatResult] = None
    corporate_tax_before_zakat: Optional[float] = None


@dataclass(frozen=True)
class ComparisonResult(_Serializable):
    """
    Side-by-side outcome.

    ``difference`` is Sdn Bhd net cash minus Enterprise net cash, so a
    positive value favours incorporating.
    """
    which_is_better: StructureChoice
    difference: float
    savings_if_switch: float
    crossover_point_profit: Optional[int]
    recommendation: str
    sole_prop_result: SolePropScenarioResult
    sdn_bhd_result: SdnBhdScenarioResult
    has_affordability_issue: bool
    has_sme_qualification_issue: bool
    warnings: Tuple[str, ...] = ()
