"""
Statutory contributions and company-level rules.

EPF and SOCSO rates are step functions of the monthly salary, read from the
``RateTier`` tables in ``TaxYearConfig``:

- EPF employer 13% up to RM5,000/month, 12% above; employee 11%.
- SOCSO employer 1.75% and employee 0.5% up to RM6,000/month, nothing above.
  SOCSO is rounded per month, then multiplied by 12.

Also holds the dividend surcharge, the audit-exemption test and the
maximum salary a company can afford out of its profit.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from entitytax.calculator.brackets import rate_for, tier_ceilings
from entitytax.calculator.decimal_math import (
    money,
    money_down,
    multiply,
    round_currency,
    to_decimal,
)
from entitytax.calculator.tax_year_config import TaxYearConfig
from entitytax.models.inputs import AuditCriteria

logger = logging.getLogger(__name__)

MONTHS = 12

# Upper bound on sen-by-sen corrections after the closed form
_MAX_SEN_ADJUSTMENTS = 100

# Per-month SOCSO and EPF rounding can put the true maximum a few sen
# above profit / (1 + r); the search starts this far above it.
_ROUNDING_SLACK = 0.10


def _config(config: Optional[TaxYearConfig]) -> TaxYearConfig:
    return config or TaxYearConfig.current()


# =============================================================================
# EPF
# =============================================================================

def employer_epf(annual_salary: float, config: Optional[TaxYearConfig] = None) -> float:
    """Employer EPF on an annual salary; the rate depends on salary per month."""
    if annual_salary <= 0:
        return 0.0
    config = _config(config)
    rate = rate_for(annual_salary / MONTHS, config.epf_employer_tiers)
    return round_currency(multiply(annual_salary, rate))


def employee_epf(annual_salary: float, config: Optional[TaxYearConfig] = None) -> float:
    """Employee EPF (11%) on an annual salary."""
    if annual_salary <= 0:
        return 0.0
    config = _config(config)
    return round_currency(multiply(annual_salary, config.epf_employee_rate))


# =============================================================================
# SOCSO
# =============================================================================

def _monthly_socso(monthly_salary: float, rate: float) -> float:
    if monthly_salary <= 0 or rate <= 0:
        return 0.0
    return round_currency(multiply(monthly_salary, rate))


def employer_socso(monthly_salary: float, config: Optional[TaxYearConfig] = None) -> float:
    """Annual employer SOCSO for a monthly salary (zero above the wage ceiling)."""
    config = _config(config)
    monthly = _monthly_socso(monthly_salary, rate_for(monthly_salary, config.socso_employer_tiers))
    return round_currency(multiply(monthly, MONTHS))


def employee_socso(monthly_salary: float, config: Optional[TaxYearConfig] = None) -> float:
    """Annual employee SOCSO for a monthly salary (zero above the wage ceiling)."""
    config = _config(config)
    monthly = _monthly_socso(monthly_salary, rate_for(monthly_salary, config.socso_employee_tiers))
    return round_currency(multiply(monthly, MONTHS))


# =============================================================================
# SALARY AFFORDABILITY
# =============================================================================

def total_salary_cost(annual_salary: float, config: Optional[TaxYearConfig] = None) -> float:
    """What the company pays for a salary: salary + employer EPF + employer SOCSO."""
    config = _config(config)
    cost = (
        to_decimal(annual_salary)
        + to_decimal(employer_epf(annual_salary, config))
        + to_decimal(employer_socso(annual_salary / MONTHS, config))
    )
    return float(money(cost))


def _combined_employer_rate(monthly_salary: float, config: TaxYearConfig) -> float:
    return (
        rate_for(monthly_salary, config.epf_employer_tiers)
        + rate_for(monthly_salary, config.socso_employer_tiers)
    )


def _largest_affordable_at_or_below(
    annual_salary: float, business_profit: float, floor: float, config: TaxYearConfig
) -> Optional[float]:
    """Step down a sen at a time until the cost fits; None once below ``floor``."""
    candidate = float(money_down(annual_salary))
    for _ in range(_MAX_SEN_ADJUSTMENTS):
        if candidate <= floor:
            return None
        if total_salary_cost(candidate, config) <= business_profit:
            return candidate
        candidate = round_currency(to_decimal(candidate) - to_decimal("0.01"))
    return None


def max_affordable_salary(business_profit: float, config: Optional[TaxYearConfig] = None) -> float:
    """
    Largest annual salary whose total cost fits within ``business_profit``.

    The combined employer rate is constant between consecutive tier
    ceilings, so on each segment (lo, hi] of monthly salary the cost is
    salary x (1 + r) and the answer is either the segment's top or
    ``profit / (1 + r)``. The cost is not monotonic across segments (the
    EPF rate drops above RM5,000), so every segment is solved and the
    largest feasible salary wins.

    Returns:
        Annual salary, rounded down to the sen; 0 when profit is not positive.
    """
    if business_profit <= 0:
        return 0.0
    config = _config(config)

    ceilings: List[float] = tier_ceilings(config.epf_employer_tiers, config.socso_employer_tiers)
    bounds: List[Optional[float]] = [0.0, *ceilings, None]

    best = 0.0
    for lo, hi in zip(bounds, bounds[1:]):
        probe = hi if hi is not None else lo + 1
        combined = _combined_employer_rate(probe, config)
        lo_annual = lo * MONTHS

        if hi is not None and total_salary_cost(hi * MONTHS, config) <= business_profit:
            candidate: Optional[float] = hi * MONTHS
        else:
            exact = business_profit / (1 + combined)
            if exact <= lo_annual:
                continue
            start = exact + _ROUNDING_SLACK
            if hi is not None:
                start = min(start, hi * MONTHS)
            candidate = _largest_affordable_at_or_below(start, business_profit, lo_annual, config)

        if candidate is not None and candidate > best:
            best = candidate

    logger.debug(f"Max affordable salary for profit {business_profit:.2f}: {best:.2f}")
    return best


# =============================================================================
# DIVIDENDS AND AUDIT
# =============================================================================

def dividend_tax(dividends: float, config: Optional[TaxYearConfig] = None) -> float:
    """YA2025 surcharge: 2% of dividends received above RM100,000."""
    config = _config(config)
    if dividends <= config.dividend_threshold:
        return 0.0
    excess = to_decimal(dividends) - to_decimal(config.dividend_threshold)
    return round_currency(multiply(excess, config.dividend_surcharge_rate))


def is_audit_exempt(criteria: AuditCriteria, config: Optional[TaxYearConfig] = None) -> bool:
    """
    Companies Act 2016 audit exemption.

    Exempt only when revenue, total assets and headcount are all within
    their thresholds.
    """
    config = _config(config)
    return (
        criteria.revenue <= config.audit_revenue_limit
        and criteria.total_assets <= config.audit_assets_limit
        and criteria.employees <= config.audit_employees_limit
    )
