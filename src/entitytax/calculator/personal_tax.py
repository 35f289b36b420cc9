"""
Personal income tax for Malaysian tax residents.

Taxable income is total income less the capped relief total; tax comes from
the progressive Schedule 1 table held in ``TaxYearConfig``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from entitytax.calculator.brackets import calculate_progressive_tax, progressive_tax
from entitytax.calculator.decimal_math import (
    require_non_negative,
    round_currency,
    round_whole,
    safe_divide_for_rate,
)
from entitytax.calculator.tax_year_config import TaxYearConfig
from entitytax.models.inputs import Reliefs
from entitytax.models.results import TaxBracketBreakdown

logger = logging.getLogger(__name__)

# Bisection limits for the reverse (target net cash) search
REVERSE_TOLERANCE = 1.0
REVERSE_MAX_ITERATIONS = 50


@dataclass(frozen=True)
class PersonalTaxResult:
    tax: float
    effective_rate: float
    taxable_income: float
    total_reliefs: float
    breakdown: Tuple[TaxBracketBreakdown, ...]


def default_reliefs(config: TaxYearConfig) -> Reliefs:
    """Basic + EPF/life + medical at their statutory maxima."""
    return Reliefs(**config.default_reliefs)


def calculate_personal_tax(
    total_income: float,
    reliefs: Optional[Reliefs] = None,
    config: Optional[TaxYearConfig] = None,
) -> PersonalTaxResult:
    """
    Compute personal income tax on ``total_income``.

    Args:
        total_income: Gross income from all sources (RM).
        reliefs: Relief profile; the default profile when omitted.
        config: Tax year constants; the configured year when omitted.

    Raises:
        ValueError: if ``total_income`` is negative or not finite.
    """
    require_non_negative(total_income, "Total income")
    config = config or TaxYearConfig.current()
    reliefs = reliefs if reliefs is not None else default_reliefs(config)

    total_reliefs = round_currency(reliefs.total(config.relief_limits))
    taxable_income = max(0.0, total_income - total_reliefs)
    result = calculate_progressive_tax(taxable_income, config.personal_brackets)

    return PersonalTaxResult(
        tax=result.tax,
        effective_rate=float(safe_divide_for_rate(result.tax, total_income)),
        taxable_income=round_currency(taxable_income),
        total_reliefs=total_reliefs,
        breakdown=result.breakdown,
    )


def required_income_for_net_cash(
    target_net_cash: float,
    total_reliefs: float = 9000.0,
    config: Optional[TaxYearConfig] = None,
) -> int:
    """
    Gross income whose after-tax cash reaches ``target_net_cash``.

    Net cash here is income less personal tax only. Marginal rates stay
    below 100%, so net cash rises with income and bisection applies.

    Args:
        target_net_cash: Desired annual take-home (RM).
        total_reliefs: Relief total to deduct before tax.
        config: Tax year constants; the configured year when omitted.

    Returns:
        Required gross income rounded to the whole ringgit (0 for a
        non-positive target).
    """
    if target_net_cash <= 0:
        return 0
    config = config or TaxYearConfig.current()

    def net_cash(income: float) -> float:
        return income - progressive_tax(max(0.0, income - total_reliefs), config.personal_brackets)

    low = target_net_cash
    high = target_net_cash * 2
    if net_cash(high) < target_net_cash:
        high = target_net_cash * 3

    iterations = 0
    while high - low > REVERSE_TOLERANCE and iterations < REVERSE_MAX_ITERATIONS:
        mid = (low + high) / 2
        if net_cash(mid) < target_net_cash:
            low = mid
        else:
            high = mid
        iterations += 1

    required = round_whole((low + high) / 2)
    logger.debug(
        f"Required income for net cash {target_net_cash:.2f}: {required} "
        f"after {iterations} iterations"
    )
    return required
