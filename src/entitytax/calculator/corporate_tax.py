"""Corporate income tax on a company's chargeable profit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from entitytax.calculator.brackets import calculate_progressive_tax
from entitytax.calculator.decimal_math import require_non_negative, safe_divide_for_rate
from entitytax.calculator.tax_year_config import TaxYearConfig
from entitytax.models.results import TaxBracketBreakdown


@dataclass(frozen=True)
class CorporateTaxResult:
    tax: float
    effective_rate: float
    breakdown: Tuple[TaxBracketBreakdown, ...]


def calculate_corporate_tax(
    taxable_profit: float,
    config: Optional[TaxYearConfig] = None,
    sme_qualified: bool = True,
) -> CorporateTaxResult:
    """
    Compute corporate tax.

    SME companies pay 15% / 17% / 24% progressively; a company outside the
    SME definition pays the flat standard rate. Whether a company qualifies
    is decided by the caller.

    Raises:
        ValueError: if ``taxable_profit`` is negative or not finite.
    """
    require_non_negative(taxable_profit, "Taxable profit")
    config = config or TaxYearConfig.current()

    result = calculate_progressive_tax(taxable_profit, config.corporate_brackets(sme_qualified))
    return CorporateTaxResult(
        tax=result.tax,
        effective_rate=float(safe_divide_for_rate(result.tax, taxable_profit)),
        breakdown=result.breakdown,
    )
