"""
Zakat rules.

Zakat is treated differently by entity type:

- Individual (Enterprise): a 100% rebate against tax payable, capped at the
  tax itself (Income Tax Act 1967, s.6A(3)). Zakat above the tax earns no
  further benefit.
- Company (Sdn Bhd): a deduction from aggregate income, capped at 2.5% of
  that income (s.44(11A)).

In both cases the zakat itself is still paid out of cash.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from entitytax.calculator.decimal_math import (
    max_decimal,
    min_decimal,
    multiply,
    round_currency,
    subtract,
)
from entitytax.calculator.tax_year_config import TaxYearConfig
from entitytax.models.inputs import ZakatDeductions, ZakatInput, ZakatMethod


@dataclass(frozen=True)
class ZakatRebate:
    rebate: float
    net_tax: float
    excess_zakat: float


@dataclass(frozen=True)
class ZakatDeduction:
    deduction: float
    excess_zakat: float


def meets_nisab(income: float, config: TaxYearConfig) -> bool:
    return income >= config.zakat_nisab


def zakat_on_gross_income(gross_income: float, config: TaxYearConfig) -> float:
    """2.5% of gross income, or nothing below the nisab."""
    if not meets_nisab(gross_income, config):
        return 0.0
    return round_currency(multiply(gross_income, config.zakat_rate))


def zakat_on_net_income(
    gross_income: float,
    deductions: Optional[ZakatDeductions],
    config: TaxYearConfig,
) -> float:
    """2.5% of income after EPF, expenses and other deductions; nothing below the nisab."""
    total_deductions = deductions.total if deductions else 0.0
    net_income = max(0.0, gross_income - total_deductions)
    if not meets_nisab(net_income, config):
        return 0.0
    return round_currency(multiply(net_income, config.zakat_rate))


def individual_zakat_amount(zakat: ZakatInput, total_income: float, config: TaxYearConfig) -> float:
    """Zakat paid by an individual: the declared amount, or auto-calculated."""
    if not zakat.should_auto_calculate:
        return zakat.amount_paid or 0.0
    if zakat.method is ZakatMethod.NET_INCOME:
        return zakat_on_net_income(total_income, zakat.deductions, config)
    return zakat_on_gross_income(total_income, config)


def company_zakat_amount(zakat: ZakatInput, aggregate_income: float, config: TaxYearConfig) -> float:
    """Zakat paid by a company: the declared amount, or 2.5% of aggregate income."""
    if not zakat.should_auto_calculate:
        return zakat.amount_paid or 0.0
    return round_currency(multiply(aggregate_income, config.zakat_rate))


def individual_zakat_rebate(zakat_paid: float, tax_payable: float) -> ZakatRebate:
    """
    Rebate zakat against tax payable.

    Examples:
        >>> individual_zakat_rebate(2500, 1000)
        ZakatRebate(rebate=1000.0, net_tax=0.0, excess_zakat=1500.0)
    """
    rebate = min_decimal(zakat_paid, tax_payable)
    return ZakatRebate(
        rebate=round_currency(rebate),
        net_tax=round_currency(max_decimal(0, subtract(tax_payable, rebate))),
        excess_zakat=round_currency(max_decimal(0, subtract(zakat_paid, tax_payable))),
    )


def business_zakat_deduction(
    zakat_paid: float, aggregate_income: float, config: TaxYearConfig
) -> ZakatDeduction:
    """Deduct company zakat from aggregate income, capped at 2.5% of it."""
    max_deduction = multiply(aggregate_income, config.zakat_max_business_deduction_rate)
    return ZakatDeduction(
        deduction=round_currency(min_decimal(zakat_paid, max_deduction)),
        excess_zakat=round_currency(max_decimal(0, subtract(zakat_paid, max_deduction))),
    )
