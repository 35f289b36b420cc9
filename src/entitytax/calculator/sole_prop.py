"""
Sole Proprietorship (Enterprise) scenario.

All business profit is the owner's personal income:

    total income  = business profit + other income
    personal tax  = progressive tax on (total income - reliefs)
    final tax     = personal tax - zakat rebate (never below zero)
    net cash      = total income - final tax - zakat paid
"""

from __future__ import annotations

import logging
from typing import List, Optional

from entitytax.calculator.decimal_math import (
    format_ringgit,
    require_non_negative,
    round_currency,
    safe_divide_for_rate,
)
from entitytax.calculator.personal_tax import calculate_personal_tax
from entitytax.calculator.tax_year_config import TaxYearConfig
from entitytax.calculator.zakat import individual_zakat_amount, individual_zakat_rebate, meets_nisab
from entitytax.models.inputs import ResolvedInputs
from entitytax.models.results import (
    SolePropBreakdown,
    SolePropScenarioResult,
    StepKind,
    WaterfallStep,
    ZakatResult,
)

logger = logging.getLogger(__name__)

ENTERPRISE_INSIGHTS = (
    "No liability protection - personal assets at risk",
    "No forced savings (EPF) - you manage your own retirement",
    "Minimal compliance costs (~RM60/year)",
)


class SolePropCalculator:
    """Computes the Enterprise cash outcome for resolved inputs."""

    def __init__(self, config: Optional[TaxYearConfig] = None):
        self.config = config or TaxYearConfig.current()

    def calculate(self, inputs: ResolvedInputs) -> SolePropScenarioResult:
        """
        Run the Enterprise scenario.

        Raises:
            ValueError: if business profit or other income is negative or
                not finite.
        """
        require_non_negative(inputs.business_profit, "Business profit")
        require_non_negative(inputs.other_income, "Other income")

        total_income = inputs.business_profit + inputs.other_income
        personal = calculate_personal_tax(total_income, inputs.reliefs, self.config)
        tax_before_zakat = personal.tax

        zakat_result: Optional[ZakatResult] = None
        zakat_amount = 0.0
        zakat_rebate = 0.0
        excess_zakat = 0.0
        if inputs.zakat.enabled:
            zakat_amount = individual_zakat_amount(inputs.zakat, total_income, self.config)
            rebate = individual_zakat_rebate(zakat_amount, tax_before_zakat)
            zakat_rebate = rebate.rebate
            excess_zakat = rebate.excess_zakat
            zakat_result = ZakatResult(
                enabled=True,
                zakat_amount=round_currency(zakat_amount),
                meets_nisab=meets_nisab(total_income, self.config),
                tax_benefit=zakat_rebate,
                excess_zakat=excess_zakat,
            )

        final_tax = max(0.0, tax_before_zakat - zakat_rebate)
        net_cash = total_income - final_tax - zakat_amount
        show_zakat = inputs.zakat.enabled and zakat_amount > 0

        logger.debug(
            f"Enterprise: income={total_income:.2f} tax={final_tax:.2f} "
            f"zakat={zakat_amount:.2f} net={net_cash:.2f}"
        )

        return SolePropScenarioResult(
            personal_tax=round_currency(final_tax),
            net_cash=round_currency(net_cash),
            effective_tax_rate=float(safe_divide_for_rate(final_tax, total_income)),
            breakdown=SolePropBreakdown(
                business_profit=round_currency(inputs.business_profit),
                other_income=round_currency(inputs.other_income),
                total_income=round_currency(total_income),
                total_reliefs=personal.total_reliefs,
                taxable_income=personal.taxable_income,
            ),
            waterfall=tuple(
                self._waterfall(
                    inputs,
                    total_income=total_income,
                    total_reliefs=personal.total_reliefs,
                    taxable_income=personal.taxable_income,
                    tax_before_zakat=tax_before_zakat,
                    zakat_rebate=zakat_rebate,
                    final_tax=final_tax,
                    zakat_amount=zakat_amount,
                    net_cash=net_cash,
                    show_zakat=show_zakat,
                )
            ),
            insights=tuple(self._insights(show_zakat, zakat_rebate, excess_zakat)),
            tax_bracket_breakdown=personal.breakdown,
            zakat=zakat_result,
            tax_before_zakat_rebate=round_currency(tax_before_zakat) if inputs.zakat.enabled else None,
        )

    def _waterfall(
        self,
        inputs: ResolvedInputs,
        *,
        total_income: float,
        total_reliefs: float,
        taxable_income: float,
        tax_before_zakat: float,
        zakat_rebate: float,
        final_tax: float,
        zakat_amount: float,
        net_cash: float,
        show_zakat: bool,
    ) -> List[WaterfallStep]:
        steps = [WaterfallStep("Business Profit", round_currency(inputs.business_profit), StepKind.ADD)]
        if inputs.other_income > 0:
            steps.append(WaterfallStep("Other Income", round_currency(inputs.other_income), StepKind.ADD))

        steps += [
            WaterfallStep("Gross Income", round_currency(total_income), StepKind.EQUALS),
            WaterfallStep("Personal Reliefs", total_reliefs, StepKind.SUBTRACT),
            WaterfallStep("Taxable Income", taxable_income, StepKind.EQUALS),
        ]

        if show_zakat:
            steps += [
                WaterfallStep("Income Tax (before zakat)", round_currency(tax_before_zakat), StepKind.SUBTRACT),
                WaterfallStep("Zakat Rebate (100%)", round_currency(zakat_rebate), StepKind.ADD, indent=True),
                WaterfallStep("Net Tax After Zakat", round_currency(final_tax), StepKind.EQUALS),
                WaterfallStep("Zakat Paid", round_currency(zakat_amount), StepKind.SUBTRACT),
            ]
        else:
            steps.append(WaterfallStep("Personal Tax", round_currency(final_tax), StepKind.SUBTRACT))

        steps.append(WaterfallStep("Net Cash to You", round_currency(net_cash), StepKind.TOTAL, highlight=True))
        return steps

    @staticmethod
    def _insights(show_zakat: bool, zakat_rebate: float, excess_zakat: float) -> List[str]:
        insights = list(ENTERPRISE_INSIGHTS)
        if show_zakat:
            # Zakat notes lead the list; the excess note comes first.
            if zakat_rebate > 0:
                insights.insert(0, f"Zakat rebate saves you {format_ringgit(zakat_rebate)} in tax")
            if excess_zakat > 0:
                insights.insert(0, f"{format_ringgit(excess_zakat)} zakat exceeds tax (spiritual benefit only)")
        return insights


def calculate_sole_prop_scenario(
    inputs: ResolvedInputs, config: Optional[TaxYearConfig] = None
) -> SolePropScenarioResult:
    """Convenience wrapper around ``SolePropCalculator``."""
    return SolePropCalculator(config).calculate(inputs)
