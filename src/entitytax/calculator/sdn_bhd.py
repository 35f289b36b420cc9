"""
Sdn Bhd (private limited company) scenario.

Cash flow in two layers:

Company:
    taxable profit = business profit - salary - employer EPF - employer SOCSO
                     - zakat deduction (capped at 2.5% of aggregate income)
    corporate tax  = SME progressive tax on taxable profit
    post-tax profit = taxable profit - corporate tax
    dividends      = post-tax profit x distribution %

Owner:
    take-home salary = salary - employee EPF - employee SOCSO
    personal tax     = progressive tax on (salary + other income - reliefs),
                       with the EPF relief set from actual contributions
    net cash         = take-home + other income - personal tax + dividends
                       - dividend tax - compliance costs - zakat paid

Net cash may be negative; that is how an unaffordable salary shows up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from entitytax.calculator.brackets import rate_for
from entitytax.calculator.contributions import (
    MONTHS,
    dividend_tax as calculate_dividend_tax,
    employee_epf as calculate_employee_epf,
    employee_socso as calculate_employee_socso,
    employer_epf as calculate_employer_epf,
    employer_socso as calculate_employer_socso,
    is_audit_exempt,
    max_affordable_salary,
)
from entitytax.calculator.corporate_tax import calculate_corporate_tax
from entitytax.calculator.decimal_math import (
    format_ringgit,
    require_non_negative,
    round_currency,
)
from entitytax.calculator.personal_tax import calculate_personal_tax
from entitytax.calculator.tax_year_config import TaxYearConfig
from entitytax.calculator.zakat import business_zakat_deduction, company_zakat_amount, meets_nisab
from entitytax.models.inputs import Reliefs, ResolvedInputs
from entitytax.models.results import (
    SalaryAffordability,
    SdnBhdBreakdown,
    SdnBhdScenarioResult,
    StepKind,
    TaxBracketBreakdown,
    WaterfallStep,
    ZakatResult,
)

logger = logging.getLogger(__name__)


@dataclass
class _CompanyLayer:
    annual_salary: float
    employer_epf: float
    employer_epf_rate: float
    employer_socso: float
    aggregate_income: float
    zakat_amount: float
    zakat_deduction: float
    excess_zakat: float
    taxable_profit: float
    corporate_tax: float
    corporate_breakdown: Tuple[TaxBracketBreakdown, ...]
    corporate_tax_before_zakat: Optional[float]
    post_tax_profit: float
    distribution_percent: float
    dividends: float
    dividend_tax: float
    retained_earnings: float


@dataclass
class _OwnerLayer:
    employee_epf: float
    employee_socso: float
    salary_after_epf: float
    personal_tax: float
    personal_breakdown: Tuple[TaxBracketBreakdown, ...]
    total_cash_from_income: float


class SdnBhdCalculator:
    """Computes the Sdn Bhd cash outcome for resolved inputs."""

    def __init__(self, config: Optional[TaxYearConfig] = None):
        self.config = config or TaxYearConfig.current()

    def calculate(self, inputs: ResolvedInputs) -> SdnBhdScenarioResult:
        """
        Run the Sdn Bhd scenario.

        Raises:
            ValueError: if profit, salary, other income or compliance costs
                are negative or not finite.
        """
        require_non_negative(inputs.business_profit, "Business profit")
        require_non_negative(inputs.monthly_salary, "Monthly salary")
        require_non_negative(inputs.other_income, "Other income")
        require_non_negative(inputs.compliance_costs, "Compliance costs")

        company = self._company_layer(inputs)
        owner = self._owner_layer(inputs, company.annual_salary)

        total_compliance_cost = inputs.compliance_costs
        if inputs.audit_criteria is not None and not is_audit_exempt(inputs.audit_criteria, self.config):
            total_compliance_cost += inputs.audit_cost

        net_cash = (
            owner.total_cash_from_income
            + company.dividends
            - company.dividend_tax
            - total_compliance_cost
            - company.zakat_amount
        )
        epf_savings = company.employer_epf + owner.employee_epf

        affordability = self._affordability(inputs.business_profit, company)

        zakat_result: Optional[ZakatResult] = None
        if inputs.zakat.enabled:
            zakat_result = ZakatResult(
                enabled=True,
                zakat_amount=round_currency(company.zakat_amount),
                meets_nisab=meets_nisab(company.aggregate_income, self.config),
                tax_benefit=company.zakat_deduction,
                excess_zakat=company.excess_zakat,
            )
        show_zakat = inputs.zakat.enabled and company.zakat_amount > 0

        logger.debug(
            f"Sdn Bhd: profit={inputs.business_profit:.2f} salary={company.annual_salary:.2f} "
            f"corporate_tax={company.corporate_tax:.2f} personal_tax={owner.personal_tax:.2f} "
            f"net={net_cash:.2f}"
        )

        return SdnBhdScenarioResult(
            corporate_tax=round_currency(company.corporate_tax),
            personal_tax=round_currency(owner.personal_tax),
            employer_epf=round_currency(company.employer_epf),
            employee_epf=round_currency(owner.employee_epf),
            employer_socso=round_currency(company.employer_socso),
            employee_socso=round_currency(owner.employee_socso),
            total_compliance_cost=round_currency(total_compliance_cost),
            net_cash=round_currency(net_cash),
            salary_affordability=affordability,
            breakdown=SdnBhdBreakdown(
                annual_salary=round_currency(company.annual_salary),
                company_taxable_profit=round_currency(company.taxable_profit),
                post_tax_profit=round_currency(company.post_tax_profit),
                dividends=round_currency(company.dividends),
                dividend_tax=round_currency(company.dividend_tax),
                retained_earnings=round_currency(company.retained_earnings),
                salary_after_epf=round_currency(owner.salary_after_epf),
                salary_after_tax=round_currency(
                    max(0.0, owner.total_cash_from_income - inputs.other_income)
                ),
                other_income=round_currency(inputs.other_income),
                business_profit=round_currency(inputs.business_profit),
            ),
            company_waterfall=tuple(self._company_waterfall(inputs, company, show_zakat)),
            personal_waterfall=tuple(
                self._personal_waterfall(inputs, company, owner, total_compliance_cost, net_cash, show_zakat)
            ),
            insights=tuple(self._insights(company, epf_savings, total_compliance_cost, show_zakat)),
            epf_savings=round_currency(epf_savings),
            corporate_tax_bracket_breakdown=company.corporate_breakdown,
            personal_tax_bracket_breakdown=owner.personal_breakdown,
            zakat=zakat_result,
            corporate_tax_before_zakat=(
                round_currency(company.corporate_tax_before_zakat)
                if company.corporate_tax_before_zakat is not None
                else None
            ),
        )

    # =========================================================================
    # LAYERS
    # =========================================================================

    def _company_layer(self, inputs: ResolvedInputs) -> _CompanyLayer:
        config = self.config
        annual_salary = inputs.monthly_salary * MONTHS
        employer_epf = calculate_employer_epf(annual_salary, config)
        employer_socso = calculate_employer_socso(inputs.monthly_salary, config)

        taxable_before_zakat = inputs.business_profit - annual_salary - employer_epf - employer_socso
        aggregate_income = max(0.0, taxable_before_zakat)

        zakat_amount = 0.0
        zakat_deduction = 0.0
        excess_zakat = 0.0
        if inputs.zakat.enabled:
            zakat_amount = company_zakat_amount(inputs.zakat, aggregate_income, config)
            deduction = business_zakat_deduction(zakat_amount, aggregate_income, config)
            zakat_deduction = deduction.deduction
            excess_zakat = deduction.excess_zakat

        taxable_profit = max(0.0, taxable_before_zakat - zakat_deduction)
        corporate = calculate_corporate_tax(taxable_profit, config)
        corporate_tax = corporate.tax
        corporate_tax_before_zakat = (
            calculate_corporate_tax(aggregate_income, config).tax if inputs.zakat.enabled else None
        )

        post_tax_profit = max(0.0, taxable_profit - corporate_tax)
        distribution_percent = max(0.0, min(100.0, inputs.dividend_distribution_percent))
        dividends = max(0.0, post_tax_profit * (distribution_percent / 100))
        retained_earnings = post_tax_profit - dividends
        dividend_tax = (
            calculate_dividend_tax(dividends, config)
            if inputs.apply_dividend_surcharge and dividends > 0
            else 0.0
        )

        return _CompanyLayer(
            annual_salary=annual_salary,
            employer_epf=employer_epf,
            employer_epf_rate=rate_for(inputs.monthly_salary, config.epf_employer_tiers),
            employer_socso=employer_socso,
            aggregate_income=aggregate_income,
            zakat_amount=zakat_amount,
            zakat_deduction=zakat_deduction,
            excess_zakat=excess_zakat,
            taxable_profit=taxable_profit,
            corporate_tax=corporate_tax,
            corporate_breakdown=corporate.breakdown,
            corporate_tax_before_zakat=corporate_tax_before_zakat,
            post_tax_profit=post_tax_profit,
            distribution_percent=distribution_percent,
            dividends=dividends,
            dividend_tax=dividend_tax,
            retained_earnings=retained_earnings,
        )

    def _effective_reliefs(self, inputs: ResolvedInputs, employee_epf: float) -> Reliefs:
        # EPF relief always reflects what was actually contributed
        return inputs.reliefs.with_epf_relief(min(employee_epf, self.config.epf_max_relief))

    def _owner_layer(self, inputs: ResolvedInputs, annual_salary: float) -> _OwnerLayer:
        employee_epf = calculate_employee_epf(annual_salary, self.config)
        employee_socso = calculate_employee_socso(inputs.monthly_salary, self.config)
        salary_after_epf = annual_salary - employee_epf - employee_socso

        personal = calculate_personal_tax(
            annual_salary + inputs.other_income,
            self._effective_reliefs(inputs, employee_epf),
            self.config,
        )

        return _OwnerLayer(
            employee_epf=employee_epf,
            employee_socso=employee_socso,
            salary_after_epf=salary_after_epf,
            personal_tax=personal.tax,
            personal_breakdown=personal.breakdown,
            total_cash_from_income=salary_after_epf + inputs.other_income - personal.tax,
        )

    def _affordability(self, business_profit: float, company: _CompanyLayer) -> SalaryAffordability:
        total_salary_cost = company.annual_salary + company.employer_epf + company.employer_socso
        is_affordable = total_salary_cost <= business_profit
        return SalaryAffordability(
            max_affordable_salary=max_affordable_salary(business_profit, self.config),
            is_affordable=is_affordable,
            shortfall=0.0 if is_affordable else round_currency(total_salary_cost - business_profit),
            company_would_be_insolvent=not is_affordable,
        )

    # =========================================================================
    # PRESENTATION
    # =========================================================================

    def _company_waterfall(
        self, inputs: ResolvedInputs, company: _CompanyLayer, show_zakat: bool
    ) -> List[WaterfallStep]:
        steps = [
            WaterfallStep("Business Profit", round_currency(inputs.business_profit), StepKind.ADD),
            WaterfallStep("Director Salary", round_currency(company.annual_salary), StepKind.SUBTRACT),
            WaterfallStep(
                f"Employer EPF ({company.employer_epf_rate:.0%})",
                round_currency(company.employer_epf),
                StepKind.SUBTRACT,
                indent=True,
            ),
            WaterfallStep("Employer SOCSO", round_currency(company.employer_socso), StepKind.SUBTRACT, indent=True),
        ]

        if show_zakat:
            steps += [
                WaterfallStep("Aggregate Income", round_currency(company.aggregate_income), StepKind.EQUALS),
                WaterfallStep(
                    "Zakat Deduction (max 2.5%)", round_currency(company.zakat_deduction), StepKind.SUBTRACT
                ),
                WaterfallStep(
                    "Taxable Profit After Zakat", round_currency(company.taxable_profit), StepKind.EQUALS
                ),
            ]
        else:
            steps.append(
                WaterfallStep("Company Taxable Profit", round_currency(company.taxable_profit), StepKind.EQUALS)
            )

        steps += [
            WaterfallStep("Corporate Tax", round_currency(company.corporate_tax), StepKind.SUBTRACT),
            WaterfallStep("Post-Tax Profit", round_currency(company.post_tax_profit), StepKind.EQUALS),
        ]

        if company.distribution_percent > 0 and company.post_tax_profit > 0:
            steps.append(
                WaterfallStep(
                    f"Dividends ({company.distribution_percent:g}%)",
                    round_currency(company.dividends),
                    StepKind.SUBTRACT,
                )
            )
            if company.dividend_tax > 0:
                steps.append(
                    WaterfallStep(
                        "Dividend Tax (2%)", round_currency(company.dividend_tax), StepKind.SUBTRACT, indent=True
                    )
                )

        if company.retained_earnings > 0:
            steps.append(
                WaterfallStep("Retained in Company", round_currency(company.retained_earnings), StepKind.EQUALS)
            )
        return steps

    def _personal_waterfall(
        self,
        inputs: ResolvedInputs,
        company: _CompanyLayer,
        owner: _OwnerLayer,
        total_compliance_cost: float,
        net_cash: float,
        show_zakat: bool,
    ) -> List[WaterfallStep]:
        steps = [
            WaterfallStep("Salary (gross)", round_currency(company.annual_salary), StepKind.ADD),
            WaterfallStep("Employee EPF (11%)", round_currency(owner.employee_epf), StepKind.SUBTRACT, indent=True),
            WaterfallStep("Employee SOCSO", round_currency(owner.employee_socso), StepKind.SUBTRACT, indent=True),
            WaterfallStep("Salary Take-Home", round_currency(owner.salary_after_epf), StepKind.EQUALS),
        ]
        if inputs.other_income > 0:
            steps.append(WaterfallStep("Other Income", round_currency(inputs.other_income), StepKind.ADD))

        steps.append(WaterfallStep("Personal Tax", round_currency(owner.personal_tax), StepKind.SUBTRACT))

        if company.dividends > 0:
            steps.append(
                WaterfallStep(
                    "Dividends Received", round_currency(company.dividends - company.dividend_tax), StepKind.ADD
                )
            )

        steps.append(WaterfallStep("Compliance Costs", round_currency(total_compliance_cost), StepKind.SUBTRACT))

        if show_zakat:
            steps.append(WaterfallStep("Business Zakat Paid", round_currency(company.zakat_amount), StepKind.SUBTRACT))

        steps.append(WaterfallStep("Net Cash to You", round_currency(net_cash), StepKind.TOTAL, highlight=True))
        return steps

    @staticmethod
    def _insights(
        company: _CompanyLayer, epf_savings: float, total_compliance_cost: float, show_zakat: bool
    ) -> List[str]:
        insights: List[str] = []

        if show_zakat:
            tax_savings = (company.corporate_tax_before_zakat or 0.0) - company.corporate_tax
            if tax_savings > 0:
                insights.append(f"Zakat deduction saves ~{format_ringgit(tax_savings)} in corporate tax")
            if company.excess_zakat > 0:
                insights.append(
                    f"{format_ringgit(company.excess_zakat)} zakat exceeds max deduction (2.5% of income)"
                )

        if epf_savings > 0:
            insights.append(f"{format_ringgit(epf_savings)}/year going to EPF (forced retirement savings)")
        if company.retained_earnings > 0:
            insights.append(
                f"{format_ringgit(company.retained_earnings)} retained in company (available for reinvestment)"
            )

        insights.append("Limited liability - personal assets protected")
        insights.append(f"Higher compliance burden (~{format_ringgit(total_compliance_cost)}/year)")
        return insights


def calculate_sdn_bhd_scenario(
    inputs: ResolvedInputs, config: Optional[TaxYearConfig] = None
) -> SdnBhdScenarioResult:
    """Convenience wrapper around ``SdnBhdCalculator``."""
    return SdnBhdCalculator(config).calculate(inputs)
