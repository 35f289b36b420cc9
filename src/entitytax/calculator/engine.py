"""
Comparison engine facade.

Single entry point for hosts:

    raw inputs -> sanitize / validate -> resolve defaults and input mode
               -> Enterprise and Sdn Bhd calculators -> comparator

Calculators are pure; the only state an engine holds is the comparator's
crossover cache, so hosts should keep one engine per process.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union
from uuid import uuid4

from pydantic import ValidationError

from entitytax.cache.memo_cache import BoundedCache
from entitytax.calculator.comparator import ScenarioComparator
from entitytax.calculator.personal_tax import default_reliefs, required_income_for_net_cash
from entitytax.calculator.tax_year_config import TaxYearConfig
from entitytax.config.settings import EngineSettings, get_settings
from entitytax.logging_config import CalculationLogger, calculation_id_var
from entitytax.models.inputs import ResolvedInputs, TargetMode, TaxCalculationInputs, ZakatInput
from entitytax.models.results import ComparisonResult, SdnBhdScenarioResult, SolePropScenarioResult
from entitytax.validation.input_validator import (
    ValidationIssue,
    issues_from_validation_error,
    sanitize_inputs,
    validate_inputs,
)

logger = logging.getLogger(__name__)

InputsLike = Union[TaxCalculationInputs, Mapping[str, Any]]


@dataclass(frozen=True)
class EvaluationOutcome:
    """Comparison (when one could be produced) plus every input issue found."""
    result: Optional[ComparisonResult]
    issues: Tuple[ValidationIssue, ...] = ()

    @property
    def errors(self) -> Tuple[ValidationIssue, ...]:
        return tuple(issue for issue in self.issues if issue.severity == "error")

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class ComparisonEngine:
    """
    Runs both scenarios and compares them.

    Usage:
        engine = ComparisonEngine()
        result = engine.calculate(TaxCalculationInputs(business_profit=300_000))
        print(result.which_is_better, result.difference)
    """

    def __init__(
        self,
        config: Optional[TaxYearConfig] = None,
        settings: Optional[EngineSettings] = None,
        cache: Optional[BoundedCache] = None,
    ):
        self.settings = settings or get_settings()
        self.config = config or TaxYearConfig.for_year(self.settings.tax_year)
        self.comparator = ScenarioComparator(self.config, self.settings, cache)
        logger.info(f"Comparison engine ready for {self.config.year_assessment}")

    @property
    def cache(self) -> BoundedCache:
        return self.comparator.cache

    def resolve_inputs(self, inputs: InputsLike) -> ResolvedInputs:
        """
        Apply defaults and settle the input mode.

        In target mode the business profit is whatever gross income yields
        the monthly target (x12) after personal tax, less other income.
        """
        inputs = self._as_model(inputs)
        settings = self.settings
        reliefs = inputs.reliefs if inputs.reliefs is not None else default_reliefs(self.config)

        business_profit = inputs.business_profit
        target_net_income: Optional[float] = None
        if isinstance(inputs.mode, TargetMode):
            target_net_income = inputs.mode.target_net_income * 12
            required = required_income_for_net_cash(
                target_net_income, reliefs.total(self.config.relief_limits), self.config
            )
            business_profit = max(0.0, required - inputs.other_income)
            logger.debug(
                f"Target mode: RM{target_net_income:,.2f}/year needs business profit "
                f"RM{business_profit:,.2f}"
            )

        return ResolvedInputs(
            business_profit=business_profit,
            other_income=inputs.other_income,
            monthly_salary=(
                settings.default_monthly_salary if inputs.monthly_salary is None else inputs.monthly_salary
            ),
            compliance_costs=(
                settings.default_compliance_costs if inputs.compliance_costs is None else inputs.compliance_costs
            ),
            audit_cost=0.0 if inputs.audit_cost is None else inputs.audit_cost,
            audit_criteria=inputs.audit_criteria,
            reliefs=reliefs,
            apply_dividend_surcharge=inputs.apply_ya2025_dividend_surcharge,
            dividend_distribution_percent=(
                100.0 if inputs.dividend_distribution_percent is None else inputs.dividend_distribution_percent
            ),
            has_foreign_ownership=inputs.has_foreign_ownership,
            zakat=inputs.zakat if inputs.zakat is not None else ZakatInput(),
            target_net_income=target_net_income,
        )

    def calculate_sole_prop(self, inputs: InputsLike) -> SolePropScenarioResult:
        """Enterprise scenario only."""
        return self.comparator.sole_prop.calculate(self.resolve_inputs(inputs))

    def calculate_sdn_bhd(self, inputs: InputsLike) -> SdnBhdScenarioResult:
        """Sdn Bhd scenario only."""
        return self.comparator.sdn_bhd.calculate(self.resolve_inputs(inputs))

    def calculate(self, inputs: InputsLike) -> ComparisonResult:
        """
        Compare both structures.

        Inputs are used as given; run ``sanitize_inputs`` first (or call
        ``evaluate``) when they may be out of range.

        Raises:
            ValueError: if a required amount is negative or not finite.
        """
        calculation_id = uuid4().hex[:12]
        token = calculation_id_var.set(calculation_id)
        try:
            model = self._as_model(inputs)
            resolved = self.resolve_inputs(model)

            calc_log = CalculationLogger(calculation_id=calculation_id)
            calc_log.start_comparison(self.config.year_assessment, model.mode.kind, resolved.business_profit)

            sole_prop = self.comparator.sole_prop.calculate(resolved)
            calc_log.log_scenario("soleProp", sole_prop.net_cash, sole_prop.personal_tax)

            sdn_bhd = self.comparator.sdn_bhd.calculate(resolved)
            calc_log.log_scenario(
                "sdnBhd",
                sdn_bhd.net_cash,
                sdn_bhd.corporate_tax + sdn_bhd.personal_tax,
                insolvent=sdn_bhd.salary_affordability.company_would_be_insolvent,
            )

            result = self.comparator.compare(sole_prop, sdn_bhd, resolved, calc_log)
            calc_log.log_result(result.which_is_better.value, result.difference, len(result.warnings))
            return result
        finally:
            calculation_id_var.reset(token)

    def evaluate(self, raw: InputsLike) -> EvaluationOutcome:
        """
        Validate, sanitize and compare in one call.

        Value problems are reported and repaired, never raised; the
        comparison runs on the repaired inputs. Only structurally invalid
        input (wrong types, missing business profit) yields no result.
        """
        try:
            model = self._as_model(raw)
        except ValidationError as exc:
            issues = issues_from_validation_error(exc)
            logger.warning(f"Rejected structurally invalid inputs: {len(issues)} issue(s)")
            return EvaluationOutcome(result=None, issues=tuple(issues))

        issues = validate_inputs(model)
        for issue in issues:
            logger.info(f"Input issue on {issue.field}: {issue.message}")

        return EvaluationOutcome(result=self.calculate(sanitize_inputs(model)), issues=tuple(issues))

    @staticmethod
    def _as_model(inputs: InputsLike) -> TaxCalculationInputs:
        if isinstance(inputs, TaxCalculationInputs):
            return inputs
        return TaxCalculationInputs.model_validate(inputs)


# Process-wide default engine
_default_engine: Optional[ComparisonEngine] = None
_default_engine_lock = threading.Lock()


def get_default_engine() -> ComparisonEngine:
    """Get the shared engine, building it on first use."""
    global _default_engine
    with _default_engine_lock:
        if _default_engine is None:
            _default_engine = ComparisonEngine()
        return _default_engine


def reset_default_engine() -> None:
    """Drop the shared engine and its crossover cache (useful for testing)."""
    global _default_engine
    with _default_engine_lock:
        _default_engine = None


def compare_structures(inputs: InputsLike) -> ComparisonResult:
    """Compare both structures with the shared engine."""
    return get_default_engine().calculate(inputs)
