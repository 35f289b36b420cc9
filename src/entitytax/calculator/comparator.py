"""
Enterprise vs Sdn Bhd comparator.

Combines both scenario results into a recommendation, raises warnings the
numbers alone would hide (unaffordable salary, thin margins, SME status),
and searches for the profit at which both structures leave the owner with
the same cash.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from entitytax.cache.memo_cache import MISSING, BoundedCache
from entitytax.calculator.decimal_math import format_ringgit, round_currency, round_whole
from entitytax.calculator.sdn_bhd import SdnBhdCalculator
from entitytax.calculator.sole_prop import SolePropCalculator
from entitytax.calculator.tax_year_config import TaxYearConfig
from entitytax.config.settings import CrossoverSettings, EngineSettings, get_settings
from entitytax.logging_config import CalculationLogger
from entitytax.models.inputs import ResolvedInputs
from entitytax.models.results import (
    ComparisonResult,
    SdnBhdScenarioResult,
    SolePropScenarioResult,
    StructureChoice,
)

logger = logging.getLogger(__name__)


class ScenarioComparator:
    """
    Compares the two structures for one set of resolved inputs.

    Holds the crossover memo cache, so one instance should be reused across
    calculations; the cache is lock-guarded and safe to share between
    threads.
    """

    def __init__(
        self,
        config: Optional[TaxYearConfig] = None,
        settings: Optional[EngineSettings] = None,
        cache: Optional[BoundedCache] = None,
        crossover: Optional[CrossoverSettings] = None,
    ):
        self.config = config or TaxYearConfig.current()
        self.settings = settings or get_settings()
        self.search = crossover or self.settings.crossover
        self.cache = cache if cache is not None else BoundedCache(self.search.cache_size)
        self.sole_prop = SolePropCalculator(self.config)
        self.sdn_bhd = SdnBhdCalculator(self.config)

    # =========================================================================
    # COMPARISON
    # =========================================================================

    def compare(
        self,
        sole_prop_result: SolePropScenarioResult,
        sdn_bhd_result: SdnBhdScenarioResult,
        inputs: ResolvedInputs,
        calc_log: Optional[CalculationLogger] = None,
    ) -> ComparisonResult:
        """
        Build the comparison for two scenario results of the same inputs.

        Args:
            sole_prop_result: Enterprise outcome for ``inputs``
            sdn_bhd_result: Sdn Bhd outcome for ``inputs``
            inputs: The resolved inputs both results were computed from
            calc_log: Optional audit logger for this comparison

        Returns:
            ComparisonResult with recommendation, warnings and crossover
        """
        difference = sdn_bhd_result.net_cash - sole_prop_result.net_cash
        savings_if_switch = abs(difference)
        affordability = sdn_bhd_result.salary_affordability
        has_affordability_issue = affordability.company_would_be_insolvent

        warnings: List[str] = []
        if has_affordability_issue:
            warnings.append(
                "Your proposed salary exceeds what the company can afford. "
                f"The company would need an additional {format_ringgit(affordability.shortfall, 2)} "
                "to pay this salary. Maximum affordable salary: "
                f"{format_ringgit(affordability.max_affordable_salary / 12)}/month."
            )

        tight_margin = self._tight_margin_warning(sdn_bhd_result, inputs.business_profit)
        if tight_margin:
            warnings.append(tight_margin)

        has_sme_issue, sme_warning = self._sme_qualification(inputs)
        if sme_warning:
            warnings.append(sme_warning)

        which_is_better, recommendation = self._recommend(difference, savings_if_switch)
        if has_affordability_issue:
            recommendation = (
                "Warning: The Sdn Bhd scenario is not viable because your proposed salary "
                "exceeds the company's capacity. Consider reducing salary to "
                f"{format_ringgit(affordability.max_affordable_salary / 12)}/month or less."
            )
            if which_is_better is StructureChoice.SDN_BHD:
                which_is_better = StructureChoice.SOLE_PROP

        crossover = self.find_crossover(inputs, calc_log)

        if calc_log is not None:
            for warning in warnings:
                calc_log.log_warning(warning)

        return ComparisonResult(
            which_is_better=which_is_better,
            difference=round_currency(difference),
            savings_if_switch=round_currency(savings_if_switch),
            crossover_point_profit=crossover,
            recommendation=recommendation,
            sole_prop_result=sole_prop_result,
            sdn_bhd_result=sdn_bhd_result,
            has_affordability_issue=has_affordability_issue,
            has_sme_qualification_issue=has_sme_issue,
            warnings=tuple(warnings),
        )

    def _recommend(self, difference: float, savings: float) -> Tuple[StructureChoice, str]:
        amount = f"RM{round_currency(savings):,.2f}"
        if abs(difference) < self.settings.similarity_threshold:
            return (
                StructureChoice.SIMILAR,
                f"Both structures are similar at your current profit. The difference is only {amount}.",
            )
        if difference > 0:
            return (
                StructureChoice.SDN_BHD,
                f"Better to switch to Sdn Bhd now. You'll save {amount} per year "
                "compared to staying as Enterprise.",
            )
        return (
            StructureChoice.SOLE_PROP,
            f"Better to stay as Enterprise. You save {amount} compared to switching to Sdn Bhd.",
        )

    def _tight_margin_warning(self, sdn_bhd_result: SdnBhdScenarioResult, business_profit: float) -> Optional[str]:
        if business_profit <= 0:
            return None
        salary_cost = (
            sdn_bhd_result.breakdown.annual_salary
            + sdn_bhd_result.employer_epf
            + sdn_bhd_result.employer_socso
        )
        ratio = salary_cost / business_profit
        if ratio <= self.settings.tight_margin_ratio:
            return None
        return (
            f"Salary costs use {ratio:.0%} of business profit, leaving little room "
            "for dividends or retained earnings."
        )

    def _sme_qualification(self, inputs: ResolvedInputs) -> Tuple[bool, Optional[str]]:
        """
        SME rates (15-17%) need resident control and revenue within the limit.

        The numbers still assume SME rates; this only flags the risk.
        """
        high_revenue = (
            inputs.audit_criteria is not None
            and inputs.audit_criteria.revenue > self.config.sme_revenue_limit
        )
        flat_rate = f"{self.config.standard_corporate_rate:.0%}"
        if inputs.has_foreign_ownership:
            return True, (
                "Your company may not qualify for SME tax rates (15-17%) due to foreign ownership. "
                f"Companies with ≥{self.config.sme_foreign_ownership_limit:.0%} foreign ownership "
                f"pay a flat {flat_rate} corporate tax rate. "
                "The Sdn Bhd calculation shown assumes SME rates - actual tax may be higher."
            )
        if high_revenue:
            return True, (
                "Your company may not qualify for SME tax rates (15-17%) due to high revenue. "
                f"Companies with revenue above {format_ringgit(self.config.sme_revenue_limit)} "
                f"pay a flat {flat_rate} corporate tax rate. "
                "The Sdn Bhd calculation shown assumes SME rates - actual tax may be higher."
            )
        return False, None

    # =========================================================================
    # CROSSOVER SEARCH
    # =========================================================================

    def difference_at(self, inputs: ResolvedInputs, business_profit: float) -> float:
        """Sdn Bhd net cash minus Enterprise net cash at ``business_profit``."""
        at_profit = inputs.with_business_profit(business_profit)
        return self.sdn_bhd.calculate(at_profit).net_cash - self.sole_prop.calculate(at_profit).net_cash

    def find_crossover(
        self, inputs: ResolvedInputs, calc_log: Optional[CalculationLogger] = None
    ) -> Optional[int]:
        """
        Profit at which both structures produce equal net cash.

        Order: memoized result, then an early exit when the current profit
        is already within the threshold, then a sign test at the search
        bounds, then bisection. Search outcomes (including "no crossover")
        are memoized by every input except the business profit; the early
        exit is not, since it depends on the current profit.

        Returns:
            Whole-ringgit profit within the search bounds, or None when the
            structures never swap places in range or the search does not
            converge.
        """
        key = inputs.cache_key()
        cached = self.cache.get(key, MISSING)
        if cached is not MISSING:
            self._log_crossover(calc_log, cached, "cache")
            return cached

        if abs(self.difference_at(inputs, inputs.business_profit)) < self.search.early_exit_threshold:
            result = round_whole(inputs.business_profit)
            self._log_crossover(calc_log, result, "current_profit")
            return result

        result = self._bisect(inputs)
        self.cache.set(key, result)
        self._log_crossover(calc_log, result, "search")
        return result

    def _bisect(self, inputs: ResolvedInputs) -> Optional[int]:
        low = self.search.min_profit
        high = self.search.max_profit
        low_diff = self.difference_at(inputs, low)
        high_diff = self.difference_at(inputs, high)

        if (low_diff > 0 and high_diff > 0) or (low_diff < 0 and high_diff < 0):
            return None

        iterations = 0
        while iterations < self.search.max_iterations and (high - low) > self.search.tolerance:
            mid = (low + high) / 2
            mid_diff = self.difference_at(inputs, mid)
            if abs(mid_diff) < self.search.tolerance:
                return round_whole(mid)
            if (low_diff > 0 and mid_diff > 0) or (low_diff < 0 and mid_diff < 0):
                low = mid
            else:
                high = mid
            iterations += 1

        if iterations >= self.search.max_iterations:
            logger.warning(
                f"Crossover search did not converge after {iterations} iterations "
                f"(interval {low:.2f}-{high:.2f})"
            )
            return None
        return round_whole((low + high) / 2)

    @staticmethod
    def _log_crossover(calc_log: Optional[CalculationLogger], result: Optional[int], source: str) -> None:
        if calc_log is not None:
            calc_log.log_crossover(result, source)
        else:
            logger.debug(f"Crossover {result} ({source})")
