"""Tests for the structure comparator: recommendation and warnings."""

import pytest

from entitytax.models.results import StructureChoice


class TestRecommendation:

    def test_enterprise_better(self, engine):
        result = engine.calculate({"business_profit": 300_000})

        assert result.which_is_better is StructureChoice.SOLE_PROP
        assert result.difference == -4069.5
        assert result.savings_if_switch == 4069.5
        assert result.recommendation == (
            "Better to stay as Enterprise. You save RM4,069.50 compared to switching to Sdn Bhd."
        )
        assert result.warnings == ()

    def test_sdn_bhd_better(self, engine):
        result = engine.calculate(
            {"business_profit": 1_000_000, "monthly_salary": 10_000, "compliance_costs": 10_000}
        )

        assert result.which_is_better is StructureChoice.SDN_BHD
        assert result.sole_prop_result.net_cash == 745_300
        assert result.sdn_bhd_result.net_cash == 791_016
        assert result.difference == 45_716
        assert result.recommendation.startswith("Better to switch to Sdn Bhd now. You'll save RM45,716.00")

    def test_similar_below_threshold(self, engine):
        result = engine.calculate({"business_profit": 300_000, "monthly_salary": 0})

        assert result.difference == 660
        assert result.which_is_better is StructureChoice.SIMILAR
        assert result.recommendation.endswith("The difference is only RM660.00.")

    @pytest.mark.parametrize("profit", [0, 50_000, 150_000, 500_000])
    def test_savings_is_absolute_difference(self, engine, profit):
        result = engine.calculate({"business_profit": profit})
        assert result.savings_if_switch == abs(result.difference)
        assert result.difference == pytest.approx(
            result.sdn_bhd_result.net_cash - result.sole_prop_result.net_cash, abs=0.01
        )


class TestWarnings:

    def test_unaffordable_salary_downgrades_recommendation(self, engine):
        result = engine.calculate({"business_profit": 100_000, "monthly_salary": 15_000})

        assert result.difference > 0
        assert result.has_affordability_issue
        assert result.which_is_better is StructureChoice.SOLE_PROP
        assert result.recommendation.startswith("Warning: The Sdn Bhd scenario is not viable")
        assert "additional RM101,600.00" in result.warnings[0]
        assert "Maximum affordable salary: RM7,440/month." in result.warnings[0]

    def test_unaffordable_similar_stays_similar(self, engine):
        result = engine.calculate({"business_profit": 100_000, "monthly_salary": 10_000})

        assert result.difference == -2000
        assert result.has_affordability_issue
        assert result.which_is_better is StructureChoice.SIMILAR

    def test_tight_margin(self, engine):
        result = engine.calculate({"business_profit": 80_000})

        assert not result.has_affordability_issue
        assert result.warnings == (
            "Salary costs use 86% of business profit, leaving little room "
            "for dividends or retained earnings.",
        )

    def test_foreign_ownership(self, engine):
        result = engine.calculate({"business_profit": 300_000, "has_foreign_ownership": True})

        assert result.has_sme_qualification_issue
        assert "due to foreign ownership" in result.warnings[0]
        assert "flat 24% corporate tax rate" in result.warnings[0]

    def test_high_revenue(self, engine):
        result = engine.calculate(
            {
                "business_profit": 300_000,
                "audit_criteria": {"revenue": 60_000_000, "total_assets": 0, "employees": 0},
            }
        )

        assert result.has_sme_qualification_issue
        assert "due to high revenue" in result.warnings[0]
        assert "RM50,000,000" in result.warnings[0]

    def test_sme_numbers_still_use_sme_rates(self, engine):
        plain = engine.calculate({"business_profit": 300_000})
        foreign = engine.calculate({"business_profit": 300_000, "has_foreign_ownership": True})
        assert foreign.sdn_bhd_result.corporate_tax == plain.sdn_bhd_result.corporate_tax
