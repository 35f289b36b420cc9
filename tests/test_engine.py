"""End-to-end tests for the comparison engine facade."""

import json

import pytest

from entitytax import (
    ComparisonEngine,
    StructureChoice,
    TaxCalculationInputs,
    compare_structures,
    get_default_engine,
    reset_default_engine,
)
from entitytax.config.settings import EngineSettings


class TestResolveInputs:

    def test_defaults_applied(self, engine):
        resolved = engine.resolve_inputs({"business_profit": 300_000})

        assert resolved.monthly_salary == 5000
        assert resolved.compliance_costs == 5000
        assert resolved.audit_cost == 0
        assert resolved.dividend_distribution_percent == 100
        assert resolved.reliefs.total(engine.config.relief_limits) == 24_000
        assert not resolved.zakat.enabled
        assert resolved.target_net_income is None

    def test_explicit_zero_is_kept(self, engine):
        resolved = engine.resolve_inputs(
            {"business_profit": 1, "monthly_salary": 0, "compliance_costs": 0, "dividend_distribution_percent": 0}
        )
        assert resolved.monthly_salary == 0
        assert resolved.compliance_costs == 0
        assert resolved.dividend_distribution_percent == 0

    def test_target_mode(self, engine):
        resolved = engine.resolve_inputs(
            {"business_profit": 0, "mode": {"kind": "target", "target_net_income": 20_000}}
        )
        assert resolved.target_net_income == 240_000
        assert 285_000 < resolved.business_profit < 300_000

    def test_target_mode_subtracts_other_income(self, engine):
        plain = engine.resolve_inputs(
            {"business_profit": 0, "mode": {"kind": "target", "target_net_income": 20_000}}
        )
        with_other = engine.resolve_inputs(
            {
                "business_profit": 0,
                "other_income": 50_000,
                "mode": {"kind": "target", "target_net_income": 20_000},
            }
        )
        assert with_other.business_profit == plain.business_profit - 50_000

    def test_target_below_other_income(self, engine):
        resolved = engine.resolve_inputs(
            {
                "business_profit": 0,
                "other_income": 500_000,
                "mode": {"kind": "target", "target_net_income": 1000},
            }
        )
        assert resolved.business_profit == 0


class TestCalculate:

    def test_profit_mode(self, engine):
        result = engine.calculate(TaxCalculationInputs(business_profit=300_000))

        assert result.sole_prop_result.personal_tax == 53_660
        assert result.sole_prop_result.net_cash == 246_340
        assert result.sdn_bhd_result.net_cash == 242_270.5
        assert result.which_is_better is StructureChoice.SOLE_PROP
        assert result.crossover_point_profit is None

    def test_target_mode_meets_target(self, engine):
        result = engine.calculate(
            {"business_profit": 0, "mode": {"kind": "target", "target_net_income": 20_000}}
        )
        assert result.sole_prop_result.net_cash == pytest.approx(240_000, abs=1)

    def test_scenarios_individually(self, engine):
        assert engine.calculate_sole_prop({"business_profit": 300_000}).net_cash == 246_340
        assert engine.calculate_sdn_bhd({"business_profit": 300_000}).net_cash == 242_270.5

    def test_negative_input_raises(self, engine):
        with pytest.raises(ValueError):
            engine.calculate({"business_profit": -1})

    def test_to_dict_is_json_friendly(self, engine):
        data = engine.calculate({"business_profit": 300_000}).to_dict()

        assert data["which_is_better"] == "soleProp"
        assert data["sole_prop_result"]["waterfall"][0]["label"] == "Business Profit"
        assert data["sdn_bhd_result"]["salary_affordability"]["is_affordable"] is True
        json.dumps(data)

    def test_custom_similarity_threshold(self, config):
        engine = ComparisonEngine(config=config, settings=EngineSettings(similarity_threshold=5000))
        result = engine.calculate({"business_profit": 300_000})
        assert result.which_is_better is StructureChoice.SIMILAR

    def test_settings_defaults_used(self, config):
        engine = ComparisonEngine(
            config=config, settings=EngineSettings(default_monthly_salary=0, default_compliance_costs=0)
        )
        result = engine.calculate({"business_profit": 300_000})
        assert result.sdn_bhd_result.net_cash == 252_000


class TestEvaluate:

    def test_clean_inputs(self, engine):
        outcome = engine.evaluate({"business_profit": 300_000})

        assert outcome.issues == ()
        assert not outcome.has_errors
        assert outcome.result.sole_prop_result.net_cash == 246_340

    def test_value_issues_are_repaired(self, engine):
        outcome = engine.evaluate({"business_profit": -5000, "dividend_distribution_percent": 120})

        assert outcome.has_errors
        assert {issue.field for issue in outcome.errors} == {
            "business_profit",
            "dividend_distribution_percent",
        }
        assert outcome.result is not None
        assert outcome.result.sole_prop_result.breakdown.business_profit == 0

    def test_missing_business_profit(self, engine):
        outcome = engine.evaluate({"other_income": 5000})

        assert outcome.result is None
        assert outcome.errors[0].field == "business_profit"

    def test_wrong_type(self, engine):
        outcome = engine.evaluate({"business_profit": "lots"})

        assert outcome.result is None
        assert outcome.has_errors

    def test_warning_only(self, engine):
        outcome = engine.evaluate(
            {
                "business_profit": 300_000,
                "audit_criteria": {"revenue": 0, "total_assets": 0, "employees": 1.5},
            }
        )
        assert not outcome.has_errors
        assert len(outcome.issues) == 1
        assert outcome.result is not None


class TestDefaultEngine:

    def test_shared_instance(self):
        assert get_default_engine() is get_default_engine()

    def test_reset(self):
        first = get_default_engine()
        reset_default_engine()
        assert get_default_engine() is not first

    def test_compare_structures(self):
        result = compare_structures(
            {"business_profit": 1_000_000, "monthly_salary": 10_000, "compliance_costs": 10_000}
        )
        assert result.which_is_better is StructureChoice.SDN_BHD
        assert len(get_default_engine().cache) == 1
