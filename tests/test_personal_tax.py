"""Tests for personal income tax and the reverse net-cash search."""

import pytest
from pydantic import ValidationError

from entitytax.calculator.brackets import progressive_tax
from entitytax.calculator.personal_tax import (
    calculate_personal_tax,
    default_reliefs,
    required_income_for_net_cash,
)
from entitytax.models.inputs import Reliefs


class TestCalculatePersonalTax:

    def test_basic_relief_only(self, config):
        result = calculate_personal_tax(100_000, Reliefs(basic=9000), config)

        assert result.total_reliefs == 9000
        assert result.taxable_income == 91_000
        assert result.tax == 7690.0
        assert result.effective_rate == 0.0769

    def test_default_reliefs(self, config):
        result = calculate_personal_tax(300_000, config=config)

        assert result.total_reliefs == 24_000
        assert result.taxable_income == 276_000
        assert result.tax == 53_660.0

    def test_reliefs_above_income(self, config):
        result = calculate_personal_tax(10_000, config=config)

        assert result.taxable_income == 0
        assert result.tax == 0
        assert result.effective_rate == 0
        assert result.breakdown == ()

    def test_zero_income(self, config):
        assert calculate_personal_tax(0, config=config).effective_rate == 0

    @pytest.mark.parametrize("income", [-1, float("nan"), float("inf")])
    def test_invalid_income_raises(self, config, income):
        with pytest.raises(ValueError):
            calculate_personal_tax(income, config=config)

    def test_reliefs_are_capped(self, config):
        result = calculate_personal_tax(200_000, Reliefs(basic=50_000, medical=20_000), config)
        assert result.total_reliefs == 9000 + 8000


class TestReliefs:
    """Known categories are capped; children and extras are not."""

    def test_default_profile(self, config):
        reliefs = default_reliefs(config)
        assert reliefs.basic == 9000
        assert reliefs.epf_and_life_insurance == 7000
        assert reliefs.medical == 8000

    def test_children_and_extras_uncapped(self, config):
        reliefs = Reliefs(basic=20_000, children=6000, lifestyle=2500)
        assert reliefs.total(config.relief_limits) == 9000 + 6000 + 2500

    def test_negative_and_non_finite_ignored(self, config):
        reliefs = Reliefs(basic=9000, medical=-100, spouse=float("nan"))
        assert reliefs.total(config.relief_limits) == 9000

    def test_extra_relief_must_be_numeric(self):
        with pytest.raises(ValidationError):
            Reliefs(lifestyle="a lot")

    def test_with_epf_relief(self):
        reliefs = Reliefs(basic=9000, epf_and_life_insurance=7000)
        updated = reliefs.with_epf_relief(6600)
        assert updated.epf_and_life_insurance == 6600
        assert reliefs.epf_and_life_insurance == 7000


class TestRequiredIncomeForNetCash:

    @pytest.mark.parametrize("target", [0, -100])
    def test_non_positive_target(self, config, target):
        assert required_income_for_net_cash(target, 24_000, config) == 0

    @pytest.mark.parametrize("target", [30_000, 96_000, 240_000, 1_200_000])
    def test_reaches_target(self, config, target):
        income = required_income_for_net_cash(target, 24_000, config)
        net = income - progressive_tax(max(0, income - 24_000), config.personal_brackets)

        assert isinstance(income, int)
        assert abs(net - target) <= 2

    def test_below_reliefs_no_tax(self, config):
        assert abs(required_income_for_net_cash(20_000, 24_000, config) - 20_000) <= 1
