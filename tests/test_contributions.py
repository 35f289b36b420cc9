"""Tests for EPF, SOCSO, salary affordability, dividend surcharge and audit exemption."""

import pytest

from entitytax.calculator.contributions import (
    dividend_tax,
    employee_epf,
    employee_socso,
    employer_epf,
    employer_socso,
    is_audit_exempt,
    max_affordable_salary,
    total_salary_cost,
)
from entitytax.models.inputs import AuditCriteria


class TestEPF:
    """Employer rate is 13% up to RM5,000/month and 12% above."""

    @pytest.mark.parametrize("annual,expected", [
        (0, 0),
        (60_000, 7800),
        (60_000.12, 7200.01),
        (120_000, 14_400),
    ])
    def test_employer_epf(self, config, annual, expected):
        assert employer_epf(annual, config) == expected

    def test_employee_epf(self, config):
        assert employee_epf(60_000, config) == 6600
        assert employee_epf(-10, config) == 0


class TestSOCSO:
    """Rounded per month, nothing above the RM6,000 ceiling."""

    @pytest.mark.parametrize("monthly,employer,employee", [
        (0, 0, 0),
        (5000, 1050, 300),
        (6000, 1260, 360),
        (6000.01, 0, 0),
    ])
    def test_boundaries(self, config, monthly, employer, employee):
        assert employer_socso(monthly, config) == employer
        assert employee_socso(monthly, config) == employee

    def test_monthly_rounding_before_annualising(self, config):
        # 1,234 x 1.75% = 21.595 -> 21.60 per month
        assert employer_socso(1234, config) == pytest.approx(259.2)


class TestMaxAffordableSalary:
    """The result fits the profit and no higher whole-ringgit salary does."""

    def test_non_positive_profit(self, config):
        assert max_affordable_salary(0, config) == 0
        assert max_affordable_salary(-5000, config) == 0

    def test_cost_curve_drops_above_epf_ceiling(self, config):
        # RM60,000 (5,000/month) costs more than RM60,000.12
        assert total_salary_cost(60_000, config) == 68_850
        assert total_salary_cost(60_000.12, config) < 68_850

    def test_jumps_past_epf_ceiling(self, config):
        result = max_affordable_salary(68_500, config)
        assert 60_000 < result < 60_220
        assert total_salary_cost(result, config) <= 68_500

    @pytest.mark.parametrize("profit", [10_000, 50_000, 68_500, 68_850, 69_060, 81_900, 90_000])
    def test_no_larger_whole_ringgit_salary_fits(self, config, profit):
        result = max_affordable_salary(profit, config)
        assert 0 < result <= profit
        assert total_salary_cost(result, config) <= profit
        for salary in range(int(result) + 1, int(profit) + 1):
            assert total_salary_cost(salary, config) > profit

    def test_above_all_ceilings(self, config):
        # 12% EPF only: 1,120,000 / 1.12
        assert max_affordable_salary(1_120_000, config) == pytest.approx(1_000_000, abs=0.01)


class TestDividendTax:

    @pytest.mark.parametrize("dividends,expected", [
        (0, 0),
        (100_000, 0),
        (150_000, 1000),
        (702_856, 12_057.12),
    ])
    def test_surcharge_above_threshold(self, config, dividends, expected):
        assert dividend_tax(dividends, config) == expected


class TestAuditExemption:
    """All three limits must hold."""

    def test_exempt_at_limits(self, config):
        assert is_audit_exempt(AuditCriteria(revenue=100_000, total_assets=300_000, employees=5), config)

    @pytest.mark.parametrize("criteria", [
        AuditCriteria(revenue=100_001, total_assets=0, employees=0),
        AuditCriteria(revenue=0, total_assets=300_001, employees=0),
        AuditCriteria(revenue=0, total_assets=0, employees=6),
    ])
    def test_any_limit_exceeded(self, config, criteria):
        assert not is_audit_exempt(criteria, config)
