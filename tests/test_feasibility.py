"""
Unit tests for the business feasibility calculator
==================================================
"""

import math

import pytest

from agribiz.core.errors import DomainError, ValidationError
from agribiz.schemas.feasibility import OperationalCost
from agribiz.services.feasibility import (
    FeasibilityPolicy,
    analyze_business,
    break_even_units,
    is_feasible,
    payback_period,
)


class TestAnalyzeBusiness:
    """Formulas against the reference scenario."""

    def test_reference_scenario(self, feasibility_input):
        res = analyze_business(feasibility_input)

        assert res.total_investment == 10_000_000
        assert res.total_operational == 2_000_000
        assert res.unit_cost == 7000
        assert res.selling_price == 10500
        assert res.break_even_units == pytest.approx(2_000_000 / 5500)
        assert res.monthly_net_profit == 3_500_000
        assert res.annual_net_profit == 42_000_000
        assert res.profit_margin == pytest.approx(3_500_000 / 10_500_000 * 100)
        assert res.payback_period == pytest.approx(10_000_000 / 42_000_000)
        assert res.roi == pytest.approx(420.0)
        assert res.feasible is True

    def test_break_even_amount_is_derived(self, feasibility_input):
        res = analyze_business(feasibility_input)
        assert res.break_even_amount == res.break_even_units * res.selling_price

    @pytest.mark.parametrize("markup", [0.5, 10, 50, 200])
    def test_price_ordering(self, feasibility_input, markup):
        res = analyze_business(feasibility_input.model_copy(update={"markup": markup}))
        assert res.unit_cost >= feasibility_input.production_cost_per_unit
        assert res.selling_price >= res.unit_cost

    def test_policy_thresholds_are_configurable(self, feasibility_input):
        strict = FeasibilityPolicy(min_roi=500, max_payback_years=5)
        res = analyze_business(feasibility_input, policy=strict)
        assert res.roi == pytest.approx(420.0)
        assert res.feasible is False

    def test_zero_markup_is_domain_error(self, feasibility_input):
        """Zero markup leaves zero annual profit, so payback is undefined."""
        with pytest.raises(DomainError) as exc:
            analyze_business(feasibility_input.model_copy(update={"markup": 0}))
        assert exc.value.operation == "payback_period"

    def test_summary_is_plain_text(self, feasibility_input):
        res = analyze_business(feasibility_input)
        assert "<" not in res.summary
        assert "feasible" in res.summary
        assert "Rp 3,500,000" in res.summary
        assert "420.0%" in res.summary
        assert "364 units" in res.summary
        assert res.summary == "".join(s.text for s in res.summary_spans)


class TestFeasibilityRule:
    def test_roi_boundary(self):
        policy = FeasibilityPolicy()
        assert is_feasible(15, 1.0, policy) is False
        assert is_feasible(15.0001, 1.0, policy) is True

    def test_payback_boundary(self):
        policy = FeasibilityPolicy()
        assert is_feasible(40, 5.0, policy) is False
        assert is_feasible(40, 4.99, policy) is True

    def test_no_payback_is_infeasible(self):
        assert is_feasible(40, None, FeasibilityPolicy()) is False


class TestHelpers:
    def test_break_even_equal_price_raises(self):
        with pytest.raises(DomainError):
            break_even_units(1000, 5000, 5000)

    def test_negative_profit_never_pays_back(self):
        assert payback_period(1_000_000, -50_000) is None

    def test_zero_profit_raises(self):
        with pytest.raises(DomainError):
            payback_period(1_000_000, 0)


class TestValidation:
    @pytest.mark.parametrize(
        "update, field",
        [
            ({"business_name": "  "}, "business_name"),
            ({"investment_costs": []}, "investment_costs"),
            ({"operational_costs": []}, "operational_costs"),
            ({"monthly_sales_volume": 0}, "monthly_sales_volume"),
            ({"monthly_sales_volume": -5}, "monthly_sales_volume"),
            ({"markup": -1}, "markup"),
            ({"production_cost_per_unit": -1}, "production_cost_per_unit"),
            ({"project_lifespan": 0}, "project_lifespan"),
        ],
    )
    def test_rejects_bad_input(self, feasibility_input, update, field):
        with pytest.raises(ValidationError) as exc:
            analyze_business(feasibility_input.model_copy(update=update))
        assert exc.value.field == field

    def test_rejects_cost_list_without_positive_amount(self, feasibility_input):
        zero = [OperationalCost(id="o1", name="Idle", amount=0)]
        with pytest.raises(ValidationError):
            analyze_business(feasibility_input.model_copy(update={"operational_costs": zero}))

    def test_rejects_non_finite_amount(self, feasibility_input):
        bad = [OperationalCost(id="o1", name="Labor", amount=math.nan)]
        with pytest.raises(ValidationError) as exc:
            analyze_business(feasibility_input.model_copy(update={"operational_costs": bad}))
        assert exc.value.field == "operational_costs[0].amount"
