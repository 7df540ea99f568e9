"""
Unit tests for the demand forecasting engine
============================================
"""

import math

import numpy as np
import pytest

from agribiz.core.errors import InsufficientDataError, ValidationError
from agribiz.schemas.forecast import ForecastInput, ForecastMethod, HistoricalDemand
from agribiz.services.forecast import (
    FORECASTERS,
    accuracy_metrics,
    exponential_smoothing,
    generate_forecast,
    next_period_label,
)
from tests.conftest import make_history


def _input(values, method=ForecastMethod.SMA, **kw):
    return ForecastInput(
        product_name="Shallot",
        historical_demand=make_history(values),
        method=method,
        **kw,
    )


class TestSMA:
    def test_reference_scenario(self, sma_input):
        res = generate_forecast(sma_input)
        assert len(res.forecasted) == 1
        assert res.forecasted[0].forecast == 20
        assert res.forecasted[0].period == "Period 4"

    def test_constant_series(self):
        res = generate_forecast(_input([7, 7, 7, 7, 7], period_length=3))
        assert res.forecasted[0].forecast == 7
        assert res.accuracy.mape == pytest.approx(0.0)
        assert res.accuracy.mae == pytest.approx(0.0)

    def test_backtest_metrics(self):
        res = generate_forecast(_input([10, 20, 30, 40], period_length=2))
        assert res.forecasted[0].forecast == 35
        assert res.accuracy.mae == pytest.approx(5.0)
        assert res.accuracy.mape == pytest.approx((5 / 20 + 5 / 30 + 5 / 40) / 3 * 100)


class TestExponential:
    @pytest.mark.parametrize("alpha", [0.1, 0.3, 0.5, 0.9])
    def test_constant_series_converges(self, alpha):
        res = generate_forecast(
            _input([12, 12, 12, 12, 12, 12], ForecastMethod.EXPONENTIAL, smoothing_factor=alpha)
        )
        assert res.forecasted[0].forecast == pytest.approx(12)
        assert res.accuracy.mape == pytest.approx(0.0)

    def test_recurrence(self):
        smoothed = exponential_smoothing(np.array([10.0, 20.0, 30.0, 40.0]), 0.5, 2)
        assert smoothed.tolist() == [10.0, 15.0, 17.5, 23.75]

    def test_next_period_and_metrics(self):
        res = generate_forecast(
            _input([10, 20, 30, 40], ForecastMethod.EXPONENTIAL, smoothing_factor=0.5, period_length=2)
        )
        assert res.forecasted[0].forecast == pytest.approx(31.875)
        assert res.accuracy.mae == pytest.approx((5 + 12.5 + 16.25) / 3)
        assert res.accuracy.mape == pytest.approx((5 / 20 + 12.5 / 30 + 16.25 / 40) / 3 * 100)


class TestAccuracy:
    def test_nan_points_are_excluded(self):
        acc = accuracy_metrics(np.array([1.0, 2.0, 4.0]), np.array([np.nan, 2.0, 4.0]))
        assert acc.mae == 0.0
        assert acc.mape == 0.0

    def test_zero_actuals_have_no_mape(self):
        res = generate_forecast(_input([0, 0, 0], period_length=2))
        assert res.accuracy.mape is None
        assert res.accuracy.mae == 0.0
        assert "not available" in res.summary


class TestLabels:
    @pytest.mark.parametrize(
        "label, expected",
        [
            ("Period 5", "Period 6"),
            ("2024-09", "2024-10"),
            ("Week 099", "Week 100"),
            ("Q3", "Q4"),
        ],
    )
    def test_trailing_integer_is_incremented(self, label, expected):
        assert next_period_label(label, 99) == expected

    def test_fallback_without_integer(self):
        assert next_period_label("January", 4) == "Period 4"


class TestContract:
    def test_every_method_has_a_handler(self):
        assert set(FORECASTERS) == set(ForecastMethod)

    def test_single_period_even_when_more_requested(self):
        res = generate_forecast(_input([10, 20, 30, 40], forecast_periods=6))
        assert len(res.forecasted) == 1
        assert len(res.chart.forecast) == 1

    def test_chart_payload(self, sma_input):
        res = generate_forecast(sma_input)
        assert [p.value for p in res.chart.historical] == [10, 20, 30]
        assert res.chart.forecast[0].period == "Period 4"


class TestValidation:
    def test_too_few_points(self):
        with pytest.raises(InsufficientDataError):
            generate_forecast(_input([10, 20], period_length=2))

    def test_window_longer_than_history(self):
        with pytest.raises(InsufficientDataError) as exc:
            generate_forecast(_input([10, 20, 30, 40], period_length=5))
        assert exc.value.field == "period_length"

    @pytest.mark.parametrize("alpha", [-0.1, 1.5, math.nan])
    def test_alpha_out_of_range(self, alpha):
        with pytest.raises(ValidationError) as exc:
            generate_forecast(_input([10, 20, 30], ForecastMethod.EXPONENTIAL, smoothing_factor=alpha))
        assert exc.value.field == "smoothing_factor"

    @pytest.mark.parametrize("demand", [-1, math.nan, math.inf])
    def test_bad_demand(self, demand):
        history = make_history([10, 20, 30]) + [HistoricalDemand(id="x", period="Period 4", demand=demand)]
        inp = ForecastInput(product_name="Shallot", historical_demand=history)
        with pytest.raises(ValidationError):
            generate_forecast(inp)

    @pytest.mark.parametrize("update", [{"period_length": 1}, {"period_length": 13}, {"forecast_periods": 13}, {"product_name": ""}])
    def test_rejects_bad_parameters(self, sma_input, update):
        with pytest.raises(ValidationError):
            generate_forecast(sma_input.model_copy(update=update))
