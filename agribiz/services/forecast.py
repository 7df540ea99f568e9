# agribiz/services/forecast.py
# -----------------------------------------------------------------------------
# Demand forecasting
# - SMA(n) and exponential smoothing(alpha), one handler per ForecastMethod
# - exactly one future period per call
# - accuracy (MAPE/MAE) by back-testing the same method on the history
# -----------------------------------------------------------------------------
from __future__ import annotations

import math
import re
from typing import Callable, Dict, Optional, Tuple

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.metrics import mean_absolute_error, mean_absolute_percentage_error

from agribiz.core.config import settings
from agribiz.core.errors import InsufficientDataError, ValidationError
from agribiz.schemas.common import ValuePoint
from agribiz.schemas.forecast import (
    ForecastAccuracy,
    ForecastChart,
    ForecastedPeriod,
    ForecastInput,
    ForecastMethod,
    ForecastResult,
)
from agribiz.services.summary import forecast_summary, render_plain

MIN_PERIOD_LENGTH = 2
MAX_PERIOD_LENGTH = 12
MAX_FORECAST_PERIODS = 12

_TRAILING_INT = re.compile(r"^(.*?)(\d+)$")


# ── validation ──────────────────────────────────────────────────────────────
def validate_forecast_input(inp: ForecastInput) -> None:
    if not inp.product_name.strip():
        raise ValidationError("product name is required", "product_name")

    history = inp.historical_demand
    min_points = settings.FORECAST_MIN_HISTORY
    if len(history) < min_points:
        raise InsufficientDataError(
            f"at least {min_points} historical data points are required "
            f"(got {len(history)})",
            "historical_demand",
        )
    for i, point in enumerate(history):
        if not point.period.strip():
            raise ValidationError(
                f"historical_demand[{i}].period is required",
                f"historical_demand[{i}].period",
            )
        if not math.isfinite(point.demand) or point.demand < 0:
            raise ValidationError(
                f"historical_demand[{i}].demand must be a non-negative number",
                f"historical_demand[{i}].demand",
            )

    alpha = inp.smoothing_factor
    if not math.isfinite(alpha) or not 0 <= alpha <= 1:
        raise ValidationError(
            "smoothing factor must be between 0 and 1", "smoothing_factor"
        )
    if not MIN_PERIOD_LENGTH <= inp.period_length <= MAX_PERIOD_LENGTH:
        raise ValidationError(
            f"period length must be between {MIN_PERIOD_LENGTH} and "
            f"{MAX_PERIOD_LENGTH}",
            "period_length",
        )
    if not 1 <= inp.forecast_periods <= MAX_FORECAST_PERIODS:
        raise ValidationError(
            f"forecast periods must be between 1 and {MAX_FORECAST_PERIODS}",
            "forecast_periods",
        )
    if inp.period_length > len(history):
        raise InsufficientDataError(
            f"period length {inp.period_length} exceeds the {len(history)} "
            "available historical points",
            "period_length",
        )


# ── methods ─────────────────────────────────────────────────────────────────
def simple_moving_average(values: np.ndarray, n: int) -> float:
    """Mean of the last n observations."""
    if n > len(values):
        raise InsufficientDataError(
            "period length exceeds available historical data", "period_length"
        )
    return float(values[-n:].mean())


def exponential_smoothing(values: np.ndarray, alpha: float, n: int) -> np.ndarray:
    """Smoothed sequence seeded by SMA(n) over the first n points.

    Entries before the seed carry the raw observations; from index n on
    F[t] = alpha * D[t-1] + (1 - alpha) * F[t-1].
    """
    if n > len(values):
        raise InsufficientDataError(
            "period length exceeds available historical data", "period_length"
        )
    out = np.empty(len(values), dtype=float)
    out[: n - 1] = values[: n - 1]
    out[n - 1] = values[:n].mean()
    for t in range(n, len(values)):
        out[t] = alpha * values[t - 1] + (1 - alpha) * out[t - 1]
    return out


def _forecast_sma(values: np.ndarray, inp: ForecastInput) -> Tuple[float, np.ndarray]:
    n = inp.period_length
    nxt = simple_moving_average(values, n)
    # trailing window aligned at each index; the first n-1 are NaN
    fitted = pd.Series(values).rolling(window=n).mean().to_numpy()
    return nxt, fitted


def _forecast_exponential(
    values: np.ndarray, inp: ForecastInput
) -> Tuple[float, np.ndarray]:
    n = inp.period_length
    alpha = inp.smoothing_factor
    smoothed = exponential_smoothing(values, alpha, n)
    nxt = alpha * values[-1] + (1 - alpha) * smoothed[-1]
    fitted = smoothed.copy()
    fitted[: n - 1] = np.nan  # pre-seed entries are raw data, not forecasts
    return float(nxt), fitted


FORECASTERS: Dict[
    ForecastMethod, Callable[[np.ndarray, ForecastInput], Tuple[float, np.ndarray]]
] = {
    ForecastMethod.SMA: _forecast_sma,
    ForecastMethod.EXPONENTIAL: _forecast_exponential,
}


# ── accuracy ────────────────────────────────────────────────────────────────
def accuracy_metrics(actual: np.ndarray, fitted: np.ndarray) -> ForecastAccuracy:
    """MAPE over aligned points with non-zero actuals, MAE over all aligned points."""
    mask = ~np.isnan(fitted)
    a = np.asarray(actual, dtype=float)[mask]
    f = np.asarray(fitted, dtype=float)[mask]
    if len(a) == 0:
        return ForecastAccuracy()

    mae = float(mean_absolute_error(a, f))
    nonzero = a != 0
    mape: Optional[float] = None
    if nonzero.any():
        mape = float(mean_absolute_percentage_error(a[nonzero], f[nonzero]) * 100)
    return ForecastAccuracy(mape=mape, mae=mae)


# ── labels ──────────────────────────────────────────────────────────────────
def next_period_label(label: str, fallback_index: int) -> str:
    """Increment the trailing integer of a period label.

    "Period 5" -> "Period 6", "2024-09" -> "2024-10". Labels that do not end
    in an integer fall back to "Period <fallback_index>".
    """
    m = _TRAILING_INT.match(label.strip())
    if not m:
        return f"Period {fallback_index}"
    prefix, digits = m.groups()
    return f"{prefix}{int(digits) + 1:0{len(digits)}d}"


# ── entry point ─────────────────────────────────────────────────────────────
def generate_forecast(inp: ForecastInput) -> ForecastResult:
    validate_forecast_input(inp)

    history = inp.historical_demand
    values = np.array([p.demand for p in history], dtype=float)

    next_value, fitted = FORECASTERS[inp.method](values, inp)
    accuracy = accuracy_metrics(values, fitted)

    label = next_period_label(history[-1].period, len(history) + 1)
    forecasted = [ForecastedPeriod(period=label, forecast=next_value)]
    if inp.forecast_periods > 1:
        logger.debug(
            "forecast_periods={} requested; producing a single period",
            inp.forecast_periods,
        )

    result = ForecastResult(
        product_name=inp.product_name,
        method=inp.method,
        forecasted=forecasted,
        accuracy=accuracy,
        chart=ForecastChart(
            historical=[ValuePoint(period=p.period, value=p.demand) for p in history],
            forecast=[ValuePoint(period=f.period, value=f.forecast) for f in forecasted],
        ),
    )
    logger.debug(
        "forecast {} ({}): next={} mape={} mae={}",
        inp.product_name,
        inp.method.value,
        next_value,
        accuracy.mape,
        accuracy.mae,
    )

    spans = forecast_summary(result)
    return result.model_copy(
        update={"summary": render_plain(spans), "summary_spans": spans}
    )
