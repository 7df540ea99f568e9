# agribiz/schemas/forecast.py
# -----------------------------------------------------------------------------
# Demand forecasting schemas
# -----------------------------------------------------------------------------
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from agribiz.core.config import settings
from agribiz.schemas.common import SummarySpan, ValuePoint


class ForecastMethod(str, Enum):
    SMA = "sma"
    EXPONENTIAL = "exponential"


class HistoricalDemand(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    period: str  # expected to end in an integer, e.g. "Period 4" or "2024-09"
    demand: float


class ForecastInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_name: str
    historical_demand: List[HistoricalDemand]
    method: ForecastMethod = ForecastMethod.SMA
    smoothing_factor: float = settings.FORECAST_DEFAULT_ALPHA  # exponential only
    period_length: int = settings.FORECAST_DEFAULT_PERIOD_LENGTH
    # accepted for compatibility; only one future period is produced
    forecast_periods: int = 1


class ForecastedPeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    period: str
    forecast: float


class ForecastAccuracy(BaseModel):
    model_config = ConfigDict(frozen=True)

    mape: Optional[float] = None  # percent
    mae: Optional[float] = None


class ForecastChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    historical: List[ValuePoint]
    forecast: List[ValuePoint]


class ForecastResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_name: str
    method: ForecastMethod
    forecasted: List[ForecastedPeriod]
    accuracy: ForecastAccuracy
    chart: ForecastChart
    summary: str = ""
    summary_spans: List[SummarySpan] = Field(default_factory=list)
