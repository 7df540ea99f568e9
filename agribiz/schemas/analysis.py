# agribiz/schemas/analysis.py
# -----------------------------------------------------------------------------
# Persisted analysis records + request/response envelopes of the calculators
# - PersistedAnalysis mirrors the stored document:
#   {id, user_id, type, data: {input, results}, created_at}
# -----------------------------------------------------------------------------
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from agribiz.schemas.feasibility import (
    BusinessFeasibilityInput,
    BusinessFeasibilityResult,
)
from agribiz.schemas.forecast import ForecastInput, ForecastResult
from agribiz.schemas.optimization import OptimizationInput, OptimizationResult


class AnalysisType(str, Enum):
    BUSINESS_FEASIBILITY = "business_feasibility"
    DEMAND_FORECAST = "demand_forecast"
    OPTIMIZATION = "optimization"


class AnalysisPayload(BaseModel):
    input: Dict[str, Any]
    results: Dict[str, Any]


class PersistedAnalysis(BaseModel):
    id: str
    user_id: str
    type: AnalysisType
    data: AnalysisPayload
    created_at: datetime
    updated_at: Optional[datetime] = None


class AnalysisCreate(BaseModel):
    user_id: str = Field(min_length=1)
    type: AnalysisType
    data: AnalysisPayload


class PersistOutcome(BaseModel):
    """Result of handing a computed analysis to the store.

    A failed save never touches the computed result; it is reported here.
    """

    saved: bool
    analysis_id: Optional[str] = None
    error: Optional[str] = None


# ── calculator envelopes ────────────────────────────────────────────────────
class FeasibilityRequest(BaseModel):
    input: BusinessFeasibilityInput
    user_id: Optional[str] = None  # set to persist the result


class FeasibilityResponse(BaseModel):
    results: BusinessFeasibilityResult
    persisted: Optional[PersistOutcome] = None


class ForecastRequest(BaseModel):
    input: ForecastInput
    user_id: Optional[str] = None


class ForecastResponse(BaseModel):
    results: ForecastResult
    persisted: Optional[PersistOutcome] = None


class OptimizationRequest(BaseModel):
    input: OptimizationInput
    user_id: Optional[str] = None


class OptimizationResponse(BaseModel):
    results: OptimizationResult
    persisted: Optional[PersistOutcome] = None


# ── recommendations ─────────────────────────────────────────────────────────
class RecommendationCategory(str, Enum):
    CROP = "crop"
    BUSINESS = "business"
    RESOURCE = "resource"
    MARKET = "market"


class RecommendationItem(BaseModel):
    id: str
    set_id: str
    type: RecommendationCategory
    title: str
    description: str
    confidence: float = Field(ge=0, le=1)
    data: Dict[str, Any] = Field(default_factory=dict)
    source: str = "analysis"
    created_at: datetime


class RecommendationSet(BaseModel):
    id: str
    user_id: str
    summary: str
    created_at: datetime
    items: List[RecommendationItem]
