# agribiz/routers/feasibility.py
# -----------------------------------------------------------------------------
# /feasibility/analyze : business feasibility (+ optional save)
# -----------------------------------------------------------------------------
from fastapi import APIRouter, Depends, HTTPException

from agribiz.core.errors import DomainError, ValidationError
from agribiz.routers.deps import get_store
from agribiz.schemas.analysis import (
    AnalysisType,
    FeasibilityRequest,
    FeasibilityResponse,
)
from agribiz.services.feasibility import analyze_business
from agribiz.services.persistence import AnalysisStore, persist_result

router = APIRouter(prefix="/feasibility", tags=["feasibility"])


@router.post("/analyze", response_model=FeasibilityResponse)
async def analyze(req: FeasibilityRequest, store: AnalysisStore = Depends(get_store)):
    try:
        results = analyze_business(req.input)
    except (ValidationError, DomainError) as e:
        raise HTTPException(status_code=422, detail=e.to_dict())

    persisted = None
    if req.user_id:
        persisted = await persist_result(
            store, req.user_id, AnalysisType.BUSINESS_FEASIBILITY, req.input, results
        )
    return FeasibilityResponse(results=results, persisted=persisted)
