# agribiz/routers/optimization.py
# -----------------------------------------------------------------------------
# /optimization/run : LP solve (+ optional save)
# - an infeasible problem is a 200 response with results.feasible == false
# -----------------------------------------------------------------------------
from fastapi import APIRouter, Depends, HTTPException

from agribiz.core.errors import ValidationError
from agribiz.routers.deps import get_store
from agribiz.schemas.analysis import (
    AnalysisType,
    OptimizationRequest,
    OptimizationResponse,
)
from agribiz.services.optimization import run_optimization
from agribiz.services.persistence import AnalysisStore, persist_result

router = APIRouter(prefix="/optimization", tags=["optimization"])


@router.post("/run", response_model=OptimizationResponse)
async def run(req: OptimizationRequest, store: AnalysisStore = Depends(get_store)):
    try:
        results = run_optimization(req.input)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())

    persisted = None
    if req.user_id:
        persisted = await persist_result(
            store, req.user_id, AnalysisType.OPTIMIZATION, req.input, results
        )
    return OptimizationResponse(results=results, persisted=persisted)
