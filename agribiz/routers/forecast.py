# agribiz/routers/forecast.py
# -----------------------------------------------------------------------------
# /forecast/generate : single-period demand forecast (+ optional save)
# -----------------------------------------------------------------------------
from fastapi import APIRouter, Depends, HTTPException

from agribiz.core.errors import ValidationError
from agribiz.routers.deps import get_store
from agribiz.schemas.analysis import AnalysisType, ForecastRequest, ForecastResponse
from agribiz.services.forecast import generate_forecast
from agribiz.services.persistence import AnalysisStore, persist_result

router = APIRouter(prefix="/forecast", tags=["forecast"])


@router.post("/generate", response_model=ForecastResponse)
async def generate(req: ForecastRequest, store: AnalysisStore = Depends(get_store)):
    try:
        results = generate_forecast(req.input)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())

    persisted = None
    if req.user_id:
        persisted = await persist_result(
            store, req.user_id, AnalysisType.DEMAND_FORECAST, req.input, results
        )
    return ForecastResponse(results=results, persisted=persisted)
