# agribiz/routers/analysis.py
# -----------------------------------------------------------------------------
# /api/analysis : saved analysis history
# -----------------------------------------------------------------------------
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from agribiz.db import crud
from agribiz.db.session import get_session
from agribiz.schemas.analysis import AnalysisCreate, AnalysisType, PersistedAnalysis
from agribiz.services.persistence import to_persisted

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


@router.post("", response_model=PersistedAnalysis, status_code=201)
async def create_analysis(req: AnalysisCreate, db: AsyncSession = Depends(get_session)):
    row = await crud.save_analysis(
        db, user_id=req.user_id, type=req.type.value, data=req.data.model_dump()
    )
    return to_persisted(row)


@router.get("", response_model=List[PersistedAnalysis])
async def list_analyses(
    user_id: str = Query(..., min_length=1),
    type: Optional[AnalysisType] = None,
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_session),
):
    rows = await crud.list_analyses(
        db, user_id, type=type.value if type else None, limit=limit
    )
    return [to_persisted(r) for r in rows]


@router.get("/{analysis_id}", response_model=PersistedAnalysis)
async def get_analysis(analysis_id: str, db: AsyncSession = Depends(get_session)):
    row = await crud.get_analysis(db, analysis_id)
    if row is None:
        raise HTTPException(status_code=404, detail="analysis not found")
    return to_persisted(row)


@router.delete("/{analysis_id}", status_code=204)
async def delete_analysis(analysis_id: str, db: AsyncSession = Depends(get_session)):
    if not await crud.delete_analysis(db, analysis_id):
        raise HTTPException(status_code=404, detail="analysis not found")
