# agribiz/routers/recommendations.py
# -----------------------------------------------------------------------------
# /api/recommendations/{user_id} : rule-based advice from saved analyses
# -----------------------------------------------------------------------------
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agribiz.db import crud
from agribiz.db.session import get_session
from agribiz.schemas.analysis import RecommendationSet
from agribiz.services.persistence import to_persisted
from agribiz.services.recommendations import build_recommendations

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])


@router.get("/{user_id}", response_model=RecommendationSet)
async def get_recommendations(user_id: str, db: AsyncSession = Depends(get_session)):
    rows = await crud.list_analyses(db, user_id)
    return build_recommendations(user_id, [to_persisted(r) for r in rows])
