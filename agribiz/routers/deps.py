# agribiz/routers/deps.py
# -----------------------------------------------------------------------------
# Shared FastAPI dependencies
# -----------------------------------------------------------------------------
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agribiz.db.session import get_session
from agribiz.services.persistence import AnalysisStore, SqlAnalysisStore


async def get_store(db: AsyncSession = Depends(get_session)) -> AnalysisStore:
    return SqlAnalysisStore(db)
