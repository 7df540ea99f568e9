# agribiz/services/persistence.py
# -----------------------------------------------------------------------------
# Hand computed analyses to a store
# - AnalysisStore is the narrow save(user_id, type, payload) -> id contract
# - SqlAnalysisStore is the default implementation over agribiz.db.crud
# - persist_result never alters the computed result; a failed save comes
#   back as PersistOutcome(saved=False, error=...)
# -----------------------------------------------------------------------------
from __future__ import annotations

from typing import Any, Dict, Protocol

from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agribiz.core.errors import PersistenceError
from agribiz.db import crud
from agribiz.db.models import AnalysisRecord
from agribiz.schemas.analysis import (
    AnalysisPayload,
    AnalysisType,
    PersistedAnalysis,
    PersistOutcome,
)


class AnalysisStore(Protocol):
    async def save(
        self, user_id: str, type: AnalysisType, payload: Dict[str, Any]
    ) -> str: ...


class SqlAnalysisStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(
        self, user_id: str, type: AnalysisType, payload: Dict[str, Any]
    ) -> str:
        try:
            row = await crud.save_analysis(
                self.db, user_id=user_id, type=type.value, data=payload
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"could not save analysis: {e}") from e
        return row.id


def build_payload(inp: BaseModel, result: BaseModel) -> Dict[str, Any]:
    """JSON-safe {input, results} document."""
    return {
        "input": inp.model_dump(mode="json"),
        "results": result.model_dump(mode="json"),
    }


async def persist_result(
    store: AnalysisStore,
    user_id: str,
    type: AnalysisType,
    inp: BaseModel,
    result: BaseModel,
) -> PersistOutcome:
    payload = build_payload(inp, result)
    try:
        analysis_id = await store.save(user_id, type, payload)
    except Exception as e:
        logger.error("saving {} for user {} failed: {}", type.value, user_id, e)
        return PersistOutcome(saved=False, error=str(e))
    logger.info("saved {} {} for user {}", type.value, analysis_id, user_id)
    return PersistOutcome(saved=True, analysis_id=analysis_id)


def to_persisted(row: AnalysisRecord) -> PersistedAnalysis:
    return PersistedAnalysis(
        id=row.id,
        user_id=row.user_id,
        type=AnalysisType(row.type),
        data=AnalysisPayload(**row.data),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
