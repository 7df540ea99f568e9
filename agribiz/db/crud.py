# agribiz/db/crud.py
# -----------------------------------------------------------------------------
# Read/write helpers for saved analyses
# - save, list by user (optional type filter), fetch and delete by id
# -----------------------------------------------------------------------------
from typing import Optional, Sequence

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from agribiz.db.models import AnalysisRecord


async def save_analysis(
    db: AsyncSession, *, user_id: str, type: str, data: dict
) -> AnalysisRecord:
    row = AnalysisRecord(user_id=user_id, type=type, data=data)
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row


async def list_analyses(
    db: AsyncSession, user_id: str, type: Optional[str] = None, limit: int = 100
) -> Sequence[AnalysisRecord]:
    """Newest first."""
    stmt = select(AnalysisRecord).where(AnalysisRecord.user_id == user_id)
    if type is not None:
        stmt = stmt.where(AnalysisRecord.type == type)
    stmt = stmt.order_by(desc(AnalysisRecord.created_at)).limit(limit)
    res = await db.execute(stmt)
    return res.scalars().all()


async def get_analysis(db: AsyncSession, analysis_id: str) -> AnalysisRecord | None:
    res = await db.execute(
        select(AnalysisRecord).where(AnalysisRecord.id == analysis_id)
    )
    return res.scalar_one_or_none()


async def delete_analysis(db: AsyncSession, analysis_id: str) -> bool:
    res = await db.execute(
        delete(AnalysisRecord).where(AnalysisRecord.id == analysis_id)
    )
    await db.commit()
    return res.rowcount > 0
