# agribiz/db/models.py
# -----------------------------------------------------------------------------
# ORM models
# - AnalysisRecord: one saved calculator run {input, results} per row
# -----------------------------------------------------------------------------
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, String

from agribiz.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class AnalysisRecord(Base):
    __tablename__ = "analysis_results"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String, index=True, nullable=False)
    type = Column(String, index=True, nullable=False)  # AnalysisType value
    data = Column(JSON, nullable=False)  # {"input": ..., "results": ...}
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    __table_args__ = (Index("ix_analysis_user_type", "user_id", "type"),)
