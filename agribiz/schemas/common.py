# agribiz/schemas/common.py
# -----------------------------------------------------------------------------
# Shared value objects (summary spans, chart points)
# -----------------------------------------------------------------------------
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Severity(str, Enum):
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    NEGATIVE = "negative"


class SummarySpan(BaseModel):
    """A run of summary text; the presentation layer decides the styling."""

    model_config = ConfigDict(frozen=True)

    severity: Severity = Severity.NEUTRAL
    text: str


class ValuePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    period: str
    value: float
