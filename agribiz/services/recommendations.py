# agribiz/services/recommendations.py
# -----------------------------------------------------------------------------
# Rule-based recommendations from a user's saved analyses
# - the newest record of each analysis type yields one item
# - stored payloads are validated against the result models; records that
#   do not match are logged and skipped
# - recomputed on request, nothing is stored
# -----------------------------------------------------------------------------
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

import pydantic
from loguru import logger

from agribiz.schemas.analysis import (
    AnalysisType,
    PersistedAnalysis,
    RecommendationCategory,
    RecommendationItem,
    RecommendationSet,
)
from agribiz.schemas.feasibility import BusinessFeasibilityInput, BusinessFeasibilityResult
from agribiz.schemas.forecast import ForecastResult
from agribiz.schemas.optimization import OptimizationResult
from agribiz.services.summary import fmt_currency, fmt_percent, fmt_quantity, fmt_years


def _item(
    set_id: str,
    now: datetime,
    category: RecommendationCategory,
    title: str,
    description: str,
    confidence: float,
    data: dict,
) -> RecommendationItem:
    return RecommendationItem(
        id=uuid.uuid4().hex,
        set_id=set_id,
        type=category,
        title=title,
        description=description,
        confidence=round(min(1.0, max(0.0, confidence)), 2),
        data=data,
        created_at=now,
    )


def _from_feasibility(rec: PersistedAnalysis, set_id: str, now: datetime):
    inp = BusinessFeasibilityInput.model_validate(rec.data.input)
    res = BusinessFeasibilityResult.model_validate(rec.data.results)
    name = inp.business_name or "your business"
    data = {"analysis_id": rec.id, "roi": res.roi, "payback_period": res.payback_period}

    if res.feasible and res.payback_period is not None:
        return _item(
            set_id,
            now,
            RecommendationCategory.BUSINESS,
            f"Proceed with {name}",
            f"The plan returns {fmt_percent(res.roi)} a year and pays back in "
            f"{fmt_years(res.payback_period)} years with a monthly profit of "
            f"{fmt_currency(res.monthly_net_profit)}.",
            0.8,
            data,
        )
    return _item(
        set_id,
        now,
        RecommendationCategory.BUSINESS,
        f"Revisit the plan for {name}",
        f"ROI is {fmt_percent(res.roi)}. Consider a higher markup, lower monthly "
        "operational costs or a smaller initial investment before committing.",
        0.6,
        data,
    )


def _from_forecast(rec: PersistedAnalysis, set_id: str, now: datetime):
    res = ForecastResult.model_validate(rec.data.results)
    if not res.forecasted:
        return None
    product = res.product_name or "your product"
    nxt = res.forecasted[0]
    mape = res.accuracy.mape
    confidence = 0.5 if mape is None else 1 - mape / 100
    accuracy = "" if mape is None else f" (back-tested MAPE {fmt_percent(mape)})"
    return _item(
        set_id,
        now,
        RecommendationCategory.MARKET,
        f"Plan {product} supply for {nxt.period}",
        f"Expected demand is {fmt_quantity(nxt.forecast)}{accuracy}.",
        max(0.1, min(0.95, confidence)),
        {"analysis_id": rec.id, "period": nxt.period, "forecast": nxt.forecast},
    )


def _from_optimization(rec: PersistedAnalysis, set_id: str, now: datetime):
    res = OptimizationResult.model_validate(rec.data.results)
    name = res.name or "optimization"
    if not res.feasible:
        return _item(
            set_id,
            now,
            RecommendationCategory.RESOURCE,
            f"Relax the constraints of {name}",
            "No allocation satisfies every constraint; loosen a limit or widen a "
            "variable bound and run it again.",
            0.4,
            {"analysis_id": rec.id},
        )
    allocation = ", ".join(f"{v.name} {fmt_quantity(v.value)}" for v in res.variables)
    return _item(
        set_id,
        now,
        RecommendationCategory.RESOURCE,
        f"Apply the {name} allocation",
        f"Allocate resources as: {allocation}.",
        0.85,
        {"analysis_id": rec.id, "objective_value": res.objective_value},
    )


_RULES: Dict[
    AnalysisType,
    Callable[[PersistedAnalysis, str, datetime], Optional[RecommendationItem]],
] = {
    AnalysisType.BUSINESS_FEASIBILITY: _from_feasibility,
    AnalysisType.DEMAND_FORECAST: _from_forecast,
    AnalysisType.OPTIMIZATION: _from_optimization,
}


def build_recommendations(
    user_id: str,
    records: Sequence[PersistedAnalysis],
    now: datetime | None = None,
) -> RecommendationSet:
    """`records` are expected newest first, as crud.list_analyses returns them.

    Each type is answered by its newest record whose payload validates; older
    records of that type are ignored.
    """
    now = now or datetime.now(timezone.utc)
    set_id = uuid.uuid4().hex

    picked: Dict[AnalysisType, Optional[RecommendationItem]] = {}
    for rec in records:
        if rec.type in picked or rec.type not in _RULES:
            continue
        try:
            picked[rec.type] = _RULES[rec.type](rec, set_id, now)
        except pydantic.ValidationError as e:
            logger.warning(
                "skipping {} {} for user {}: payload does not match ({} errors)",
                rec.type.value,
                rec.id,
                user_id,
                e.error_count(),
            )

    items: List[RecommendationItem] = [
        picked[kind] for kind in _RULES if picked.get(kind) is not None
    ]

    if items:
        summary = (
            f"{len(items)} recommendation(s) based on your {len(records)} saved "
            "analyses."
        )
    else:
        summary = "No saved analyses yet. Run a calculator and save it to get recommendations."
    return RecommendationSet(
        id=set_id, user_id=user_id, summary=summary, created_at=now, items=items
    )
