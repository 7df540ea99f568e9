"""
Tests for rule-based recommendations
====================================
"""

from datetime import datetime, timezone

from agribiz.schemas.analysis import (
    AnalysisPayload,
    AnalysisType,
    PersistedAnalysis,
    RecommendationCategory,
)
from agribiz.schemas.optimization import ConstraintSign
from agribiz.services.feasibility import analyze_business
from agribiz.services.forecast import generate_forecast
from agribiz.services.optimization import run_optimization
from agribiz.services.persistence import build_payload
from agribiz.services.recommendations import build_recommendations

from tests.conftest import single_variable_problem

NOW = datetime(2026, 10, 1, tzinfo=timezone.utc)


def _record(id, kind, inp, result):
    return PersistedAnalysis(
        id=id,
        user_id="u1",
        type=kind,
        data=AnalysisPayload(**build_payload(inp, result)),
        created_at=NOW,
    )


class TestBuildRecommendations:
    def test_no_history(self):
        rec_set = build_recommendations("u1", [], now=NOW)
        assert rec_set.items == []
        assert "No saved analyses" in rec_set.summary

    def test_one_item_per_analysis_type(self, feasibility_input, sma_input, profit_problem):
        records = [
            _record("f1", AnalysisType.BUSINESS_FEASIBILITY, feasibility_input, analyze_business(feasibility_input)),
            _record("d1", AnalysisType.DEMAND_FORECAST, sma_input, generate_forecast(sma_input)),
            _record("o1", AnalysisType.OPTIMIZATION, profit_problem, run_optimization(profit_problem)),
        ]
        rec_set = build_recommendations("u1", records, now=NOW)

        kinds = [i.type for i in rec_set.items]
        assert kinds == [
            RecommendationCategory.BUSINESS,
            RecommendationCategory.MARKET,
            RecommendationCategory.RESOURCE,
        ]
        assert all(i.set_id == rec_set.id for i in rec_set.items)
        assert all(0 <= i.confidence <= 1 for i in rec_set.items)
        assert rec_set.items[0].title == "Proceed with Hydroponic Lettuce"
        assert rec_set.items[1].title == "Plan Chili supply for Period 4"
        assert rec_set.items[0].data["analysis_id"] == "f1"

    def test_newest_record_wins(self, profit_problem):
        bad = single_variable_problem([(ConstraintSign.GE, 5), (ConstraintSign.LE, 3)])
        records = [
            _record("new", AnalysisType.OPTIMIZATION, bad, run_optimization(bad)),
            _record("old", AnalysisType.OPTIMIZATION, profit_problem, run_optimization(profit_problem)),
        ]
        rec_set = build_recommendations("u1", records, now=NOW)
        assert len(rec_set.items) == 1
        assert rec_set.items[0].title.startswith("Relax the constraints")
        assert rec_set.items[0].data["analysis_id"] == "new"


def _raw_record(id, kind, results, inp=None):
    return PersistedAnalysis(
        id=id,
        user_id="u1",
        type=kind,
        data=AnalysisPayload(input=inp or {}, results=results),
        created_at=NOW,
    )


class TestMalformedPayloads:
    """Hand-saved records can hold any JSON; they must never break the set."""

    def test_partial_feasibility_result_is_skipped(self):
        records = [_raw_record("bad", AnalysisType.BUSINESS_FEASIBILITY, {"feasible": True})]
        rec_set = build_recommendations("u1", records, now=NOW)
        assert rec_set.items == []

    def test_falls_back_to_older_valid_record(self, feasibility_input):
        records = [
            _raw_record("bad", AnalysisType.BUSINESS_FEASIBILITY, {"feasible": True, "roi": "high"}),
            _record("good", AnalysisType.BUSINESS_FEASIBILITY, feasibility_input, analyze_business(feasibility_input)),
        ]
        rec_set = build_recommendations("u1", records, now=NOW)
        assert [i.data["analysis_id"] for i in rec_set.items] == ["good"]

    def test_forecast_with_non_object_period_is_skipped(self):
        results = {
            "product_name": "Chili",
            "method": "sma",
            "forecasted": ["Period 4"],
            "accuracy": {"mape": "n/a"},
            "chart": {"historical": [], "forecast": []},
        }
        records = [_raw_record("bad", AnalysisType.DEMAND_FORECAST, results)]
        assert build_recommendations("u1", records, now=NOW).items == []

    def test_feasible_without_payback_is_not_recommended_to_proceed(self, feasibility_input):
        result = analyze_business(feasibility_input).model_copy(update={"payback_period": None})
        records = [_record("f1", AnalysisType.BUSINESS_FEASIBILITY, feasibility_input, result)]
        rec_set = build_recommendations("u1", records, now=NOW)
        assert rec_set.items[0].title.startswith("Revisit the plan")
