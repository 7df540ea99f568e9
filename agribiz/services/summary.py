# agribiz/services/summary.py
# -----------------------------------------------------------------------------
# Narrative summaries for the three calculators
# - formatting only: every number shown here was computed by an engine
# - output is a list of SummarySpan (severity + plain text), never markup
#
# Precision per field
#   currency            Rp 3,500,000 (grouped integer)
#   percentages         one decimal
#   payback (years)     one decimal
#   break-even units    ceiling, grouped integer
#   forecast, MAE       two decimals, grouped
#   optimization values two decimals, grouped
# -----------------------------------------------------------------------------
from __future__ import annotations

import math
from typing import List, Sequence

from agribiz.core.config import settings
from agribiz.schemas.common import Severity, SummarySpan
from agribiz.schemas.feasibility import (
    BusinessFeasibilityInput,
    BusinessFeasibilityResult,
)
from agribiz.schemas.forecast import ForecastMethod, ForecastResult
from agribiz.schemas.optimization import OptimizationResult, OptimizationType

_METHOD_LABELS = {
    ForecastMethod.SMA: "simple moving average",
    ForecastMethod.EXPONENTIAL: "exponential smoothing",
}


# ── number formats ──────────────────────────────────────────────────────────
def fmt_currency(value: float) -> str:
    return f"{settings.CURRENCY_SYMBOL} {value:,.0f}"


def fmt_percent(value: float) -> str:
    return f"{value:.1f}%"


def fmt_years(value: float) -> str:
    return f"{value:.1f}"


def fmt_units(value: float) -> str:
    return f"{math.ceil(value):,}"


def fmt_quantity(value: float) -> str:
    return f"{value:,.2f}"


def _span(text: str, severity: Severity = Severity.NEUTRAL) -> SummarySpan:
    return SummarySpan(severity=severity, text=text)


def render_plain(spans: Sequence[SummarySpan]) -> str:
    """Join spans into the plain-text summary stored on results."""
    return "".join(s.text for s in spans)


# ── feasibility ─────────────────────────────────────────────────────────────
def feasibility_summary(
    inp: BusinessFeasibilityInput, res: BusinessFeasibilityResult
) -> List[SummarySpan]:
    volume = inp.monthly_sales_volume
    spans = [
        _span(f"Based on the analysis, this {inp.business_name} venture appears to be ")
    ]

    if res.feasible:
        spans.append(_span("feasible", Severity.POSITIVE))
        spans.append(
            _span(
                f" with a positive ROI of {fmt_percent(res.roi)} and a payback period "
                f"of {fmt_years(res.payback_period)} years. "
                f"The monthly profit of {fmt_currency(res.monthly_net_profit)} "
                f"represents a healthy {fmt_percent(res.profit_margin)} profit margin."
            )
        )
    else:
        spans.append(_span("not feasible", Severity.NEGATIVE))
        if res.payback_period is None:
            spans.append(
                _span(
                    " with the current parameters. The project has an ROI of "
                    f"{fmt_percent(res.roi)} and does not repay its investment."
                )
            )
        else:
            spans.append(
                _span(
                    " with the current parameters. The project has a low ROI of "
                    f"{fmt_percent(res.roi)} and/or a long payback period of "
                    f"{fmt_years(res.payback_period)} years."
                )
            )

    spans.append(
        _span(f"\n\nThe break-even point of {fmt_units(res.break_even_units)} units is ")
    )
    if res.break_even_units > volume:
        spans.append(
            _span(
                f"above your projected monthly sales volume of {volume:,.0f} units, "
                "indicating that you may not reach profitability with your current "
                "business plan.",
                Severity.NEGATIVE,
            )
        )
    else:
        spans.append(
            _span(
                f"below your projected monthly sales volume of {volume:,.0f} units, "
                "indicating that you should reach profitability with your current "
                "business plan.",
                Severity.POSITIVE,
            )
        )
    return spans


# ── forecast ────────────────────────────────────────────────────────────────
def forecast_summary(res: ForecastResult) -> List[SummarySpan]:
    label = _METHOD_LABELS[res.method]
    spans = []
    for item in res.forecasted:
        spans.append(
            _span(
                f"The {label} forecast for {res.product_name} projects a demand of "
                f"{fmt_quantity(item.forecast)} in {item.period}."
            )
        )

    acc = res.accuracy
    if acc.mape is None:
        spans.append(
            _span(
                "\n\nMAPE is not available because every back-tested actual value is "
                "zero.",
                Severity.NEGATIVE,
            )
        )
    else:
        spans.append(
            _span(
                "\n\nBack-testing on the historical data gives a MAPE of "
                f"{fmt_percent(acc.mape)}."
            )
        )
    if acc.mae is not None:
        spans.append(_span(f" The mean absolute error is {fmt_quantity(acc.mae)}."))
    return spans


# ── optimization ────────────────────────────────────────────────────────────
def optimization_summary(res: OptimizationResult) -> List[SummarySpan]:
    if not res.feasible:
        if res.status == "infeasible":
            text = (
                "The optimization problem is infeasible: no combination of values "
                "satisfies every constraint and bound. Please check your constraints "
                "and try again."
            )
        else:
            text = (
                f"The solver could not find an optimal solution ({res.status}). "
                "Please check your inputs and try again."
            )
        return [_span(text, Severity.NEGATIVE)]

    spans = [
        _span(f'Optimization for "{res.name}" completed successfully.\n\n', Severity.POSITIVE)
    ]

    if res.type == OptimizationType.PROFIT_MAX:
        spans.append(
            _span(f"The optimal profit is {fmt_quantity(res.objective_value)}.\n\n")
        )
    elif res.type == OptimizationType.COST_MIN:
        spans.append(
            _span(f"The optimal cost is {fmt_quantity(res.objective_value)}.\n\n")
        )
    elif res.type == OptimizationType.GOAL_PROGRAMMING:
        goals = res.goals or []
        met = [g for g in goals if g.deviation == 0]
        spans.append(
            _span(
                f"{len(met)} out of {len(goals)} goals were fully satisfied "
                f"(weighted deviation {fmt_quantity(res.weighted_deviation or 0.0)}).\n\n",
                Severity.POSITIVE if len(met) == len(goals) else Severity.NEUTRAL,
            )
        )
        unmet = [g for g in goals if g.deviation > 0]
        if unmet:
            spans.append(_span("The following goals were not fully satisfied:\n"))
            for g in unmet:
                spans.append(
                    _span(
                        f"- {g.name}: achieved {fmt_quantity(g.achievement)} with a "
                        f"deviation of {fmt_quantity(g.deviation)}\n",
                        Severity.NEGATIVE,
                    )
                )
            spans.append(_span("\n"))

    spans.append(_span("Optimal variable values:\n"))
    for v in res.variables:
        spans.append(_span(f"- {v.name}: {fmt_quantity(v.value)}\n"))

    violated = [c for c in res.constraints if not c.satisfied]
    if violated:
        spans.append(
            _span("\nWarning: some constraints are not satisfied:\n", Severity.NEGATIVE)
        )
        for c in violated:
            spans.append(
                _span(f"- {c.name} (slack {fmt_quantity(c.slack)})\n", Severity.NEGATIVE)
            )
    return spans
