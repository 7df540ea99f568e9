# agribiz/services/feasibility.py
# -----------------------------------------------------------------------------
# Business feasibility calculator
# - cost aggregation -> unit economics -> break-even -> profitability ratios
# - pure and synchronous; validation is part of the contract
# -----------------------------------------------------------------------------
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

from agribiz.core.config import settings
from agribiz.core.errors import DomainError, ValidationError
from agribiz.schemas.feasibility import (
    BusinessFeasibilityInput,
    BusinessFeasibilityResult,
    CostItem,
)
from agribiz.services.summary import feasibility_summary, render_plain


# ── feasibility policy ──────────────────────────────────────────────────────
@dataclass(slots=True, frozen=True)
class FeasibilityPolicy:
    min_roi: float = 15.0  # percent, exclusive
    max_payback_years: float = 5.0  # exclusive

    @classmethod
    def from_settings(cls) -> "FeasibilityPolicy":
        return cls(
            min_roi=settings.FEASIBILITY_MIN_ROI,
            max_payback_years=settings.FEASIBILITY_MAX_PAYBACK_YEARS,
        )


def is_feasible(
    roi: float, payback_period: Optional[float], policy: FeasibilityPolicy
) -> bool:
    if payback_period is None:
        return False
    return roi > policy.min_roi and payback_period < policy.max_payback_years


# ── validation ──────────────────────────────────────────────────────────────
def _check_number(value: float, field: str, *, minimum: float | None = None) -> None:
    if not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite number", field)
    if minimum is not None and value < minimum:
        raise ValidationError(f"{field} must be at least {minimum:g}", field)


def _check_costs(items: Sequence[CostItem], field: str) -> None:
    if not items:
        raise ValidationError(f"at least one entry is required in {field}", field)
    for i, item in enumerate(items):
        _check_number(item.quantity, f"{field}[{i}].quantity", minimum=0)
        _check_number(item.price, f"{field}[{i}].price", minimum=0)
        _check_number(item.amount, f"{field}[{i}].amount", minimum=0)
    if not any(item.amount > 0 for item in items):
        raise ValidationError(f"{field} needs at least one positive amount", field)


def validate_feasibility_input(inp: BusinessFeasibilityInput) -> None:
    if not inp.business_name.strip():
        raise ValidationError("business name is required", "business_name")
    _check_costs(inp.investment_costs, "investment_costs")
    _check_costs(inp.operational_costs, "operational_costs")
    _check_number(inp.production_cost_per_unit, "production_cost_per_unit", minimum=0)
    _check_number(inp.monthly_sales_volume, "monthly_sales_volume")
    if inp.monthly_sales_volume <= 0:
        raise ValidationError(
            "monthly sales volume must be greater than zero", "monthly_sales_volume"
        )
    _check_number(inp.markup, "markup", minimum=0)
    if inp.project_lifespan < 1:
        raise ValidationError(
            "project lifespan must be at least 1 year", "project_lifespan"
        )


# ── calculation ─────────────────────────────────────────────────────────────
def total_amount(items: Sequence[CostItem]) -> float:
    return sum(item.amount for item in items)


def unit_cost(production_cost: float, operational: float, volume: float) -> float:
    return production_cost + operational / volume


def selling_price(cost: float, markup: float) -> float:
    return cost * (1 + markup / 100)


def break_even_units(fixed_costs: float, price: float, variable_cost: float) -> float:
    contribution = price - variable_cost
    if contribution == 0:
        raise DomainError(
            "break-even is undefined: selling price equals production cost per unit",
            "break_even_units",
        )
    return fixed_costs / contribution


def payback_period(investment: float, annual_profit: float) -> Optional[float]:
    if annual_profit == 0:
        raise DomainError(
            "payback period is undefined: annual net profit is zero",
            "payback_period",
        )
    if annual_profit < 0:
        return None
    return investment / annual_profit


def analyze_business(
    inp: BusinessFeasibilityInput, policy: FeasibilityPolicy | None = None
) -> BusinessFeasibilityResult:
    validate_feasibility_input(inp)
    policy = policy or FeasibilityPolicy.from_settings()

    volume = inp.monthly_sales_volume
    pc = inp.production_cost_per_unit

    investment = total_amount(inp.investment_costs)
    operational = total_amount(inp.operational_costs)

    cost = unit_cost(pc, operational, volume)
    price = selling_price(cost, inp.markup)

    bep_units = break_even_units(operational, price, pc)
    bep_amount = bep_units * price

    revenue = volume * price
    monthly_profit = revenue - volume * pc - operational
    annual_profit = monthly_profit * 12
    margin = monthly_profit / revenue * 100

    payback = payback_period(investment, annual_profit)
    roi = annual_profit / investment * 100

    result = BusinessFeasibilityResult(
        total_investment=investment,
        total_operational=operational,
        unit_cost=cost,
        selling_price=price,
        break_even_units=bep_units,
        break_even_amount=bep_amount,
        monthly_net_profit=monthly_profit,
        annual_net_profit=annual_profit,
        profit_margin=margin,
        payback_period=payback,
        roi=roi,
        feasible=is_feasible(roi, payback, policy),
    )
    logger.debug(
        "feasibility {}: roi={:.2f} payback={} feasible={}",
        inp.business_name,
        roi,
        payback,
        result.feasible,
    )

    spans = feasibility_summary(inp, result)
    return result.model_copy(
        update={"summary": render_plain(spans), "summary_spans": spans}
    )
