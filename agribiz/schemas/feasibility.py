# agribiz/schemas/feasibility.py
# -----------------------------------------------------------------------------
# Business feasibility input/result schemas
# - amounts are trusted as supplied (quantity * price is the caller's job)
# - range checks live in the engine so they hold outside the HTTP layer too
# -----------------------------------------------------------------------------
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from agribiz.schemas.common import SummarySpan


class CostItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    quantity: float = 0
    price: float = 0
    amount: float


class InvestmentCost(CostItem):
    pass


class OperationalCost(CostItem):
    pass


class BusinessFeasibilityInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    business_name: str
    investment_costs: List[InvestmentCost]
    operational_costs: List[OperationalCost]  # monthly
    production_cost_per_unit: float
    monthly_sales_volume: float
    markup: float  # percent
    project_lifespan: int = 5  # years


class BusinessFeasibilityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_investment: float
    total_operational: float
    unit_cost: float
    selling_price: float
    break_even_units: float
    break_even_amount: float
    monthly_net_profit: float
    annual_net_profit: float
    profit_margin: float
    payback_period: Optional[float] = None  # None: never repaid
    roi: float
    feasible: bool
    summary: str = ""
    summary_spans: List[SummarySpan] = Field(default_factory=list)
