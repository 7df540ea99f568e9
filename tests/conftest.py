"""
Pytest configuration and shared fixtures
========================================
The environment is pointed at a throwaway SQLite file and log directory
before any agribiz module reads its settings.
"""

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="agribiz-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP}/test.db")
os.environ.setdefault("LOG_DIR", os.path.join(_TMP, "logs"))

import pytest

from agribiz.schemas.feasibility import (
    BusinessFeasibilityInput,
    InvestmentCost,
    OperationalCost,
)
from agribiz.schemas.forecast import ForecastInput, ForecastMethod, HistoricalDemand
from agribiz.schemas.optimization import (
    ConstraintSign,
    OptimizationConstraint,
    OptimizationInput,
    OptimizationType,
    OptimizationVariable,
    Term,
)


@pytest.fixture
def feasibility_input():
    """Scenario: 10M investment, 2M monthly opex, 5,000/unit, 1,000 units, 50% markup."""
    return BusinessFeasibilityInput(
        business_name="Hydroponic Lettuce",
        investment_costs=[
            InvestmentCost(id="i1", name="Greenhouse", quantity=1, price=10_000_000, amount=10_000_000)
        ],
        operational_costs=[
            OperationalCost(id="o1", name="Labor", quantity=2, price=1_000_000, amount=2_000_000)
        ],
        production_cost_per_unit=5000,
        monthly_sales_volume=1000,
        markup=50,
        project_lifespan=5,
    )


def make_history(values, prefix="Period"):
    return [
        HistoricalDemand(id=f"h{i}", period=f"{prefix} {i + 1}", demand=v)
        for i, v in enumerate(values)
    ]


@pytest.fixture
def sma_input():
    return ForecastInput(
        product_name="Chili",
        historical_demand=make_history([10, 20, 30]),
        method=ForecastMethod.SMA,
        period_length=3,
    )


def single_variable_problem(constraints, lower=0, upper=10, profit=2):
    return OptimizationInput(
        name="Single crop",
        type=OptimizationType.PROFIT_MAX,
        variables=[
            OptimizationVariable(id="x", name="Corn", lower_bound=lower, upper_bound=upper, profit=profit)
        ],
        constraints=[
            OptimizationConstraint(
                id=f"c{i}",
                name=f"limit {i}",
                variables=[Term(variable_id="x", coefficient=1)],
                rhs=rhs,
                sign=sign,
            )
            for i, (sign, rhs) in enumerate(constraints)
        ],
    )


@pytest.fixture
def profit_problem():
    """maximize 2x subject to x <= 10, x >= 0."""
    return single_variable_problem([(ConstraintSign.LE, 10), (ConstraintSign.GE, 0)], upper=100)
