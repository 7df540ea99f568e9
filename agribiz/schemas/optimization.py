# agribiz/schemas/optimization.py
# -----------------------------------------------------------------------------
# Linear optimization schemas
# - variables are box bounded, constraints are linear rows over variables
# - goals are only read in goal programming mode
# -----------------------------------------------------------------------------
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from agribiz.schemas.common import SummarySpan


class OptimizationType(str, Enum):
    PROFIT_MAX = "profit_max"
    COST_MIN = "cost_min"
    GOAL_PROGRAMMING = "goal_programming"


class ConstraintSign(str, Enum):
    LE = "<="
    GE = ">="
    EQ = "="


class GoalDirection(str, Enum):
    MIN = "min"
    MAX = "max"


class ObjectiveSense(str, Enum):
    MAXIMIZE = "maximize"
    MINIMIZE = "minimize"


class OptimizationVariable(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    lower_bound: float = 0
    upper_bound: float
    cost: Optional[float] = None
    profit: Optional[float] = None


class Term(BaseModel):
    model_config = ConfigDict(frozen=True)

    variable_id: str
    coefficient: float


class OptimizationConstraint(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    variables: List[Term]
    rhs: float
    sign: ConstraintSign = ConstraintSign.LE


class OptimizationGoal(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    target: float
    priority: float = 1  # weight of this goal's deviation
    variables: List[Term]
    direction: GoalDirection = GoalDirection.MAX


class OptimizationInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: OptimizationType
    variables: List[OptimizationVariable]
    constraints: List[OptimizationConstraint] = Field(default_factory=list)
    goals: Optional[List[OptimizationGoal]] = None
    objective: Optional[ObjectiveSense] = None  # profit_max / cost_min only


class VariableValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    value: float


class ConstraintStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    lhs: float
    slack: float
    satisfied: bool


class GoalStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    achievement: float
    deviation: float


class ChartBar(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: float


class OptimizationChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "bar"
    data: List[ChartBar] = Field(default_factory=list)


class OptimizationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: OptimizationType
    feasible: bool
    status: str
    objective_value: Optional[float] = None
    weighted_deviation: Optional[float] = None  # goal programming only
    variables: List[VariableValue]
    constraints: List[ConstraintStatus]
    goals: Optional[List[GoalStatus]] = None
    summary: str = ""
    summary_spans: List[SummarySpan] = Field(default_factory=list)
    chart: OptimizationChart = Field(default_factory=OptimizationChart)
