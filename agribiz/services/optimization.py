# agribiz/services/optimization.py
# -----------------------------------------------------------------------------
# Linear optimization over box-bounded variables
# - profit_max / cost_min: single linear objective
# - goal_programming: weighted under/over deviation variables per goal
# - solved with scipy.optimize.linprog (HiGHS); an empty feasible region is a
#   normal result with feasible=False, only malformed input raises
# -----------------------------------------------------------------------------
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np
from loguru import logger
from scipy.optimize import linprog

from agribiz.core.config import settings
from agribiz.core.errors import ValidationError
from agribiz.schemas.optimization import (
    ChartBar,
    ConstraintSign,
    ConstraintStatus,
    GoalDirection,
    GoalStatus,
    ObjectiveSense,
    OptimizationChart,
    OptimizationConstraint,
    OptimizationGoal,
    OptimizationInput,
    OptimizationResult,
    OptimizationType,
    Term,
    VariableValue,
)
from agribiz.services.summary import optimization_summary, render_plain

STATUS_OPTIMAL = "optimal"
STATUS_INFEASIBLE = "infeasible"

# linprog status codes
_LP_OPTIMAL = 0
_LP_INFEASIBLE = 2


# ── validation ──────────────────────────────────────────────────────────────
def _finite(value: float, field_name: str) -> None:
    if not math.isfinite(value):
        raise ValidationError(f"{field_name} must be a finite number", field_name)


def _check_terms(terms: Sequence[Term], known: set, owner: str) -> None:
    for j, term in enumerate(terms):
        if term.variable_id not in known:
            raise ValidationError(
                f"{owner} references unknown variable '{term.variable_id}'",
                f"{owner}.variables[{j}].variable_id",
            )
        _finite(term.coefficient, f"{owner}.variables[{j}].coefficient")


def validate_optimization_input(inp: OptimizationInput) -> None:
    if not inp.name.strip():
        raise ValidationError("optimization name is required", "name")
    if not inp.variables:
        raise ValidationError("at least one variable is required", "variables")

    known: set = set()
    for i, v in enumerate(inp.variables):
        where = f"variables[{i}]"
        if v.id in known:
            raise ValidationError(f"duplicate variable id '{v.id}'", f"{where}.id")
        known.add(v.id)
        _finite(v.lower_bound, f"{where}.lower_bound")
        _finite(v.upper_bound, f"{where}.upper_bound")
        if v.lower_bound > v.upper_bound:
            raise ValidationError(
                f"variable '{v.name}' has lower bound above upper bound",
                f"{where}.lower_bound",
            )
        if v.cost is not None:
            _finite(v.cost, f"{where}.cost")
        if v.profit is not None:
            _finite(v.profit, f"{where}.profit")

    for i, c in enumerate(inp.constraints):
        _check_terms(c.variables, known, f"constraints[{i}]")
        _finite(c.rhs, f"constraints[{i}].rhs")

    if inp.type == OptimizationType.GOAL_PROGRAMMING and not inp.goals:
        raise ValidationError("goal programming needs at least one goal", "goals")
    for i, g in enumerate(inp.goals or []):
        _check_terms(g.variables, known, f"goals[{i}]")
        _finite(g.target, f"goals[{i}].target")
        _finite(g.priority, f"goals[{i}].priority")
        if g.priority <= 0:
            raise ValidationError(
                "goal priority must be positive", f"goals[{i}].priority"
            )


# ── linear program assembly ─────────────────────────────────────────────────
@dataclass(slots=True)
class LinearProgram:
    c: np.ndarray
    bounds: List[tuple]
    a_ub: List[np.ndarray] = field(default_factory=list)
    b_ub: List[float] = field(default_factory=list)
    a_eq: List[np.ndarray] = field(default_factory=list)
    b_eq: List[float] = field(default_factory=list)

    def solve(self):
        return linprog(
            self.c,
            A_ub=np.vstack(self.a_ub) if self.a_ub else None,
            b_ub=np.array(self.b_ub) if self.b_ub else None,
            A_eq=np.vstack(self.a_eq) if self.a_eq else None,
            b_eq=np.array(self.b_eq) if self.b_eq else None,
            bounds=self.bounds,
            method="highs",
        )


def _row(terms: Sequence[Term], index: Dict[str, int], width: int) -> np.ndarray:
    row = np.zeros(width, dtype=float)
    for term in terms:
        row[index[term.variable_id]] += term.coefficient
    return row


def _base_program(
    inp: OptimizationInput, index: Dict[str, int], objective: np.ndarray, extra: int
) -> LinearProgram:
    """Decision variables, their bounds and the user constraints.

    `extra` appends that many non-negative columns after the decision
    variables (goal deviation variables).
    """
    n = len(inp.variables)
    width = n + extra
    lp = LinearProgram(
        c=objective,
        bounds=[(v.lower_bound, v.upper_bound) for v in inp.variables]
        + [(0, None)] * extra,
    )
    for con in inp.constraints:
        row = _row(con.variables, index, width)
        if con.sign == ConstraintSign.LE:
            lp.a_ub.append(row)
            lp.b_ub.append(con.rhs)
        elif con.sign == ConstraintSign.GE:
            lp.a_ub.append(-row)
            lp.b_ub.append(-con.rhs)
        else:
            lp.a_eq.append(row)
            lp.b_eq.append(con.rhs)
    return lp


@dataclass(slots=True)
class Solution:
    status: str
    x: Optional[np.ndarray] = None
    message: str = ""


def _run(lp: LinearProgram, n: int) -> Solution:
    res = lp.solve()
    if res.status == _LP_OPTIMAL:
        return Solution(STATUS_OPTIMAL, np.asarray(res.x[:n], dtype=float), res.message)
    if res.status == _LP_INFEASIBLE:
        return Solution(STATUS_INFEASIBLE, message=res.message)
    logger.warning("linprog finished with status {}: {}", res.status, res.message)
    return Solution(f"solver_status_{res.status}", message=res.message)


# ── one solver per optimization type ────────────────────────────────────────
def _linear_objective(
    inp: OptimizationInput, index: Dict[str, int], coef: np.ndarray, default: ObjectiveSense
) -> Solution:
    sense = inp.objective or default
    c = -coef if sense == ObjectiveSense.MAXIMIZE else coef
    return _run(_base_program(inp, index, c, 0), len(inp.variables))


def _solve_profit_max(inp: OptimizationInput, index: Dict[str, int]) -> Solution:
    coef = np.array([v.profit or 0.0 for v in inp.variables], dtype=float)
    return _linear_objective(inp, index, coef, ObjectiveSense.MAXIMIZE)


def _solve_cost_min(inp: OptimizationInput, index: Dict[str, int]) -> Solution:
    coef = np.array([v.cost or 0.0 for v in inp.variables], dtype=float)
    return _linear_objective(inp, index, coef, ObjectiveSense.MINIMIZE)


def _solve_goal_programming(
    inp: OptimizationInput, index: Dict[str, int]
) -> Solution:
    """Minimize weighted unwanted deviation.

    Column layout: x (n) | under_1..under_G | over_1..over_G, with
    a_g . x + under_g - over_g = target_g for every goal g.
    """
    n = len(inp.variables)
    goals = inp.goals or []
    g_count = len(goals)
    c = np.zeros(n + 2 * g_count, dtype=float)
    for g, goal in enumerate(goals):
        if goal.direction == GoalDirection.MAX:
            c[n + g] = goal.priority
        else:
            c[n + g_count + g] = goal.priority

    lp = _base_program(inp, index, c, 2 * g_count)
    for g, goal in enumerate(goals):
        row = _row(goal.variables, index, n + 2 * g_count)
        row[n + g] = 1.0
        row[n + g_count + g] = -1.0
        lp.a_eq.append(row)
        lp.b_eq.append(goal.target)
    return _run(lp, n)


SOLVERS: Dict[OptimizationType, Callable[[OptimizationInput, Dict[str, int]], Solution]] = {
    OptimizationType.PROFIT_MAX: _solve_profit_max,
    OptimizationType.COST_MIN: _solve_cost_min,
    OptimizationType.GOAL_PROGRAMMING: _solve_goal_programming,
}


# ── evaluation ──────────────────────────────────────────────────────────────
def _snap(value: float, tol: float) -> float:
    return 0.0 if abs(value) <= tol else float(value)


def linear_value(terms: Sequence[Term], values: Dict[str, float]) -> float:
    return float(sum(t.coefficient * values[t.variable_id] for t in terms))


def evaluate_constraint(
    con: OptimizationConstraint, values: Dict[str, float], tol: float
) -> ConstraintStatus:
    lhs = linear_value(con.variables, values)
    slack = lhs - con.rhs if con.sign == ConstraintSign.GE else con.rhs - lhs
    slack = _snap(slack, tol)
    if con.sign == ConstraintSign.EQ:
        satisfied = slack == 0.0
    else:
        satisfied = slack >= 0
    return ConstraintStatus(
        id=con.id, name=con.name, lhs=lhs, slack=slack, satisfied=satisfied
    )


def evaluate_goal(
    goal: OptimizationGoal, values: Dict[str, float], tol: float
) -> GoalStatus:
    achievement = linear_value(goal.variables, values)
    if goal.direction == GoalDirection.MAX:
        deviation = max(0.0, goal.target - achievement)
    else:
        deviation = max(0.0, achievement - goal.target)
    return GoalStatus(
        id=goal.id,
        name=goal.name,
        achievement=achievement,
        deviation=_snap(deviation, tol),
    )


def _objective_value(inp: OptimizationInput, values: Dict[str, float]) -> Optional[float]:
    if inp.type == OptimizationType.PROFIT_MAX:
        return float(sum((v.profit or 0.0) * values[v.id] for v in inp.variables))
    if inp.type == OptimizationType.COST_MIN:
        return float(sum((v.cost or 0.0) * values[v.id] for v in inp.variables))
    return None


def _infeasible_result(inp: OptimizationInput, status: str) -> OptimizationResult:
    goals = None
    if inp.type == OptimizationType.GOAL_PROGRAMMING:
        goals = [
            GoalStatus(id=g.id, name=g.name, achievement=0.0, deviation=0.0)
            for g in inp.goals or []
        ]
    return OptimizationResult(
        name=inp.name,
        type=inp.type,
        feasible=False,
        status=status,
        variables=[VariableValue(id=v.id, name=v.name, value=0.0) for v in inp.variables],
        constraints=[
            ConstraintStatus(id=c.id, name=c.name, lhs=0.0, slack=0.0, satisfied=False)
            for c in inp.constraints
        ],
        goals=goals,
        chart=OptimizationChart(
            data=[ChartBar(name=v.name, value=0.0) for v in inp.variables]
        ),
    )


# ── entry point ─────────────────────────────────────────────────────────────
def run_optimization(inp: OptimizationInput) -> OptimizationResult:
    validate_optimization_input(inp)
    tol = settings.OPTIMIZATION_TOLERANCE
    index = {v.id: i for i, v in enumerate(inp.variables)}

    solution = SOLVERS[inp.type](inp, index)

    if solution.status != STATUS_OPTIMAL:
        logger.info(
            "optimization '{}' ({}) not solved: {}",
            inp.name,
            inp.type.value,
            solution.message,
        )
        result = _infeasible_result(inp, solution.status)
    else:
        values = {v.id: float(solution.x[index[v.id]]) for v in inp.variables}
        goals = None
        weighted = None
        if inp.type == OptimizationType.GOAL_PROGRAMMING:
            goals = [evaluate_goal(g, values, tol) for g in inp.goals or []]
            weighted = float(
                sum(g.priority * s.deviation for g, s in zip(inp.goals or [], goals))
            )
        result = OptimizationResult(
            name=inp.name,
            type=inp.type,
            feasible=True,
            status=STATUS_OPTIMAL,
            objective_value=_objective_value(inp, values),
            weighted_deviation=weighted,
            variables=[
                VariableValue(id=v.id, name=v.name, value=values[v.id])
                for v in inp.variables
            ],
            constraints=[evaluate_constraint(c, values, tol) for c in inp.constraints],
            goals=goals,
            chart=OptimizationChart(
                data=[ChartBar(name=v.name, value=values[v.id]) for v in inp.variables]
            ),
        )
        logger.debug(
            "optimization '{}' ({}): objective={}",
            inp.name,
            inp.type.value,
            result.objective_value,
        )

    spans = optimization_summary(result)
    return result.model_copy(
        update={"summary": render_plain(spans), "summary_spans": spans}
    )
