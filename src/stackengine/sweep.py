# src/stackengine/sweep.py
"""Dose sweeps and the (pass-through) stack optimiser."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from .config import EngineConfig
from .helpers import validate_non_negative
from .results import OptimizationResponse, SweepPoint, SweepResponse
from .simulate import run_simulation
from .types import DoseEvent, InteractionRule, OptimizationRequest, SimulationRequest, SweepRequest

LOGGER = logging.getLogger(__name__)

# Organs averaged into the sweep's risk score.
RISK_ORGANS = ("hepatic", "renal", "cardiovascular")

# Scores reported while optimisation is a pass-through.
PLACEHOLDER_SCORE = 100.0
PLACEHOLDER_RISK = 0.0


def evaluate_scalar(request: SweepRequest, scalar: float,
                    interactions: Iterable[InteractionRule] = (),
                    config: Optional[EngineConfig] = None) -> SweepPoint:
    """
    Scale every stack dose by `scalar`, give it at t=0 and read the aggregate
    at the evaluation time point.

    benefit : whole-stack anabolic load
    risk    : mean raw load of the hepatic, renal and cardiovascular series
    """
    validate_non_negative("scalar", scalar)
    doses = tuple(
        DoseEvent(compound_id=entry.compound_id, time_h=0.0, amount_mg=entry.dose_mg * scalar,
                  ester_id=entry.ester_id)
        for entry in request.base_stack
        if entry.dose_mg * scalar > 0
    )
    sim = run_simulation(
        SimulationRequest(
            compounds=request.compounds,
            doses=doses,
            time_points=(float(request.evaluation_time_h),),
            body_weight_kg=request.body_weight_kg,
        ),
        interactions,
        config,
    )
    benefit = float(sim.aggregate.total_anabolic_load[0])
    risk = sum(float(sim.aggregate.total_toxicity[organ][0]) for organ in RISK_ORGANS) / len(RISK_ORGANS)
    base_mg_eq = sum(entry.dose_mg for entry in request.base_stack)
    return SweepPoint(scalar=float(scalar), mg_eq=base_mg_eq * scalar,
                      benefit=benefit, risk=risk, net_gap=benefit - risk)


def select_sweet_spot(points: Sequence[SweepPoint]) -> Optional[SweepPoint]:
    """
    Point with the largest net gap; ties go to the smallest scalar.
    None for an empty sweep.
    """
    best: Optional[SweepPoint] = None
    for point in sorted(points, key=lambda p: p.scalar):
        if best is None or point.net_gap > best.net_gap:
            best = point
    return best


def run_sweep(request: SweepRequest,
              interactions: Iterable[InteractionRule] = (),
              config: Optional[EngineConfig] = None) -> SweepResponse:
    """One full pipeline run per scalar, points reported in request order."""
    validate_non_negative("evaluation_time_h", request.evaluation_time_h)
    rules = tuple(interactions)
    points = tuple(evaluate_scalar(request, s, rules, config) for s in request.scalars)
    sweet_spot = select_sweet_spot(points)
    LOGGER.debug("Sweep over %d scalar(s); sweet spot %s", len(points),
                 None if sweet_spot is None else sweet_spot.scalar)
    return SweepResponse(points=points, sweet_spot=sweet_spot)


def run_optimization(request: OptimizationRequest) -> OptimizationResponse:
    """
    No optimisation algorithm is defined yet: the stack is returned unchanged
    with placeholder scores and implemented=False.
    """
    LOGGER.warning("Stack optimisation (%s) is not implemented; returning the input stack", request.goal)
    return OptimizationResponse(
        optimized_stack=tuple(request.current_stack),
        original_score=PLACEHOLDER_SCORE,
        new_score=PLACEHOLDER_SCORE,
        risk_score=PLACEHOLDER_RISK,
        implemented=False,
    )
