# src/stackengine/results.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .types import StackEntry


@dataclass(frozen=True)
class ConcentrationSeries:
    """
    Concentration of one compound on the shared time grid.

    time_h    : grid (hours)
    mg_per_l  : total concentration (mg/L)
    nanomolar : same values in nM, used by the PD and toxicity stages
    """
    compound_id: str
    time_h: np.ndarray
    mg_per_l: np.ndarray
    nanomolar: np.ndarray


@dataclass(frozen=True)
class PDSeries:
    """
    occupancy        : receptor -> % occupancy (0-100)
    activation       : pathway -> activation after interaction multipliers
    base_activation  : pathway -> activation before interaction multipliers
    """
    compound_id: str
    occupancy: Dict[str, np.ndarray]
    activation: Dict[str, np.ndarray]
    base_activation: Dict[str, np.ndarray]


@dataclass(frozen=True)
class ToxicitySeries:
    compound_id: str
    organs: Dict[str, np.ndarray]


@dataclass(frozen=True)
class CompoundResult:
    pk: ConcentrationSeries
    pd: PDSeries
    toxicity: ToxicitySeries
    summary: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class AggregateResult:
    """
    Whole-stack curves on the shared grid plus steady-state scalars.

    total_anabolic_load : potency-weighted load (not smoothed)
    total_toxicity      : organ -> raw toxic load
    smoothed_toxicity   : organ -> EMA-smoothed toxic load
    steady_state_benefit, steady_state_toxicity : trailing-window means
    """
    total_anabolic_load: np.ndarray
    total_toxicity: Dict[str, np.ndarray]
    smoothed_toxicity: Dict[str, np.ndarray]
    steady_state_benefit: float
    steady_state_toxicity: float


@dataclass(frozen=True)
class SimulationResponse:
    time_points: np.ndarray
    results: Dict[str, CompoundResult]
    aggregate: AggregateResult
    warnings: Tuple[str, ...] = ()

    @property
    def aggregate_benefit(self) -> float:
        return self.aggregate.steady_state_benefit

    @property
    def aggregate_toxicity(self) -> float:
        return self.aggregate.steady_state_toxicity


@dataclass(frozen=True)
class SweepPoint:
    scalar: float
    mg_eq: float
    benefit: float
    risk: float
    net_gap: float


@dataclass(frozen=True)
class SweepResponse:
    points: Tuple[SweepPoint, ...]
    sweet_spot: Optional[SweepPoint]


@dataclass(frozen=True)
class OptimizationResponse:
    """
    implemented is False while optimisation is a pass-through: the stack comes
    back unchanged and the scores are placeholders.
    """
    optimized_stack: Sequence[StackEntry]
    original_score: float
    new_score: float
    risk_score: float
    implemented: bool = False
