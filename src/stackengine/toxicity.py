# src/stackengine/toxicity.py
from __future__ import annotations

from typing import Mapping, Optional

import numpy as np

from .models.response import hill
from .results import ConcentrationSeries, ToxicitySeries
from .types import ORGANS, CoefficientToxicity, CompoundSchema, HillToxicity, ToxicityModel


def evaluate_model(model: ToxicityModel, C_nM: np.ndarray) -> np.ndarray:
    """
    Hill_TC50   : Emax * C^n / (TC50^n + C^n)
    Coefficient : coefficient * C (linear)
    """
    if isinstance(model, HillToxicity):
        return hill(C_nM, model.emax, model.tc50, model.hill_n)
    if isinstance(model, CoefficientToxicity):
        return model.coefficient * np.asarray(C_nM, dtype=float)
    raise TypeError(f"Unsupported toxicity model: {type(model).__name__}")


def simulate_toxicity(compound: CompoundSchema, series: ConcentrationSeries,
                      multipliers: Optional[Mapping[str, float]] = None) -> ToxicitySeries:
    """
    Per-organ toxicity scores; interaction multipliers are applied after the
    base model. An organ the compound has no model for scores 0.
    """
    C = series.nanomolar
    multipliers = multipliers or {}
    organs = {}
    for organ in ORGANS:
        model = compound.toxicity.get(organ)
        score = np.zeros_like(C) if model is None else evaluate_model(model, C)
        if organ in multipliers:
            score = score * multipliers[organ]
        organs[organ] = score
    return ToxicitySeries(compound_id=compound.compound_id, organs=organs)
