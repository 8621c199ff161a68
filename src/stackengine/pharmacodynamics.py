# src/stackengine/pharmacodynamics.py
from __future__ import annotations

from typing import Mapping, Optional

import numpy as np

from .models.response import hill
from .results import ConcentrationSeries, PDSeries
from .types import PATHWAYS, RECEPTORS, CompoundSchema, ReceptorActivity


def receptor_occupancy(C_nM: np.ndarray, receptor: Optional[ReceptorActivity]) -> np.ndarray:
    """Occupancy (%) = C / (C + Kd) * 100; 0 where the compound has no affinity."""
    C_nM = np.asarray(C_nM, dtype=float)
    if receptor is None:
        return np.zeros_like(C_nM)
    return (C_nM / (C_nM + receptor.kd)) * 100.0


def simulate_pd(compound: CompoundSchema, series: ConcentrationSeries,
                multipliers: Optional[Mapping[str, float]] = None) -> PDSeries:
    """
    Receptor occupancy and pathway activation at every grid point.

    Interaction multipliers scale pathway activation only; occupancy is a
    binding quantity and is never adjusted.
    """
    C = series.nanomolar
    receptors = compound.pd.receptors
    pathways = compound.pd.pathways
    multipliers = multipliers or {}

    occupancy = {r: receptor_occupancy(C, receptors.get(r)) for r in RECEPTORS}

    base = {}
    for name in PATHWAYS:
        params = pathways.get(name)
        base[name] = np.zeros_like(C) if params is None else hill(C, params.emax, params.ec50, params.hill_n)

    activation = {
        name: base[name] * multipliers[name] if name in multipliers else base[name]
        for name in PATHWAYS
    }
    return PDSeries(
        compound_id=compound.compound_id,
        occupancy=occupancy,
        activation=activation,
        base_activation=base,
    )
