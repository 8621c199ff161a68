# src/stackengine/aggregate.py
"""Whole-stack load curves, organ-stress smoothing and steady-state summaries."""

from __future__ import annotations

from typing import Dict, Mapping

import numpy as np

from .metrics import exponential_smoothing, trailing_mean
from .results import AggregateResult, ConcentrationSeries, PDSeries, ToxicitySeries
from .types import ORGANS, CompoundSchema


def released_mg_per_day(C_mg_per_l: np.ndarray, clearance_l_per_h: float) -> np.ndarray:
    """
    Exposure proxy: the elimination rate C * CL, expressed per day. At steady
    state this equals the rate at which the depot releases drug.
    """
    return np.asarray(C_mg_per_l, dtype=float) * clearance_l_per_h * 24.0


def activation_ratio(adjusted: np.ndarray, base: np.ndarray) -> np.ndarray:
    """adjusted / base where base > 0, else 1 (no interaction signal to carry)."""
    ratio = np.ones_like(base, dtype=float)
    np.divide(adjusted, base, out=ratio, where=base > 0)
    return ratio


def accumulate_loads(t: np.ndarray,
                     compounds: Mapping[str, CompoundSchema],
                     pk: Mapping[str, ConcentrationSeries],
                     pd: Mapping[str, PDSeries],
                     toxicity: Mapping[str, ToxicitySeries],
                     body_weight_kg: float,
                     tox_normalization_mg_per_day: float = 50.0):
    """
    Sum per-compound contributions into the whole-stack series.

    anabolic += released * basePotency * (myogenesis / base myogenesis)
    organ    += max(0, organ score) * released * baseToxicity / normalization

    `tox_normalization_mg_per_day` is the exposure that counts as one unit of
    load (50 mg/day by default).
    """
    anabolic = np.zeros_like(np.asarray(t, dtype=float))
    organ_load: Dict[str, np.ndarray] = {organ: np.zeros_like(anabolic) for organ in ORGANS}

    for compound_id, series in pk.items():
        compound = compounds[compound_id]
        released = released_mg_per_day(series.mg_per_l, compound.pk.clearance_l_per_h(body_weight_kg))

        myo = pd[compound_id]
        ratio = activation_ratio(myo.activation["myogenesis"], myo.base_activation["myogenesis"])
        anabolic += released * compound.base_potency * ratio

        exposure_units = (released * compound.base_toxicity) / tox_normalization_mg_per_day
        organs = toxicity[compound_id].organs
        for organ in ORGANS:
            organ_load[organ] += np.maximum(0.0, organs[organ]) * exposure_units

    return anabolic, organ_load


def summarize(t: np.ndarray, anabolic: np.ndarray, organ_load: Mapping[str, np.ndarray],
              smoothing_alpha: float = 0.05, window_h: float = 7 * 24.0) -> AggregateResult:
    """
    Smooth each organ series (anabolic load stays raw) and take trailing-window
    means: benefit from anabolic load, toxicity from the sum of smoothed organs.
    """
    smoothed = {organ: exponential_smoothing(organ_load[organ], smoothing_alpha) for organ in ORGANS}
    total_smoothed = np.sum([smoothed[organ] for organ in ORGANS], axis=0)
    return AggregateResult(
        total_anabolic_load=anabolic,
        total_toxicity={organ: organ_load[organ] for organ in ORGANS},
        smoothed_toxicity=smoothed,
        steady_state_benefit=trailing_mean(t, anabolic, window_h),
        steady_state_toxicity=trailing_mean(t, total_smoothed, window_h),
    )
