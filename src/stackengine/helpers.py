# src/stackengine/helpers.py
from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Iterable

import numpy as np

from .errors import ConfigurationError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .types import DoseEvent


def split_doses_by_compound(doses: Iterable["DoseEvent"]) -> dict[str, tuple["DoseEvent", ...]]:
    """
    Group dose events by compound_id, each group sorted by administration time.
    """
    buckets: dict[str, list["DoseEvent"]] = defaultdict(list)
    for d in doses:
        buckets[d.compound_id].append(d)
    return {
        compound_id: tuple(sorted(ds, key=lambda x: x.time_h))
        for compound_id, ds in buckets.items()
    }


def to_nanomolar(mg_per_l, molecular_weight_g_per_mol: float):
    """
    Convert mg/L to nM: (mg/L / MW) * 1e6.
    mg/L -> g/L is /1e3, g/L -> mol/L is /MW, mol/L -> nM is *1e9.
    """
    validate_positive("molecular_weight", molecular_weight_g_per_mol)
    out = (np.asarray(mg_per_l, dtype=float) / molecular_weight_g_per_mol) * 1e6
    return float(out) if out.ndim == 0 else out


# --------------------------
# Small input validators
# --------------------------
def validate_positive(name: str, x: float) -> None:
    if not (x > 0):
        raise ConfigurationError(f"{name} must be > 0 (got {x}).")

def validate_non_negative(name: str, x: float) -> None:
    if not (x >= 0):
        raise ConfigurationError(f"{name} must be >= 0 (got {x}).")

def validate_fraction(name: str, x: float) -> None:
    if not (0.0 <= x <= 1.0):
        raise ConfigurationError(f"{name} must be within [0, 1] (got {x}).")
