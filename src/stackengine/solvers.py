# src/stackengine/solvers.py
"""Pharmacokinetic stage: closed-form single-dose profiles, superposed per compound."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

import numpy as np

from .helpers import to_nanomolar
from .models.one_compartment import absorption_concentration, iv_bolus_concentration
from .results import ConcentrationSeries
from .types import CompoundSchema, DoseEvent, DualPhaseRelease, FirstOrderRelease

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FirstOrderAbsorption:
    """
    Depot with first-order input (oral, or an ester with a single release rate).
    amount_factor converts the administered mg into mg of parent compound.
    """
    f: float
    ka: float
    amount_factor: float = 1.0


@dataclass(frozen=True)
class DualPhaseAbsorption:
    ka_fast: float
    ka_slow: float
    fraction_fast: float
    amount_factor: float = 1.0


@dataclass(frozen=True)
class IVBolus:
    """Depot-free fallback when the compound has neither oral nor ester data."""


AbsorptionModel = Union[FirstOrderAbsorption, DualPhaseAbsorption, IVBolus]


def select_absorption(compound: CompoundSchema, ester_id: Optional[str] = None,
                      warnings: Optional[List[str]] = None) -> AbsorptionModel:
    """
    Pick the absorption model for one administration.

    Order: the named ester if the compound defines it, then oral first-order
    when oral data exist, otherwise IV bolus. An ester the compound does not
    define is reported in `warnings` and ignored.
    """
    pk = compound.pk
    if ester_id is not None:
        ester = pk.esters.get(ester_id)
        if ester is None:
            if warnings is not None:
                warnings.append(f"Ester '{ester_id}' is not defined for '{compound.compound_id}'; "
                                f"using the parent compound's absorption.")
        elif isinstance(ester.release, FirstOrderRelease):
            return FirstOrderAbsorption(f=1.0, ka=ester.release.ka,
                                        amount_factor=ester.molecular_weight_ratio)
        elif isinstance(ester.release, DualPhaseRelease):
            return DualPhaseAbsorption(ka_fast=ester.release.ka_fast, ka_slow=ester.release.ka_slow,
                                       fraction_fast=ester.release.fraction_fast,
                                       amount_factor=ester.molecular_weight_ratio)
        else:
            raise TypeError(f"Unsupported ester release model: {type(ester.release).__name__}")
    if pk.oral is not None:
        return FirstOrderAbsorption(f=pk.oral.f, ka=pk.oral.ka)
    return IVBolus()


def single_dose_profile(model: AbsorptionModel, dt_h, amount_mg: float, kel: float, V_L: float):
    """
    Concentration (mg/L) of one administration, `dt_h` hours after it was given.
    """
    if isinstance(model, FirstOrderAbsorption):
        dose = amount_mg * model.amount_factor
        return absorption_concentration(dt_h, dose, model.f, model.ka, kel, V_L)
    if isinstance(model, DualPhaseAbsorption):
        dose = amount_mg * model.amount_factor
        fast = absorption_concentration(dt_h, dose * model.fraction_fast, 1.0, model.ka_fast, kel, V_L)
        slow = absorption_concentration(dt_h, dose * (1.0 - model.fraction_fast), 1.0, model.ka_slow, kel, V_L)
        return fast + slow
    if isinstance(model, IVBolus):
        return iv_bolus_concentration(dt_h, amount_mg, kel, V_L)
    raise TypeError(f"Unsupported absorption model: {type(model).__name__}")


def simulate_compound(compound: CompoundSchema, doses: Iterable[DoseEvent], t: np.ndarray,
                      body_weight_kg: float, warnings: Optional[List[str]] = None) -> ConcentrationSeries:
    """
    Superpose every administration of one compound on the time grid.

    The model is linear and time-invariant, so the concentration at t is the
    sum over doses given at or before t of each dose's own profile at
    (t - t_dose). Points before the first dose stay exactly 0.

    Returns a ConcentrationSeries in mg/L and nM.
    """
    t = np.asarray(t, dtype=float)
    V_L = compound.pk.volume_l(body_weight_kg)
    kel = compound.pk.elimination_rate(body_weight_kg)

    total = np.zeros_like(t)
    n_doses = 0
    for dose in doses:
        model = select_absorption(compound, dose.ester_id, warnings)
        active = t >= dose.time_h
        if not np.any(active):
            continue
        total[active] += single_dose_profile(model, t[active] - dose.time_h, dose.amount_mg, kel, V_L)
        n_doses += 1

    LOGGER.debug("PK %s: %d administrations superposed, kel=%.4g /h, V=%.4g L",
                 compound.compound_id, n_doses, kel, V_L)
    return ConcentrationSeries(
        compound_id=compound.compound_id,
        time_h=t,
        mg_per_l=total,
        nanomolar=to_nanomolar(total, compound.molecular_weight),
    )
