# src/stackengine/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import ConfigurationError
from .helpers import validate_fraction, validate_non_negative, validate_positive

# We keep *all* time in HOURS internally. Stack intervals are given in days
# and converted once by the scheduler.

RECEPTORS: Tuple[str, ...] = ("AR", "ER_alpha", "ER_beta", "PR", "GR")
PATHWAYS: Tuple[str, ...] = ("myogenesis", "erythropoiesis", "lipolysis", "cns_activation", "hpta_suppression")
ORGANS: Tuple[str, ...] = ("hepatic", "renal", "cardiovascular", "lipid_metabolism", "neurotoxicity")

Organ = Literal["hepatic", "renal", "cardiovascular", "lipid_metabolism", "neurotoxicity"]


# --------------------------
# Compound schema
# --------------------------
@dataclass(frozen=True)
class HillParameters:
    """Saturating dose-response: Emax * C^n / (EC50^n + C^n)."""
    emax: float
    ec50: float
    hill_n: float

    def __post_init__(self) -> None:
        validate_positive("EC50", self.ec50)
        validate_positive("Hill_n", self.hill_n)


@dataclass(frozen=True)
class ReceptorActivity:
    """
    Binding of the parent compound to one receptor.

    kd            : dissociation constant (nM); occupancy = C / (C + Kd)
    activity_type : FullAgonist / PartialAgonist / Antagonist / Modulator
    """
    kd: float
    activity_type: str = "FullAgonist"

    def __post_init__(self) -> None:
        validate_positive("Kd", self.kd)


@dataclass(frozen=True)
class OralAbsorption:
    f: float   # bioavailability (0-1)
    ka: float  # absorption rate constant (1/h)

    def __post_init__(self) -> None:
        validate_fraction("F", self.f)
        validate_positive("Ka", self.ka)


@dataclass(frozen=True)
class FirstOrderRelease:
    ka: float

    def __post_init__(self) -> None:
        validate_positive("Ka", self.ka)


@dataclass(frozen=True)
class DualPhaseRelease:
    """Depot that releases a fast fraction and a slow remainder in parallel."""
    ka_fast: float
    ka_slow: float
    fraction_fast: float

    def __post_init__(self) -> None:
        validate_positive("Ka_fast", self.ka_fast)
        validate_positive("Ka_slow", self.ka_slow)
        validate_fraction("fractionFast", self.fraction_fast)


Release = Union[FirstOrderRelease, DualPhaseRelease]


@dataclass(frozen=True)
class Ester:
    """
    Formulation attached to a parent compound.

    molecular_weight_ratio : parent mass per mg of ester (e.g. 0.7 for enanthate)
    release                : depot release kinetics for IM/SubQ administration
    """
    ester_id: str
    molecular_weight_ratio: float
    release: Release

    def __post_init__(self) -> None:
        validate_positive("molecularWeightRatio", self.molecular_weight_ratio)


@dataclass(frozen=True)
class ProteinBinding:
    shbg_kd: float     # nM
    albumin_kd: float  # nM


@dataclass(frozen=True)
class PharmacokineticProfile:
    """
    One-compartment PK descriptor, stored per kg of body mass.

    vd_l_per_kg   : volume of distribution (L/kg)
    cl_ml_min_kg  : total clearance (mL/min/kg)
    oral          : oral absorption (None for injectables)
    esters        : ester_id -> Ester
    """
    vd_l_per_kg: float
    cl_ml_min_kg: float
    protein_binding: ProteinBinding = ProteinBinding(shbg_kd=0.0, albumin_kd=0.0)
    oral: Optional[OralAbsorption] = None
    esters: Mapping[str, Ester] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_positive("Vd", self.vd_l_per_kg)
        validate_positive("CL", self.cl_ml_min_kg)

    def volume_l(self, body_weight_kg: float) -> float:
        return self.vd_l_per_kg * body_weight_kg

    def clearance_l_per_h(self, body_weight_kg: float) -> float:
        # (mL/min/kg * kg * 60 min/h) / 1000 mL/L
        return (self.cl_ml_min_kg * body_weight_kg * 60.0) / 1000.0

    def elimination_rate(self, body_weight_kg: float) -> float:
        """kel = CL / Vd (1/h)."""
        return self.clearance_l_per_h(body_weight_kg) / self.volume_l(body_weight_kg)


@dataclass(frozen=True)
class EnzymeKinetics:
    is_substrate: bool = False
    is_inhibitor: bool = False
    km: Optional[float] = None
    vmax_relative: Optional[float] = None
    ki: Optional[float] = None
    inhibition_type: Optional[str] = None


@dataclass(frozen=True)
class PharmacodynamicProfile:
    """
    receptors : receptor name (see RECEPTORS) -> ReceptorActivity
    pathways  : pathway name (see PATHWAYS) -> HillParameters
    enzymes   : enzyme name -> EnzymeKinetics (substrate/inhibitor flags)
    """
    receptors: Mapping[str, ReceptorActivity] = field(default_factory=dict)
    pathways: Mapping[str, HillParameters] = field(default_factory=dict)
    enzymes: Mapping[str, EnzymeKinetics] = field(default_factory=dict)


@dataclass(frozen=True)
class HillToxicity:
    emax: float
    tc50: float
    hill_n: float

    def __post_init__(self) -> None:
        validate_non_negative("Emax", self.emax)
        validate_positive("TC50", self.tc50)
        validate_positive("Hill_n", self.hill_n)


@dataclass(frozen=True)
class CoefficientToxicity:
    coefficient: float

    def __post_init__(self) -> None:
        validate_non_negative("coefficient", self.coefficient)


ToxicityModel = Union[HillToxicity, CoefficientToxicity]


@dataclass(frozen=True)
class CompoundSchema:
    """
    Immutable description of one compound, as read from the knowledge base.

    compound_id      : registry key (e.g. "testosterone")
    molecular_weight : g/mol of the parent compound, for mg/L -> nM
    toxicity         : organ (see ORGANS) -> ToxicityModel
    base_potency     : anabolic weight used only when aggregating a stack
    base_toxicity    : toxic-load weight used only when aggregating a stack
    """
    compound_id: str
    molecular_weight: float
    pk: PharmacokineticProfile
    pd: PharmacodynamicProfile = PharmacodynamicProfile()
    toxicity: Mapping[str, ToxicityModel] = field(default_factory=dict)
    name: str = ""
    base_potency: float = 1.0
    base_toxicity: float = 1.0

    def __post_init__(self) -> None:
        if not self.compound_id:
            raise ConfigurationError("compound_id must be a non-empty string.")
        validate_positive("molecularWeight", self.molecular_weight)
        validate_non_negative("basePotency", self.base_potency)
        validate_non_negative("baseToxicity", self.base_toxicity)
        unknown = set(self.toxicity) - set(ORGANS)
        if unknown:
            raise ConfigurationError(f"Unknown toxicity organ(s) {sorted(unknown)} for '{self.compound_id}'.")


# --------------------------
# Dosing
# --------------------------
@dataclass(frozen=True)
class DoseEvent:
    """
    A single scheduled administration.

    compound_id : compound this dose belongs to
    time_h      : administration time (hours from t=0)
    amount_mg   : administered amount (mg of the formulation)
    ester_id    : formulation used, if any
    """
    compound_id: str
    time_h: float
    amount_mg: float
    ester_id: Optional[str] = None

    def __post_init__(self) -> None:
        validate_non_negative("time_h", self.time_h)
        validate_positive("amount_mg", self.amount_mg)


@dataclass(frozen=True)
class StackEntry:
    """
    One line of a user's stack.

    dose_mg       : weekly-equivalent dose (mg/week)
    interval_days : days between administrations (1 = daily, 3.5 = twice weekly)
    """
    compound_id: str
    dose_mg: float
    interval_days: float = 7.0
    ester_id: Optional[str] = None

    def __post_init__(self) -> None:
        validate_non_negative("dose_mg", self.dose_mg)


# --------------------------
# Drug-drug interactions
# --------------------------
@dataclass(frozen=True)
class EnzymeInhibition:
    affected_compound: str
    inhibition_percent: float
    enzyme: Optional[str] = None

    def __post_init__(self) -> None:
        validate_non_negative("inhibitionPercent", self.inhibition_percent)


@dataclass(frozen=True)
class EnzymeInduction:
    affected_compound: str
    induction_percent: float
    enzyme: Optional[str] = None

    def __post_init__(self) -> None:
        validate_non_negative("inductionPercent", self.induction_percent)


@dataclass(frozen=True)
class ProteinBindingDisplacement:
    affected_compound: str
    displacement_factor: float

    def __post_init__(self) -> None:
        validate_positive("shbgDisplacementFactor", self.displacement_factor)


PKEffect = Union[EnzymeInhibition, EnzymeInduction, ProteinBindingDisplacement]


@dataclass(frozen=True)
class PDEffect:
    """Multiplies one pathway's activation; affected_compound=None means both."""
    pathway: str
    multiplier: float
    affected_compound: Optional[str] = None
    kind: str = "ReceptorCompetition"

    def __post_init__(self) -> None:
        validate_non_negative("multiplier", self.multiplier)


@dataclass(frozen=True)
class DoseThreshold:
    compound_id: str
    min_dose_mg: float


@dataclass(frozen=True)
class ToxicityEffect:
    """Multiplies one organ's toxicity; gated by an optional dose threshold."""
    organ: str
    multiplier: float
    affected_compound: Optional[str] = None
    dose_threshold: Optional[DoseThreshold] = None
    kind: str = "Synergistic"

    def __post_init__(self) -> None:
        validate_non_negative("multiplier", self.multiplier)
        if self.organ not in ORGANS:
            raise ConfigurationError(f"Unknown toxicity organ '{self.organ}'.")


@dataclass(frozen=True)
class InteractionRule:
    """
    Read-only interaction between an unordered pair of compounds.

    compounds : the two compound ids (order carries no meaning)
    pk/pd/toxicity : independent effect families; any may be None
    """
    rule_id: str
    compounds: Tuple[str, str]
    pk: Optional[PKEffect] = None
    pd: Optional[PDEffect] = None
    toxicity: Optional[ToxicityEffect] = None
    severity: str = "Info"
    mechanism: str = ""
    provenance: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.compounds) != 2:
            raise ConfigurationError(f"Rule '{self.rule_id}' must name exactly two compounds.")
        a, b = self.compounds
        if a == b:
            raise ConfigurationError(f"Rule '{self.rule_id}' pairs '{a}' with itself.")

    def applies_to(self, compound_ids) -> bool:
        a, b = self.compounds
        return a in compound_ids and b in compound_ids

    def targets(self, affected: Optional[str]) -> Tuple[str, ...]:
        """Compounds an effect lands on: the named one, or both when unspecified."""
        return tuple(self.compounds) if affected is None else (affected,)


# --------------------------
# Requests
# --------------------------
@dataclass(frozen=True)
class SimulationRequest:
    """
    compounds      : full schemas for every compound in play
    doses          : scheduled administrations (any order)
    time_points    : shared TimeGrid in hours (strictly increasing)
    body_weight_kg : scales per-kg PK parameters
    """
    compounds: Sequence[CompoundSchema]
    doses: Sequence[DoseEvent]
    time_points: Sequence[float]
    body_weight_kg: float = 85.0

    def time_grid(self) -> np.ndarray:
        t = np.asarray(self.time_points, dtype=float)
        if t.ndim != 1 or t.size == 0:
            raise ConfigurationError("time_points must be a non-empty 1-D sequence.")
        if not np.all(np.isfinite(t)):
            raise ConfigurationError("time_points must be finite.")
        if t.size > 1 and not np.all(np.diff(t) > 0):
            raise ConfigurationError("time_points must be strictly increasing.")
        return t


@dataclass(frozen=True)
class SweepRequest:
    """
    base_stack        : stack whose doses are scaled together
    scalars           : dose multipliers to evaluate (e.g. [0.5, 1.0, 1.5])
    evaluation_time_h : time point at which benefit and risk are read
    """
    base_stack: Sequence[StackEntry]
    compounds: Sequence[CompoundSchema]
    scalars: Sequence[float]
    body_weight_kg: float = 85.0
    evaluation_time_h: float = 7 * 24.0


@dataclass(frozen=True)
class OptimizationRequest:
    goal: Literal["efficiency", "max_safe", "redline"]
    current_stack: Sequence[StackEntry]
    compounds: Sequence[CompoundSchema] = ()
    body_weight_kg: float = 85.0
