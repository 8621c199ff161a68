# src/stackengine/codec.py
"""Conversion between knowledge-base / wire dictionaries and engine dataclasses.

Records use the camelCase layout of the compound knowledge base
(``pk.Vd``, ``pd.pathwayModulation.genomic.myogenesis.EC50`` ...). Decoding
validates as it goes, so a record that decodes is safe to simulate.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import numpy as np

from .errors import ConfigurationError
from .results import OptimizationResponse, SimulationResponse, SweepPoint, SweepResponse
from .types import (
    ORGANS,
    PATHWAYS,
    RECEPTORS,
    CoefficientToxicity,
    CompoundSchema,
    DoseEvent,
    DoseThreshold,
    DualPhaseRelease,
    EnzymeInduction,
    EnzymeInhibition,
    EnzymeKinetics,
    Ester,
    FirstOrderRelease,
    HillParameters,
    HillToxicity,
    InteractionRule,
    OptimizationRequest,
    OralAbsorption,
    PDEffect,
    PharmacodynamicProfile,
    PharmacokineticProfile,
    ProteinBinding,
    ProteinBindingDisplacement,
    ReceptorActivity,
    SimulationRequest,
    StackEntry,
    SweepRequest,
    ToxicityEffect,
)

# Knowledge-base pathway keys -> engine pathway names. Pathways outside the
# five modelled channels (glycogen synthesis, SHBG modulation) are dropped.
PATHWAY_KEYS = {
    "myogenesis": "myogenesis",
    "erythropoiesis": "erythropoiesis",
    "lipolysis": "lipolysis",
    "cns_activation": "cns_activation",
    "HPTA_suppression": "hpta_suppression",
    "hpta_suppression": "hpta_suppression",
}


def _require(record: Mapping[str, Any], key: str, path: str) -> Any:
    if not isinstance(record, Mapping):
        raise ConfigurationError(f"{path} must be an object.")
    try:
        return record[key]
    except KeyError:
        raise ConfigurationError(f"Missing required field '{path}.{key}'.") from None


def _number(value: Any, path: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{path} must be a number (got {value!r}).") from None


# --------------------------
# Compound records
# --------------------------
def _hill_parameters(record: Mapping[str, Any], path: str) -> HillParameters:
    return HillParameters(
        emax=_number(_require(record, "Emax", path), f"{path}.Emax"),
        ec50=_number(_require(record, "EC50", path), f"{path}.EC50"),
        hill_n=_number(_require(record, "Hill_n", path), f"{path}.Hill_n"),
    )


def _ester(ester_id: str, record: Mapping[str, Any], path: str) -> Ester:
    model = record.get("absorptionModel", "FirstOrder")
    params = record.get("parameters", {})
    if model == "FirstOrder":
        release = FirstOrderRelease(ka=_number(_require(params, "Ka", f"{path}.parameters"), f"{path}.Ka"))
    elif model == "DualPhase":
        release = DualPhaseRelease(
            ka_fast=_number(_require(params, "Ka_fast", f"{path}.parameters"), f"{path}.Ka_fast"),
            ka_slow=_number(_require(params, "Ka_slow", f"{path}.parameters"), f"{path}.Ka_slow"),
            fraction_fast=_number(_require(params, "fractionFast", f"{path}.parameters"), f"{path}.fractionFast"),
        )
    else:
        raise ConfigurationError(f"{path}.absorptionModel '{model}' is not supported.")
    return Ester(
        ester_id=str(record.get("id", ester_id)),
        molecular_weight_ratio=_number(record.get("molecularWeightRatio", 1.0), f"{path}.molecularWeightRatio"),
        release=release,
    )


def _pharmacokinetics(record: Mapping[str, Any], path: str) -> PharmacokineticProfile:
    binding = record.get("proteinBinding", {})
    oral = (record.get("absorption") or {}).get("oral")
    esters = record.get("esters") or {}
    return PharmacokineticProfile(
        vd_l_per_kg=_number(_require(record, "Vd", path), f"{path}.Vd"),
        cl_ml_min_kg=_number(_require(record, "CL", path), f"{path}.CL"),
        protein_binding=ProteinBinding(
            shbg_kd=_number(binding.get("SHBG_Kd", 0.0), f"{path}.proteinBinding.SHBG_Kd"),
            albumin_kd=_number(binding.get("Albumin_Kd", 0.0), f"{path}.proteinBinding.Albumin_Kd"),
        ),
        oral=None if oral is None else OralAbsorption(
            f=_number(_require(oral, "F", f"{path}.absorption.oral"), f"{path}.absorption.oral.F"),
            ka=_number(_require(oral, "Ka", f"{path}.absorption.oral"), f"{path}.absorption.oral.Ka"),
        ),
        esters={eid: _ester(eid, e, f"{path}.esters.{eid}") for eid, e in esters.items()},
    )


def _pharmacodynamics(record: Mapping[str, Any], path: str) -> PharmacodynamicProfile:
    receptors = {}
    for name, activity in (record.get("receptorInteractions") or {}).items():
        if name not in RECEPTORS:
            raise ConfigurationError(f"{path}.receptorInteractions: unknown receptor '{name}'.")
        receptors[name] = ReceptorActivity(
            kd=_number(_require(activity, "Kd", f"{path}.receptorInteractions.{name}"),
                       f"{path}.receptorInteractions.{name}.Kd"),
            activity_type=str(activity.get("activityType", "FullAgonist")),
        )

    pathways = {}
    for group, entries in (record.get("pathwayModulation") or {}).items():
        for key, params in entries.items():
            name = PATHWAY_KEYS.get(key)
            if name is not None:
                pathways[name] = _hill_parameters(params, f"{path}.pathwayModulation.{group}.{key}")

    enzymes = {
        name: EnzymeKinetics(
            is_substrate=bool(kin.get("isSubstrate", False)),
            is_inhibitor=bool(kin.get("isInhibitor", False)),
            km=kin.get("Km"),
            vmax_relative=kin.get("Vmax_relative"),
            ki=kin.get("Ki"),
            inhibition_type=kin.get("inhibitionType"),
        )
        for name, kin in (record.get("enzymaticInteractions") or {}).items()
    }
    return PharmacodynamicProfile(receptors=receptors, pathways=pathways, enzymes=enzymes)


def _toxicity_model(record: Mapping[str, Any], path: str):
    model_type = _require(record, "modelType", path)
    params = record.get("parameters", {})
    if model_type == "Hill_TC50":
        return HillToxicity(
            emax=_number(_require(params, "Emax", f"{path}.parameters"), f"{path}.Emax"),
            tc50=_number(_require(params, "TC50", f"{path}.parameters"), f"{path}.TC50"),
            hill_n=_number(_require(params, "Hill_n", f"{path}.parameters"), f"{path}.Hill_n"),
        )
    if model_type == "Coefficient":
        return CoefficientToxicity(
            coefficient=_number(_require(params, "coefficient", f"{path}.parameters"), f"{path}.coefficient"),
        )
    raise ConfigurationError(f"{path}.modelType '{model_type}' is not supported.")


def compound_from_dict(record: Mapping[str, Any]) -> CompoundSchema:
    """Decode and validate one compound record."""
    compound_id = str(_require(record, "id", "compound"))
    path = f"compound[{compound_id}]"
    metadata = record.get("metadata") or {}
    chemical = metadata.get("chemicalProperties") or {}
    toxicity = {
        organ: _toxicity_model(model, f"{path}.toxicity.{organ}")
        for organ, model in (record.get("toxicity") or {}).items()
    }
    return CompoundSchema(
        compound_id=compound_id,
        molecular_weight=_number(_require(chemical, "molecularWeight", f"{path}.metadata.chemicalProperties"),
                                 f"{path}.molecularWeight"),
        pk=_pharmacokinetics(_require(record, "pk", path), f"{path}.pk"),
        pd=_pharmacodynamics(record.get("pd") or {}, f"{path}.pd"),
        toxicity=toxicity,
        name=str(metadata.get("name", compound_id)),
        base_potency=_number(metadata.get("basePotency", 1.0), f"{path}.basePotency"),
        base_toxicity=_number(metadata.get("baseToxicity", 1.0), f"{path}.baseToxicity"),
    )


# --------------------------
# Interaction records
# --------------------------
def _pk_effect(record: Mapping[str, Any], path: str):
    kind = _require(record, "type", path)
    affected = str(_require(record, "affectedCompound", path))
    if kind == "EnzymeInhibition":
        return EnzymeInhibition(
            affected_compound=affected,
            inhibition_percent=_number(_require(record, "inhibitionPercent", path), f"{path}.inhibitionPercent"),
            enzyme=record.get("enzyme", record.get("target")),
        )
    if kind == "EnzymeInduction":
        return EnzymeInduction(
            affected_compound=affected,
            induction_percent=_number(_require(record, "inductionPercent", path), f"{path}.inductionPercent"),
            enzyme=record.get("enzyme", record.get("target")),
        )
    if kind == "ProteinBindingDisplacement":
        return ProteinBindingDisplacement(
            affected_compound=affected,
            displacement_factor=_number(_require(record, "shbgDisplacementFactor", path),
                                        f"{path}.shbgDisplacementFactor"),
        )
    raise ConfigurationError(f"{path}.type '{kind}' is not a supported PK interaction.")


def interaction_from_dict(record: Mapping[str, Any]) -> InteractionRule:
    """Decode and validate one interaction rule."""
    rule_id = str(_require(record, "id", "interaction"))
    path = f"interaction[{rule_id}]"
    compounds = tuple(_require(record, "compounds", path))
    effects = record.get("effects") or {}
    metadata = record.get("metadata") or {}

    pk = effects.get("pk")
    pd = effects.get("pd")
    tox = effects.get("toxicity")
    threshold = None if tox is None else tox.get("doseThreshold")
    return InteractionRule(
        rule_id=rule_id,
        compounds=compounds,
        pk=None if pk is None else _pk_effect(pk, f"{path}.effects.pk"),
        pd=None if pd is None else PDEffect(
            pathway=PATHWAY_KEYS.get(pd.get("pathway"), str(_require(pd, "pathway", f"{path}.effects.pd"))),
            multiplier=_number(_require(pd, "multiplier", f"{path}.effects.pd"), f"{path}.effects.pd.multiplier"),
            affected_compound=pd.get("affectedCompound"),
            kind=str(pd.get("type", "ReceptorCompetition")),
        ),
        toxicity=None if tox is None else ToxicityEffect(
            organ=str(_require(tox, "organ", f"{path}.effects.toxicity")),
            multiplier=_number(_require(tox, "multiplier", f"{path}.effects.toxicity"),
                               f"{path}.effects.toxicity.multiplier"),
            affected_compound=tox.get("affectedCompound"),
            dose_threshold=None if threshold is None else DoseThreshold(
                compound_id=str(_require(threshold, "compound", f"{path}.effects.toxicity.doseThreshold")),
                min_dose_mg=_number(_require(threshold, "minDose", f"{path}.effects.toxicity.doseThreshold"),
                                    f"{path}.effects.toxicity.doseThreshold.minDose"),
            ),
            kind=str(tox.get("type", "Synergistic")),
        ),
        severity=str(metadata.get("severity", "Info")),
        mechanism=str(metadata.get("mechanism", "")),
        provenance={k: str(v) for k, v in (metadata.get("provenance") or {}).items()},
    )


# --------------------------
# Wire payloads
# --------------------------
def _compounds(payload: Mapping[str, Any]):
    return tuple(
        c if isinstance(c, CompoundSchema) else compound_from_dict(c)
        for c in payload.get("compounds") or ()
    )


def _stack_entry(record: Mapping[str, Any]) -> StackEntry:
    return StackEntry(
        compound_id=str(_require(record, "compoundId", "stack")),
        dose_mg=_number(_require(record, "dose", "stack"), "stack.dose"),
        interval_days=_number(record.get("frequency", 7.0), "stack.frequency"),
        ester_id=record.get("esterId", record.get("ester")),
    )


def _body_weight(payload: Mapping[str, Any], default: float) -> float:
    profile = payload.get("userProfile") or {}
    raw = payload.get("bodyWeightKg", profile.get("bodyweight", default))
    return _number(raw, "bodyWeightKg")


def simulation_request_from_dict(payload: Mapping[str, Any], default_body_weight_kg: float = 85.0) -> SimulationRequest:
    return SimulationRequest(
        compounds=_compounds(payload),
        doses=tuple(
            DoseEvent(
                compound_id=str(_require(d, "compoundId", "doses")),
                time_h=_number(_require(d, "time", "doses"), "doses.time"),
                amount_mg=_number(_require(d, "amount", "doses"), "doses.amount"),
                ester_id=d.get("esterId"),
            )
            for d in payload.get("doses") or ()
        ),
        time_points=tuple(_number(t, "timePoints") for t in _require(payload, "timePoints", "payload")),
        body_weight_kg=_body_weight(payload, default_body_weight_kg),
    )


def sweep_request_from_dict(payload: Mapping[str, Any], default_body_weight_kg: float = 85.0,
                            default_evaluation_h: float = 7 * 24.0) -> SweepRequest:
    return SweepRequest(
        base_stack=tuple(_stack_entry(e) for e in payload.get("baseStack") or ()),
        compounds=_compounds(payload),
        scalars=tuple(_number(s, "scalars") for s in payload.get("scalars") or ()),
        body_weight_kg=_body_weight(payload, default_body_weight_kg),
        evaluation_time_h=_number(payload.get("evaluationTimeH", default_evaluation_h), "evaluationTimeH"),
    )


def optimization_request_from_dict(payload: Mapping[str, Any], default_body_weight_kg: float = 85.0) -> OptimizationRequest:
    return OptimizationRequest(
        goal=payload.get("type", "efficiency"),
        current_stack=tuple(_stack_entry(e) for e in payload.get("currentStack") or ()),
        compounds=_compounds(payload),
        body_weight_kg=_body_weight(payload, default_body_weight_kg),
    )


def _floats(values: np.ndarray) -> list[float]:
    return [float(v) for v in values]


def simulation_response_to_dict(response: SimulationResponse) -> Dict[str, Any]:
    """Wire form of a simulation result (per-point records, plain floats)."""
    t = response.time_points
    results = {}
    for cid, result in response.results.items():
        pk = result.pk
        results[cid] = {
            "pk": [
                {"time": float(t[i]), "concentrationMgL": float(pk.mg_per_l[i]),
                 "concentrationNM": float(pk.nanomolar[i])}
                for i in range(t.size)
            ],
            "pd": [
                {
                    "time": float(t[i]),
                    "receptorOccupancy": {r: float(result.pd.occupancy[r][i]) for r in RECEPTORS},
                    "pathwayActivation": {p: float(result.pd.activation[p][i]) for p in PATHWAYS},
                }
                for i in range(t.size)
            ],
            "toxicity": [
                {organ: float(result.toxicity.organs[organ][i]) for organ in ORGANS}
                for i in range(t.size)
            ],
            "summary": dict(result.summary),
        }
    agg = response.aggregate
    return {
        "timePoints": _floats(t),
        "results": results,
        "aggregate": {
            "totalAnabolicLoad": _floats(agg.total_anabolic_load),
            "totalToxicity": {organ: _floats(agg.total_toxicity[organ]) for organ in ORGANS},
            "smoothedToxicity": {organ: _floats(agg.smoothed_toxicity[organ]) for organ in ORGANS},
        },
        "aggregateBenefit": float(response.aggregate_benefit),
        "aggregateToxicity": float(response.aggregate_toxicity),
        "warnings": list(response.warnings),
    }


def _sweep_point(point: Optional[SweepPoint]) -> Optional[Dict[str, float]]:
    if point is None:
        return None
    return {"scalar": point.scalar, "mgEq": point.mg_eq, "benefit": point.benefit,
            "risk": point.risk, "netGap": point.net_gap}


def sweep_response_to_dict(response: SweepResponse) -> Dict[str, Any]:
    return {
        "points": [_sweep_point(p) for p in response.points],
        "sweetSpot": _sweep_point(response.sweet_spot),
    }


def optimization_response_to_dict(response: OptimizationResponse) -> Dict[str, Any]:
    return {
        "optimizedStack": [
            {"compoundId": e.compound_id, "dose": e.dose_mg, "frequency": e.interval_days, "esterId": e.ester_id}
            for e in response.optimized_stack
        ],
        "originalScore": response.original_score,
        "newScore": response.new_score,
        "riskScore": response.risk_score,
        "implemented": response.implemented,
    }


def response_to_dict(response: Any) -> Any:
    """Wire form of any engine result; other values pass through unchanged."""
    if isinstance(response, SimulationResponse):
        return simulation_response_to_dict(response)
    if isinstance(response, SweepResponse):
        return sweep_response_to_dict(response)
    if isinstance(response, OptimizationResponse):
        return optimization_response_to_dict(response)
    return response


def envelope_to_dict(envelope: Any) -> Dict[str, Any]:
    """{type, id, payload} for results, {type, id, error} for ERROR responses."""
    job_type = getattr(envelope.type, "value", envelope.type)
    wire: Dict[str, Any] = {"type": job_type, "id": envelope.id}
    if envelope.error is not None:
        wire["error"] = envelope.error
    else:
        wire["payload"] = response_to_dict(envelope.payload)
    return wire
