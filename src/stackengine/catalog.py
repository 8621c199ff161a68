# src/stackengine/catalog.py
"""Built-in compound records and interaction rules.

Records are kept in the knowledge-base (camelCase) layout and decoded on
demand, so the same codec path serves bundled and user-supplied data.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Tuple

from .codec import compound_from_dict, interaction_from_dict
from .registry import CompoundRegistry, InteractionRegistry
from .types import CompoundSchema, InteractionRule


def clearance_from_half_life(half_life_h: float, vd_l_per_kg: float = 0.6) -> float:
    """CL (mL/min/kg) from an elimination half-life: CL = ln2 * Vd / t1/2."""
    cl_l_h_kg = (math.log(2) * vd_l_per_kg) / half_life_h
    return (cl_l_h_kg * 1000.0) / 60.0


def _first_order(ester_id: str, mw_ratio: float, ka: float) -> Dict[str, Any]:
    return {"id": ester_id, "molecularWeightRatio": mw_ratio,
            "absorptionModel": "FirstOrder", "parameters": {"Ka": ka}}


ESTERS: Dict[str, Dict[str, Any]] = {
    "propionate": _first_order("propionate", 0.8, 0.05),
    "enanthate": _first_order("enanthate", 0.7, 0.01),
    "cypionate": _first_order("cypionate", 0.69, 0.008),
    "acetate": _first_order("acetate", 0.87, 0.1),
    "decanoate": _first_order("decanoate", 0.64, 0.005),
    "undecanoate": {"id": "undecanoate", "molecularWeightRatio": 0.61, "absorptionModel": "DualPhase",
                    "parameters": {"Ka_fast": 0.01, "Ka_slow": 0.001, "fractionFast": 0.2}},
    "none": _first_order("none", 1.0, 10.0),
}


def _hill(emax, ec50, n=1.0):
    return {"Emax": emax, "EC50": ec50, "Hill_n": n}


def _pathways(myo, ery, lipo, cns, hpta):
    return {
        "genomic": {"myogenesis": myo, "erythropoiesis": ery, "lipolysis": lipo},
        "nonGenomic": {"cns_activation": cns},
        "systemic": {"HPTA_suppression": hpta},
    }


def _coef(value):
    return {"modelType": "Coefficient", "parameters": {"coefficient": value}}


def _tc50(emax, tc50, n):
    return {"modelType": "Hill_TC50", "parameters": {"Emax": emax, "TC50": tc50, "Hill_n": n}}


def _record(compound_id, name, mw, pk, receptors, pathways, toxicity) -> Dict[str, Any]:
    return {
        "id": compound_id,
        "metadata": {"name": name, "chemicalProperties": {"molecularWeight": mw}},
        "pk": pk,
        "pd": {"receptorInteractions": receptors, "pathwayModulation": pathways},
        "toxicity": {
            "hepatic": toxicity[0],
            "renal": toxicity[1],
            "cardiovascular": toxicity[2],
            "lipid_metabolism": toxicity[3],
            "neurotoxicity": toxicity[4],
        },
    }


def _pk(vd, half_life_h, shbg_kd, oral=None, esters=()):
    return {
        "Vd": vd,
        "CL": clearance_from_half_life(half_life_h),
        "proteinBinding": {"SHBG_Kd": shbg_kd, "Albumin_Kd": 10000},
        "absorption": {} if oral is None else {"oral": {"F": oral[0], "Ka": oral[1]}},
        "esters": {eid: ESTERS[eid] for eid in esters},
    }


COMPOUND_RECORDS: List[Dict[str, Any]] = [
    _record(
        "testosterone", "Testosterone", 288.42,
        _pk(0.6, 1.5, 1.0, oral=(0.05, 2.0), esters=("propionate", "enanthate", "cypionate", "undecanoate")),
        {"AR": {"Kd": 1.0, "activityType": "FullAgonist"}, "ER_alpha": {"Kd": 5.0, "activityType": "FullAgonist"}},
        _pathways(_hill(100, 10, 1.2), _hill(60, 15), _hill(40, 20), _hill(50, 30, 1.5), _hill(100, 5, 2.0)),
        (_coef(0.1), _coef(0.2), _tc50(100, 200, 2.0), _tc50(100, 150, 1.5), _coef(0.2)),
    ),
    _record(
        "nandrolone", "Nandrolone", 274.4,
        _pk(0.6, 2.0, 100, esters=("decanoate", "propionate")),
        {"AR": {"Kd": 0.5, "activityType": "FullAgonist"}, "PR": {"Kd": 10.0, "activityType": "FullAgonist"}},
        _pathways(_hill(120, 8, 1.2), _hill(40, 20), _hill(20, 30), _hill(20, 50), _hill(100, 2, 3.0)),
        (_coef(0.1), _coef(0.3), _tc50(80, 300, 1.5), _tc50(80, 250, 1.5), _coef(0.4)),
    ),
    _record(
        "trenbolone", "Trenbolone", 270.37,
        _pk(0.7, 1.0, 5.0, esters=("acetate", "enanthate")),
        {"AR": {"Kd": 0.1, "activityType": "FullAgonist"}, "PR": {"Kd": 5.0, "activityType": "FullAgonist"},
         "GR": {"Kd": 2.0, "activityType": "Antagonist"}},
        _pathways(_hill(150, 2, 1.5), _hill(70, 10), _hill(100, 5, 1.5), _hill(100, 5, 2.0), _hill(100, 1, 4.0)),
        (_coef(0.3), _tc50(100, 100, 2.0), _tc50(100, 80, 2.0), _tc50(100, 50, 2.0), _tc50(100, 60, 2.0)),
    ),
    _record(
        "masteron", "Masteron", 304.47,
        _pk(0.6, 1.0, 0.5, esters=("propionate", "enanthate")),
        {"AR": {"Kd": 0.4, "activityType": "FullAgonist"}, "ER_alpha": {"Kd": 10.0, "activityType": "Antagonist"}},
        _pathways(_hill(60, 15), _hill(30, 30), _hill(80, 10), _hill(70, 20, 1.2), _hill(50, 30)),
        (_coef(0.1), _coef(0.1), _coef(0.2), _tc50(80, 100, 1.5), _coef(0.2)),
    ),
    _record(
        "anadrol", "Anadrol", 332.48,
        _pk(0.6, 9.0, 10.0, oral=(0.8, 1.5)),
        {"AR": {"Kd": 100.0, "activityType": "FullAgonist"}, "ER_alpha": {"Kd": 5.0, "activityType": "FullAgonist"}},
        _pathways(_hill(130, 15, 1.5), _hill(120, 5, 1.5), _hill(20, 50), _hill(60, 20), _hill(90, 10, 2.0)),
        (_tc50(120, 40, 2.5), _coef(0.4), _tc50(100, 60, 2.0), _tc50(100, 50, 2.0), _coef(0.2)),
    ),
    _record(
        "winstrol", "Winstrol", 328.49,
        _pk(0.6, 9.0, 0.1, oral=(0.9, 2.0), esters=("none",)),
        {"AR": {"Kd": 1.8, "activityType": "FullAgonist"}, "GR": {"Kd": 10.0, "activityType": "Antagonist"}},
        _pathways(_hill(60, 20), _hill(40, 30), _hill(90, 10, 1.2), _hill(50, 30), _hill(60, 30, 1.5)),
        (_tc50(100, 50, 2.0), _coef(0.3), _tc50(90, 70, 2.0), _tc50(120, 40, 2.5), _coef(0.1)),
    ),
    _record(
        "anavar", "Anavar", 306.44,
        _pk(0.5, 9.0, 10.0, oral=(0.95, 2.0)),
        {"AR": {"Kd": 2.0, "activityType": "FullAgonist"}},
        _pathways(_hill(40, 30), _hill(20, 50), _hill(80, 20), _hill(30, 50), _hill(40, 50)),
        (_tc50(60, 100, 1.5), _coef(0.4), _tc50(60, 100, 1.5), _tc50(80, 80, 1.5), _coef(0.1)),
    ),
    _record(
        "proviron", "Proviron", 304.47,
        _pk(0.6, 12.0, 0.1, oral=(0.6, 2.0)),
        {"AR": {"Kd": 0.4, "activityType": "FullAgonist"}},
        _pathways(_hill(10, 100), _hill(20, 50), _hill(50, 20), _hill(60, 20), _hill(30, 50)),
        (_coef(0.05), _coef(0.1), _coef(0.1), _coef(0.1), _coef(0.1)),
    ),
    # Ancillary: no pathway activity, so every pathway carries Emax 0.
    _record(
        "arimidex", "Arimidex", 293.37,
        _pk(0.8, 48.0, 10000, oral=(0.8, 1.0)),
        {"AR": {"Kd": 10000, "activityType": "Antagonist"}},
        _pathways(_hill(0, 1), _hill(0, 1), _hill(0, 1), _hill(0, 1), _hill(0, 1)),
        (_coef(0.05), _coef(0.05), _coef(0.1), _coef(0.2), _coef(0.1)),
    ),
]


def _synergy(rule_id, pair, organ, multiplier, severity):
    return {
        "id": rule_id,
        "compounds": list(pair),
        "effects": {"toxicity": {"type": "Synergistic", "organ": organ, "multiplier": multiplier}},
        "metadata": {"severity": severity},
    }


INTERACTION_RECORDS: List[Dict[str, Any]] = [
    _synergy("tren_anadrol_hepatotox", ("trenbolone", "anadrol"), "hepatic", 2.2, "Critical"),
    _synergy("oral_oral_hepatotox", ("anavar", "winstrol"), "hepatic", 1.7, "Warning"),
    {
        "id": "ai_test_e2_suppression",
        "compounds": ["arimidex", "testosterone"],
        "effects": {"pk": {"type": "EnzymeInhibition", "target": "CYP19A1", "inhibitionPercent": 96,
                           "affectedCompound": "testosterone"}},
        "metadata": {"severity": "Info",
                     "mechanism": "Anastrozole inhibits aromatase, preventing conversion of testosterone to estradiol.",
                     "provenance": {"source": "HumanClinical", "citation": "FDA Label - Anastrozole"}},
    },
    _synergy("ai_nandrolone_low_e2", ("arimidex", "nandrolone"), "cardiovascular", 1.4, "Warning"),
    {
        "id": "proviron_test_shbg",
        "compounds": ["proviron", "testosterone"],
        "effects": {"pk": {"type": "ProteinBindingDisplacement", "shbgDisplacementFactor": 1.3,
                           "affectedCompound": "testosterone"}},
        "metadata": {"severity": "Info",
                     "mechanism": "High SHBG affinity displaces testosterone and raises its free fraction."},
    },
    _synergy("tren_nandrolone_prolactin", ("trenbolone", "nandrolone"), "neurotoxicity", 1.6, "Warning"),
    {
        "id": "masteron_test_anti_estrogen",
        "compounds": ["masteron", "testosterone"],
        "effects": {"pd": {"type": "ReceptorCompetition", "pathway": "myogenesis", "multiplier": 1.1}},
        "metadata": {"severity": "Info"},
    },
    _synergy("tren_winstrol_cardiovascular", ("trenbolone", "winstrol"), "cardiovascular", 1.6, "Critical"),
    _synergy("tren_anavar_renal", ("trenbolone", "anavar"), "renal", 1.4, "Warning"),
]


def default_compounds() -> Tuple[CompoundSchema, ...]:
    return tuple(compound_from_dict(record) for record in COMPOUND_RECORDS)


def default_interactions() -> Tuple[InteractionRule, ...]:
    return tuple(interaction_from_dict(record) for record in INTERACTION_RECORDS)


def default_registries() -> Tuple[CompoundRegistry, InteractionRegistry]:
    return CompoundRegistry(default_compounds()), InteractionRegistry(default_interactions())
