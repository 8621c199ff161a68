# src/stackengine/interactions.py
"""Drug-drug interaction stage.

Rules are selected once per simulation from the set of compounds present and
then applied in the registry's order. Nothing here creates compounds, pathways
or organs: every effect only scales a channel that already exists.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, Mapping, Tuple

from .results import ConcentrationSeries
from .types import (
    ORGANS,
    PATHWAYS,
    DoseEvent,
    EnzymeInduction,
    EnzymeInhibition,
    InteractionRule,
    PKEffect,
    ProteinBindingDisplacement,
)

LOGGER = logging.getLogger(__name__)


def select_rules(rules: Iterable[InteractionRule], compound_ids: Iterable[str]) -> Tuple[InteractionRule, ...]:
    """
    Rules whose compound pair is fully contained in the stack, in input order.
    The pair is unordered: ("a", "b") and ("b", "a") both match {"a", "b"}.
    """
    present = frozenset(compound_ids)
    if len(present) < 2:
        return ()
    return tuple(rule for rule in rules if rule.applies_to(present))


def pk_factor(effect: PKEffect) -> float:
    """
    Concentration multiplier for one PK effect.

    EnzymeInhibition           : 1 + inhibition%/100 (96% -> 1.96x); a proportional
                                 surrogate for reduced clearance
    EnzymeInduction            : 1 / (1 + induction%/100)
    ProteinBindingDisplacement : the displacement factor (>1 frees more drug)
    """
    if isinstance(effect, EnzymeInhibition):
        return 1 + (effect.inhibition_percent / 100)
    if isinstance(effect, EnzymeInduction):
        return 1 / (1 + (effect.induction_percent / 100))
    if isinstance(effect, ProteinBindingDisplacement):
        return effect.displacement_factor
    raise TypeError(f"Unsupported PK interaction effect: {type(effect).__name__}")


def apply_pk_interactions(series: Mapping[str, ConcentrationSeries],
                          rules: Iterable[InteractionRule]) -> Dict[str, ConcentrationSeries]:
    """
    Scale the concentration of each affected compound, rule by rule.

    Several rules on the same compound compose multiplicatively in rule
    order. Series untouched by any rule are passed through as-is.
    """
    adjusted = dict(series)
    for rule in rules:
        if rule.pk is None:
            continue
        target = adjusted.get(rule.pk.affected_compound)
        if target is None:
            continue
        factor = pk_factor(rule.pk)
        adjusted[target.compound_id] = replace(
            target,
            mg_per_l=target.mg_per_l * factor,
            nanomolar=target.nanomolar * factor,
        )
        LOGGER.debug("DDI %s: %s concentration x%.4g", rule.rule_id, target.compound_id, factor)
    return adjusted


def pd_multipliers(rules: Iterable[InteractionRule], compound_id: str) -> Dict[str, float]:
    """
    pathway -> combined multiplier for one compound. Unknown pathways are ignored.
    """
    multipliers: Dict[str, float] = {}
    for rule in rules:
        effect = rule.pd
        if effect is None or effect.pathway not in PATHWAYS:
            continue
        if compound_id not in rule.targets(effect.affected_compound):
            continue
        multipliers[effect.pathway] = multipliers.get(effect.pathway, 1.0) * effect.multiplier
    return multipliers


def toxicity_multipliers(rules: Iterable[InteractionRule], compound_id: str,
                         dose_levels: Mapping[str, float]) -> Dict[str, float]:
    """
    organ -> combined multiplier for one compound.

    A rule with a dose threshold only applies when the named compound's dose
    level (see `dose_levels`) reaches the threshold.
    """
    multipliers: Dict[str, float] = {}
    for rule in rules:
        effect = rule.toxicity
        if effect is None or effect.organ not in ORGANS:
            continue
        if compound_id not in rule.targets(effect.affected_compound):
            continue
        threshold = effect.dose_threshold
        if threshold is not None and dose_levels.get(threshold.compound_id, 0.0) < threshold.min_dose_mg:
            continue
        multipliers[effect.organ] = multipliers.get(effect.organ, 1.0) * effect.multiplier
    return multipliers


def dose_levels(doses: Iterable[DoseEvent]) -> Dict[str, float]:
    """
    compound_id -> largest single administration (mg), the level that dose
    thresholds are compared against.
    """
    levels: Dict[str, float] = {}
    for d in doses:
        levels[d.compound_id] = max(levels.get(d.compound_id, 0.0), d.amount_mg)
    return levels
