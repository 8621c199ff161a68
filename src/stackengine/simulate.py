# src/stackengine/simulate.py
"""Full pipeline: Scheduler -> PK -> DDI -> PD/Toxicity -> Aggregator."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Sequence

from .aggregate import accumulate_loads, summarize
from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .dosing import build_time_grid, schedule_stack
from .errors import ConfigurationError
from .helpers import split_doses_by_compound, validate_positive
from .interactions import apply_pk_interactions, dose_levels, pd_multipliers, select_rules, toxicity_multipliers
from .metrics import concentration_summary
from .pharmacodynamics import simulate_pd
from .results import CompoundResult, SimulationResponse
from .solvers import simulate_compound
from .toxicity import simulate_toxicity
from .types import CompoundSchema, InteractionRule, SimulationRequest, StackEntry

LOGGER = logging.getLogger(__name__)


def index_compounds(compounds: Iterable[CompoundSchema]) -> Dict[str, CompoundSchema]:
    indexed: Dict[str, CompoundSchema] = {}
    for compound in compounds:
        if compound.compound_id in indexed:
            raise ConfigurationError(f"Compound '{compound.compound_id}' is listed more than once.")
        indexed[compound.compound_id] = compound
    return indexed


def run_simulation(request: SimulationRequest,
                   interactions: Iterable[InteractionRule] = (),
                   config: Optional[EngineConfig] = None) -> SimulationResponse:
    """
    Run every stage for one request and return a fresh, self-contained response.

    Doses for compounds missing from `request.compounds` are skipped and
    reported in `response.warnings`; every listed compound gets a result,
    all-zero when it has no doses.
    """
    config = config or DEFAULT_ENGINE_CONFIG
    t = request.time_grid()
    validate_positive("body_weight_kg", request.body_weight_kg)
    body_weight_kg = float(request.body_weight_kg)

    compounds = index_compounds(request.compounds)
    if request.doses and not compounds:
        raise ConfigurationError("Doses were given but the compound list is empty.")

    warnings: list[str] = []
    doses_by_compound = split_doses_by_compound(request.doses)
    for compound_id, doses in doses_by_compound.items():
        if compound_id not in compounds:
            LOGGER.warning("Skipping %d dose(s) for unknown compound '%s'", len(doses), compound_id)
            warnings.append(f"Skipped {len(doses)} dose(s) for unknown compound '{compound_id}'.")
    known_doses = [d for d in request.doses if d.compound_id in compounds]

    # PK
    pk = {
        compound_id: simulate_compound(compound, doses_by_compound.get(compound_id, ()), t,
                                       body_weight_kg, warnings)
        for compound_id, compound in compounds.items()
    }

    # DDI (concentration effects first, PD/toxicity multipliers after the base models)
    present = [compound_id for compound_id in compounds if compound_id in doses_by_compound]
    rules = select_rules(interactions, present)
    if rules:
        LOGGER.debug("Applying %d interaction rule(s): %s", len(rules), [r.rule_id for r in rules])
    adjusted = apply_pk_interactions(pk, rules)
    levels = dose_levels(known_doses)

    # PD / Toxicity
    pd = {cid: simulate_pd(compounds[cid], adjusted[cid], pd_multipliers(rules, cid)) for cid in compounds}
    tox = {cid: simulate_toxicity(compounds[cid], adjusted[cid], toxicity_multipliers(rules, cid, levels))
           for cid in compounds}

    # Aggregate
    anabolic, organ_load = accumulate_loads(t, compounds, adjusted, pd, tox, body_weight_kg,
                                            config.tox_normalization_mg_per_day)
    aggregate = summarize(t, anabolic, organ_load, config.smoothing_alpha, config.steady_state_window_h)

    results = {
        cid: CompoundResult(
            pk=adjusted[cid],
            pd=pd[cid],
            toxicity=tox[cid],
            summary=concentration_summary(t, adjusted[cid].mg_per_l),
        )
        for cid in compounds
    }
    LOGGER.debug("Simulated %d compound(s) over %d time points", len(results), t.size)
    return SimulationResponse(
        time_points=t,
        results=results,
        aggregate=aggregate,
        warnings=tuple(dict.fromkeys(warnings)),
    )


def run_stack(stack: Sequence[StackEntry], compounds: Iterable[CompoundSchema],
              interactions: Iterable[InteractionRule] = (),
              config: Optional[EngineConfig] = None,
              horizon_days: Optional[float] = None,
              body_weight_kg: Optional[float] = None) -> SimulationResponse:
    """
    High-level wrapper: schedule a stack over the horizon on the configured
    grid, then run the pipeline.
    """
    config = config or DEFAULT_ENGINE_CONFIG
    horizon_days = config.horizon_days if horizon_days is None else horizon_days
    request = SimulationRequest(
        compounds=tuple(compounds),
        doses=schedule_stack(stack, horizon_days),
        time_points=build_time_grid(horizon_days, config.time_step_h),
        body_weight_kg=config.body_weight_kg if body_weight_kg is None else body_weight_kg,
    )
    return run_simulation(request, interactions, config)
