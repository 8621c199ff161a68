import logging

import pytest

from stackengine.dosing import single_dose
from stackengine.simulate import run_simulation
from stackengine.sweep import RISK_ORGANS, run_optimization, run_sweep, select_sweet_spot
from stackengine.results import SweepPoint
from stackengine.types import (
    CoefficientToxicity,
    HillToxicity,
    OptimizationRequest,
    SimulationRequest,
    StackEntry,
    SweepRequest,
)


@pytest.fixture
def steep_compound(compound_factory):
    """Risk rises faster than benefit: steep Hill toxicity on the risk organs."""
    return compound_factory(
        "alpha",
        toxicity={
            "hepatic": HillToxicity(emax=100.0, tc50=4000.0, hill_n=3.0),
            "renal": HillToxicity(emax=100.0, tc50=4000.0, hill_n=3.0),
            "cardiovascular": CoefficientToxicity(0.01),
        },
    )


def _brute_force(compound, dose_mg, scalar, t_eval):
    sim = run_simulation(SimulationRequest([compound], single_dose("alpha", dose_mg * scalar), (t_eval,)))
    benefit = float(sim.aggregate.total_anabolic_load[0])
    risk = sum(float(sim.aggregate.total_toxicity[o][0]) for o in RISK_ORGANS) / 3
    return benefit - risk


def test_scenario_c_sweet_spot_is_brute_force_maximum(steep_compound):
    scalars = [0.5, 1.0, 1.5]
    request = SweepRequest(base_stack=[StackEntry("alpha", 100.0, 7.0)], compounds=[steep_compound],
                           scalars=scalars, evaluation_time_h=24.0)
    response = run_sweep(request)

    gaps = {s: _brute_force(steep_compound, 100.0, s, 24.0) for s in scalars}
    best = max(scalars, key=lambda s: gaps[s])

    assert [p.scalar for p in response.points] == scalars
    for point in response.points:
        assert point.net_gap == pytest.approx(gaps[point.scalar])
        assert point.net_gap == pytest.approx(point.benefit - point.risk)
        assert point.mg_eq == pytest.approx(100.0 * point.scalar)
    assert response.sweet_spot.scalar == best


def test_empty_sweep_has_no_sweet_spot(oral_compound):
    request = SweepRequest(base_stack=[StackEntry("alpha", 100.0)], compounds=[oral_compound], scalars=[])
    response = run_sweep(request)
    assert response.points == ()
    assert response.sweet_spot is None


def test_ties_go_to_smallest_scalar():
    points = [SweepPoint(2.0, 200.0, 5.0, 1.0, 4.0), SweepPoint(1.0, 100.0, 4.0, 0.0, 4.0),
              SweepPoint(0.5, 50.0, 1.0, 0.0, 1.0)]
    assert select_sweet_spot(points).scalar == 1.0
    assert select_sweet_spot([]) is None


def test_zero_scalar_runs_with_no_doses(oral_compound):
    request = SweepRequest(base_stack=[StackEntry("alpha", 100.0)], compounds=[oral_compound], scalars=[0.0, 1.0])
    zero, one = run_sweep(request).points
    assert zero.benefit == 0.0 and zero.risk == 0.0
    assert one.benefit > 0.0


def test_optimization_is_pass_through(caplog):
    stack = (StackEntry("alpha", 300.0, 3.5, "enanthate"), StackEntry("beta", 50.0, 1.0))
    with caplog.at_level(logging.WARNING, logger="stackengine.sweep"):
        response = run_optimization(OptimizationRequest(goal="efficiency", current_stack=stack))

    assert tuple(response.optimized_stack) == stack
    assert response.original_score == response.new_score == 100.0
    assert response.risk_score == 0.0
    assert response.implemented is False
    assert "not implemented" in caplog.text
