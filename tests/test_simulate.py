import logging

import numpy as np
import pytest

from stackengine.config import EngineConfig
from stackengine.dosing import combine_schedules, single_dose
from stackengine.errors import ConfigurationError
from stackengine.simulate import run_simulation, run_stack
from stackengine.types import ORGANS, PATHWAYS, SimulationRequest, StackEntry

GRID = tuple(float(h) for h in range(0, 24 * 21, 6))


def test_outputs_are_non_negative(oral_compound, depot_compound):
    stack = [StackEntry("alpha", 140.0, 1.0), StackEntry("beta", 500.0, 3.5, "enanthate")]
    response = run_stack(stack, [oral_compound, depot_compound], horizon_days=42)

    for result in response.results.values():
        assert np.all(result.pk.mg_per_l >= 0.0)
        assert np.all(result.pk.nanomolar >= 0.0)
        assert all(np.all(v >= 0.0) for v in result.pd.occupancy.values())
        assert all(np.all(v >= 0.0) for v in result.toxicity.organs.values())
    assert np.all(response.aggregate.total_anabolic_load >= 0.0)
    assert all(np.all(response.aggregate.smoothed_toxicity[o] >= 0.0) for o in ORGANS)


def test_zero_before_first_dose(oral_compound):
    request = SimulationRequest([oral_compound], single_dose("alpha", 100.0, 48.0), GRID)
    C = run_simulation(request).results["alpha"].pk.mg_per_l
    t = np.asarray(GRID)
    assert np.all(C[t <= 48.0] == 0.0)
    assert np.all(C[t > 48.0] > 0.0)


def test_superposition_linearity(oral_compound):
    first = single_dose("alpha", 100.0, 0.0)
    second = single_dose("alpha", 150.0, 30.0)

    def conc(doses):
        return run_simulation(SimulationRequest([oral_compound], doses, GRID)).results["alpha"].pk.mg_per_l

    together = conc(combine_schedules(first, second))
    assert np.allclose(together, conc(first) + conc(second), rtol=1e-9, atol=0.0)


def test_scenario_d_no_doses_is_flat_zero(oral_compound):
    response = run_simulation(SimulationRequest([oral_compound], (), GRID))
    result = response.results["alpha"]
    zeros = np.zeros(len(GRID))

    assert np.array_equal(result.pk.mg_per_l, zeros)
    assert all(np.array_equal(result.pd.activation[p], zeros) for p in PATHWAYS)
    assert np.array_equal(response.aggregate.total_anabolic_load, zeros)
    assert all(np.array_equal(response.aggregate.total_toxicity[o], zeros) for o in ORGANS)
    assert response.aggregate_benefit == 0.0
    assert response.aggregate_toxicity == 0.0
    assert response.warnings == ()


def test_unknown_compound_doses_are_skipped_with_warning(oral_compound, caplog):
    doses = combine_schedules(single_dose("alpha", 100.0), single_dose("ghost", 50.0), single_dose("ghost", 50.0, 24.0))
    with caplog.at_level(logging.WARNING, logger="stackengine.simulate"):
        response = run_simulation(SimulationRequest([oral_compound], doses, GRID))

    assert set(response.results) == {"alpha"}
    assert response.warnings == ("Skipped 2 dose(s) for unknown compound 'ghost'.",)
    assert "ghost" in caplog.text
    expected = run_simulation(SimulationRequest([oral_compound], single_dose("alpha", 100.0), GRID))
    assert np.array_equal(response.results["alpha"].pk.mg_per_l, expected.results["alpha"].pk.mg_per_l)


def test_unknown_ester_falls_back_with_warning(oral_compound):
    request = SimulationRequest([oral_compound], single_dose("alpha", 100.0, ester_id="decanoate"), GRID)
    response = run_simulation(request)
    plain = run_simulation(SimulationRequest([oral_compound], single_dose("alpha", 100.0), GRID))

    assert len(response.warnings) == 1
    assert "decanoate" in response.warnings[0]
    assert np.array_equal(response.results["alpha"].pk.mg_per_l, plain.results["alpha"].pk.mg_per_l)


def test_doses_without_compounds_is_configuration_error():
    with pytest.raises(ConfigurationError):
        run_simulation(SimulationRequest([], single_dose("alpha", 100.0), GRID))


@pytest.mark.parametrize("grid", [(), (0.0, 6.0, 6.0), (12.0, 6.0), (0.0, float("nan"))])
def test_invalid_time_grid(oral_compound, grid):
    with pytest.raises(ConfigurationError):
        run_simulation(SimulationRequest([oral_compound], (), grid))


def test_duplicate_compound_is_configuration_error(compound_factory):
    with pytest.raises(ConfigurationError):
        run_simulation(SimulationRequest([compound_factory("a"), compound_factory("a")], (), GRID))


def test_invalid_compound_parameters(compound_factory):
    for kwargs in ({"cl": 0.0}, {"vd": -1.0}, {"mw": 0.0}):
        with pytest.raises(ConfigurationError):
            compound_factory(**kwargs)


def test_runs_are_independent(oral_compound):
    """A failed run leaves no trace in the next one."""
    request = SimulationRequest([oral_compound], single_dose("alpha", 100.0), GRID)
    before = run_simulation(request)
    with pytest.raises(ConfigurationError):
        run_simulation(SimulationRequest([oral_compound], single_dose("alpha", 100.0), (5.0, 1.0)))
    after = run_simulation(request)
    assert np.array_equal(before.aggregate.total_anabolic_load, after.aggregate.total_anabolic_load)
    assert after.aggregate is not before.aggregate


def test_run_stack_uses_config_grid(oral_compound):
    config = EngineConfig(time_step_h=12.0, horizon_days=14.0, body_weight_kg=70.0)
    response = run_stack([StackEntry("alpha", 70.0, 1.0)], [oral_compound], config=config)
    assert response.time_points.size == 28
    assert response.time_points[1] == 12.0
    assert response.results["alpha"].summary["cmax"] > 0.0
