import numpy as np
import pytest

from stackengine.errors import ConfigurationError
from stackengine.helpers import to_nanomolar
from stackengine.models.response import hill
from stackengine.pharmacodynamics import receptor_occupancy, simulate_pd
from stackengine.results import ConcentrationSeries
from stackengine.types import HillParameters, ReceptorActivity


def _series(compound_id, nanomolar):
    nM = np.asarray(nanomolar, dtype=float)
    return ConcentrationSeries(compound_id, np.arange(nM.size, dtype=float), nM * 3e-4, nM)


def test_hill_midpoint_and_limits():
    assert hill(10.0, 100.0, 10.0, 1.2) == pytest.approx(50.0)
    assert hill(0.0, 100.0, 10.0, 1.2) == 0.0
    assert hill(-1.0, 100.0, 10.0, 1.2) == 0.0
    # huge concentrations saturate at Emax without overflow
    assert hill(1e300, 100.0, 10.0, 4.0) == pytest.approx(100.0)
    assert hill(1e-300, 100.0, 10.0, 4.0) == 0.0


@pytest.mark.parametrize("ec50, n", [(0.0, 1.0), (-1.0, 1.0), (10.0, 0.0)])
def test_hill_rejects_invalid_parameters(ec50, n):
    with pytest.raises(ConfigurationError):
        hill(1.0, 100.0, ec50, n)


def test_hill_parameters_validate_on_construction():
    with pytest.raises(ConfigurationError):
        HillParameters(emax=0.0, ec50=0.0, hill_n=1.0)


def test_to_nanomolar():
    """1 mg/L of a 300 g/mol compound is 3333.3 nM."""
    assert to_nanomolar(1.0, 300.0) == pytest.approx(1e6 / 300.0)
    assert isinstance(to_nanomolar(1.0, 300.0), float)
    assert np.allclose(to_nanomolar(np.array([0.0, 0.3]), 300.0), [0.0, 1000.0])


def test_receptor_occupancy():
    C = np.array([0.0, 1.0, 3.0])
    occ = receptor_occupancy(C, ReceptorActivity(kd=1.0))
    assert np.allclose(occ, [0.0, 50.0, 75.0])
    assert np.array_equal(receptor_occupancy(C, None), np.zeros(3))


def test_simulate_pd_channels(compound_factory):
    compound = compound_factory()
    pd = simulate_pd(compound, _series("alpha", [0.0, 10.0, 30.0]))

    assert set(pd.occupancy) == {"AR", "ER_alpha", "ER_beta", "PR", "GR"}
    assert np.allclose(pd.activation["myogenesis"][1], 50.0)
    assert np.allclose(pd.activation["cns_activation"][2], 25.0)
    # pathways the compound does not modulate are flat zero
    assert np.array_equal(pd.activation["erythropoiesis"], np.zeros(3))
    assert np.array_equal(pd.occupancy["PR"], np.zeros(3))
    for channel in list(pd.occupancy.values()) + list(pd.activation.values()):
        assert np.all(channel >= 0.0)


def test_pd_multipliers_scale_activation_only(compound_factory):
    compound = compound_factory()
    series = _series("alpha", [5.0, 10.0])
    plain = simulate_pd(compound, series)
    boosted = simulate_pd(compound, series, {"myogenesis": 1.1})

    assert np.allclose(boosted.activation["myogenesis"], plain.activation["myogenesis"] * 1.1)
    assert np.array_equal(boosted.base_activation["myogenesis"], plain.activation["myogenesis"])
    assert np.array_equal(boosted.activation["cns_activation"], plain.activation["cns_activation"])
