import numpy as np
import pytest

from stackengine.errors import ConfigurationError
from stackengine.results import ConcentrationSeries
from stackengine.toxicity import evaluate_model, simulate_toxicity
from stackengine.types import ORGANS, CoefficientToxicity, HillToxicity


def test_coefficient_model_is_linear():
    C = np.array([0.0, 10.0, 100.0])
    assert np.allclose(evaluate_model(CoefficientToxicity(0.2), C), [0.0, 2.0, 20.0])


def test_hill_tc50_model():
    C = np.array([0.0, 200.0])
    out = evaluate_model(HillToxicity(emax=100.0, tc50=200.0, hill_n=2.0), C)
    assert out[0] == 0.0
    assert out[1] == pytest.approx(50.0)


def test_invalid_tc50_is_configuration_error():
    with pytest.raises(ConfigurationError):
        HillToxicity(emax=100.0, tc50=0.0, hill_n=2.0)


def test_simulate_toxicity_organs(compound_factory):
    """Modelled organs score, unmodelled organs are zero, multipliers apply after the model."""
    compound = compound_factory()
    nM = np.array([0.0, 100.0, 200.0])
    series = ConcentrationSeries("alpha", np.arange(3.0), nM * 3e-4, nM)

    plain = simulate_toxicity(compound, series)
    assert set(plain.organs) == set(ORGANS)
    assert np.allclose(plain.organs["hepatic"], [0.0, 10.0, 20.0])
    assert plain.organs["cardiovascular"][2] == pytest.approx(50.0)
    assert np.array_equal(plain.organs["renal"], np.zeros(3))
    assert all(np.all(v >= 0.0) for v in plain.organs.values())

    boosted = simulate_toxicity(compound, series, {"hepatic": 2.2})
    assert np.allclose(boosted.organs["hepatic"], plain.organs["hepatic"] * 2.2)
    assert np.array_equal(boosted.organs["cardiovascular"], plain.organs["cardiovascular"])


def test_unknown_organ_rejected(compound_factory):
    with pytest.raises(ConfigurationError):
        compound_factory(toxicity={"spleen": CoefficientToxicity(0.1)})
