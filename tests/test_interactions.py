import numpy as np
import pytest

from stackengine.dosing import combine_schedules, single_dose
from stackengine.errors import ConfigurationError
from stackengine.interactions import apply_pk_interactions, dose_levels, pk_factor, select_rules, toxicity_multipliers
from stackengine.simulate import run_simulation
from stackengine.types import (
    DoseThreshold,
    EnzymeInduction,
    EnzymeInhibition,
    InteractionRule,
    PDEffect,
    ProteinBindingDisplacement,
    SimulationRequest,
    ToxicityEffect,
)

GRID = tuple(float(h) for h in range(0, 24 * 14, 6))


def _two_compound_request(compound_factory, amount_b=100.0):
    a = compound_factory("a")
    b = compound_factory("b", cl=1.0, mw=288.42)
    doses = combine_schedules(single_dose("a", 100.0), single_dose("b", amount_b, 12.0))
    return SimulationRequest(compounds=(a, b), doses=doses, time_points=GRID, body_weight_kg=80.0)


def test_scenario_b_inhibition_is_exact(compound_factory):
    """96 % enzyme inhibition on B: adjusted == 1.96 x unadjusted, bit for bit; A untouched."""
    request = _two_compound_request(compound_factory)
    rule = InteractionRule("ai", ("a", "b"), pk=EnzymeInhibition("b", 96.0, "CYP19A1"))

    plain = run_simulation(request)
    adjusted = run_simulation(request, [rule])

    C_b = plain.results["b"].pk.mg_per_l
    assert np.array_equal(adjusted.results["b"].pk.mg_per_l, C_b * (1 + 96 / 100))
    assert np.array_equal(adjusted.results["b"].pk.nanomolar, plain.results["b"].pk.nanomolar * (1 + 96 / 100))
    assert np.array_equal(adjusted.results["a"].pk.mg_per_l, plain.results["a"].pk.mg_per_l)


def test_no_rules_is_identity(compound_factory):
    request = _two_compound_request(compound_factory)
    plain = run_simulation(request)
    series = {cid: r.pk for cid, r in plain.results.items()}

    out = apply_pk_interactions(series, ())
    assert all(out[cid] is series[cid] for cid in series)

    unrelated = InteractionRule("other", ("x", "y"), pk=EnzymeInhibition("x", 50.0))
    again = run_simulation(request, [unrelated])
    for cid in plain.results:
        assert np.array_equal(again.results[cid].pk.mg_per_l, plain.results[cid].pk.mg_per_l)
        assert np.array_equal(again.aggregate.total_anabolic_load, plain.aggregate.total_anabolic_load)


def test_pair_matching_is_unordered():
    rule = InteractionRule("r", ("b", "a"), toxicity=ToxicityEffect("hepatic", 2.0))
    assert select_rules([rule], ["a", "b", "c"]) == (rule,)
    assert select_rules([rule], ["a"]) == ()
    assert select_rules([rule], ["a", "c"]) == ()


def test_self_pair_is_rejected():
    with pytest.raises(ConfigurationError):
        InteractionRule("self", ("a", "a"), toxicity=ToxicityEffect("hepatic", 2.0))
    with pytest.raises(ConfigurationError):
        InteractionRule("three", ("a", "b", "c"))


def test_pk_factors():
    assert pk_factor(EnzymeInhibition("a", 96.0)) == 1 + 96 / 100
    assert pk_factor(EnzymeInduction("a", 100.0)) == pytest.approx(0.5)
    assert pk_factor(ProteinBindingDisplacement("a", 1.3)) == 1.3


@pytest.mark.parametrize("make", [
    lambda: EnzymeInhibition("b", -150.0),
    lambda: EnzymeInduction("b", -100.0),
])
def test_negative_enzyme_percentages_rejected(make):
    """Negative percentages would flip concentrations negative or divide by zero."""
    with pytest.raises(ConfigurationError):
        make()


def test_rules_compose_in_order(compound_factory):
    """Two PK rules on the same compound multiply in rule order."""
    request = _two_compound_request(compound_factory)
    rules = [
        InteractionRule("ai", ("a", "b"), pk=EnzymeInhibition("b", 96.0)),
        InteractionRule("shbg", ("b", "a"), pk=ProteinBindingDisplacement("b", 1.3)),
    ]
    plain = run_simulation(request).results["b"].pk.mg_per_l
    adjusted = run_simulation(request, rules).results["b"].pk.mg_per_l
    assert np.array_equal(adjusted, plain * (1 + 96 / 100) * 1.3)


def test_pd_multiplier_targets_affected_compound(compound_factory):
    request = _two_compound_request(compound_factory)
    rule = InteractionRule("syn", ("a", "b"), pd=PDEffect("myogenesis", 1.1, affected_compound="a"))
    plain = run_simulation(request)
    adjusted = run_simulation(request, [rule])

    a_plain = plain.results["a"].pd.activation["myogenesis"]
    assert np.allclose(adjusted.results["a"].pd.activation["myogenesis"], a_plain * 1.1, rtol=1e-15)
    assert np.array_equal(adjusted.results["a"].pd.base_activation["myogenesis"], a_plain)
    assert np.array_equal(adjusted.results["b"].pd.activation["myogenesis"],
                          plain.results["b"].pd.activation["myogenesis"])
    # occupancy is a binding quantity and never scaled
    assert np.array_equal(adjusted.results["a"].pd.occupancy["AR"], plain.results["a"].pd.occupancy["AR"])


def test_toxicity_multiplier_without_target_hits_both(compound_factory):
    request = _two_compound_request(compound_factory)
    rule = InteractionRule("hep", ("a", "b"), toxicity=ToxicityEffect("hepatic", 2.2))
    plain = run_simulation(request)
    adjusted = run_simulation(request, [rule])
    for cid in ("a", "b"):
        assert np.allclose(adjusted.results[cid].toxicity.organs["hepatic"],
                           plain.results[cid].toxicity.organs["hepatic"] * 2.2)
        assert np.array_equal(adjusted.results[cid].toxicity.organs["renal"],
                              plain.results[cid].toxicity.organs["renal"])


def test_dose_threshold_gates_toxicity_rule(compound_factory):
    """The rule fires only once b's largest administration reaches 200 mg."""
    rule = InteractionRule(
        "gate", ("a", "b"),
        toxicity=ToxicityEffect("hepatic", 3.0, dose_threshold=DoseThreshold("b", 200.0)),
    )
    low = _two_compound_request(compound_factory, amount_b=100.0)
    high = _two_compound_request(compound_factory, amount_b=250.0)

    assert dose_levels(low.doses) == {"a": 100.0, "b": 100.0}
    assert toxicity_multipliers([rule], "a", dose_levels(low.doses)) == {}
    assert toxicity_multipliers([rule], "a", dose_levels(high.doses)) == {"hepatic": 3.0}

    plain = run_simulation(high)
    gated = run_simulation(high, [rule])
    assert np.allclose(gated.results["a"].toxicity.organs["hepatic"],
                       plain.results["a"].toxicity.organs["hepatic"] * 3.0)


def test_rule_ignored_when_partner_has_no_doses(compound_factory):
    """Listing a compound without dosing it does not activate its rules."""
    a = compound_factory("a")
    b = compound_factory("b")
    request = SimulationRequest(compounds=(a, b), doses=single_dose("a", 100.0), time_points=GRID)
    rule = InteractionRule("hep", ("a", "b"), toxicity=ToxicityEffect("hepatic", 2.0))
    assert np.array_equal(run_simulation(request, [rule]).results["a"].toxicity.organs["hepatic"],
                          run_simulation(request).results["a"].toxicity.organs["hepatic"])
