import pytest

from stackengine.types import (
    CoefficientToxicity,
    CompoundSchema,
    Ester,
    FirstOrderRelease,
    HillParameters,
    HillToxicity,
    OralAbsorption,
    PharmacodynamicProfile,
    PharmacokineticProfile,
    ReceptorActivity,
)


def make_compound(compound_id="alpha", vd=0.6, cl=0.5, mw=300.0, oral=(1.0, 0.1), esters=None,
                  pathways=None, receptors=None, toxicity=None, base_potency=1.0, base_toxicity=1.0):
    """Compound with Scenario A kinetics by default (kel = 0.05 /h)."""
    return CompoundSchema(
        compound_id=compound_id,
        molecular_weight=mw,
        pk=PharmacokineticProfile(
            vd_l_per_kg=vd,
            cl_ml_min_kg=cl,
            oral=None if oral is None else OralAbsorption(f=oral[0], ka=oral[1]),
            esters=esters or {},
        ),
        pd=PharmacodynamicProfile(
            receptors=receptors if receptors is not None else {"AR": ReceptorActivity(kd=1.0)},
            pathways=pathways if pathways is not None else {
                "myogenesis": HillParameters(emax=100.0, ec50=10.0, hill_n=1.2),
                "cns_activation": HillParameters(emax=50.0, ec50=30.0, hill_n=1.5),
            },
        ),
        toxicity=toxicity if toxicity is not None else {
            "hepatic": CoefficientToxicity(coefficient=0.1),
            "cardiovascular": HillToxicity(emax=100.0, tc50=200.0, hill_n=2.0),
        },
        name=compound_id.title(),
        base_potency=base_potency,
        base_toxicity=base_toxicity,
    )


@pytest.fixture
def compound_factory():
    return make_compound


@pytest.fixture
def oral_compound():
    return make_compound("alpha")


@pytest.fixture
def depot_compound():
    """Injectable only: an enanthate-like ester, no oral data."""
    return make_compound(
        "beta", vd=0.6, cl=2.0, oral=None,
        esters={"enanthate": Ester("enanthate", 0.7, FirstOrderRelease(ka=0.01))},
    )
