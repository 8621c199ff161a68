# src/stackengine/models/one_compartment.py
import math

import numpy as np

# Relative gap under which ka and kel are treated as equal.
DEGENERACY_RTOL = 1e-9


def _finish(out):
    return float(out) if np.ndim(out) == 0 else out


def absorption_concentration(t, dose, F, ka, kel, Vd):
    """
    One-compartment model with first-order absorption and elimination.

      C(t) = F*D*ka / (Vd*(ka - kel)) * (exp(-kel t) - exp(-ka t))

    When ka == kel the expression is 0/0; the limit is used instead:

      C(t) = (F*D/Vd) * kel * t * exp(-kel t)

    Parameters:
      t    : time since administration (h), scalar or array
      dose : amount administered (mg)
      F    : bioavailability (0-1)
      ka   : absorption rate constant (1/h)
      kel  : elimination rate constant (1/h)
      Vd   : volume of distribution (L)

    Returns mg/L; exactly 0 for t < 0.
    """
    t = np.asarray(t, dtype=float)
    tt = np.maximum(t, 0.0)
    if math.isclose(ka, kel, rel_tol=DEGENERACY_RTOL):
        C = (F * dose / Vd) * kel * tt * np.exp(-kel * tt)
    else:
        multiplier = (F * dose * ka) / (Vd * (ka - kel))
        C = multiplier * (np.exp(-kel * tt) - np.exp(-ka * tt))
    # rounding can leave a -0.0-ish residue right at t=0
    C = np.where(t < 0.0, 0.0, np.maximum(C, 0.0))
    return _finish(C)


def iv_bolus_concentration(t, dose, kel, Vd):
    """
    IV bolus: C(t) = (D / Vd) * exp(-kel t), 0 for t < 0.
    """
    t = np.asarray(t, dtype=float)
    tt = np.maximum(t, 0.0)
    C = np.where(t < 0.0, 0.0, (dose / Vd) * np.exp(-kel * tt))
    return _finish(C)
