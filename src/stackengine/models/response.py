# src/stackengine/models/response.py
import numpy as np

from ..errors import ConfigurationError


def hill(C, Emax, EC50, n):
    """
    Hill equation E = Emax * C^n / (EC50^n + C^n), 0 for C <= 0.

    Evaluated as Emax / (1 + (EC50/C)^n), which is the same curve but stays
    finite when C^n would overflow.
    """
    if not (EC50 > 0):
        raise ConfigurationError(f"EC50 must be > 0 (got {EC50}).")
    if not (n > 0):
        raise ConfigurationError(f"Hill_n must be > 0 (got {n}).")
    C = np.asarray(C, dtype=float)
    positive = C > 0.0
    safe = np.where(positive, C, 1.0)
    with np.errstate(over="ignore"):
        E = np.where(positive, Emax / (1.0 + (EC50 / safe) ** n), 0.0)
    return float(E) if E.ndim == 0 else E
