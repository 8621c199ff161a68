# src/stackengine/metrics.py
import numpy as np
from scipy.integrate import trapezoid
from scipy.signal import lfilter


def cmax(C: np.ndarray) -> float:
    """Global maximum concentration (mg/L)."""
    return float(np.max(C))

def tmax(t: np.ndarray, C: np.ndarray) -> float:
    """Time of maximum concentration (h); first occurrence on ties."""
    return float(t[int(np.argmax(C))])

def auc_trapz(t: np.ndarray, C: np.ndarray) -> float:
    """Area Under the Curve (AUC) via trapezoidal rule (mg*h/L)."""
    if len(t) < 2:
        return 0.0
    return float(trapezoid(C, t))

def cavg(C: np.ndarray) -> float:
    """Average concentration over the simulated grid."""
    return float(np.mean(C))

def concentration_summary(t: np.ndarray, C: np.ndarray) -> dict[str, float]:
    """Cmax, Tmax, AUC and Cavg of one concentration-time profile."""
    return {
        "cmax": cmax(C),
        "tmax": tmax(t, C),
        "auc": auc_trapz(t, C),
        "cavg": cavg(C),
    }

def trailing_window_mask(t: np.ndarray, window_h: float) -> np.ndarray:
    """
    Boolean mask for samples in the last `window_h` hours of the grid.
    If the grid is shorter than the window, every sample is selected.
    """
    if window_h <= 0:
        return np.ones_like(t, dtype=bool)
    start = t[-1] - window_h
    if start <= t[0]:
        return np.ones_like(t, dtype=bool)
    return t >= start

def trailing_mean(t: np.ndarray, X: np.ndarray, window_h: float) -> float:
    """Mean of X over the trailing window (steady-state summary)."""
    return float(np.mean(X[trailing_window_mask(t, window_h)]))

def exponential_smoothing(X: np.ndarray, alpha: float) -> np.ndarray:
    """
    First-order EMA: S[0] = X[0]; S[i] = alpha*X[i] + (1-alpha)*S[i-1].
    Each S[i] is a convex combination of X[0..i], so min(X) <= S <= max(X).
    """
    X = np.asarray(X, dtype=float)
    if X.size == 0:
        return X.copy()
    # y[-1] = X[0] so that S[0] = alpha*X[0] + (1-alpha)*X[0] = X[0]
    S, _ = lfilter([alpha], [1.0, -(1.0 - alpha)], X, zi=[(1.0 - alpha) * X[0]])
    return S
