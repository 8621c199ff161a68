# src/stackengine/dosing.py
from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError
from .helpers import validate_non_negative, validate_positive
from .types import DoseEvent, StackEntry

LOGGER = logging.getLogger(__name__)


def build_time_grid(horizon_days: float, step_h: float = 6.0) -> np.ndarray:
    """
    Shared time grid: 0, step, 2*step, ... strictly below the horizon (hours).
    Example: 84 days at 6 h -> 336 points, [0, 6, ..., 2010].
    """
    validate_positive("horizon_days", horizon_days)
    validate_positive("step_h", step_h)
    horizon_h = float(horizon_days) * 24.0
    n = max(1, int(math.ceil(horizon_h / step_h - 1e-9)))
    # index * step rather than cumulative addition keeps points exact
    return np.arange(n, dtype=float) * float(step_h)


def administration_amount(weekly_dose_mg: float, interval_days: float) -> float:
    """
    Amount per administration that preserves the weekly total:
      daily (1)     -> dose / 7
      E3.5D (3.5)   -> dose / 2
      weekly (7)    -> dose
    """
    _validate_interval(interval_days)
    return float(weekly_dose_mg) * float(interval_days) / 7.0


def schedule_entry(entry: StackEntry, horizon_days: float) -> Tuple[DoseEvent, ...]:
    """
    Repeat one stack entry at t = 0, interval, 2*interval, ... until the horizon.
    A zero weekly dose schedules nothing.
    """
    _validate_interval(entry.interval_days)
    validate_positive("horizon_days", horizon_days)
    if entry.dose_mg == 0:
        LOGGER.debug("Skipping zero-dose stack entry for %s", entry.compound_id)
        return ()

    amount = administration_amount(entry.dose_mg, entry.interval_days)
    horizon_h = float(horizon_days) * 24.0
    interval_h = float(entry.interval_days) * 24.0
    n_doses = int(math.ceil(horizon_h / interval_h - 1e-9))
    return tuple(
        DoseEvent(compound_id=entry.compound_id, time_h=k * interval_h,
                  amount_mg=amount, ester_id=entry.ester_id)
        for k in range(n_doses)
    )


def schedule_stack(stack: Iterable[StackEntry], horizon_days: float) -> Tuple[DoseEvent, ...]:
    """
    Expand every stack entry into dose events, merged and sorted by time.
    """
    events: list[DoseEvent] = []
    for entry in stack:
        events.extend(schedule_entry(entry, horizon_days))
    return combine_schedules(events)


def single_dose(compound_id: str, amount_mg: float, time_h: float = 0.0,
                ester_id: Optional[str] = None) -> Tuple[DoseEvent, ...]:
    """
    Exactly one administration, e.g. 100 mg at t=0 h.
    """
    validate_positive("amount_mg", amount_mg)
    validate_non_negative("time_h", time_h)
    return (DoseEvent(compound_id=compound_id, time_h=float(time_h),
                      amount_mg=float(amount_mg), ester_id=ester_id),)


def from_explicit_schedule(compound_id: str, entries: Sequence[Tuple[float, float]],
                           ester_id: Optional[str] = None) -> Tuple[DoseEvent, ...]:
    """
    Build dose events from manual (time_h, amount_mg) entries.
    Example: entries=[(0.0, 250), (72.0, 250), (144.0, 250)]
    """
    doses: list[DoseEvent] = []
    for time_h, amount_mg in entries:
        doses.extend(single_dose(compound_id, amount_mg, time_h, ester_id))
    doses.sort(key=lambda d: d.time_h)
    return tuple(doses)


def combine_schedules(*schedules: Iterable[DoseEvent]) -> Tuple[DoseEvent, ...]:
    """
    Merge schedules (e.g. two compounds, or a loading dose plus a maintenance
    schedule). Sorted by time, then compound id, for readability only; the
    PK stage does not depend on order.
    """
    all_doses: list[DoseEvent] = []
    for s in schedules:
        all_doses.extend(s)
    return tuple(sorted(all_doses, key=lambda d: (d.time_h, d.compound_id)))


def _validate_interval(interval_days: float) -> None:
    if not (interval_days > 0):
        raise ConfigurationError(f"interval_days must be > 0 (got {interval_days}).")
