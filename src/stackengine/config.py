# src/stackengine/config.py
"""Engine settings, readable from ``STACKSIM_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .errors import ConfigurationError

EXECUTORS = ("process", "thread")


@dataclass(slots=True)
class EngineConfig:
    """Numerical and runtime knobs for one engine instance.

    time_step_h                  : spacing of the shared time grid (hours)
    horizon_days                 : default simulated span for stack schedules
    body_weight_kg               : default body mass for per-kg PK scaling
    smoothing_alpha              : EMA constant for organ-stress smoothing
    steady_state_window_h        : trailing window for steady-state summaries
    tox_normalization_mg_per_day : exposure that counts as one unit of toxic load
    sweep_evaluation_h           : time point at which sweeps read the aggregate
    max_workers                  : compute-task pool size
    executor                     : "process" (isolated) or "thread"
    log_level                    : level used by the desktop entry point
    """

    time_step_h: float = 6.0
    horizon_days: float = 84.0
    body_weight_kg: float = 85.0
    smoothing_alpha: float = 0.05
    steady_state_window_h: float = 7 * 24.0
    tox_normalization_mg_per_day: float = 50.0
    sweep_evaluation_h: float = 7 * 24.0
    max_workers: int = 1
    executor: str = "process"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        for name in ("time_step_h", "horizon_days", "body_weight_kg", "steady_state_window_h",
                     "tox_normalization_mg_per_day", "sweep_evaluation_h"):
            value = getattr(self, name)
            if not (value > 0):
                raise ConfigurationError(f"{name} must be > 0 (got {value}).")
        if not (0.0 < self.smoothing_alpha <= 1.0):
            raise ConfigurationError(f"smoothing_alpha must be in (0, 1] (got {self.smoothing_alpha}).")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1 (got {self.max_workers}).")
        if self.executor not in EXECUTORS:
            raise ConfigurationError(f"executor must be one of {EXECUTORS} (got {self.executor!r}).")

    @property
    def horizon_h(self) -> float:
        return self.horizon_days * 24.0

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        prefix: str = "STACKSIM_",
    ) -> "EngineConfig":
        """Build a config from environment variables.

        Values that fail to parse fall back to the defaults; values that parse
        but are out of range raise :class:`ConfigurationError`.
        """

        env = env if env is not None else os.environ
        defaults = cls()

        def _float(key: str, default: float) -> float:
            raw = env.get(f"{prefix}{key}")
            if raw is None:
                return default
            try:
                return float(raw)
            except (TypeError, ValueError):
                return default

        def _int(key: str, default: int) -> int:
            raw = env.get(f"{prefix}{key}")
            if raw is None:
                return default
            try:
                return int(raw)
            except (TypeError, ValueError):
                return default

        executor = (env.get(f"{prefix}EXECUTOR") or defaults.executor).strip().lower()
        log_level = (env.get(f"{prefix}LOG_LEVEL") or defaults.log_level).strip().upper()

        return cls(
            time_step_h=_float("TIME_STEP_H", defaults.time_step_h),
            horizon_days=_float("HORIZON_DAYS", defaults.horizon_days),
            body_weight_kg=_float("BODY_WEIGHT_KG", defaults.body_weight_kg),
            smoothing_alpha=_float("SMOOTHING_ALPHA", defaults.smoothing_alpha),
            steady_state_window_h=_float("STEADY_STATE_WINDOW_H", defaults.steady_state_window_h),
            tox_normalization_mg_per_day=_float("TOX_NORMALIZATION", defaults.tox_normalization_mg_per_day),
            sweep_evaluation_h=_float("SWEEP_EVALUATION_H", defaults.sweep_evaluation_h),
            max_workers=_int("MAX_WORKERS", defaults.max_workers),
            executor=executor,
            log_level=log_level,
        )


# Plain defaults; entry points read STACKSIM_* through EngineConfig.from_env().
DEFAULT_ENGINE_CONFIG = EngineConfig()
