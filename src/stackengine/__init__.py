"""Multi-compound PK/PD/toxicity simulation engine."""

from .catalog import default_compounds, default_interactions, default_registries
from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .errors import (
    ComputeError,
    ConfigurationError,
    ProtocolError,
    StackEngineError,
    UnknownCompoundError,
)
from .protocol import ComputeClient, ComputeRequest, ComputeResponse, JobType, handle_request
from .registry import CompoundRegistry, InteractionRegistry
from .simulate import run_simulation, run_stack
from .sweep import run_optimization, run_sweep
from .types import (
    CompoundSchema,
    DoseEvent,
    InteractionRule,
    OptimizationRequest,
    SimulationRequest,
    StackEntry,
    SweepRequest,
)

__all__ = [
    "CompoundRegistry",
    "CompoundSchema",
    "ComputeClient",
    "ComputeError",
    "ComputeRequest",
    "ComputeResponse",
    "ConfigurationError",
    "DEFAULT_ENGINE_CONFIG",
    "DoseEvent",
    "EngineConfig",
    "InteractionRegistry",
    "InteractionRule",
    "JobType",
    "OptimizationRequest",
    "ProtocolError",
    "SimulationRequest",
    "StackEngineError",
    "StackEntry",
    "SweepRequest",
    "UnknownCompoundError",
    "default_compounds",
    "default_interactions",
    "default_registries",
    "handle_request",
    "run_optimization",
    "run_simulation",
    "run_stack",
    "run_sweep",
]
