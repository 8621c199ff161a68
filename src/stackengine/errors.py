# src/stackengine/errors.py
"""Exception taxonomy shared by the pipeline stages and the compute protocol."""


class StackEngineError(Exception):
    """Base class for every error raised by :mod:`stackengine`."""


class ConfigurationError(StackEngineError, ValueError):
    """Invalid compound records, schedules, time grids or engine settings.

    Fatal for the request that triggered it: no stage is run.
    """


class UnknownCompoundError(StackEngineError, KeyError):
    """A dose or lookup referenced a compound id that is not registered."""

    def __init__(self, compound_id: str):
        super().__init__(compound_id)
        self.compound_id = compound_id

    def __str__(self) -> str:
        return f"Unknown compound '{self.compound_id}'."


class ProtocolError(StackEngineError):
    """Malformed compute request (bad job tag or undecodable payload)."""


class ComputeError(StackEngineError):
    """Raised on the caller side when a job comes back as ``ERROR``."""

    def __init__(self, message: str, request_id: str):
        super().__init__(message)
        self.request_id = request_id
