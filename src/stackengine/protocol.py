# src/stackengine/protocol.py
"""Request/response envelope between a foreground caller and the compute task.

The caller tags a job (SIMULATE / SWEEP / OPTIMIZE) with a correlation id and
hands it to an executor; :func:`handle_request` runs the whole pipeline
synchronously in the worker and always answers with exactly one response
carrying the same id. :class:`ComputeClient` keeps the dispatch table that
resolves caller-side futures from those responses.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from collections import deque
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Dict, Iterable, Mapping, Optional

from . import codec
from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .errors import ComputeError, ProtocolError
from .simulate import run_simulation
from .sweep import run_optimization, run_sweep
from .types import InteractionRule, OptimizationRequest, SimulationRequest, SweepRequest

LOGGER = logging.getLogger(__name__)

# Resolved requests whose terminal state stays queryable through ComputeClient.state().
FINISHED_HISTORY = 32


class JobType(str, Enum):
    SIMULATE = "SIMULATE"
    SWEEP = "SWEEP"
    OPTIMIZE = "OPTIMIZE"


class ResponseType(str, Enum):
    SIMULATE_RESULT = "SIMULATE_RESULT"
    SWEEP_RESULT = "SWEEP_RESULT"
    OPTIMIZE_RESULT = "OPTIMIZE_RESULT"
    ERROR = "ERROR"


class RequestState(str, Enum):
    SUBMITTED = "Submitted"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"


RESULT_TYPES = {
    JobType.SIMULATE: ResponseType.SIMULATE_RESULT,
    JobType.SWEEP: ResponseType.SWEEP_RESULT,
    JobType.OPTIMIZE: ResponseType.OPTIMIZE_RESULT,
}

PAYLOAD_TYPES = {
    JobType.SIMULATE: SimulationRequest,
    JobType.SWEEP: SweepRequest,
    JobType.OPTIMIZE: OptimizationRequest,
}


@dataclass(frozen=True)
class ComputeRequest:
    type: Any
    payload: Any
    id: str


@dataclass(frozen=True)
class ComputeResponse:
    type: ResponseType
    id: str
    payload: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.type is not ResponseType.ERROR


def _decode_payload(job: JobType, payload: Any, config: EngineConfig):
    expected = PAYLOAD_TYPES[job]
    if isinstance(payload, expected):
        return payload
    if isinstance(payload, Mapping):
        if job is JobType.SIMULATE:
            return codec.simulation_request_from_dict(payload, config.body_weight_kg)
        if job is JobType.SWEEP:
            return codec.sweep_request_from_dict(payload, config.body_weight_kg, config.sweep_evaluation_h)
        return codec.optimization_request_from_dict(payload, config.body_weight_kg)
    raise ProtocolError(f"{job.value} expects a {expected.__name__} payload (got {type(payload).__name__}).")


def handle_request(request: ComputeRequest,
                   interactions: Optional[Iterable[InteractionRule]] = None,
                   config: Optional[EngineConfig] = None) -> ComputeResponse:
    """
    Run one job to completion. Never raises: a malformed tag or any stage
    failure comes back as an ERROR response with the request's id.
    """
    config = config or DEFAULT_ENGINE_CONFIG
    rules = tuple(interactions or ())
    try:
        job = JobType(request.type)
    except ValueError:
        LOGGER.error("Rejecting request %s with malformed job tag %r", request.id, request.type)
        return ComputeResponse(type=ResponseType.ERROR, id=request.id,
                               error=f"Malformed job tag {request.type!r}.")

    try:
        payload = _decode_payload(job, request.payload, config)
        if job is JobType.SIMULATE:
            result = run_simulation(payload, rules, config)
        elif job is JobType.SWEEP:
            result = run_sweep(payload, rules, config)
        else:
            result = run_optimization(payload)
    except Exception as exc:
        LOGGER.exception("%s job %s failed", job.value, request.id)
        return ComputeResponse(type=ResponseType.ERROR, id=request.id,
                               error=str(exc) or type(exc).__name__)
    return ComputeResponse(type=RESULT_TYPES[job], id=request.id, payload=result)


def request_from_dict(message: Mapping[str, Any]) -> ComputeRequest:
    """Envelope {type, payload, id}; a missing id is a protocol error."""
    if "id" not in message:
        raise ProtocolError("Compute request is missing its correlation id.")
    return ComputeRequest(type=message.get("type"), payload=message.get("payload"), id=str(message["id"]))


def handle_message(message: Mapping[str, Any],
                   interactions: Optional[Iterable[InteractionRule]] = None,
                   config: Optional[EngineConfig] = None) -> Dict[str, Any]:
    """JSON-shaped entry point: wire envelope in, wire envelope out."""
    return codec.envelope_to_dict(handle_request(request_from_dict(message), interactions, config))


class ComputeClient:
    """
    Caller-side end of the protocol.

    Jobs run on a process pool of ``config.max_workers`` (or a thread pool
    when ``config.executor == "thread"``); pass ``executor`` to supply your
    own. Only frozen requests and responses cross the executor boundary.
    """

    def __init__(self, interactions: Iterable[InteractionRule] = (),
                 config: Optional[EngineConfig] = None,
                 executor: Optional[Executor] = None):
        self._config = config or DEFAULT_ENGINE_CONFIG
        self._interactions = tuple(interactions)
        self._owns_executor = executor is None
        self._executor = executor if executor is not None else self._make_executor(self._config)
        self._handler = partial(handle_request, interactions=self._interactions, config=self._config)
        self._pending: Dict[str, Future] = {}
        self._states: Dict[str, RequestState] = {}
        self._finished: deque = deque(maxlen=FINISHED_HISTORY)
        self._lock = threading.Lock()

    @staticmethod
    def _make_executor(config: EngineConfig) -> Executor:
        if config.executor == "thread":
            return ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="stackengine")
        return ProcessPoolExecutor(max_workers=config.max_workers)

    # --------------------------
    # Dispatch table
    # --------------------------
    def submit(self, job_type: Any, payload: Any, request_id: Optional[str] = None) -> Future:
        """Send a job; the returned future resolves to the result payload or raises ComputeError."""
        request_id = request_id or uuid.uuid4().hex
        result: Future = Future()
        with self._lock:
            if request_id in self._pending:
                raise ProtocolError(f"Request id {request_id} is already in flight.")
            self._pending[request_id] = result
            self._states[request_id] = RequestState.SUBMITTED
        result.set_running_or_notify_cancel()

        request = ComputeRequest(type=job_type, payload=payload, id=request_id)
        try:
            task = self._executor.submit(self._handler, request)
        except Exception as exc:
            self.dispatch(ComputeResponse(type=ResponseType.ERROR, id=request_id, error=str(exc)))
            return result
        with self._lock:
            if request_id in self._pending:
                self._states[request_id] = RequestState.RUNNING
        task.add_done_callback(partial(self._on_task_done, request_id))
        LOGGER.debug("Submitted %s request %s", getattr(job_type, "value", job_type), request_id)
        return result

    def _on_task_done(self, request_id: str, task: Future) -> None:
        try:
            response = task.result()
        except Exception as exc:
            # The worker itself died (e.g. a broken process pool).
            LOGGER.error("Compute task for request %s failed: %s", request_id, exc)
            response = ComputeResponse(type=ResponseType.ERROR, id=request_id, error=str(exc) or type(exc).__name__)
        self.dispatch(response)

    def dispatch(self, response: ComputeResponse) -> bool:
        """Resolve the pending request `response` answers. Unknown ids are logged and ignored."""
        with self._lock:
            future = self._pending.pop(response.id, None)
            if future is not None:
                self._states.pop(response.id, None)
                self._finished.append((
                    response.id,
                    RequestState.FAILED if response.type is ResponseType.ERROR else RequestState.COMPLETED,
                ))
        if future is None:
            LOGGER.warning("Ignoring response for unknown request id %s", response.id)
            return False
        if response.type is ResponseType.ERROR:
            future.set_exception(ComputeError(response.error or "Compute task failed.", response.id))
        else:
            future.set_result(response.payload)
        return True

    def discard(self, request_id: str) -> None:
        """Stop waiting for a request; its eventual response will be ignored."""
        with self._lock:
            self._pending.pop(request_id, None)
            self._states.pop(request_id, None)
        LOGGER.debug("Discarded request %s", request_id)

    def state(self, request_id: str) -> Optional[RequestState]:
        """In-flight state, or the terminal state of one of the last FINISHED_HISTORY resolutions."""
        with self._lock:
            if request_id in self._states:
                return self._states[request_id]
            for finished_id, state in reversed(self._finished):
                if finished_id == request_id:
                    return state
        return None

    @property
    def pending_ids(self):
        with self._lock:
            return tuple(self._pending)

    # --------------------------
    # Coroutine helpers
    # --------------------------
    async def _run(self, job_type: JobType, payload: Any, timeout: Optional[float]):
        request_id = uuid.uuid4().hex
        waiter = asyncio.wrap_future(self.submit(job_type, payload, request_id))
        if timeout is None:
            return await waiter
        try:
            return await asyncio.wait_for(asyncio.shield(waiter), timeout)
        except asyncio.TimeoutError:
            self.discard(request_id)
            raise

    async def simulate(self, request: SimulationRequest, timeout: Optional[float] = None):
        return await self._run(JobType.SIMULATE, request, timeout)

    async def sweep(self, request: SweepRequest, timeout: Optional[float] = None):
        return await self._run(JobType.SWEEP, request, timeout)

    async def optimize(self, request: OptimizationRequest, timeout: Optional[float] = None):
        return await self._run(JobType.OPTIMIZE, request, timeout)

    # --------------------------
    # Lifecycle
    # --------------------------
    def close(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
        with self._lock:
            self._states.clear()
            self._finished.clear()

    def __enter__(self) -> "ComputeClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
