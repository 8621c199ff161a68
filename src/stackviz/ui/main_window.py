# src/stackviz/ui/main_window.py
import logging

from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QHBoxLayout, QMainWindow, QStatusBar, QWidget

from stackengine.config import EngineConfig
from stackengine.dosing import build_time_grid, schedule_stack
from stackengine.protocol import ComputeClient, JobType
from stackengine.registry import CompoundRegistry, InteractionRegistry
from stackengine.types import SimulationRequest, SweepRequest

from .controls import ControlsPanel, StackRequest
from .plots import PlotWidget

LOGGER = logging.getLogger(__name__)


class ResultBridge(QObject):
    """Carries compute results from executor callback threads to the GUI thread."""
    simulated = Signal(object)
    swept = Signal(object)
    failed = Signal(str)

    def forward(self, signal, future):
        exc = future.exception()
        if exc is not None:
            self.failed.emit(str(exc))
        else:
            signal.emit(future.result())


class MainWindow(QMainWindow):
    def __init__(self, compounds: CompoundRegistry, interactions: InteractionRegistry, config: EngineConfig):
        super().__init__()
        self.setWindowTitle("Stack Viz")
        self.resize(1200, 820)
        self.compounds = compounds
        self.config = config
        self.client = ComputeClient(tuple(interactions), config)

        central = QWidget(self); self.setCentralWidget(central)
        root = QHBoxLayout(central)

        self.controls = ControlsPanel(compounds)
        self.plot = PlotWidget()
        root.addWidget(self.controls, 0)
        root.addWidget(self.plot, 1)

        self.status = QStatusBar(); self.setStatusBar(self.status)

        # wire events
        self.bridge = ResultBridge()
        self.bridge.simulated.connect(self.on_simulated)
        self.bridge.swept.connect(self.on_swept)
        self.bridge.failed.connect(self.on_failed)
        self.controls.simulateRequested.connect(self.on_simulate)
        self.controls.sweepRequested.connect(self.on_sweep)

    def _compounds_for(self, req: StackRequest):
        return self.compounds.select(e.compound_id for e in req.entries)

    def on_simulate(self, req: StackRequest):
        if not req.entries:
            self.status.showMessage("Add at least one compound to the stack", 5000)
            return
        try:
            sim = SimulationRequest(
                compounds=self._compounds_for(req),
                doses=schedule_stack(req.entries, req.horizon_days),
                time_points=build_time_grid(req.horizon_days, req.step_h),
                body_weight_kg=self.config.body_weight_kg,
            )
        except Exception as e:
            self.status.showMessage(f"Error: {e}", 8000)
            return
        future = self.client.submit(JobType.SIMULATE, sim)
        future.add_done_callback(lambda f: self.bridge.forward(self.bridge.simulated, f))
        self.status.showMessage("Simulating...")

    def on_sweep(self, req: StackRequest):
        if not req.entries:
            self.status.showMessage("Add at least one compound to the stack", 5000)
            return
        sweep = SweepRequest(
            base_stack=tuple(req.entries),
            compounds=self._compounds_for(req),
            scalars=tuple(req.scalars),
            body_weight_kg=self.config.body_weight_kg,
            evaluation_time_h=self.config.sweep_evaluation_h,
        )
        future = self.client.submit(JobType.SWEEP, sweep)
        future.add_done_callback(lambda f: self.bridge.forward(self.bridge.swept, f))
        self.status.showMessage("Sweeping...")

    def on_simulated(self, response):
        self.plot.plot_simulation(response)
        msg = (f"Benefit {response.aggregate_benefit:.1f} | "
               f"Toxicity {response.aggregate_toxicity:.2f}")
        if response.warnings:
            msg += " | " + "; ".join(response.warnings)
        self.status.showMessage(msg, 8000)

    def on_swept(self, response):
        self.plot.plot_sweep(response)
        spot = response.sweet_spot
        if spot is None:
            self.status.showMessage("Sweep returned no points", 5000)
        else:
            self.status.showMessage(f"Sweet spot {spot.scalar:g}x ({spot.mg_eq:.0f} mg/wk), "
                                    f"net gap {spot.net_gap:.1f}", 8000)

    def on_failed(self, message: str):
        LOGGER.error("Compute request failed: %s", message)
        self.status.showMessage(f"Error: {message}", 8000)

    def closeEvent(self, event):
        self.client.close(wait=False)
        super().closeEvent(event)
