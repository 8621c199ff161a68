# src/stackviz/ui/controls.py
from dataclasses import dataclass, field

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QComboBox,
    QDoubleSpinBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
)

from stackengine.registry import CompoundRegistry
from stackengine.types import StackEntry

NO_ESTER = "(base / oral)"


@dataclass
class StackRequest:
    entries: list[StackEntry] = field(default_factory=list)
    horizon_days: float = 8 * 7
    step_h: float = 6.0
    scalars: list[float] = field(default_factory=list)


class ControlsPanel(QFrame):
    simulateRequested = Signal(StackRequest)
    sweepRequested = Signal(StackRequest)

    def __init__(self, registry: CompoundRegistry):
        super().__init__()
        self.registry = registry
        self.entries: list[StackEntry] = []
        self.setFrameShape(QFrame.StyledPanel)
        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Stack"))

        # --- Stack entry ---
        self.compound = QComboBox()
        for schema in registry:
            self.compound.addItem(schema.name or schema.compound_id, schema.compound_id)
        layout.addWidget(QLabel("Compound"))
        layout.addWidget(self.compound)

        self.ester = QComboBox()
        layout.addWidget(QLabel("Ester"))
        layout.addWidget(self.ester)
        self.compound.currentIndexChanged.connect(self._update_esters)
        self._update_esters()

        self.dose = QDoubleSpinBox(); self.dose.setRange(0, 1e4); self.dose.setValue(250)
        self.dose.setSuffix(" mg/week")
        layout.addWidget(QLabel("Weekly dose"))
        layout.addWidget(self.dose)

        self.interval = QDoubleSpinBox(); self.interval.setDecimals(1)
        self.interval.setRange(0.5, 28); self.interval.setValue(3.5)
        self.interval.setSuffix(" days")
        layout.addWidget(QLabel("Interval (days)"))
        layout.addWidget(self.interval)

        buttons = QHBoxLayout()
        add = QPushButton("Add"); add.clicked.connect(self._add_entry)
        remove = QPushButton("Remove"); remove.clicked.connect(self._remove_entry)
        buttons.addWidget(add); buttons.addWidget(remove)
        layout.addLayout(buttons)

        self.stack_list = QListWidget()
        layout.addWidget(self.stack_list)

        # --- Simulation ---
        layout.addWidget(QLabel("Simulation"))
        self.weeks = QSpinBox(); self.weeks.setRange(1, 52); self.weeks.setValue(12)
        self.weeks.setSuffix(" weeks")
        layout.addWidget(QLabel("Duration (weeks)"))
        layout.addWidget(self.weeks)

        self.dt = QDoubleSpinBox(); self.dt.setDecimals(1)
        self.dt.setRange(0.5, 24.0); self.dt.setValue(6.0)
        self.dt.setSuffix(" h")
        layout.addWidget(QLabel("Sampling step (h)"))
        layout.addWidget(self.dt)

        go = QPushButton("Simulate"); layout.addWidget(go)
        go.clicked.connect(self._emit_request)

        # Sweep scales the whole stack from 0.25x to max in 0.25 steps
        self.max_scalar = QDoubleSpinBox(); self.max_scalar.setDecimals(2)
        self.max_scalar.setRange(0.25, 5.0); self.max_scalar.setValue(2.0)
        self.max_scalar.setSuffix(" x")
        layout.addWidget(QLabel("Sweep up to"))
        layout.addWidget(self.max_scalar)

        sweep = QPushButton("Find sweet spot"); layout.addWidget(sweep)
        sweep.clicked.connect(self._emit_sweep)
        layout.addStretch(1)

    def _update_esters(self):
        self.ester.clear()
        self.ester.addItem(NO_ESTER, None)
        compound_id = self.compound.currentData()
        if compound_id is None:
            return
        for ester_id in self.registry.get(compound_id).pk.esters:
            self.ester.addItem(ester_id, ester_id)

    def _add_entry(self):
        entry = StackEntry(
            compound_id=self.compound.currentData(),
            dose_mg=float(self.dose.value()),
            interval_days=float(self.interval.value()),
            ester_id=self.ester.currentData(),
        )
        self.entries.append(entry)
        label = f"{entry.compound_id} {entry.ester_id or ''} {entry.dose_mg:g} mg/wk every {entry.interval_days:g} d"
        self.stack_list.addItem(" ".join(label.split()))

    def _remove_entry(self):
        row = self.stack_list.currentRow()
        if row < 0:
            return
        self.stack_list.takeItem(row)
        del self.entries[row]

    def current_request(self) -> StackRequest:
        return StackRequest(entries=list(self.entries),
                            horizon_days=int(self.weeks.value()) * 7,
                            step_h=float(self.dt.value()))

    def _emit_request(self):
        self.simulateRequested.emit(self.current_request())

    def _emit_sweep(self):
        req = self.current_request()
        n = int(round(float(self.max_scalar.value()) / 0.25))
        req.scalars = [0.25 * k for k in range(1, n + 1)]
        self.sweepRequested.emit(req)
