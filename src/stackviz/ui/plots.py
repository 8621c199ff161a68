# src/stackviz/ui/plots.py
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QVBoxLayout, QWidget
import pyqtgraph as pg

from stackengine.results import SimulationResponse, SweepResponse
from stackengine.types import ORGANS


def _make_plot(left: str, units: str | None = None, bottom: str = "Time", bottom_units: str | None = "h"):
    plot = pg.PlotWidget()
    plot.setLabel("left", left, units=units)
    plot.setLabel("bottom", bottom, units=bottom_units)
    plot.showGrid(x=True, y=True, alpha=0.3)
    plot.addLegend()
    return plot


class PlotWidget(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)

        self.concentration_plot = _make_plot("Concentration", units="mg/L")
        self.load_plot = _make_plot("Anabolic load", units="mg/day")
        self.toxicity_plot = _make_plot("Organ stress (smoothed)")
        self.sweep_plot = _make_plot("Score", bottom="Dose scalar", bottom_units=None)
        for plot in (self.concentration_plot, self.load_plot, self.toxicity_plot, self.sweep_plot):
            layout.addWidget(plot)
        self.sweep_plot.hide()

        self.curves = {}  # store references for updates

    def _plot(self, target, key, x, y, index):
        self.curves[key] = target.plot(x, y, pen=pg.mkPen(pg.intColor(index), width=2), name=key[-1])

    def plot_simulation(self, response: SimulationResponse):
        self.clear()
        t = response.time_points
        for i, (compound_id, result) in enumerate(response.results.items()):
            self._plot(self.concentration_plot, ("pk", compound_id), t, result.pk.mg_per_l, i)
        self._plot(self.load_plot, ("load", "anabolic"), t, response.aggregate.total_anabolic_load, 0)
        for i, organ in enumerate(ORGANS):
            self._plot(self.toxicity_plot, ("tox", organ), t, response.aggregate.smoothed_toxicity[organ], i)

    def plot_sweep(self, response: SweepResponse):
        self.sweep_plot.clear()
        self.sweep_plot.show()
        scalars = [p.scalar for p in response.points]
        for i, name in enumerate(("benefit", "risk", "net_gap")):
            self._plot(self.sweep_plot, ("sweep", name), scalars, [getattr(p, name) for p in response.points], i)
        if response.sweet_spot is not None:
            self.sweep_plot.addLine(x=response.sweet_spot.scalar, pen=pg.mkPen("y", style=Qt.PenStyle.DashLine))

    def clear(self):
        for plot in (self.concentration_plot, self.load_plot, self.toxicity_plot):
            plot.clear()
        self.curves = {}
