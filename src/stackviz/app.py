# src/stackviz/app.py
import logging
import sys

from PySide6.QtWidgets import QApplication

from stackengine.catalog import default_registries
from stackengine.config import EngineConfig

from .ui.main_window import MainWindow


def main() -> int:
    config = EngineConfig.from_env()
    logging.basicConfig(level=config.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    compounds, interactions = default_registries()

    app = QApplication(sys.argv)
    window = MainWindow(compounds, interactions, config)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
