import logging
import sys

from PySide6.QtWidgets import QApplication, QMessageBox
from PySide6.QtGui import QFont

from fluxforge.backend import CommandBackend
from fluxforge.config import ConfigStore
from fluxforge.logging_config import LogRelay, setup_logging
from fluxforge.paths import validate_backend
from ui import MainWindow
from ui.theme import apply_theme

logger = logging.getLogger(__name__)


def main():
    app = QApplication(sys.argv)
    log_relay = LogRelay()
    setup_logging(relay=log_relay)

    # Base font
    font = QFont("Segoe UI", 10)
    app.setFont(font)

    config_store = ConfigStore()
    config = config_store.load()
    apply_theme(app, config.theme)

    window = MainWindow(config_store, CommandBackend())
    log_relay.message.connect(window.show_log_message)
    window.show()

    errors = validate_backend()
    if errors:
        # Conversions will fail with these messages too; warn once up front.
        logger.warning("Backend problems: %s", "; ".join(errors))
        QMessageBox.warning(window, "Converter missing", "\n".join(errors))

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
