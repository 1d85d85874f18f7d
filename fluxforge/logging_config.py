"""
fluxforge.logging_config
~~~~~~~~~~~~~~~~~~~~~~~~
One-time logging setup, called from main() before the window exists.

Every module logs through its own `logging.getLogger(__name__)`. The console
gets everything at *level*. When a LogRelay is passed, warnings and errors
are also handed to it as formatted strings; its signal is queued across
threads, so records logged inside a worker reach the UI thread safely.
"""

from __future__ import annotations

import logging
import sys

from PySide6.QtCore import QObject, Signal

LOG_FORMAT  = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


class LogRelay(QObject):
    """Carries log lines from any thread to whoever displays them."""

    message = Signal(str)


class RelayHandler(logging.Handler):

    def __init__(self, relay: LogRelay, level: int = logging.WARNING):
        super().__init__(level)
        self.relay = relay
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.relay.message.emit(self.format(record))
        except Exception:
            self.handleError(record)


def setup_logging(level: int = logging.INFO, relay: LogRelay | None = None) -> None:
    """Replace any root handlers with a console handler and, optionally, a relay."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(min(level, logging.WARNING))

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(console)

    if relay is not None:
        root.addHandler(RelayHandler(relay))
