"""Qt adapters that move engine and monitor callbacks onto the GUI thread."""

from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QSystemTrayIcon

from ..core import PortMonitor, ReconciliationEngine, ScanFailure, Snapshot, TransitionEvent, format_event
from ..utils.logging_config import get_logger

logger = get_logger('bridge')


class EngineBridge(QObject):
    """Re-emits engine snapshots and scan errors as Qt signals."""

    snapshot_changed = pyqtSignal(object)  # Snapshot
    scan_failed = pyqtSignal(str)

    def __init__(self, engine: ReconciliationEngine, monitor: PortMonitor,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self.engine = engine
        self.monitor = monitor
        engine.subscribe(self._on_snapshot)
        monitor.add_error_listener(self._on_scan_error)

    def detach(self):
        self.engine.unsubscribe(self._on_snapshot)

    def _on_snapshot(self, snapshot: Snapshot):
        # Called from the monitor thread; the queued signal delivers it on the GUI thread
        self.snapshot_changed.emit(snapshot)

    def _on_scan_error(self, error: ScanFailure):
        self.scan_failed.emit(str(error))


class TrayNotifier(QObject):
    """Shows watched-port transitions as tray balloon messages."""

    _requested = pyqtSignal(str, str)

    def __init__(self, tray: QSystemTrayIcon, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.tray = tray
        self._requested.connect(self._show)

    def notify(self, event: TransitionEvent) -> None:
        title, message = format_event(event)
        logger.debug(f"Queueing notification: {title}")
        self._requested.emit(title, message)

    def _show(self, title: str, message: str):
        self.tray.showMessage(title, message, QSystemTrayIcon.MessageIcon.Information, 5000)
