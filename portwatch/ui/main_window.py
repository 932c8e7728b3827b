"""Main window for PortWatch application."""

import os
import subprocess
import sys

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QStatusBar, QLabel, QMessageBox
)

from .bridge import EngineBridge
from .styles import MAIN_STYLESHEET
from .widgets.filter_panel import FilterPanelWidget
from .widgets.port_table import PortTableWidget
from .. import __version__
from ..config import WINDOW_TITLE, WINDOW_MIN_WIDTH, WINDOW_MIN_HEIGHT
from ..core import PortMonitor, ReconciliationEngine, Snapshot
from ..utils.logging_config import get_logger, get_log_file_path, PerfTimer

logger = get_logger('main_window')


class MainWindow(QMainWindow):
    """Main application window for PortWatch."""

    def __init__(self, engine: ReconciliationEngine, monitor: PortMonitor):
        super().__init__()
        logger.info("Initializing MainWindow")
        self.engine = engine
        self.monitor = monitor
        self.bridge = EngineBridge(engine, monitor, self)

        with PerfTimer("MainWindow setup", logger):
            self._setup_window()
            self._setup_menu()
            self._setup_ui()
            self._setup_status_bar()
            self._connect_signals()

        logger.info("MainWindow initialization complete")

    def _setup_window(self):
        """Configure main window properties."""
        self.setWindowTitle(f"{WINDOW_TITLE} - Listening Ports")
        self.setMinimumSize(WINDOW_MIN_WIDTH, WINDOW_MIN_HEIGHT)
        self.resize(1200, 720)
        self.setStyleSheet(MAIN_STYLESHEET)

    def _setup_menu(self):
        """Setup menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        refresh_action = QAction("&Refresh Now", self)
        refresh_action.setShortcut(QKeySequence.StandardKey.Refresh)
        refresh_action.triggered.connect(self._refresh)
        file_menu.addAction(refresh_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Port menu
        port_menu = menubar.addMenu("&Port")

        kill_action = QAction("&Kill Selected Process", self)
        kill_action.setShortcut(QKeySequence(Qt.Key.Key_Delete))
        kill_action.triggered.connect(lambda: self.port_table.kill_selected())
        port_menu.addAction(kill_action)

        force_kill_action = QAction("&Force Kill Selected Process", self)
        force_kill_action.setShortcut("Shift+Delete")
        force_kill_action.triggered.connect(lambda: self.port_table.kill_selected(force=True))
        port_menu.addAction(force_kill_action)

        # View menu
        view_menu = menubar.addMenu("&View")

        reset_filter_action = QAction("Reset &Filters", self)
        reset_filter_action.setShortcut("Ctrl+R")
        reset_filter_action.triggered.connect(lambda: self.filter_panel.reset())
        view_menu.addAction(reset_filter_action)

        # Help menu
        help_menu = menubar.addMenu("&Help")

        view_logs_action = QAction("View &Logs", self)
        view_logs_action.setShortcut("Ctrl+L")
        view_logs_action.triggered.connect(self._open_log_file)
        help_menu.addAction(view_logs_action)

        help_menu.addSeparator()

        about_action = QAction("&About", self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _setup_ui(self):
        """Setup main UI layout."""
        central = QWidget()
        self.setCentralWidget(central)

        layout = QVBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(8)

        self.filter_panel = FilterPanelWidget()
        layout.addWidget(self.filter_panel)

        self.port_table = PortTableWidget(self.engine, self.monitor)
        layout.addWidget(self.port_table)

    def _setup_status_bar(self):
        """Setup status bar."""
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

        self.port_count_label = QLabel()
        self.status_bar.addWidget(self.port_count_label)

        self.error_label = QLabel()
        self.error_label.setObjectName("errorLabel")
        self.status_bar.addWidget(self.error_label)

        self.interval_label = QLabel(f"Rescan every {self.monitor.interval:g}s")
        self.status_bar.addPermanentWidget(self.interval_label)

    def _connect_signals(self):
        """Connect widget signals."""
        self.filter_panel.filter_changed.connect(self.port_table.set_filter)
        self.port_table.status_changed.connect(self._update_status_bar)
        self.port_table.kill_finished.connect(self._on_kill_finished)
        self.bridge.snapshot_changed.connect(self._on_snapshot)
        self.bridge.scan_failed.connect(self._on_scan_failed)

    def _refresh(self):
        logger.debug("Manual refresh requested")
        self.monitor.wake()

    def _on_snapshot(self, snapshot: Snapshot):
        if self.monitor.last_error is None:
            self.error_label.clear()
        self.port_table.set_snapshot(snapshot)

    def _on_scan_failed(self, message: str):
        self.error_label.setText(f"Scan failed: {message} (showing last known ports)")

    def _on_kill_finished(self, success: bool, message: str):
        self.status_bar.showMessage(message, 5000)

    def _update_status_bar(self, shown: int, total: int):
        active = len(self.port_table.snapshot.registry.active_ports)
        self.port_count_label.setText(f"Showing {shown} of {total} ports ({active} listening)")

    def _show_about(self):
        """Show about dialog."""
        log_path = get_log_file_path()
        QMessageBox.about(
            self,
            f"About {WINDOW_TITLE}",
            f"<h2>{WINDOW_TITLE}</h2>"
            "<p>Shows which local ports are listening and who owns them.</p>"
            "<ul>"
            "<li>Favorite ports stay in the list while stopped</li>"
            "<li>Watched ports notify when they start or stop</li>"
            "<li>Filter, sort and kill processes by port</li>"
            "</ul>"
            f"<p>Version {__version__}</p>"
            f"<p><small>Log file: {log_path}</small></p>"
        )

    def _open_log_file(self):
        """Open the log file in the default text editor."""
        log_path = get_log_file_path()
        logger.info(f"Opening log file: {log_path}")
        if log_path is None:
            QMessageBox.warning(self, "Error", "File logging is not enabled")
            return
        try:
            if sys.platform == "win32":
                os.startfile(str(log_path))
            else:
                opener = "open" if sys.platform == "darwin" else "xdg-open"
                subprocess.Popen([opener, str(log_path)])
        except OSError as e:
            logger.error(f"Failed to open log file: {e}")
            QMessageBox.warning(self, "Error", f"Could not open log file: {e}\n\nPath: {log_path}")

    def closeEvent(self, event):
        logger.info("Main window closing, stopping monitor")
        self.bridge.detach()
        self.monitor.stop()
        super().closeEvent(event)
