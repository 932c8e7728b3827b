#!/usr/bin/env python3
"""
PortWatch - Local Port Monitor

A desktop application showing which local ports are listening.
Features:
- View listening TCP/UDP ports and their processes
- Pin favorite ports, shown even while stopped
- Watch ports and get notified when they start or stop
- Filter, sort and kill processes by port
"""

import locale
import sys

from PyQt6.QtWidgets import QApplication, QStyle, QSystemTrayIcon
from PyQt6.QtCore import Qt

from . import __version__
from .config import SETTINGS_FILENAME, data_dir, load_settings, save_settings
from .core import LoggingNotifier, OverlayStore, PortMonitor, ReconciliationEngine
from .ui.bridge import TrayNotifier
from .ui.main_window import MainWindow
from .utils.logging_config import setup_logging, get_log_file_path


def main():
    """Main entry point for PortWatch."""
    settings_path = data_dir() / SETTINGS_FILENAME
    settings = load_settings(settings_path)

    # Initialize logging FIRST
    logger = setup_logging(settings.logging_level)
    logger.info("=" * 60)
    logger.info(f"PortWatch {__version__} starting up")
    logger.info(f"Log file: {get_log_file_path()}")
    logger.info("=" * 60)

    if not settings_path.exists():
        try:
            save_settings(settings, settings_path)
            logger.info(f"Wrote default settings to {settings_path}")
        except OSError as e:
            logger.warning(f"Could not write default settings: {e}")

    # Locale-aware sorting of process names, users and addresses
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logger.warning("Could not set collation locale, using C ordering")

    # High DPI support
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("PortWatch")
    app.setApplicationVersion(__version__)
    app.setOrganizationName("PortWatch")

    tray = None
    notifier = LoggingNotifier()
    if settings.notifications and QSystemTrayIcon.isSystemTrayAvailable():
        tray = QSystemTrayIcon(app.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon), app)
        tray.setToolTip("PortWatch")
        tray.show()
        notifier = TrayNotifier(tray, app)
    elif settings.notifications:
        logger.info("System tray unavailable, notifications go to the log")

    engine = ReconciliationEngine(store=OverlayStore())
    monitor = PortMonitor(engine, interval=settings.scan_interval, notifier=notifier)

    window = MainWindow(engine, monitor)
    window.show()
    monitor.start()

    logger.info("Main window displayed, entering event loop")
    exit_code = app.exec()

    monitor.stop()
    logger.info(f"PortWatch shutting down (exit code: {exit_code})")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
