"""Port table widget for displaying the reconciled port list."""

from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal, QThread, QObject, QUrl
from PyQt6.QtGui import QAction, QColor, QDesktopServices
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QTableWidget, QTableWidgetItem, QHeaderView,
    QMenu, QMessageBox, QApplication
)

from ...config import TYPE_COLORS, FAVORITE_COLOR, WATCH_COLOR, ACTIVE_COLOR, INACTIVE_COLOR
from ...core import (
    FilterSpec, KillError, PortMonitor, PortRecord, ReconciliationEngine, Snapshot, SortKey
)
from ...utils.logging_config import get_logger, PerfTimer

logger = get_logger('port_table')


class KillWorker(QObject):
    """Runs a terminate request off the GUI thread."""
    finished = pyqtSignal(str)  # Success message
    error = pyqtSignal(str)

    def __init__(self, monitor: PortMonitor, record: PortRecord, force: bool):
        super().__init__()
        self.monitor = monitor
        self.record = record
        self.force = force

    def run(self):
        try:
            self.finished.emit(self.monitor.terminate(self.record, self.force))
        except KillError as e:
            self.error.emit(str(e))


class PortTableWidget(QWidget):
    """Table of active ports and favorite/watched placeholders."""

    status_changed = pyqtSignal(int, int)  # (shown, total)
    kill_finished = pyqtSignal(bool, str)  # (success, message)

    # (header, sort key)
    COLUMNS = [
        ("★", SortKey.ACTIONS),
        ("Port", SortKey.PORT),
        ("Process", SortKey.PROCESS),
        ("PID", SortKey.PID),
        ("Type", SortKey.TYPE),
        ("Address", SortKey.ADDRESS),
        ("User", SortKey.USER),
        ("Watch", SortKey.ACTIONS),
    ]
    FAVORITE_COLUMN = 0
    WATCH_COLUMN = 7

    def __init__(self, engine: ReconciliationEngine, monitor: PortMonitor,
                 parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.engine = engine
        self.monitor = monitor
        self.snapshot: Snapshot = engine.snapshot()
        self.filter_spec = FilterSpec()
        self.sort_key = SortKey.PORT
        self.ascending = True
        self.current_rows: list[PortRecord] = []

        self._kill_thread: Optional[QThread] = None
        self._kill_worker: Optional[KillWorker] = None

        self._setup_ui()
        self._populate_table()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.table = QTableWidget()
        self.table.setColumnCount(len(self.COLUMNS))
        self.table.setHorizontalHeaderLabels([title for title, _ in self.COLUMNS])
        self.table.setAlternatingRowColors(True)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QTableWidget.SelectionMode.SingleSelection)
        self.table.verticalHeader().setVisible(False)
        self.table.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.table.customContextMenuRequested.connect(self._show_context_menu)
        self.table.cellClicked.connect(self._on_cell_clicked)

        header_view = self.table.horizontalHeader()
        header_view.setSectionsClickable(True)
        header_view.setSortIndicatorShown(True)
        header_view.sectionClicked.connect(self._on_header_clicked)
        for column in range(len(self.COLUMNS)):
            header_view.setSectionResizeMode(column, QHeaderView.ResizeMode.Fixed)
        header_view.setSectionResizeMode(2, QHeaderView.ResizeMode.Stretch)  # Process

        for column, width in {0: 40, 1: 70, 3: 70, 4: 110, 5: 140, 6: 100, 7: 60}.items():
            self.table.setColumnWidth(column, width)

        layout.addWidget(self.table)

    # Data

    def set_snapshot(self, snapshot: Snapshot):
        """Show a new engine snapshot. Snapshots older than the shown one are dropped."""
        if not snapshot.is_newer_than(self.snapshot):
            logger.debug(f"Ignoring stale snapshot v{snapshot.version} (showing v{self.snapshot.version})")
            return
        self.snapshot = snapshot
        self._populate_table()

    def set_filter(self, spec: FilterSpec):
        self.filter_spec = spec
        self._populate_table()

    def set_sort(self, sort_key: SortKey, ascending: bool = True):
        self.sort_key = sort_key
        self.ascending = ascending
        self._populate_table()

    def _populate_table(self):
        """Populate table with the current snapshot, filter and sort."""
        with PerfTimer("populate port table", logger):
            self.current_rows = self.snapshot.present(self.filter_spec, self.sort_key, self.ascending)
            self.table.setRowCount(0)
            for record in self.current_rows:
                self._append_row(record)
        self._update_sort_indicator()
        self.status_changed.emit(len(self.current_rows), len(self.snapshot.registry))

    def _append_row(self, record: PortRecord):
        row = self.table.rowCount()
        self.table.insertRow(row)
        favorite = self.snapshot.is_favorite(record.port)
        watching = self.snapshot.is_watching(record.port)
        dim = QColor(INACTIVE_COLOR)

        star = QTableWidgetItem("★" if favorite else "☆")
        star.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
        star.setForeground(QColor(FAVORITE_COLOR) if favorite else dim)
        star.setToolTip("Toggle favorite")
        star.setData(Qt.ItemDataRole.UserRole, record)
        self.table.setItem(row, 0, star)

        port_item = QTableWidgetItem(f"● {record.display_port}")
        port_item.setForeground(QColor(ACTIVE_COLOR) if record.is_active else dim)
        self.table.setItem(row, 1, port_item)

        process_item = QTableWidgetItem(record.process_name)
        process_item.setToolTip(record.command or record.process_name)
        if not record.is_active:
            process_item.setForeground(dim)
        self.table.setItem(row, 2, process_item)

        self.table.setItem(row, 3, QTableWidgetItem(str(record.pid) if record.is_active else "-"))

        if record.is_active:
            type_item = QTableWidgetItem(record.process_type.label)
            type_item.setForeground(QColor(TYPE_COLORS[record.process_type.label]))
        else:
            type_item = QTableWidgetItem("Inactive")
            type_item.setForeground(dim)
        self.table.setItem(row, 4, type_item)

        self.table.setItem(row, 5, QTableWidgetItem(record.address))
        self.table.setItem(row, 6, QTableWidgetItem(record.user))

        eye = QTableWidgetItem("◉" if watching else "○")
        eye.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
        eye.setForeground(QColor(WATCH_COLOR) if watching else dim)
        eye.setToolTip("Toggle watch")
        self.table.setItem(row, 7, eye)

    def _update_sort_indicator(self):
        column = next(i for i, (_, key) in enumerate(self.COLUMNS) if key == self.sort_key)
        order = Qt.SortOrder.AscendingOrder if self.ascending else Qt.SortOrder.DescendingOrder
        self.table.horizontalHeader().setSortIndicator(column, order)

    def record_at(self, row: int) -> Optional[PortRecord]:
        item = self.table.item(row, 0)
        return item.data(Qt.ItemDataRole.UserRole) if item else None

    def get_selected_record(self) -> Optional[PortRecord]:
        rows = self.table.selectionModel().selectedRows()
        return self.record_at(rows[0].row()) if rows else None

    # Interaction

    def _on_header_clicked(self, column: int):
        sort_key = self.COLUMNS[column][1]
        if sort_key == self.sort_key:
            self.set_sort(sort_key, not self.ascending)
        else:
            self.set_sort(sort_key, True)
        logger.debug(f"Sort changed to {self.sort_key.value} (ascending={self.ascending})")

    def _on_cell_clicked(self, row: int, column: int):
        record = self.record_at(row)
        if record is None:
            return
        if column == self.FAVORITE_COLUMN:
            self.engine.toggle_favorite(record.port)
        elif column == self.WATCH_COLUMN:
            self.engine.toggle_watch(record.port)

    def _show_context_menu(self, pos):
        """Show context menu for port actions."""
        item = self.table.itemAt(pos)
        if not item:
            return
        record = self.record_at(item.row())
        if record is None:
            return

        menu = QMenu(self)
        port = record.port

        favorite_action = QAction(
            "Remove from Favorites" if self.snapshot.is_favorite(port) else "Add to Favorites", self)
        favorite_action.triggered.connect(lambda checked, p=port: self.engine.toggle_favorite(p))
        menu.addAction(favorite_action)

        watch_action = QAction(
            "Stop Watching" if self.snapshot.is_watching(port) else "Watch Port", self)
        watch_action.triggered.connect(lambda checked, p=port: self.engine.toggle_watch(p))
        menu.addAction(watch_action)

        menu.addSeparator()

        copy_port = QAction(f"Copy Port Number: {port}", self)
        copy_port.triggered.connect(lambda checked, p=port: self._copy_to_clipboard(str(p)))
        menu.addAction(copy_port)

        if record.is_active:
            copy_command = QAction("Copy Command", self)
            copy_command.triggered.connect(lambda checked, c=record.command: self._copy_to_clipboard(c))
            menu.addAction(copy_command)

            menu.addSeparator()

            kill_action = QAction(f"Kill Process ({record.process_name})", self)
            kill_action.triggered.connect(lambda checked, r=record: self._kill_process(r))
            menu.addAction(kill_action)

            force_kill_action = QAction("Force Kill (SIGKILL)", self)
            force_kill_action.triggered.connect(lambda checked, r=record: self._kill_process(r, force=True))
            menu.addAction(force_kill_action)
        else:
            menu.addSeparator()
            remove_action = QAction("Remove from List", self)
            remove_action.triggered.connect(lambda checked, p=port: self.engine.remove(p))
            menu.addAction(remove_action)

        menu.addSeparator()

        open_action = QAction("Open in Browser", self)
        open_action.triggered.connect(lambda checked, u=record.url: QDesktopServices.openUrl(QUrl(u)))
        menu.addAction(open_action)

        copy_url = QAction("Copy URL", self)
        copy_url.triggered.connect(lambda checked, u=record.url: self._copy_to_clipboard(u))
        menu.addAction(copy_url)

        menu.exec(self.table.viewport().mapToGlobal(pos))

    def kill_selected(self, force: bool = False):
        record = self.get_selected_record()
        if record is not None and record.is_active:
            self._kill_process(record, force)

    def _kill_process(self, record: PortRecord, force: bool = False):
        """Kill a process after confirmation, in a background thread."""
        if self._kill_thread is not None and self._kill_thread.isRunning():
            logger.warning("Kill already in progress, ignoring request")
            return

        action = "Force kill" if force else "Terminate"
        reply = QMessageBox.question(
            self,
            "Confirm Kill",
            f"{action} process '{record.process_name}' (PID: {record.pid}) on port {record.port}?\n\n"
            "This may cause data loss.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No
        )
        if reply != QMessageBox.StandardButton.Yes:
            return

        self._kill_thread = QThread()
        self._kill_worker = KillWorker(self.monitor, record, force)
        self._kill_worker.moveToThread(self._kill_thread)

        self._kill_thread.started.connect(self._kill_worker.run)
        self._kill_worker.finished.connect(self._on_kill_finished)
        self._kill_worker.error.connect(self._on_kill_error)
        self._kill_worker.finished.connect(self._kill_thread.quit)
        self._kill_worker.error.connect(self._kill_thread.quit)

        self._kill_thread.start()

    def _on_kill_finished(self, message: str):
        self.kill_finished.emit(True, message)
        QMessageBox.information(self, "Success", message)

    def _on_kill_error(self, message: str):
        self.kill_finished.emit(False, message)
        QMessageBox.warning(self, "Failed", message)

    def _copy_to_clipboard(self, text: str):
        """Copy text to clipboard."""
        QApplication.clipboard().setText(text)
