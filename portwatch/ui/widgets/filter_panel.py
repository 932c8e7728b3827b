"""Filter controls for the port table."""

from typing import Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLineEdit, QSpinBox, QCheckBox,
    QPushButton, QLabel
)

from ...core import FilterSpec, ProcessType
from ...core.models import MAX_PORT


class FilterPanelWidget(QWidget):
    """Search box, port range, type checkboxes and favorites/watched toggles."""

    filter_changed = pyqtSignal(object)  # FilterSpec

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._updating = False
        self._setup_ui()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        top = QHBoxLayout()

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Filter by port, process, PID, address, user or command...")
        self.search_input.textChanged.connect(self._emit)
        top.addWidget(self.search_input, 1)

        # 0 means "no bound"
        top.addWidget(QLabel("Ports"))
        self.min_port_input = self._port_box()
        top.addWidget(self.min_port_input)
        top.addWidget(QLabel("-"))
        self.max_port_input = self._port_box()
        top.addWidget(self.max_port_input)

        self.reset_btn = QPushButton("Reset")
        self.reset_btn.setObjectName("secondaryButton")
        self.reset_btn.clicked.connect(self.reset)
        top.addWidget(self.reset_btn)

        layout.addLayout(top)

        bottom = QHBoxLayout()

        self.type_checks: dict[ProcessType, QCheckBox] = {}
        for process_type in ProcessType:
            cb = QCheckBox(process_type.label)
            cb.setChecked(True)
            cb.stateChanged.connect(self._emit)
            self.type_checks[process_type] = cb
            bottom.addWidget(cb)

        bottom.addSpacing(16)

        self.favorites_only_cb = QCheckBox("Favorites only")
        self.favorites_only_cb.stateChanged.connect(self._emit)
        bottom.addWidget(self.favorites_only_cb)

        self.watched_only_cb = QCheckBox("Watched only")
        self.watched_only_cb.stateChanged.connect(self._emit)
        bottom.addWidget(self.watched_only_cb)

        bottom.addStretch()

        self.active_label = QLabel()
        self.active_label.setObjectName("filterActiveLabel")
        bottom.addWidget(self.active_label)

        layout.addLayout(bottom)

    def _port_box(self) -> QSpinBox:
        box = QSpinBox()
        box.setRange(0, MAX_PORT)
        box.setSpecialValueText("Any")
        box.setFixedWidth(80)
        box.valueChanged.connect(self._emit)
        return box

    def spec(self) -> FilterSpec:
        """Current filter as a FilterSpec."""
        return FilterSpec(
            search_text=self.search_input.text().strip(),
            min_port=self.min_port_input.value() or None,
            max_port=self.max_port_input.value() or None,
            process_types=frozenset(t for t, cb in self.type_checks.items() if cb.isChecked()),
            show_only_favorites=self.favorites_only_cb.isChecked(),
            show_only_watched=self.watched_only_cb.isChecked(),
        )

    def set_spec(self, spec: FilterSpec):
        """Show spec in the controls, emitting filter_changed once."""
        self._updating = True
        try:
            self.search_input.setText(spec.search_text)
            self.min_port_input.setValue(spec.min_port or 0)
            self.max_port_input.setValue(spec.max_port or 0)
            for process_type, cb in self.type_checks.items():
                cb.setChecked(process_type in spec.process_types)
            self.favorites_only_cb.setChecked(spec.show_only_favorites)
            self.watched_only_cb.setChecked(spec.show_only_watched)
        finally:
            self._updating = False
        self._emit()

    def reset(self):
        self.set_spec(FilterSpec.reset())

    def _emit(self, *_args):
        if self._updating:
            return
        spec = self.spec()
        self.active_label.setText("Filter active" if spec.is_active else "")
        self.filter_changed.emit(spec)
