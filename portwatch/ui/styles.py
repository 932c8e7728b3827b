"""Qt stylesheet for PortWatch."""

from ..config import FAVORITE_COLOR

MAIN_STYLESHEET = """
QMainWindow, QWidget {
    background-color: #1e1e1e;
    color: #d4d4d4;
    font-size: 13px;
}

QTableWidget {
    background-color: #252526;
    alternate-background-color: #2d2d2d;
    gridline-color: #3c3c3c;
    border: none;
    selection-background-color: #094771;
    selection-color: #ffffff;
}

QTableWidget::item {
    padding: 4px;
}

QHeaderView::section {
    background-color: #333333;
    color: #d4d4d4;
    padding: 6px;
    border: none;
    border-right: 1px solid #3c3c3c;
    border-bottom: 1px solid #3c3c3c;
    font-weight: bold;
}

QPushButton {
    background-color: #0e639c;
    color: white;
    border: none;
    padding: 6px 14px;
    border-radius: 4px;
}

QPushButton:hover {
    background-color: #1177bb;
}

QPushButton:disabled {
    background-color: #3c3c3c;
    color: #6c6c6c;
}

QPushButton#secondaryButton {
    background-color: #3c3c3c;
}

QPushButton#secondaryButton:hover {
    background-color: #4c4c4c;
}

QLineEdit, QSpinBox {
    background-color: #3c3c3c;
    border: 1px solid #555555;
    border-radius: 4px;
    padding: 4px 8px;
}

QLineEdit:focus, QSpinBox:focus {
    border-color: #0e639c;
}

QLabel#errorLabel {
    color: #f48771;
    font-weight: bold;
}

QLabel#filterActiveLabel {
    color: %(favorite)s;
}

QStatusBar {
    background-color: #007acc;
    color: white;
}

QMenu {
    background-color: #252526;
    border: 1px solid #454545;
    padding: 4px;
}

QMenu::item {
    padding: 6px 24px;
}

QMenu::item:selected {
    background-color: #094771;
}

QCheckBox {
    spacing: 6px;
}
""" % {"favorite": FAVORITE_COLOR}
