"""
PortWatch UI Widgets
"""

from .filter_panel import FilterPanelWidget
from .port_table import PortTableWidget

__all__ = ["FilterPanelWidget", "PortTableWidget"]
