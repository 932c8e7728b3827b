"""PortWatch - local listening-port monitor."""

__version__ = "1.0.0"
