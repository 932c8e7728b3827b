from .classifier import ProcessType, classify
from .models import PortRecord, Protocol, WatchedPort, FilterSpec, Direction, TransitionEvent
from .errors import PortWatchError, ScanFailure, KillError, InvalidTarget, ExecutorError
from .filters import matches
from .registry import Registry, ActiveEntry, Placeholder
from .view import SortKey, present
from .store import OverlayStore, OverlayState
from .engine import ReconciliationEngine, MergeResult, Snapshot
from .port_scanner import PortScanner
from .process_manager import ProcessManager
from .notifications import NotificationSink, LoggingNotifier, format_event
from .monitor import PortMonitor

__all__ = [
    'ProcessType', 'classify',
    'PortRecord', 'Protocol', 'WatchedPort', 'FilterSpec', 'Direction', 'TransitionEvent',
    'PortWatchError', 'ScanFailure', 'KillError', 'InvalidTarget', 'ExecutorError',
    'matches', 'Registry', 'ActiveEntry', 'Placeholder', 'SortKey', 'present',
    'OverlayStore', 'OverlayState', 'ReconciliationEngine', 'MergeResult', 'Snapshot',
    'PortScanner', 'ProcessManager', 'NotificationSink', 'LoggingNotifier', 'format_event',
    'PortMonitor',
]
