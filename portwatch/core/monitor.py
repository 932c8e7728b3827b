"""Background rescan loop feeding the reconciliation engine."""

import threading
from typing import Callable, Optional

from .engine import MergeResult, ReconciliationEngine
from .errors import ScanFailure
from .models import PortRecord, TransitionEvent
from .notifications import LoggingNotifier, NotificationSink
from .port_scanner import PortScanner
from ..config import SCAN_INTERVAL_SECONDS
from ..utils.logging_config import get_logger

logger = get_logger('monitor')

ErrorListener = Callable[[ScanFailure], None]


class PortMonitor:
    """
    Periodically scans ports and merges the result into the engine.

    One daemon thread runs scan -> merge -> notify cycles. A new cycle starts
    only after the previous merge returned; scan_once() shares the same lock,
    so manual and background scans never overlap.
    """

    def __init__(self, engine: ReconciliationEngine, source=None,
                 interval: float = SCAN_INTERVAL_SECONDS,
                 notifier: Optional[NotificationSink] = None):
        """
        Args:
            engine: Engine receiving the scans.
            source: Snapshot source with scan() -> list[PortRecord]; defaults to PortScanner.
            interval: Seconds between the end of one cycle and the start of the next.
            notifier: Receives transition events; defaults to logging them.
        """
        self.engine = engine
        self.source = source if source is not None else PortScanner()
        self.interval = interval
        self.notifier = notifier if notifier is not None else LoggingNotifier()
        self.last_error: Optional[ScanFailure] = None
        self.scan_count = 0

        self._cycle_lock = threading.Lock()
        self._wake_event = threading.Event()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._error_listeners: list[ErrorListener] = []

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def add_error_listener(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def start(self) -> None:
        """Start the background thread. The first scan runs immediately."""
        if self.is_running:
            if self._stop_event.is_set():
                logger.warning("Previous monitor thread is still stopping, ignoring start()")
            else:
                logger.warning("Monitor already running, ignoring start()")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="portwatch-monitor", daemon=True)
        self._thread.start()
        logger.info(f"Monitor started (interval={self.interval}s)")

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop the background thread, waiting for a running cycle to finish.

        If the cycle outlasts timeout the thread is kept and exits after that
        cycle; start() refuses to run a second thread until then.
        """
        self._stop_event.set()
        self._wake_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"Monitor thread did not stop within {timeout}s")
                return
            self._thread = None
        logger.info("Monitor stopped")

    def wake(self) -> None:
        """Run the next cycle now instead of waiting for the interval."""
        self._wake_event.set()

    def scan_once(self) -> Optional[MergeResult]:
        """
        Run one scan -> merge -> notify cycle.

        Returns:
            The merge result, or None if the scan failed. On failure the
            engine keeps its previous registry.
        """
        with self._cycle_lock:
            try:
                records = self.source.scan()
            except ScanFailure as e:
                self.last_error = e
                logger.warning(f"Scan failed, keeping previous registry: {e}")
                self._emit_error(e)
                return None

            self.last_error = None
            result = self.engine.merge(records)
            self.scan_count += 1

        for event in result.transitions:
            self._deliver(event)
        return result

    def terminate(self, record: PortRecord, force: bool = False) -> str:
        """
        Terminate the process behind a record, then rescan early so the
        registry picks up the freed port.

        Raises:
            InvalidTarget, ExecutorError: see ReconciliationEngine.terminate().
        """
        message = self.engine.terminate(record, force)
        self.wake()
        return message

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.scan_once()
            except Exception:
                logger.exception("Scan cycle failed")
            self._wake_event.wait(self.interval)
            self._wake_event.clear()

    def _deliver(self, event: TransitionEvent) -> None:
        try:
            self.notifier.notify(event)
        except Exception:
            logger.exception(f"Notifier failed for port {event.port}")

    def _emit_error(self, error: ScanFailure) -> None:
        for listener in list(self._error_listeners):
            try:
                listener(error)
            except Exception:
                logger.exception("Scan error listener failed")
