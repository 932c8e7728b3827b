import threading

import pytest

from portwatch.core import (
    Direction, ExecutorError, InvalidTarget, PortMonitor, PortRecord, ReconciliationEngine, ScanFailure,
)

from conftest import FakeExecutor, FakeSource, RecordingNotifier, make_record


def _monitor(source, executor=None, notifier=None, interval=60.0):
    engine = ReconciliationEngine(executor=executor or FakeExecutor())
    return PortMonitor(engine, source=source, interval=interval, notifier=notifier or RecordingNotifier())


def test_scan_once_merges_into_engine() -> None:
    monitor = _monitor(FakeSource([make_record(3000), make_record(8080)]))
    result = monitor.scan_once()
    assert result.registry is monitor.engine.registry
    assert monitor.engine.registry.active_ports == frozenset({3000, 8080})
    assert monitor.scan_count == 1
    assert monitor.last_error is None


def test_scan_failure_keeps_registry() -> None:
    source = FakeSource([make_record(3000)], ScanFailure("permission denied"), [])
    monitor = _monitor(source)
    errors = []
    monitor.add_error_listener(errors.append)

    monitor.scan_once()
    registry = monitor.engine.registry

    assert monitor.scan_once() is None
    assert monitor.engine.registry is registry
    assert str(monitor.last_error) == "permission denied"
    assert errors == [monitor.last_error]
    assert monitor.scan_count == 1

    # An empty scan is a real result, unlike a failure
    monitor.scan_once()
    assert monitor.last_error is None
    assert monitor.engine.registry.active_ports == frozenset()


def test_failing_error_listener_is_contained() -> None:
    monitor = _monitor(FakeSource(ScanFailure("nope")))

    def _broken(error):
        raise RuntimeError("listener bug")

    monitor.add_error_listener(_broken)
    assert monitor.scan_once() is None


def test_transitions_reach_notifier() -> None:
    notifier = RecordingNotifier()
    monitor = _monitor(FakeSource([], [make_record(8080, process_name="python")], []), notifier=notifier)
    monitor.engine.toggle_watch(8080)

    monitor.scan_once()
    monitor.scan_once()
    monitor.scan_once()

    assert [(e.port, e.direction) for e in notifier.events] == [
        (8080, Direction.STARTED),
        (8080, Direction.STOPPED),
    ]


def test_failing_notifier_is_contained() -> None:
    class _BrokenNotifier:
        def notify(self, event):
            raise RuntimeError("no tray")

    monitor = _monitor(FakeSource([make_record(8080)]), notifier=_BrokenNotifier())
    monitor.engine.toggle_watch(8080)
    result = monitor.scan_once()
    assert len(result.transitions) == 1


def test_terminate_wakes_monitor() -> None:
    executor = FakeExecutor()
    monitor = _monitor(FakeSource([make_record(3000, pid=42)]), executor=executor)
    monitor.scan_once()

    assert not monitor._wake_event.is_set()
    monitor.terminate(monitor.engine.registry.record_for(3000))
    assert executor.calls == [(42, False)]
    assert monitor._wake_event.is_set()


def test_terminate_errors_propagate() -> None:
    executor = FakeExecutor(result=(False, "Permission denied"))
    monitor = _monitor(FakeSource([make_record(3000)]), executor=executor)
    monitor.scan_once()

    with pytest.raises(ExecutorError):
        monitor.terminate(monitor.engine.registry.record_for(3000))
    with pytest.raises(InvalidTarget):
        monitor.terminate(PortRecord.inactive(3000))


def test_background_thread_scans_and_stops() -> None:
    scanned = threading.Event()

    class _SignallingSource(FakeSource):
        def scan(self):
            records = super().scan()
            scanned.set()
            return records

    monitor = _monitor(_SignallingSource([make_record(3000)]))
    monitor.start()
    try:
        assert scanned.wait(5.0)
        assert monitor.is_running
    finally:
        monitor.stop()
    assert not monitor.is_running
    assert monitor.engine.registry.is_active(3000)


def test_wake_triggers_next_cycle() -> None:
    second_scan = threading.Event()

    class _CountingSource(FakeSource):
        def scan(self):
            records = super().scan()
            if self.calls >= 2:
                second_scan.set()
            return records

    monitor = _monitor(_CountingSource([]), interval=60.0)
    monitor.start()
    try:
        monitor.wake()
        assert second_scan.wait(5.0)
    finally:
        monitor.stop()


def test_unexpected_source_error_does_not_kill_thread() -> None:
    recovered = threading.Event()

    class _FlakySource:
        calls = 0

        def scan(self):
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("unexpected")
            recovered.set()
            return []

    monitor = _monitor(_FlakySource(), interval=0.01)
    monitor.start()
    try:
        assert recovered.wait(5.0)
    finally:
        monitor.stop()


def test_restart_after_timed_out_stop_keeps_one_thread() -> None:
    scanning = threading.Event()
    release = threading.Event()

    class _BlockingSource(FakeSource):
        def scan(self):
            scanning.set()
            release.wait(5.0)
            return super().scan()

    monitor = _monitor(_BlockingSource([]))
    monitor.start()
    assert scanning.wait(5.0)

    monitor.stop(timeout=0.1)
    assert monitor.is_running
    monitor.start()
    assert [t.name for t in threading.enumerate()].count("portwatch-monitor") == 1

    release.set()
    monitor.stop()
    assert not monitor.is_running
    assert "portwatch-monitor" not in [t.name for t in threading.enumerate()]
